"""嵌入式 metadata 讀寫服務（exiftool）。"""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
import json
import subprocess
import threading
from pathlib import Path
from typing import Any, Iterator, Mapping

from .errors import MetadataWriteError
from .logger import get_logger

BACKUP_SUFFIX = "_original"


class MetadataService:
    """metadata 服務共用介面。

    同一個實例可在多個 worker 之間共用：同一檔案的讀寫以 ``file_lock``
    序列化，不同檔案則受 ``max_concurrent`` 限制下並行。
    """

    def __init__(self, max_concurrent: int = 4, logger=None) -> None:
        self.logger = logger or get_logger(self.__class__.__name__)
        self._slots = threading.BoundedSemaphore(max(1, int(max_concurrent)))
        self._locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    @contextmanager
    def file_lock(self, path: Path) -> Iterator[None]:
        key = str(Path(path).resolve())
        with self._locks_guard:
            lock = self._locks[key]
        with lock:
            yield

    @contextmanager
    def _slot(self) -> Iterator[None]:
        with self._slots:
            yield

    def backup_path(self, path: Path) -> Path:
        return path.with_name(path.name + BACKUP_SUFFIX)

    def read(self, path: Path) -> dict[str, Any]:
        with self._slot():
            return self._read(path)

    def write(self, path: Path, tags: Mapping[str, Any]) -> None:
        with self._slot():
            self._write(path, tags)

    def _read(self, path: Path) -> dict[str, Any]:
        raise NotImplementedError

    def _write(self, path: Path, tags: Mapping[str, Any]) -> None:
        raise NotImplementedError


class ExifToolService(MetadataService):
    """以 exiftool 命令列讀寫 XMP-GCamera 欄位。

    寫入時不加 ``-overwrite_original``，exiftool 會留下 ``<檔名>_original``
    備份，由呼叫端負責清除。
    """

    READ_GROUP = "XMP-GCamera:all"

    def __init__(
        self,
        exiftool_path: str = "exiftool",
        task_timeout_sec: float = 5.0,
        max_concurrent: int = 4,
        logger=None,
    ) -> None:
        super().__init__(max_concurrent=max_concurrent, logger=logger)
        self.exiftool_path = exiftool_path
        self.task_timeout_sec = float(task_timeout_sec)

    @classmethod
    def from_config(cls, config, logger=None) -> "ExifToolService":
        return cls(
            exiftool_path=str(config.get("metadata.exiftool_path", "exiftool")),
            task_timeout_sec=float(config.get("metadata.task_timeout_sec", 5.0)),
            max_concurrent=int(config.get("metadata.max_concurrent", 4)),
            logger=logger,
        )

    def _run(self, command: list[str], path: Path) -> subprocess.CompletedProcess:
        self.logger.info(f"執行: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.task_timeout_sec,
            )
        except subprocess.TimeoutExpired as exc:
            raise MetadataWriteError(
                f"exiftool 逾時（{self.task_timeout_sec:.1f}s）: {path}", path
            ) from exc
        except OSError as exc:
            raise MetadataWriteError(f"無法執行 exiftool: {exc}", path) from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise MetadataWriteError(
                f"exiftool 失敗（code {result.returncode}）: {stderr or path}", path
            )
        return result

    def _read(self, path: Path) -> dict[str, Any]:
        command = [self.exiftool_path, "-json", "-n", "-G1", f"-{self.READ_GROUP}", str(path)]
        result = self._run(command, path)
        if not result.stdout.strip():
            return {}
        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise MetadataWriteError(f"exiftool 輸出無法解析: {exc}", path) from exc
        if not payload:
            return {}
        record = dict(payload[0])
        record.pop("SourceFile", None)
        return record

    def _write(self, path: Path, tags: Mapping[str, Any]) -> None:
        if not tags:
            return
        command = [self.exiftool_path]
        command.extend(f"-{key}={_format_value(value)}" for key, value in tags.items())
        command.append(str(path))
        self._run(command, path)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)
