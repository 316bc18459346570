"""未配對檔案的搬移、複製與來源刪除。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from ..config import ConfigManager
from ..models import ProcessError
from ..models.error_record import ErrorLevel
from ..utils import file_ops, path_utils
from ..utils.logger import get_logger


@dataclass
class HousekeepingResult:
    done: List[Path] = field(default_factory=list)
    failed: List[ProcessError] = field(default_factory=list)


class Housekeeper:
    def __init__(self, config: ConfigManager, logger=None) -> None:
        self.config = config
        self.logger = logger or get_logger(self.__class__.__name__)
        self.sequence_digits = int(config.get("mux.sequence_digits", 3))

    def relocate(
        self,
        files: Iterable[Path],
        dest_dir: Path,
        claims: Optional[path_utils.OutputClaims] = None,
    ) -> HousekeepingResult:
        result = HousekeepingResult()
        for src in files:
            dst = self._free_path(dest_dir, src.name, claims)
            try:
                file_ops.move_or_copy(
                    src,
                    dst,
                    cross_drive_copy=path_utils.is_cross_drive(src, dest_dir),
                    config=self.config,
                    logger=self.logger,
                )
            except OSError as exc:
                result.failed.append(_failure("W-RELOCATE", f"無法搬移: {exc}", src))
                continue
            result.done.append(dst)
        return result

    def copy_through(
        self,
        files: Iterable[Path],
        dest_dir: Path,
        claims: Optional[path_utils.OutputClaims] = None,
    ) -> HousekeepingResult:
        """複製到 dest_dir；不覆寫既有檔案，也不覆寫本次執行已登記的輸出。"""
        result = HousekeepingResult()
        mkdir_result = file_ops.safe_makedirs(dest_dir, config=self.config, logger=self.logger)
        if not mkdir_result.success:
            for src in files:
                result.failed.append(_failure("W-COPY", f"無法建立資料夾: {mkdir_result.error_message}", src))
            return result

        for src in files:
            if path_utils.is_same_path(src.parent, dest_dir):
                continue
            dst = self._free_path(dest_dir, src.name, claims)
            copy_result = file_ops.safe_copy2(src, dst, config=self.config, logger=self.logger)
            if not copy_result.success:
                result.failed.append(_failure("W-COPY", f"無法複製: {copy_result.error_message}", src))
                continue
            self.logger.info(f"COPIED: {src} -> {dst}")
            result.done.append(dst)
        return result

    def _free_path(self, dest_dir: Path, filename: str, claims: Optional[path_utils.OutputClaims]) -> Path:
        if claims is not None:
            return claims.claim(dest_dir, filename)
        return path_utils.next_free_path(dest_dir, filename, self.sequence_digits)

    def delete_sources(self, files: Iterable[Path]) -> HousekeepingResult:
        result = HousekeepingResult()
        for src in files:
            unlink_result = file_ops.safe_unlink(src, config=self.config, logger=self.logger)
            if not unlink_result.success:
                result.failed.append(_failure("W-DELETE", f"無法刪除: {unlink_result.error_message}", src))
                continue
            self.logger.info(f"DELETED: {src}")
            result.done.append(src)
        return result


def _failure(code: str, message: str, path: Path) -> ProcessError:
    return ProcessError(
        code=code,
        level=ErrorLevel.RECOVERABLE,
        message=message,
        file_path=str(path),
        stage="housekeeping",
    )
