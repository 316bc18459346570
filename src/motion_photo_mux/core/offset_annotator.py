"""計算影片 offset 並寫入合併檔的 XMP。"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from ..config import ConfigManager
from ..models import MOTION_PHOTO_TAGS, OffsetMetadata
from ..models.offset_metadata import DEFAULT_PRESENTATION_TIMESTAMP_US
from ..utils.errors import MetadataWriteError
from ..utils.logger import get_logger
from ..utils.metadata_service import MetadataService

OWNED_NAMESPACE = "XMP-GCamera:"


class OffsetAnnotator:
    def __init__(self, config: ConfigManager, service: MetadataService, logger=None) -> None:
        self.logger = logger or get_logger(self.__class__.__name__)
        self.service = service
        self.presentation_timestamp_us = int(
            config.get("metadata.presentation_timestamp_us", DEFAULT_PRESENTATION_TIMESTAMP_US)
        )

    def compute_offset(self, artifact_path: Path, still_byte_length: int) -> int:
        """以呼叫當下的檔案大小計算 offset，不沿用合併時的數值。"""
        try:
            total_size = artifact_path.stat().st_size
        except OSError as exc:
            raise MetadataWriteError(f"無法讀取合併檔大小: {artifact_path} ({exc})", artifact_path) from exc
        offset = total_size - int(still_byte_length)
        if offset <= 0:
            raise MetadataWriteError(
                f"合併檔沒有影片區段: {artifact_path}（總計 {total_size}，影像 {still_byte_length}）",
                artifact_path,
            )
        return offset

    def annotate(self, artifact_path: Path, still_byte_length: int) -> OffsetMetadata:
        with self.service.file_lock(artifact_path), self._session(artifact_path):
            offset = self.compute_offset(artifact_path, still_byte_length)
            metadata = OffsetMetadata(
                video_offset_bytes=offset,
                presentation_timestamp_us=self.presentation_timestamp_us,
            )

            self.logger.info(f"讀取既有 metadata: {artifact_path}")
            existing = self._owned_entries(self.service.read(artifact_path))
            stale = [key for key in MOTION_PHOTO_TAGS if key in existing]
            if stale:
                self.logger.warning(f"{artifact_path} 已有 Motion Photo 欄位，將覆寫: {', '.join(stale)}")

            merged = dict(existing)
            merged.update(metadata.to_tags())
            self.logger.info(f"寫入 Motion Photo metadata（offset={offset}）: {artifact_path}")
            self.service.write(artifact_path, merged)
            return metadata

    @contextmanager
    def _session(self, artifact_path: Path) -> Iterator[None]:
        """不論成功或失敗，離開時都清除 metadata 服務留下的備份檔。"""
        try:
            yield
        finally:
            self._remove_backup(self.service.backup_path(artifact_path))

    def _remove_backup(self, backup_path: Path) -> None:
        try:
            backup_path.unlink(missing_ok=True)
        except OSError as exc:
            self.logger.warning(f"無法刪除備份檔: {backup_path} ({exc})")

    def _owned_entries(self, entries: dict[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in entries.items() if key.startswith(OWNED_NAMESPACE)}
