"""把靜態影像與影片逐位元組串接成單一檔案。"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from ..config import ConfigManager
from ..models import MediaPair, MuxedArtifact
from ..utils import file_ops, path_utils
from ..utils.cancel import CancellationToken
from ..utils.errors import MuxIOError, ValidationError
from ..utils.logger import get_logger

PARTIAL_SUFFIX = ".partial"


class Muxer:
    """輸出內容為 ``影像原始位元組 + 影片原始位元組``，中間不插入任何資料。

    先寫入同資料夾的暫存檔，完成後以 ``os.replace`` 換到正式路徑，
    中途失敗或取消時正式路徑不會出現半成品。
    """

    def __init__(self, config: ConfigManager, logger=None) -> None:
        self.config = config
        self.logger = logger or get_logger(self.__class__.__name__)
        self.still_exts = config.extensions("still")
        self.video_exts = config.extensions("video")
        self.overwrite = bool(config.get("mux.overwrite", True))
        self.chunk_size_kb = int(config.get("mux.chunk_size_kb", 1024))
        self.sequence_digits = int(config.get("mux.sequence_digits", 3))

    def validate_media(self, still_path: Path, video_path: Path) -> None:
        if not still_path.is_file():
            raise ValidationError(f"影像不存在: {still_path}", still_path)
        if not video_path.is_file():
            raise ValidationError(f"影片不存在: {video_path}", video_path)
        if still_path.suffix.lower() not in self.still_exts:
            raise ValidationError(f"影像副檔名不支援: {still_path}", still_path)
        if video_path.suffix.lower() not in self.video_exts:
            raise ValidationError(f"影片副檔名不支援: {video_path}", video_path)

    def output_path_for(
        self,
        still_path: Path,
        output_root: Path,
        claims: Optional[path_utils.OutputClaims] = None,
    ) -> Path:
        """決定輸出路徑；同一次執行中已被登記的路徑不會再發出。"""
        if claims is not None:
            return claims.claim(output_root, still_path.name, allow_existing=self.overwrite)
        if self.overwrite:
            return output_root / still_path.name
        return path_utils.next_free_path(output_root, still_path.name, self.sequence_digits)

    def mux(
        self,
        pair: MediaPair,
        output_root: Path,
        *,
        output_path: Optional[Path] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> MuxedArtifact:
        self.validate_media(pair.still_path, pair.video_path)

        mkdir_result = file_ops.safe_makedirs(output_root, config=self.config, logger=self.logger)
        if not mkdir_result.success:
            raise MuxIOError(f"無法建立輸出資料夾: {output_root} ({mkdir_result.error_message})", output_root)

        if output_path is None:
            output_path = self.output_path_for(pair.still_path, output_root)
        if path_utils.is_same_path(output_path, pair.still_path) or path_utils.is_same_path(
            output_path, pair.video_path
        ):
            raise ValidationError(f"輸出路徑不可與來源相同: {output_path}", output_path)
        if output_path.exists():
            self.logger.warning(f"輸出檔已存在，將覆寫: {output_path}")

        self.logger.info(f"合併 {pair.still_path} 與 {pair.video_path}")
        partial_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=output_path.parent,
                prefix=f".{output_path.name}.",
                suffix=PARTIAL_SUFFIX,
                delete=False,
            ) as target:
                partial_path = Path(target.name)
                file_ops.chunked_copy_into(
                    pair.still_path,
                    target,
                    cancel_token=cancel_token,
                    chunk_size_kb=self.chunk_size_kb,
                )
                file_ops.chunked_copy_into(
                    pair.video_path,
                    target,
                    cancel_token=cancel_token,
                    chunk_size_kb=self.chunk_size_kb,
                )
                target.flush()
                os.fsync(target.fileno())
            # 暫存檔建立時權限為 0600，改用來源影像的權限
            shutil.copymode(pair.still_path, partial_path)
            os.replace(partial_path, output_path)
        except OSError as exc:
            raise MuxIOError(f"合併失敗: {output_path} ({exc})", output_path) from exc
        finally:
            if partial_path is not None and partial_path.exists():
                partial_path.unlink()

        return self._measure(pair, output_path)

    def _measure(self, pair: MediaPair, output_path: Path) -> MuxedArtifact:
        try:
            still_size = pair.still_path.stat().st_size
            video_size = pair.video_path.stat().st_size
            total_size = output_path.stat().st_size
        except OSError as exc:
            raise MuxIOError(f"無法讀取檔案大小: {output_path} ({exc})", output_path) from exc

        if total_size != still_size + video_size:
            raise MuxIOError(
                f"合併檔大小不符: {total_size} != {still_size} + {video_size}",
                output_path,
            )

        self.logger.info(f"已合併: {output_path}（影像 {still_size} bytes，總計 {total_size} bytes）")
        return MuxedArtifact(
            output_path=output_path,
            still_byte_length=still_size,
            total_byte_length=total_size,
        )
