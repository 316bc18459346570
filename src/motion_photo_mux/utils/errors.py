"""例外類別。"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class MotionPhotoError(Exception):
    """所有處理錯誤的基底類別。"""

    code = "E-000"

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class NotFoundError(MotionPhotoError):
    """指定的資料夾或檔案不存在。"""

    code = "E-NOT-FOUND"


class InvalidInputError(MotionPhotoError):
    """指定的路徑存在但類型不符，例如不是資料夾。"""

    code = "E-INVALID-INPUT"


class ValidationError(MotionPhotoError):
    """候選配對未通過副檔名或存在性檢查。"""

    code = "W-VALIDATION"


class MuxIOError(MotionPhotoError, OSError):
    """合併時讀寫失敗。"""

    code = "W-MUX-IO"


class MetadataWriteError(MotionPhotoError):
    """metadata 服務無法讀取或寫入檔案（含逾時）。"""

    code = "W-METADATA"


class TranscodeError(MotionPhotoError):
    code = "W-TRANSCODE"
