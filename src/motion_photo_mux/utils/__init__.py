"""工具模組。"""

from . import file_ops, path_utils, reporting
from .cancel import CancelledError, CancellationToken
from .errors import (
    InvalidInputError,
    MetadataWriteError,
    MotionPhotoError,
    MuxIOError,
    NotFoundError,
    TranscodeError,
    ValidationError,
)
from .metadata_service import ExifToolService, MetadataService

__all__ = [
    "file_ops",
    "path_utils",
    "reporting",
    "CancelledError",
    "CancellationToken",
    "InvalidInputError",
    "MetadataWriteError",
    "MotionPhotoError",
    "MuxIOError",
    "NotFoundError",
    "TranscodeError",
    "ValidationError",
    "ExifToolService",
    "MetadataService",
]
