"""資料模型模組。"""

from .batch_result import BatchResult, PairOutcome, PairStatus
from .error_record import ErrorLevel, ProcessError
from .media_pair import MediaPair
from .muxed_artifact import MuxedArtifact
from .offset_metadata import MOTION_PHOTO_TAGS, OffsetMetadata

__all__ = [
    "BatchResult",
    "PairOutcome",
    "PairStatus",
    "ErrorLevel",
    "ProcessError",
    "MediaPair",
    "MuxedArtifact",
    "MOTION_PHOTO_TAGS",
    "OffsetMetadata",
]
