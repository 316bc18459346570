"""核心流程模組。"""

from .housekeeping import Housekeeper, HousekeepingResult
from .muxer import Muxer
from .offset_annotator import OffsetAnnotator
from .pair_resolver import PairResolver, ResolveResult, validate_directory
from .pipeline import MotionPhotoPipeline, RunOptions
from .transcoder import StillTranscoder

__all__ = [
    "Housekeeper",
    "HousekeepingResult",
    "Muxer",
    "OffsetAnnotator",
    "PairResolver",
    "ResolveResult",
    "validate_directory",
    "MotionPhotoPipeline",
    "RunOptions",
    "StillTranscoder",
]
