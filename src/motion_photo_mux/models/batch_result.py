"""批次執行結果模型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .error_record import ProcessError
from .media_pair import MediaPair
from .muxed_artifact import MuxedArtifact
from .offset_metadata import OffsetMetadata


class PairStatus(str, Enum):
    SUCCESS = "SUCCESS"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


@dataclass
class PairOutcome:
    pair: MediaPair
    status: PairStatus
    artifact: Optional[MuxedArtifact] = None
    metadata: Optional[OffsetMetadata] = None
    error: Optional[ProcessError] = None


@dataclass
class BatchResult:
    outcomes: List[PairOutcome] = field(default_factory=list)
    unmatched: List[Path] = field(default_factory=list)
    converted: List[Path] = field(default_factory=list)
    relocated: List[Path] = field(default_factory=list)
    copied: List[Path] = field(default_factory=list)
    deleted: List[Path] = field(default_factory=list)
    problems: List[ProcessError] = field(default_factory=list)
    report_path: Optional[Path] = None

    @property
    def succeeded(self) -> List[PairOutcome]:
        return [item for item in self.outcomes if item.status == PairStatus.SUCCESS]

    @property
    def failed(self) -> List[PairOutcome]:
        return [item for item in self.outcomes if item.status != PairStatus.SUCCESS]

    @property
    def cancelled(self) -> List[PairOutcome]:
        return [item for item in self.outcomes if item.status == PairStatus.CANCELLED]
