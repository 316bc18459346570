"""合併輸出檔模型。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class MuxedArtifact:
    output_path: Path
    still_byte_length: int
    total_byte_length: int

    @property
    def video_byte_length(self) -> int:
        return self.total_byte_length - self.still_byte_length

    def to_dict(self) -> dict[str, object]:
        return {
            "output_path": str(self.output_path),
            "still_byte_length": self.still_byte_length,
            "total_byte_length": self.total_byte_length,
            "video_byte_length": self.video_byte_length,
        }
