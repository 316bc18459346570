"""靜態影像與影片配對模型。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class MediaPair:
    still_path: Path
    video_path: Path

    @property
    def stem(self) -> str:
        return self.still_path.stem

    def to_dict(self) -> dict[str, object]:
        return {
            "still_path": str(self.still_path),
            "video_path": str(self.video_path),
        }
