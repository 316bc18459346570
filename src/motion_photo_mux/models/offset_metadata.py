"""Motion Photo XMP 欄位模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

MICRO_VIDEO_TAG = "XMP-GCamera:MicroVideo"
MICRO_VIDEO_VERSION_TAG = "XMP-GCamera:MicroVideoVersion"
MICRO_VIDEO_OFFSET_TAG = "XMP-GCamera:MicroVideoOffset"
MICRO_VIDEO_TIMESTAMP_TAG = "XMP-GCamera:MicroVideoPresentationTimestampUs"

MOTION_PHOTO_TAGS = (
    MICRO_VIDEO_TAG,
    MICRO_VIDEO_VERSION_TAG,
    MICRO_VIDEO_OFFSET_TAG,
    MICRO_VIDEO_TIMESTAMP_TAG,
)

DEFAULT_PRESENTATION_TIMESTAMP_US = 1500000


@dataclass(frozen=True)
class OffsetMetadata:
    """寫入合併檔的 Motion Photo 標記。

    ``video_offset_bytes`` 是從檔尾往回算到影片開頭的位元組數，
    也就是影片本身的長度。
    """

    video_offset_bytes: int
    presentation_timestamp_us: int = DEFAULT_PRESENTATION_TIMESTAMP_US
    is_motion_photo: bool = True
    version: int = 1

    def to_tags(self) -> dict[str, int]:
        return {
            MICRO_VIDEO_TAG: 1 if self.is_motion_photo else 0,
            MICRO_VIDEO_VERSION_TAG: self.version,
            MICRO_VIDEO_OFFSET_TAG: self.video_offset_bytes,
            MICRO_VIDEO_TIMESTAMP_TAG: self.presentation_timestamp_us,
        }

    @classmethod
    def from_tags(cls, tags: Mapping[str, Any]) -> "OffsetMetadata | None":
        if MICRO_VIDEO_OFFSET_TAG not in tags:
            return None
        try:
            return cls(
                video_offset_bytes=int(tags[MICRO_VIDEO_OFFSET_TAG]),
                presentation_timestamp_us=int(
                    tags.get(MICRO_VIDEO_TIMESTAMP_TAG, DEFAULT_PRESENTATION_TIMESTAMP_US)
                ),
                is_motion_photo=int(tags.get(MICRO_VIDEO_TAG, 0)) == 1,
                version=int(tags.get(MICRO_VIDEO_VERSION_TAG, 1)),
            )
        except (TypeError, ValueError):
            return None
