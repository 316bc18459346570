"""以檔名 stem 配對靜態影像與影片。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config import ConfigManager
from ..models import MediaPair
from ..utils import path_utils
from ..utils.errors import InvalidInputError, NotFoundError
from ..utils.logger import get_logger


@dataclass
class ResolveResult:
    pairs: List[MediaPair] = field(default_factory=list)
    unmatched_stills: List[Path] = field(default_factory=list)
    unmatched_videos: List[Path] = field(default_factory=list)
    other_files: List[Path] = field(default_factory=list)

    @property
    def unmatched(self) -> List[Path]:
        return sorted(
            self.unmatched_stills + self.unmatched_videos + self.other_files,
            key=lambda item: item.name,
        )


def validate_directory(directory: Path) -> None:
    if not directory.exists():
        raise NotFoundError(f"路徑不存在: {directory}", directory)
    if not directory.is_dir():
        raise InvalidInputError(f"路徑不是資料夾: {directory}", directory)


class PairResolver:
    """掃描單一資料夾（不遞迴），以 stem 前綴配對靜態影像與影片。

    候選影片需位於同一資料夾，檔名以靜態影像的 stem 開頭，副檔名在影片
    清單中。每張影像最多配一支影片，每支影片也只會被配一次。配對順序固定：

    1. 依檔名排序處理。
    2. 先配完全相同 stem 的組合，再配前綴相符者，避免 ``IMG_1.jpg``
       搶走 ``IMG_10.mov``。
    3. 同一影像有多個候選時，依 ``pairing.video_ext_priority`` 再依檔名決定。
    """

    def __init__(self, config: ConfigManager, logger=None) -> None:
        self.logger = logger or get_logger(self.__class__.__name__)
        self.still_exts = config.extensions("still")
        self.video_exts = config.extensions("video")
        self.case_sensitive = path_utils.resolve_case_sensitive(
            config.get("pairing.case_sensitive", "auto")
        )
        priority = [str(item).lower() for item in config.get("pairing.video_ext_priority", [])]
        self.video_ext_priority = {ext: index for index, ext in enumerate(priority)}

    def is_still(self, path: Path) -> bool:
        return path.suffix.lower() in self.still_exts

    def is_video(self, path: Path) -> bool:
        return path.suffix.lower() in self.video_exts

    def resolve_directory(self, directory: Path) -> ResolveResult:
        validate_directory(directory)

        entries = sorted(
            (entry for entry in directory.iterdir() if entry.is_file()),
            key=lambda item: item.name,
        )
        stills = [entry for entry in entries if self.is_still(entry)]
        videos = [entry for entry in entries if self.is_video(entry)]
        others = [entry for entry in entries if not self.is_still(entry) and not self.is_video(entry)]

        matches = self._assign(stills, videos)
        result = ResolveResult(other_files=others)
        claimed: set[Path] = set()
        for still in stills:
            video = matches.get(still)
            if video is None:
                result.unmatched_stills.append(still)
                continue
            result.pairs.append(MediaPair(still_path=still, video_path=video))
            claimed.add(video)
        result.unmatched_videos = [video for video in videos if video not in claimed]

        self.logger.info(
            f"{directory}: {len(result.pairs)} 組配對，"
            f"{len(result.unmatched_stills)} 張影像與 {len(result.unmatched_videos)} 支影片未配對"
        )
        for still in result.unmatched_stills:
            self.logger.info(f"UNMATCHED_STILL: {still}")
        return result

    def find_video_for_still(self, still_path: Path) -> Optional[Path]:
        siblings = self._siblings(still_path)
        videos = [entry for entry in siblings if self.is_video(entry)]
        candidates = self._candidates(still_path, videos)
        return candidates[0] if candidates else None

    def find_still_for_video(self, video_path: Path) -> Optional[Path]:
        """反向查詢：找出 stem 為此影片檔名前綴的靜態影像。"""
        siblings = self._siblings(video_path)
        stills = [entry for entry in siblings if self.is_still(entry)]
        matching = [
            still
            for still in stills
            if path_utils.stem_matches(video_path.name, still.stem, self.case_sensitive)
        ]
        if not matching:
            return None
        # 最長的 stem 最接近影片檔名
        matching.sort(
            key=lambda item: (
                not path_utils.is_exact_stem(video_path, item.stem, self.case_sensitive),
                -len(item.stem),
                item.name,
            )
        )
        return matching[0]

    def build_explicit_pair(self, still_path: Path, video_path: Path) -> MediaPair:
        for path in (still_path, video_path):
            if not path.exists():
                raise NotFoundError(f"檔案不存在: {path}", path)
            if not path.is_file():
                raise InvalidInputError(f"路徑不是檔案: {path}", path)
        if not self.is_still(still_path):
            raise InvalidInputError(f"不支援的影像格式: {still_path}", still_path)
        if not self.is_video(video_path):
            raise InvalidInputError(f"不支援的影片格式: {video_path}", video_path)
        return MediaPair(still_path=still_path, video_path=video_path)

    def _siblings(self, path: Path) -> list[Path]:
        parent = path.parent
        if not parent.is_dir():
            return []
        return sorted(
            (entry for entry in parent.iterdir() if entry.is_file() and entry != path),
            key=lambda item: item.name,
        )

    def _candidates(self, still: Path, videos: list[Path]) -> list[Path]:
        matching = [
            video
            for video in videos
            if path_utils.stem_matches(video.name, still.stem, self.case_sensitive)
        ]
        matching.sort(key=lambda video: self._rank(still, video))
        return matching

    def _rank(self, still: Path, video: Path) -> tuple[bool, int, str]:
        exact = path_utils.is_exact_stem(video, still.stem, self.case_sensitive)
        ext_rank = self.video_ext_priority.get(video.suffix.lower(), len(self.video_ext_priority))
        return (not exact, ext_rank, video.name)

    def _assign(self, stills: list[Path], videos: list[Path]) -> dict[Path, Path]:
        matches: dict[Path, Path] = {}
        used: set[Path] = set()

        for exact_pass in (True, False):
            for still in stills:
                if still in matches:
                    continue
                for video in self._candidates(still, videos):
                    if video in used:
                        continue
                    if exact_pass and not path_utils.is_exact_stem(video, still.stem, self.case_sensitive):
                        continue
                    matches[still] = video
                    used.add(video)
                    break

        return matches
