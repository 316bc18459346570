"""路徑與副檔名處理工具。"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Container, Optional, Union

CaseMode = Union[bool, str]


def resolve_case_sensitive(mode: CaseMode) -> bool:
    """``auto`` 依平台的 normcase 判斷檔名是否區分大小寫。"""
    if isinstance(mode, bool):
        return mode
    return os.path.normcase("A") != os.path.normcase("a")


def fold_name(name: str, case_sensitive: bool) -> str:
    return name if case_sensitive else name.casefold()


def stem_matches(candidate_name: str, stem: str, case_sensitive: bool) -> bool:
    """candidate_name 是否以 stem 開頭。"""
    return fold_name(candidate_name, case_sensitive).startswith(fold_name(stem, case_sensitive))


def is_exact_stem(path: Path, stem: str, case_sensitive: bool) -> bool:
    return fold_name(path.stem, case_sensitive) == fold_name(stem, case_sensitive)


def is_same_path(left: Path, right: Path) -> bool:
    return path_key(left) == path_key(right)


def build_candidate(parent: Path, filename: str, seq: int, digits: int = 3) -> Path:
    if seq == 0:
        return parent / filename
    stem = Path(filename).stem
    ext = Path(filename).suffix
    return parent / f"{stem}_{seq:0{digits}d}{ext}"


def path_key(path: Path) -> str:
    return os.path.normcase(os.path.abspath(path))


def next_free_path(
    parent: Path,
    filename: str,
    digits: int = 3,
    *,
    taken: Optional[Container[str]] = None,
    allow_existing: bool = False,
) -> Path:
    """找出第一個可用的 ``stem_NNN.ext``；``taken`` 內的路徑視同已存在。

    ``allow_existing`` 為真時，磁碟上已存在的檔案可被選中（覆寫），
    但 ``taken`` 仍會被跳過。
    """
    seq = 0
    while True:
        candidate = build_candidate(parent, filename, seq, digits)
        claimed = taken is not None and path_key(candidate) in taken
        if not claimed and (allow_existing or not candidate.exists()):
            return candidate
        seq += 1


class OutputClaims:
    """單次執行內的輸出路徑登記簿。

    每個輸出路徑只會發給一個呼叫端，查找與登記在同一把鎖內完成，
    多個 worker 不會拿到相同名稱。
    """

    def __init__(self, digits: int = 3) -> None:
        self.digits = digits
        self._claimed: set[str] = set()
        self._lock = threading.Lock()

    def claim(self, parent: Path, filename: str, *, allow_existing: bool = False) -> Path:
        with self._lock:
            path = next_free_path(
                parent,
                filename,
                self.digits,
                taken=self._claimed,
                allow_existing=allow_existing,
            )
            self._claimed.add(path_key(path))
            return path

def is_cross_drive(src_path: Path, dst_path: Path) -> bool:
    return src_path.resolve().anchor.upper() != dst_path.resolve().anchor.upper()
