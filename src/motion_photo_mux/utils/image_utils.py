"""影像讀取與 EXIF 工具。"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

import piexif
from pillow_heif import register_heif_opener


@lru_cache(maxsize=None)
def ensure_heif_opener() -> None:
    register_heif_opener()


def reset_exif_orientation(exif_bytes: Optional[bytes], logger=None) -> Optional[bytes]:
    """回傳 Orientation 重設為 1 的 EXIF；無法解析時回傳 None。

    像素已依 Orientation 轉正後必須同步重設，否則檢視器會再轉一次。
    """
    if not exif_bytes:
        return None
    try:
        exif_dict = piexif.load(exif_bytes)
    except Exception as exc:
        if logger is not None:
            logger.warning(f"無法解析 EXIF，將不保留: {exc}")
        return None

    exif_dict.get("0th", {})[piexif.ImageIFD.Orientation] = 1
    # 縮圖在轉檔後不再對應新的像素
    exif_dict.pop("thumbnail", None)
    exif_dict.get("1st", {}).clear()
    try:
        return piexif.dump(exif_dict)
    except Exception as exc:
        if logger is not None:
            logger.warning(f"無法重新編碼 EXIF，將不保留: {exc}")
        return None
