"""HEIC/HEIF 靜態影像轉 JPEG。"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps

from ..config import ConfigManager
from ..utils import image_utils
from ..utils.errors import TranscodeError
from ..utils.logger import get_logger


class StillTranscoder:
    def __init__(self, config: ConfigManager, logger=None) -> None:
        self.logger = logger or get_logger(self.__class__.__name__)
        self.native_exts = config.extensions("native_still")
        self.jpeg_quality = int(config.get("transcode.jpeg_quality", 95))

    def needs_conversion(self, path: Path) -> bool:
        return path.suffix.lower() in self.native_exts

    def output_name(self, input_path: Path) -> str:
        return f"{input_path.stem}.jpg"

    def convert(self, input_path: Path, output_dir: Path, *, output_path: Optional[Path] = None) -> Path:
        """轉為 ``output_dir/<stem>.jpg``（或指定的 output_path），像素依 EXIF 方向轉正並保留 EXIF。"""
        image_utils.ensure_heif_opener()
        if output_path is None:
            output_path = output_dir / self.output_name(input_path)
        self.logger.info(f"轉檔: {input_path} -> {output_path}")
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with Image.open(input_path) as source:
                exif_bytes = source.info.get("exif")
                icc_profile = source.info.get("icc_profile")
                image = ImageOps.exif_transpose(source)
                if image.mode not in ("RGB", "L"):
                    image = image.convert("RGB")

                save_kwargs: dict[str, object] = {"quality": self.jpeg_quality}
                exif_out = image_utils.reset_exif_orientation(exif_bytes, self.logger)
                if exif_out:
                    save_kwargs["exif"] = exif_out
                if icc_profile:
                    save_kwargs["icc_profile"] = icc_profile
                image.save(output_path, "JPEG", **save_kwargs)
        except Exception as exc:
            if output_path.exists():
                output_path.unlink()
            raise TranscodeError(f"轉檔失敗: {input_path} ({exc})", input_path) from exc
        return output_path
