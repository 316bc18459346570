from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Mapping

import pytest
from PIL import Image
from pillow_heif import register_heif_opener

from motion_photo_mux.config import ConfigManager
from motion_photo_mux.utils.errors import MetadataWriteError
from motion_photo_mux.utils.metadata_service import MetadataService


class FakeMetadataService(MetadataService):
    """記憶體中的 metadata 服務；寫入時和 exiftool 一樣留下 _original 備份。"""

    def __init__(self, fail_on_write: bool = False, fail_on_read: bool = False, on_write=None) -> None:
        super().__init__(max_concurrent=2)
        self.on_write = on_write
        self.store: dict[str, dict[str, Any]] = {}
        self.fail_on_write = fail_on_write
        self.fail_on_read = fail_on_read
        self.write_calls: list[tuple[Path, dict[str, Any]]] = []

    def _key(self, path: Path) -> str:
        return str(Path(path).resolve())

    def _read(self, path: Path) -> dict[str, Any]:
        if self.fail_on_read:
            raise MetadataWriteError(f"read failed: {path}", path)
        return dict(self.store.get(self._key(path), {}))

    def _write(self, path: Path, tags: Mapping[str, Any]) -> None:
        shutil.copyfile(path, self.backup_path(path))
        if self.fail_on_write:
            raise MetadataWriteError(f"write failed: {path}", path)
        self.write_calls.append((Path(path), dict(tags)))
        self.store.setdefault(self._key(path), {}).update(tags)
        if self.on_write is not None:
            self.on_write(Path(path))


@pytest.fixture
def fake_metadata_service() -> FakeMetadataService:
    return FakeMetadataService()


@pytest.fixture
def config() -> ConfigManager:
    cfg = ConfigManager()
    cfg.set("retry.max_retries", 0)
    return cfg


@pytest.fixture
def make_metadata_service():
    def _make(**kwargs) -> FakeMetadataService:
        return FakeMetadataService(**kwargs)

    return _make


@pytest.fixture
def write_bytes():
    def _write(path: Path, size: int, fill: bytes = b"\xab") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes((fill * size)[:size])
        return path

    return _write


@pytest.fixture
def make_heic():
    """以 pillow-heif 編碼真正的 HEIF 檔。"""
    register_heif_opener()

    def _make(path: Path, size=(32, 24), color=(0, 128, 255)) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color=color).save(path, format="HEIF")
        return path

    return _make
