from pathlib import Path

import pytest

from motion_photo_mux.core import Muxer, OffsetAnnotator
from motion_photo_mux.models import MediaPair, OffsetMetadata
from motion_photo_mux.models.offset_metadata import MICRO_VIDEO_OFFSET_TAG
from motion_photo_mux.utils.errors import MetadataWriteError


def _artifact(tmp_path: Path, config, write_bytes, still_size=1000, video_size=5000):
    still = write_bytes(tmp_path / "src" / "A.jpg", still_size, b"\xff")
    video = write_bytes(tmp_path / "src" / "A.mov", video_size, b"\x00")
    return Muxer(config).mux(MediaPair(still, video), tmp_path / "out")


def test_annotate_writes_offset(tmp_path: Path, config, write_bytes, fake_metadata_service) -> None:
    artifact = _artifact(tmp_path, config, write_bytes)
    annotator = OffsetAnnotator(config, fake_metadata_service)

    metadata = annotator.annotate(artifact.output_path, artifact.still_byte_length)

    assert metadata.video_offset_bytes == 5000
    stored = fake_metadata_service.read(artifact.output_path)
    assert OffsetMetadata.from_tags(stored) == metadata
    assert not fake_metadata_service.backup_path(artifact.output_path).exists()
    assert artifact.output_path.stat().st_size == 6000


def test_annotate_is_idempotent(tmp_path: Path, config, write_bytes, fake_metadata_service) -> None:
    artifact = _artifact(tmp_path, config, write_bytes)
    annotator = OffsetAnnotator(config, fake_metadata_service)

    first = annotator.annotate(artifact.output_path, artifact.still_byte_length)
    second = annotator.annotate(artifact.output_path, artifact.still_byte_length)

    assert first == second
    assert fake_metadata_service.read(artifact.output_path)[MICRO_VIDEO_OFFSET_TAG] == 5000
    assert len(fake_metadata_service.write_calls) == 2


def test_annotate_overwrites_existing_fields(tmp_path: Path, config, write_bytes, fake_metadata_service) -> None:
    artifact = _artifact(tmp_path, config, write_bytes)
    fake_metadata_service.store[str(artifact.output_path.resolve())] = {
        MICRO_VIDEO_OFFSET_TAG: 42,
        "XMP-dc:Title": "keep out",
    }
    annotator = OffsetAnnotator(config, fake_metadata_service)

    annotator.annotate(artifact.output_path, artifact.still_byte_length)

    written = fake_metadata_service.write_calls[-1][1]
    assert written[MICRO_VIDEO_OFFSET_TAG] == 5000
    assert "XMP-dc:Title" not in written


def test_annotate_failure_removes_backup(tmp_path: Path, config, write_bytes, make_metadata_service) -> None:
    service = make_metadata_service(fail_on_write=True)
    artifact = _artifact(tmp_path, config, write_bytes)
    annotator = OffsetAnnotator(config, service)

    with pytest.raises(MetadataWriteError):
        annotator.annotate(artifact.output_path, artifact.still_byte_length)

    assert artifact.output_path.exists()
    assert not service.backup_path(artifact.output_path).exists()


def test_annotate_backup_removal_failure_is_not_fatal(
    tmp_path: Path, config, write_bytes, fake_metadata_service, monkeypatch
) -> None:
    artifact = _artifact(tmp_path, config, write_bytes)
    annotator = OffsetAnnotator(config, fake_metadata_service)
    original_unlink = Path.unlink

    def fail_backup(self, missing_ok=False):
        if self.name.endswith("_original"):
            raise PermissionError("locked")
        return original_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", fail_backup)

    metadata = annotator.annotate(artifact.output_path, artifact.still_byte_length)

    assert metadata.video_offset_bytes == 5000


def test_compute_offset_rejects_empty_video(tmp_path: Path, config, write_bytes, fake_metadata_service) -> None:
    still = write_bytes(tmp_path / "A.jpg", 100)
    annotator = OffsetAnnotator(config, fake_metadata_service)

    with pytest.raises(MetadataWriteError):
        annotator.compute_offset(still, 100)


def test_compute_offset_uses_current_size(tmp_path: Path, config, write_bytes, fake_metadata_service) -> None:
    artifact = _artifact(tmp_path, config, write_bytes)
    with artifact.output_path.open("ab") as handle:
        handle.write(b"\x00" * 24)
    annotator = OffsetAnnotator(config, fake_metadata_service)

    assert annotator.compute_offset(artifact.output_path, artifact.still_byte_length) == 5024
