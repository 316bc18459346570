from pathlib import Path

import pytest

from motion_photo_mux.core import MotionPhotoPipeline
from motion_photo_mux.models import PairStatus
from motion_photo_mux.utils.errors import NotFoundError


def test_single_pair(tmp_path: Path, config, write_bytes, fake_metadata_service) -> None:
    still = write_bytes(tmp_path / "photo.jpg", 1000, b"\xff")
    video = write_bytes(tmp_path / "clip.mov", 5000, b"\x00")
    output_root = tmp_path / "output"

    result = MotionPhotoPipeline(config, metadata_service=fake_metadata_service).run_pair(
        still, video, output_root
    )

    outcome = result.outcomes[0]
    assert outcome.status == PairStatus.SUCCESS
    assert outcome.artifact.output_path == output_root / "photo.jpg"
    assert outcome.metadata.video_offset_bytes == 5000


def test_single_pair_missing_video(tmp_path: Path, config, write_bytes, fake_metadata_service) -> None:
    still = write_bytes(tmp_path / "photo.jpg", 10)

    with pytest.raises(NotFoundError):
        MotionPhotoPipeline(config, metadata_service=fake_metadata_service).run_pair(
            still, tmp_path / "clip.mov", tmp_path / "output"
        )
