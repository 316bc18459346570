from pathlib import Path

import pytest
from PIL import Image

from motion_photo_mux.core import MotionPhotoPipeline, RunOptions
from motion_photo_mux.models import PairStatus


def test_heic_pair_is_converted_before_mux(
    tmp_path: Path, config, write_bytes, make_heic, fake_metadata_service
) -> None:
    source = tmp_path / "source"
    make_heic(source / "IMG_0001.HEIC")
    write_bytes(source / "IMG_0001.MOV", 2048, b"\x00")
    output_root = tmp_path / "output"

    result = MotionPhotoPipeline(config, metadata_service=fake_metadata_service).run_directory(source, output_root)

    outcome = result.outcomes[0]
    assert outcome.status == PairStatus.SUCCESS
    assert outcome.artifact.output_path == output_root / "IMG_0001.jpg"
    assert outcome.metadata.video_offset_bytes == 2048
    data = outcome.artifact.output_path.read_bytes()
    assert data[:2] == b"\xff\xd8"
    assert data[outcome.artifact.still_byte_length :] == (source / "IMG_0001.MOV").read_bytes()
    with Image.open(outcome.artifact.output_path) as image:
        assert image.format == "JPEG"
        assert image.size == (32, 24)


def test_force_convert_unmatched_heic(tmp_path: Path, config, make_heic, fake_metadata_service) -> None:
    source = tmp_path / "source"
    make_heic(source / "lonely.heic")
    output_root = tmp_path / "output"

    result = MotionPhotoPipeline(config, metadata_service=fake_metadata_service).run_directory(
        source,
        output_root,
        RunOptions(force_convert_all=True, move_unmatched=True),
    )

    assert result.converted == [output_root / "lonely.jpg"]
    assert result.unmatched == []
    assert (source / "lonely.heic").exists()
    assert not (output_root / "other_files").exists()


def test_force_convert_same_stem_gets_distinct_names(
    tmp_path: Path, config, make_heic, fake_metadata_service
) -> None:
    source = tmp_path / "source"
    make_heic(source / "A.heic", color=(255, 0, 0))
    make_heic(source / "A.heif", color=(0, 255, 0))
    output_root = tmp_path / "output"

    result = MotionPhotoPipeline(config, metadata_service=fake_metadata_service).run_directory(
        source,
        output_root,
        RunOptions(force_convert_all=True),
    )

    assert result.converted == [output_root / "A.jpg", output_root / "A_001.jpg"]
    assert sorted(path.name for path in output_root.iterdir()) == ["A.jpg", "A_001.jpg"]


@pytest.mark.parametrize("workers", [1, 4])
def test_same_stem_pairs_get_distinct_outputs(
    tmp_path: Path, config, write_bytes, make_heic, fake_metadata_service, workers
) -> None:
    config.set("pipeline.max_workers", workers)
    source = tmp_path / "source"
    make_heic(source / "A.heic")
    write_bytes(source / "A.jpg", 900, b"\xff")
    mov = write_bytes(source / "A.mov", 5000, b"\x01")
    mp4 = write_bytes(source / "A.mp4", 7000, b"\x02")
    output_root = tmp_path / "output"

    result = MotionPhotoPipeline(config, metadata_service=fake_metadata_service).run_directory(source, output_root)

    assert [outcome.status for outcome in result.outcomes] == [PairStatus.SUCCESS, PairStatus.SUCCESS]
    heic_outcome, jpg_outcome = result.outcomes
    assert heic_outcome.pair.video_path == mov
    assert jpg_outcome.pair.video_path == mp4
    assert heic_outcome.artifact.output_path == output_root / "A.jpg"
    assert jpg_outcome.artifact.output_path == output_root / "A_001.jpg"
    assert sorted(path.name for path in output_root.iterdir()) == ["A.jpg", "A_001.jpg"]

    for outcome, video in ((heic_outcome, mov), (jpg_outcome, mp4)):
        data = outcome.artifact.output_path.read_bytes()
        assert len(data) == outcome.artifact.total_byte_length
        assert data[outcome.artifact.still_byte_length :] == video.read_bytes()
        assert outcome.metadata.video_offset_bytes == video.stat().st_size


def test_copy_unmatched_does_not_replace_motion_photo(
    tmp_path: Path, config, write_bytes, make_heic, fake_metadata_service
) -> None:
    source = tmp_path / "source"
    make_heic(source / "A.heic")
    plain = write_bytes(source / "A.jpg", 633, b"\xee")
    write_bytes(source / "A.mov", 5000, b"\x01")
    output_root = tmp_path / "output"

    result = MotionPhotoPipeline(config, metadata_service=fake_metadata_service).run_directory(
        source,
        output_root,
        RunOptions(copy_unmatched=True),
    )

    artifact = result.outcomes[0].artifact
    assert artifact.output_path == output_root / "A.jpg"
    assert artifact.output_path.stat().st_size == artifact.total_byte_length
    assert result.copied == [output_root / "A_001.jpg"]
    assert (output_root / "A_001.jpg").read_bytes() == plain.read_bytes()
