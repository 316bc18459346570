from pathlib import Path

import pytest

from motion_photo_mux.core import Muxer
from motion_photo_mux.models import MediaPair
from motion_photo_mux.utils import file_ops
from motion_photo_mux.utils.cancel import CancelledError, CancellationToken
from motion_photo_mux.utils.errors import MuxIOError, ValidationError


def test_mux_byte_exact_layout(tmp_path: Path, config, write_bytes) -> None:
    still = write_bytes(tmp_path / "src" / "IMG_0001.jpg", 1000, b"\xff\xd8")
    video = write_bytes(tmp_path / "src" / "IMG_0001.mov", 5000, b"moov")
    output_root = tmp_path / "out"

    artifact = Muxer(config).mux(MediaPair(still, video), output_root)

    assert artifact.output_path == output_root / "IMG_0001.jpg"
    assert artifact.still_byte_length == 1000
    assert artifact.total_byte_length == 6000
    assert artifact.video_byte_length == 5000
    assert artifact.output_path.read_bytes() == still.read_bytes() + video.read_bytes()
    assert still.stat().st_size == 1000


def test_mux_small_chunks(tmp_path: Path, config, write_bytes) -> None:
    config.set("mux.chunk_size_kb", 1)
    still = write_bytes(tmp_path / "A.jpg", 4097, b"\x01\x02\x03")
    video = write_bytes(tmp_path / "A.mp4", 3001, b"\x09")

    artifact = Muxer(config).mux(MediaPair(still, video), tmp_path / "out")

    assert artifact.output_path.read_bytes() == still.read_bytes() + video.read_bytes()


def test_mux_rejects_bad_video_extension(tmp_path: Path, config, write_bytes) -> None:
    still = write_bytes(tmp_path / "A.jpg", 10)
    video = write_bytes(tmp_path / "A.txt", 10)
    output_root = tmp_path / "out"

    with pytest.raises(ValidationError):
        Muxer(config).mux(MediaPair(still, video), output_root)

    assert not output_root.exists()


def test_mux_rejects_missing_still(tmp_path: Path, config, write_bytes) -> None:
    video = write_bytes(tmp_path / "A.mov", 10)

    with pytest.raises(ValidationError):
        Muxer(config).mux(MediaPair(tmp_path / "A.jpg", video), tmp_path / "out")


def test_mux_rejects_output_equal_to_source(tmp_path: Path, config, write_bytes) -> None:
    still = write_bytes(tmp_path / "A.jpg", 10)
    video = write_bytes(tmp_path / "A.mov", 10)

    with pytest.raises(ValidationError):
        Muxer(config).mux(MediaPair(still, video), tmp_path)

    assert still.stat().st_size == 10


def test_mux_rerun_overwrites(tmp_path: Path, config, write_bytes) -> None:
    still = write_bytes(tmp_path / "A.jpg", 10)
    video = write_bytes(tmp_path / "A.mov", 20)
    output_root = tmp_path / "out"
    muxer = Muxer(config)

    first = muxer.mux(MediaPair(still, video), output_root)
    second = muxer.mux(MediaPair(still, video), output_root)

    assert first.output_path == second.output_path
    assert second.total_byte_length == 30
    assert sorted(path.name for path in output_root.iterdir()) == ["A.jpg"]


def test_mux_collision_avoidance_when_overwrite_disabled(tmp_path: Path, config, write_bytes) -> None:
    config.set("mux.overwrite", False)
    still = write_bytes(tmp_path / "A.jpg", 10)
    video = write_bytes(tmp_path / "A.mov", 20)
    output_root = tmp_path / "out"
    muxer = Muxer(config)

    first = muxer.mux(MediaPair(still, video), output_root)
    second = muxer.mux(MediaPair(still, video), output_root)

    assert first.output_path.name == "A.jpg"
    assert second.output_path.name == "A_001.jpg"


def test_mux_cancel_leaves_no_output(tmp_path: Path, config, write_bytes) -> None:
    still = write_bytes(tmp_path / "A.jpg", 10)
    video = write_bytes(tmp_path / "A.mov", 20)
    output_root = tmp_path / "out"
    token = CancellationToken()
    token.set()

    with pytest.raises(CancelledError):
        Muxer(config).mux(MediaPair(still, video), output_root, cancel_token=token)

    assert list(output_root.iterdir()) == []


def test_mux_size_mismatch_raises(tmp_path: Path, config, write_bytes, monkeypatch) -> None:
    still = write_bytes(tmp_path / "A.jpg", 10)
    video = write_bytes(tmp_path / "A.mov", 20)

    def short_copy(src_path, target, **kwargs):
        target.write(b"\x00")
        return 1

    monkeypatch.setattr("motion_photo_mux.utils.file_ops.chunked_copy_into", short_copy)

    with pytest.raises(MuxIOError):
        Muxer(config).mux(MediaPair(still, video), tmp_path / "out")


def test_mux_uses_explicit_output_path(tmp_path: Path, config, write_bytes) -> None:
    still = write_bytes(tmp_path / "A.jpg", 10)
    video = write_bytes(tmp_path / "A.mov", 20)
    target = tmp_path / "out" / "A_001.jpg"

    artifact = Muxer(config).mux(MediaPair(still, video), tmp_path / "out", output_path=target)

    assert artifact.output_path == target
    assert sorted(path.name for path in target.parent.iterdir()) == ["A_001.jpg"]


def test_mux_partial_files_are_unique(tmp_path: Path, config, write_bytes, monkeypatch) -> None:
    still = write_bytes(tmp_path / "A.jpg", 10)
    video = write_bytes(tmp_path / "A.mov", 20)
    output_root = tmp_path / "out"
    partial_names = []
    original_copy = file_ops.chunked_copy_into

    def recording_copy(src_path, target, **kwargs):
        partial_names.append(target.name)
        return original_copy(src_path, target, **kwargs)

    monkeypatch.setattr("motion_photo_mux.utils.file_ops.chunked_copy_into", recording_copy)
    muxer = Muxer(config)

    muxer.mux(MediaPair(still, video), output_root)
    muxer.mux(MediaPair(still, video), output_root)

    first, second = partial_names[0], partial_names[2]
    assert first != second
    assert Path(first).parent == output_root
    assert Path(first).name.startswith(".A.jpg.")
    assert sorted(path.name for path in output_root.iterdir()) == ["A.jpg"]
