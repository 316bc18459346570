"""設定檔驗證邏輯。"""

from __future__ import annotations

from typing import Any


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def validate_config(config: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    def add_error(path: str, message: str) -> None:
        errors.append(f"{path}: {message}")

    file_extensions = config.get("file_extensions", {})
    still_exts = file_extensions.get("still", [])
    video_exts = file_extensions.get("video", [])
    native_exts = file_extensions.get("native_still", [])
    for key, value in (
        ("file_extensions.still", still_exts),
        ("file_extensions.video", video_exts),
        ("file_extensions.native_still", native_exts),
    ):
        if not _is_str_list(value):
            add_error(key, "必須是字串清單")
        elif any(not item.startswith(".") for item in value):
            add_error(key, "副檔名必須以 . 開頭")
    if _is_str_list(still_exts) and _is_str_list(video_exts):
        overlap = {item.lower() for item in still_exts} & {item.lower() for item in video_exts}
        if overlap:
            add_error("file_extensions", f"靜態影像與影片副檔名重疊: {sorted(overlap)}")
    if _is_str_list(still_exts) and _is_str_list(native_exts):
        missing = {item.lower() for item in native_exts} - {item.lower() for item in still_exts}
        if missing:
            add_error("file_extensions.native_still", f"必須包含於 file_extensions.still: {sorted(missing)}")

    pairing = config.get("pairing", {})
    case_sensitive = pairing.get("case_sensitive", "auto")
    if case_sensitive != "auto" and not isinstance(case_sensitive, bool):
        add_error("pairing.case_sensitive", "必須是 auto 或布林值")
    if not _is_str_list(pairing.get("video_ext_priority", [])):
        add_error("pairing.video_ext_priority", "必須是字串清單")

    output = config.get("output", {})
    for key in ("root", "other_files_folder", "problem_report_name"):
        value = output.get(key)
        if not isinstance(value, str) or not value.strip():
            add_error(f"output.{key}", "必須是非空字串")

    mux = config.get("mux", {})
    if not isinstance(mux.get("overwrite", True), bool):
        add_error("mux.overwrite", "必須是布林值")
    if not _is_positive_int(mux.get("chunk_size_kb", 1024)):
        add_error("mux.chunk_size_kb", "必須是正整數")
    if not _is_positive_int(mux.get("sequence_digits", 3)):
        add_error("mux.sequence_digits", "必須是正整數")

    metadata = config.get("metadata", {})
    exiftool_path = metadata.get("exiftool_path", "exiftool")
    if not isinstance(exiftool_path, str) or not exiftool_path.strip():
        add_error("metadata.exiftool_path", "必須是非空字串")
    if not _is_positive_number(metadata.get("task_timeout_sec", 5.0)):
        add_error("metadata.task_timeout_sec", "必須是大於 0 的數值")
    if not _is_positive_int(metadata.get("max_concurrent", 4)):
        add_error("metadata.max_concurrent", "必須是正整數")
    timestamp_us = metadata.get("presentation_timestamp_us", 1500000)
    if not isinstance(timestamp_us, int) or isinstance(timestamp_us, bool) or timestamp_us < 0:
        add_error("metadata.presentation_timestamp_us", "必須是大於等於 0 的整數")

    quality = config.get("transcode", {}).get("jpeg_quality", 95)
    if not isinstance(quality, int) or isinstance(quality, bool):
        add_error("transcode.jpeg_quality", "必須是整數")
    elif not (1 <= quality <= 100):
        add_error("transcode.jpeg_quality", "必須介於 1 到 100")

    if not _is_positive_int(config.get("pipeline", {}).get("max_workers", 4)):
        add_error("pipeline.max_workers", "必須是正整數")

    retry = config.get("retry", {})
    max_retries = retry.get("max_retries", 3)
    backoff_base_sec = retry.get("backoff_base_sec", 0.5)
    backoff_cap_sec = retry.get("backoff_cap_sec", 5.0)
    if not isinstance(max_retries, int) or isinstance(max_retries, bool) or max_retries < 0:
        add_error("retry.max_retries", "必須是大於等於 0 的整數")
    if not _is_positive_number(backoff_base_sec):
        add_error("retry.backoff_base_sec", "必須是大於 0 的數值")
    if not _is_positive_number(backoff_cap_sec):
        add_error("retry.backoff_cap_sec", "必須是大於 0 的數值")
    if (
        _is_positive_number(backoff_base_sec)
        and _is_positive_number(backoff_cap_sec)
        and backoff_base_sec > backoff_cap_sec
    ):
        add_error("retry", "backoff_base_sec 不可大於 backoff_cap_sec")

    return errors
