"""預設設定值。"""

DEFAULT_CONFIG = {
    "file_extensions": {
        "still": [".jpg", ".jpeg", ".heic", ".heif"],
        "video": [".mov", ".mp4"],
        "native_still": [".heic", ".heif"],
    },
    "pairing": {
        "case_sensitive": "auto",
        "video_ext_priority": [".mov", ".mp4"],
    },
    "output": {
        "root": "output",
        "other_files_folder": "other_files",
        "problem_report_name": "problem_files.txt",
    },
    "mux": {
        "overwrite": True,
        "chunk_size_kb": 1024,
        "sequence_digits": 3,
    },
    "metadata": {
        "exiftool_path": "exiftool",
        "task_timeout_sec": 5.0,
        "max_concurrent": 4,
        "presentation_timestamp_us": 1500000,
    },
    "transcode": {
        "jpeg_quality": 95,
    },
    "pipeline": {
        "max_workers": 4,
    },
    "retry": {
        "max_retries": 3,
        "backoff_base_sec": 0.5,
        "backoff_cap_sec": 5.0,
    },
}
