from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .config import ConfigManager, parse_case_mode
from .core import MotionPhotoPipeline, RunOptions
from .utils import reporting
from .utils.cancel import CancellationToken, interrupt_cancels
from .utils.errors import InvalidInputError, NotFoundError
from .utils.logger import configure_logging


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    print(f"motion-photo-mux v{__version__}")
    configure_logging(verbose=args.verbose)

    config = _load_config(args)
    output_root = Path(args.output or config.get("output.root", "output"))
    options = RunOptions(
        move_unmatched=args.move_unmatched,
        force_convert_all=args.force_convert,
        delete_merged_sources=args.delete_merged,
        copy_unmatched=args.copy_all,
    )

    if not args.dir:
        _check_pair_args(args)

    pipeline = MotionPhotoPipeline(config)
    try:
        with interrupt_cancels(CancellationToken()) as token:
            if args.dir:
                source = args.dir
                result = pipeline.run_directory(Path(args.dir), output_root, options, cancel_token=token)
            else:
                source = f"{args.photo} + {args.video}"
                result = pipeline.run_pair(
                    Path(args.photo),
                    Path(args.video),
                    output_root,
                    options,
                    cancel_token=token,
                )
    except (NotFoundError, InvalidInputError) as exc:
        _fail(str(exc))

    print(reporting.build_summary_text(result, source=source, output_root=output_root), end="")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="motion_photo_mux",
        description="Merge Live Photo still + video pairs into Motion Photo JPEGs.",
    )
    parser.add_argument("--config", help="Path to config file", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Show logging messages")
    parser.add_argument(
        "-d",
        "--dir",
        help="Process a directory for photo/video pairs. Takes precedence over --photo/--video",
    )
    parser.add_argument("-p", "--photo", help="Path to the still image of a single pair")
    parser.add_argument("-V", "--video", help="Path to the MOV/MP4 video of a single pair")
    parser.add_argument("-o", "--output", help="Output folder (default from config: output)")
    parser.add_argument("-c", "--copy-all", action="store_true", help="Copy unpaired files to the output folder")
    parser.add_argument(
        "-m",
        "--move-unmatched",
        action="store_true",
        help="Move unpaired files into the other_files subfolder of the output folder",
    )
    parser.add_argument(
        "-f",
        "--force-convert",
        action="store_true",
        help="Convert every HEIC/HEIF still to JPEG, even without a matching video",
    )
    parser.add_argument(
        "--delete-merged",
        action="store_true",
        help="Delete source stills whose motion photo was written successfully",
    )
    parser.add_argument("-w", "--workers", type=int, help="Number of pairs processed in parallel")
    parser.add_argument(
        "--case-sensitive",
        choices=["auto", "true", "false"],
        help="Whether file stems are compared case-sensitively (default: auto)",
    )
    return parser


def _load_config(args: argparse.Namespace) -> ConfigManager:
    try:
        config = ConfigManager(Path(args.config) if args.config else None)
    except (OSError, ValueError) as exc:
        _fail(f"無法讀取設定檔: {exc}")
    config.apply_overrides(
        {
            "pipeline.max_workers": args.workers,
            "pairing.case_sensitive": parse_case_mode(args.case_sensitive) if args.case_sensitive else None,
        }
    )

    errors = config.validate_config()
    if errors:
        _fail("設定錯誤:\n  " + "\n  ".join(errors))
    return config


def _check_pair_args(args: argparse.Namespace) -> None:
    if not args.photo and not args.video:
        _fail("Either --dir or --photo and --video are required.")
    if not args.photo or not args.video:
        _fail("Both --photo and --video must be provided.")


def _fail(message: str) -> None:
    print(message, file=sys.stderr)
    raise SystemExit(1)


if __name__ == "__main__":
    main()
