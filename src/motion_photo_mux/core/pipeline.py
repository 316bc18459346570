"""Batch coordinator: resolve -> (transcode) -> mux -> annotate per pair."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
import tempfile
from typing import Callable, Iterable, List, Optional

from ..config import ConfigManager
from ..models import BatchResult, MediaPair, PairOutcome, PairStatus
from ..utils import path_utils, reporting
from ..utils.cancel import CancelledError, CancellationToken
from ..utils.error_handler import ErrorHandler
from ..utils.errors import InvalidInputError, MotionPhotoError, ValidationError
from ..utils.logger import get_logger
from ..utils.metadata_service import ExifToolService, MetadataService
from .housekeeping import Housekeeper
from .muxer import Muxer
from .offset_annotator import OffsetAnnotator
from .pair_resolver import PairResolver
from .transcoder import StillTranscoder


@dataclass
class RunOptions:
    move_unmatched: bool = False
    force_convert_all: bool = False
    delete_merged_sources: bool = False
    copy_unmatched: bool = False

    def validate(self) -> None:
        if self.move_unmatched and self.copy_unmatched:
            raise InvalidInputError("move_unmatched 與 copy_unmatched 不可同時啟用")


class MotionPhotoPipeline:
    def __init__(
        self,
        config: ConfigManager,
        metadata_service: Optional[MetadataService] = None,
        logger=None,
    ) -> None:
        self.config = config
        self.logger = logger or get_logger(self.__class__.__name__)
        self.resolver = PairResolver(config, self.logger)
        self.muxer = Muxer(config, self.logger)
        self.transcoder = StillTranscoder(config, self.logger)
        self.metadata_service = metadata_service or ExifToolService.from_config(config, self.logger)
        self.annotator = OffsetAnnotator(config, self.metadata_service, self.logger)
        self.housekeeper = Housekeeper(config, self.logger)
        self.max_workers = int(config.get("pipeline.max_workers", 4))
        self.sequence_digits = int(config.get("mux.sequence_digits", 3))
        self.other_files_folder = str(config.get("output.other_files_folder", "other_files"))
        self.report_name = str(config.get("output.problem_report_name", reporting.DEFAULT_REPORT_NAME))

    def run_directory(
        self,
        source_dir: Path,
        output_root: Path,
        options: Optional[RunOptions] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> BatchResult:
        options = options or RunOptions()
        options.validate()
        # 資料夾錯誤為致命錯誤，直接往外拋
        resolved = self.resolver.resolve_directory(source_dir)

        errors = ErrorHandler()
        result = BatchResult()
        claims = path_utils.OutputClaims(self.sequence_digits)
        result.outcomes = self._process_pairs(
            resolved.pairs,
            output_root,
            errors,
            claims,
            cancel_token=cancel_token,
            progress_callback=progress_callback,
        )
        if cancel_token is not None and cancel_token.is_cancelled():
            self.logger.warning("已取消，略過未配對檔案的後續處理")
            result.unmatched = resolved.unmatched
            return self._finish(result, errors, output_root)

        leftover = resolved.unmatched
        if options.force_convert_all:
            natives = [path for path in resolved.unmatched_stills if self.transcoder.needs_conversion(path)]
            result.converted = self._convert_only(natives, output_root, errors, claims)
            attempted = set(natives)
            leftover = [path for path in leftover if path not in attempted]
        result.unmatched = leftover

        if leftover and options.move_unmatched:
            moved = self.housekeeper.relocate(leftover, output_root / self.other_files_folder, claims)
            result.relocated = moved.done
            for error in moved.failed:
                errors.add(error)
        elif leftover and options.copy_unmatched:
            copied = self.housekeeper.copy_through(leftover, output_root, claims)
            result.copied = copied.done
            for error in copied.failed:
                errors.add(error)

        if options.delete_merged_sources:
            self._delete_sources(result, errors)

        return self._finish(result, errors, output_root)

    def run_pair(
        self,
        still_path: Path,
        video_path: Path,
        output_root: Path,
        options: Optional[RunOptions] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BatchResult:
        options = options or RunOptions()
        pair = self.resolver.build_explicit_pair(still_path, video_path)

        errors = ErrorHandler()
        result = BatchResult()
        result.outcomes = [self.process_pair(pair, output_root, errors, cancel_token=cancel_token)]
        if options.delete_merged_sources:
            self._delete_sources(result, errors)
        return self._finish(result, errors, output_root)

    def process_pair(
        self,
        pair: MediaPair,
        output_root: Path,
        errors: ErrorHandler,
        *,
        output_path: Optional[Path] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PairOutcome:
        """單一配對依序執行轉檔、合併、寫入 metadata，步驟之間不可並行。"""
        if output_path is None:
            output_path = self.plan_output(pair, output_root)
        if cancel_token is not None and cancel_token.is_cancelled():
            return PairOutcome(pair=pair, status=PairStatus.CANCELLED)

        stage = "validate"
        artifact = None
        try:
            self.muxer.validate_media(pair.still_path, pair.video_path)
            with tempfile.TemporaryDirectory(prefix="motion_photo_") as work_dir:
                mux_pair = pair
                if self.transcoder.needs_conversion(pair.still_path):
                    stage = "transcode"
                    converted = self.transcoder.convert(pair.still_path, Path(work_dir))
                    mux_pair = MediaPair(still_path=converted, video_path=pair.video_path)
                stage = "mux"
                artifact = self.muxer.mux(
                    mux_pair,
                    output_root,
                    output_path=output_path,
                    cancel_token=cancel_token,
                )
            stage = "annotate"
            metadata = self.annotator.annotate(artifact.output_path, artifact.still_byte_length)
        except CancelledError:
            self.logger.warning(f"已取消: {pair.still_path}")
            return PairOutcome(pair=pair, status=PairStatus.CANCELLED)
        except ValidationError as exc:
            self.logger.warning(f"略過配對: {exc}")
            error = errors.add_exception(exc, stage=stage, file_path=str(pair.still_path))
            return PairOutcome(pair=pair, status=PairStatus.SKIPPED, error=error)
        except MotionPhotoError as exc:
            self.logger.error(f"{stage} 失敗: {exc}")
            error = errors.add_exception(exc, stage=stage, file_path=str(pair.still_path))
            # 寫入 metadata 失敗時保留合併檔，可稍後重新寫入而不必重新合併
            return PairOutcome(pair=pair, status=PairStatus.FAILED, artifact=artifact, error=error)

        return PairOutcome(pair=pair, status=PairStatus.SUCCESS, artifact=artifact, metadata=metadata)

    def plan_output(
        self,
        pair: MediaPair,
        output_root: Path,
        claims: Optional[path_utils.OutputClaims] = None,
    ) -> Path:
        """HEIC 會先轉成 ``<stem>.jpg``，輸出檔名以轉檔後的名稱為準。"""
        name = pair.still_path.name
        if self.transcoder.needs_conversion(pair.still_path):
            name = self.transcoder.output_name(pair.still_path)
        output_path = self.muxer.output_path_for(Path(name), output_root, claims)
        if output_path.name != name:
            self.logger.warning(f"輸出名稱 {name} 已被使用，改為 {output_path.name}: {pair.still_path}")
        return output_path

    def _process_pairs(
        self,
        pairs: List[MediaPair],
        output_root: Path,
        errors: ErrorHandler,
        claims: path_utils.OutputClaims,
        *,
        cancel_token: Optional[CancellationToken],
        progress_callback: Optional[Callable[[int, int], None]],
    ) -> List[PairOutcome]:
        total = len(pairs)
        outcomes: List[PairOutcome] = []
        # 依檔名順序先登記輸出路徑，再交給 worker，結果與並行數無關
        planned = [(pair, self.plan_output(pair, output_root, claims)) for pair in pairs]

        if self.max_workers <= 1 or total <= 1:
            for pair, output_path in planned:
                outcomes.append(
                    self.process_pair(
                        pair,
                        output_root,
                        errors,
                        output_path=output_path,
                        cancel_token=cancel_token,
                    )
                )
                if progress_callback is not None:
                    progress_callback(len(outcomes), total)
            return outcomes

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(
                    self.process_pair,
                    pair,
                    output_root,
                    errors,
                    output_path=output_path,
                    cancel_token=cancel_token,
                )
                for pair, output_path in planned
            ]
            for future in as_completed(futures):
                outcomes.append(future.result())
                if progress_callback is not None:
                    progress_callback(len(outcomes), total)

        outcomes.sort(key=lambda item: item.pair.still_path.name)
        return outcomes

    def _convert_only(
        self,
        stills: Iterable[Path],
        output_root: Path,
        errors: ErrorHandler,
        claims: path_utils.OutputClaims,
    ) -> List[Path]:
        converted: List[Path] = []
        for still in stills:
            output_path = claims.claim(
                output_root,
                self.transcoder.output_name(still),
                allow_existing=self.muxer.overwrite,
            )
            try:
                converted.append(self.transcoder.convert(still, output_root, output_path=output_path))
            except MotionPhotoError as exc:
                self.logger.error(f"轉檔失敗: {exc}")
                errors.add_exception(exc, stage="transcode", file_path=str(still))
        return converted

    def _delete_sources(self, result: BatchResult, errors: ErrorHandler) -> None:
        stills = [outcome.pair.still_path for outcome in result.succeeded]
        deleted = self.housekeeper.delete_sources(stills)
        result.deleted = deleted.done
        for error in deleted.failed:
            errors.add(error)

    def _finish(self, result: BatchResult, errors: ErrorHandler, output_root: Path) -> BatchResult:
        result.problems = errors.snapshot()
        result.report_path = reporting.write_problem_report(
            output_root,
            result.problems,
            report_name=self.report_name,
        )
        if result.report_path is not None:
            self.logger.warning(f"{len(result.problems)} 個檔案有問題，清單: {result.report_path}")
        return result
