"""錯誤收集與報告工具。"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from typing import List, Optional

from ..models.error_record import ErrorLevel, ProcessError
from .errors import MotionPhotoError


@dataclass
class ErrorHandler:
    """集中管理錯誤與警告；可由多個 worker 同時 append。"""

    errors: List[ProcessError] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add(self, error: ProcessError) -> None:
        with self._lock:
            self.errors.append(error)

    def add_info(self, code: str, message: str, file_path: Optional[str] = None) -> None:
        self.add(ProcessError(code=code, level=ErrorLevel.INFO, message=message, file_path=file_path))

    def add_warning(self, code: str, message: str, file_path: Optional[str] = None) -> None:
        self.add(ProcessError(code=code, level=ErrorLevel.RECOVERABLE, message=message, file_path=file_path))

    def add_fatal(self, code: str, message: str, file_path: Optional[str] = None) -> None:
        self.add(ProcessError(code=code, level=ErrorLevel.FATAL, message=message, file_path=file_path))

    def add_exception(self, exc: MotionPhotoError, *, stage: str, file_path: Optional[str] = None) -> ProcessError:
        path = file_path if file_path is not None else (str(exc.path) if exc.path else None)
        level = ErrorLevel.FATAL if exc.code.startswith("E-") else ErrorLevel.RECOVERABLE
        error = ProcessError(code=exc.code, level=level, message=str(exc), file_path=path, stage=stage)
        self.add(error)
        return error

    def get_by_level(self, level: ErrorLevel) -> List[ProcessError]:
        with self._lock:
            return [error for error in self.errors if error.level == level]

    def snapshot(self) -> List[ProcessError]:
        with self._lock:
            return list(self.errors)
