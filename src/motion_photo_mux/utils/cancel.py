"""批次取消：Ctrl-C 轉為協作式取消。"""

from __future__ import annotations

from contextlib import contextmanager
import signal
import threading
from typing import Iterator

from .logger import get_logger


class CancelledError(Exception):
    """配對處理途中收到取消要求。"""


class CancellationToken:
    """各 worker 在複製區塊之間檢查，收到取消後不再開始新的配對。"""

    def __init__(self) -> None:
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()


@contextmanager
def interrupt_cancels(token: CancellationToken, logger=None) -> Iterator[CancellationToken]:
    """區塊執行期間，第一次 SIGINT 只設定 token，第二次才中斷程式。

    進行中的合併會在下一個區塊停止並清除暫存檔，已完成的輸出不受影響。
    只能在主執行緒使用。
    """
    logger = logger or get_logger("Cancel")
    previous = signal.getsignal(signal.SIGINT)

    def _handle(signum, frame) -> None:
        if token.is_cancelled():
            raise KeyboardInterrupt
        logger.warning("收到中斷訊號，完成目前區塊後停止；再按一次 Ctrl-C 強制結束")
        token.set()

    signal.signal(signal.SIGINT, _handle)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)
