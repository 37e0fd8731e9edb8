"""Progress reporting for chunked uploads."""
import inspect
import logging
from typing import Optional

from ..protocols import ProgressCallback

logger = logging.getLogger(__name__)


class ProgressReporter:
    """
    Forwards cumulative upload progress to a listener.

    The listener may be a plain function or a coroutine function and receives
    ``processed_bytes / total_bytes`` as a float in ``[0, 1]``. Reported values
    never decrease. Listener failures are logged, never raised.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self._callback = callback
        self._last = 0.0
        self._reports = 0

    @property
    def last(self) -> float:
        return self._last

    @property
    def reports(self) -> int:
        return self._reports

    async def report(self, processed: int, total: int) -> float:
        """Report progress; a zero total counts as complete."""
        ratio = 1.0 if total <= 0 else processed / total
        ratio = min(max(ratio, self._last), 1.0)
        self._last = ratio
        self._reports += 1

        if self._callback is None:
            return ratio

        try:
            if inspect.iscoroutinefunction(self._callback):
                await self._callback(ratio)
            else:
                result = self._callback(ratio)
                if inspect.isawaitable(result):
                    await result
        except Exception as e:
            logger.error(f"Error in progress listener: {e}")
        return ratio
