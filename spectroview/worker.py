"""
Background spectrogram requests for interactive callers.

A UI thread submits work and later polls a single result slot. Only the most
recent request may fill that slot: when a newer request has been submitted,
results from older ones are dropped on completion.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from spectroview.config import SpectrogramConfig
from spectroview.errors import PipelineError
from spectroview.image import PixelImage
from spectroview.pipeline import Source, generate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    request_id: int
    image: Optional[PixelImage] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SpectrogramWorker:
    def __init__(self, executor: Optional[ThreadPoolExecutor] = None):
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="spectroview")
        self._owns_executor = executor is None
        self._lock = threading.Lock()
        self._latest_id = 0
        self._latest_future: Optional[Future] = None
        self._slot: Optional[PipelineResult] = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._latest_future is not None and not self._latest_future.done()

    @property
    def latest_request_id(self) -> int:
        with self._lock:
            return self._latest_id

    def submit(self, source: Source, config: Optional[SpectrogramConfig] = None) -> int:
        with self._lock:
            self._latest_id += 1
            request_id = self._latest_id
            # A result from a superseded request must not be read after this point.
            self._slot = None
            if self._latest_future is not None and self._latest_future.cancel():
                logger.debug("Cancelled queued request %d", request_id - 1)
            future = self._executor.submit(self._run, request_id, source, config)
            self._latest_future = future
        logger.debug("Submitted spectrogram request %d for %s", request_id, source)
        return request_id

    def _run(self, request_id: int, source: Source, config: Optional[SpectrogramConfig]) -> PipelineResult:
        try:
            result = PipelineResult(request_id=request_id, image=generate(source, config))
        except PipelineError as exc:
            logger.debug("Spectrogram request %d failed: %s", request_id, exc)
            result = PipelineResult(request_id=request_id, error=exc)

        with self._lock:
            if request_id == self._latest_id:
                self._slot = result
            else:
                logger.debug("Discarding result of superseded request %d (latest is %d)", request_id, self._latest_id)
        return result

    def poll(self) -> Optional[PipelineResult]:
        """Take the finished result of the latest request, if any. Read-once."""
        with self._lock:
            result, self._slot = self._slot, None
        return result

    def wait(self, timeout: Optional[float] = None) -> Optional[PipelineResult]:
        """
        Block until the latest request finishes and return poll().
        Raises concurrent.futures.TimeoutError if it does not finish in time.
        """
        with self._lock:
            future = self._latest_future
        if future is None:
            return None
        future.result(timeout=timeout)
        return self.poll()

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "SpectrogramWorker":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
