import threading
import time
from dataclasses import dataclass
from typing import Optional

from fmsat.core.logging import get_logger
from fmsat.core.monitor import Monitor
from fmsat.generator.types import BuilderConfiguration
from fmsat.schedule.sorters import ConfigurationSorter

logger = get_logger(__name__)

@dataclass(frozen=True)
class BuildProgress:
    emitted: int
    built: int
    failed: int
    buffered: int
    finished: bool
    cancelled: bool

    @property
    def completed(self) -> int:
        return self.built + self.failed

class BuildState:
    """Counters and flags of one run. Only touched under the scheduler lock."""
    def __init__(self):
        self.emitted = 0
        self.built = 0
        self.failed = 0
        self.finished = False
        self.cancelled = False

class BackpressuredScheduler:
    """
    Bounded hand-off between one configuration producer and the build workers.

    The producer blocks in `add_configuration` while `max_size` configurations
    are waiting, unless buffer-first mode is on: then everything is buffered,
    nothing is handed out until `sort()` has ordered the whole buffer once.
    Blocked callers wake at least every `wait_interval` seconds to notice
    cancellation of the shared monitor.
    """
    def __init__(
        self,
        sorter: Optional[ConfigurationSorter] = None,
        max_size: int = 500,
        buffer_first: bool = False,
        monitor: Optional[Monitor] = None,
        wait_interval: float = 1.0
    ):
        self.sorter = sorter if sorter is not None else ConfigurationSorter()
        self.max_size = max_size
        self.buffer_first = buffer_first
        self.monitor = monitor if monitor is not None else Monitor()
        self.wait_interval = wait_interval
        self.state = BuildState()
        self._cond = threading.Condition()

    # --- Producer side ---

    def add_configuration(self, cfg: BuilderConfiguration) -> bool:
        """Returns False if the run was cancelled; the configuration is dropped then."""
        with self._cond:
            while not self._cancelled() and not self.buffer_first and len(self.sorter) >= self.max_size:
                self._cond.wait(self.wait_interval)
            if self._cancelled():
                return False
            self.sorter.add(cfg)
            self.state.emitted += 1
            self._cond.notify_all()
            return True

    def sort(self):
        with self._cond:
            if self.sorter.sorted:
                return
            logger.debug(f"Sorting {len(self.sorter)} buffered configurations")
            self.sorter.sort(self.monitor)
            self._cond.notify_all()

    def set_buffer_first(self, buffer_first: bool):
        with self._cond:
            self.buffer_first = buffer_first
            self._cond.notify_all()

    def finish(self):
        with self._cond:
            self.state.finished = True
            self._cond.notify_all()

    def cancel(self):
        with self._cond:
            self.state.cancelled = True
            self.monitor.cancel()
            self._cond.notify_all()

    # --- Consumer side ---

    def get_configuration(self) -> Optional[BuilderConfiguration]:
        """
        Next configuration according to the ordering policy, or None when
        nothing can be handed out right now. Use `done` to tell an empty
        buffer from the end of the stream.
        """
        with self._cond:
            return self._next()

    def wait_for_configuration(self, timeout: Optional[float] = None) -> Optional[BuilderConfiguration]:
        """Blocks until a configuration is available; None on timeout or end of stream."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                cfg = self._next()
                if cfg is not None or self._done():
                    return cfg
                wait = self.wait_interval
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return None
                    wait = min(wait, remaining)
                self._cond.wait(wait)

    def mark_built(self, success: bool):
        with self._cond:
            if success:
                self.state.built += 1
            else:
                self.state.failed += 1
            self._cond.notify_all()

    @property
    def done(self) -> bool:
        with self._cond:
            return self._done()

    def progress(self) -> BuildProgress:
        with self._cond:
            return BuildProgress(
                emitted=self.state.emitted,
                built=self.state.built,
                failed=self.state.failed,
                buffered=len(self.sorter),
                finished=self.state.finished,
                cancelled=self._cancelled()
            )

    # --- Internals, lock held ---

    def _cancelled(self) -> bool:
        return self.state.cancelled or self.monitor.cancelled

    def _next(self) -> Optional[BuilderConfiguration]:
        if self._cancelled():
            return None
        if self.buffer_first and not self.sorter.sorted:
            return None
        cfg = self.sorter.take()
        if cfg is not None:
            self._cond.notify_all()
        return cfg

    def _done(self) -> bool:
        if self._cancelled():
            return True
        if not self.state.finished:
            return False
        # An unsorted buffer-first run will never hand anything out
        return len(self.sorter) == 0 or (self.buffer_first and not self.sorter.sorted)
