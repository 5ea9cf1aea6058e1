import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from fmsat.core.logging import get_logger
from fmsat.generator.types import BuilderConfiguration
from fmsat.schedule.scheduler import BackpressuredScheduler

logger = get_logger(__name__)

BuildFn = Callable[[BuilderConfiguration], Any]

class BuildWorkerPool:
    """
    Runs `build` for every configuration the scheduler hands out, on a fixed
    number of threads. A build that raises or returns False counts as failed;
    it never stops the other workers.
    """
    def __init__(self, scheduler: BackpressuredScheduler, build: BuildFn, workers: Optional[int] = None):
        self.scheduler = scheduler
        self.build = build
        self.workers = workers if workers else (os.cpu_count() or 1) * 2
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []

    def start(self):
        if self._executor is not None:
            return
        self._executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="fmsat-build")
        self._futures = [self._executor.submit(self._work) for _ in range(self.workers)]
        logger.debug(f"Started {self.workers} build workers")

    def _work(self):
        while True:
            cfg = self.scheduler.wait_for_configuration(self.scheduler.wait_interval)
            if cfg is None:
                if self.scheduler.done:
                    return
                continue
            try:
                ok = self.build(cfg) is not False
            except Exception as e:
                logger.warning(f"Build of configuration {cfg.number} failed: {e}")
                ok = False
            self.scheduler.mark_built(ok)

    def join(self):
        """Waits for every worker to see the end of the stream."""
        if self._executor is None:
            return
        try:
            for f in self._futures:
                f.result()
        finally:
            self._executor.shutdown(wait=True)
            self._executor = None
            self._futures = []

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.scheduler.cancel()
        self.join()
