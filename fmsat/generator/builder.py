import time
from typing import Optional

from fmsat.analysis.counting import count_configurations
from fmsat.core.config import AnalysisConfig
from fmsat.core.errors import ValidationError
from fmsat.core.logging import get_logger
from fmsat.core.monitor import Monitor
from fmsat.core.types import BuildType
from fmsat.generator.enumerator import ConfigurationEnumerator
from fmsat.generator.sampling import CoveringArrayGenerator, configurations_from_solutions
from fmsat.model.encoding import ModelEncoding, encode_feature_model
from fmsat.model.feature_model import FeatureModel
from fmsat.schedule.scheduler import BackpressuredScheduler, BuildProgress
from fmsat.schedule.sorters import create_sorter
from fmsat.schedule.workers import BuildFn, BuildWorkerPool
from fmsat.solver.backend import SolverBackend

logger = get_logger(__name__)

def format_duration(seconds: float) -> str:
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}h {minutes:02d}min {secs:02d}s"

class ConfigurationBuilder:
    """
    Produces configurations of a feature model and builds each of them with
    `build` on a pool of worker threads.

    ALL_VALID enumerates every valid configuration; T_WISE builds the sample
    returned by `sampler`. Cancelling the monitor stops the producer and the
    workers; configurations already being built are finished.
    """
    def __init__(
        self,
        model: FeatureModel,
        build: BuildFn,
        config: Optional[AnalysisConfig] = None,
        monitor: Optional[Monitor] = None,
        sampler: Optional[CoveringArrayGenerator] = None,
        backend: Optional[SolverBackend] = None
    ):
        self.model = model
        self.build = build
        self.config = config or AnalysisConfig()
        self.monitor = monitor if monitor is not None else Monitor()
        self.sampler = sampler
        self.backend = backend
        self.scheduler: Optional[BackpressuredScheduler] = None
        if self.config.build_type == BuildType.T_WISE and sampler is None:
            raise ValidationError("T-wise building requires a covering array generator")

    def cancel(self):
        self.monitor.cancel()

    def run(self) -> BuildProgress:
        started = time.monotonic()
        cfg = self.config
        encoding = encode_feature_model(self.model)
        backend = self.backend or SolverBackend.from_config(cfg)

        self.scheduler = BackpressuredScheduler(
            sorter=create_sorter(cfg.ordering, self.model, cfg.t),
            max_size=cfg.max_buffer_size,
            buffer_first=cfg.buffer_first,
            monitor=self.monitor,
            wait_interval=cfg.wait_interval
        )
        pool = BuildWorkerPool(self.scheduler, self.build, cfg.worker_count())
        pool.start()
        try:
            self._produce(encoding, backend)
            if cfg.buffer_first:
                self.scheduler.sort()
        except BaseException:
            self.scheduler.cancel()
            raise
        finally:
            self.scheduler.finish()
            pool.join()

        progress = self.scheduler.progress()
        logger.info(f"{progress.built} of {progress.emitted} configurations built in {format_duration(time.monotonic() - started)}.")
        if progress.failed:
            logger.warning(f"{progress.failed} configurations failed to build")
        return progress

    def _produce(self, encoding: ModelEncoding, backend: SolverBackend):
        if self.config.build_type == BuildType.T_WISE:
            solutions = self.sampler.generate(encoding, self.config.t, self.monitor)
            for c in configurations_from_solutions(solutions, encoding):
                if self.monitor.cancelled or not self.scheduler.add_configuration(c):
                    break
            return

        target = 0
        if self.config.count_first:
            target = count_configurations(encoding, backend, self.config.count_limit, self.monitor)
            logger.info(f"Building up to {target} configurations")
        ConfigurationEnumerator(
            encoding,
            sink=self.scheduler.add_configuration,
            backend=backend,
            target_count=target,
            monitor=self.monitor
        ).run()
