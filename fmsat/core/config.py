import json
import os
from typing import Optional

from pydantic import BaseModel, Field

from fmsat.core.logging import get_logger
from fmsat.core.types import MAX_SOLUTION_BUFFER, BuildType, OrderingPolicy

logger = get_logger(__name__)

class AnalysisConfig(BaseModel):
    """Configuration shared by the analyses and the configuration builder."""
    solver_name: str = "g3"
    timeout_seconds: Optional[float] = Field(default=None, gt=0)
    conflict_budget: Optional[int] = Field(default=None, gt=0)

    # Implication checking
    max_solution_buffer: int = Field(default=MAX_SOLUTION_BUFFER, ge=1)

    # Configuration building
    build_type: BuildType = BuildType.ALL_VALID
    ordering: OrderingPolicy = OrderingPolicy.INSERTION
    buffer_first: bool = False
    max_buffer_size: int = Field(default=500, ge=1)
    t: int = Field(default=2, ge=1)
    workers: Optional[int] = Field(default=None, ge=1)
    count_first: bool = False
    count_limit: int = Field(default=1_000_000, ge=1)
    wait_interval: float = Field(default=1.0, gt=0)

    def worker_count(self) -> int:
        if self.workers:
            return self.workers
        return (os.cpu_count() or 1) * 2

    @staticmethod
    def from_env_or_file() -> 'AnalysisConfig':
        # 1. Try Env Var
        env_solver = os.environ.get("FMSAT_SOLVER")
        if env_solver:
            return AnalysisConfig(solver_name=env_solver)

        # 2. Try Config Path
        config_path = os.environ.get("FMSAT_CONFIG_PATH")
        if config_path and os.path.exists(config_path):
            try:
                with open(config_path, 'r') as f:
                    return AnalysisConfig.model_validate(json.load(f))
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable config {config_path}: {e}")

        # Default
        return AnalysisConfig()
