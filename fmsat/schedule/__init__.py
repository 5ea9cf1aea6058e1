from fmsat.schedule.sorters import ConfigurationSorter, DifferenceSorter, InteractionSorter, create_sorter
from fmsat.schedule.scheduler import BuildProgress, BuildState, BackpressuredScheduler
from fmsat.schedule.workers import BuildWorkerPool

__all__ = [
    "ConfigurationSorter", "DifferenceSorter", "InteractionSorter", "create_sorter",
    "BuildProgress", "BuildState", "BackpressuredScheduler",
    "BuildWorkerPool"
]
