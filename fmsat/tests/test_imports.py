import pytest
import fmsat
from fmsat.core import FmsatError, SolverError, SolverTimeout, SolverUnavailable, StackImbalance, EmptyStackError

def test_lazy_exports():
    """Verify that the top-level names resolve lazily."""
    assert fmsat.IncrementalSolver is not None
    assert fmsat.ConfigurationBuilder is not None
    assert fmsat.FeatureModel is not None

def test_unknown_attribute():
    with pytest.raises(AttributeError):
        fmsat.DoesNotExist

def test_submodule_imports():
    """Verify submodule imports."""
    import fmsat.ir.ir_compile
    import fmsat.model.encoding
    import fmsat.solver.incremental
    import fmsat.analysis.implication
    import fmsat.analysis.counting
    import fmsat.generator.enumerator
    import fmsat.generator.builder
    import fmsat.schedule.scheduler
    import fmsat.schedule.workers

def test_error_hierarchy():
    assert issubclass(SolverTimeout, SolverError)
    assert issubclass(SolverUnavailable, SolverError)
    assert issubclass(EmptyStackError, StackImbalance)
    assert issubclass(StackImbalance, FmsatError)
