import pytest

from fmsat.core.errors import SolverError, SolverTimeout, SolverUnavailable, StackImbalance, TranslationError
from fmsat.core.types import PushOutcome, SatOutcome
from fmsat.ir import And, Imp, Not, Or, lit
from fmsat.model import Feature, FeatureModel, GroupType, encode_feature_model
from fmsat.solver import IncrementalSolver, ProverSession, SolverBackend

def make_encoding():
    # R(AND): A optional, B optional, C(ALT): X | Y ; A -> X
    model = FeatureModel(
        root=Feature(name="R", children=[
            Feature(name="A"),
            Feature(name="B"),
            Feature(name="C", group=GroupType.ALTERNATIVE, mandatory=True, children=[
                Feature(name="X"),
                Feature(name="Y"),
            ]),
        ]),
        constraints=[Imp(a=lit("A"), b=lit("X"))]
    )
    return encode_feature_model(model)

@pytest.fixture
def solver():
    return IncrementalSolver(make_encoding(), SolverBackend("m22"))

def test_base_is_satisfiable(solver):
    assert solver.is_satisfiable() == SatOutcome.SAT
    model = solver.find_model()
    assert len(model) == 6
    assert 1 in model

def test_push_and_pop_change_answer(solver):
    assert solver.push(lit("A")) == PushOutcome.APPLIED
    assert solver.push(lit("Y")) == PushOutcome.APPLIED
    assert solver.is_satisfiable() == SatOutcome.UNSAT
    assert solver.find_model() is None
    assert solver.pop() == lit("Y")
    assert solver.is_satisfiable() == SatOutcome.SAT
    model = solver.find_model()
    assert 2 in model and 5 in model
    solver.pop()
    assert solver.depth == 0

def test_contradiction_with_base_unit(solver):
    # the root is a unit of the base model
    assert solver.push(lit("R", neg=True)) == PushOutcome.IMMEDIATELY_CONTRADICTORY
    assert solver.depth == 1
    solver.pop()
    assert solver.depth == 0

def test_contradiction_with_stack_unit(solver):
    solver.push(lit("A"))
    assert solver.push(lit("A", neg=True)) == PushOutcome.IMMEDIATELY_CONTRADICTORY
    solver.pop_many(2)
    # the units of popped entries no longer count
    assert solver.push(lit("A", neg=True)) == PushOutcome.APPLIED

def test_self_contradictory_push(solver):
    assert solver.push(And(terms=[lit("B"), lit("B", neg=True)])) == PushOutcome.IMMEDIATELY_CONTRADICTORY

def test_push_literal(solver):
    solver.push_literal(-2)
    assert solver.stack.source_of(solver.stack.snapshot_formulas()[0].selector) == lit("A", neg=True)
    with pytest.raises(TranslationError):
        solver.push_literal(99)
    assert solver.depth == 1

def test_assume_is_balanced(solver):
    with solver.assume(lit("A"), lit("B")) as outcomes:
        assert outcomes == [PushOutcome.APPLIED, PushOutcome.APPLIED]
        assert solver.depth == 2
    assert solver.depth == 0

    with pytest.raises(ValueError):
        with solver.assume(lit("A")):
            raise ValueError("boom")
    assert solver.depth == 0

def test_assume_pops_partial_push_on_translation_error(solver):
    with pytest.raises(TranslationError):
        with solver.assume(lit("A"), lit("missing")):
            pass
    assert solver.depth == 0

def test_assume_detects_imbalance(solver):
    solver.push(lit("B"))
    with pytest.raises(StackImbalance):
        with solver.assume(lit("A")):
            solver.pop_many(2)

def test_minimal_unsatisfiable_subset(solver):
    assert solver.minimal_unsatisfiable_subset() is None
    solver.push(lit("B"))
    solver.push(lit("A"))
    solver.push(lit("Y"))
    mus = solver.minimal_unsatisfiable_subset()
    # A -> X, X and Y exclude each other, A, Y; B is irrelevant
    assert lit("A") in mus
    assert lit("Y") in mus
    assert Imp(a=lit("A"), b=lit("X")) in mus
    assert Not(term=And(terms=[lit("X"), lit("Y")])) in mus
    assert lit("B") not in mus
    assert len(mus) == 4

def test_backend_failure_is_unknown(solver, monkeypatch):
    def broken():
        raise SolverError("backend gone")
    monkeypatch.setattr(solver.backend, "session", broken)
    assert solver.is_satisfiable() == SatOutcome.UNKNOWN
    assert solver.find_model() is None
    assert solver.minimal_unsatisfiable_subset() is None

def test_solvers_do_not_share_variables():
    enc = make_encoding()
    s1 = IncrementalSolver(enc, SolverBackend("m22"))
    before = enc.var_manager.max_id
    s1.push(lit("A"))
    IncrementalSolver(enc, SolverBackend("m22"))
    assert enc.var_manager.max_id == before

def test_unavailable_backend_propagates(solver, monkeypatch):
    def gone():
        raise SolverUnavailable("backend gone")
    monkeypatch.setattr(solver.backend, "session", gone)
    with pytest.raises(SolverUnavailable):
        solver.is_satisfiable()
    with pytest.raises(SolverUnavailable):
        solver.find_model()
    with pytest.raises(SolverUnavailable):
        solver.minimal_unsatisfiable_subset()

def test_session_closed_when_loading_fails(solver, monkeypatch):
    added = []
    closed = []
    original_close = ProverSession.close

    def failing_add(self, formula):
        added.append(formula)
        if len(added) == 2:
            raise RuntimeError("add failed")

    def counting_close(self):
        closed.append(self)
        original_close(self)

    monkeypatch.setattr(ProverSession, "add_constraint", failing_add)
    monkeypatch.setattr(ProverSession, "close", counting_close)
    with pytest.raises(RuntimeError):
        solver.is_satisfiable()
    assert len(closed) == 1

def pigeonhole_encoding(pigeons=7, holes=6):
    """P selects the pigeonhole principle instance, which is unsatisfiable but hard to refute."""
    names = [f"p{i}_{h}" for i in range(pigeons) for h in range(holes)]
    constraints = []
    for i in range(pigeons):
        constraints.append(Imp(a=lit("P"), b=Or(terms=[lit(f"p{i}_{h}") for h in range(holes)])))
    for h in range(holes):
        for i in range(pigeons):
            for j in range(i + 1, pigeons):
                constraints.append(Not(term=And(terms=[lit(f"p{i}_{h}"), lit(f"p{j}_{h}")])))
    model = FeatureModel(
        root=Feature(name="R", abstract=True, children=[Feature(name="P"), Feature(name="Q")] + [Feature(name=n) for n in names]),
        constraints=constraints
    )
    return encode_feature_model(model)

def test_budget_exhaustion_is_unknown():
    solver = IncrementalSolver(pigeonhole_encoding(), SolverBackend("m22", conflict_budget=10))
    with solver.assume(lit("P")):
        assert solver.is_satisfiable() == SatOutcome.UNKNOWN
        assert solver.find_model() is None
        assert solver.minimal_unsatisfiable_subset() is None
    assert solver.depth == 0

def test_limited_session_raises_timeout():
    enc = pigeonhole_encoding()
    solver = IncrementalSolver(enc, SolverBackend("m22", timeout=30.0, conflict_budget=10))
    solver.push(lit("P"))
    with solver.open_session() as prover:
        with pytest.raises(SolverTimeout):
            prover.is_unsat()
        # the session stays usable after an interrupted query
        assert not prover.is_unsat(prover.selectors[:-1])

def test_unlimited_backend_refutes_pigeonhole():
    solver = IncrementalSolver(pigeonhole_encoding(5, 4), SolverBackend("m22"))
    with solver.assume(lit("P")):
        assert solver.is_satisfiable() == SatOutcome.UNSAT
