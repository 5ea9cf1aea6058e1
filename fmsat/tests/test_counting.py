import pytest

from fmsat.analysis import count_configurations
from fmsat.core.monitor import Monitor
from fmsat.ir import Imp, lit
from fmsat.model import Feature, FeatureModel, GroupType, encode_feature_model
from fmsat.generator import ConfigurationEnumerator
from fmsat.solver import SolverBackend

MODELS = [
    FeatureModel(root=Feature(name="R", abstract=True, group=GroupType.OR, children=[
        Feature(name="X"), Feature(name="Y"), Feature(name="Z")
    ])),
    FeatureModel(
        root=Feature(name="R", children=[
            Feature(name="A"),
            Feature(name="G", abstract=True, mandatory=True, group=GroupType.ALTERNATIVE, children=[
                Feature(name="X"), Feature(name="Y"), Feature(name="Z")
            ]),
        ]),
        constraints=[Imp(a=lit("A"), b=lit("Z", neg=True))]
    ),
    FeatureModel(root=Feature(name="R", abstract=True, children=[
        Feature(name="G", abstract=True, mandatory=True, group=GroupType.OR, children=[
            Feature(name="X"), Feature(name="E", abstract=True)
        ]),
    ])),
]

@pytest.mark.parametrize("model,expected", list(zip(MODELS, [7, 5, 2])))
def test_count_matches_enumeration(model, expected):
    enc = encode_feature_model(model)
    backend = SolverBackend("m22")
    assert count_configurations(enc, backend) == expected
    emitted = []
    ConfigurationEnumerator(enc, lambda c: emitted.append(c) or True, backend=backend).run()
    assert len(emitted) == expected

def test_limit_caps_count():
    enc = encode_feature_model(MODELS[0])
    assert count_configurations(enc, SolverBackend("m22"), limit=3) == 3

def test_abstract_only_model_has_one_configuration():
    enc = encode_feature_model(FeatureModel(root=Feature(name="R", abstract=True)))
    assert count_configurations(enc, SolverBackend("m22")) == 1

def test_void_model_has_no_configuration():
    enc = encode_feature_model(FeatureModel(root=Feature(name="R"), constraints=[lit("R", neg=True)]))
    assert count_configurations(enc, SolverBackend("m22")) == 0

def test_cancelled_count_returns_limit():
    monitor = Monitor()
    monitor.cancel()
    enc = encode_feature_model(MODELS[0])
    assert count_configurations(enc, SolverBackend("m22"), limit=50, monitor=monitor) == 50
