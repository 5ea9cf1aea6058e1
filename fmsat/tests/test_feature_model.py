import pydantic
import pytest

from fmsat.ir.ir_types import Imp, Lit, lit
from fmsat.model import Feature, FeatureModel, GroupType, encode_feature_model

def make_model():
    return FeatureModel(
        root=Feature(name="Root", abstract=True, children=[
            Feature(name="A", mandatory=True),
            Feature(name="B"),
            Feature(name="G", group=GroupType.ALTERNATIVE, abstract=True, children=[
                Feature(name="X"),
                Feature(name="Y"),
            ]),
        ]),
        constraints=[Imp(a=lit("B"), b=lit("X"))]
    )

def test_features_in_preorder():
    model = make_model()
    assert [f.name for f in model.features()] == ["Root", "A", "B", "G", "X", "Y"]
    assert model.concrete_features() == ["A", "B", "X", "Y"]
    assert model.parent_map()["X"] == "G"
    assert model.parent_map()["Root"] is None
    assert model.has_constraints()

def test_duplicate_names_rejected():
    with pytest.raises(pydantic.ValidationError):
        FeatureModel(root=Feature(name="R", children=[Feature(name="A"), Feature(name="A")]))

def test_unknown_constraint_variable_rejected():
    with pytest.raises(pydantic.ValidationError):
        FeatureModel(root=Feature(name="R", children=[Feature(name="A")]), constraints=[lit("Z")])

def test_invalid_feature_name_rejected():
    with pytest.raises(pydantic.ValidationError):
        Feature(name="has space")

def test_concrete_descendants():
    model = make_model()
    fmap = model.feature_map()
    assert fmap["G"].has_concrete_descendant()
    assert not Feature(name="Empty", abstract=True).has_concrete_descendant()

def test_encoding_assigns_preorder_ids():
    enc = encode_feature_model(make_model())
    assert enc.num_features == 6
    assert [enc.variable(n) for n in ["Root", "A", "B", "G", "X", "Y"]] == [1, 2, 3, 4, 5, 6]
    assert enc.name_of(-5) == "X"
    assert enc.literal(-3) == Lit(var=lit("B").var, neg=True)
    assert enc.concrete_variables() == {2, 3, 5, 6}
    assert enc.selected_names((1, 2, -3, 4, -5, 6)) == ["A", "Y"]

def test_encoding_constraints():
    enc = encode_feature_model(make_model())
    # root unit first, cross-tree constraints last
    assert enc.constraints[0] == lit("Root")
    assert enc.constraints[-1] == Imp(a=lit("B"), b=lit("X"))
    assert Imp(a=lit("Root"), b=lit("A")) in enc.constraints
    assert Imp(a=lit("Root"), b=lit("B")) not in enc.constraints
