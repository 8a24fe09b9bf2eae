import json

import pytest

from sudsdialogue.state import DialogueState
from sudsdialogue.value import TextGender, Value, ValueType, name_value, text_value


@pytest.fixture
def populated():
    return DialogueState(
        text_node_id="line-a",
        variables={
            "count": Value(ValueType.INT, 3),
            "ratio": Value(ValueType.FLOAT, 0.5),
            "met": Value(ValueType.BOOLEAN, True),
            "pronoun": Value(ValueType.GENDER, TextGender.FEMININE),
            "greeting": text_value("Hello"),
            "place": name_value("Tavern"),
        },
        choices_taken={"choice-b", "choice-a"},
        return_stack=["gosub-1", "gosub-2"],
    )


def test_default_state_is_empty():
    state = DialogueState()
    assert state.text_node_id == ""
    assert state.variables == {}
    assert state.choices_taken == set()
    assert state.return_stack == []


def test_to_dict_uses_record_keys(populated):
    data = populated.to_dict()
    assert set(data) == {"TextNodeID", "Variables", "ChoicesTaken", "ReturnStack"}
    assert data["TextNodeID"] == "line-a"


def test_to_dict_sorts_choices_and_keeps_stack_order(populated):
    data = populated.to_dict()
    assert data["ChoicesTaken"] == sorted(populated.choices_taken)
    assert data["ReturnStack"] == ["gosub-1", "gosub-2"]


def test_round_trip(populated):
    restored = DialogueState.from_dict(populated.to_dict())
    assert restored == populated


def test_round_trip_through_json(populated):
    text = json.dumps(populated.to_dict())
    restored = DialogueState.from_dict(json.loads(text))
    assert restored == populated
    assert restored.variables["pronoun"].data is TextGender.FEMININE


def test_from_dict_missing_parts_are_empty():
    state = DialogueState.from_dict({"TextNodeID": "x"})
    assert state.text_node_id == "x"
    assert state.variables == {}
    assert state.choices_taken == set()
    assert state.return_stack == []


def test_plain_values_are_wrapped():
    state = DialogueState(variables={"n": 7, "flag": False, "s": "hi"})
    assert state.variables["n"] == Value(ValueType.INT, 7)
    assert state.variables["flag"] == Value(ValueType.BOOLEAN, False)
    assert state.variables["s"] == text_value("hi")


def test_collections_are_copied():
    stack = ["g1"]
    choices = ["c1", "c1"]
    state = DialogueState(choices_taken=choices, return_stack=stack)
    stack.append("g2")
    assert state.return_stack == ["g1"]
    assert state.choices_taken == {"c1"}


def test_from_dict_rejects_bad_value_type():
    with pytest.raises(ValueError):
        DialogueState.from_dict({"Variables": {"x": {"type": "Nope", "value": 1}}})


def test_unwrappable_variable_raises():
    with pytest.raises(TypeError):
        DialogueState(variables={"x": object()})