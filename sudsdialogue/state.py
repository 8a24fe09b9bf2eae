"""Saved state of a dialogue: position, variables, choices taken and gosub returns."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .value import Value, from_python


@dataclass
class DialogueState:
    """A snapshot of a dialogue that can be saved and later restored.

    ``text_node_id`` is the text ID of the current speaker line, empty when the
    dialogue has ended. ``return_stack`` holds the IDs of the gosub nodes that
    are waiting for a return, oldest first.
    """

    text_node_id: str = ""
    variables: dict[str, Value] = field(default_factory=dict)
    choices_taken: set[str] = field(default_factory=set)
    return_stack: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.variables = {name: from_python(v) for name, v in self.variables.items()}
        self.choices_taken = set(self.choices_taken)
        self.return_stack = list(self.return_stack)

    def to_dict(self) -> dict[str, Any]:
        """A plain, JSON-compatible representation of the state."""
        return {
            "TextNodeID": self.text_node_id,
            "Variables": {name: v.to_dict() for name, v in self.variables.items()},
            "ChoicesTaken": sorted(self.choices_taken),
            "ReturnStack": list(self.return_stack),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> DialogueState:
        """Rebuild a state from the output of ``to_dict``; missing parts are empty."""
        variables = {
            name: Value.from_dict(raw)
            for name, raw in data.get("Variables", {}).items()
        }
        return DialogueState(
            text_node_id=data.get("TextNodeID", ""),
            variables=variables,
            choices_taken=set(data.get("ChoicesTaken", ())),
            return_stack=list(data.get("ReturnStack", ())),
        )