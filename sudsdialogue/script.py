"""Dialogue script graph: nodes, edges and the script that holds them."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Mapping

from .expression import Expression
from .value import TextGender

log = logging.getLogger(__name__)


class NodeType(Enum):
    """Kinds of node in a dialogue script."""

    TEXT = auto()
    CHOICE = auto()
    SELECT = auto()
    RETURN = auto()
    GOSUB = auto()
    SET_VARIABLE = auto()
    EVENT = auto()


class EdgeType(Enum):
    """Kinds of edge between script nodes."""

    CONTINUE = auto()
    DECISION = auto()
    CONDITION = auto()
    CHAINED = auto()


# A backtick escapes the next character; otherwise {Name} optionally followed
# by a modifier such as |plural(one=x,other=y) or |gender(he,she,it).
_FORMAT_RE = re.compile(r"`(.)|\{([^{}]*)\}(?:\|(\w+)\(([^)]*)\))?", re.S)


def format_parameter_names(template: str) -> list[str]:
    """Names of the ``{Name}`` arguments used in ``template``, in order of first use."""
    names: list[str] = []
    for match in _FORMAT_RE.finditer(template):
        name = match.group(2)
        if name is None:
            continue
        name = name.strip()
        if name and name not in names:
            names.append(name)
    return names


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text


def _stringify(value: Any) -> str:
    if isinstance(value, TextGender):
        return value.value
    return str(value)


def _apply_gender(value: Any, options: str) -> str:
    forms = [_unquote(part) for part in options.split(",")]
    if not isinstance(value, TextGender) or not forms:
        return _stringify(value)
    if value is TextGender.FEMININE and len(forms) > 1:
        return forms[1]
    if value is TextGender.NEUTER and len(forms) > 2:
        return forms[2]
    return forms[0]


def _apply_plural(value: Any, options: str) -> str:
    forms: dict[str, str] = {}
    for part in options.split(","):
        key, sep, form = part.partition("=")
        if sep:
            forms[key.strip()] = _unquote(form)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _stringify(value)
    if value == 0 and "zero" in forms:
        return forms["zero"]
    if value == 1 and "one" in forms:
        return forms["one"]
    return forms.get("other", _stringify(value))


def format_text(template: str, args: Mapping[str, Any]) -> str:
    """Substitute named arguments into ``template``; unknown arguments are left as written."""

    def replace(match: re.Match[str]) -> str:
        if match.group(1) is not None:
            return match.group(1)
        name = match.group(2).strip()
        if name not in args:
            return match.group(0)
        value = args[name]
        modifier = match.group(3)
        if modifier == "gender":
            return _apply_gender(value, match.group(4))
        if modifier == "plural":
            return _apply_plural(value, match.group(4))
        return _stringify(value)

    return _FORMAT_RE.sub(replace, template)


@dataclass(eq=False)
class Edge:
    """A link from one node to another, optionally with choice text or a condition."""

    target: Node | None = field(default=None, repr=False)
    type: EdgeType = EdgeType.CONTINUE
    text: str = ""
    condition: Expression | None = None
    source_line_no: int = 0
    text_key: str = ""

    def text_id(self) -> str:
        return self.text_key

    def parameter_names(self) -> list[str]:
        return format_parameter_names(self.text)

    def has_parameters(self) -> bool:
        return bool(self.parameter_names())


@dataclass(eq=False)
class Node:
    """A node in the script graph."""

    node_type: NodeType
    source_line_no: int = 0
    edges: list[Edge] = field(default_factory=list, repr=False)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def add_edge(self, edge: Edge) -> None:
        self.edges.append(edge)

    def edge(self, index: int) -> Edge | None:
        """The edge at ``index``, or None if there is none."""
        if 0 <= index < len(self.edges):
            return self.edges[index]
        return None

    def is_random_select(self) -> bool:
        if self.node_type is not NodeType.SELECT or not self.edges:
            return False
        condition = self.edges[0].condition
        return condition is not None and condition.is_random_condition()


@dataclass(eq=False)
class TextNode(Node):
    """A line spoken by a speaker."""

    node_type: NodeType = field(default=NodeType.TEXT, init=False)
    speaker_id: str = ""
    text: str = ""
    text_key: str = ""
    may_have_choices: bool = False

    def text_id(self) -> str:
        return self.text_key

    def parameter_names(self) -> list[str]:
        return format_parameter_names(self.text)

    def has_parameters(self) -> bool:
        return bool(self.parameter_names())


@dataclass(eq=False)
class SetNode(Node):
    """Assigns the result of an expression to a variable."""

    node_type: NodeType = field(default=NodeType.SET_VARIABLE, init=False)
    identifier: str = ""
    expression: Expression = field(default_factory=Expression)


@dataclass(eq=False)
class EventNode(Node):
    """Raises a named event with evaluated arguments."""

    node_type: NodeType = field(default=NodeType.EVENT, init=False)
    event_name: str = ""
    args: list[Expression] = field(default_factory=list)


@dataclass(eq=False)
class GosubNode(Node):
    """Jumps to a label and comes back on return."""

    node_type: NodeType = field(default=NodeType.GOSUB, init=False)
    label_name: str = ""
    gosub_id: str = ""
    may_have_choices: bool = False


_CHOICE_FOUND = 1
_NOT_FOUND_BEFORE_END = 0
_NOT_FOUND_BEFORE_TEXT = -1


@dataclass(eq=False)
class Script:
    """An imported dialogue script."""

    name: str = ""
    nodes: list[Node] = field(default_factory=list)
    header_nodes: list[Node] = field(default_factory=list)
    labels: dict[str, int] = field(default_factory=dict)
    header_labels: dict[str, int] = field(default_factory=dict)
    speakers: list[str] = field(default_factory=list)
    speaker_voices: dict[str, Any] = field(default_factory=dict)

    def next_node(self, node: Node) -> Node | None:
        """The single follow-on node of ``node``, or None."""
        if node.edge_count == 0:
            return None
        if node.edge_count == 1:
            return node.edges[0].target
        log.error("Called next_node on a node with more than one edge")
        return None

    def does_any_path_after_lead_to_choice(self, from_node: Node) -> bool:
        """True if some path after ``from_node`` reaches a choice before another text node."""
        return self._look_for_choice(self.next_node(from_node)) == _CHOICE_FOUND

    def _look_for_choice(self, node: Node | None) -> int:
        while node is not None:
            kind = node.node_type
            if kind is NodeType.TEXT:
                return _NOT_FOUND_BEFORE_TEXT
            if kind is NodeType.CHOICE:
                return _CHOICE_FOUND
            if kind is NodeType.SELECT:
                worst = _NOT_FOUND_BEFORE_END
                for edge in node.edges:
                    if edge.target is not None:
                        result = self._look_for_choice(edge.target)
                        if result == _CHOICE_FOUND:
                            return _CHOICE_FOUND
                        worst = min(result, worst)
                return worst
            if kind in (NodeType.EVENT, NodeType.SET_VARIABLE):
                node = self.next_node(node)
            elif kind is NodeType.GOSUB:
                if isinstance(node, GosubNode):
                    result = self._look_for_choice(self.node_by_label(node.label_name))
                    if result != _NOT_FOUND_BEFORE_END:
                        return result
                node = self.next_node(node)
            else:
                return _NOT_FOUND_BEFORE_END
        return _NOT_FOUND_BEFORE_END

    def finish_import(self) -> None:
        """Mark text and gosub nodes after which a choice may follow."""
        for node in self.nodes:
            if isinstance(node, (TextNode, GosubNode)):
                if self.does_any_path_after_lead_to_choice(node):
                    node.may_have_choices = True

    def header_node(self) -> Node | None:
        return self.header_nodes[0] if self.header_nodes else None

    def first_node(self) -> Node | None:
        return self.nodes[0] if self.nodes else None

    def node_by_label(self, label: str) -> Node | None:
        index = self.labels.get(label)
        return None if index is None else self.nodes[index]

    def node_by_text_id(self, text_id: str) -> TextNode | None:
        return next(
            (n for n in self.nodes if isinstance(n, TextNode) and n.text_id() == text_id),
            None,
        )

    def node_by_gosub_id(self, gosub_id: str) -> GosubNode | None:
        return next(
            (n for n in self.nodes if isinstance(n, GosubNode) and n.gosub_id == gosub_id),
            None,
        )

    def speaker_voice(self, speaker_id: str) -> Any:
        return self.speaker_voices.get(speaker_id)

    def set_speaker_voice(self, speaker_id: str, voice: Any) -> None:
        self.speaker_voices[speaker_id] = voice