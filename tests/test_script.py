import pytest

from sudsdialogue.expression import parse_expression
from sudsdialogue.script import (
    Edge,
    EdgeType,
    EventNode,
    GosubNode,
    Node,
    NodeType,
    Script,
    SetNode,
    TextNode,
    format_parameter_names,
    format_text,
)
from sudsdialogue.value import TextGender


def link(a, b, **kwargs):
    a.add_edge(Edge(target=b, **kwargs))


def test_parameter_names_in_order_and_unique():
    assert format_parameter_names("Hi {Name}, {Count} and {Name}") == ["Name", "Count"]


def test_parameter_names_ignore_escaped_braces():
    assert format_parameter_names("`{NotArg} {Arg}") == ["Arg"]


def test_format_text_substitutes_and_keeps_unknown():
    assert format_text("Hi {Name} {Other}", {"Name": "Bob"}) == "Hi Bob {Other}"


def test_format_text_gender_and_plural():
    template = "{G}|gender(he,she,it) has {N} {N}|plural(one=apple,other=apples)"
    assert format_text(template, {"G": TextGender.FEMININE, "N": 1}) == "she has 1 apple"
    assert format_text(template, {"G": TextGender.NEUTER, "N": 4}) == "it has 4 apples"


def test_edge_and_text_node_parameters():
    edge = Edge(text="Take {Item}", text_key="K1")
    assert edge.text_id() == "K1"
    assert edge.has_parameters()
    assert edge.parameter_names() == ["Item"]
    node = TextNode(speaker_id="Vendor", text="Plain line", text_key="K2")
    assert node.text_id() == "K2"
    assert not node.has_parameters()
    assert node.node_type is NodeType.TEXT


def test_node_edge_access():
    a = Node(NodeType.CHOICE, 3)
    b = TextNode(text="b")
    link(a, b, type=EdgeType.DECISION, text="go")
    assert a.edge(0).target is b
    assert a.edge(1) is None
    assert a.edge_count == 1


def test_is_random_select():
    select = Node(NodeType.SELECT)
    link(select, TextNode(text="x"), type=EdgeType.CONDITION,
         condition=parse_expression("{_RandomItemSelectIndex} == 0"))
    assert select.is_random_select()
    plain = Node(NodeType.SELECT)
    link(plain, TextNode(text="y"), type=EdgeType.CONDITION,
         condition=parse_expression("{x} == 0"))
    assert not plain.is_random_select()


def test_next_node_by_edge_count():
    script = Script()
    a, b, c = TextNode(text="a"), TextNode(text="b"), TextNode(text="c")
    assert script.next_node(a) is None
    link(a, b)
    assert script.next_node(a) is b
    link(a, c)
    assert script.next_node(a) is None


def test_choice_after_text_via_set_and_event():
    text = TextNode(text="hello")
    setter = SetNode(identifier="x", expression=parse_expression("1"))
    event = EventNode(event_name="Evt")
    choice = Node(NodeType.CHOICE)
    link(text, setter)
    link(setter, event)
    link(event, choice)
    script = Script(nodes=[text, setter, event, choice])
    assert script.does_any_path_after_lead_to_choice(text)


def test_text_then_text_has_no_choice():
    a, b = TextNode(text="a"), TextNode(text="b")
    link(a, b)
    link(b, Node(NodeType.CHOICE))
    assert not Script(nodes=[a, b]).does_any_path_after_lead_to_choice(a)


def test_select_explores_all_paths():
    text = TextNode(text="t")
    select = Node(NodeType.SELECT)
    link(text, select)
    link(select, TextNode(text="other"), type=EdgeType.CONDITION)
    link(select, Node(NodeType.CHOICE), type=EdgeType.CONDITION)
    assert Script(nodes=[text, select]).does_any_path_after_lead_to_choice(text)


def test_gosub_looks_inside_sub_and_finish_import_marks_nodes():
    text = TextNode(text="t")
    gosub = GosubNode(label_name="sub", gosub_id="G1")
    after = TextNode(text="after")
    sub_choice = Node(NodeType.CHOICE)
    link(text, gosub)
    link(gosub, after)
    script = Script(nodes=[text, gosub, after, sub_choice], labels={"sub": 3})
    script.finish_import()
    assert text.may_have_choices
    assert not after.may_have_choices
    assert not gosub.may_have_choices


def test_gosub_continues_after_return():
    text = TextNode(text="t")
    gosub = GosubNode(label_name="sub")
    choice = Node(NodeType.CHOICE)
    ret = Node(NodeType.RETURN)
    link(text, gosub)
    link(gosub, choice)
    script = Script(nodes=[text, gosub, choice, ret], labels={"sub": 3})
    assert script.does_any_path_after_lead_to_choice(text)


def test_lookups():
    first = TextNode(text="a", text_key="T1")
    gosub = GosubNode(label_name="x", gosub_id="G7")
    header = SetNode(identifier="v")
    script = Script(name="s", nodes=[first, gosub], header_nodes=[header],
                    labels={"here": 1})
    assert script.first_node() is first
    assert script.header_node() is header
    assert script.node_by_label("here") is gosub
    assert script.node_by_label("missing") is None
    assert script.node_by_text_id("T1") is first
    assert script.node_by_text_id("nope") is None
    assert script.node_by_gosub_id("G7") is gosub
    assert script.node_by_gosub_id("G8") is None
    empty = Script()
    assert empty.first_node() is None
    assert empty.header_node() is None


def test_speaker_voices():
    script = Script()
    voice = object()
    script.set_speaker_voice("Player", voice)
    assert script.speaker_voice("Player") is voice
    assert script.speaker_voice("NPC") is None


@pytest.mark.parametrize("kind", [NodeType.RETURN, NodeType.CHOICE])
def test_non_text_node_types_keep_type(kind):
    node = Node(kind, 5)
    assert node.node_type is kind
    assert node.source_line_no == 5