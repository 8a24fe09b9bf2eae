# sudsdialogue

Building blocks for branching game dialogue. A dialogue script is a graph
of nodes: speaker lines, choices, conditional and random selects,
variable assignments, events, and gosub/return subroutines. This package
gives you the typed values that dialogue variables hold, a small
expression language for conditions and assignments, the script graph
itself, a saveable dialogue state, and settings for where voice-over
assets belong.

## Install

```
pip install sudsdialogue
```

To run the tests:

```
pip install "sudsdialogue[test]"
pytest
```

## Modules

### `sudsdialogue.value`

`Value` is a frozen dataclass holding a `ValueType` (`EMPTY`, `TEXT`,
`INT`, `FLOAT`, `BOOLEAN`, `GENDER`, `NAME`, `VARIABLE`) and its data.
Leaving the data out gives the type's default (`0`, `0.0`, `False`,
`TextGender.NEUTER`, `""`); data of the wrong Python type raises
`TypeError`.

```python
from sudsdialogue.value import Value, ValueType, from_python, text_value

Value(ValueType.INT, 3)
from_python(True)          # Value(BOOLEAN, True)
from_python("Hello")       # a TEXT value
text_value("Hello") == from_python("Hello")   # True
```

Other helpers: `name_value`, `variable_value`, `Value.as_bool`,
`Value.to_format_arg`, and `Value.to_dict` / `Value.from_dict` for a
plain `{"type": ..., "value": ...}` form. `str(value)` gives `"True"` /
`"False"` for booleans, the gender's name for genders and `"Empty"` for
empty values.

### `sudsdialogue.expression`

`parse_expression` turns a string into an `Expression`, or raises
`ExpressionParseError` (a `ValueError`) for unknown tokens, mismatched
parentheses, malformed expressions or an empty string.

Supported tokens:

- variables in braces: `{score}`, `{global.reputation}`
- numbers: `3`, `-2`, `1.5`
- quoted text `"say \"hi\""` and back-quoted names `` `Sword` ``
- `true`, `false`, `masculine`, `feminine`, `neuter`
- `+ - * / %`, parentheses
- `< <= > >=`, `== =`, `!= <>`
- `and &&`, `or ||`, `not !`

```python
from sudsdialogue.expression import parse_expression
from sudsdialogue.value import Value, ValueType

expr = parse_expression("{score} >= 10 and not {met_before}")
expr.variable_names                       # ('score', 'met_before')
expr.evaluate({"score": Value(ValueType.INT, 12)})
# Value(type=ValueType.BOOLEAN, data=True)
```

`evaluate(variables, global_variables)` takes mappings from names to
`Value`. A variable whose name starts with `global.` (any case) is looked
up in the global mapping without that prefix (see `split_global_name`),
then in the local mapping. Unset variables count as their type's default
in comparisons and arithmetic and as false in boolean logic. Integer
division and modulo truncate toward zero; dividing by zero raises
`ZeroDivisionError`. `evaluate_boolean` returns the result as a `bool`
and logs an error if it was not boolean. An empty `Expression()`
evaluates to true.

`is_literal`, `is_text_literal`, `text_literal_value` and
`is_random_condition` inspect the parsed form.

### `sudsdialogue.script`

The script graph: `Script`, `Node`, `TextNode`, `SetNode`, `EventNode`,
`GosubNode` and `Edge`, with `NodeType` and `EdgeType`. Build the nodes
in code, put labels in `Script.labels` as label name to index in
`Script.nodes`, then call `Script.finish_import()` so that text and gosub
nodes know whether a choice may follow them (`may_have_choices`).

```python
from sudsdialogue.script import Edge, Node, NodeType, Script, TextNode, EdgeType

hello = TextNode(speaker_id="Vendor", text="Hello, {PlayerName}!", text_key="@1@")
choice = Node(NodeType.CHOICE)
bye = TextNode(speaker_id="Vendor", text="Bye.", text_key="@2@")
hello.add_edge(Edge(choice))
choice.add_edge(Edge(bye, EdgeType.DECISION, text="Goodbye", text_key="@3@"))

script = Script(name="Vendor", nodes=[hello, choice, bye])
script.finish_import()
hello.may_have_choices          # True
hello.parameter_names()         # ['PlayerName']
script.node_by_text_id("@2@") is bye   # True
```

Lookups: `first_node`, `header_node`, `next_node`, `node_by_label`,
`node_by_text_id`, `node_by_gosub_id`, `speaker_voice` /
`set_speaker_voice`.

`format_text(template, args)` fills `{Name}` arguments, with
`{N}|plural(zero=..., one=..., other=...)` and
`{G}|gender(masculine, feminine, neuter)` forms; a back-quote escapes the
next character and unknown arguments are left as written.
`format_parameter_names` lists the argument names used.

### `sudsdialogue.state`

`DialogueState` records a dialogue's current text node ID, variables,
the text IDs of choices taken and the gosub IDs on its return stack.
`to_dict` gives a JSON-compatible dict and `DialogueState.from_dict`
rebuilds it. Plain Python values passed as variables are wrapped with
`from_python`.

### `sudsdialogue.editor_settings`

`EditorSettings` decides whether voice-over assets should be generated
for a package path (`should_generate_voice_assets`) and where they go
(`voice_output_dir`, `wave_output_dir`), using an `AssetLocation`: a
shared directory, a per-script subdirectory of it, the script's own
directory, or a subdirectory there. `output_dir` applies a location rule
directly.

## What this package does not do

- It does not run a dialogue. There is no object here that walks a
  `Script` from node to node, offers choices, applies `SetNode`s, raises
  events or follows gosubs; you walk the graph yourself using the script,
  expression and state types.
- It does not read script source text. Scripts are built in code from
  the node and edge classes.
- It does not keep or store global variables; you pass your own mapping
  to `Expression.evaluate`. Saving a `DialogueState` anywhere is left to
  you via `to_dict`.