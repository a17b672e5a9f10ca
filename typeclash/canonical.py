"""
TypeClash - structural duplicate and collision detector
for TypeScript type aliases.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from enum import Enum

from tree_sitter import Node


class TypeKind(str, Enum):
    """Syntactic categories of a type expression, one canonical tag each."""

    KEYWORD = "Keyword"
    REFERENCE = "Ref"
    OBJECT = "Object"
    MAPPED = "Mapped"
    UNION = "Union"
    INTERSECTION = "Intersection"
    ARRAY = "Array"
    TUPLE = "Tuple"
    FUNCTION = "Fn"
    CONSTRUCTOR = "Ctor"
    CONDITIONAL = "Cond"
    QUERY = "TypeOf"
    INDEXED_ACCESS = "Index"
    OPERATOR = "Op"
    IMPORT = "Import"
    PARENTHESIZED = "Paren"
    INFER = "Infer"
    THIS = "This"
    LITERAL = "Lit"
    TEMPLATE_LITERAL = "Template"
    PREDICATE = "Predicate"
    OPTIONAL = "Optional"
    REST = "Rest"


_NODE_KINDS: dict[str, TypeKind] = {
    "predefined_type": TypeKind.KEYWORD,
    "existential_type": TypeKind.KEYWORD,
    "type_identifier": TypeKind.REFERENCE,
    "nested_type_identifier": TypeKind.REFERENCE,
    "generic_type": TypeKind.REFERENCE,
    "object_type": TypeKind.OBJECT,
    "union_type": TypeKind.UNION,
    "intersection_type": TypeKind.INTERSECTION,
    "array_type": TypeKind.ARRAY,
    "tuple_type": TypeKind.TUPLE,
    "function_type": TypeKind.FUNCTION,
    "constructor_type": TypeKind.CONSTRUCTOR,
    "conditional_type": TypeKind.CONDITIONAL,
    "type_query": TypeKind.QUERY,
    "lookup_type": TypeKind.INDEXED_ACCESS,
    "index_type_query": TypeKind.OPERATOR,
    "readonly_type": TypeKind.OPERATOR,
    "flow_maybe_type": TypeKind.OPERATOR,
    "parenthesized_type": TypeKind.PARENTHESIZED,
    "infer_type": TypeKind.INFER,
    "this_type": TypeKind.THIS,
    "literal_type": TypeKind.LITERAL,
    "template_literal_type": TypeKind.TEMPLATE_LITERAL,
    "type_predicate": TypeKind.PREDICATE,
    "asserts": TypeKind.PREDICATE,
    "optional_type": TypeKind.OPTIONAL,
    "rest_type": TypeKind.REST,
}

# Anonymous tokens that change the meaning of the construct they sit in.
# Punctuation such as brackets, commas and semicolons is layout only.
_SIGNIFICANT_TOKENS = frozenset(
    {
        "?",
        "-",
        "+",
        "*",
        "...",
        "-?:",
        "+?:",
        "?:",
        "abstract",
        "accessor",
        "as",
        "asserts",
        "async",
        "const",
        "extends",
        "get",
        "import",
        "in",
        "infer",
        "is",
        "keyof",
        "new",
        "readonly",
        "set",
        "static",
        "typeof",
        "unique",
    }
)

_MODIFIER_NODES = frozenset({"accessibility_modifier", "override_modifier"})

_ANNOTATION_TAGS = {
    "opting_type_annotation": "Opt",
    "adding_type_annotation": "AddOpt",
    "omitting_type_annotation": "DropOpt",
}

_PLAIN_ANNOTATIONS = frozenset(
    {"type_annotation", "type_predicate_annotation", "asserts_annotation"}
)

_QUALIFIED_EXPRESSIONS = frozenset(
    {"identifier", "member_expression", "nested_identifier", "this"}
)

_CHAINS = frozenset({"union_type", "intersection_type"})

# Shapes of the subtree being canonicalized, keyed by node id.
_shapes: dict[int, str] = {}


# =========================
# Helpers
# =========================


def _text(node: Node) -> str:
    raw = node.text
    return raw.decode("utf-8", errors="replace") if raw is not None else ""


def _compact(node: Node) -> str:
    return "".join(_text(node).split())


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _tag(tag: str, *parts: str) -> str:
    return f"{tag}({','.join(parts)})"


def _named(node: Node) -> list[Node]:
    return [c for c in node.named_children if c.type != "comment"]


def _field(node: Node, *names: str) -> Node | None:
    for name in names:
        child = node.child_by_field_name(name)
        if child is not None:
            return child
    return None


def _tokens(node: Node) -> list[str]:
    return [
        _quote(c.type)
        for c in node.children
        if not c.is_named and c.type in _SIGNIFICANT_TOKENS
    ]


def _string_value(node: Node) -> str:
    return "".join(
        _text(c)
        for c in node.named_children
        if c.type in ("string_fragment", "escape_sequence")
    )


def _flatten(node: Node) -> list[Node]:
    """
    Flatten a left-nested union/intersection chain into its arms in
    source order. Iterative: generated code can carry thousands of arms.
    """
    arms: list[Node] = []
    stack = list(reversed(_named(node)))
    while stack:
        current = stack.pop()
        if current.type == node.type:
            stack.extend(reversed(_named(current)))
        else:
            arms.append(current)
    return arms


def _bottom_up(root: Node) -> list[Node]:
    """
    Named nodes under `root`, every node after all of its descendants.

    Inner links of a union or intersection chain are left out: `_flatten`
    walks through them and they never get a shape of their own.
    """
    order: list[Node] = []
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, is_link = stack.pop()
        if not is_link:
            order.append(node)
        stack.extend(
            (child, child.type in _CHAINS and child.type == node.type)
            for child in node.named_children
        )
    order.reverse()
    return order


def _is_mapped(node: Node) -> bool:
    members = _named(node)
    return (
        len(members) == 1
        and members[0].type == "index_signature"
        and any(c.type == "mapped_type_clause" for c in members[0].named_children)
    )


def _is_import(node: Node) -> bool:
    return any(c.type == "import" for c in node.children)


def kind_of(node: Node) -> TypeKind | None:
    if node.type == "object_type" and _is_mapped(node):
        return TypeKind.MAPPED
    if _is_import(node):
        return TypeKind.IMPORT
    return _NODE_KINDS.get(node.type)


# =========================
# Shared sub-structures
# =========================


def _generic(node: Node) -> str:
    """Structural rendering for nodes without a dedicated handler."""
    if node.named_child_count == 0:
        return _tag(node.type, _quote(_compact(node)))
    parts: list[str] = []
    for child in node.children:
        if child.type == "comment":
            continue
        if child.is_named:
            parts.append(_canon(child))
        elif child.type in _SIGNIFICANT_TOKENS:
            parts.append(_quote(child.type))
    return _tag(node.type, *parts)


def _expression(node: Node) -> str:
    if node.type in _QUALIFIED_EXPRESSIONS:
        return _quote(_compact(node))
    return _generic(node)


def _annotated(node: Node) -> str:
    inner = _named(node)
    if node.type in _PLAIN_ANNOTATIONS:
        return _canon(inner[0]) if inner else "Implicit"
    tag = _ANNOTATION_TAGS.get(node.type)
    if tag is not None:
        return _tag(tag, *(_canon(c) for c in inner))
    return _canon(node)


def _type_parameters(node: Node) -> str:
    params: list[str] = []
    for param in _named(node):
        if param.type != "type_parameter":
            params.append(_canon(param))
            continue
        children = _named(param)
        parts = _tokens(param)
        for child in children:
            if child.type == "constraint":
                parts.append(_tag("Extends", *(_canon(c) for c in _named(child))))
            elif child.type == "default_type":
                parts.append(_tag("Default", *(_canon(c) for c in _named(child))))
            else:
                parts.append(_quote(_text(child)))
        params.append(_tag("TypeParam", *parts))
    return _tag("TypeParams", *params)


def _parameter(node: Node) -> str:
    if node.type not in ("required_parameter", "optional_parameter"):
        return _canon(node)
    # Parameter and tuple labels are positional; only markers and types count.
    parts: list[str] = []
    pattern = _field(node, "pattern", "name")
    if pattern is not None and pattern.type == "rest_pattern":
        parts.append("Rest")
    elif pattern is not None and pattern.type == "this":
        parts.append("This")
    if node.type == "optional_parameter":
        parts.append("Optional")
    annotation = node.child_by_field_name("type")
    parts.append(_annotated(annotation) if annotation is not None else "Implicit")
    return _tag("Param", *parts)


def _signature(node: Node) -> list[str]:
    type_params: Node | None = None
    params: Node | None = None
    for child in _named(node):
        if child.type == "type_parameters" and type_params is None:
            type_params = child
        elif child.type == "formal_parameters" and params is None:
            params = child

    ret = _field(node, "return_type", "type")
    if ret is None and params is not None:
        trailing = [c for c in _named(node) if c.start_byte >= params.end_byte]
        ret = trailing[-1] if trailing else None

    parts: list[str] = []
    if type_params is not None:
        parts.append(_type_parameters(type_params))
    parts.append(
        _tag("Params", *(_parameter(p) for p in _named(params)))
        if params is not None
        else "Params()"
    )
    parts.append(_tag("Returns", _annotated(ret)) if ret is not None else "Returns()")
    return parts


# =========================
# Object members
# =========================


def _property_name(node: Node | None) -> str:
    if node is None:
        return _quote("")
    if node.type == "string":
        return _quote(_string_value(node))
    if node.type == "computed_property_name":
        return _tag("Computed", *(_expression(c) for c in _named(node)))
    return _quote(_text(node))


def _modifiers(node: Node) -> list[str]:
    mods: list[str] = []
    for child in node.children:
        if child.is_named:
            if child.type in _MODIFIER_NODES:
                mods.append(_quote(_compact(child)))
        elif child.type in _SIGNIFICANT_TOKENS:
            mods.append(_quote(child.type))
    return mods


def _property_signature(node: Node) -> str:
    annotation = node.child_by_field_name("type")
    return _tag(
        "Prop",
        _property_name(node.child_by_field_name("name")),
        *_modifiers(node),
        _annotated(annotation) if annotation is not None else "Implicit",
    )


def _method_signature(node: Node) -> str:
    return _tag(
        "Method",
        _property_name(node.child_by_field_name("name")),
        *_modifiers(node),
        *_signature(node),
    )


def _call_signature(node: Node) -> str:
    return _tag("Call", *_signature(node))


def _construct_signature(node: Node) -> str:
    return _tag("New", *_modifiers(node), *_signature(node))


def _index_signature(node: Node) -> str:
    index_type = node.child_by_field_name("index_type")
    value = node.child_by_field_name("type")
    return _tag(
        "IndexSig",
        *_tokens(node),
        _tag("Key", _canon(index_type)) if index_type is not None else "Key()",
        _annotated(value) if value is not None else "Implicit",
    )


_MEMBER_HANDLERS: dict[str, Callable[[Node], str]] = {
    "property_signature": _property_signature,
    "method_signature": _method_signature,
    "call_signature": _call_signature,
    "construct_signature": _construct_signature,
    "index_signature": _index_signature,
}


def _member(node: Node) -> str:
    handler = _MEMBER_HANDLERS.get(node.type)
    return handler(node) if handler is not None else _generic(node)


# =========================
# Type expression handlers
# =========================


def _keyword(node: Node) -> str:
    return _tag(TypeKind.KEYWORD.value, _quote(" ".join(_text(node).split())))


def _reference(node: Node) -> str:
    if node.type != "generic_type":
        return _tag(TypeKind.REFERENCE.value, _quote(_compact(node)))
    name = node.child_by_field_name("name")
    arguments = node.child_by_field_name("type_arguments")
    return _tag(
        TypeKind.REFERENCE.value,
        _quote(_compact(name)) if name is not None else _quote(""),
        _tag("Args", *(_canon(a) for a in _named(arguments)))
        if arguments is not None
        else "Args()",
    )


def _object(node: Node) -> str:
    return _tag(TypeKind.OBJECT.value, *(_member(m) for m in _named(node)))


def _mapped(node: Node) -> str:
    signature = _named(node)[0]
    parts: list[str] = []
    for child in signature.children:
        if child.type == "comment":
            continue
        if child.type == "mapped_type_clause":
            clause = _named(child)
            in_parts = [_quote(_text(clause[0]))] if clause else []
            in_parts.extend(_canon(c) for c in clause[1:2])
            in_parts.extend(_tag("As", _canon(c)) for c in clause[2:])
            parts.append(_tag("In", *in_parts))
        elif child.is_named:
            parts.append(_annotated(child))
        elif child.type in _SIGNIFICANT_TOKENS:
            parts.append(_quote(child.type))
    return _tag(TypeKind.MAPPED.value, *parts)


def _union(node: Node) -> str:
    return _tag(TypeKind.UNION.value, *(_canon(a) for a in _flatten(node)))


def _intersection(node: Node) -> str:
    return _tag(TypeKind.INTERSECTION.value, *(_canon(a) for a in _flatten(node)))


def _array(node: Node) -> str:
    return _tag(TypeKind.ARRAY.value, *(_canon(c) for c in _named(node)))


def _tuple(node: Node) -> str:
    return _tag(TypeKind.TUPLE.value, *(_parameter(c) for c in _named(node)))


def _function(node: Node) -> str:
    return _tag(TypeKind.FUNCTION.value, *_signature(node))


def _constructor(node: Node) -> str:
    return _tag(TypeKind.CONSTRUCTOR.value, *_tokens(node), *_signature(node))


def _conditional(node: Node) -> str:
    return _tag(TypeKind.CONDITIONAL.value, *(_canon(c) for c in _named(node)))


def _query(node: Node) -> str:
    return _tag(TypeKind.QUERY.value, *(_expression(c) for c in _named(node)))


def _indexed_access(node: Node) -> str:
    return _tag(TypeKind.INDEXED_ACCESS.value, *(_canon(c) for c in _named(node)))


def _operator(node: Node) -> str:
    operator = next((c.type for c in node.children if not c.is_named), node.type)
    return _tag(
        TypeKind.OPERATOR.value,
        _quote(operator),
        *(_canon(c) for c in _named(node)),
    )


def _import(node: Node) -> str:
    parts: list[str] = []
    for child in _named(node):
        if child.type == "string":
            parts.append(_quote(_string_value(child)))
        elif child.type == "arguments":
            parts.extend(_canon(c) for c in _named(child))
        else:
            parts.append(_canon(child))
    return _tag(TypeKind.IMPORT.value, *parts)


def _parenthesized(node: Node) -> str:
    return _tag(TypeKind.PARENTHESIZED.value, *(_canon(c) for c in _named(node)))


def _infer(node: Node) -> str:
    children = _named(node)
    parts = [_quote(_text(children[0]))] if children else []
    parts.extend(_tag("Extends", _canon(c)) for c in children[1:])
    return _tag(TypeKind.INFER.value, *parts)


def _this(_node: Node) -> str:
    return _tag(TypeKind.THIS.value)


def _literal(node: Node) -> str:
    inner = _named(node)
    if not inner:
        return _tag(TypeKind.LITERAL.value, _quote(_compact(node)))
    value = inner[0]
    if value.type == "string":
        return _tag(TypeKind.LITERAL.value, "string", _quote(_string_value(value)))
    return _tag(TypeKind.LITERAL.value, value.type, _quote(_compact(value)))


def _template_literal(node: Node) -> str:
    parts: list[str] = []
    for child in _named(node):
        if child.type == "template_type":
            parts.append(_tag("Slot", *(_canon(c) for c in _named(child))))
        else:
            parts.append(_quote(_text(child)))
    return _tag(TypeKind.TEMPLATE_LITERAL.value, *parts)


def _predicate(node: Node) -> str:
    if node.type == "asserts":
        return _tag(
            TypeKind.PREDICATE.value,
            '"asserts"',
            *(
                _canon(c) if c.type == "type_predicate" else _expression(c)
                for c in _named(node)
            ),
        )
    name = node.child_by_field_name("name")
    target = node.child_by_field_name("type")
    return _tag(
        TypeKind.PREDICATE.value,
        _quote(_compact(name)) if name is not None else _quote(""),
        _canon(target) if target is not None else "Implicit",
    )


def _optional(node: Node) -> str:
    return _tag(TypeKind.OPTIONAL.value, *(_canon(c) for c in _named(node)))


def _rest(node: Node) -> str:
    return _tag(TypeKind.REST.value, *(_canon(c) for c in _named(node)))


_HANDLERS: dict[TypeKind, Callable[[Node], str]] = {
    TypeKind.KEYWORD: _keyword,
    TypeKind.REFERENCE: _reference,
    TypeKind.OBJECT: _object,
    TypeKind.MAPPED: _mapped,
    TypeKind.UNION: _union,
    TypeKind.INTERSECTION: _intersection,
    TypeKind.ARRAY: _array,
    TypeKind.TUPLE: _tuple,
    TypeKind.FUNCTION: _function,
    TypeKind.CONSTRUCTOR: _constructor,
    TypeKind.CONDITIONAL: _conditional,
    TypeKind.QUERY: _query,
    TypeKind.INDEXED_ACCESS: _indexed_access,
    TypeKind.OPERATOR: _operator,
    TypeKind.IMPORT: _import,
    TypeKind.PARENTHESIZED: _parenthesized,
    TypeKind.INFER: _infer,
    TypeKind.THIS: _this,
    TypeKind.LITERAL: _literal,
    TypeKind.TEMPLATE_LITERAL: _template_literal,
    TypeKind.PREDICATE: _predicate,
    TypeKind.OPTIONAL: _optional,
    TypeKind.REST: _rest,
}


def _canon(node: Node) -> str:
    cached = _shapes.get(node.id)
    if cached is not None:
        return cached
    kind = kind_of(node)
    if kind is None:
        return _generic(node)
    return _HANDLERS[kind](node)


# =========================
# Public API
# =========================


def canonicalize(node: Node) -> str:
    """
    Render a type expression as its canonical shape string.

    The shape carries the syntactic category of every node, the text of
    every referenced name and literal, and every child in source order.
    Members, arms, elements and parameters are never re-sorted, so two
    expressions share a shape exactly when they are written with the same
    structure. Comments, whitespace, separators, quote style and
    parameter labels do not take part.

    Shapes are built bottom-up from an explicit stack, so nesting depth is
    bounded only by memory.
    """
    _shapes.clear()
    try:
        for current in _bottom_up(node):
            _shapes[current.id] = _canon(current)
        return _shapes[node.id]
    finally:
        _shapes.clear()

