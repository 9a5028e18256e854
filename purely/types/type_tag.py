"""
Purely TypeTag - Narrowed Type Descriptors
==========================================

Python checks types at runtime, so narrowing is documentation: every
compiled pattern carries a ``TypeTag`` describing what a matching subject
is known to look like. Tags are immutable and render in a typing-like
notation:

    >>> str(TypeTag.literal("odie"))
    "Literal['odie']"
    >>> str(TypeTag.obj((("name", TypeTag.obj((("first", STRING),))),)))
    "{'name': {'first': str, ...}, ...}"
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple


class TagKind(Enum):
    """Shape of a narrowed type."""

    PRIMITIVE = "primitive"
    LITERAL = "literal"
    ARRAY = "array"
    RECORD = "record"
    UNION = "union"
    INTERSECTION = "intersection"
    OBJECT = "object"
    TUPLE = "tuple"
    ANNOTATED = "annotated"


@dataclass(frozen=True)
class TypeTag:
    """
    Immutable description of a narrowed type.

    Attributes:
        kind: Which shape this tag has
        name: Primitive or class name, or the annotation text
        args: Child tags (element, members, annotated base)
        fields: Declared ``(key, tag)`` pairs for object shapes
        value: The literal value for literal tags
    """

    kind: TagKind
    name: str = ""
    args: Tuple["TypeTag", ...] = ()
    fields: Tuple[Tuple[Any, "TypeTag"], ...] = ()
    value: Any = None

    @classmethod
    def primitive(cls, name: str) -> "TypeTag":
        return cls(TagKind.PRIMITIVE, name=name)

    @classmethod
    def literal(cls, value: Any) -> "TypeTag":
        return cls(TagKind.LITERAL, value=value)

    @classmethod
    def array(cls, element: "TypeTag") -> "TypeTag":
        return cls(TagKind.ARRAY, args=(element,))

    @classmethod
    def record(cls, value: "TypeTag") -> "TypeTag":
        return cls(TagKind.RECORD, args=(value,))

    @classmethod
    def union(cls, *members: "TypeTag") -> "TypeTag":
        return cls(TagKind.UNION, args=_flatten(TagKind.UNION, members))

    @classmethod
    def intersection(cls, *members: "TypeTag") -> "TypeTag":
        return cls(TagKind.INTERSECTION, args=_flatten(TagKind.INTERSECTION, members))

    @classmethod
    def obj(cls, fields: Tuple[Tuple[Any, "TypeTag"], ...]) -> "TypeTag":
        return cls(TagKind.OBJECT, fields=tuple(fields))

    @classmethod
    def tuple_prefix(cls, items: Tuple["TypeTag", ...]) -> "TypeTag":
        return cls(TagKind.TUPLE, args=tuple(items))

    @classmethod
    def annotated(cls, base: "TypeTag", note: str) -> "TypeTag":
        return cls(TagKind.ANNOTATED, name=note, args=(base,))

    def __str__(self) -> str:
        kind = self.kind
        if kind is TagKind.PRIMITIVE:
            return self.name
        if kind is TagKind.LITERAL:
            return f"Literal[{self.value!r}]"
        if kind is TagKind.ARRAY:
            return f"list[{self.args[0]}]"
        if kind is TagKind.RECORD:
            return f"dict[Any, {self.args[0]}]"
        if kind is TagKind.UNION:
            return " | ".join(str(arg) for arg in self.args)
        if kind is TagKind.INTERSECTION:
            return " & ".join(_parenthesize(arg) for arg in self.args)
        if kind is TagKind.OBJECT:
            parts = [f"{key!r}: {tag}" for key, tag in self.fields]
            parts.append("...")
            return "{" + ", ".join(parts) + "}"
        if kind is TagKind.TUPLE:
            parts = [str(arg) for arg in self.args]
            parts.append("...")
            return "[" + ", ".join(parts) + "]"
        return f"Annotated[{self.args[0]}, {self.name!r}]"


def _flatten(kind: TagKind, members: Tuple[TypeTag, ...]) -> Tuple[TypeTag, ...]:
    """Inline nested tags of the same kind: (a | b) | c -> a | b | c."""
    flat = []
    for member in members:
        if member.kind is kind:
            flat.extend(member.args)
        else:
            flat.append(member)
    return tuple(flat)


def _parenthesize(tag: TypeTag) -> str:
    text = str(tag)
    if tag.kind in (TagKind.UNION, TagKind.PRIMITIVE) and " | " in text:
        return f"({text})"
    return text


STRING = TypeTag.primitive("str")
NUMBER = TypeTag.primitive("int | float")
INTEGER = TypeTag.primitive("int")
BOOLEAN = TypeTag.primitive("bool")
NOTHING = TypeTag.primitive("None")
UNKNOWN = TypeTag.primitive("Any")
