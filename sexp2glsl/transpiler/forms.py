"""Expression tree for shader forms.

A shader is written as nested parenthesized forms. Each form is one of a small
set of immutable node types defined here, so passes produce new trees instead
of editing the one they were given.
"""

from dataclasses import dataclass
from typing import Any, Union

from sexp2glsl.transpiler.errors import TranspilerError


@dataclass(frozen=True)
class Symbol:
    """An identifier such as ``model-view`` or ``vec3``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Keyword:
    """A reference to a GLSL builtin, written ``:model-view-matrix``."""

    name: str

    def __str__(self) -> str:
        return f":{self.name}"


@dataclass(frozen=True)
class Literal:
    """A number or boolean constant.

    String values are accepted as raw GLSL text and emitted untouched.
    """

    value: int | float | bool | str

    def __str__(self) -> str:
        return to_source(self)


@dataclass(frozen=True)
class Call:
    """A parenthesized form ``(operator arg ...)``."""

    operator: Symbol
    args: tuple["Node", ...] = ()

    @property
    def name(self) -> str:
        return self.operator.name

    def __str__(self) -> str:
        return to_source(self)


@dataclass(frozen=True)
class Vector:
    """A bracketed sequence ``[a 1 b 2]`` used for bindings and parameter lists."""

    items: tuple["Node", ...] = ()

    def __str__(self) -> str:
        return to_source(self)


@dataclass(frozen=True)
class Empty:
    """The empty form ``()``."""

    def __str__(self) -> str:
        return "()"


Node = Union[Symbol, Keyword, Literal, Call, Vector, Empty]

EMPTY = Empty()

NODE_TYPES = (Symbol, Keyword, Literal, Call, Vector, Empty)


def sym(name: str) -> Symbol:
    return Symbol(name)


def kw(name: str) -> Keyword:
    return Keyword(name.removeprefix(":"))


def call(operator: str | Symbol, *args: Any) -> Call:
    """Build a call form, converting each argument with ``to_form``."""
    if isinstance(operator, str):
        operator = Symbol(operator)
    return Call(operator, tuple(to_form(arg) for arg in args))


def is_member_access(form: Any) -> bool:
    """Any call whose operator starts with '.' is a member access.

    (.xyz position) -> position.xyz
    """
    return isinstance(form, Call) and form.name.startswith(".")


def to_form(obj: Any) -> Node:
    """Convert plain Python data into an expression tree.

    Args:
        obj: A node, or a str/int/float/bool/tuple/list built from them.
            Strings become symbols (keywords when they start with ':'),
            tuples become calls and lists become vectors.

    Returns:
        The equivalent expression tree node

    Raises:
        TranspilerError: If the object has no form equivalent
    """
    match obj:
        case Symbol() | Keyword() | Literal() | Call() | Vector() | Empty():
            return obj
        case bool() | int() | float():
            return Literal(obj)
        case str() if obj.startswith(":") and len(obj) > 1:
            return Keyword(obj[1:])
        case str() if obj:
            return Symbol(obj)
        case tuple() if not obj:
            return EMPTY
        case tuple():
            head = to_form(obj[0])
            if not isinstance(head, Symbol):
                raise TranspilerError(f"Form operator must be a symbol, got {obj[0]!r}")
            return Call(head, tuple(to_form(item) for item in obj[1:]))
        case list():
            return Vector(tuple(to_form(item) for item in obj))
    raise TranspilerError(f"Cannot convert {type(obj).__name__} {obj!r} to a form")


def _format_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def to_source(form: Any) -> str:
    """Print a form back as s-expression text."""
    match form:
        case Symbol(name):
            return name
        case Keyword(name):
            return f":{name}"
        case Literal(bool() as value):
            return "true" if value else "false"
        case Literal(str() as value):
            return _format_string(value)
        case Literal(value):
            return repr(value)
        case Call(operator, args):
            return "(" + " ".join([operator.name, *(to_source(a) for a in args)]) + ")"
        case Vector(items):
            return "[" + " ".join(to_source(item) for item in items) + "]"
        case Empty():
            return "()"
    return repr(form)


def walk(form: Node):
    """Yield every node of a tree in pre-order."""
    yield form
    match form:
        case Call(_, args):
            for arg in args:
                yield from walk(arg)
        case Vector(items):
            for item in items:
                yield from walk(item)
