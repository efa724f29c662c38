"""
Defines the abstract syntax tree (AST) produced by the OWL parser.

Expression variants:
    Binary, Unary, Block, FunctionCall, Path,
    StringLiteral, SignedLiteral, UnsignedLiteral, FloatLiteral

Statement variants:
    FunctionDecl (with Parameter), ClassDecl, Import, VariableDecl,
    Assign, ExpressionStatement

Every node is a frozen dataclass that owns its children (held in tuples), so a
finished tree is immutable and acyclic. Nodes do not keep source spans: errors
can only be anchored while parsing, never replayed against a finished tree.

Three invariants are checked on construction:
    - a Path has at least one segment;
    - a ClassDecl holds only FunctionDecl and VariableDecl members;
    - a VariableDecl has a type, an initializer, or both.

Usage:
    ``to_dict()`` turns any node into plain dictionaries and lists suitable for
    JSON output, with operators rendered as their source spelling:

    >>> expr = Binary(UnsignedLiteral(1), TokenType.ADD, UnsignedLiteral(2))
    >>> expr.to_dict()["operator"]
    '+'
"""

from dataclasses import dataclass, fields
from typing import Any, TypedDict, Union

from owl.owl_constants import OPERATOR_SYMBOLS
from owl.owl_tokens import TokenType


class NodeDict(TypedDict, total=False):
    """
    Shape of a serialized node: ``kind`` plus one entry per dataclass field.
    """

    kind: str


def _serialize(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, TokenType):
        return OPERATOR_SYMBOLS.get(value, value.name)
    if isinstance(value, (tuple, list)):
        return [_serialize(v) for v in value]
    return value


class Node:
    """Serialization shared by every expression and statement dataclass."""

    def to_dict(self) -> NodeDict:
        result: dict[str, Any] = {"kind": type(self).__name__}
        for f in fields(self):  # type: ignore[arg-type]
            result[f.name] = _serialize(getattr(self, f.name))
        return result  # type: ignore[return-value]


# Expressions


@dataclass(frozen=True)
class Binary(Node):
    left: "Expression"
    operator: TokenType
    right: "Expression"


@dataclass(frozen=True)
class Unary(Node):
    operator: TokenType
    operand: "Expression"


@dataclass(frozen=True)
class Block(Node):
    statements: tuple["Statement", ...] = ()


@dataclass(frozen=True)
class FunctionCall(Node):
    path: tuple[str, ...]
    arguments: tuple["Expression", ...] = ()


@dataclass(frozen=True)
class Path(Node):
    """A dotted chain of identifiers such as ``a.b.c``."""

    segments: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise ValueError("Path must have at least one segment")

    def __str__(self) -> str:
        return ".".join(self.segments)


@dataclass(frozen=True)
class StringLiteral(Node):
    value: str


@dataclass(frozen=True)
class SignedLiteral(Node):
    value: int


@dataclass(frozen=True)
class UnsignedLiteral(Node):
    value: int


@dataclass(frozen=True)
class FloatLiteral(Node):
    value: float


Expression = Union[
    Binary,
    Unary,
    Block,
    FunctionCall,
    Path,
    StringLiteral,
    SignedLiteral,
    UnsignedLiteral,
    FloatLiteral,
]


# Statements


@dataclass(frozen=True)
class Parameter(Node):
    name: str
    type: Expression


@dataclass(frozen=True)
class FunctionDecl(Node):
    name: str
    return_type: Expression | None
    parameters: tuple[Parameter, ...]
    body: Expression


@dataclass(frozen=True)
class VariableDecl(Node):
    name: str
    type: Expression | None = None
    value: Expression | None = None

    def __post_init__(self) -> None:
        if self.type is None and self.value is None:
            raise ValueError(
                f"Variable '{self.name}' needs a type annotation or an initializer"
            )


@dataclass(frozen=True)
class ClassDecl(Node):
    name: str
    members: tuple[FunctionDecl | VariableDecl, ...] = ()

    def __post_init__(self) -> None:
        for member in self.members:
            if not isinstance(member, (FunctionDecl, VariableDecl)):
                raise ValueError(
                    f"Class '{self.name}' member must be a function or variable "
                    f"declaration, got {type(member).__name__}"
                )


@dataclass(frozen=True)
class Import(Node):
    paths: tuple[Path, ...]


@dataclass(frozen=True)
class Assign(Node):
    target: Expression
    operator: TokenType
    value: Expression


@dataclass(frozen=True)
class ExpressionStatement(Node):
    expression: Expression


Statement = Union[
    FunctionDecl,
    ClassDecl,
    Import,
    VariableDecl,
    Assign,
    ExpressionStatement,
]


__all__ = [
    "Assign",
    "Binary",
    "Block",
    "ClassDecl",
    "Expression",
    "ExpressionStatement",
    "FloatLiteral",
    "FunctionCall",
    "FunctionDecl",
    "Import",
    "Node",
    "NodeDict",
    "Parameter",
    "Path",
    "SignedLiteral",
    "Statement",
    "StringLiteral",
    "Unary",
    "UnsignedLiteral",
    "VariableDecl",
]
