"""
Runtime values of the Monkey language.

Every value carries a type tag (`type()`) and a human readable rendering
(`inspect()`) used by `print` and the REPL. Values hold data only; the
semantics of operating on them live in the evaluator.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Tuple, Union

from monkey.monkey_ast import BlockStatement, Identifier

if TYPE_CHECKING:
    from monkey.monkey_environment import Environment


class ObjectType(Enum):
    INTEGER = "INTEGER"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    VOID = "VOID"
    UNDEFINED = "UNDEFINED"
    RETURN_VALUE = "RETURN_VALUE"
    ERROR = "ERROR"
    FUNCTION = "FUNCTION"
    BUILTIN = "BUILTIN"
    ARRAY = "ARRAY"

    def __str__(self) -> str:
        return self.value


class Object(ABC):
    """Base class for every runtime value."""

    @abstractmethod
    def type(self) -> ObjectType: ...

    @abstractmethod
    def inspect(self) -> str: ...


@dataclass(eq=True)
class Integer(Object):
    value: int

    def type(self) -> ObjectType:
        return ObjectType.INTEGER

    def inspect(self) -> str:
        return str(self.value)


@dataclass(eq=True)
class String(Object):
    value: str

    def type(self) -> ObjectType:
        return ObjectType.STRING

    def inspect(self) -> str:
        return self.value


@dataclass(eq=True)
class Boolean(Object):
    value: bool

    def type(self) -> ObjectType:
        return ObjectType.BOOLEAN

    def inspect(self) -> str:
        return "true" if self.value else "false"


class _Sentinel(Object):
    """Stateless values that exist once per process (null, void, undefined)."""

    def __init__(self, tag: ObjectType, text: str):
        self._tag = tag
        self._text = text

    def type(self) -> ObjectType:
        return self._tag

    def inspect(self) -> str:
        return self._text

    def __eq__(self, other):
        return isinstance(other, _Sentinel) and self._tag is other._tag

    def __hash__(self):
        return hash(self._tag)

    def __repr__(self) -> str:
        return f"{self._text.capitalize()}<>"


@dataclass(eq=True)
class ReturnValue(Object):
    """Carries a `return` up to the enclosing call boundary. Never reaches guest code."""
    value: Object

    def type(self) -> ObjectType:
        return ObjectType.RETURN_VALUE

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass(eq=True)
class Error(Object):
    message: str

    def type(self) -> ObjectType:
        return ObjectType.ERROR

    def inspect(self) -> str:
        return f"ERROR: {self.message}"


@dataclass(eq=False)
class Function(Object):
    """A guest function: parameters, body and the environment it closed over."""
    parameters: Tuple[Identifier, ...]
    body: BlockStatement
    env: "Environment" = field(repr=False)

    def type(self) -> ObjectType:
        return ObjectType.FUNCTION

    def inspect(self) -> str:
        params = ", ".join(p.value for p in self.parameters)
        return f"fn({params}) {self.body}"

    def __eq__(self, other):
        if not isinstance(other, Function):
            return NotImplemented
        # The closure is deliberately not compared.
        return self.parameters == other.parameters and self.body == other.body

    __hash__ = object.__hash__


BuiltinFunction = Callable[[List[Object]], Union[Object, Awaitable[Object]]]


@dataclass(eq=False)
class Builtin(Object):
    """A native function exposed to guest code under a fixed name."""
    name: str
    fn: BuiltinFunction = field(repr=False)

    def type(self) -> ObjectType:
        return ObjectType.BUILTIN

    def inspect(self) -> str:
        return f"builtin function {self.name}"

    def __eq__(self, other):
        if not isinstance(other, Builtin):
            return NotImplemented
        return self.name == other.name

    __hash__ = object.__hash__


@dataclass(eq=True)
class Array(Object):
    elements: List[Object] = field(default_factory=list)

    def type(self) -> ObjectType:
        return ObjectType.ARRAY

    def inspect(self) -> str:
        return "[" + ", ".join(e.inspect() for e in self.elements) + "]"


# Singleton instances, reused by identity everywhere.
NULL = _Sentinel(ObjectType.NULL, "null")
VOID = _Sentinel(ObjectType.VOID, "void")
UNDEFINED = _Sentinel(ObjectType.UNDEFINED, "undefined")
TRUE = Boolean(True)
FALSE = Boolean(False)


def native_bool_to_boolean(value: Any) -> Boolean:
    return TRUE if value else FALSE


def is_error(obj: Object) -> bool:
    return isinstance(obj, Error)


def is_abrupt(obj: Object) -> bool:
    """True for values that must stop the surrounding evaluation (errors and returns)."""
    return isinstance(obj, (Error, ReturnValue))


def is_truthy(obj: Object) -> bool:
    """Only null and false are falsy."""
    if obj == NULL:
        return False
    return not (isinstance(obj, Boolean) and not obj.value)
