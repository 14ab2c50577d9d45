"""
Rascal runtime values
Tagged union of Integer, Boolean, String, Function and Nil
"""

from dataclasses import dataclass
from typing import Any, Tuple, Union


FUNCTION_PLACEHOLDER = "function"


@dataclass(frozen=True)
class IntegerValue:
  value: int

  @property
  def type_name(self) -> str:
    return "Integer"

  def __str__(self) -> str:
    return str(self.value)


@dataclass(frozen=True)
class BooleanValue:
  value: bool

  @property
  def type_name(self) -> str:
    return "Boolean"

  def __str__(self) -> str:
    return "true" if self.value else "false"


@dataclass(frozen=True)
class StringValue:
  value: str

  @property
  def type_name(self) -> str:
    return "String"

  def __str__(self) -> str:
    return self.value


@dataclass(frozen=True)
class FunctionValue:
  """Parameter names and body block of a declared function.

  No environment is captured: the body runs against a snapshot of the
  caller's frame.
  """
  name: str
  params: Tuple[str, ...]
  body: Any

  @property
  def type_name(self) -> str:
    return "Function"

  @property
  def arity(self) -> int:
    return len(self.params)

  def __str__(self) -> str:
    return FUNCTION_PLACEHOLDER


class NilValue:
  """Singleton for the absence of a value."""

  _instance: "NilValue" = None

  def __new__(cls) -> "NilValue":
    if cls._instance is None:
      cls._instance = super().__new__(cls)
    return cls._instance

  @property
  def type_name(self) -> str:
    return "Nil"

  def __repr__(self) -> str:
    return "Nil"

  def __str__(self) -> str:
    return ""


NIL = NilValue()

Value = Union[IntegerValue, BooleanValue, StringValue, FunctionValue, NilValue]


def make_integer(value: int) -> IntegerValue:
  return IntegerValue(int(value))


def make_boolean(value: bool) -> BooleanValue:
  return BooleanValue(bool(value))


def value_from_token(kind: str, text: str) -> Value:
  """Pre-compute the Value of an INTEGER or BOOLEAN literal"""
  if kind == "INTEGER":
    return make_integer(int(text))
  if kind == "BOOLEAN":
    return make_boolean(text == "true")
  raise ValueError(f"no literal value for token kind {kind}")
