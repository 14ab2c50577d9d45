"""
Utilities module for the Rascal interpreter
Operand coercion, truthiness and the arithmetic/comparison primitives used
by the evaluator
"""

from typing import Callable, Dict

from error_handling import DivisionByZeroError, TypeMismatchError
from values import (
  BooleanValue,
  IntegerValue,
  Value,
  make_boolean,
  make_integer,
)


# ==================== ERROR CONSTRUCTORS ====================

def type_mismatch_error(operator: str, *operands: Value) -> TypeMismatchError:
  """
  Build a TypeMismatch fault for an operator applied to the wrong kinds

  Args:
    operator: Operator text as written in the source
    operands: The evaluated operands, left to right

  Returns:
    TypeMismatchError ready to raise
  """
  if len(operands) == 1:
    described = f"{operator}{operands[0].type_name}"
  else:
    described = f" {operator} ".join(operand.type_name for operand in operands)
  return TypeMismatchError(f"Operation error: invalid operation {described}")


# ==================== COERCION ====================

def expect_integer(value: Value, operator: str, *operands: Value) -> int:
  """Unwrap an Integer operand or fail with TypeMismatch"""
  if isinstance(value, IntegerValue):
    return value.value
  raise type_mismatch_error(operator, *(operands or (value,)))


def as_comparable(value: Value, operator: str, *operands: Value) -> int:
  """
  Coerce a value to an integer for comparison

  Booleans become 0/1 so that `true == 1` holds. Anything that is neither
  Integer nor Boolean cannot be compared.
  """
  if isinstance(value, BooleanValue):
    return 1 if value.value else 0
  if isinstance(value, IntegerValue):
    return value.value
  raise type_mismatch_error(operator, *(operands or (value,)))


def is_truthy(value: Value) -> bool:
  """A value is truthy iff it is Boolean true or Integer 1"""
  if isinstance(value, BooleanValue):
    return value.value
  if isinstance(value, IntegerValue):
    return value.value == 1
  return False


# ==================== ARITHMETIC ====================

def truncated_divide(left: int, right: int) -> int:
  """Integer division rounding toward zero"""
  quotient = abs(left) // abs(right)
  return quotient if (left < 0) == (right < 0) else -quotient


def truncated_modulo(left: int, right: int) -> int:
  """Remainder carrying the sign of the dividend"""
  return left - right * truncated_divide(left, right)


def _checked(operation: Callable[[int, int], int], operator: str) -> Callable[[int, int], int]:
  def apply(left: int, right: int) -> int:
    if right == 0:
      raise DivisionByZeroError(operator)
    return operation(left, right)
  return apply


ARITHMETIC_OPERATORS: Dict[str, Callable[[int, int], int]] = {
  '+': lambda left, right: left + right,
  '-': lambda left, right: left - right,
  '*': lambda left, right: left * right,
  '/': _checked(truncated_divide, '/'),
  '%': _checked(truncated_modulo, '%'),
}


def binary_arithmetic_op(operator: str, left: Value, right: Value) -> IntegerValue:
  """Apply + - * / % to two Integer operands"""
  if operator not in ARITHMETIC_OPERATORS:
    raise type_mismatch_error(operator, left, right)
  lvalue = expect_integer(left, operator, left, right)
  rvalue = expect_integer(right, operator, left, right)
  return make_integer(ARITHMETIC_OPERATORS[operator](lvalue, rvalue))


def unary_arithmetic_op(operator: str, operand: Value) -> IntegerValue:
  """Resolve prefix + and - on an Integer"""
  value = expect_integer(operand, operator)
  if operator == '+':
    return make_integer(value)
  if operator == '-':
    return make_integer(-value)
  raise type_mismatch_error(operator, operand)


# ==================== COMPARISON ====================

RELATIONAL_OPERATORS: Dict[str, Callable[[int, int], bool]] = {
  '==': lambda left, right: left == right,
  '!=': lambda left, right: left != right,
  '<': lambda left, right: left < right,
  '>': lambda left, right: left > right,
}

LOGICAL_OPERATORS: Dict[str, Callable[[bool, bool], bool]] = {
  'and': lambda left, right: left and right,
  '&&': lambda left, right: left and right,
  'or': lambda left, right: left or right,
  '||': lambda left, right: left or right,
}


def binary_comparison_op(operator: str, left: Value, right: Value) -> BooleanValue:
  """Compare two values after Boolean coercion; and/or test truthiness"""
  if operator in LOGICAL_OPERATORS:
    return make_boolean(LOGICAL_OPERATORS[operator](is_truthy(left), is_truthy(right)))
  if operator in RELATIONAL_OPERATORS:
    lvalue = as_comparable(left, operator, left, right)
    rvalue = as_comparable(right, operator, left, right)
    return make_boolean(RELATIONAL_OPERATORS[operator](lvalue, rvalue))
  raise type_mismatch_error(operator, left, right)
