"""
Utilities module for the Rinha interpreter
Contains common helper functions shared by the evaluator
"""

from typing import Callable, Optional

from error_handling import NotCallableError, TypeMismatchError
from values import (
  IntValue,
  StrValue,
  Value,
  make_bool,
  make_int,
  type_name,
)


BinaryImpl = Callable[[Value, Value, Optional[object]], Value]


# ==================== ERROR MESSAGE BUILDERS ====================

def operation_error(op: str, left: Value, right: Value, span=None) -> TypeMismatchError:
  """
  Generate operation error

  Args:
    op: Operation name
    left: Left operand value
    right: Right operand value
    span: Location of the offending term

  Returns:
    TypeMismatchError with formatted message
  """
  return TypeMismatchError(
    f"Cannot {op} {type_name(left)} and {type_name(right)}", span
  )


def condition_error(actual: Value, span=None) -> TypeMismatchError:
  """Generate error for a non-Bool condition"""
  return TypeMismatchError(
    f"Condition must be Bool, got {type_name(actual)}", span
  )


def not_callable_error(actual: Value, span=None) -> NotCallableError:
  """Generate error for calling something that is not a closure"""
  return NotCallableError(
    f"Cannot call a value of type {type_name(actual)}", span
  )


# ==================== VALUE TEXT ====================

def concat_text(value: Value) -> Optional[str]:
  """Text an Add concatenation uses for a value, or None if it cannot take part"""
  if isinstance(value, StrValue):
    return value.value
  if isinstance(value, IntValue):
    return str(value.value)
  return None


# ==================== BINARY OPERATION FACTORIES ====================

def binary_int_op(
  op: Callable[[int, int], int],
  op_name: str
) -> BinaryImpl:
  """
  Factory for Int x Int -> Int operations, wrapping to 32 bits

  Examples:
    rinha_sub = binary_int_op(operator.sub, "subtract")
    rinha_sub(IntValue(3), IntValue(1), None) -> IntValue(2)
  """
  def arithmetic(x: Value, y: Value, span=None) -> Value:
    if isinstance(x, IntValue) and isinstance(y, IntValue):
      return make_int(op(x.value, y.value))
    raise operation_error(op_name, x, y, span)

  return arithmetic


def binary_comparison_op(
  op: Callable[[int, int], bool],
  op_name: str
) -> BinaryImpl:
  """
  Factory for Int x Int -> Bool comparisons

  Examples:
    rinha_lt = binary_comparison_op(operator.lt, "compare")
    rinha_lt(IntValue(1), IntValue(2), None) -> BoolValue(True)
  """
  def comparison(x: Value, y: Value, span=None) -> Value:
    if isinstance(x, IntValue) and isinstance(y, IntValue):
      return make_bool(op(x.value, y.value))
    raise operation_error(op_name, x, y, span)

  return comparison


def binary_add_op() -> BinaryImpl:
  """
  Factory for Add: integer sum, or concatenation when a Str is involved

  Str + Str, Str + Int and Int + Str concatenate left text first.
  """
  int_add = binary_int_op(lambda a, b: a + b, "add")

  def add(x: Value, y: Value, span=None) -> Value:
    if isinstance(x, IntValue) and isinstance(y, IntValue):
      return int_add(x, y, span)
    if isinstance(x, StrValue) or isinstance(y, StrValue):
      left, right = concat_text(x), concat_text(y)
      if left is not None and right is not None:
        return StrValue(left + right)
    raise operation_error("add", x, y, span)

  return add

