"""
Rinha runtime values
Tagged union of evaluation results and their textual rendering
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from error_handling import InvalidPrintError


INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


def wrap_int32(n: int) -> int:
  """Reduce an arbitrary integer to 32-bit two's complement"""
  return ((n - INT32_MIN) % 2 ** 32) + INT32_MIN


# ============================================================================
# VALUE VARIANTS
# ============================================================================

@dataclass(frozen=True)
class VoidValue:
  """Result of statements with no meaningful value, e.g. printing"""

  def __repr__(self) -> str:
    return "VOID"


VOID = VoidValue()


@dataclass(frozen=True)
class IntValue:
  value: int


@dataclass(frozen=True)
class BoolValue:
  value: bool


@dataclass(frozen=True)
class StrValue:
  value: str


@dataclass(frozen=True)
class Closure:
  """
  A function value: parameters, body and the scope captured at creation.

  `env` is a frozen snapshot of the defining scope. `name` is set when the
  closure was bound by a let, so the body can refer to itself by that name.
  """
  parameters: Tuple[str, ...]
  body: Any
  env: Any
  name: Optional[str] = None

  def __repr__(self) -> str:
    label = self.name or "<anonymous>"
    return f"Closure({label}, params={list(self.parameters)})"


Value = Union[VoidValue, IntValue, BoolValue, StrValue, Closure]

TRUE = BoolValue(True)
FALSE = BoolValue(False)


def make_int(n: int) -> IntValue:
  """Create an Int value, wrapping into the 32-bit signed range"""
  return IntValue(wrap_int32(n))


def make_bool(flag: bool) -> BoolValue:
  return TRUE if flag else FALSE


# ============================================================================
# RENDERING
# ============================================================================

def type_name(value: Value) -> str:
  """Name of the value's variant, for messages"""
  if isinstance(value, VoidValue):
    return "Void"
  elif isinstance(value, IntValue):
    return "Int"
  elif isinstance(value, BoolValue):
    return "Bool"
  elif isinstance(value, StrValue):
    return "Str"
  elif isinstance(value, Closure):
    return "Closure"
  raise TypeError(f"Not a runtime value: {value!r}")


def render_value(value: Value, span=None) -> str:
  """Convert a value to the text Print writes"""
  if isinstance(value, IntValue):
    return str(value.value)
  elif isinstance(value, BoolValue):
    return "true" if value.value else "false"
  elif isinstance(value, StrValue):
    return value.value
  elif isinstance(value, Closure):
    return "<#closure>"
  elif isinstance(value, VoidValue):
    raise InvalidPrintError("Cannot print void", span)
  raise TypeError(f"Not a runtime value: {value!r}")
