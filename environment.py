"""
Rinha runtime environments
Persistent name -> value mappings; every scope gets its own environment
"""

from typing import Dict, Mapping, Optional, Sequence

from frozendict import frozendict

from error_handling import ArityMismatchError, UnboundVariableError
from values import Closure, Value, VoidValue, render_value, type_name


Environment = frozendict


def make_env(bindings: Optional[Mapping[str, Value]] = None) -> Environment:
  """Create an immutable runtime environment"""
  return frozendict(bindings or {})


def env_bind(env: Environment, name: str, value: Value) -> Environment:
  """Return new environment with name bound to value"""
  return env | {name: value}


def env_extend(env: Environment, names: Sequence[str], values: Sequence[Value],
               span=None, label: str = "function") -> Environment:
  """Return new environment binding names to values positionally"""
  if len(names) != len(values):
    raise ArityMismatchError(
      f"{label} requires {len(names)} arguments, got {len(values)}", span)
  return env | dict(zip(names, values))


def env_lookup(env: Environment, name: str, span=None) -> Value:
  """Look up a value in the environment"""
  try:
    return env[name]
  except KeyError:
    raise UnboundVariableError(f"Unbound variable: {name}", span) from None


def env_snapshot(env: Environment) -> Environment:
  """Independent copy of the environment for a closure to capture"""
  # frozendict cannot be mutated, so sharing it is already a snapshot
  return env


def env_describe(env: Environment) -> Dict[str, str]:
  """Render every binding for error reports"""
  described = {}
  for name, value in env.items():
    if isinstance(value, (Closure, VoidValue)):
      described[name] = repr(value)
    else:
      described[name] = f"{render_value(value)} : {type_name(value)}"
  return described
