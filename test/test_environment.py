"""
Environment tests: binding, lookup and snapshots
"""

import pytest
from environment import (
  env_bind,
  env_describe,
  env_extend,
  env_lookup,
  env_snapshot,
  make_env,
)
from error_handling import ArityMismatchError, UnboundVariableError
from values import VOID, IntValue, StrValue


class TestBinding:

  def test_lookup_bound_name(self):
    env = env_bind(make_env(), "x", IntValue(1))
    assert env_lookup(env, "x") == IntValue(1)

  def test_lookup_missing_name_fails(self):
    with pytest.raises(UnboundVariableError) as exc_info:
      env_lookup(make_env(), "missing")
    assert "missing" in exc_info.value.message
    assert exc_info.value.kind == "UnboundVariable"

  def test_rebinding_shadows(self):
    env = env_bind(make_env(), "x", IntValue(1))
    env = env_bind(env, "x", IntValue(2))
    assert env_lookup(env, "x") == IntValue(2)

  def test_bind_leaves_parent_untouched(self):
    """Each scope is derived, never shared"""
    parent = env_bind(make_env(), "x", IntValue(1))
    child = env_bind(parent, "y", IntValue(2))
    sibling = env_bind(parent, "x", IntValue(3))

    assert "y" not in parent
    assert env_lookup(parent, "x") == IntValue(1)
    assert env_lookup(child, "x") == IntValue(1)
    assert env_lookup(sibling, "x") == IntValue(3)
    assert "y" not in sibling


class TestSnapshot:

  def test_snapshot_is_unaffected_by_later_binds(self):
    env = env_bind(make_env(), "x", IntValue(1))
    snapshot = env_snapshot(env)
    env = env_bind(env, "x", IntValue(99))

    assert env_lookup(snapshot, "x") == IntValue(1)

  def test_snapshot_cannot_be_mutated(self):
    snapshot = env_snapshot(make_env({"x": IntValue(1)}))
    with pytest.raises((TypeError, AttributeError)):
      snapshot["x"] = IntValue(2)


class TestExtend:

  def test_extend_binds_positionally(self):
    env = env_extend(make_env(), ["a", "b"], [IntValue(1), StrValue("two")])
    assert env_lookup(env, "a") == IntValue(1)
    assert env_lookup(env, "b") == StrValue("two")

  def test_extend_with_mismatched_counts_fails(self):
    with pytest.raises(ArityMismatchError) as exc_info:
      env_extend(make_env(), ["a", "b"], [IntValue(1)], label="pair")
    assert exc_info.value.message == "pair requires 2 arguments, got 1"


class TestDescribe:

  def test_describe_renders_values(self):
    env = make_env({"n": IntValue(3), "s": StrValue("hi"), "v": VOID})
    described = env_describe(env)
    assert described["n"] == "3 : Int"
    assert described["s"] == "hi : Str"
    assert described["v"] == "VOID"
