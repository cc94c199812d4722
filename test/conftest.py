"""
Test configuration for the Rinha evaluator tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter
from terms import IntLiteral, StringLiteral, BoolLiteral


@pytest.fixture
def interpreter():
  """Provide a fresh interpreter writing to the real stdout"""
  return create_interpreter()


@pytest.fixture
def examples_dir():
  """Get the examples directory path"""
  return project_root / "examples"


def lit(value):
  """Shorthand for a literal term matching the Python value's type"""
  if isinstance(value, bool):
    return BoolLiteral(value)
  if isinstance(value, int):
    return IntLiteral(value)
  return StringLiteral(value)


@pytest.fixture(autouse=True)
def restore_recursion_limit():
  """The driver changes the interpreter-wide recursion limit; put it back"""
  limit = sys.getrecursionlimit()
  yield
  sys.setrecursionlimit(limit)
