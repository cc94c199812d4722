"""
Rinha Interpreter - Tree-walking evaluator
Pure structural recursion over the term tree with environment threading
Side effects (printing) are confined to Print nodes
"""

from dataclasses import replace
from typing import Dict, List, Optional, Union
import operator
import sys

from environment import (
  Environment,
  env_bind,
  env_describe,
  env_extend,
  env_lookup,
  env_snapshot,
  make_env,
)
from error_handling import RinhaRuntimeError
from terms import (
  Binary,
  BinaryOperator,
  Binding,
  BoolLiteral,
  Call,
  Conditional,
  FunctionLiteral,
  IntLiteral,
  Print,
  Program,
  StringLiteral,
  Term,
  VariableRef,
)
from utilities import (
  binary_add_op,
  binary_comparison_op,
  binary_int_op,
  condition_error,
  not_callable_error,
)
from values import (
  BoolValue,
  Closure,
  StrValue,
  VOID,
  Value,
  make_bool,
  make_int,
  render_value,
  type_name,
)


# ============================================================================
# EXECUTION CONTEXT
# ============================================================================

def make_execution_context(output=None) -> Dict:
  """Create an execution context: output stream and nesting depth"""
  return {
      'output': output,
      'depth': 0
  }


def write_output(text: str, context: Dict) -> None:
  """Write Print output; None means whatever sys.stdout is right now"""
  stream = context.get('output') or sys.stdout
  stream.write(text)
  stream.flush()


def trace(message: str, context: Dict) -> None:
  """Debug trace, kept off stdout so program output stays clean"""
  print(f"{'  ' * context['depth']}{message}", file=sys.stderr)


# ============================================================================
# BUILT-IN OPERATIONS
# ============================================================================

BUILTIN_OPERATORS = {
    BinaryOperator.ADD: binary_add_op(),
    BinaryOperator.SUBTRACT: binary_int_op(operator.sub, "subtract"),
    BinaryOperator.LESS_THAN: binary_comparison_op(operator.lt, "compare"),
}


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_term(term: Term, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """
  Evaluate a term in an environment and return its value.
  The environment is never modified; scope-entering terms derive new ones.
  """
  if context is None:
    context = make_execution_context()

  if debug:
    trace(f"Evaluating: {type(term).__name__}", context)

  context['depth'] += 1
  try:
    if isinstance(term, IntLiteral):
      result = eval_int(term, env, debug, context)
    elif isinstance(term, StringLiteral):
      result = eval_string(term, env, debug, context)
    elif isinstance(term, BoolLiteral):
      result = eval_bool(term, env, debug, context)
    elif isinstance(term, Print):
      result = eval_print(term, env, debug, context)
    elif isinstance(term, Binary):
      result = eval_binary(term, env, debug, context)
    elif isinstance(term, Conditional):
      result = eval_conditional(term, env, debug, context)
    elif isinstance(term, Binding):
      result = eval_binding(term, env, debug, context)
    elif isinstance(term, VariableRef):
      result = eval_variable(term, env, debug, context)
    elif isinstance(term, FunctionLiteral):
      result = eval_function(term, env, debug, context)
    elif isinstance(term, Call):
      result = eval_call(term, env, debug, context)
    else:
      raise TypeError(f"Unknown term type: {type(term).__name__}")
  except RinhaRuntimeError as e:
    if debug and e.env_snapshot is None:
      e.env_snapshot = env_describe(env)
    raise
  finally:
    context['depth'] -= 1

  if debug:
    trace(f"-> {type_name(result)} {result!r}", context)

  return result


def eval_int(term: IntLiteral, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate integer literal"""
  return make_int(term.value)


def eval_string(term: StringLiteral, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate string literal"""
  return StrValue(term.value)


def eval_bool(term: BoolLiteral, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate boolean literal"""
  return make_bool(term.value)


def eval_print(term: Print, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate the operand and write its rendering, with no separator"""
  value = eval_term(term.operand, env, debug, context)
  write_output(render_value(value, term.location), context)
  return VOID


def eval_binary(term: Binary, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate binary operation; both operands always, left first"""
  left_val = eval_term(term.left, env, debug, context)
  right_val = eval_term(term.right, env, debug, context)

  op_func = BUILTIN_OPERATORS[term.operator]
  return op_func(left_val, right_val, term.location)


def eval_conditional(term: Conditional, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate the condition, then only the selected branch"""
  condition = eval_term(term.condition, env, debug, context)
  if not isinstance(condition, BoolValue):
    raise condition_error(condition, term.location)

  if condition.value:
    return eval_term(term.then_branch, env, debug, context)
  return eval_term(term.else_branch, env, debug, context)


def eval_binding(term: Binding, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate let: bind the value, then evaluate the continuation in the new scope"""
  value = eval_term(term.value, env, debug, context)

  # A function bound by let may call itself through its binding name
  if isinstance(term.value, FunctionLiteral) and isinstance(value, Closure):
    value = replace(value, name=term.name)

  inner_env = env_bind(env, term.name, value)
  return eval_term(term.continuation, inner_env, debug, context)


def eval_variable(term: VariableRef, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate variable reference by looking up in environment"""
  return env_lookup(env, term.name, term.location)


def eval_function(term: FunctionLiteral, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate function literal into a closure over a snapshot of the scope"""
  return Closure(term.parameters, term.body, env_snapshot(env))


def eval_call(term: Call, env: Environment, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Evaluate function application"""
  callee = eval_term(term.callee, env, debug, context)
  if not isinstance(callee, Closure):
    raise not_callable_error(callee, term.location)

  # Arguments are evaluated eagerly, left to right, in the caller's scope
  args = [eval_term(arg, env, debug, context) for arg in term.arguments]

  return apply_closure(callee, args, debug, context, term.location)


def apply_closure(closure: Closure, args: List[Value], debug: bool = False,
                  context: Optional[Dict] = None, span=None) -> Value:
  """Run a closure's body in its captured scope extended with the arguments"""
  call_env = closure.env
  if closure.name is not None:
    call_env = env_bind(call_env, closure.name, closure)

  call_env = env_extend(call_env, closure.parameters, args, span,
                        label=closure.name or "function")

  if debug:
    trace(f"Calling {closure.name or '<anonymous>'} with {args}", context)

  return eval_term(closure.body, call_env, debug, context)


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def eval_program(program: Union[Program, Term], debug: bool = False, output=None) -> Value:
  """
  Evaluate a program (or a bare term) in an empty environment.
  Returns the value of the root expression.
  """
  term = program.expression if isinstance(program, Program) else program
  context = make_execution_context(output)
  return eval_term(term, make_env(), debug, context)


# ============================================================================
# FACTORY FUNCTIONS (for main.py)
# ============================================================================

class Interpreter:
  """Evaluator bound to a debug flag and an output stream"""

  def __init__(self, debug: bool = False, output=None):
    self.debug = debug
    self.output = output

  def run(self, program: Union[Program, Term]) -> Value:
    return eval_program(program, self.debug, self.output)

  def evaluate(self, term: Term, env: Optional[Environment] = None) -> Value:
    context = make_execution_context(self.output)
    return eval_term(term, env if env is not None else make_env(), self.debug, context)


def create_interpreter(debug: bool = False, output=None) -> Interpreter:
  """Factory function returning an interpreter"""
  return Interpreter(debug=debug, output=output)


def create_debug_interpreter(output=None) -> Interpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True, output=output)
