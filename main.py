"""
Rinha Evaluator - Main Entry Point
Runs programs given as JSON abstract syntax trees
"""

import argparse
import io
import os
import sys
from typing import Optional

# Readline support for history in interactive mode
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import MalformedInputError, RinhaRuntimeError
from interpreter import create_debug_interpreter, create_interpreter
from loading import decode_json, load_program, load_program_file, load_term
from terms import Program, pretty_print_term
from values import Closure, VoidValue, render_value, type_name


VERSION = "Rinha v0.1.0 (Tree-walking Evaluator)"
DEFAULT_RECURSION_LIMIT = 10000

EXIT_FAILURE = 1
EXIT_STACK_EXHAUSTED = 2


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Rinha evaluator - runs programs given as JSON syntax trees',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s program.json             # Run a program
  %(prog)s --dump program.json      # Load and show the term tree
  %(prog)s --debug program.json     # Run with an evaluation trace on stderr
  %(prog)s -i                       # Interactive mode
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='JSON program file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--dump',
      action='store_true',
      help='Load the file and show the term tree instead of running it'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Trace evaluation on stderr and show the scope on runtime errors'
  )

  parser.add_argument(
      '--recursion-limit',
      type=int,
      default=DEFAULT_RECURSION_LIMIT,
      metavar='N',
      help='Python recursion limit, bounds program nesting depth (default: %(default)s)'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def report(message: str) -> None:
  """Error reports go to stderr so they never mix with program output"""
  print(message, file=sys.stderr)


def report_runtime_error(e: RinhaRuntimeError, script_path: str, debug: bool = False) -> None:
  report(f"\n{'='*70}")
  report(f"Runtime Error in '{script_path}'")
  report(f"{'='*70}")
  report(f"\n{e.kind}: {e.message}")

  if e.span is not None:
    report(f"\nLocation: {e.span}")

  # Show environment snapshot if available
  if debug and e.env_snapshot:
    report(f"\nEnvironment at error:")
    bindings = list(e.env_snapshot.items())
    for name, value in bindings[:10]:  # Show first 10
      report(f"  {name} = {value[:60]}")
    if len(bindings) > 10:
      report(f"  ... and {len(bindings) - 10} more bindings")

  report(f"\n{'='*70}\n")


def read_program(script_path: str) -> Program:
  """Load a program file, exiting with a report on any failure"""
  try:
    return load_program_file(script_path)
  except FileNotFoundError:
    report(f"Error: Program file '{script_path}' not found")
    report(f"  Hint: Check the file path and make sure the file exists")
    sys.exit(EXIT_FAILURE)
  except PermissionError:
    report(f"Error: Permission denied reading '{script_path}'")
    report(f"  Hint: Make sure you have read permissions for this file")
    sys.exit(EXIT_FAILURE)
  except UnicodeDecodeError as e:
    report(f"Error: Cannot decode file '{script_path}': {e}")
    report(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(EXIT_FAILURE)
  except MalformedInputError as e:
    report(str(e))
    sys.exit(EXIT_FAILURE)
  except RecursionError:
    report(f"Fatal: stack exhausted while loading '{script_path}'")
    report(f"  Hint: Raise --recursion-limit for more deeply nested programs")
    sys.exit(EXIT_STACK_EXHAUSTED)


def dump_file(script_path: str) -> None:
  """Load a program file and show its term tree"""
  program = read_program(script_path)
  print(f"Program: {program.name}")
  print("=" * 50)
  print(pretty_print_term(program.expression))


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Load and evaluate a program file"""
  program = read_program(script_path)
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  if debug:
    report(f"Running {program.name} from {script_path}...")

  try:
    interpreter.run(program)
  except RinhaRuntimeError as e:
    sys.stdout.flush()
    report_runtime_error(e, script_path, debug)
    sys.exit(EXIT_FAILURE)
  except RecursionError:
    sys.stdout.flush()
    report(f"Fatal: stack exhausted while running '{script_path}'")
    report(f"  Hint: Raise --recursion-limit for deeper recursion")
    sys.exit(EXIT_STACK_EXHAUSTED)


def setup_readline() -> None:
  """Setup readline with history"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.rinha_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet

  readline.set_history_length(1000)

  import atexit
  atexit.register(readline.write_history_file, history_file)


def show_result(value) -> str:
  if isinstance(value, VoidValue):
    return "=> void : Void"
  if isinstance(value, Closure):
    return f"=> {value!r} : Closure"
  return f"=> {render_value(value)} : {type_name(value)}"


def evaluate_line(code: str, interpreter) -> str:
  """Evaluate one line of interactive input: a JSON term or program"""
  document = decode_json(code, "<stdin>")
  if isinstance(document, dict) and 'expression' in document:
    term = load_program(document, "<stdin>").expression
  else:
    term = load_term(document, "<stdin>")

  buffer = io.StringIO()
  interpreter.output = buffer
  value = interpreter.evaluate(term)

  printed = buffer.getvalue()
  if printed:
    return f"{printed}\n{show_result(value)}"
  return show_result(value)


def run_interactive_mode(debug: bool = False) -> None:
  """Read JSON terms line by line and show their values"""
  print(f"{VERSION} - Interactive Mode")
  print("Enter one JSON term per line. Type ':quit' to exit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      code = input("rinha> ").strip()
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if not code:
      continue

    if code == ":quit":
      break

    if code == ":help":
      print("Commands:")
      print("  :help             - Show this help")
      print("  :quit             - Exit")
      print()
      print("Example input:")
      print('  {"kind": "Binary", "lhs": {"kind": "Int", "value": 1}, "op": "Add", "rhs": {"kind": "Int", "value": 2}}')
      continue

    try:
      print(evaluate_line(code, interpreter))
    except MalformedInputError as e:
      print(str(e).rstrip())
    except RinhaRuntimeError as e:
      print(f"\nRuntime Error:")
      print(f"  {e}")
      print()
    except RecursionError:
      print("Fatal: stack exhausted")


def main(argv: Optional[list] = None) -> None:
  """Main entry point for the Rinha evaluator"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  sys.setrecursionlimit(max(args.recursion_limit, 100))

  if args.script:
    if args.dump:
      dump_file(args.script)
    else:
      run_script_file(args.script, debug=args.debug)

  elif args.interactive:
    run_interactive_mode(debug=args.debug)

  else:
    arg_parser.print_help()


if __name__ == "__main__":
  main()
