"""
Rinha program loader
Turns a JSON document into the immutable term tree, rejecting anything that
does not conform to the node schema before evaluation starts
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union
import json

from error_handling import MalformedInputError, decode_error_to_malformed
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
    SourceSpan,
    StringLiteral,
    Term,
    VariableRef,
)
from values import INT32_MAX, INT32_MIN


OPERATORS = {
    'Add': BinaryOperator.ADD,
    'Sub': BinaryOperator.SUBTRACT,
    'Subtract': BinaryOperator.SUBTRACT,
    'Lt': BinaryOperator.LESS_THAN,
    'LessThan': BinaryOperator.LESS_THAN,
}


class TermLoader:
    """Validating converter from decoded JSON to terms"""

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self.builders: Dict[str, Callable[[Dict, str], Term]] = {
            'Int': self._load_int,
            'IntLiteral': self._load_int,
            'Str': self._load_str,
            'StringLiteral': self._load_str,
            'Bool': self._load_bool,
            'BoolLiteral': self._load_bool,
            'Print': self._load_print,
            'Binary': self._load_binary,
            'If': self._load_conditional,
            'Conditional': self._load_conditional,
            'Let': self._load_binding,
            'Binding': self._load_binding,
            'Var': self._load_variable,
            'VariableRef': self._load_variable,
            'Function': self._load_function,
            'FunctionLiteral': self._load_function,
            'Call': self._load_call,
        }

    # ------------------------------------------------------------------
    # Error helpers
    # ------------------------------------------------------------------

    def _error(self, message: str, path: str, suggestions=None) -> MalformedInputError:
        return MalformedInputError(message, filename=self.filename, path=path,
                                   suggestions=suggestions)

    def _field(self, node: Dict, path: str, *names: str) -> Tuple[Any, str]:
        """Fetch the first present field among its accepted spellings"""
        for name in names:
            if name in node:
                return node[name], f"{path}.{name}"
        raise self._error(f"Missing field '{names[0]}' in {node.get('kind')} node", path)

    def _location(self, node: Dict, path: str) -> Optional[SourceSpan]:
        location = node.get('location')
        if location is None:
            return None
        if not isinstance(location, dict):
            raise self._error("Location must be an object", f"{path}.location")
        start, end = location.get('start', 0), location.get('end', 0)
        if not _is_int(start) or not _is_int(end):
            raise self._error("Location offsets must be integers", f"{path}.location")
        filename = location.get('filename', self.filename)
        if not isinstance(filename, str):
            raise self._error("Location filename must be a string", f"{path}.location")
        return SourceSpan(filename, start, end)

    def _name(self, raw: Any, path: str) -> str:
        """Names are either plain strings or {"text": ...} objects"""
        if isinstance(raw, dict):
            raw = raw.get('text')
        if not isinstance(raw, str):
            raise self._error("Expected a name (string or object with 'text')", path)
        return raw

    # ------------------------------------------------------------------
    # Node builders
    # ------------------------------------------------------------------

    def load(self, node: Any, path: str = "expression") -> Term:
        if not isinstance(node, dict):
            raise self._error(f"Expected a term object, got {_json_type(node)}", path)

        kind = node.get('kind')
        if not isinstance(kind, str):
            raise self._error("Term is missing its 'kind' discriminator", path)

        builder = self.builders.get(kind)
        if builder is None:
            raise self._error(f"Unknown term kind: {kind}", path,
                              suggestions=[f"Known kinds: {', '.join(sorted(self.builders))}"])
        return builder(node, path)

    def _load_int(self, node: Dict, path: str) -> Term:
        value, value_path = self._field(node, path, 'value')
        if not _is_int(value):
            raise self._error(f"Int value must be an integer, got {_json_type(value)}", value_path)
        if not INT32_MIN <= value <= INT32_MAX:
            raise self._error(f"Int value {value} does not fit in 32 bits", value_path)
        return IntLiteral(value, self._location(node, path))

    def _load_str(self, node: Dict, path: str) -> Term:
        value, value_path = self._field(node, path, 'value')
        if not isinstance(value, str):
            raise self._error(f"Str value must be a string, got {_json_type(value)}", value_path)
        return StringLiteral(value, self._location(node, path))

    def _load_bool(self, node: Dict, path: str) -> Term:
        value, value_path = self._field(node, path, 'value')
        if not isinstance(value, bool):
            raise self._error(f"Bool value must be a boolean, got {_json_type(value)}", value_path)
        return BoolLiteral(value, self._location(node, path))

    def _load_print(self, node: Dict, path: str) -> Term:
        operand, operand_path = self._field(node, path, 'value', 'operand')
        return Print(self.load(operand, operand_path), self._location(node, path))

    def _load_binary(self, node: Dict, path: str) -> Term:
        lhs, lhs_path = self._field(node, path, 'lhs', 'left')
        op, op_path = self._field(node, path, 'op', 'operator')
        rhs, rhs_path = self._field(node, path, 'rhs', 'right')

        operator = OPERATORS.get(op) if isinstance(op, str) else None
        if operator is None:
            raise self._error(f"Unsupported binary operator: {op!r}", op_path,
                              suggestions=[f"Supported operators: {', '.join(OPERATORS)}"])

        left = self.load(lhs, lhs_path)
        right = self.load(rhs, rhs_path)
        return Binary(left, operator, right, self._location(node, path))

    def _load_conditional(self, node: Dict, path: str) -> Term:
        condition, condition_path = self._field(node, path, 'condition')
        then, then_path = self._field(node, path, 'then', 'thenBranch')
        otherwise, otherwise_path = self._field(node, path, 'otherwise', 'elseBranch')
        return Conditional(
            self.load(condition, condition_path),
            self.load(then, then_path),
            self.load(otherwise, otherwise_path),
            self._location(node, path),
        )

    def _load_binding(self, node: Dict, path: str) -> Term:
        name, name_path = self._field(node, path, 'name')
        value, value_path = self._field(node, path, 'value')
        continuation, next_path = self._field(node, path, 'next', 'continuation')
        return Binding(
            self._name(name, name_path),
            self.load(value, value_path),
            self.load(continuation, next_path),
            self._location(node, path),
        )

    def _load_variable(self, node: Dict, path: str) -> Term:
        name, name_path = self._field(node, path, 'text', 'name')
        return VariableRef(self._name(name, name_path), self._location(node, path))

    def _load_function(self, node: Dict, path: str) -> Term:
        parameters, params_path = self._field(node, path, 'parameters')
        if not isinstance(parameters, list):
            raise self._error("Function parameters must be a list", params_path)
        names = tuple(
            self._name(param, f"{params_path}[{i}]") for i, param in enumerate(parameters)
        )
        body, body_path = self._field(node, path, 'value', 'body')
        return FunctionLiteral(names, self.load(body, body_path), self._location(node, path))

    def _load_call(self, node: Dict, path: str) -> Term:
        callee, callee_path = self._field(node, path, 'callee')
        arguments, args_path = self._field(node, path, 'arguments')
        if not isinstance(arguments, list):
            raise self._error("Call arguments must be a list", args_path)
        return Call(
            self.load(callee, callee_path),
            tuple(self.load(arg, f"{args_path}[{i}]") for i, arg in enumerate(arguments)),
            self._location(node, path),
        )


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def _is_int(value: Any) -> bool:
    # bool is a subclass of int; JSON true/false are not integers
    return isinstance(value, int) and not isinstance(value, bool)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def load_term(node: Any, filename: str = "<input>", path: str = "expression") -> Term:
    """Convert one decoded JSON term"""
    return TermLoader(filename).load(node, path)


def load_program(document: Any, filename: str = "<input>") -> Program:
    """Convert a decoded program document"""
    loader = TermLoader(filename)
    if not isinstance(document, dict):
        raise loader._error(f"Program must be an object, got {_json_type(document)}", "<root>")
    if 'expression' not in document:
        raise loader._error("Program is missing 'expression'", "<root>")

    name = document.get('name', filename)
    if not isinstance(name, str):
        raise loader._error("Program name must be a string", "name")

    expression = loader.load(document['expression'], "expression")
    return Program(name, expression, loader._location(document, "<root>"))


def decode_json(source_text: str, filename: str = "<input>") -> Any:
    """Decode JSON, converting decoder errors to MalformedInputError with context"""
    try:
        return json.loads(source_text)
    except json.JSONDecodeError as e:
        raise decode_error_to_malformed(e, source_text, filename) from e


def load_program_string(source_text: str, filename: str = "<input>") -> Program:
    """Load a program from JSON text"""
    return load_program(decode_json(source_text, filename), filename)


def load_program_file(path: Union[str, Path]) -> Program:
    """Load a program from a UTF-8 JSON file"""
    path = Path(path)
    source_text = path.read_text(encoding='utf-8')
    return load_program_string(source_text, str(path))
