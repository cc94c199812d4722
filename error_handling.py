"""
Error taxonomy for the Rinha evaluator with detailed error messages
Structured error records plus exception classes raised by the loader and interpreter
"""

from typing import Dict, List, Optional
import json


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_load_error(
    message: str,
    filename: str = "<input>",
    line: int = 0,
    column: int = 0,
    path: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable load error structure"""
    return {
        'message': message,
        'filename': filename,
        'line': line,
        'column': column,
        'path': path,
        'context': context,
        'suggestions': suggestions or []
    }


def make_runtime_error(
    kind: str,
    message: str,
    span=None,
    env_snapshot: Optional[Dict[str, str]] = None
) -> Dict:
    """Create an immutable runtime error structure"""
    return {
        'kind': kind,
        'message': message,
        'span': span,
        'env_snapshot': env_snapshot
    }


def format_load_error(error: Dict) -> str:
    """Format load error as string"""
    if error['line']:
        error_msg = f"Malformed input in {error['filename']} at line {error['line']}, column {error['column']}:\n"
    else:
        error_msg = f"Malformed input in {error['filename']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['path']:
        error_msg += f"  At: {error['path']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += f"  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


def format_runtime_error(error: Dict) -> str:
    """Format runtime error as string"""
    error_msg = f"{error['kind']}: {error['message']}"
    if error['span'] is not None:
        error_msg += f" (at {error['span']})"
    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        if i == line_num - 1:  # Error line
            context_parts.append(f"{line_prefix}{lines[i]}")
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")
        else:
            context_parts.append(f"{line_prefix}{lines[i]}")

    return '\n'.join(context_parts)


def generate_suggestions(exc: json.JSONDecodeError, source_text: str) -> List[str]:
    """Generate helpful suggestions based on the decoder error"""
    suggestions = []

    if not source_text.strip():
        suggestions.append("The file is empty - a program document is a JSON object")
        return suggestions

    if "Expecting property name enclosed in double quotes" in exc.msg:
        suggestions.append("JSON keys need double quotes and no trailing commas")

    if "Expecting value" in exc.msg and "'" in source_text:
        suggestions.append("JSON strings use double quotes, not single quotes")

    if "Extra data" in exc.msg:
        suggestions.append("A program file holds exactly one JSON document")

    return suggestions


def enhance_decode_error_dict(exc: json.JSONDecodeError, source_text: str, filename: str = "<input>") -> Dict:
    """Convert a JSON decoder exception to an enhanced load error dict"""
    return make_load_error(
        message=exc.msg,
        filename=filename,
        line=exc.lineno,
        column=exc.colno,
        context=get_context_lines(source_text, exc.lineno, exc.colno),
        suggestions=generate_suggestions(exc, source_text)
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class RinhaError(Exception):
    """Root of every failure reported by the loader or the interpreter"""
    kind = "RinhaError"


class MalformedInputError(RinhaError):
    """The input document does not conform to the Term schema"""
    kind = "MalformedInput"

    def __init__(self, message: str, filename: str = "<input>", line: int = 0, column: int = 0,
                 path: Optional[str] = None, context: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column
        self.path = path
        self.context = context
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_load_error(
            self.message, self.filename, self.line, self.column,
            self.path, self.context, self.suggestions
        )
        return format_load_error(error_dict)


class RinhaRuntimeError(RinhaError):
    """Base class for failures raised while evaluating a well-formed program"""
    kind = "RuntimeError"

    def __init__(self, message: str, span=None, env_snapshot: Optional[Dict[str, str]] = None):
        self.message = message
        self.span = span
        self.env_snapshot = env_snapshot
        super().__init__(message)

    def __str__(self) -> str:
        return format_runtime_error(self.to_dict())

    def to_dict(self) -> Dict:
        return make_runtime_error(self.kind, self.message, self.span, self.env_snapshot)


class UnboundVariableError(RinhaRuntimeError):
    """A variable reference names something absent from the current scope"""
    kind = "UnboundVariable"


class TypeMismatchError(RinhaRuntimeError):
    """An operator or condition received an operand of the wrong variant"""
    kind = "TypeMismatch"


class InvalidPrintError(RinhaRuntimeError):
    """Print was applied to Void"""
    kind = "InvalidPrint"


class NotCallableError(RinhaRuntimeError):
    """The callee of a call did not evaluate to a closure"""
    kind = "NotCallable"


class ArityMismatchError(RinhaRuntimeError):
    """Argument count differs from the closure's parameter count"""
    kind = "ArityMismatch"


def decode_error_to_malformed(exc: json.JSONDecodeError, source_text: str, filename: str = "<input>") -> MalformedInputError:
    """Convert a JSON decoder exception to a MalformedInputError"""
    error_dict = enhance_decode_error_dict(exc, source_text, filename)
    return MalformedInputError(
        message=error_dict['message'],
        filename=error_dict['filename'],
        line=error_dict['line'],
        column=error_dict['column'],
        context=error_dict['context'],
        suggestions=error_dict['suggestions']
    )
