"""
Rinha AST model
Immutable term nodes produced by the loader and walked by the interpreter
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class SourceSpan:
    """Source location of a term, as byte offsets into the source program"""
    filename: str
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.start}-{self.end}"


class BinaryOperator(Enum):
    ADD = "Add"
    SUBTRACT = "Subtract"
    LESS_THAN = "LessThan"


@dataclass(frozen=True)
class IntLiteral:
    value: int
    location: Optional[SourceSpan] = None


@dataclass(frozen=True)
class StringLiteral:
    value: str
    location: Optional[SourceSpan] = None


@dataclass(frozen=True)
class BoolLiteral:
    value: bool
    location: Optional[SourceSpan] = None


@dataclass(frozen=True)
class Print:
    operand: 'Term'
    location: Optional[SourceSpan] = None


@dataclass(frozen=True)
class Binary:
    left: 'Term'
    operator: BinaryOperator
    right: 'Term'
    location: Optional[SourceSpan] = None


@dataclass(frozen=True)
class Conditional:
    condition: 'Term'
    then_branch: 'Term'
    else_branch: 'Term'
    location: Optional[SourceSpan] = None


@dataclass(frozen=True)
class Binding:
    """let name = value; continuation"""
    name: str
    value: 'Term'
    continuation: 'Term'
    location: Optional[SourceSpan] = None


@dataclass(frozen=True)
class VariableRef:
    name: str
    location: Optional[SourceSpan] = None


@dataclass(frozen=True)
class FunctionLiteral:
    parameters: Tuple[str, ...]
    body: 'Term'
    location: Optional[SourceSpan] = None


@dataclass(frozen=True)
class Call:
    callee: 'Term'
    arguments: Tuple['Term', ...]
    location: Optional[SourceSpan] = None


Term = Union[
    IntLiteral, StringLiteral, BoolLiteral, Print, Binary,
    Conditional, Binding, VariableRef, FunctionLiteral, Call,
]

@dataclass(frozen=True)
class Program:
    """Top-level document: a program identifier and its root expression"""
    name: str
    expression: Term
    location: Optional[SourceSpan] = None


# ============================================================================
# PRETTY PRINTING
# ============================================================================

def _term_label(term: Term) -> str:
    if isinstance(term, IntLiteral):
        return f"IntLiteral({term.value})"
    if isinstance(term, StringLiteral):
        return f"StringLiteral({term.value!r})"
    if isinstance(term, BoolLiteral):
        return f"BoolLiteral({'true' if term.value else 'false'})"
    if isinstance(term, Binary):
        return f"Binary({term.operator.value})"
    if isinstance(term, Binding):
        return f"Binding({term.name})"
    if isinstance(term, VariableRef):
        return f"VariableRef({term.name})"
    if isinstance(term, FunctionLiteral):
        return f"FunctionLiteral({', '.join(term.parameters)})"
    return type(term).__name__


def _term_children(term: Term) -> List[Tuple[str, Term]]:
    if isinstance(term, Print):
        return [('operand', term.operand)]
    if isinstance(term, Binary):
        return [('left', term.left), ('right', term.right)]
    if isinstance(term, Conditional):
        return [('condition', term.condition), ('then', term.then_branch),
                ('else', term.else_branch)]
    if isinstance(term, Binding):
        return [('value', term.value), ('continuation', term.continuation)]
    if isinstance(term, FunctionLiteral):
        return [('body', term.body)]
    if isinstance(term, Call):
        children = [('callee', term.callee)]
        children.extend((f"arg{i}", arg) for i, arg in enumerate(term.arguments))
        return children
    return []


def pretty_print_term(term: Term, indent: int = 0, label: Optional[str] = None) -> str:
    """Pretty print a term tree for debugging"""
    prefix = "  " * indent
    head = f"{label}: " if label else ""
    lines = [f"{prefix}{head}{_term_label(term)}"]

    for child_label, child in _term_children(term):
        lines.append(pretty_print_term(child, indent + 1, child_label))

    return '\n'.join(lines)
