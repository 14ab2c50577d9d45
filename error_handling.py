"""
Rascal error handling
Fault hierarchy for the scanner, parser and evaluator, plus helpers that
render a fault against the source text it came from
"""

from typing import Dict, List, Optional, Tuple


# ============================================================================
# FAULT HIERARCHY
# ============================================================================

class RascalError(Exception):
    """Base class for every terminal Rascal fault"""
    category = "Error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class RascalLexError(RascalError):
    """Character that does not start any token"""
    category = "LexError"

    def __init__(self, character: str, position: int):
        self.character = character
        self.position = position
        super().__init__(
            f"Lexical error: unexpected character '{character}' at position {position}"
        )


class RascalParseError(RascalError):
    """Unexpected token kind, or premature end of the token stream"""
    category = "ParseError"

    def __init__(self, expected: str, got: Optional[object] = None, position: int = 0):
        self.expected = expected
        self.got = got
        self.position = position
        if got is None:
            message = "Syntax error: unexpected end of file"
        else:
            message = f"Syntax error: expected {expected} found {got} at position {position}"
        super().__init__(message)


class RascalRuntimeError(RascalError):
    """Fault raised while evaluating a tree"""
    category = "RuntimeError"


class UnknownNameError(RascalRuntimeError):
    category = "UnknownName"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Variable {name} doesn't exist in this context")


class UndeclaredNameError(RascalRuntimeError):
    category = "UndeclaredName"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Value error: variable {name} used before declared.")


class AlreadyDefinedError(RascalRuntimeError):
    category = "AlreadyDefined"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Value error: variable {name} has already defined.")


class ImmutableReassignError(RascalRuntimeError):
    category = "ImmutableReassign"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Value error: imutable {name} was reassigned.")


class NotCallableError(RascalRuntimeError):
    category = "NotCallable"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Value error: {name} is not callable")


class ArityMismatchError(RascalRuntimeError):
    category = "ArityMismatch"

    def __init__(self, name: str, expected: int, got: int):
        self.name = name
        self.expected = expected
        self.got = got
        super().__init__(f"Value error: {name} expects {expected} arguments, got {got}")


class TypeMismatchError(RascalRuntimeError):
    category = "TypeMismatch"


class DivisionByZeroError(RascalRuntimeError):
    category = "DivisionByZero"

    def __init__(self, operator: str = "/"):
        self.operator = operator
        super().__init__("Operation error: division by zero")


class RecursionLimitError(RascalRuntimeError):
    category = "RecursionLimit"

    def __init__(self):
        super().__init__("Runtime error: maximum recursion depth exceeded")


# ============================================================================
# SOURCE CONTEXT
# ============================================================================

def position_to_line_col(source_text: str, position: int) -> Tuple[int, int]:
    """Convert a character offset into a 1-based (line, column) pair"""
    position = max(0, min(position, len(source_text)))
    before = source_text[:position]
    line = before.count('\n') + 1
    column = position - (before.rfind('\n') + 1) + 1
    return line, column


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


def error_position(error: RascalError) -> Optional[int]:
    """Character offset a fault points at, when it has one"""
    if isinstance(error, (RascalLexError, RascalParseError)):
        return error.position
    return None


def make_error_report(error: RascalError, source_text: str) -> Dict:
    """Collect everything needed to show a fault to a user"""
    report = {
        'category': error.category,
        'message': error.message,
        'line': None,
        'column': None,
        'context': None,
    }
    position = error_position(error)
    if position is not None:
        line, column = position_to_line_col(source_text, position)
        report['line'] = line
        report['column'] = column
        report['context'] = get_context_lines(source_text, line, column)
    return report


def format_error_report(report: Dict) -> str:
    """Format an error report as text"""
    parts: List[str] = [f"{report['category']}: {report['message']}"]
    if report['line'] is not None:
        parts.append(f"  at line {report['line']}, column {report['column']}")
    if report['context']:
        parts.append(report['context'])
    return '\n'.join(parts)
