from dataclasses import dataclass
from typing import Any, Optional


class UniError(Exception):
    """Base class for errors raised while lexing, parsing or running Uni code."""
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        location = f" at {line}:{column}" if line is not None else ''
        super().__init__(message + location)
        self.message = message
        self.line = line
        self.column = column


class LexerError(UniError):
    pass


class ParseError(UniError):
    pass


class RuntimeFault(UniError):
    """Fault surfaced from host semantics while evaluating (division by zero, bad index)."""
    def __init__(self, name: str, message: str):
        super().__init__(f"{name}: {message}")
        self.name = name
        self.message = message


@dataclass
class ReturnSignal:
    """Result of executing a return statement; carried up through enclosing blocks."""
    value: Any
