"""Dialogue script compile errors."""

from typing import Optional


class DialogueSyntaxError(ValueError):
    """
    Raised when dialogue source or an expression fails to compile.

    This is a load-time error. line_number is the 1-based source line, or
    None for expression strings compiled on their own.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.message = message
        self.line_number = line_number
        if line_number is not None:
            super().__init__(f"line {line_number}: {message}")
        else:
            super().__init__(message)
