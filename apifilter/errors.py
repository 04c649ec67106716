"""
errors.py

Error hierarchy for the API parameter filter.

Design principles:
- Raised before any new parameter set or chain is built
- Parser errors always carry the column of the offending character
- Explain what went wrong in plain language
- Suggest fixes when possible
"""

from typing import List, Optional


class ParameterFilterError(Exception):
    """
    Base class for all apifilter errors.

    Every error carries a short error code, a message and optionally
    the mask text and column it refers to, an explanation and a list
    of suggested fixes.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str = "",
        column: int = 0,
        explanation: str = "",
        suggestions: Optional[List[str]] = None,
        error_code: str = "E000",
    ):
        self.message = message
        self.source = source
        self.column = column
        self.explanation = explanation
        self.suggestions = suggestions or []
        self.error_code = error_code
        super().__init__(self.format_short())

    def format_short(self) -> str:
        """Format as single-line error message."""
        parts = [f"[{self.error_code}]"]
        if self.column > 0:
            parts.append(f"Column {self.column}:")
        parts.append(self.message)
        return " ".join(parts)

    def format_full(self) -> str:
        """Format as multi-line human-readable error."""
        lines = []

        header = f"Error {self.error_code}"
        if self.column > 0:
            header += f" at column {self.column}"
        lines.append(header)
        lines.append("")

        lines.append(f"  {self.message}")

        # Mask text with a pointer under the offending character
        if self.source:
            lines.append("")
            lines.append(f"    {self.source}")
            if self.column > 0:
                lines.append(" " * (4 + self.column - 1) + "^")

        if self.explanation:
            lines.append("")
            lines.append(f"  {self.explanation}")

        if self.suggestions:
            lines.append("")
            if len(self.suggestions) == 1:
                lines.append(f"  Suggestion: {self.suggestions[0]}")
            else:
                lines.append("  Suggestions:")
                for suggestion in self.suggestions:
                    lines.append(f"    - {suggestion}")

        return "\n".join(lines)


# === Mask Errors (E1xx) ===

class MalformedMaskError(ParameterFilterError):
    """Raised when an object mask string cannot be parsed."""

    def __init__(self, message: str, source: str = "", column: int = 0, **kwargs):
        kwargs.setdefault("error_code", "E100")
        super().__init__(message, source=source, column=column, **kwargs)


class EmptyMaskError(MalformedMaskError):
    """Raised when a mask string is empty or blank."""

    def __init__(self, source: str = ""):
        super().__init__(
            "Object mask is empty",
            source=source,
            explanation="An object mask must name at least one property.",
            suggestions=["Use a mask such as 'mask[id]'"],
            error_code="E101",
        )


class UnbalancedMaskError(MalformedMaskError):
    """Raised when brackets or parentheses do not pair up."""

    def __init__(self, delimiter: str, source: str, column: int):
        self.delimiter = delimiter
        closing = {"[": "]", "(": ")"}.get(delimiter)
        if closing:
            message = f"Unclosed '{delimiter}'"
            suggestions = [f"Add a matching '{closing}'"]
        else:
            message = f"Unmatched '{delimiter}'"
            suggestions = [f"Remove the '{delimiter}' or add its opening partner"]

        super().__init__(
            message,
            source=source,
            column=column,
            explanation="Brackets and parentheses in a mask must be balanced.",
            suggestions=suggestions,
            error_code="E102",
        )


class MissingNameError(MalformedMaskError):
    """Raised when a property or type reference has no name."""

    def __init__(self, what: str, source: str, column: int):
        self.what = what
        super().__init__(
            f"Missing {what} name",
            source=source,
            column=column,
            suggestions=[f"Add a {what} name here"],
            error_code="E103",
        )


class UnexpectedMaskTokenError(MalformedMaskError):
    """Raised when a character or token is not valid at its position."""

    def __init__(
        self,
        found: str,
        source: str,
        column: int,
        expected: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected
        message = f"Unexpected '{found}'"
        suggestions = []
        if expected:
            message = f"Expected {expected}, found '{found}'"
            suggestions.append(f"Replace '{found}' with {expected}")

        super().__init__(
            message,
            source=source,
            column=column,
            suggestions=suggestions,
            error_code="E104",
        )


# === Argument Errors (E2xx) ===

class InvalidArgumentError(ParameterFilterError, ValueError):
    """Raised when a scoping operation receives an argument it cannot use."""

    def __init__(self, operation: str, reason: str, *, error_code: str = "E201"):
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"{operation} {reason}",
            error_code=error_code,
        )


# === Call Errors (E3xx) ===

class UnhandledCallError(ParameterFilterError, AttributeError):
    """Raised when a call is neither a scoping operation nor forwardable."""

    def __init__(self, method_name: object, reason: str):
        self.method_name = method_name
        super().__init__(
            f"Cannot forward call to {method_name!r}: {reason}",
            explanation="Only named remote methods without a block are forwarded.",
            error_code="E301",
        )


# === Immutability Errors (E4xx) ===

class ParameterImmutabilityError(ParameterFilterError):
    """Raised when attempting to mutate a frozen parameter object."""

    def __init__(self, owner: str, operation: str):
        self.owner = owner
        self.operation = operation
        super().__init__(
            f"Cannot {operation}: {owner} is immutable after creation",
            suggestions=["Use the chain methods to build a new instance"],
            error_code="E401",
        )


# === Utility Functions ===

def format_error_for_user(error: BaseException) -> str:
    """
    Format any exception for user display.

    For ParameterFilterError instances, returns the human-friendly format.
    For other exceptions, returns a generic message without stack trace.
    """
    if isinstance(error, ParameterFilterError):
        return error.format_full()

    return (
        "Error E000\n"
        "\n"
        "  An unexpected error occurred.\n"
        "\n"
        "  If this persists, please report it as a bug."
    )
