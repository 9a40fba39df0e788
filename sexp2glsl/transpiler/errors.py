"""
Exceptions and error handling for the s-expression to GLSL translator.

This module defines custom exceptions that are raised during macro expansion,
generation, emission and reading of shader forms.
"""

from typing import Any


class TranspilerError(Exception):
    """Exception raised for errors during shader translation.

    This is the main exception class used throughout the translator. When the
    offending form is known, its s-expression text is appended to the message
    so the caller can find it in their shader source.

    Examples:
        >>> raise TranspilerError("Unknown function: my-func")
        TranspilerError: Unknown function: my-func
    """

    def __init__(self, message: str, form: Any | None = None):
        """Initialize the exception with a message and optional form.

        Args:
            message: The error message
            form: Optional expression tree node where the error occurred
        """
        self.message = message
        self.form = form

        location_info = ""
        if form is not None:
            # Imported lazily, forms.py raises TranspilerError itself
            from sexp2glsl.transpiler.forms import to_source

            location_info = f" in form `{to_source(form)}`"

        super().__init__(f"{message}{location_info}")

    def with_form(self, form: Any) -> "TranspilerError":
        """Create a new error of the same type with a different form.

        Args:
            form: Expression tree node to associate with the error

        Returns:
            A new TranspilerError instance with the updated form
        """
        return type(self)(self.message, form)


class MalformedFormError(TranspilerError):
    """A form has the wrong shape or arity for its operator."""


class UnknownOperatorError(TranspilerError):
    """An operator is neither a builtin, a known GLSL function nor a user function.

    Only raised when strict function checking is enabled.
    """


class ImportCycleError(TranspilerError):
    """An import chain revisits a binding, or generation never settles."""


class MissingBindingError(TranspilerError):
    """An imported symbol could not be resolved in its namespace."""

    def __init__(
        self,
        namespace: str,
        name: str,
        reason: str | None = None,
        form: Any | None = None,
    ):
        self.namespace = namespace
        self.name = name
        self.reason = reason
        message = f"Unable to resolve '{name}' in namespace '{namespace}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, form)

    def with_form(self, form: Any) -> "TranspilerError":
        return type(self)(self.namespace, self.name, self.reason, form)


class InvalidBindingError(MissingBindingError):
    """An imported symbol is bound to a value that is not a valid form."""


class ReaderError(TranspilerError):
    """Raised when s-expression text cannot be read."""

    def __init__(self, message: str, line: int, column: int):
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, column {column}")
