from __future__ import annotations


class CalculatorError(ValueError):
    """Base class for every error raised by the calculators."""


class InvalidInput(CalculatorError):
    """A single argument is malformed or out of range."""


class ValidationError(CalculatorError):
    """An input record is missing required fields."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class DomainError(CalculatorError):
    """A distribution function was evaluated outside its mathematical domain."""
