"""
Error taxonomy for the LOB Alpha Research System.

Numeric degeneracy (zero volume, zero spread, zero variance) is never an
error: feature and metric code returns a neutral 0 instead. Everything below
rejects an operation before any state is mutated.
"""

from typing import Any, Dict, Optional


class LOBAlphaError(Exception):
    """Base class for all rejected operations."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(LOBAlphaError, ValueError):
    """Invalid configuration, rejected at construction time."""

    def __init__(self, message: str, field_name: Optional[str] = None, value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field_name = field_name
        self.value = value


class InsufficientDataError(LOBAlphaError):
    """Not enough snapshots or signals to run the requested operation."""

    def __init__(
        self,
        message: str,
        required_count: Optional[int] = None,
        available_count: Optional[int] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.required_count = required_count
        self.available_count = available_count


class MissingSelectionError(LOBAlphaError):
    """No symbol chosen, or no data stored for the chosen symbol."""

    def __init__(self, message: str, symbol: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.symbol = symbol


class DataValidationError(LOBAlphaError):
    """Input data is structurally unusable (e.g. mixed symbols, empty file)."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.source = source


__all__ = [
    "LOBAlphaError",
    "ConfigurationError",
    "InsufficientDataError",
    "MissingSelectionError",
    "DataValidationError",
]
