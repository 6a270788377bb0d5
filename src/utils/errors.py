"""
Exception types raised by the acquisition and derivation layers.
"""

from typing import Any, Optional


class GaugeError(Exception):
    """Base class for gauge monitor errors."""


class NetworkError(GaugeError):
    """A request failed: non-success status, timeout, or transport error."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(GaugeError):
    """A response body did not have the expected shape."""


class InvalidOperand(GaugeError):
    """A custom gauge scalar operand could not be parsed as a number."""

    def __init__(self, step_index: int, operand: Any):
        super().__init__(f"Step {step_index}: operand {operand!r} is not a number")
        self.step_index = step_index
        self.operand = operand
