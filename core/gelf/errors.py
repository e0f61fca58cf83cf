"""
Errors raised while turning an analytics event into a GELF payload.
A failed serialization never yields a partial document.
"""
from __future__ import annotations


class GelfSerializationError(Exception):
    """Base class for GELF serialization failures."""


class ReservedFieldViolation(GelfSerializationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is NOT allowed as an additional field according to the GELF spec!")
        self.field = field


class UnsupportedValueType(GelfSerializationError):
    def __init__(self, type_name: str, detail: str | None = None) -> None:
        message = f"Unsupported type for GELF message: {type_name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.type_name = type_name


class CyclicAttributeError(GelfSerializationError):
    def __init__(self, type_name: str) -> None:
        super().__init__(f"Attribute value contains itself: {type_name}")
        self.type_name = type_name
