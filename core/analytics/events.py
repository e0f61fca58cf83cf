"""
Analytics event definitions.
Applications build these events; providers consume them.
"""
from __future__ import annotations

import hashlib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

# Values a provider knows how to ship. Exceptions are carried as their
# text description and never introspected further.
AttributeValue = Union[
    str,
    int,
    float,
    bool,
    Sequence["AttributeValue"],
    Mapping[str, "AttributeValue"],
    BaseException,
]


class CommonEvents:
    CONTENT_VIEW = "Content View"
    ERROR = "Error"


@dataclass
class AnalyticsEvent:
    name: str
    attributes: Optional[Dict[str, Any]] = None
    timed: bool = False
    priority: int = 0

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("AnalyticsEvent requires a non-empty name.")

    def put_attribute(self, attribute_name: str, value: Any) -> "AnalyticsEvent":
        if self.attributes is None:
            self.attributes = {}
        self.attributes[attribute_name] = value
        return self

    def get_attribute(self, attribute_name: str) -> Any:
        if self.attributes is None:
            return None
        return self.attributes.get(attribute_name)

    def set_timed(self, timed: bool) -> "AnalyticsEvent":
        self.timed = timed
        return self

    def set_priority(self, priority: int) -> "AnalyticsEvent":
        self.priority = priority
        return self

    def fingerprint(self) -> str:
        """Stable identity of the event, reported back alongside provider responses."""
        return hashlib.sha256(repr(self).encode("utf-8", "surrogatepass")).hexdigest()[:16]


class ContentViewEvent(AnalyticsEvent):
    CONTENT_NAME = "contentName"

    def __init__(self, content_name: str) -> None:
        super().__init__(CommonEvents.CONTENT_VIEW)
        self.put_attribute(self.CONTENT_NAME, content_name)


class ErrorEvent(AnalyticsEvent):
    ERROR_MESSAGE = "error_message"
    EXCEPTION_OBJECT = "exception_object"

    def __init__(self, name: str = CommonEvents.ERROR) -> None:
        super().__init__(name)

    def set_message(self, message: str) -> "ErrorEvent":
        self.put_attribute(self.ERROR_MESSAGE, message)
        return self

    def message(self) -> Optional[str]:
        value = self.get_attribute(self.ERROR_MESSAGE)
        return str(value) if value is not None else None

    def set_exception(self, exception: BaseException) -> "ErrorEvent":
        self.put_attribute(self.EXCEPTION_OBJECT, exception)
        return self

    def exception(self) -> Optional[BaseException]:
        return self.get_attribute(self.EXCEPTION_OBJECT)
