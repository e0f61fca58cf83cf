"""
GELF 1.1 serializer: turns an AnalyticsEvent into the JSON body accepted by a
Graylog GELF HTTP input.

GELF spec fields (version, host, short_message, full_message, timestamp, level) are
written first in that fixed order; every other attribute follows as an
underscore-prefixed additional field, in the event's attribute order.
"""
from __future__ import annotations

import json
import logging
import math
import re
import time
import traceback
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Set

from core.analytics.events import AnalyticsEvent
from core.gelf.config import GelfConfig
from core.gelf.errors import CyclicAttributeError, ReservedFieldViolation, UnsupportedValueType

logger = logging.getLogger(__name__)

# Graylog drops oversized fields; measured in UTF-16 code units.
MAX_FIELD_LENGTH = 32_000

RESERVED_FIELDS = ("version", "host", "short_message", "full_message", "timestamp", "level")
FORBIDDEN_FIELD = "id"
DEFAULT_LEVEL = 6  # syslog Informational

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_WHITESPACE_RE = re.compile(r"\s")
_JSON_NUMBER_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_SURROGATE_RE = re.compile("[\ud800-\udfff]")


def safe_size_string(value: str) -> str:
    """Cap ``value`` at MAX_FIELD_LENGTH UTF-16 units without splitting a surrogate pair."""
    # Every code point is at most two UTF-16 units.
    if len(value) * 2 <= MAX_FIELD_LENGTH:
        return value
    encoded = value.encode("utf-16-le", "surrogatepass")
    if len(encoded) // 2 <= MAX_FIELD_LENGTH:
        return value
    cut = MAX_FIELD_LENGTH
    last_unit = int.from_bytes(encoded[2 * cut - 2 : 2 * cut], "little")
    if 0xD800 <= last_unit <= 0xDBFF:
        cut -= 1
    logger.debug("Truncating GELF field from %d to %d UTF-16 units", len(encoded) // 2, cut)
    return encoded[: 2 * cut].decode("utf-16-le", "surrogatepass")


def describe(value: Any) -> str:
    """Text representation used for exceptions and user-supplied GELF spec fields."""
    if isinstance(value, BaseException):
        return "".join(traceback.format_exception_only(type(value), value)).strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def additional_field_name(attribute_name: str) -> str:
    # Graylog ignores field names containing whitespace.
    name = _WHITESPACE_RE.sub("_", attribute_name)
    return name if name.startswith("_") else f"_{name}"


def serialize_value(value: Any, _active: Optional[Set[int]] = None) -> str:
    """Serialize one attribute value (recursing into lists and maps)."""
    if isinstance(value, str):
        return _quote(safe_size_string(value))
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise UnsupportedValueType(type(value).__name__, "integer outside the signed 64-bit range")
        return str(int(value))
    if isinstance(value, float):
        if not math.isfinite(value):
            raise UnsupportedValueType(type(value).__name__, f"{value!r} has no JSON representation")
        return float.__repr__(value)
    if isinstance(value, (list, tuple)):
        return serialize_list(value, _active)
    if isinstance(value, Mapping):
        return serialize_map(value, _active)
    if isinstance(value, BaseException):
        return _quote(safe_size_string(describe(value)))
    raise UnsupportedValueType(type(value).__name__)


def serialize_list(values: Any, _active: Optional[Set[int]] = None) -> str:
    active = _enter(values, _active)
    try:
        return "[" + ", ".join(serialize_value(element, active) for element in values) + "]"
    finally:
        active.discard(id(values))


def serialize_map(values: Mapping, _active: Optional[Set[int]] = None) -> str:
    active = _enter(values, _active)
    try:
        members = []
        for key, inner in values.items():
            if not isinstance(key, str):
                raise UnsupportedValueType(type(key).__name__, "map keys must be text")
            members.append(f"{_quote(key)}: {serialize_value(inner, active)}")
        return "{" + ", ".join(members) + "}"
    finally:
        active.discard(id(values))


def _enter(container: Any, active: Optional[Set[int]]) -> Set[int]:
    active = set() if active is None else active
    if id(container) in active:
        raise CyclicAttributeError(type(container).__name__)
    active.add(id(container))
    return active


def _quote(text: str) -> str:
    # Lone surrogates cannot be encoded as UTF-8; keep them as \u escapes.
    return _SURROGATE_RE.sub(lambda m: f"\\u{ord(m.group()):04x}", json.dumps(text, ensure_ascii=False))


def _opaque_literal(text: str) -> str:
    # Pre-formatted numbers go out bare; anything else must stay a JSON string.
    text = safe_size_string(text)
    if _JSON_NUMBER_RE.fullmatch(text):
        return text
    return _quote(text)


class GelfSerializer:
    """
    Stateless after construction: ``serialize`` only reads its event and the
    frozen config, so one instance can be shared across threads.
    """

    def __init__(self, config: GelfConfig, clock: Callable[[], float] = time.time) -> None:
        self.config = config
        self._spec_version = safe_size_string(config.spec_version)
        self._host = safe_size_string(config.host)
        self._clock = clock

    def serialize(self, event: AnalyticsEvent) -> str:
        attributes: Dict[Any, Any] = event.attributes or {}
        for key in attributes:
            if not isinstance(key, str):
                raise UnsupportedValueType(type(key).__name__, "attribute names must be text")
            # Libraries SHOULD NOT allow sending id as an additional field (_id).
            if key.lower() == FORBIDDEN_FIELD:
                raise ReservedFieldViolation(key)

        members = self._spec_fields(event.name, self._reserved_values(attributes))
        emitted: Set[str] = set()
        for key, value in attributes.items():
            if key.lower() in RESERVED_FIELDS:
                continue
            field_name = additional_field_name(key)
            # First attribute to claim a field name wins.
            if field_name in emitted:
                logger.debug("Dropping attribute %r: field %s already emitted", key, field_name)
                continue
            emitted.add(field_name)
            members.append(f"{_quote(field_name)}: {serialize_value(value)}")
        return "{" + ", ".join(members) + "}"

    def _reserved_values(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        found: Dict[str, Any] = {}
        for key, value in attributes.items():
            lowered = key.lower()
            if lowered in RESERVED_FIELDS:
                found.setdefault(lowered, value)
        return found

    def _spec_fields(self, event_name: str, reserved: Dict[str, Any]) -> List[str]:
        members = [
            f'"version": {_quote(self._spec_version)}',
            f'"host": {_quote(self._host)}',
            f'"short_message": {_quote(safe_size_string(event_name))}',
        ]
        if "full_message" in reserved:
            members.append(f'"full_message": {_quote(safe_size_string(describe(reserved["full_message"])))}')

        if "timestamp" in reserved:
            members.append(f'"timestamp": {_opaque_literal(describe(reserved["timestamp"]))}')
        else:
            now = math.floor(self._clock() * 1000) / 1000.0
            members.append(f'"timestamp": {float.__repr__(now)}')

        if "level" in reserved:
            members.append(f'"level": {_opaque_literal(describe(reserved["level"]))}')
        else:
            members.append(f'"level": {DEFAULT_LEVEL}')
        return members
