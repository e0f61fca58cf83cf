"""
Result of one POST to a Graylog input, plus the listener contract that
receives it.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


class GraylogResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: int
    message: str
    event_name: str
    event_id: str
    json_payload: str


@runtime_checkable
class GraylogResponseListener(Protocol):
    def on_graylog_response(self, response: GraylogResponse) -> None:
        """Called after each event is sent to the Graylog input."""
