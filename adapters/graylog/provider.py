"""
Graylog provider: serializes analytics events to GELF and POSTs them to a
Graylog HTTP input through an injected httpx client.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from core.analytics.events import AnalyticsEvent
from core.analytics.timed_events import TimedEventStore
from core.gelf.config import DEFAULT_GELF_SPEC_VERSION, GelfConfig, load_graylog_settings
from core.gelf.serializer import GelfSerializer

from adapters.graylog.response import GraylogResponse, GraylogResponseListener

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
TRANSPORT_FAILURE_CODE = 420
TRANSPORT_FAILURE_MESSAGE = "An error occurred communicating with the Graylog server"
EVENT_DURATION = "event_duration"


def format_duration(seconds: float) -> str:
    text = f"{seconds:.3f}".rstrip("0").rstrip(".")
    return text or "0"


class GraylogProvider:
    GELF_SPEC_VERSION = DEFAULT_GELF_SPEC_VERSION

    def __init__(
        self,
        client: httpx.Client,
        input_url: str,
        host_name: str,
        serializer: Optional[GelfSerializer] = None,
        timed_events: Optional[TimedEventStore] = None,
        owns_client: bool = False,
    ) -> None:
        self.client = client
        self.owns_client = owns_client
        self.input_url = input_url
        if serializer is None:
            serializer = GelfSerializer(GelfConfig(spec_version=self.GELF_SPEC_VERSION, host=host_name))
        self.serializer = serializer
        self.timed_events = timed_events if timed_events is not None else TimedEventStore()
        self.callback_listener: Optional[GraylogResponseListener] = None

    def close(self) -> None:
        """Close the HTTP client if this provider created it; injected clients stay open."""
        if self.owns_client:
            self.client.close()

    def __enter__(self) -> "GraylogProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def set_callback_handler(self, listener: GraylogResponseListener) -> "GraylogProvider":
        self.callback_listener = listener
        return self

    def send_event(self, event: AnalyticsEvent) -> None:
        if event.timed:
            # Held until end_timed_event reports the duration.
            self.timed_events.start(event)
            return
        self._log_from_json(event, self.serializer.serialize(event))

    def end_timed_event(self, timed_event: AnalyticsEvent) -> None:
        started, elapsed = self.timed_events.finish(timed_event.name)
        attributes = dict(started.attributes or {})
        attributes[EVENT_DURATION] = format_duration(elapsed)
        finished = AnalyticsEvent(
            name=started.name,
            attributes=attributes,
            timed=started.timed,
            priority=started.priority,
        )
        self._log_from_json(finished, self.serializer.serialize(finished))

    def _log_from_json(self, event: AnalyticsEvent, json_payload: str) -> None:
        try:
            response = self.client.post(
                self.input_url,
                content=json_payload.encode("utf-8"),
                headers={"Content-Type": JSON_CONTENT_TYPE},
            )
        except httpx.HTTPError as exc:
            logger.warning("Graylog input %s unreachable for event %s: %s", self.input_url, event.name, exc)
            code, message = TRANSPORT_FAILURE_CODE, TRANSPORT_FAILURE_MESSAGE
        else:
            logger.debug("Graylog input answered %s for event %s", response.status_code, event.name)
            code, message = response.status_code, response.reason_phrase

        if self.callback_listener is not None:
            self.callback_listener.on_graylog_response(
                GraylogResponse(
                    code=code,
                    message=message,
                    event_name=event.name,
                    event_id=event.fingerprint(),
                    json_payload=json_payload,
                )
            )


def init_graylog_provider(client: Optional[httpx.Client] = None) -> Optional[GraylogProvider]:
    """
    Build a provider from env vars if GRAYLOG_INPUT_URL is set; otherwise return None.
    A client created here is owned by the provider and released by ``close()``.
    """
    settings = load_graylog_settings()
    if settings is None:
        return None
    return GraylogProvider(
        client=client or httpx.Client(timeout=settings.timeout_s),
        owns_client=client is None,
        input_url=settings.input_url,
        host_name=settings.host_name,
        serializer=GelfSerializer(settings.gelf_config()),
    )
