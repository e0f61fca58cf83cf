"""
Configuration for GELF serialization and the Graylog provider.
Values are fixed at construction; nothing here changes at runtime.
"""
from __future__ import annotations

import os
import socket
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_GELF_SPEC_VERSION = "1.1"


class GelfConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    spec_version: str = DEFAULT_GELF_SPEC_VERSION
    host: str = Field(..., description="Name of the host application sending events.")


class GraylogSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_url: str = Field(..., description="Graylog GELF HTTP input, e.g. http://graylog.example.org:12202/gelf")
    host_name: str
    spec_version: str = DEFAULT_GELF_SPEC_VERSION
    timeout_s: float = 5.0

    def gelf_config(self) -> GelfConfig:
        return GelfConfig(spec_version=self.spec_version, host=self.host_name)


def load_graylog_settings() -> Optional[GraylogSettings]:
    """Read Graylog settings from env vars; return None when no input URL is set."""
    input_url = os.getenv("GRAYLOG_INPUT_URL", "").strip()
    if not input_url:
        return None
    return GraylogSettings(
        input_url=input_url,
        host_name=os.getenv("GRAYLOG_HOST_NAME") or socket.gethostname(),
        spec_version=os.getenv("GELF_SPEC_VERSION", DEFAULT_GELF_SPEC_VERSION),
        timeout_s=float(os.getenv("GRAYLOG_TIMEOUT_S", "5")),
    )
