"""Runtime settings for asynchon.

Every field can be overridden through an ``ASYNCHON_<FIELD>`` environment
variable, e.g. ``ASYNCHON_REQUEST_TIMEOUT=10``.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

__all__ = ["Settings", "settings"]

ENV_PREFIX = "ASYNCHON_"


class Settings(BaseModel):
    """Process-wide configuration values."""

    api_url: str = Field(
        default="https://api-iot.he.services",
        description="Base URL of the hOn cloud API",
    )
    app_version: str = Field(default="2.6.5", description="Mobile app version reported to the API")
    os: str = Field(default="android", description="Mobile OS reported to the API")
    os_version: int = Field(default=999, description="Mobile OS version reported to the API")
    device_model: str = Field(default="asynchon", description="Device model reported to the API")

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single API request (seconds)",
    )
    attribute_lock_timeout: float = Field(
        default=10.0,
        ge=0,
        description="How long a shielded attribute ignores device pushes (seconds)",
    )
    minimal_update_interval: float = Field(
        default=5.0,
        ge=0,
        description="Minimum age of attribute data before update() reloads it (seconds)",
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from defaults overridden by ``ASYNCHON_*`` variables."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is not None:
                overrides[name] = raw
        return cls.model_validate(overrides)


settings = Settings.from_env()
