"""Configuration for realtime telemetry ingestion."""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from cmgboat.telemetry.buffer import DEFAULT_CAPACITY
from cmgboat.typecheck import beartype

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_POLLING_INTERVAL_MS = 100  # 10 Hz
DEFAULT_TAG_FIELD = "serverTimestamp"


@beartype
@dataclass(frozen=True)
class IngestionConfig:
    """Settings for polling an external telemetry relay.

    Attributes:
        api_url: Base address of the relay API
        endpoint: Latest-frame resource below api_url
        polling_interval_ms: Time between polls [ms]; shorter is more
            responsive, longer puts less load on the relay
        use_local_time: Consumers replace each frame's t with local elapsed
            time since the first frame (for sources whose clock is static
            or non-monotonic)
        buffer_capacity: Accepted frames kept in memory
        request_timeout_s: Timeout of one poll request [s]
        tag_field: Response key carrying the relay's dedup tag
    """
    api_url: str = DEFAULT_API_URL
    endpoint: str = "telemetry"
    polling_interval_ms: int = DEFAULT_POLLING_INTERVAL_MS
    use_local_time: bool = False
    buffer_capacity: int = DEFAULT_CAPACITY
    request_timeout_s: float = 2.0
    tag_field: str = DEFAULT_TAG_FIELD

    def __post_init__(self) -> None:
        if self.polling_interval_ms <= 0:
            raise ValueError(f"polling_interval_ms must be positive, got {self.polling_interval_ms}")
        if self.buffer_capacity < 1:
            raise ValueError(f"buffer_capacity must be at least 1, got {self.buffer_capacity}")
        if self.request_timeout_s <= 0:
            raise ValueError(f"request_timeout_s must be positive, got {self.request_timeout_s}")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "IngestionConfig":
        """Defaults overridden by the given settings.

        Accepts the camelCase names used by the display layer
        (``apiUrl``, ``pollingInterval``, ``useLocalTime``) as well as the
        attribute names.

        Raises:
            ValueError: If a setting is unknown
        """
        aliases = {
            "apiUrl": "api_url",
            "pollingInterval": "polling_interval_ms",
            "useLocalTime": "use_local_time",
        }
        known = set(cls.__dataclass_fields__)
        overrides: dict[str, Any] = {}
        for key, value in values.items():
            name = aliases.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown ingestion setting: {key}")
            overrides[name] = value
        if "request_timeout_s" in overrides:
            overrides["request_timeout_s"] = float(overrides["request_timeout_s"])
        return replace(cls(), **overrides)

    @property
    def url(self) -> str:
        """Full address of the latest-frame resource."""
        return f"{self.api_url.rstrip('/')}/{self.endpoint.lstrip('/')}"

    @property
    def polling_interval_s(self) -> float:
        return self.polling_interval_ms / 1000.0
