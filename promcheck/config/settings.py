"""
Pydantic Settings Models for promcheck
One group of a .promcheck.yaml file validated into an immutable settings object
"""

import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from promcheck.checkers.samples import SampleMatch

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: Any) -> float:
    """
    Parse a duration into seconds

    Accepts plain numbers (seconds) and Go-style strings such as "500ms",
    "3s" or "1m30s".

    Args:
        value: Number or duration string

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the string is not a valid duration
    """
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        pass

    position = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return seconds


class MetricSample(BaseModel):
    """Label filter plus optional expected value for one instance"""

    labels: Dict[str, str] = Field(default_factory=dict)
    value: Optional[float] = Field(default=None)
    match: SampleMatch = Field(default=SampleMatch.STRICT, description="Label matching mode")

    model_config = ConfigDict(frozen=True)

    @field_validator("labels", mode="before")
    @classmethod
    def stringify_labels(cls, v: Any) -> Any:
        """YAML turns label values like 200 or true into non-strings"""
        if isinstance(v, dict):
            return {str(k): str(val).lower() if isinstance(val, bool) else str(val) for k, val in v.items()}
        return v


class MetricsConfig(BaseModel):
    """Assertions for one metric family"""

    name: str = Field(..., min_length=1, description="Metric family name")
    type: Optional[str] = Field(
        default=None, pattern="(?i)^(counter|gauge|summary|histogram|untyped)$"
    )
    value: Optional[float] = Field(
        default=None, description="Expected value of the instance without labels"
    )
    labels: List[str] = Field(default_factory=list)
    disallowed_labels: List[str] = Field(default_factory=list)
    samples: List[MetricSample] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ScriptHook(BaseModel):
    """Setup/teardown commands, run locally or inside a compose service"""

    name: str = Field(default="")
    container: Optional[str] = Field(default=None, description="Compose service to exec into")
    setup: List[str] = Field(default_factory=list)
    teardown: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CheckSettings(BaseSettings):
    """Complete configuration of one check group"""

    compose_file: str = Field(default="docker-compose.yml", description="Compose project file")
    container: str = Field(default="exporter", description="Compose service of the exporter")
    port: Optional[int] = Field(default=None, ge=1, le=65535, description="Exporter target port")
    base_url: str = Field(default="", description="External exporter URL; skips the compose exporter")
    path: str = Field(default="/metrics", pattern=r"^/.*$")
    wait: float = Field(default=3.0, ge=0, description="Warm-up sleep after exporter start (s)")
    startup_timeout: float = Field(default=60.0, gt=0, description="Exporter readiness bound (s)")
    allow_empty: bool = Field(default=False)
    remove_all_images: bool = Field(default=False, description="Remove compose images on teardown")
    disallowed_metrics: List[str] = Field(default_factory=list)
    metrics: List[MetricsConfig] = Field(default_factory=list)
    hooks: List[ScriptHook] = Field(default_factory=list)

    model_config = SettingsConfigDict(env_prefix="PROMCHECK_", extra="ignore", frozen=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment variables override values read from the YAML file
        return env_settings, init_settings, file_secret_settings

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v:
            return v
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid base_url {v!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"base_url must be an absolute http(s) URL: {v!r}")
        if url.port is not None and not 0 < url.port < 65536:
            raise ValueError(f"base_url port out of range: {url.port}")
        return v

    @field_validator("wait", "startup_timeout", mode="before")
    @classmethod
    def validate_duration(cls, v: Any) -> float:
        return parse_duration(v)

    @field_validator("disallowed_metrics", "metrics", "hooks", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """An empty YAML key (``metrics:``) loads as None"""
        return [] if v is None else v

    def uses_compose(self) -> bool:
        """Whether a compose stack is needed for the exporter or any hook"""
        return not self.base_url or any(hook.container for hook in self.hooks)
