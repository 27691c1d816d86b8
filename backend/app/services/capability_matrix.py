"""Capability matrix — which upstream providers are configured, and what to do when they aren't.

No key, no call: a provider is enabled only when every setting it needs is
present and is not a placeholder. Computed once per process from Settings and
passed to every component that needs it.
"""

import logging
from dataclasses import dataclass

from app.config import Settings, settings

logger = logging.getLogger(__name__)

PLACEHOLDER_VALUES = frozenset({"your_key_here", "your_api_key_here", "change-me", "changeme"})


@dataclass(frozen=True)
class ProviderSpec:
    """Static description of one upstream provider."""
    name: str
    settings_keys: tuple[str, ...]
    fallback: str
    weight: float | None = None


@dataclass(frozen=True)
class ProviderCapability:
    name: str
    enabled: bool
    fallback: str
    settings_keys: tuple[str, ...]
    missing_keys: tuple[str, ...] = ()
    weight: float | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "enabled": self.enabled,
            "fallback": self.fallback,
            "missing": list(self.missing_keys),
        }


PROVIDERS: tuple[ProviderSpec, ...] = (
    ProviderSpec("qloo", ("qloo_api_key",), "content-heuristic", weight=0.45),
    ProviderSpec("scraperapi", ("scraperapi_key",), "basic-requests"),
    ProviderSpec("amadeus", ("amadeus_api_key", "amadeus_api_secret"), "heuristic-pricing"),
    ProviderSpec("numbeo", ("numbeo_api_key",), "cost-bands"),
    ProviderSpec("youtube", ("youtube_api_key",), "omit-signal", weight=0.25),
    ProviderSpec("instagram", ("instagram_access_token",), "omit-signal"),
    ProviderSpec("tiktok", ("tiktok_client_key", "tiktok_client_secret"), "omit-signal"),
    ProviderSpec("places", ("google_places_api_key",), "osm-nominatim"),
    ProviderSpec("ticketmaster", ("ticketmaster_api_key",), "omit-events"),
    ProviderSpec("social_searcher", ("social_searcher_api_key",), "available-platforms"),
    ProviderSpec("gemini", ("gemini_api_key",), "retrieval-only"),
    ProviderSpec("openai", ("openai_api_key",), "retrieval-only"),
    ProviderSpec("anthropic", ("anthropic_api_key",), "retrieval-only"),
    ProviderSpec("sendgrid", ("sendgrid_api_key",), "gmail-smtp"),
)

SOCIAL_PLATFORMS: tuple[str, ...] = ("youtube", "instagram", "tiktok")


def is_valid_setting(value) -> bool:
    """A configured value counts only if it is a non-blank, non-placeholder string."""
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    return bool(stripped) and stripped.lower() not in PLACEHOLDER_VALUES


class CapabilityMatrix:
    """Read-only enabled/fallback record per provider."""

    def __init__(self, capabilities: dict[str, ProviderCapability]):
        self._capabilities = dict(capabilities)

    def __contains__(self, name: str) -> bool:
        return name in self._capabilities

    def get(self, name: str) -> ProviderCapability | None:
        return self._capabilities.get(name)

    def is_enabled(self, name: str) -> bool:
        cap = self._capabilities.get(name)
        return cap.enabled if cap else False

    def fallback_for(self, name: str) -> str:
        cap = self._capabilities.get(name)
        return cap.fallback if cap else "unavailable"

    def enabled(self) -> list[str]:
        return [name for name, cap in self._capabilities.items() if cap.enabled]

    def disabled(self) -> list[str]:
        return [name for name, cap in self._capabilities.items() if not cap.enabled]

    def fallbacks(self) -> list[str]:
        return [
            f"{name}->{cap.fallback}"
            for name, cap in self._capabilities.items()
            if not cap.enabled and cap.fallback != "unavailable"
        ]

    def enabled_platforms(self, platforms: tuple[str, ...] = SOCIAL_PLATFORMS) -> list[str]:
        return [p for p in platforms if self.is_enabled(p)]

    def metrics(self) -> dict:
        return {
            "enabled_count": len(self.enabled()),
            "disabled_count": len(self.disabled()),
            "fallback_count": len(self.fallbacks()),
        }

    def to_dict(self) -> dict:
        return {
            "providers": [cap.to_dict() for cap in self._capabilities.values()],
            **self.metrics(),
        }

    def report(self) -> None:
        """Log the one-time capability report."""
        logger.info(f"Enabled providers: {self.enabled()}")
        logger.info(f"Disabled providers: {self.disabled()}")
        if self.fallbacks():
            logger.info(f"Fallbacks in use: {self.fallbacks()}")


def build_capability_matrix(
    source: Settings,
    providers: tuple[ProviderSpec, ...] = PROVIDERS,
) -> CapabilityMatrix:
    """Inspect settings and build the matrix. No network calls."""
    capabilities: dict[str, ProviderCapability] = {}
    for spec in providers:
        missing = tuple(
            key for key in spec.settings_keys
            if not is_valid_setting(getattr(source, key, None))
        )
        enabled = not missing
        capabilities[spec.name] = ProviderCapability(
            name=spec.name,
            enabled=enabled,
            fallback=spec.fallback,
            settings_keys=spec.settings_keys,
            missing_keys=missing,
            weight=spec.weight,
        )
        if not enabled:
            logger.warning(f"Provider {spec.name} disabled — missing: {', '.join(missing)}")
    return CapabilityMatrix(capabilities)


_matrix: CapabilityMatrix | None = None


def get_capability_matrix() -> CapabilityMatrix:
    """Process-wide matrix, built from the global settings on first use."""
    global _matrix
    if _matrix is None:
        _matrix = build_capability_matrix(settings)
        _matrix.report()
    return _matrix
