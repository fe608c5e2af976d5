"""Configuration package."""

from .settings import (
    GovernanceSettings,
    ModelSettings,
    ObservabilitySettings,
    PersistenceSettings,
    Settings,
    get_settings,
)

__all__ = [
    "GovernanceSettings",
    "ModelSettings",
    "ObservabilitySettings",
    "PersistenceSettings",
    "Settings",
    "get_settings",
]
