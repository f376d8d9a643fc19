"""Procedural ocean surface and coastal geometry package."""

from .config import DEFAULT_OCEAN_SEGMENTS, DEFAULT_OCEAN_SIZE, OceanGridConfig, ShoreConfig, WaveConfig

__all__ = ["DEFAULT_OCEAN_SIZE", "DEFAULT_OCEAN_SEGMENTS", "OceanGridConfig", "ShoreConfig", "WaveConfig"]
