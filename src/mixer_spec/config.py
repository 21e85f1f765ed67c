"""
Global configuration for the mixer protocol.

This module contains environment-specific settings that apply across all subspecs.
"""

import os

_SUPPORTED_MIXER_ENVS: list[str] = ["prod", "test"]

MIXER_ENV = os.environ.get("MIXER_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). Defaults to 'prod'."""

if MIXER_ENV not in _SUPPORTED_MIXER_ENVS:
    raise ValueError(
        f"Invalid MIXER_ENV environment variable: '{MIXER_ENV}'. "
        f"Supported values: {_SUPPORTED_MIXER_ENVS}"
    )
