"""Validator configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ValidatorConfig:
    """Defaults applied to new validators.

    Attributes:
        debug: Trace every node and clause to the structcheck logger
    """

    debug: bool = False

    @classmethod
    def from_env(cls) -> ValidatorConfig:
        """Create config from environment variables.

        STRUCTCHECK_DEBUG: 1/true/yes/on enables debug tracing
        """
        debug = os.environ.get("STRUCTCHECK_DEBUG", "").strip().lower() in _TRUTHY
        return cls(debug=debug)
