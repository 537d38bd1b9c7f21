"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import DepositorSettings


@dataclass
class AppState:
    """Container for application-wide state and dependencies.

    Passed through the run to avoid global state and enable testing.
    """

    settings: DepositorSettings
    logger: logging.Logger
