"""
Runtime context.

One AppContext lives from process start to shutdown and is handed to the
registry, dispatcher and router constructors instead of module globals.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from parley.config import DispatchSettings
from parley.logs import configure_logging


@dataclass
class AppContext:
    """Settings and logger shared by the dispatch components."""

    settings: DispatchSettings = field(default_factory=DispatchSettings)
    logger: Any = field(default_factory=lambda: structlog.get_logger("parley"))

    @classmethod
    def create(
        cls,
        settings: DispatchSettings | None = None,
        setup_logging: bool = True,
    ) -> "AppContext":
        """Build the context, optionally configuring logging from settings."""
        settings = settings or DispatchSettings()
        if setup_logging:
            configure_logging(settings.log_level, json=settings.log_json)
        return cls(settings=settings, logger=structlog.get_logger("parley"))

    def get_logger(self, component: str) -> Any:
        """Logger bound to a component name."""
        return self.logger.bind(component=component)
