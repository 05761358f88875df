"""Logging setup for the realtime service."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from orbital_guardian.realtime.channels import Channel
from orbital_guardian.settings import ServiceConfig
from orbital_guardian.structured_logging import configure_structured_logging

# Highlighted in console output so channel traffic stands out.
CHANNEL_KEYWORDS = [channel.value for channel in Channel]


def configure_logging(level: str = "INFO") -> None:
    console = Console()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                markup=False,
                rich_tracebacks=True,
                show_path=False,
                keywords=CHANNEL_KEYWORDS,
            )
        ],
        force=True,
    )


def configure_service_logging(config: ServiceConfig) -> None:
    """Install JSON or rich console logging according to ``LOG_FORMAT``."""
    if config.log_format == "json":
        configure_structured_logging(config.log_level)
    else:
        configure_logging(config.log_level)


__all__ = ["CHANNEL_KEYWORDS", "configure_logging", "configure_service_logging"]
