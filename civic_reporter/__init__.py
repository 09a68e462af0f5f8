"""On-device civic issue reporting: accounts, sessions and report records."""
from .main import CivicReporter, configure_logging, create_reporter

__all__ = ["CivicReporter", "configure_logging", "create_reporter"]
