"""Observability package: logging configuration, correlation ids and request middleware."""

from compliance_index.observability.logger import configure_logging

__all__ = ["configure_logging"]
