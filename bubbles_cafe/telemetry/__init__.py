"""Telemetry and observability helpers for sync runs."""

from .logger import RunLogger

__all__ = ["RunLogger"]
