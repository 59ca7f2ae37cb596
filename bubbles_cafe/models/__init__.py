"""Data models used by sync and export stages."""

from .datatypes import Story, SyncSummary

__all__ = ["Story", "SyncSummary"]
