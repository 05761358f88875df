"""Orbital Guardian realtime backend."""

from __future__ import annotations

from .settings import settings

__all__ = ["settings"]
