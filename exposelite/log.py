"""Audit logger sinks.

The manager talks to a tiny ``info(msg, ctx)`` interface. By default
nothing is logged; ``StdLg`` forwards to the standard ``logging`` module.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class Lg(Protocol):
    """Audit logger contract."""

    def info(self, msg: str, ctx: Mapping[str, Any] | None = None) -> None: ...


class NopLg:
    """Logger that drops everything."""

    def info(self, msg: str, ctx: Mapping[str, Any] | None = None) -> None:
        return None


class StdLg:
    """Adapter onto a stdlib logger.

    Args:
        name: Logger name.
        lvl: Level used for audit records.
    """

    def __init__(self, name: str = "exposelite.audit", lvl: int = logging.INFO) -> None:
        self.lg = logging.getLogger(name)
        self.lvl = lvl

    def info(self, msg: str, ctx: Mapping[str, Any] | None = None) -> None:
        self.lg.log(self.lvl, msg, extra={"ctx": dict(ctx or {})})


class MemLg:
    """Logger that keeps records in memory (tests, debugging)."""

    def __init__(self) -> None:
        self.recs: list[tuple[str, dict[str, Any]]] = []

    def info(self, msg: str, ctx: Mapping[str, Any] | None = None) -> None:
        self.recs.append((msg, dict(ctx or {})))

    def msgs(self) -> list[str]:
        return [m for m, _ in self.recs]
