"""Notifier protocol: the only outbound surface of a cycle."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Accepts finished text and delivers it, raising on failure."""

    async def send(self, text: str) -> None: ...
