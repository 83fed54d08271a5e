"""Per-call extraction state: name allocation and cancellation.

Every extraction call owns one ExtractionContext. Device, parasitic and net
counters live here, never at module level, so concurrent extractions over
independent inputs cannot collide and every call numbers from zero.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict, Optional


class ExtractionCancelled(RuntimeError):
    """Raised when an extraction is cancelled through its token."""


class CancellationToken:
    """Cooperative cancellation flag checked between outer-loop iterations.

    Thread-safe: cancel() may be called from any thread while the extraction
    runs on a worker.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ExtractionCancelled if cancel() has been called."""
        if self._event.is_set():
            raise ExtractionCancelled("Netlist extraction cancelled")


class ExtractionContext:
    """Name counters and cancellation for a single extraction call.

    Example:
        ctx = ExtractionContext()
        ctx.next_device('M')     # 'M0'
        ctx.next_parasitic('R')  # 'R0'
        ctx.next_net()           # 'n0'
    """

    NET_PREFIX = 'n'

    def __init__(self, cancel_token: Optional[CancellationToken] = None):
        self.cancel_token = cancel_token
        self._device_counter = 0
        self._parasitic_counter = 0
        self._net_counter = 0
        # Geometries dropped as degenerate, keyed by resolved layer alias
        self.skipped_geometries: Dict[str, int] = defaultdict(int)
        # Layers that had geometry but no technology entry
        self.skipped_layers: Dict[str, int] = defaultdict(int)

    def next_device(self, prefix: str) -> str:
        name = f"{prefix}{self._device_counter}"
        self._device_counter += 1
        return name

    def next_parasitic(self, prefix: str) -> str:
        name = f"{prefix}{self._parasitic_counter}"
        self._parasitic_counter += 1
        return name

    def next_net(self) -> str:
        name = f"{self.NET_PREFIX}{self._net_counter}"
        self._net_counter += 1
        return name

    def check_cancelled(self) -> None:
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled()
