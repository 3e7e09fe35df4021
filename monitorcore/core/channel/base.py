# monitorcore/core/channel/base.py
"""
ProtocolChannel - the contract the step runner consumes.

The wire format (framing, handshake encoding) belongs to the concrete
implementation. From the runner's point of view every call is an atomic
request/response exchange: it awaits each one before issuing the next,
which is what keeps reports in order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

if TYPE_CHECKING:
    from ..errors import StepExecutionError
    from ..step import CleanupHandler, TeardownHandler


ConfigCallback = Callable[[Any], Awaitable[None]]


class ProtocolChannel(ABC):
    """
    Client side of the orchestrator protocol.
    """

    @abstractmethod
    async def handshake(self, config_callback: ConfigCallback) -> None:
        """
        Negotiate the session. ``config_callback`` is awaited with the
        orchestrator configuration, which is opaque to the harness.
        """

    @abstractmethod
    async def get_step(
        self,
        cleanup_handler: "CleanupHandler",
        teardown_handler: "TeardownHandler",
    ) -> Optional[str]:
        """
        Wait for the next instruction. Returns a step name, or None when
        the orchestrator ends the session. The handlers may be invoked by
        the channel while it waits.
        """

    @abstractmethod
    async def log_debug(self, text: str) -> None: ...

    @abstractmethod
    async def log_info(self, text: str) -> None: ...

    @abstractmethod
    async def log_error(self, text: str) -> None: ...

    @abstractmethod
    async def send_time(self, seconds: float) -> None: ...

    @abstractmethod
    async def send_ok(self) -> None: ...

    @abstractmethod
    async def send_error(self, error: "StepExecutionError") -> None: ...

    async def close(self) -> None:
        return None
