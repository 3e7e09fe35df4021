# monitorcore/core/channel/scripted.py
"""
ScriptedChannel - deterministic in-process orchestrator.

Plays back a fixed script of step names and handler markers, and records
every call it receives. Used for dry runs from the CLI and as the channel
double in tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from .base import ConfigCallback, ProtocolChannel
from ..errors import StepExecutionError
from ..step import CleanupHandler, TeardownHandler

logger = logging.getLogger(__name__)


CLEANUP = "@cleanup"
TEARDOWN = "@teardown"


@dataclass(frozen=True)
class ChannelCall:
    kind: str       # handshake / get_step / debug / info / error / time / ok / send_error / cleanup / teardown / handler_error
    payload: Any = None


class ScriptedChannel(ProtocolChannel):
    """
    Args:
        script: Step names in the order the orchestrator asks for them,
            mixed with the CLEANUP / TEARDOWN markers.
        config: Value handed to the handshake config callback.
        echo: Optional callable receiving every recorded ChannelCall.
    """

    def __init__(
        self,
        script: Iterable[str] = (),
        *,
        config: Any = None,
        echo: Optional[Callable[[ChannelCall], None]] = None,
    ) -> None:
        self._script: List[str] = list(script)
        self._cursor = 0
        self.config = config if config is not None else {}
        self.calls: List[ChannelCall] = []
        self._echo = echo
        self.closed = False

    # ---- recording ----

    def _record(self, kind: str, payload: Any = None) -> None:
        call = ChannelCall(kind=kind, payload=payload)
        self.calls.append(call)
        if self._echo is not None:
            self._echo(call)

    def kinds(self) -> List[str]:
        return [c.kind for c in self.calls]

    def of_kind(self, kind: str) -> List[ChannelCall]:
        return [c for c in self.calls if c.kind == kind]

    # ---- protocol ----

    async def handshake(self, config_callback: ConfigCallback) -> None:
        self._record("handshake", self.config)
        await config_callback(self.config)

    async def get_step(
        self,
        cleanup_handler: CleanupHandler,
        teardown_handler: TeardownHandler,
    ) -> Optional[str]:
        while self._cursor < len(self._script):
            item = self._script[self._cursor]
            self._cursor += 1

            if item == CLEANUP:
                await self._run_handler("cleanup", cleanup_handler)
                continue
            if item == TEARDOWN:
                await self._run_handler("teardown", teardown_handler)
                continue

            self._record("get_step", item)
            return item

        self._record("get_step", None)
        return None

    async def _run_handler(self, kind: str, handler: CleanupHandler) -> None:
        self._record(kind)
        try:
            await handler()
        except Exception as e:
            logger.warning("%s handler failed: %s", kind, e)
            self._record("handler_error", f"{kind}: {e}")

    async def log_debug(self, text: str) -> None:
        self._record("debug", text)

    async def log_info(self, text: str) -> None:
        self._record("info", text)

    async def log_error(self, text: str) -> None:
        self._record("error", text)

    async def send_time(self, seconds: float) -> None:
        self._record("time", seconds)

    async def send_ok(self) -> None:
        self._record("ok")

    async def send_error(self, error: StepExecutionError) -> None:
        self._record("send_error", error.message)

    async def close(self) -> None:
        self.closed = True
