"""
Action execution with a per-run log.

A run goes Idle -> Executing -> Success | Failure -> Idle. Every run clears
the log, writes one "Executing..." line and then exactly one outcome line.
Failures from the ledger client end up in the log and in the returned
outcome; ``execute`` itself never raises.
"""

from __future__ import annotations

import asyncio
import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol

from ..utils import clock_time

logger = logging.getLogger(__name__)


class ExecutionMode(enum.Enum):
    READ_ONLY = "read-only"
    SUBMIT = "submit"


class ExecutorState(enum.Enum):
    IDLE = "idle"
    EXECUTING = "executing"


class ActionClient(Protocol):
    async def execute_actions(self, actions: list[dict[str, Any]]) -> Any:
        ...

    async def send_transaction(self, actions: list[dict[str, Any]]) -> Any:
        ...


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    text: str

    def __str__(self) -> str:
        return f"{self.timestamp} - {self.text}"


@dataclass(frozen=True)
class ExecutionOutcome:
    ok: bool
    result: Any = None
    error: str = ""


def summarize(result: Any) -> str:
    return json.dumps(result, indent=2, default=str)


def describe_error(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ActionExecutor:
    """Runs ABI actions in read-only or submit mode against a ledger client.

    ``on_submitted`` is started as a background task after each successful
    submission (typically a balance refresh) and is not awaited by
    ``execute``.
    """

    def __init__(
        self,
        client: ActionClient,
        *,
        on_submitted: Optional[Callable[[], Awaitable[Any]]] = None,
        clock: Callable[[], str] = clock_time,
    ) -> None:
        self.client = client
        self.on_submitted = on_submitted
        self.clock = clock
        self.state = ExecutorState.IDLE
        self.log: list[LogEntry] = []
        self._listeners: list[Callable[[LogEntry], None]] = []
        self._background: set[asyncio.Task[Any]] = set()

    def subscribe(self, listener: Callable[[LogEntry], None]) -> None:
        self._listeners.append(listener)

    def _append(self, text: str) -> LogEntry:
        entry = LogEntry(timestamp=self.clock(), text=text)
        self.log.append(entry)
        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception:
                logger.exception("Execution log listener failed")
        return entry

    async def execute(
        self,
        action_name: str,
        encoded_fields: dict[str, str],
        mode: ExecutionMode = ExecutionMode.READ_ONLY,
    ) -> ExecutionOutcome:
        self.log = []
        self.state = ExecutorState.EXECUTING
        self._append("Executing...")

        actions = [{"actionName": action_name, "data": dict(encoded_fields)}]
        logger.debug("Action data for %s (%s): %s", action_name, mode.value, encoded_fields)

        try:
            if mode is ExecutionMode.READ_ONLY:
                result = await self.client.execute_actions(actions)
            else:
                result = await self.client.send_transaction(actions)
        except Exception as exc:
            message = describe_error(exc)
            logger.error("%s %s failed: %s", mode.value, action_name, message)
            self._append(f"Error: {message}")
            self.state = ExecutorState.IDLE
            return ExecutionOutcome(ok=False, error=message)

        self._append(f"Success: {summarize(result)}")
        self.state = ExecutorState.IDLE
        if mode is ExecutionMode.SUBMIT and self.on_submitted is not None:
            self._spawn_refresh()
        return ExecutionOutcome(ok=True, result=result)

    def _spawn_refresh(self) -> None:
        task = asyncio.create_task(self._run_refresh())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _run_refresh(self) -> None:
        assert self.on_submitted is not None
        try:
            await self.on_submitted()
        except Exception:
            logger.exception("Post-submit refresh failed")

    async def drain(self) -> None:
        """Wait for background refreshes started by earlier submissions."""
        if self._background:
            await asyncio.gather(*list(self._background))
