"""Coordinates concurrent initialisation of values so each key's init runs once."""

from __future__ import annotations

import asyncio
import inspect
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Awaitable, Dict, Generic, Hashable, Optional, Tuple, Type, TypeVar, Union

V = TypeVar("V")

MAX_RETRIES = 200


@dataclass(frozen=True)
class Initialized(Generic[V]):
    """This call ran the init awaitable and produced ``value``."""

    value: V


@dataclass(frozen=True)
class ReadExisting(Generic[V]):
    """Another call ran the init awaitable; ``value`` is what it produced."""

    value: V


@dataclass(frozen=True)
class InitErr:
    """The init awaitable failed with an error of the expected type."""

    error: BaseException


InitResult = Union[Initialized, ReadExisting, InitErr]


class _State(Enum):
    COMPUTING = auto()
    READY = auto()
    INIT_FAILED = auto()
    ABORTED = auto()


class _Waiter:
    """The shared slot in which the running init publishes its outcome."""

    def __init__(self) -> None:
        self.state = _State.COMPUTING
        self.value: Any = None
        self.error: Optional[BaseException] = None
        self._event = asyncio.Event()

    @property
    def is_settled(self) -> bool:
        return self.state is not _State.COMPUTING

    def settle(
        self, state: _State, value: Any = None, error: Optional[BaseException] = None
    ) -> None:
        self.state = state
        self.value = value
        self.error = error
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


def _discard(init: Awaitable[Any]) -> None:
    if inspect.iscoroutine(init):
        init.close()


class ValueInitializer:
    """Ensures that, per key and error type, only one init awaitable runs at a time.

    Calls arriving while an init is in progress wait for its outcome. If the
    running init raises an unexpected exception or its task is cancelled, the
    waiting calls retry and one of them runs its own init.
    """

    def __init__(self) -> None:
        self._waiters: Dict[Tuple[Hashable, Any], _Waiter] = {}
        self._lock = threading.Lock()

    async def init_or_read(self, key: Hashable, init: Awaitable[V]) -> InitResult:
        """Run ``init`` unless another call for ``key`` already does.

        The waiter of a successful init stays registered under type id ``None``
        until ``remove_waiter(key, None)`` is called. Exceptions raised by
        ``init`` propagate to this caller only.
        """
        return await self._do_try_init(key, None, init, None)

    async def try_init_or_read(
        self, key: Hashable, init: Awaitable[V], error_type: Type[BaseException]
    ) -> InitResult:
        """Like ``init_or_read``, but errors of ``error_type`` become ``InitErr``.

        Such an error is shared with the calls waiting on this init, and the
        waiter is removed so that a later call tries again. The waiter of a
        successful init stays registered under ``error_type``.
        """
        return await self._do_try_init(key, error_type, init, error_type)

    def remove_waiter(self, key: Hashable, type_id: Any) -> None:
        """Forget the waiter registered for ``key`` and ``type_id``, if any."""
        with self._lock:
            self._waiters.pop((key, type_id), None)

    def _try_insert_waiter(
        self, key: Hashable, type_id: Any, waiter: _Waiter
    ) -> Optional[_Waiter]:
        with self._lock:
            existing = self._waiters.setdefault((key, type_id), waiter)
        return None if existing is waiter else existing

    async def _do_try_init(
        self,
        key: Hashable,
        type_id: Any,
        init: Awaitable[V],
        error_type: Optional[Type[BaseException]],
    ) -> InitResult:
        retries = 0
        while True:
            waiter = _Waiter()
            existing = self._try_insert_waiter(key, type_id, waiter)
            if existing is None:
                return await self._run_init(key, type_id, init, error_type, waiter)

            await existing.wait()
            if existing.state is _State.READY:
                _discard(init)
                return ReadExisting(existing.value)
            if existing.state is _State.INIT_FAILED and existing.error is not None:
                _discard(init)
                return InitErr(existing.error)
            if existing.state is _State.INIT_FAILED:
                retries += 1
                if retries >= MAX_RETRIES:
                    _discard(init)
                    raise RuntimeError(
                        "Too many retries. Tried to read the return value from the "
                        f"`init` future but failed {retries} times. "
                        "Maybe the `init` kept panicking?"
                    )
                continue
            if existing.state is _State.ABORTED:
                retries += 1
                if retries >= MAX_RETRIES:
                    _discard(init)
                    raise RuntimeError(
                        "Too many retries. Tried to read the return value from the "
                        f"`init` future but failed {retries} times. Maybe the future "
                        "containing `get_or_insert_with`/`get_or_try_insert_with` "
                        "kept being aborted?"
                    )
                continue
            _discard(init)
            raise RuntimeError(
                "Got unexpected state `Computing` after resolving `init` future."
            )

    async def _run_init(
        self,
        key: Hashable,
        type_id: Any,
        init: Awaitable[V],
        error_type: Optional[Type[BaseException]],
        waiter: _Waiter,
    ) -> InitResult:
        try:
            try:
                value = await init
            except Exception as exc:
                if error_type is not None and isinstance(exc, error_type):
                    waiter.settle(_State.INIT_FAILED, error=exc)
                    self.remove_waiter(key, type_id)
                    return InitErr(exc)
                waiter.settle(_State.INIT_FAILED)
                self.remove_waiter(key, type_id)
                raise
            waiter.settle(_State.READY, value=value)
            return Initialized(value)
        finally:
            if not waiter.is_settled:
                # The enclosing task was cancelled before init finished.
                waiter.settle(_State.ABORTED)
                self.remove_waiter(key, type_id)