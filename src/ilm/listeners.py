"""Listener contracts and adapters.

CONTRACT
- Listener: what a runner hands to AsyncActionStep.perform_action
  - on_response(complete): the operation returned; complete=False means "not yet"
  - on_failure(exc): the operation (or its submission) errored
- ActionListener[T]: what an admin client calls back with its raw response
- Invariants:
  - NotifyOnceListener forwards at most one signal; later ones are logged and dropped
  - FutureListener maps on_response to Future.set_result and on_failure to
    Future.set_exception, keeping the exception instance
- Failure:
  - Adapters never turn a failure into a response or a response into a failure
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from loguru import logger

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


class Listener(Protocol):
    def on_response(self, complete: bool) -> None: ...
    def on_failure(self, exc: Exception) -> None: ...


class ActionListener(Protocol[T_contra]):
    def on_response(self, response: T_contra) -> None: ...
    def on_failure(self, exc: Exception) -> None: ...


@dataclass(frozen=True)
class CallbackListener(Generic[T]):
    """ActionListener assembled from two callables."""

    response_fn: Callable[[T], None]
    failure_fn: Callable[[Exception], None]

    def on_response(self, response: T) -> None:
        self.response_fn(response)

    def on_failure(self, exc: Exception) -> None:
        self.failure_fn(exc)


class NotifyOnceListener:
    """Guards a Listener so exactly one of its callbacks ever fires."""

    def __init__(self, delegate: Listener, *, label: str = "") -> None:
        self._delegate = delegate
        self._label = label
        self._lock = threading.Lock()
        self._notified = False

    @property
    def notified(self) -> bool:
        return self._notified

    def _claim(self) -> bool:
        with self._lock:
            if self._notified:
                return False
            self._notified = True
            return True

    def on_response(self, complete: bool) -> None:
        if not self._claim():
            logger.warning(f"Dropping duplicate response ({complete}) for {self._label or 'listener'}")
            return
        self._delegate.on_response(complete)

    def on_failure(self, exc: Exception) -> None:
        if not self._claim():
            logger.opt(exception=exc).warning(
                f"Dropping failure after listener for {self._label or 'listener'} was already notified"
            )
            return
        self._delegate.on_failure(exc)


class FutureListener:
    """Listener that resolves a concurrent.futures.Future[bool]."""

    def __init__(self, future: Future[bool] | None = None) -> None:
        self.future: Future[bool] = future if future is not None else Future()

    def on_response(self, complete: bool) -> None:
        self.future.set_result(complete)

    def on_failure(self, exc: Exception) -> None:
        self.future.set_exception(exc)
