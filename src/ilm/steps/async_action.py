"""Asynchronous action step.

CONTRACT
- Inputs: IndexMetadata snapshot (read-only), Listener supplied by the runner
- Outputs:
  - Exactly one admin request submitted per perform_action call
  - Exactly one of listener.on_response(complete) / listener.on_failure(exc)
- Invariants:
  - perform_action returns after submission, before the outcome is known
  - Incomplete (on_response(False)) and failed (on_failure) stay disjoint
  - Errors reach on_failure as the same instance the client raised or delivered
  - No internal retries; whether to retry is the runner's call (see is_retryable)
- Failure:
  - StepConfigurationError raised synchronously from perform_action, before submission
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

from loguru import logger

from ..client.base import AdminClient
from ..listeners import CallbackListener, FutureListener, Listener, NotifyOnceListener
from ..metadata import IndexMetadata
from .base import Step

Req = TypeVar("Req")
Resp = TypeVar("Resp")


@dataclass(frozen=True)
class AsyncActionStep(Step, ABC):
    client: AdminClient = field(compare=False, repr=False)

    retryable: ClassVar[bool] = True

    @abstractmethod
    def perform_action(self, index_metadata: IndexMetadata, listener: Listener) -> None: ...

    def _submit(
        self,
        operation: Callable[[Req, Any], None],
        request: Req,
        is_complete: Callable[[Resp], bool],
        listener: Listener,
    ) -> None:
        once = NotifyOnceListener(listener, label=str(self.key))

        def on_response(response: Resp) -> None:
            try:
                complete = is_complete(response)
            except Exception as exc:
                # Malformed response: still exactly one signal.
                on_failure(exc)
                return
            logger.info(f"Step {self.key} response: complete={complete}")
            once.on_response(complete)

        def on_failure(exc: Exception) -> None:
            logger.info(f"Step {self.key} failed: {exc!r}")
            once.on_failure(exc)

        logger.debug(f"Step {self.key} submitting {type(request).__name__}")
        try:
            operation(request, CallbackListener(on_response, on_failure))
        except Exception as exc:
            # Raised by the runner's own callback after a synchronous delivery.
            if once.notified:
                raise
            on_failure(exc)


def perform_action_future(step: AsyncActionStep, index_metadata: IndexMetadata) -> Future[bool]:
    """Run the step and expose its outcome as a Future (result=complete)."""
    listener = FutureListener()
    step.perform_action(index_metadata, listener)
    return listener.future


async def perform_action_async(step: AsyncActionStep, index_metadata: IndexMetadata) -> bool:
    return await asyncio.wrap_future(perform_action_future(step, index_metadata))
