from __future__ import annotations

import threading
import time
from collections.abc import Callable
from enum import Enum

from tenacity import (
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    stop_never,
    stop_when_event_set,
    wait_fixed,
)

from ..core import (
    DEFAULT_POLL_INTERVAL,
    OPERATION_FAILURE_STATUSES,
    OPERATION_SUCCESS_STATUSES,
)
from ..errors import OperationFailed, OperationTimeout
from ..gateway.base import ResourceGateway
from ..logger import logger
from ..schemas.resources import OperationHandle, OperationState


class Phase(str, Enum):
    IN_PROGRESS = "in-progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def classify(state: OperationState) -> Phase:
    """
    ABORTING is a failure. DONE is a success unless the operation carries an
    error. Anything else, including statuses we do not know, keeps polling.
    """
    if state.status in OPERATION_FAILURE_STATUSES:
        return Phase.FAILED
    if state.status in OPERATION_SUCCESS_STATUSES:
        return Phase.FAILED if state.error else Phase.SUCCEEDED
    return Phase.IN_PROGRESS


class OperationPoller:
    """Follows one long-running cluster operation until it is terminal."""

    def __init__(
        self,
        gateway: ResourceGateway,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float | None = None,
        max_attempts: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
        cancel: threading.Event | None = None,
    ):
        self.gateway = gateway
        self.interval = interval
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.sleep = sleep
        self.cancel = cancel

    def _stop(self, cancel: threading.Event | None):
        stop = stop_never
        if self.timeout is not None:
            stop = stop | stop_after_delay(self.timeout)
        if self.max_attempts is not None:
            stop = stop | stop_after_attempt(self.max_attempts)
        if cancel is not None:
            stop = stop | stop_when_event_set(cancel)
        return stop

    def wait(
        self,
        handle: OperationHandle,
        interval: float | None = None,
        cancel: threading.Event | None = None,
    ) -> str:
        """
        Block until the operation succeeds and return its final status.

        Raises OperationFailed on a failure-terminal status and
        OperationTimeout when the timeout, attempt cap or cancel event
        fires first. A set cancel event also cuts the current wait short.
        """
        logger.info(f"Waiting for operation [bold]{handle.name}[/bold]")
        if cancel is None:
            cancel = self.cancel
        seen: list[OperationState] = []

        def poll() -> OperationState:
            if seen and cancel is not None and cancel.is_set():
                raise OperationTimeout(handle, seen[-1].status, "polling cancelled")
            state = self.gateway.get_operation(handle.path)
            seen.append(state)
            logger.debug(f"Operation {handle.name}: {state.status}")
            if classify(state) is Phase.FAILED:
                raise OperationFailed(handle, state.status, state.error)
            return state

        retrying = Retrying(
            stop=self._stop(cancel),
            wait=wait_fixed(self.interval if interval is None else interval),
            retry=retry_if_result(lambda s: classify(s) is Phase.IN_PROGRESS),
            sleep=self.sleep if cancel is None else cancel.wait,
        )
        try:
            state = retrying(poll)
        except RetryError as e:
            last = e.last_attempt.result()
            raise OperationTimeout(
                handle, last.status, "stopped polling before completion"
            ) from e

        logger.info(f"Operation {handle.name} completed with status {state.status}")
        return state.status
