"""
Error taxonomy.

Creation steps stop on the first error and offer a rollback.
Destruction steps never stop; their failures are gathered into a DestroyError.
A resource that is already gone is not an error anywhere in teardown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .provisioning.teardown import TeardownReport
    from .schemas.resources import OperationHandle, ProvisionedResource


class GkeOpsError(Exception):
    """Base class for all gkeops exceptions."""


class GatewayError(GkeOpsError):
    """A single provider call failed. The core never retries it."""

    def __init__(self, action: str, cause: Any = None):
        self.action = action
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{action} failed{detail}")


class CliCommandError(GatewayError):
    """A gcloud invocation exited non-zero."""

    def __init__(self, command: list[str], returncode: int, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        last_line = self.stderr.splitlines()[-1] if self.stderr else "no output"
        super().__init__(" ".join(command), f"exit {returncode}: {last_line}")


class ValidationError(GatewayError):
    """The provider rejected a request before starting any operation."""


class ResourceConflict(GkeOpsError):
    """A resource with the requested name already exists."""


class AmbiguousResource(GkeOpsError):
    """Several resources match and nothing picked one of them."""

    def __init__(self, kind: str, candidates: list[str]):
        self.kind = kind
        self.candidates = candidates
        super().__init__(
            f"{len(candidates)} {kind} resources match: {', '.join(candidates)}"
        )


class OperationFailed(GkeOpsError):
    """A long-running operation reached a failure-terminal state."""

    def __init__(self, handle: OperationHandle, status: str, detail: str = ""):
        self.handle = handle
        self.status = status
        self.detail = detail
        message = f"Operation {handle.name} ended with status {status}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class OperationTimeout(OperationFailed):
    """Polling stopped before the operation reached a terminal state."""


class ProvisionError(GkeOpsError):
    """Cluster creation aborted at ``step``."""

    def __init__(
        self,
        step: str,
        resource: str,
        cause: BaseException,
        resources: tuple[ProvisionedResource, ...] = (),
    ):
        self.step = step
        self.resource = resource
        self.cause = cause
        self.resources = resources
        self.rollback: TeardownReport | None = None
        super().__init__(f"Step '{step}' failed for {resource}: {cause}")


class DestroyError(GkeOpsError):
    """One or more destruction steps failed."""

    def __init__(self, report: TeardownReport):
        self.report = report
        lines = [f"{o.kind} {o.name}: {o.error}" for o in report.failures]
        super().__init__(
            "Some resources could not be deleted, manual cleanup may be required:\n  "
            + "\n  ".join(lines)
        )
