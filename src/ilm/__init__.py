"""ilm package.

Lifecycle step primitives for indices. Simple API:

    import ilm

    client = ilm.InMemoryAdminClient(cluster)
    step = ilm.ShrinkStep(key, next_key, client, "shrink-logs-000001")
    outcome = ilm.perform(step, cluster.get("logs-000001"))
"""

from .client.memory import InMemoryAdminClient, InMemoryCluster
from .errors import LifecycleError, StepConfigurationError
from .listeners import Listener
from .metadata import AliasMetadata, IndexMetadata
from .outcome import StepOutcome, run_step
from .steps import (
    TERMINAL_STEP_KEY,
    AsyncActionStep,
    DeleteStep,
    RolloverStep,
    ShrinkStep,
    Step,
    StepKey,
    TerminalStep,
    UpdateSettingsStep,
)

__version__ = "0.1.0"


def perform(step: AsyncActionStep, index_metadata: IndexMetadata, *, timeout: float | None = None) -> StepOutcome:
    """Run one step invocation and wait for its outcome.

    Args:
        step: Any async action step
        index_metadata: Snapshot of the index the step acts on
        timeout: Seconds to wait (None waits forever)

    Returns:
        StepOutcome with status COMPLETE, INCOMPLETE or FAILED
    """
    return run_step(step, index_metadata, timeout=timeout)


__all__ = [
    "perform",
    "AliasMetadata",
    "AsyncActionStep",
    "DeleteStep",
    "IndexMetadata",
    "InMemoryAdminClient",
    "InMemoryCluster",
    "LifecycleError",
    "Listener",
    "RolloverStep",
    "ShrinkStep",
    "Step",
    "StepConfigurationError",
    "StepKey",
    "StepOutcome",
    "TERMINAL_STEP_KEY",
    "TerminalStep",
    "UpdateSettingsStep",
]
