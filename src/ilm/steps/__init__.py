from .async_action import AsyncActionStep, perform_action_async, perform_action_future
from .base import TERMINAL_STEP_KEY, Step, StepKey, TerminalStep
from .delete import DeleteStep
from .rollover import RolloverStep
from .shrink import ShrinkStep
from .update_settings import UpdateSettingsStep

__all__ = [
    "AsyncActionStep",
    "DeleteStep",
    "RolloverStep",
    "ShrinkStep",
    "Step",
    "StepKey",
    "TERMINAL_STEP_KEY",
    "TerminalStep",
    "UpdateSettingsStep",
    "perform_action_async",
    "perform_action_future",
]
