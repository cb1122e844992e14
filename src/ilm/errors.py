"""Error taxonomy.

CONTRACT
- StepConfigurationError: fatal precondition violation, raised synchronously
  while a step builds its request. Never retried.
- AdminClientError (and subclasses): raised or delivered by the admin client.
  Steps forward these to Listener.on_failure unchanged.
"""

from __future__ import annotations


class LifecycleError(Exception):
    """Base class for everything raised by this package."""


class StepConfigurationError(LifecycleError, ValueError):
    """A step or its input snapshot violates a precondition."""


class AdminClientError(LifecycleError):
    """Raised by an admin client when an operation is rejected."""


class IndexNotFoundError(AdminClientError):
    def __init__(self, index: str):
        super().__init__(f"no such index [{index}]")
        self.index = index


class ResourceAlreadyExistsError(AdminClientError):
    def __init__(self, index: str):
        super().__init__(f"index [{index}] already exists")
        self.index = index


class IllegalArgumentError(AdminClientError):
    pass
