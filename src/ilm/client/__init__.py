from .base import AdminClient, IndicesAdminClient
from .memory import InMemoryAdminClient, InMemoryCluster
from .requests import (
    AcknowledgedResponse,
    Alias,
    CreateIndexRequest,
    DeleteIndexRequest,
    ResizeRequest,
    ResizeResponse,
    RolloverConditions,
    RolloverRequest,
    RolloverResponse,
    UpdateSettingsRequest,
)

__all__ = [
    "AdminClient",
    "IndicesAdminClient",
    "InMemoryAdminClient",
    "InMemoryCluster",
    "AcknowledgedResponse",
    "Alias",
    "CreateIndexRequest",
    "DeleteIndexRequest",
    "ResizeRequest",
    "ResizeResponse",
    "RolloverConditions",
    "RolloverRequest",
    "RolloverResponse",
    "UpdateSettingsRequest",
]
