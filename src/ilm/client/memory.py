"""In-memory admin client.

CONTRACT
- Inputs: InMemoryCluster (shared index registry), request models
- Outputs:
  - Mutates the cluster on a worker thread, then calls the ActionListener there
- Invariants:
  - Every call schedules exactly one unit of work and exactly one callback
  - Cluster reads/writes are serialized by a lock; snapshots handed out are immutable
  - Calls made after close() raise RuntimeError synchronously
- Failure:
  - IndexNotFoundError / ResourceAlreadyExistsError / IllegalArgumentError via on_failure
"""

from __future__ import annotations

import json
import re
import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

from loguru import logger

from ..errors import IllegalArgumentError, IndexNotFoundError, ResourceAlreadyExistsError
from ..listeners import ActionListener
from ..metadata import (
    LIFECYCLE_NAME,
    SETTING_NUMBER_OF_REPLICAS,
    SETTING_NUMBER_OF_SHARDS,
    AliasMetadata,
    IndexMetadata,
)
from .requests import (
    AcknowledgedResponse,
    DeleteIndexRequest,
    ResizeRequest,
    ResizeResponse,
    RolloverRequest,
    RolloverResponse,
    UpdateSettingsRequest,
)

R = TypeVar("R")

_ROLLOVER_NAME_RE = re.compile(r"^(?P<prefix>.*-)(?P<num>\d+)$")


def next_rollover_name(index: str) -> str:
    m = _ROLLOVER_NAME_RE.match(index)
    if not m:
        raise IllegalArgumentError(
            f"index name [{index}] does not match pattern '^.*-\\d+$'"
        )
    return f"{m.group('prefix')}{int(m.group('num')) + 1:06d}"


class InMemoryCluster:
    """Thread-safe index registry standing in for cluster metadata."""

    def __init__(self, indices: Iterable[IndexMetadata] = (), *, shards_acknowledged: bool = True) -> None:
        self._lock = threading.RLock()
        self._indices: dict[str, IndexMetadata] = {}
        self.shards_acknowledged = shards_acknowledged
        for im in indices:
            self.put(im)

    def put(self, index: IndexMetadata) -> None:
        with self._lock:
            self._indices[index.name] = index

    def get(self, name: str) -> IndexMetadata:
        with self._lock:
            try:
                return self._indices[name]
            except KeyError:
                raise IndexNotFoundError(name) from None

    def exists(self, name: str) -> bool:
        with self._lock:
            return name in self._indices

    def indices(self) -> list[str]:
        with self._lock:
            return sorted(self._indices)

    def remove(self, name: str) -> IndexMetadata:
        with self._lock:
            try:
                return self._indices.pop(name)
            except KeyError:
                raise IndexNotFoundError(name) from None

    def resolve_write_index(self, alias: str) -> IndexMetadata:
        with self._lock:
            holders = [im for im in self._indices.values() if alias in im.aliases]
        if not holders:
            raise IllegalArgumentError(f"source alias [{alias}] does not exist")
        if len(holders) == 1:
            return holders[0]
        writers = [im for im in holders if im.aliases[alias].is_write_index]
        if not writers:
            raise IllegalArgumentError(f"alias [{alias}] points to more than one index and has no write index")
        if len(writers) > 1:
            names = ", ".join(sorted(im.name for im in writers))
            raise IllegalArgumentError(f"alias [{alias}] has more than one write index [{names}]")
        return writers[0]

    def write_index_for(self, alias: str) -> str | None:
        with self._lock:
            for im in self._indices.values():
                meta = im.aliases.get(alias)
                if meta is not None and meta.is_write_index:
                    return im.name
        return None

    @property
    def lock(self) -> threading.RLock:
        return self._lock


class InMemoryAdminClient:
    """AdminClient backed by an InMemoryCluster and a thread pool."""

    def __init__(self, cluster: InMemoryCluster | None = None, *, max_workers: int = 4) -> None:
        self.cluster = cluster if cluster is not None else InMemoryCluster()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ilm-admin")

    @property
    def indices(self) -> InMemoryAdminClient:
        return self

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> InMemoryAdminClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # --- operations -------------------------------------------------------

    def resize_index(self, request: ResizeRequest, listener: ActionListener[ResizeResponse]) -> None:
        self._submit(f"resize [{request.source_index}] -> [{request.target_index_request.index}]",
                     lambda: self._resize(request), listener)

    def rollover_index(self, request: RolloverRequest, listener: ActionListener[RolloverResponse]) -> None:
        self._submit(f"rollover [{request.alias}]", lambda: self._rollover(request), listener)

    def update_settings(
        self, request: UpdateSettingsRequest, listener: ActionListener[AcknowledgedResponse]
    ) -> None:
        self._submit(f"update settings {list(request.indices)}", lambda: self._update_settings(request), listener)

    def delete_index(self, request: DeleteIndexRequest, listener: ActionListener[AcknowledgedResponse]) -> None:
        self._submit(f"delete {list(request.indices)}", lambda: self._delete(request), listener)

    # --- plumbing ---------------------------------------------------------

    def _submit(self, label: str, operation: Callable[[], R], listener: ActionListener[R]) -> None:
        logger.debug(f"Submitting {label}")
        fut = self._executor.submit(self._execute, label, operation, listener)
        fut.add_done_callback(_log_listener_error)

    @staticmethod
    def _execute(label: str, operation: Callable[[], R], listener: ActionListener[R]) -> None:
        try:
            response = operation()
        except Exception as exc:
            logger.info(f"{label} failed: {exc}")
            listener.on_failure(exc)
            return
        listener.on_response(response)

    def _resize(self, request: ResizeRequest) -> ResizeResponse:
        target = request.target_index_request
        with self.cluster.lock:
            source = self.cluster.get(request.source_index)
            if self.cluster.exists(target.index):
                raise ResourceAlreadyExistsError(target.index)
            shards = int(target.settings.get(SETTING_NUMBER_OF_SHARDS, 1))
            replicas = int(target.settings.get(SETTING_NUMBER_OF_REPLICAS, source.number_of_replicas))
            if shards < 1 or source.number_of_shards % shards != 0:
                raise IllegalArgumentError(
                    f"the number of source shards [{source.number_of_shards}] must be a "
                    f"multiple of [{shards}]"
                )
            settings = {
                k: v
                for k, v in target.settings.items()
                if k not in (SETTING_NUMBER_OF_SHARDS, SETTING_NUMBER_OF_REPLICAS)
            }
            aliases = {
                a.name: AliasMetadata(
                    name=a.name,
                    filter=None if a.filter is None else json.loads(a.filter),
                    index_routing=a.index_routing,
                    search_routing=a.search_routing,
                    is_write_index=a.is_write_index,
                )
                for a in target.aliases
            }
            for a in target.aliases:
                writer = self.cluster.write_index_for(a.name) if a.is_write_index else None
                if writer is not None:
                    raise IllegalArgumentError(
                        f"alias [{a.name}] already has write index [{writer}]; "
                        f"[{target.index}] cannot become a second one"
                    )
            self.cluster.put(
                IndexMetadata(
                    name=target.index,
                    number_of_shards=shards,
                    number_of_replicas=replicas,
                    settings=settings,
                    aliases=aliases,
                    docs_count=source.docs_count,
                    size_in_bytes=source.size_in_bytes,
                )
            )
        ack = self.cluster.shards_acknowledged
        return ResizeResponse(acknowledged=True, shards_acknowledged=ack, index=target.index)

    def _rollover(self, request: RolloverRequest) -> RolloverResponse:
        with self.cluster.lock:
            old = self.cluster.resolve_write_index(request.alias)
            new_name = request.new_index_name or next_rollover_name(old.name)
            conditions = request.conditions
            status: dict[str, bool] = {}
            if conditions.max_age is not None:
                age_ms = int(time.time() * 1000) - old.creation_date
                status[f"max_age: {conditions.max_age}"] = age_ms >= conditions.max_age.total_seconds() * 1000
            if conditions.max_docs is not None:
                status[f"max_docs: {conditions.max_docs}"] = old.docs_count >= conditions.max_docs
            if conditions.max_size is not None:
                status[f"max_size: {conditions.max_size}"] = old.size_in_bytes >= conditions.max_size
            met = not status or any(status.values())
            if request.dry_run or not met:
                return RolloverResponse(
                    old_index=old.name,
                    new_index=new_name,
                    rolled_over=False,
                    dry_run=request.dry_run,
                    condition_status=status,
                )
            if self.cluster.exists(new_name):
                raise ResourceAlreadyExistsError(new_name)

            old_alias = old.aliases[request.alias]
            old_aliases = dict(old.aliases)
            if old_alias.is_write_index:
                old_aliases[request.alias] = AliasMetadata(
                    name=old_alias.name,
                    filter=old_alias.filter,
                    index_routing=old_alias.index_routing,
                    search_routing=old_alias.search_routing,
                    is_write_index=False,
                )
            else:
                del old_aliases[request.alias]
            self.cluster.put(old.with_changes(aliases=old_aliases))

            new_settings = {}
            if LIFECYCLE_NAME in old.settings:
                new_settings[LIFECYCLE_NAME] = old.settings[LIFECYCLE_NAME]
            self.cluster.put(
                IndexMetadata(
                    name=new_name,
                    number_of_shards=old.number_of_shards,
                    number_of_replicas=old.number_of_replicas,
                    settings=new_settings,
                    aliases={
                        request.alias: AliasMetadata(
                            name=request.alias,
                            is_write_index=True if old_alias.is_write_index else None,
                        )
                    },
                )
            )
        return RolloverResponse(
            old_index=old.name,
            new_index=new_name,
            rolled_over=True,
            acknowledged=True,
            shards_acknowledged=self.cluster.shards_acknowledged,
            condition_status=status,
        )

    def _update_settings(self, request: UpdateSettingsRequest) -> AcknowledgedResponse:
        with self.cluster.lock:
            current = [self.cluster.get(name) for name in request.indices]
            for im in current:
                merged = dict(im.settings)
                merged.update(request.settings)
                changes: dict[str, Any] = {"settings": merged}
                if SETTING_NUMBER_OF_REPLICAS in request.settings:
                    changes["number_of_replicas"] = int(request.settings[SETTING_NUMBER_OF_REPLICAS])
                self.cluster.put(im.with_changes(**changes))
        return AcknowledgedResponse(acknowledged=True)

    def _delete(self, request: DeleteIndexRequest) -> AcknowledgedResponse:
        with self.cluster.lock:
            for name in request.indices:
                self.cluster.get(name)
            for name in request.indices:
                self.cluster.remove(name)
        return AcknowledgedResponse(acknowledged=True)


def _log_listener_error(fut: Future[None]) -> None:
    exc = fut.exception()
    if exc is not None:
        logger.opt(exception=exc).error("Listener raised while handling admin response")
