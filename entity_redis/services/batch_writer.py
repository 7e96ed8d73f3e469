"""Batch Writer - applies pending mutations as one atomic MULTI/EXEC transaction.

Invariants:
    - All mutations of one call are executed in a single transaction, once,
      after every mutation has been planned
    - Update preconditions: WATCH + EXISTS on each index key before MULTI; a
      missing key aborts with nothing sent, a concurrent change (WatchError)
      aborts at EXEC
    - Returns len(mutations) on success, 0 on precondition failure or
      cancellation; failure is reported for the whole batch, never per mutation
    - Cancellation is polled before start and before each mutation is planned;
      once EXEC is sent the batch is not cancelled and the full count is returned
    - Store errors propagate as StoreConnectionError / StoreOperationError

Design Decisions:
    - Planning lives in core/batch_plan.py; this module only talks to Redis
    - Sync and async paths share the plan and differ only in pipeline calls
"""

import logging
from collections.abc import Sequence

from redis.exceptions import WatchError

from entity_redis.core.batch_plan import BatchPlan, plan_mutations
from entity_redis.core.metadata import PendingMutation
from entity_redis.core.store_protocols import CancellationSignal, is_cancelled
from entity_redis.infrastructure.store import RedisStore, store_errors

logger = logging.getLogger(__name__)


class BatchWriter:
    """Turns change-tracker output into one Redis transaction per save."""

    def __init__(self, store: RedisStore):
        self.store = store

    def _plan(
        self, mutations: Sequence[PendingMutation], cancel: CancellationSignal | None,
    ) -> BatchPlan | None:
        if is_cancelled(cancel):
            logger.info("Save cancelled before start", extra={"operation": "save"})
            return None
        plan = plan_mutations(mutations, cancel)
        if plan is None:
            logger.info(
                "Save cancelled while queueing mutations",
                extra={"operation": "save", "mutation_count": len(mutations)},
            )
        return plan

    def apply_mutations(
        self,
        mutations: Sequence[PendingMutation],
        cancel: CancellationSignal | None = None,
    ) -> int:
        """Apply mutations atomically; returns the number of mutations saved."""
        plan = self._plan(mutations, cancel)
        if plan is None or not mutations:
            return 0

        with store_errors("save"):
            with self.store.database.pipeline(transaction=True) as pipe:
                try:
                    if plan.watched_keys:
                        pipe.watch(*plan.watched_keys)
                        missing = [k for k in plan.watched_keys if not pipe.exists(k)]
                        if missing:
                            return self._precondition_failed(missing, mutations)
                    pipe.multi()
                    plan.queue_on(pipe)
                    pipe.execute()
                except WatchError:
                    return self._watch_failed(plan, mutations)

        return self._succeeded(plan, mutations)

    async def apply_mutations_async(
        self,
        mutations: Sequence[PendingMutation],
        cancel: CancellationSignal | None = None,
    ) -> int:
        """Async apply_mutations on the store's asyncio client."""
        plan = self._plan(mutations, cancel)
        if plan is None or not mutations:
            return 0

        with store_errors("save"):
            async with self.store.async_database.pipeline(transaction=True) as pipe:
                try:
                    if plan.watched_keys:
                        await pipe.watch(*plan.watched_keys)
                        missing = [
                            k for k in plan.watched_keys if not await pipe.exists(k)
                        ]
                        if missing:
                            return self._precondition_failed(missing, mutations)
                    pipe.multi()
                    plan.queue_on(pipe)
                    await pipe.execute()
                except WatchError:
                    return self._watch_failed(plan, mutations)

        return self._succeeded(plan, mutations)

    def _precondition_failed(self, missing, mutations) -> int:
        logger.warning(
            f"Update precondition failed: index key(s) missing: {', '.join(missing)}",
            extra={
                "operation": "save", "key_name": missing[0],
                "mutation_count": len(mutations), "error_code": "PRECONDITION_FAILED",
            },
        )
        return 0

    def _watch_failed(self, plan: BatchPlan, mutations) -> int:
        logger.warning(
            "Watched index key changed before EXEC; transaction discarded",
            extra={
                "operation": "save", "key_name": plan.watched_keys[0],
                "mutation_count": len(mutations), "error_code": "WATCH_CONFLICT",
            },
        )
        return 0

    def _succeeded(self, plan: BatchPlan, mutations) -> int:
        logger.debug(
            "Batch executed",
            extra={
                "operation": "save", "mutation_count": len(mutations),
                "command_count": len(plan.commands),
            },
        )
        return len(mutations)
