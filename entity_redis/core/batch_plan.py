"""Batch Plan - pending mutations translated into one transactional command list.

Invariants:
    - Insert queues exactly HashSet(data) + SetAdd(index)
    - Delete queues exactly KeyDelete(data) + SetRemove(index)
    - Update queues 0-2 hash commands (HashDelete for properties changed to
      null, HashSet for the other changed properties) and one KeyExists
      precondition on the type's index key
    - Insert keys come from current values; update/delete keys from original values
    - Unmodified properties never appear in an update's commands
    - Hash commands with no fields are never queued
    - Preconditions are de-duplicated, first occurrence order kept

Design Decisions:
    - Plan is pure data: sync and async writers share it and tests assert on it
      without a Redis server
    - The update precondition checks the index key, not the record's membership;
      updating a missing record of a type that has other records still runs
"""

from collections.abc import Iterable
from dataclasses import dataclass

from entity_redis.core.domain_types import CompositeKey, KeyName, MutationKind
from entity_redis.core.key_naming import composite_key, data_key_name, primary_key_index_name
from entity_redis.core.metadata import PendingMutation
from entity_redis.core.record_mapper import split_values
from entity_redis.core.store_protocols import CancellationSignal, CommandQueue, is_cancelled


# ─── Commands ────────────────────────────────────────────────────

@dataclass(frozen=True)
class HashSet:
    key: KeyName
    fields: tuple[tuple[str, bytes], ...]

    def queue_on(self, pipe: CommandQueue) -> None:
        pipe.hset(self.key, mapping=dict(self.fields))


@dataclass(frozen=True)
class HashDelete:
    key: KeyName
    fields: tuple[str, ...]

    def queue_on(self, pipe: CommandQueue) -> None:
        pipe.hdel(self.key, *self.fields)


@dataclass(frozen=True)
class KeyDelete:
    key: KeyName

    def queue_on(self, pipe: CommandQueue) -> None:
        pipe.delete(self.key)


@dataclass(frozen=True)
class SetAdd:
    key: KeyName
    member: CompositeKey

    def queue_on(self, pipe: CommandQueue) -> None:
        pipe.sadd(self.key, self.member)


@dataclass(frozen=True)
class SetRemove:
    key: KeyName
    member: CompositeKey

    def queue_on(self, pipe: CommandQueue) -> None:
        pipe.srem(self.key, self.member)


Command = HashSet | HashDelete | KeyDelete | SetAdd | SetRemove


@dataclass(frozen=True)
class KeyExists:
    """Precondition: key must exist when the transaction runs."""
    key: KeyName


@dataclass(frozen=True)
class BatchPlan:
    commands: tuple[Command, ...] = ()
    conditions: tuple[KeyExists, ...] = ()

    @property
    def watched_keys(self) -> tuple[KeyName, ...]:
        return tuple(c.key for c in self.conditions)

    def queue_on(self, pipe: CommandQueue) -> None:
        for command in self.commands:
            command.queue_on(pipe)


# ─── Planning ────────────────────────────────────────────────────

def _key_from(mutation: PendingMutation, use_original: bool) -> CompositeKey:
    read = mutation.original if use_original else mutation.current
    return composite_key(
        (read(p) for p in mutation.entity_type.key_properties),
        mutation.entity_type.name,
    )


def plan_insert(mutation: PendingMutation) -> list[Command]:
    entity_type = mutation.entity_type
    key = _key_from(mutation, use_original=False)
    upserts, _ = split_values(entity_type, mutation.current_values)
    return [
        HashSet(data_key_name(entity_type.name, key), tuple(upserts.items())),
        SetAdd(primary_key_index_name(entity_type.name), key),
    ]


def plan_delete(mutation: PendingMutation) -> list[Command]:
    entity_type = mutation.entity_type
    key = _key_from(mutation, use_original=True)
    return [
        KeyDelete(data_key_name(entity_type.name, key)),
        SetRemove(primary_key_index_name(entity_type.name), key),
    ]


def plan_update(mutation: PendingMutation) -> tuple[list[Command], KeyExists]:
    entity_type = mutation.entity_type
    key = _key_from(mutation, use_original=True)
    data_key = data_key_name(entity_type.name, key)
    upserts, removals = split_values(
        entity_type, mutation.current_values, only=mutation.modified,
    )

    commands: list[Command] = []
    if removals:
        commands.append(HashDelete(data_key, removals))
    if upserts:
        commands.append(HashSet(data_key, tuple(upserts.items())))
    return commands, KeyExists(primary_key_index_name(entity_type.name))


def plan_mutations(
    mutations: Iterable[PendingMutation], cancel: CancellationSignal | None = None,
) -> BatchPlan | None:
    """Translate mutations, in order, into one BatchPlan.

    Returns None when ``cancel`` is set at any per-mutation checkpoint; a
    cancelled plan is discarded whole, never partially returned.
    """
    commands: list[Command] = []
    conditions: list[KeyExists] = []
    for mutation in mutations:
        if is_cancelled(cancel):
            return None
        if mutation.kind == MutationKind.INSERT:
            commands.extend(plan_insert(mutation))
        elif mutation.kind == MutationKind.DELETE:
            commands.extend(plan_delete(mutation))
        elif mutation.kind == MutationKind.UPDATE:
            update_commands, condition = plan_update(mutation)
            commands.extend(update_commands)
            if condition not in conditions:
                conditions.append(condition)
    return BatchPlan(tuple(commands), tuple(conditions))
