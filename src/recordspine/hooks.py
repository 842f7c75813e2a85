"""
Lifecycle observer pipeline.

Every CRUD operation runs through two of eight ordered hook chains
(before/after × find/insert/update/delete). A hook receives the whole
:class:`HookContext` and returns a replacement for ``context.fields``.

Architecture:
    ::

        trigger(stage, context)
            Idle ──► Running ──┬──► Completed   every hook ran
                               └──► Aborted     a hook returned a falsy payload

        hook(context) returns:
            None                 → no change, next hook sees the same fields
            falsy (False, {}, …) → rejection: chain stops, trigger returns it
            anything else        → becomes context.fields for the next hook

        After the chain: fields if set, else ids if set, else the context.

    Callers of the before-write chains treat a falsy return as
    "do not proceed" and skip the storage call.

Hook references:
    Hooks are callables or names resolved against an owner object (the
    model) at registration. A name may carry literal arguments,
    ``"audit(created,users)"``; they are comma-split (not quote-aware) and
    exposed as ``context.params`` during that hook's invocation only.

Built-ins:
    :func:`stamp_record` backs the created/modified stamping hooks; the
    field-protection hook is :meth:`FieldAuthorizer.authorize_fields
    <recordspine.schema.FieldAuthorizer.authorize_fields>`.

Tags:
    hooks, observers, lifecycle, pipeline
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from recordspine.errors import ConfigurationError
from recordspine.logging import get_logger
from recordspine.timestamps import render_stamp

logger = get_logger(__name__)

_HOOK_REF = re.compile(r"^\s*([A-Za-z0-9_\-]+)\s*(?:\(([A-Za-z0-9_\-., ]*)\))?\s*$")


class HookStage(str, Enum):
    """The eight lifecycle chains."""

    BEFORE_FIND = "beforeFind"
    AFTER_FIND = "afterFind"
    BEFORE_INSERT = "beforeInsert"
    AFTER_INSERT = "afterInsert"
    BEFORE_UPDATE = "beforeUpdate"
    AFTER_UPDATE = "afterUpdate"
    BEFORE_DELETE = "beforeDelete"
    AFTER_DELETE = "afterDelete"

    @classmethod
    def parse(cls, value: HookStage | str) -> HookStage:
        if isinstance(value, HookStage):
            return value
        for stage in cls:
            if value in (stage.value, stage.name, stage.name.lower()):
                return stage
        raise ConfigurationError(f"Unknown hook stage: {value!r}")


class PipelineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class HookContext:
    """The mutable bag handed to every hook in a chain."""

    method: str
    fields: Any = None
    id: Any = None
    ids: list[Any] | None = None
    result: Any = None
    params: tuple[str, ...] = ()

    def extract(self) -> Any:
        if self.fields is not None:
            return self.fields
        if self.ids is not None:
            return self.ids
        return self


Hook = Callable[[HookContext], Any]


@dataclass(frozen=True)
class HookRef:
    """A registered hook: display name, callable and literal arguments."""

    name: str
    func: Hook
    args: tuple[str, ...] = ()

    @staticmethod
    def parse(reference: str) -> tuple[str, tuple[str, ...]]:
        """Split ``"name(a,b)"`` into ``("name", ("a", "b"))``."""
        match = _HOOK_REF.match(reference)
        if not match:
            raise ConfigurationError(f"Malformed hook reference: {reference!r}")
        name, raw_args = match.group(1), match.group(2)
        if raw_args is None or not raw_args.strip():
            return name, ()
        return name, tuple(arg.strip() for arg in raw_args.split(","))

    @classmethod
    def resolve(
        cls,
        hook: Hook | str | HookRef,
        owner: Any = None,
        args: Iterable[Any] = (),
    ) -> HookRef:
        if isinstance(hook, HookRef):
            return hook
        if isinstance(hook, str):
            name, parsed = cls.parse(hook)
            func = getattr(owner, name, None) if owner is not None else None
            if not callable(func):
                raise ConfigurationError(f"Hook {name!r} does not name a callable")
            return cls(name, func, parsed + tuple(str(a) for a in args))
        if not callable(hook):
            raise ConfigurationError(f"Hook {hook!r} is not callable")
        name = getattr(hook, "__name__", type(hook).__name__)
        return cls(name, hook, tuple(str(a) for a in args))


@dataclass
class PipelineRun:
    """Outcome of one ``trigger`` call."""

    stage: HookStage
    state: PipelineState = PipelineState.IDLE
    value: Any = None
    hooks_run: list[str] = field(default_factory=list)


class ObserverPipeline:
    """Eight ordered hook chains owned by one model instance."""

    def __init__(self, owner: Any = None) -> None:
        self._owner = owner
        self._chains: dict[HookStage, list[HookRef]] = {stage: [] for stage in HookStage}

    def register(
        self,
        stage: HookStage | str,
        hook: Hook | str | HookRef,
        *args: Any,
        front: bool = False,
    ) -> HookRef:
        """Append (or, with ``front=True``, prepend) a hook to a chain."""
        ref = HookRef.resolve(hook, self._owner, args)
        chain = self._chains[HookStage.parse(stage)]
        if front:
            chain.insert(0, ref)
        else:
            chain.append(ref)
        return ref

    def extend(self, stage: HookStage | str, hooks: Iterable[Hook | str | HookRef]) -> None:
        for hook in hooks:
            self.register(stage, hook)

    def chain(self, stage: HookStage | str) -> tuple[HookRef, ...]:
        return tuple(self._chains[HookStage.parse(stage)])

    def clear(self, stage: HookStage | str) -> None:
        self._chains[HookStage.parse(stage)].clear()

    def run(self, stage: HookStage | str, context: HookContext) -> PipelineRun:
        stage = HookStage.parse(stage)
        outcome = PipelineRun(stage, PipelineState.RUNNING)

        for ref in self._chains[stage]:
            context.params = ref.args
            try:
                returned = ref.func(context)
            finally:
                context.params = ()
            outcome.hooks_run.append(ref.name)

            if returned is None or returned is context:
                continue
            if not returned:
                logger.debug("hook_rejected", stage=stage.value, hook=ref.name, method=context.method)
                outcome.state = PipelineState.ABORTED
                outcome.value = returned
                return outcome
            context.fields = returned

        if outcome.hooks_run:
            logger.debug(
                "hooks_completed",
                stage=stage.value,
                method=context.method,
                hooks=outcome.hooks_run,
            )
        outcome.state = PipelineState.COMPLETED
        outcome.value = context.extract()
        return outcome

    def trigger(self, stage: HookStage | str, context: HookContext) -> Any:
        """Run a chain and return the extracted value (falsy on rejection)."""
        return self.run(stage, context).value


def stamp_record(row: Any, field_name: str, date_format: str) -> dict[str, Any] | None:
    """Copy of ``row`` with ``field_name`` set to now, or None for no change.

    Never overwrites a value the caller supplied; non-mapping and empty rows
    are left alone.
    """
    if not isinstance(row, Mapping) or not row:
        return None
    if field_name in row:
        return None
    stamped = dict(row)
    stamped[field_name] = render_stamp(date_format)
    return stamped


__all__ = [
    "HookStage",
    "PipelineState",
    "HookContext",
    "Hook",
    "HookRef",
    "PipelineRun",
    "ObserverPipeline",
    "stamp_record",
]
