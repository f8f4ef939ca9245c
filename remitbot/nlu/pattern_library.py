"""
nlu/pattern_library.py

PatternLibrary owns the active intent/entity pattern sets.

- Built-in fallback tables are active until a remote fetch succeeds.
- ``refresh()`` fetches both kinds from a PatternSource and swaps in each
  kind that came back usable. A failed or empty fetch leaves the previous
  set untouched. Remote and fallback sets are never merged.
- The active sets live in one immutable ``PatternSet`` that is replaced as
  a whole, so a classification that took a snapshot keeps a consistent view
  while a refresh completes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar, Union
import asyncio
import logging
import re
import time

from pydantic import ValidationError

from .patterns import (
    BUILTIN_ENTITY_PATTERNS,
    BUILTIN_INTENT_PATTERNS,
    EntityPattern,
    IntentPattern,
)


logger = logging.getLogger("remitbot.nlu.patterns")

DEFAULT_CACHE_SECONDS = 30 * 60

P = TypeVar("P", IntentPattern, EntityPattern)


@dataclass(frozen=True)
class CompiledPattern:
    record: Union[IntentPattern, EntityPattern]
    regex: "re.Pattern[str]"


@dataclass(frozen=True)
class PatternSet:
    intents: Tuple[CompiledPattern, ...]
    entities: Tuple[CompiledPattern, ...]
    intent_origin: str = "builtin"
    entity_origin: str = "builtin"


def compile_patterns(patterns: Iterable[P], origin: str) -> Tuple[CompiledPattern, ...]:
    """
    Compile patterns case-insensitively, skipping (and logging) any whose
    regex does not compile.
    """
    compiled: List[CompiledPattern] = []
    for record in patterns:
        try:
            regex = re.compile(record.pattern, re.IGNORECASE)
        except re.error as exc:
            logger.warning(
                "Skipping malformed %s pattern id=%s (%r): %s",
                origin,
                record.id,
                record.pattern,
                exc,
            )
            continue
        compiled.append(CompiledPattern(record=record, regex=regex))
    return tuple(compiled)


def parse_patterns(raw: Sequence[Any], model: Type[P], origin: str) -> List[P]:
    """Validate raw payload items, skipping entries that do not fit ``model``."""
    parsed: List[P] = []
    for item in raw or []:
        if isinstance(item, model):
            parsed.append(item)
            continue
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping invalid %s %s entry %r: %s", origin, model.__name__, item, exc)
    return parsed


_BUILTIN_SET = PatternSet(
    intents=compile_patterns(BUILTIN_INTENT_PATTERNS, "builtin"),
    entities=compile_patterns(BUILTIN_ENTITY_PATTERNS, "builtin"),
)


class PatternLibrary:
    """
    Holds the active pattern sets and refreshes them from a PatternSource.

    ``source`` must provide ``async fetch_patterns(kind)`` with kind in
    ("intent", "entity"). ``clock`` is a monotonic seconds source and is
    injectable for tests.
    """

    def __init__(
        self,
        source: Optional[Any] = None,
        cache_seconds: float = DEFAULT_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.cache_seconds = cache_seconds
        self._clock = clock
        self._active: PatternSet = _BUILTIN_SET
        self._last_refresh: Optional[float] = None
        self._refresh_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def snapshot(self) -> PatternSet:
        """Return the currently active pattern set."""
        return self._active

    def get_intent_patterns(self) -> Tuple[IntentPattern, ...]:
        return tuple(c.record for c in self._active.intents)  # type: ignore[misc]

    def get_entity_patterns(self) -> Tuple[EntityPattern, ...]:
        return tuple(c.record for c in self._active.entities)  # type: ignore[misc]

    @property
    def is_remote(self) -> bool:
        return self._active.intent_origin == "remote" or self._active.entity_origin == "remote"

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    def should_refresh(self) -> bool:
        if self._last_refresh is None:
            return True
        return self._clock() - self._last_refresh > self.cache_seconds

    async def _fetch(self, kind: str, model: Type[P]) -> Optional[Tuple[CompiledPattern, ...]]:
        try:
            raw = await self.source.fetch_patterns(kind)
        except Exception as exc:
            logger.warning("Pattern refresh: fetching %s patterns failed: %s", kind, exc)
            return None

        compiled = compile_patterns(parse_patterns(raw, model, "remote"), "remote")
        if not compiled:
            logger.info("Pattern refresh: no usable remote %s patterns; keeping current set", kind)
            return None
        logger.info("Pattern refresh: fetched %d %s patterns", len(compiled), kind)
        return compiled

    async def refresh(self) -> None:
        """
        Fetch remote patterns and install each kind that came back usable.
        Never raises; failures keep the current set.
        """
        # Stamp first so a failing source is retried only after the cache window
        self._last_refresh = self._clock()
        if self.source is None:
            return

        intents, entities = await asyncio.gather(
            self._fetch("intent", IntentPattern),
            self._fetch("entity", EntityPattern),
        )

        current = self._active
        self._active = PatternSet(
            intents=intents if intents is not None else current.intents,
            entities=entities if entities is not None else current.entities,
            intent_origin="remote" if intents is not None else current.intent_origin,
            entity_origin="remote" if entities is not None else current.entity_origin,
        )

    def schedule_refresh(self) -> Optional[asyncio.Task]:
        """
        Start a background refresh unless one is already in flight.
        Must be called from a running event loop.
        """
        if self._refresh_task is not None and not self._refresh_task.done():
            return self._refresh_task
        self._refresh_task = asyncio.get_running_loop().create_task(self.refresh())
        return self._refresh_task

    def refresh_if_stale(self) -> Optional[asyncio.Task]:
        if not self.should_refresh():
            return None
        return self.schedule_refresh()

    async def close(self) -> None:
        task = self._refresh_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
