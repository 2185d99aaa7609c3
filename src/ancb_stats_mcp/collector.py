"""Scoring record collection.

A made shot can be stored twice: in the game's nested ``cestas``
collection and in the older flat ``cestas`` collection at the root. Reading
only one location undercounts and adding both double counts, so every
aggregation reads scoring records through ``ScoreRecordCollector``. It
reads the nested collections first and then admits a flat record only if
its id has not been seen.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Sequence

from .config import get_settings
from .errors import StoreUnavailableError
from .filters import RankingMode, event_in_scope
from .models import (
    MODALITY_5X5,
    Event,
    Game,
    ScoringEvent,
    game_from_document,
    normalize_modality,
)
from .store import (
    EVENTS,
    SCORING_RECORDS,
    DocumentStore,
    game_records_path,
    games_path,
)

logger = logging.getLogger(__name__)


@dataclass
class Scope:
    """The games, events and teams whose scoring records are wanted.

    ``games`` maps each in-scope game id to its event id; its nested
    collection is always read. Flat records are admitted when their game,
    event or team link points inside the scope.
    """

    games: dict[str, str] = field(default_factory=dict)
    event_ids: set[str] = field(default_factory=set)
    team_ids: dict[str, str] = field(default_factory=dict)
    modalities: dict[str, str] = field(default_factory=dict)
    events: dict[str, Event] = field(default_factory=dict)
    event_games: list[tuple[Event, Game]] = field(default_factory=list)
    # Events whose games collection exists but is empty; the event itself
    # stands in for a single game when counting appearances.
    legacy_event_ids: set[str] = field(default_factory=set)

    @classmethod
    def for_game(cls, event_id: str, game_id: str, event: Optional[Event] = None) -> "Scope":
        """Scope of a single game; flat records must link to the game itself."""
        modality = event.modality if event else MODALITY_5X5
        return cls(
            games={game_id: event_id},
            modalities={event_id: modality},
            events={event_id: event} if event else {},
        )

    def is_empty(self) -> bool:
        return not self.games and not self.event_ids and not self.team_ids

    def links(self, record: ScoringEvent) -> bool:
        """Check whether a flat record belongs to this scope."""
        return (
            (record.game_id is not None and record.game_id in self.games)
            or (record.event_id is not None and record.event_id in self.event_ids)
            or (record.team_id is not None and record.team_id in self.team_ids)
        )

    def resolve(self, record: ScoringEvent) -> ScoringEvent:
        """Fill in the event a flat record belongs to."""
        if record.game_id in self.games:
            event_id = self.games[record.game_id]
        elif record.event_id in self.event_ids:
            event_id = record.event_id
        else:
            event_id = self.team_ids.get(record.team_id or "")
        return replace(record, event_id=event_id)

    def modality_of(self, record: ScoringEvent) -> str:
        return normalize_modality(self.modalities.get(record.event_id or ""))

    def appearance_key(self, record: ScoringEvent) -> Optional[str]:
        """Game id a scoring record proves an appearance in, if any."""
        if record.game_id in self.games:
            return record.game_id
        if record.event_id in self.legacy_event_ids:
            return record.event_id
        return None


def merge_records(
    nested: Iterable[tuple[str, str, Sequence[Mapping[str, Any]]]],
    flat: Iterable[Mapping[str, Any]],
    scope: Scope,
) -> list[ScoringEvent]:
    """Merge nested and flat scoring documents into one set keyed by id.

    ``nested`` yields ``(event_id, game_id, documents)`` per game. Nested
    documents win: a flat document whose id was already seen is dropped.
    """
    seen: set[str] = set()
    records: list[ScoringEvent] = []

    for event_id, game_id, documents in nested:
        for doc in documents:
            record_id = str(doc["id"])
            if record_id in seen:
                continue
            seen.add(record_id)
            record = ScoringEvent.from_document(doc)
            if record is not None:
                records.append(replace(record, game_id=game_id, event_id=event_id))

    for doc in flat:
        record_id = str(doc["id"])
        if record_id in seen:
            continue
        record = ScoringEvent.from_document(doc)
        if record is None or not scope.links(record):
            continue
        seen.add(record_id)
        records.append(scope.resolve(record))

    return records


class ScoreRecordCollector:
    """Reads scoring records for a scope.

    Store reads are blocking calls; they run in worker threads and fan out
    with ``asyncio.gather``. Use one collector per aggregation run.
    """

    def __init__(self, store: DocumentStore, max_concurrent_reads: Optional[int] = None):
        self.store = store
        self._semaphore = asyncio.Semaphore(
            max_concurrent_reads or get_settings().max_concurrent_reads
        )

    async def read(
        self,
        path: Sequence[str],
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Read a collection; store failures propagate."""
        async with self._semaphore:
            return await asyncio.to_thread(self.store.get_collection, path, where, order_by)

    async def read_document(self, path: Sequence[str], doc_id: str) -> Optional[dict[str, Any]]:
        async with self._semaphore:
            return await asyncio.to_thread(self.store.get_document, path, doc_id)

    async def read_optional(
        self,
        path: Sequence[str],
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
    ) -> Optional[list[dict[str, Any]]]:
        """Read a sub-collection, returning None instead of raising on failure."""
        try:
            return await self.read(path, where, order_by)
        except StoreUnavailableError as exc:
            logger.warning("Skipping %s: %s", "/".join(path), exc)
            return None

    async def season_scope(self, year: str, mode: RankingMode) -> Scope:
        """Build the scope of all events of a season in the given mode.

        A failure to list events propagates; a failure to list one event's
        games only drops that event's games.
        """
        events = [Event.from_document(doc) for doc in await self.read(EVENTS)]
        events = [event for event in events if event_in_scope(event, year, mode)]

        scope = Scope()
        for event in events:
            scope.events[event.event_id] = event
            scope.event_ids.add(event.event_id)
            scope.modalities[event.event_id] = event.modality
            for team_id in event.team_ids:
                scope.team_ids.setdefault(team_id, event.event_id)

        game_lists = await asyncio.gather(
            *(self.read_optional(games_path(event.event_id)) for event in events)
        )
        for event, docs in zip(events, game_lists):
            if docs is None:
                continue
            if not docs:
                scope.legacy_event_ids.add(event.event_id)
                continue
            for doc in docs:
                game = game_from_document(doc, event.type)
                scope.games[game.game_id] = event.event_id
                scope.event_games.append((event, game))

        logger.info(
            "Season %s (%s): %d events, %d games in scope",
            year, mode.value, len(events), len(scope.games),
        )
        return scope

    async def game_scope(self, event_id: str, game_id: str) -> Scope:
        """Build the scope of one game; the event supplies its format."""
        event_doc = await self.read_document(EVENTS, event_id)
        event = Event.from_document(event_doc) if event_doc else None
        return Scope.for_game(event_id, game_id, event)

    async def collect(self, scope: Scope) -> list[ScoringEvent]:
        """Collect the deduplicated scoring records of a scope."""
        if scope.is_empty():
            return []

        game_items = list(scope.games.items())
        nested_docs = await asyncio.gather(
            *(
                self.read_optional(game_records_path(event_id, game_id), order_by="timestamp")
                for game_id, event_id in game_items
            )
        )
        nested = [
            (event_id, game_id, docs or [])
            for (game_id, event_id), docs in zip(game_items, nested_docs)
        ]

        # Flat records spell the game link more than one way; Scope.links decides
        flat = await self.read_optional(SCORING_RECORDS)
        records = merge_records(nested, flat or [], scope)
        logger.debug(
            "Collected %d scoring records from %d games", len(records), len(game_items)
        )
        return records
