"""Query functions behind the ranking, game summary and standings screens.

Each call is one aggregation run: it reads a snapshot of the store,
aggregates in local structures and returns rows. Nothing is written back,
and an empty scope yields an empty list.
"""

import asyncio
import logging
from typing import Optional, Union

from .collector import ScoreRecordCollector, Scope
from .filters import RankingMode, parse_mode, parse_year
from .models import (
    GAME_FINISHED,
    Event,
    Game,
    GameLogEntry,
    Player,
    PlayerStats,
    TeamStanding,
    game_from_document,
)
from .players import GameHighlights, PlayerAggregator, game_highlights, game_log_entry
from .standings import StandingsAggregator
from .store import EVENTS, PLAYERS, DocumentStore, games_path

logger = logging.getLogger(__name__)


async def _load_players(collector: ScoreRecordCollector) -> list[Player]:
    return [Player.from_document(doc) for doc in await collector.read(PLAYERS)]


async def get_player_ranking(
    store: DocumentStore,
    year: Union[str, int],
    mode: Union[str, RankingMode] = RankingMode.FIVE,
) -> list[PlayerStats]:
    """Rank players for a season.

    Args:
        store: Document store to read from
        year: Season year, e.g. "2025"
        mode: "3x3" or "5x5" for points, "shooters" for long-range makes
    """
    season = parse_year(year)
    ranking_mode = parse_mode(mode)
    collector = ScoreRecordCollector(store)

    players, scope = await asyncio.gather(
        _load_players(collector),
        collector.season_scope(season, ranking_mode),
    )
    records = await collector.collect(scope)
    rows = PlayerAggregator(ranking_mode).rank(players, records, scope)

    logger.info(
        "Ranking %s/%s: %d players from %d records",
        season, ranking_mode.value, len(rows), len(records),
    )
    return rows


async def _box_score(store: DocumentStore, event_id: str, game_id: str) -> list[PlayerStats]:
    collector = ScoreRecordCollector(store)
    players, scope = await asyncio.gather(
        _load_players(collector),
        collector.game_scope(event_id, game_id),
    )
    records = await collector.collect(scope)
    modality = scope.modalities[event_id]
    rows = PlayerAggregator(RankingMode(modality)).box_score(
        {p.player_id: p for p in players}, records, game_id, modality
    )
    return rows


async def get_game_box_score(
    store: DocumentStore, event_id: str, game_id: str
) -> list[PlayerStats]:
    """Points and makes per scorer of one game, always counted in points.

    Args:
        store: Document store to read from
        event_id: Event containing the game
        game_id: The game
    """
    return await _box_score(store, event_id, game_id)


async def get_game_highlights(
    store: DocumentStore, event_id: str, game_id: str
) -> GameHighlights:
    """MVP and sniper of one game, judged by the event's format."""
    return game_highlights(await _box_score(store, event_id, game_id))


async def get_standings(store: DocumentStore, event_id: str) -> list[TeamStanding]:
    """Standings of an internal tournament's teams.

    Args:
        store: Document store to read from
        event_id: The tournament event
    """
    collector = ScoreRecordCollector(store)
    event_doc = await collector.read_document(EVENTS, event_id)
    if event_doc is None:
        logger.info("Event %s not found", event_id)
        return []

    event = Event.from_document(event_doc)
    if not event.teams:
        return []

    docs = await collector.read_optional(
        games_path(event_id), where={"status": GAME_FINISHED}
    )
    games = [game_from_document(doc, event.type) for doc in docs or []]
    return StandingsAggregator().aggregate(event.teams, games)


async def get_player_game_log(store: DocumentStore, player_id: str) -> list[GameLogEntry]:
    """Every game of a finished event the player took part in, newest first.

    Args:
        store: Document store to read from
        player_id: The player
    """
    collector = ScoreRecordCollector(store)
    events = [
        Event.from_document(doc)
        for doc in await collector.read(EVENTS, where={"status": GAME_FINISHED})
    ]

    game_lists = await asyncio.gather(
        *(collector.read_optional(games_path(event.event_id)) for event in events)
    )
    event_games = [
        (event, game_from_document(doc, event.type))
        for event, docs in zip(events, game_lists)
        for doc in docs or []
    ]

    async def entry_for(event: Event, game: Game) -> Optional[GameLogEntry]:
        scope = Scope.for_game(event.event_id, game.game_id, event)
        records = await collector.collect(scope)
        return game_log_entry(player_id, event, game, records)

    entries = await asyncio.gather(*(entry_for(event, game) for event, game in event_games))
    history = [entry for entry in entries if entry is not None]
    history.sort(key=lambda entry: entry.date, reverse=True)
    return history
