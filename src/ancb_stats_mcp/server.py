"""MCP Server for ANCB basketball statistics."""

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from . import queries
from .config import configure_logging, get_settings
from .database import Neo4jDatabase
from .errors import InvalidFilterError, StoreUnavailableError
from .filters import parse_mode
from .store import DocumentStore, Neo4jDocumentStore

logger = logging.getLogger(__name__)

# Initialize the server
server = FastMCP("ancb-stats")

# Document store (lazy initialization)
_store: Optional[DocumentStore] = None

NO_DATA = "No data for this filter."


def get_store() -> DocumentStore:
    """Get or create the document store."""
    global _store
    if _store is None:
        db = Neo4jDatabase()
        db.connect()
        _store = Neo4jDocumentStore(db)
    return _store


def _text(output: str) -> list[TextContent]:
    return [TextContent(type="text", text=output)]


def _display_name(player) -> str:
    if player.nickname:
        return f"{player.name} \"{player.nickname}\""
    return player.name


# ============================================================================
# Player Tools
# ============================================================================


@server.tool()
async def player_ranking(year: str, mode: Optional[str] = None) -> list[TextContent]:
    """Get the season ranking of players.

    Args:
        year: Season year (e.g., "2025")
        mode: "5x5" or "3x3" for points, "shooters" for long-range makes
    """
    try:
        ranking_mode = parse_mode(mode or get_settings().default_mode)
        rows = await queries.get_player_ranking(get_store(), year, ranking_mode)
    except InvalidFilterError as exc:
        return _text(str(exc))
    except StoreUnavailableError as exc:
        logger.error("Ranking failed: %s", exc)
        return _text(f"Could not load the ranking: {exc}")

    if not rows:
        return _text(NO_DATA)

    unit = "pts" if ranking_mode.counts_points else "long-range makes"
    output = f"**Ranking {year} ({ranking_mode.value})**\n\n"
    for i, stats in enumerate(rows, 1):
        output += (
            f"{i}. {_display_name(stats.player)} - {stats.total} {unit}, "
            f"{stats.games_played} games, {stats.per_game:.1f} per game\n"
        )

    return _text(output)


@server.tool()
async def player_game_log(player_id: str) -> list[TextContent]:
    """Get the finished games a player took part in.

    Args:
        player_id: The unique player identifier
    """
    try:
        history = await queries.get_player_game_log(get_store(), player_id)
    except StoreUnavailableError as exc:
        logger.error("Game log failed: %s", exc)
        return _text(f"Could not load the game log: {exc}")

    if not history:
        return _text(f"No finished games found for player '{player_id}'")

    output = f"**Game log for {player_id}**\n\n"
    for entry in history:
        output += (
            f"- {entry.date} {entry.event_name} ({entry.modality}): "
            f"{entry.my_team} {entry.score_my_team} x {entry.score_opponent} {entry.opponent}"
            f" - {entry.points} pts ({entry.makes1}x1, {entry.makes2}x2, {entry.makes3}x3)\n"
        )

    return _text(output)


# ============================================================================
# Game Tools
# ============================================================================


@server.tool()
async def game_box_score(event_id: str, game_id: str) -> list[TextContent]:
    """Get points and makes per scorer of one game.

    Args:
        event_id: The event containing the game
        game_id: The unique game identifier
    """
    try:
        rows = await queries.get_game_box_score(get_store(), event_id, game_id)
    except StoreUnavailableError as exc:
        logger.error("Box score failed: %s", exc)
        return _text(f"Could not load the box score: {exc}")

    if not rows:
        return _text(NO_DATA)

    output = "**Box Score**\n\n"
    for stats in rows:
        output += (
            f"- {_display_name(stats.player)}: {stats.points} pts "
            f"({stats.makes1}x1, {stats.makes2}x2, {stats.makes3}x3)"
        )
        if stats.zones:
            zones = ", ".join(f"{zone} {count}" for zone, count in sorted(stats.zones.items()))
            output += f" - zones: {zones}"
        output += "\n"

    return _text(output)


@server.tool()
async def game_highlights(event_id: str, game_id: str) -> list[TextContent]:
    """Get the MVP and the sniper of one game.

    Args:
        event_id: The event containing the game
        game_id: The unique game identifier
    """
    try:
        highlights = await queries.get_game_highlights(get_store(), event_id, game_id)
    except StoreUnavailableError as exc:
        logger.error("Highlights failed: %s", exc)
        return _text(f"Could not load the highlights: {exc}")

    if highlights.mvp is None:
        return _text(NO_DATA)

    output = "**Highlights**\n\n"
    output += f"- MVP: {_display_name(highlights.mvp.player)} ({highlights.mvp.points} pts)\n"
    if highlights.sniper:
        output += (
            f"- Sniper: {_display_name(highlights.sniper.player)} "
            f"({highlights.sniper.long_range} long-range makes)\n"
        )

    return _text(output)


# ============================================================================
# Tournament Tools
# ============================================================================


@server.tool()
async def tournament_standings(event_id: str) -> list[TextContent]:
    """Get the standings of an internal tournament.

    Args:
        event_id: The tournament event identifier
    """
    try:
        rows = await queries.get_standings(get_store(), event_id)
    except StoreUnavailableError as exc:
        logger.error("Standings failed: %s", exc)
        return _text(f"Could not load the standings: {exc}")

    if not rows:
        return _text(NO_DATA)

    output = "**Standings**\n\n"
    for i, standing in enumerate(rows, 1):
        output += (
            f"{i}. {standing.team.name} - {standing.games} games, "
            f"{standing.wins}W {standing.losses}L"
            f"{f' {standing.ties}T' if standing.ties else ''}, "
            f"{standing.points_for}-{standing.points_against} ({standing.diff:+d})\n"
        )

    return _text(output)


def main():
    """Run the MCP server over stdio."""
    configure_logging()
    server.run()


if __name__ == "__main__":
    main()
