"""Per-player statistics: season rankings, box scores and game logs."""

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from .collector import Scope
from .filters import RankingMode
from .models import (
    Event,
    Game,
    GameLogEntry,
    InternalGame,
    Player,
    PlayerStats,
    ScoringEvent,
    is_long_range,
    resolve_score,
    shot_zone,
)
from .participation import did_player_participate, team_side

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameHighlights:
    """Top scorer and top long-range shooter of one game."""

    mvp: Optional[PlayerStats] = None
    sniper: Optional[PlayerStats] = None


class PlayerAggregator:
    """Aggregate scoring records into per-player statistics.

    In the 3x3 and 5x5 modes the ranking total is points. In shooters mode
    it is the number of long-range makes, where "long range" follows the
    format of the event each record came from (2 points in 3x3, 3 in 5x5).
    """

    def __init__(self, mode: RankingMode = RankingMode.FIVE):
        self.mode = mode

    def tally(self, stats: PlayerStats, record: ScoringEvent, modality: str) -> None:
        """Add one made shot to a player's line."""
        stats.points += record.points
        if record.points == 1:
            stats.makes1 += 1
        elif record.points == 2:
            stats.makes2 += 1
        elif record.points == 3:
            stats.makes3 += 1

        zone = shot_zone(record.points, modality)
        if zone:
            stats.zones[zone] = stats.zones.get(zone, 0) + 1

        long_range = is_long_range(record.points, modality)
        if long_range:
            stats.long_range += 1

        if self.mode.counts_points:
            stats.total += record.points
        elif long_range:
            stats.total += 1

    def rank(
        self,
        players: Iterable[Player],
        records: Iterable[ScoringEvent],
        scope: Scope,
    ) -> list[PlayerStats]:
        """Build a season ranking.

        Only active players are ranked. Players with neither a make nor an
        appearance in the scope are left out.
        """
        table = {p.player_id: PlayerStats(p) for p in players if p.is_active}

        for record in records:
            if not record.player_id:
                continue
            stats = table.get(record.player_id)
            if stats is None:
                logger.debug(
                    "Scoring record %s references unknown player %s",
                    record.record_id, record.player_id,
                )
                continue
            self.tally(stats, record, scope.modality_of(record))
            key = scope.appearance_key(record)
            if key:
                stats.games.add(key)

        for event, game in scope.event_games:
            for player_id, stats in table.items():
                if did_player_participate(player_id, game, event, stats.games):
                    stats.games.add(game.game_id)

        for event_id in scope.legacy_event_ids:
            for player_id in scope.events[event_id].roster:
                if player_id in table:
                    table[player_id].games.add(event_id)

        rows = [stats for stats in table.values() if stats.total or stats.games]
        return sort_ranking(rows)

    def box_score(
        self,
        players: Mapping[str, Player],
        records: Iterable[ScoringEvent],
        game_id: str,
        modality: str,
    ) -> list[PlayerStats]:
        """Points and makes per scorer in one game, top scorer first.

        Scorers missing from the player table are kept under the name
        stored on the record, or under their id when it has none.
        """
        lines: dict[str, PlayerStats] = {}
        for record in records:
            if not record.player_id:
                continue
            stats = lines.get(record.player_id)
            if stats is None:
                player = players.get(record.player_id)
                if player is None:
                    player = Player(record.player_id, record.player_name or record.player_id)
                stats = lines[record.player_id] = PlayerStats(player, games={game_id})
            self.tally(stats, record, modality)

        return sorted(lines.values(), key=lambda s: (-s.points, s.player.name.lower()))


def sort_ranking(rows: Sequence[PlayerStats]) -> list[PlayerStats]:
    """Highest total first; on equal totals fewer games ranks higher."""
    return sorted(rows, key=lambda s: (-s.total, s.games_played, s.player.name.lower()))


def game_highlights(box_score: Sequence[PlayerStats]) -> GameHighlights:
    """Pick the MVP (most points) and the sniper (most long-range makes)."""
    mvp = None
    sniper = None
    for stats in box_score:
        if mvp is None or stats.points > mvp.points:
            mvp = stats
        if stats.long_range > 0 and (sniper is None or stats.long_range > sniper.long_range):
            sniper = stats
    return GameHighlights(mvp=mvp, sniper=sniper)


def game_log_entry(
    player_id: str,
    event: Event,
    game: Game,
    records: Iterable[ScoringEvent],
) -> Optional[GameLogEntry]:
    """Summarize one game from a player's point of view.

    Returns None when the player did not take part. In external games the
    player is always on the association's side (A). In internal games the
    side comes from the team recorded on the player's makes, then from team
    membership, and is corrected when the player scored more than that
    side's final score.
    """
    own = [r for r in records if r.player_id == player_id]
    scored = {game.game_id} if own else set()
    if not did_player_participate(player_id, game, event, scored):
        return None

    points = sum(r.points for r in own)
    score_a, score_b = resolve_score(game)

    side = "A"
    if event.is_internal and isinstance(game, InternalGame):
        recorded_team = next((r.team_id for r in own if r.team_id), None)
        if recorded_team and recorded_team == game.team_a_id:
            side = "A"
        elif recorded_team and recorded_team == game.team_b_id:
            side = "B"
        else:
            side = team_side(player_id, game, event) or "A"

        if points > 0:
            if side == "A" and points > score_a:
                side = "B"
            elif side == "B" and points > score_b:
                side = "A"

    name_a, name_b = game.side_names
    on_a = side == "A"
    return GameLogEntry(
        event_id=event.event_id,
        game_id=game.game_id,
        event_name=event.name,
        modality=event.modality,
        date=game.date or event.date,
        my_team=name_a if on_a else name_b,
        opponent=name_b if on_a else name_a,
        score_my_team=score_a if on_a else score_b,
        score_opponent=score_b if on_a else score_a,
        points=points,
        makes1=sum(1 for r in own if r.points == 1),
        makes2=sum(1 for r in own if r.points == 2),
        makes3=sum(1 for r in own if r.points == 3),
    )
