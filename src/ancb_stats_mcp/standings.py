"""Win/loss standings for internal tournaments."""

import logging
from typing import Iterable

from .models import Game, InternalGame, Team, TeamStanding, resolve_score

logger = logging.getLogger(__name__)


def standing_sort_key(standing: TeamStanding) -> tuple[int, int, int]:
    """Wins, then point differential, then points scored; all descending."""
    return -standing.wins, -standing.diff, -standing.points_for


class StandingsAggregator:
    """Fold finished games into a standings table."""

    def aggregate(self, teams: Iterable[Team], games: Iterable[Game]) -> list[TeamStanding]:
        table = {team.team_id: TeamStanding(team) for team in teams}

        for game in games:
            if not isinstance(game, InternalGame) or not game.is_finished:
                continue
            home = table.get(game.team_a_id or "")
            away = table.get(game.team_b_id or "")
            if home is None or away is None or home is away:
                logger.debug(
                    "Skipping game %s: teams %s/%s not registered",
                    game.game_id, game.team_a_id, game.team_b_id,
                )
                continue

            score_a, score_b = resolve_score(game)
            home.points_for += score_a
            home.points_against += score_b
            away.points_for += score_b
            away.points_against += score_a

            if score_a > score_b:
                home.wins += 1
                away.losses += 1
            elif score_b > score_a:
                away.wins += 1
                home.losses += 1
            else:
                home.ties += 1
                away.ties += 1

        # sorted() is stable: fully tied teams keep registration order
        return sorted(table.values(), key=standing_sort_key)
