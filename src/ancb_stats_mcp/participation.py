"""Who played which game.

Rosters are kept in three places and none of them is complete: the game's
own list, the registered teams of an internal tournament, and the event's
list. Scoring in a game also proves participation.
"""

from typing import AbstractSet, Optional

from .models import Event, Game, InternalGame, Team, normalize_name


def _names_match(game_name: Optional[str], team_name: str) -> bool:
    left = normalize_name(game_name)
    right = normalize_name(team_name)
    if not left or not right:
        return False
    if left == right:
        return True
    return len(left) > 3 and len(right) > 3 and (left in right or right in left)


def team_plays_side(team: Team, game: InternalGame, side: str) -> bool:
    """Check whether ``team`` is side "A" or "B" of an internal game.

    Team ids are compared first. Older games only stored team names, so
    those fall back to an accent- and case-insensitive name match.
    """
    game_team_id = game.team_a_id if side == "A" else game.team_b_id
    game_team_name = game.team_a_name if side == "A" else game.team_b_name
    if game_team_id:
        return game_team_id == team.team_id
    return _names_match(game_team_name, team.name)


def team_side(player_id: str, game: Game, event: Event) -> Optional[str]:
    """Return the side ("A" or "B") of the player's registered team, if any.

    Side B is checked first so a name that loosely matches both sides does
    not default to A.
    """
    if not isinstance(game, InternalGame):
        return None
    team = event.team_of(player_id)
    if team is None:
        return None
    if team_plays_side(team, game, "B"):
        return "B"
    if team_plays_side(team, game, "A"):
        return "A"
    return None


def did_player_participate(
    player_id: str,
    game: Game,
    event: Event,
    scored_game_ids: AbstractSet[str] = frozenset(),
) -> bool:
    """Decide whether a player took part in a game.

    Any one of these is enough:
      - the player is on the game's own roster;
      - internal tournaments: the player's registered team is one of the
        two sides;
      - other events, when the game has no roster of its own: the player
        is on the event roster;
      - the player has a scoring record in the game.
    """
    if game.game_id in scored_game_ids:
        return True
    if player_id in game.roster:
        return True
    if isinstance(game, InternalGame) or event.is_internal:
        return team_side(player_id, game, event) is not None
    return not game.roster and player_id in event.roster
