"""Data models for the ANCB basketball statistics core.

Documents come from the store with Portuguese field names (``pontos``,
``jogadorId``, ``placarTimeA_final``...). The ``from_document`` constructors
map them onto these dataclasses and absorb the shape differences between
older and newer records.
"""

import logging
import math
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

logger = logging.getLogger(__name__)


MODALITY_3X3 = "3x3"
MODALITY_5X5 = "5x5"

# Points value of a make from beyond the arc, per game format
LONG_RANGE_POINTS: dict[str, int] = {
    MODALITY_3X3: 2,
    MODALITY_5X5: 3,
}

# Court zone of a make, per game format
SHOT_ZONES: dict[str, dict[int, str]] = {
    MODALITY_3X3: {1: "inside", 2: "outside"},
    MODALITY_5X5: {1: "free_throw", 2: "inside", 3: "outside"},
}

VALID_POINTS = (1, 2, 3)

EVENT_FRIENDLY = "amistoso"
EVENT_INTERNAL = "torneio_interno"
EVENT_EXTERNAL = "torneio_externo"

GAME_SCHEDULED = "agendado"
GAME_LIVE = "andamento"
GAME_FINISHED = "finalizado"

INACTIVE_PLAYER_STATUSES = frozenset({"banned", "pending", "rejected"})


def normalize_modality(value: Any) -> str:
    """Return a known modality, defaulting to 5x5 like the stored events do."""
    text = str(value or "").strip().lower()
    return text if text in LONG_RANGE_POINTS else MODALITY_5X5


def is_long_range(points: int, modality: str) -> bool:
    """Check whether a make of ``points`` is a long-range shot in ``modality``."""
    return points == LONG_RANGE_POINTS[normalize_modality(modality)]


def shot_zone(points: int, modality: str) -> Optional[str]:
    """Classify a make as free_throw, inside or outside."""
    return SHOT_ZONES[normalize_modality(modality)].get(points)


def normalize_name(name: Optional[str]) -> str:
    """Lowercase, trim and strip accents for loose team-name comparison."""
    decomposed = unicodedata.normalize("NFD", (name or "").strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _first(doc: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = doc.get(key)
        if value is not None and value != "":
            return value
    return None


def _to_int(value: Any) -> Optional[int]:
    """Coerce stored numbers (int, float or numeric string) to int."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return int(number)


def _to_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def roster_ids(entries: Any) -> tuple[str, ...]:
    """Extract player ids from a roster stored as ids or ``{id, numero}`` objects."""
    if not isinstance(entries, (list, tuple)):
        return ()
    ids = []
    for entry in entries:
        if isinstance(entry, Mapping):
            entry = entry.get("id")
        if entry:
            ids.append(str(entry))
    return tuple(ids)


@dataclass(frozen=True)
class Player:
    player_id: str
    name: str
    nickname: Optional[str] = None
    status: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return (self.status or "active") not in INACTIVE_PLAYER_STATUSES

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Player":
        player_id = str(doc["id"])
        return cls(
            player_id=player_id,
            name=_to_str(_first(doc, "nome", "name")) or player_id,
            nickname=_to_str(doc.get("apelido")),
            status=_to_str(doc.get("status")),
        )


@dataclass(frozen=True)
class Team:
    team_id: str
    name: str
    players: tuple[str, ...] = ()

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Team":
        team_id = str(doc["id"])
        return cls(
            team_id=team_id,
            name=_to_str(_first(doc, "nomeTime", "nome")) or team_id,
            players=roster_ids(doc.get("jogadores")),
        )


@dataclass(frozen=True)
class Event:
    """A season or tournament container."""

    event_id: str
    name: str = ""
    date: str = ""
    modality: str = MODALITY_5X5
    type: str = EVENT_FRIENDLY
    status: Optional[str] = None
    roster: tuple[str, ...] = ()
    teams: tuple[Team, ...] = ()

    @property
    def is_internal(self) -> bool:
        return self.type == EVENT_INTERNAL

    @property
    def team_ids(self) -> tuple[str, ...]:
        return tuple(team.team_id for team in self.teams)

    def team_of(self, player_id: str) -> Optional[Team]:
        """Find the registered team a player belongs to."""
        for team in self.teams:
            if player_id in team.players:
                return team
        return None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Event":
        teams = []
        for raw in doc.get("times") or []:
            if isinstance(raw, Mapping) and raw.get("id"):
                teams.append(Team.from_document(raw))
        return cls(
            event_id=str(doc["id"]),
            name=_to_str(doc.get("nome")) or "",
            date=str(doc.get("data") or ""),
            modality=normalize_modality(doc.get("modalidade")),
            type=_to_str(doc.get("type")) or EVENT_FRIENDLY,
            status=_to_str(doc.get("status")),
            roster=roster_ids(doc.get("jogadoresEscalados")),
            teams=tuple(teams),
        )


@dataclass(frozen=True)
class ExternalGame:
    """A match of the association against an outside opponent."""

    game_id: str
    date: str = ""
    status: Optional[str] = None
    roster: tuple[str, ...] = ()
    opponent: Optional[str] = None
    ancb_score: Optional[int] = None
    opponent_score: Optional[int] = None
    # Some score editors write both score pairs on every game
    team_a_score: Optional[int] = None
    team_b_score: Optional[int] = None

    @property
    def is_finished(self) -> bool:
        return self.status == GAME_FINISHED

    @property
    def side_names(self) -> tuple[str, str]:
        return "ANCB", self.opponent or "Adversário"


@dataclass(frozen=True)
class InternalGame:
    """A match between two registered teams of an internal tournament."""

    game_id: str
    date: str = ""
    status: Optional[str] = None
    roster: tuple[str, ...] = ()
    team_a_id: Optional[str] = None
    team_a_name: Optional[str] = None
    team_b_id: Optional[str] = None
    team_b_name: Optional[str] = None
    team_a_score: Optional[int] = None
    team_b_score: Optional[int] = None
    ancb_score: Optional[int] = None
    opponent_score: Optional[int] = None

    @property
    def is_finished(self) -> bool:
        return self.status == GAME_FINISHED

    @property
    def side_names(self) -> tuple[str, str]:
        return self.team_a_name or "Time A", self.team_b_name or "Time B"


Game = Union[ExternalGame, InternalGame]


def game_from_document(doc: Mapping[str, Any], event_type: Optional[str] = None) -> Game:
    """Build the game variant matching the stored shape.

    Games of internal tournaments, or any game that references registered
    teams, are internal; everything else is played against an outside
    opponent.
    """
    common = dict(
        game_id=str(doc["id"]),
        date=str(_first(doc, "dataJogo", "data") or ""),
        status=_to_str(doc.get("status")),
        roster=roster_ids(doc.get("jogadoresEscalados")),
        team_a_score=_to_int(doc.get("placarTimeA_final")),
        team_b_score=_to_int(doc.get("placarTimeB_final")),
        ancb_score=_to_int(doc.get("placarANCB_final")),
        opponent_score=_to_int(doc.get("placarAdversario_final")),
    )
    team_a_id = _to_str(doc.get("timeA_id"))
    team_b_id = _to_str(doc.get("timeB_id"))
    if event_type == EVENT_INTERNAL or team_a_id or team_b_id:
        return InternalGame(
            team_a_id=team_a_id,
            team_a_name=_to_str(doc.get("timeA_nome")),
            team_b_id=team_b_id,
            team_b_name=_to_str(doc.get("timeB_nome")),
            **common,
        )
    return ExternalGame(opponent=_to_str(doc.get("adversario")), **common)


def _pair_is_set(pair: tuple[Optional[int], Optional[int]]) -> bool:
    return any(value is not None for value in pair) and any(pair)


def resolve_score(game: Game) -> tuple[int, int]:
    """Return the final score as (side A, side B).

    Internal games are scored on the team pair and external games on the
    ANCB/opponent pair. When the variant's own pair is absent (or both zero)
    and the other pair is populated, the other pair is authoritative.
    """
    internal_pair = (game.team_a_score, game.team_b_score)
    external_pair = (game.ancb_score, game.opponent_score)
    if isinstance(game, InternalGame):
        primary, fallback = internal_pair, external_pair
    else:
        primary, fallback = external_pair, internal_pair

    if not _pair_is_set(primary) and _pair_is_set(fallback):
        primary = fallback
    score_a, score_b = primary
    return score_a or 0, score_b or 0


@dataclass(frozen=True)
class ScoringEvent:
    """One made shot ("cesta"). Its ``record_id`` is the deduplication key."""

    record_id: str
    points: int
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    game_id: Optional[str] = None
    event_id: Optional[str] = None
    team_id: Optional[str] = None
    timestamp: Any = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> Optional["ScoringEvent"]:
        """Build a scoring event, or return None for records with invalid points."""
        points = _to_int(_first(doc, "pontos", "points"))
        if points not in VALID_POINTS:
            logger.debug("Skipping scoring record %s with points %r", doc.get("id"), points)
            return None
        return cls(
            record_id=str(doc["id"]),
            points=points,
            player_id=_to_str(_first(doc, "jogadorId", "playerId")),
            player_name=_to_str(_first(doc, "nomeJogador", "playerName")),
            game_id=_to_str(_first(doc, "jogoId", "gameId")),
            event_id=_to_str(_first(doc, "eventoId", "eventId")),
            team_id=_to_str(_first(doc, "timeId", "teamId")),
            timestamp=doc.get("timestamp"),
        )


@dataclass
class PlayerStats:
    """Per-player totals for a ranking or a single game."""

    player: Player
    total: int = 0
    points: int = 0
    makes1: int = 0
    makes2: int = 0
    makes3: int = 0
    long_range: int = 0
    games: set[str] = field(default_factory=set)
    # Makes per court zone (free_throw, inside, outside)
    zones: dict[str, int] = field(default_factory=dict)

    @property
    def games_played(self) -> int:
        return len(self.games)

    @property
    def per_game(self) -> float:
        if not self.games:
            return 0.0
        return round(self.total / len(self.games), 1)


@dataclass
class TeamStanding:
    team: Team
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: int = 0
    points_against: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def diff(self) -> int:
        return self.points_for - self.points_against


@dataclass(frozen=True)
class GameLogEntry:
    """One finished game in a player's history."""

    event_id: str
    game_id: str
    event_name: str
    modality: str
    date: str
    my_team: str
    opponent: str
    score_my_team: int
    score_opponent: int
    points: int = 0
    makes1: int = 0
    makes2: int = 0
    makes3: int = 0
