"""Data loader for populating a document store with ANCB data."""

from typing import Any

from .models import (
    EVENT_FRIENDLY,
    EVENT_INTERNAL,
    GAME_FINISHED,
    Event,
    ExternalGame,
    Game,
    InternalGame,
    Player,
    ScoringEvent,
    Team,
)
from .store import (
    EVENTS,
    PLAYERS,
    SCORING_RECORDS,
    DocumentStore,
    game_records_path,
    games_path,
)


def _drop_empty(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


class DataLoader:
    """Write domain objects into a document store using the stored field names."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def load_player(self, player: Player) -> None:
        """Load a player into the store."""
        self.store.set_document(
            PLAYERS,
            player.player_id,
            _drop_empty({
                "nome": player.name,
                "apelido": player.nickname,
                "status": player.status,
            }),
        )

    def load_event(self, event: Event) -> None:
        """Load an event, with its registered teams, into the store."""
        self.store.set_document(
            EVENTS,
            event.event_id,
            _drop_empty({
                "nome": event.name,
                "data": event.date,
                "modalidade": event.modality,
                "type": event.type,
                "status": event.status,
                "jogadoresEscalados": list(event.roster),
                "times": [
                    {"id": team.team_id, "nomeTime": team.name, "jogadores": list(team.players)}
                    for team in event.teams
                ],
            }),
        )

    def load_game(self, event_id: str, game: Game) -> None:
        """Load a game under its event."""
        data: dict[str, Any] = {
            "dataJogo": game.date,
            "status": game.status,
            "jogadoresEscalados": list(game.roster),
            "placarANCB_final": game.ancb_score,
            "placarAdversario_final": game.opponent_score,
            "placarTimeA_final": game.team_a_score,
            "placarTimeB_final": game.team_b_score,
        }
        if isinstance(game, InternalGame):
            data.update({
                "timeA_id": game.team_a_id,
                "timeA_nome": game.team_a_name,
                "timeB_id": game.team_b_id,
                "timeB_nome": game.team_b_name,
            })
        else:
            data["adversario"] = game.opponent
        self.store.set_document(games_path(event_id), game.game_id, _drop_empty(data))

    def _scoring_data(self, record: ScoringEvent) -> dict[str, Any]:
        return _drop_empty({
            "pontos": record.points,
            "jogadorId": record.player_id,
            "nomeJogador": record.player_name,
            "jogoId": record.game_id,
            "eventoId": record.event_id,
            "timeId": record.team_id,
            "timestamp": record.timestamp,
        })

    def load_game_record(self, event_id: str, game_id: str, record: ScoringEvent) -> None:
        """Load a scoring record into the game's nested collection."""
        self.store.set_document(
            game_records_path(event_id, game_id), record.record_id, self._scoring_data(record)
        )

    def load_flat_record(self, record: ScoringEvent) -> None:
        """Load a scoring record into the root ``cestas`` collection."""
        self.store.set_document(SCORING_RECORDS, record.record_id, self._scoring_data(record))


def get_sample_data() -> dict[str, Any]:
    """Get a small ANCB season for demo purposes.

    The 5x5 season has one game whose records were written both nested and
    flat; the 3x3 internal tournament has registered teams and standings.
    """
    players = [
        Player("P001", "Rafael Souza", "Rafa"),
        Player("P002", "Bruno Lima"),
        Player("P003", "Carlos Mendes", "Cadu"),
        Player("P004", "Diego Alves"),
        Player("P005", "Eduardo Rocha", "Dudu"),
        Player("P006", "Felipe Costa"),
        Player("P007", "Gustavo Pires", status="banned"),
    ]

    teams = [
        Team("T001", "Cangurus", ("P001", "P002")),
        Team("T002", "Lobos", ("P003", "P004")),
        Team("T003", "Águias", ("P005", "P006")),
    ]

    events = [
        Event("E001", "Amistoso Nova Canaã", "2025-06-01", "5x5", EVENT_FRIENDLY,
              GAME_FINISHED, roster=("P001", "P002", "P003", "P004", "P005")),
        Event("E002", "Torneio Interno 3x3", "2025-08-16", "3x3", EVENT_INTERNAL,
              GAME_FINISHED, teams=tuple(teams)),
        Event("E003", "Festival 2024", "12/10/24", "5x5", EVENT_FRIENDLY,
              GAME_FINISHED, roster=("P001", "P003")),
    ]

    games = {
        "E001": [
            ExternalGame("G001", "2025-06-01", GAME_FINISHED, ("P001", "P002", "P003", "P005"),
                         "Colíder", ancb_score=50, opponent_score=48),
        ],
        "E002": [
            InternalGame("G101", "2025-08-16", GAME_FINISHED, (), "T001", "Cangurus",
                         "T002", "Lobos", team_a_score=21, team_b_score=15),
            InternalGame("G102", "2025-08-16", GAME_FINISHED, (), "T002", "Lobos",
                         "T003", "Águias", team_a_score=18, team_b_score=20),
            InternalGame("G103", "2025-08-16", GAME_FINISHED, (), "T001", "Cangurus",
                         "T003", "Águias", team_a_score=17, team_b_score=17),
        ],
        "E003": [],
    }

    game_records = {
        ("E001", "G001"): [
            ScoringEvent("C001", 3, "P001", "Rafael Souza"),
            ScoringEvent("C002", 2, "P001", "Rafael Souza"),
            ScoringEvent("C003", 3, "P003", "Carlos Mendes"),
            ScoringEvent("C004", 1, "P005", "Eduardo Rocha"),
        ],
        ("E002", "G101"): [
            ScoringEvent("C101", 2, "P001", "Rafael Souza", team_id="T001"),
            ScoringEvent("C102", 1, "P002", "Bruno Lima", team_id="T001"),
            ScoringEvent("C103", 2, "P003", "Carlos Mendes", team_id="T002"),
        ],
        ("E002", "G102"): [
            ScoringEvent("C104", 2, "P005", "Eduardo Rocha", team_id="T003"),
            ScoringEvent("C105", 1, "P004", "Diego Alves", team_id="T002"),
        ],
    }

    # Legacy root collection: C001 duplicates a nested record
    flat_records = [
        ScoringEvent("C001", 3, "P001", "Rafael Souza", game_id="G001", event_id="E001"),
        ScoringEvent("C201", 2, "P002", "Bruno Lima", game_id="G001", event_id="E001"),
        ScoringEvent("C202", 2, "P001", "Rafael Souza", event_id="E003"),
        ScoringEvent("C203", 3, "P006", "Felipe Costa", game_id="G999"),
    ]

    return {
        "players": players,
        "events": events,
        "games": games,
        "game_records": game_records,
        "flat_records": flat_records,
    }


def load_sample_data(store: DocumentStore) -> None:
    """Load all sample data into the store."""
    loader = DataLoader(store)
    data = get_sample_data()

    # Create constraints and indexes first when the backend has them
    if hasattr(store, "create_constraints"):
        store.create_constraints()
    if hasattr(store, "create_indexes"):
        store.create_indexes()

    for player in data["players"]:
        loader.load_player(player)

    for event in data["events"]:
        loader.load_event(event)

    for event_id, games in data["games"].items():
        for game in games:
            loader.load_game(event_id, game)

    for (event_id, game_id), records in data["game_records"].items():
        for record in records:
            loader.load_game_record(event_id, game_id, record)

    for record in data["flat_records"]:
        loader.load_flat_record(record)
