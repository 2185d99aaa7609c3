"""Load collection exports (CSV/JSON) into a document store."""

import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from .models import VALID_POINTS
from .store import (
    EVENTS,
    PLAYERS,
    SCORING_RECORDS,
    DocumentStore,
    game_records_path,
    games_path,
)

logger = logging.getLogger(__name__)

PLAYERS_FILE = "jogadores.csv"
EVENTS_FILE = "eventos.json"
FLAT_RECORDS_FILE = "cestas.csv"


def _clean(value: Any) -> Any:
    """Turn pandas missing markers and blank strings into None, numpy ints into int."""
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    # numpy integers do not serialize to JSON
    if pd.api.types.is_integer(value):
        return int(value)
    return value


def _clean_row(row: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in ((k, _clean(v)) for k, v in row.items()) if v is not None}


def _points(value: Any) -> Optional[int]:
    try:
        points = int(float(value))
    except (TypeError, ValueError):
        return None
    return points if points in VALID_POINTS else None


class ExportLoader:
    """Import an export directory into a document store.

    The directory may hold ``jogadores.csv``, ``eventos.json`` (events with
    nested ``jogos``, each with nested ``cestas``) and ``cestas.csv`` (the
    root scoring collection). Missing files are skipped.
    """

    def __init__(self, store: DocumentStore, export_dir: Path):
        self.store = store
        self.export_dir = Path(export_dir)
        self.skipped = 0

    def load_all(self) -> dict[str, int]:
        """Load every export file present and return counts per collection."""
        stats = {
            "players": 0,
            "events": 0,
            "games": 0,
            "game_records": 0,
            "flat_records": 0,
            "skipped": 0,
        }

        stats["players"] = self._load_players()
        stats["events"], stats["games"], stats["game_records"] = self._load_events()
        stats["flat_records"] = self._load_flat_records()
        stats["skipped"] = self.skipped

        logger.info("Export loaded from %s: %s", self.export_dir, stats)
        return stats

    def _read_csv(self, name: str) -> Optional[pd.DataFrame]:
        csv_path = self.export_dir / name
        if not csv_path.exists():
            return None
        # Ids must stay strings ("007" is not 7)
        return pd.read_csv(csv_path, dtype=str, keep_default_na=False)

    def _load_players(self) -> int:
        """Load players from jogadores.csv."""
        df = self._read_csv(PLAYERS_FILE)
        if df is None:
            return 0

        count = 0
        for _, row in df.iterrows():
            data = _clean_row(row.to_dict())
            player_id = data.pop("id", None)
            if not player_id:
                self.skipped += 1
                continue
            self.store.set_document(PLAYERS, player_id, data)
            count += 1
        return count

    def _load_events(self) -> tuple[int, int, int]:
        """Load events, their games and nested scoring records from eventos.json."""
        json_path = self.export_dir / EVENTS_FILE
        if not json_path.exists():
            return 0, 0, 0

        df = pd.read_json(json_path, orient="records", dtype=False, convert_dates=False)
        events = games = records = 0

        for _, row in df.iterrows():
            data = _clean_row(row.to_dict())
            event_id = data.pop("id", None)
            if not event_id:
                self.skipped += 1
                continue
            event_id = str(event_id)
            nested_games = data.pop("jogos", None) or []
            self.store.set_document(EVENTS, event_id, data)
            events += 1

            for game in nested_games:
                game_data = _clean_row(dict(game))
                game_id = game_data.pop("id", None)
                if not game_id:
                    self.skipped += 1
                    continue
                game_id = str(game_id)
                nested_records = game_data.pop("cestas", None) or []
                self.store.set_document(games_path(event_id), game_id, game_data)
                games += 1

                for record in nested_records:
                    record_data = _clean_row(dict(record))
                    record_id = record_data.pop("id", None)
                    points = _points(record_data.get("pontos"))
                    if not record_id or points is None:
                        self.skipped += 1
                        continue
                    record_data["pontos"] = points
                    self.store.set_document(
                        game_records_path(event_id, game_id), str(record_id), record_data
                    )
                    records += 1

        return events, games, records

    def _load_flat_records(self) -> int:
        """Load the root scoring collection from cestas.csv."""
        df = self._read_csv(FLAT_RECORDS_FILE)
        if df is None:
            return 0

        count = 0
        for _, row in df.iterrows():
            data = _clean_row(row.to_dict())
            record_id = data.pop("id", None)
            points = _points(data.get("pontos"))
            if not record_id or points is None:
                self.skipped += 1
                continue
            data["pontos"] = points
            self.store.set_document(SCORING_RECORDS, record_id, data)
            count += 1
        return count


def load_export(store: DocumentStore, export_dir: Path) -> dict[str, int]:
    """Convenience function to load an export directory."""
    return ExportLoader(store, export_dir).load_all()
