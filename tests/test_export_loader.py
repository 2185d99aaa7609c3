"""Tests for loading collection exports."""

import asyncio
import json

import pytest

from ancb_stats_mcp.export_loader import ExportLoader, load_export
from ancb_stats_mcp.queries import get_player_ranking


@pytest.fixture
def export_dir(tmp_path):
    """Write a small export with one duplicated scoring record."""
    (tmp_path / "jogadores.csv").write_text(
        "id,nome,apelido,status\n"
        "007,Paulo,,\n"
        "P2,Pedro,Pe,banned\n"
        ",Sem Id,,\n",
        encoding="utf-8",
    )
    events = [
        {
            "id": "E1",
            "nome": "Copa Sinop",
            "data": "2025-06-01",
            "modalidade": "5x5",
            "type": "amistoso",
            "status": "finalizado",
            "jogadoresEscalados": ["007"],
            "jogos": [
                {
                    "id": "G1",
                    "dataJogo": "2025-06-01",
                    "status": "finalizado",
                    "adversario": "Sinop",
                    "placarANCB_final": 40,
                    "placarAdversario_final": 30,
                    "cestas": [
                        {"id": "c1", "pontos": 3, "jogadorId": "007"},
                        {"id": "c2", "pontos": "x", "jogadorId": "007"},
                    ],
                }
            ],
        },
        {"id": "E2", "nome": "Festival", "data": "2024-10-12", "modalidade": "3x3"},
    ]
    (tmp_path / "eventos.json").write_text(json.dumps(events), encoding="utf-8")
    (tmp_path / "cestas.csv").write_text(
        "id,pontos,jogadorId,jogoId,eventoId\n"
        "c1,3,007,G1,E1\n"
        "c3,2,007,G1,E1\n"
        "c4,5,007,G1,E1\n",
        encoding="utf-8",
    )
    return tmp_path


class TestExportLoader:
    """Test importing an export directory."""

    def test_counts(self, export_dir, memory_store):
        stats = load_export(memory_store, export_dir)
        assert stats == {
            "players": 2,
            "events": 2,
            "games": 1,
            "game_records": 1,
            "flat_records": 2,
            "skipped": 3,
        }

    def test_ids_stay_strings(self, export_dir, memory_store):
        load_export(memory_store, export_dir)
        player = memory_store.get_document(("jogadores",), "007")
        assert player == {"id": "007", "nome": "Paulo"}

    def test_games_and_records_are_nested(self, export_dir, memory_store):
        load_export(memory_store, export_dir)
        game = memory_store.get_document(("eventos", "E1", "jogos"), "G1")
        assert game["placarANCB_final"] == 40
        assert "cestas" not in game
        records = memory_store.get_collection(("eventos", "E1", "jogos", "G1", "cestas"))
        assert [r["id"] for r in records] == ["c1"]

    def test_event_without_games(self, export_dir, memory_store):
        load_export(memory_store, export_dir)
        assert memory_store.get_document(("eventos",), "E2")["modalidade"] == "3x3"
        assert memory_store.get_collection(("eventos", "E2", "jogos")) == []

    def test_flat_points_are_numbers(self, export_dir, memory_store):
        load_export(memory_store, export_dir)
        record = memory_store.get_document(("cestas",), "c3")
        assert record["pontos"] == 2

    def test_missing_files_are_skipped(self, tmp_path, memory_store):
        stats = ExportLoader(memory_store, tmp_path).load_all()
        assert stats["players"] == 0
        assert stats["events"] == 0
        assert memory_store.get_collection(("jogadores",)) == []

    def test_ranking_from_export(self, export_dir, memory_store):
        load_export(memory_store, export_dir)
        rows = asyncio.run(get_player_ranking(memory_store, "2025", "5x5"))
        assert [(r.player.player_id, r.total, r.games_played) for r in rows] == [("007", 5, 1)]
