"""Tests for season rankings."""

import asyncio

import pytest

from ancb_stats_mcp.errors import InvalidFilterError, StoreUnavailableError
from ancb_stats_mcp.models import Player, PlayerStats
from ancb_stats_mcp.players import sort_ranking
from ancb_stats_mcp.queries import get_player_ranking


def ranking(store, year="2025", mode="5x5"):
    return asyncio.run(get_player_ranking(store, year, mode))


def by_id(rows):
    return {row.player.player_id: row for row in rows}


@pytest.fixture
def mixed_store(memory_store):
    """One player with a 2-pointer in a 3x3 event and a 3-pointer in a 5x5 event."""
    store = memory_store
    store.set_document(("jogadores",), "P1", {"nome": "Paulo"})
    store.set_document(("jogadores",), "P2", {"nome": "Pedro"})
    store.set_document(("eventos",), "E3", {"modalidade": "3x3", "data": "2025-05-01"})
    store.set_document(("eventos",), "E5", {"modalidade": "5x5", "data": "2025-07-01"})
    store.set_document(("eventos", "E3", "jogos"), "G3", {"jogadoresEscalados": ["P1"]})
    store.set_document(("eventos", "E5", "jogos"), "G5", {"jogadoresEscalados": ["P1", "P2"]})
    store.set_document(("eventos", "E5", "jogos"), "G6", {"jogadoresEscalados": ["P1"]})
    store.set_document(("eventos", "E3", "jogos", "G3", "cestas"), "r1",
                       {"jogadorId": "P1", "pontos": 2})
    store.set_document(("eventos", "E5", "jogos", "G5", "cestas"), "r2",
                       {"jogadorId": "P1", "pontos": 3})
    return store


class TestEndToEnd:
    """A record written in both locations is counted once."""

    def test_scenario_ranking(self, scenario_store):
        rows = ranking(scenario_store)
        assert [row.player.player_id for row in rows] == ["P1", "P2"]

        paulo, pedro = rows
        assert (paulo.total, paulo.makes3, paulo.makes2, paulo.makes1) == (5, 1, 1, 0)
        assert paulo.games_played == 1
        assert paulo.per_game == 5.0
        assert (pedro.total, pedro.makes1, pedro.games_played, pedro.per_game) == (1, 1, 1, 1.0)

    def test_total_matches_nested_location_alone(self, scenario_store):
        paulo = by_id(ranking(scenario_store))["P1"]
        nested = scenario_store.get_collection(("eventos", "E", "jogos", "G", "cestas"))
        assert paulo.total == sum(doc["points"] for doc in nested)


class TestModes:
    """Long range depends on the format of the event each make came from."""

    def test_shooters_mix_formats(self, mixed_store):
        paulo = by_id(ranking(mixed_store, mode="shooters"))["P1"]
        assert paulo.total == 2
        assert paulo.long_range == 2
        assert paulo.points == 5

    def test_points_mode_keeps_its_format(self, mixed_store):
        paulo = by_id(ranking(mixed_store, mode="5x5"))["P1"]
        assert paulo.total == 3
        assert paulo.makes3 == 1
        assert paulo.makes2 == 0

    def test_3x3_mode(self, mixed_store):
        paulo = by_id(ranking(mixed_store, mode="3x3"))["P1"]
        assert paulo.total == 2
        assert paulo.games_played == 1


class TestParticipation:
    """Appearances without a make still count as games played."""

    def test_rostered_without_scoring(self, mixed_store):
        rows = by_id(ranking(mixed_store, mode="5x5"))
        assert rows["P2"].total == 0
        assert rows["P2"].games_played == 1
        assert rows["P2"].per_game == 0.0

    def test_scoreless_game_lowers_average(self, mixed_store):
        paulo = by_id(ranking(mixed_store, mode="5x5"))["P1"]
        assert paulo.games_played == 2
        assert paulo.per_game == 1.5


class TestSampleSeason:
    """Rankings over the sample association."""

    def test_5x5_ranking(self, store_with_sample_data):
        rows = ranking(store_with_sample_data, "2025", "5x5")
        assert [(r.player.player_id, r.total) for r in rows] == [
            ("P001", 5), ("P003", 3), ("P002", 2), ("P005", 1),
        ]
        assert all(r.games_played == 1 for r in rows)

    def test_3x3_ranking(self, store_with_sample_data):
        rows = ranking(store_with_sample_data, "2025", "3x3")
        assert [(r.player.player_id, r.total, r.games_played) for r in rows] == [
            ("P003", 2, 2),
            ("P005", 2, 2),
            ("P001", 2, 2),
            ("P002", 1, 2),
            ("P004", 1, 2),
            ("P006", 0, 2),
        ]

    def test_shooters_ranking(self, store_with_sample_data):
        rows = ranking(store_with_sample_data, "2025", "shooters")
        assert [(r.player.player_id, r.total, r.games_played) for r in rows] == [
            ("P003", 2, 3),
            ("P001", 2, 3),
            ("P005", 1, 3),
            ("P004", 0, 2),
            ("P006", 0, 2),
            ("P002", 0, 3),
        ]

    def test_event_without_games_counts_as_one_game(self, store_with_sample_data):
        rows = by_id(ranking(store_with_sample_data, "2024", "5x5"))
        assert rows["P001"].total == 2
        assert rows["P001"].games_played == 1
        assert rows["P003"].total == 0
        assert rows["P003"].games_played == 1

    def test_banned_player_is_not_ranked(self, store_with_sample_data):
        store_with_sample_data.set_document(
            ("cestas",), "C900", {"jogadorId": "P007", "jogoId": "G001", "pontos": 3}
        )
        rows = by_id(ranking(store_with_sample_data, "2025", "5x5"))
        assert "P007" not in rows


class TestEmptyAndInvalid:
    """Empty scopes and bad filters."""

    def test_season_without_events(self, store_with_sample_data):
        assert ranking(store_with_sample_data, "2030", "5x5") == []

    def test_empty_store(self, memory_store):
        assert ranking(memory_store) == []

    def test_unknown_mode(self, store_with_sample_data):
        with pytest.raises(InvalidFilterError):
            ranking(store_with_sample_data, "2025", "4x4")

    def test_bad_year(self, store_with_sample_data):
        with pytest.raises(InvalidFilterError):
            ranking(store_with_sample_data, "25", "5x5")

    def test_player_list_failure_propagates(self, store_with_sample_data, flaky_store):
        store = flaky_store(store_with_sample_data, [("jogadores",)])
        with pytest.raises(StoreUnavailableError):
            ranking(store)


class TestSortOrder:
    """Equal totals rank the player with fewer games first."""

    def test_fewer_games_ranks_higher(self):
        veteran = PlayerStats(Player("P1", "Ana"), total=10, games={"G1", "G2"})
        rookie = PlayerStats(Player("P2", "Bia"), total=10, games={"G1"})
        leader = PlayerStats(Player("P3", "Cris"), total=12, games={"G1", "G2", "G3"})
        assert sort_ranking([veteran, rookie, leader]) == [leader, rookie, veteran]

    def test_name_breaks_full_ties(self):
        zeca = PlayerStats(Player("P1", "Zeca"), total=4, games={"G1"})
        abel = PlayerStats(Player("P2", "abel"), total=4, games={"G2"})
        assert sort_ranking([zeca, abel]) == [abel, zeca]
