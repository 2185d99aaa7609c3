"""Pytest configuration and fixtures for ANCB stats tests."""

import os

import pytest

# Set up test environment
os.environ.setdefault("NEO4J_URI", "bolt://localhost:7687")
os.environ.setdefault("NEO4J_USER", "neo4j")
os.environ.setdefault("NEO4J_PASSWORD", "password")

from ancb_stats_mcp.data_loader import load_sample_data
from ancb_stats_mcp.errors import StoreUnavailableError
from ancb_stats_mcp.store import MemoryDocumentStore


class FlakyDocumentStore:
    """Wraps a store and fails reads of selected collection paths."""

    def __init__(self, inner, failing_paths=()):
        self.inner = inner
        self.failing_paths = {tuple(path) for path in failing_paths}
        self.reads = []

    def _check(self, path):
        self.reads.append(tuple(path))
        if tuple(path) in self.failing_paths:
            raise StoreUnavailableError(tuple(path), RuntimeError("permission denied"))

    def get_collection(self, path, where=None, order_by=None):
        self._check(path)
        return self.inner.get_collection(path, where, order_by)

    def get_document(self, path, doc_id):
        self._check(tuple(path) + (doc_id,))
        return self.inner.get_document(path, doc_id)

    def set_document(self, path, doc_id, data):
        self.inner.set_document(path, doc_id, data)


@pytest.fixture
def memory_store():
    """Provide an empty in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
def store_with_sample_data(memory_store):
    """Provide an in-memory store pre-populated with sample data."""
    load_sample_data(memory_store)
    return memory_store


@pytest.fixture
def scenario_store(memory_store):
    """Store holding one 5x5 event whose game was scored in both locations."""
    store = memory_store
    store.set_document(("jogadores",), "P1", {"nome": "Paulo"})
    store.set_document(("jogadores",), "P2", {"nome": "Pedro"})
    store.set_document(("eventos",), "E", {
        "nome": "Copa Regional",
        "modalidade": "5x5",
        "type": "torneio_interno",
        "data": "2025-06-01",
        "times": [
            {"id": "T1", "nomeTime": "Time 1", "jogadores": ["P1"]},
            {"id": "T2", "nomeTime": "Time 2", "jogadores": ["P2"]},
        ],
    })
    store.set_document(("eventos", "E", "jogos"), "G", {
        "dataJogo": "2025-06-01",
        "status": "finalizado",
        "timeA_id": "T1",
        "timeA_nome": "Time 1",
        "timeB_id": "T2",
        "timeB_nome": "Time 2",
        "placarTimeA_final": 50,
        "placarTimeB_final": 48,
    })
    nested = ("eventos", "E", "jogos", "G", "cestas")
    store.set_document(nested, "c1", {"playerId": "P1", "points": 3})
    store.set_document(nested, "c2", {"playerId": "P1", "points": 2})
    store.set_document(("cestas",), "c1", {"jogoId": "G", "playerId": "P1", "points": 3})
    store.set_document(("cestas",), "c3", {"jogoId": "G", "playerId": "P2", "points": 1})
    return store


@pytest.fixture
def flaky_store():
    """Factory wrapping a store so reads of the given paths fail."""
    return FlakyDocumentStore
