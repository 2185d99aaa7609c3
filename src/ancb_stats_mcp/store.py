"""Document store access.

The statistics core reads collections addressed by path segments, such as
``("eventos",)`` or ``("eventos", event_id, "jogos", game_id, "cestas")``.
Every returned document is a plain dict carrying its id under ``"id"``.
A collection that was never written is empty, not an error.
"""

import copy
import json
import logging
from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

from .database import Neo4jDatabase

logger = logging.getLogger(__name__)

Path = Sequence[str]

PLAYERS = ("jogadores",)
EVENTS = ("eventos",)
SCORING_RECORDS = ("cestas",)


def games_path(event_id: str) -> tuple[str, ...]:
    return ("eventos", event_id, "jogos")


def game_records_path(event_id: str, game_id: str) -> tuple[str, ...]:
    return ("eventos", event_id, "jogos", game_id, "cestas")


@runtime_checkable
class DocumentStore(Protocol):
    """Read/write interface to the association's document database."""

    def get_collection(
        self,
        path: Path,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Fetch all documents of a collection, filtered by field equality."""
        ...

    def get_document(self, path: Path, doc_id: str) -> Optional[dict[str, Any]]:
        """Fetch one document by id, or None when absent."""
        ...

    def set_document(self, path: Path, doc_id: str, data: Mapping[str, Any]) -> None:
        """Create or replace a document."""
        ...


def _collection_key(path: Path) -> str:
    if not path or len(path) % 2 == 0:
        raise ValueError(f"Not a collection path: {path!r}")
    return "/".join(path)


def _sort_key(field_name: str):
    # Documents without the field sort last
    def key(doc: Mapping[str, Any]) -> tuple[bool, str]:
        value = doc.get(field_name)
        return value is None, "" if value is None else str(value)

    return key


class MemoryDocumentStore:
    """In-process document store, for offline snapshots and tests."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def get_collection(
        self,
        path: Path,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        docs = self._collections.get(_collection_key(path), {})
        results = []
        for doc_id, data in docs.items():
            if where and any(data.get(k) != v for k, v in where.items()):
                continue
            results.append({**copy.deepcopy(data), "id": doc_id})
        if order_by:
            results.sort(key=_sort_key(order_by))
        return results

    def get_document(self, path: Path, doc_id: str) -> Optional[dict[str, Any]]:
        data = self._collections.get(_collection_key(path), {}).get(doc_id)
        if data is None:
            return None
        return {**copy.deepcopy(data), "id": doc_id}

    def set_document(self, path: Path, doc_id: str, data: Mapping[str, Any]) -> None:
        body = {k: v for k, v in data.items() if k != "id"}
        self._collections.setdefault(_collection_key(path), {})[doc_id] = copy.deepcopy(body)


class Neo4jDocumentStore:
    """Document store persisted as ``:Document`` nodes in Neo4j.

    Each node is keyed by ``collection`` (the slash-joined path) and
    ``doc_id``. The full body is kept as JSON in ``body``; scalar top-level
    fields are also copied to ``f_<field>`` properties so equality filters
    and ordering run in Cypher.
    """

    FIELD_PREFIX = "f_"

    def __init__(self, db: Neo4jDatabase):
        self.db = db

    def get_collection(
        self,
        path: Path,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        query = "MATCH (d:Document {collection: $collection})"
        params: dict[str, Any] = {"collection": _collection_key(path)}

        conditions = []
        for i, (field_name, value) in enumerate((where or {}).items()):
            conditions.append(f"d[$key{i}] = $value{i}")
            params[f"key{i}"] = self.FIELD_PREFIX + field_name
            params[f"value{i}"] = value
        if conditions:
            query += " WHERE " + " AND ".join(conditions)

        query += " RETURN d.doc_id as doc_id, d.body as body"
        if order_by:
            query += " ORDER BY d[$order_key]"
            params["order_key"] = self.FIELD_PREFIX + order_by

        results = self.db.execute_query(query, params)
        return [{**json.loads(row["body"] or "{}"), "id": row["doc_id"]} for row in results]

    def get_document(self, path: Path, doc_id: str) -> Optional[dict[str, Any]]:
        query = """
        MATCH (d:Document {collection: $collection, doc_id: $doc_id})
        RETURN d.doc_id as doc_id, d.body as body
        """
        results = self.db.execute_query(
            query, {"collection": _collection_key(path), "doc_id": doc_id}
        )
        if not results:
            return None
        return {**json.loads(results[0]["body"] or "{}"), "id": results[0]["doc_id"]}

    def set_document(self, path: Path, doc_id: str, data: Mapping[str, Any]) -> None:
        body = {k: v for k, v in data.items() if k != "id"}
        properties: dict[str, Any] = {
            "collection": _collection_key(path),
            "doc_id": doc_id,
            "body": json.dumps(body, default=str),
        }
        for field_name, value in body.items():
            if isinstance(value, (str, int, float, bool)):
                properties[self.FIELD_PREFIX + field_name] = value

        query = """
        MERGE (d:Document {collection: $collection, doc_id: $doc_id})
        SET d = $properties
        """
        self.db.execute_write(
            query,
            {
                "collection": properties["collection"],
                "doc_id": doc_id,
                "properties": properties,
            },
        )

    def create_constraints(self) -> None:
        self.db.create_constraints()

    def create_indexes(self) -> None:
        self.db.create_indexes()
