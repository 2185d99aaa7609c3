"""Neo4j database connection and operations for the ANCB document store."""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional

from neo4j import Driver, GraphDatabase, Session
from neo4j.exceptions import DriverError, Neo4jError

from .config import get_settings
from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class Neo4jDatabase:
    """Neo4j database connection manager."""

    def __init__(
        self,
        uri: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
    ):
        settings = get_settings()
        self.uri = uri or settings.neo4j_uri
        self.user = user or settings.neo4j_user
        self.password = password or settings.neo4j_password
        self.database = database or settings.neo4j_database
        self._driver: Optional[Driver] = None

    def connect(self) -> None:
        """Establish connection to Neo4j database."""
        if self._driver is None:
            logger.info("Connecting to Neo4j at %s", self.uri)
            self._driver = GraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password),
            )

    def close(self) -> None:
        """Close database connection."""
        if self._driver:
            self._driver.close()
            self._driver = None

    @property
    def driver(self) -> Driver:
        """Get the database driver, connecting if necessary."""
        if self._driver is None:
            self.connect()
        return self._driver  # type: ignore

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Create a database session context manager."""
        if self.database:
            session = self.driver.session(database=self.database)
        else:
            session = self.driver.session()
        try:
            yield session
        finally:
            session.close()

    def execute_query(
        self, query: str, parameters: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Execute a Cypher query and return results."""
        try:
            with self.session() as session:
                result = session.run(query, parameters or {})
                return [dict(record) for record in result]
        except (Neo4jError, DriverError) as exc:
            raise StoreUnavailableError(_query_path(parameters), exc) from exc

    def execute_write(
        self, query: str, parameters: Optional[dict[str, Any]] = None
    ) -> None:
        """Execute a write query."""
        try:
            with self.session() as session:
                session.run(query, parameters or {}).consume()
        except (Neo4jError, DriverError) as exc:
            raise StoreUnavailableError(_query_path(parameters), exc) from exc

    def clear_database(self) -> None:
        """Clear all documents from the database."""
        self.execute_write("MATCH (d:Document) DETACH DELETE d")

    def create_constraints(self) -> None:
        """Create the uniqueness constraint on document keys."""
        constraints = [
            "CREATE CONSTRAINT document_key IF NOT EXISTS "
            "FOR (d:Document) REQUIRE (d.collection, d.doc_id) IS UNIQUE",
        ]
        for constraint in constraints:
            try:
                self.execute_write(constraint)
            except StoreUnavailableError as exc:
                logger.debug("Constraint not created: %s", exc)

    def create_indexes(self) -> None:
        """Create indexes for commonly queried properties."""
        indexes = [
            "CREATE INDEX document_collection IF NOT EXISTS FOR (d:Document) ON (d.collection)",
        ]
        for index in indexes:
            try:
                self.execute_write(index)
            except StoreUnavailableError as exc:
                logger.debug("Index not created: %s", exc)


def _query_path(parameters: Optional[dict[str, Any]]) -> tuple[str, ...]:
    collection = (parameters or {}).get("collection")
    return tuple(collection.split("/")) if collection else ()
