"""Configuration for the ANCB statistics server.

Settings are read from environment variables (and an optional ``.env`` file)
through pydantic-settings. ``NEO4J_URI``, ``NEO4J_USER`` and ``NEO4J_PASSWORD``
keep the names the Neo4j tooling already uses.
"""

import logging
import sys
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Document store (Neo4j)
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    neo4j_database: Optional[str] = Field(
        default=None,
        description="Target database name; the server default when unset",
    )

    # Aggregation
    max_concurrent_reads: int = Field(default=8, ge=1, le=64)
    default_mode: str = Field(default="5x5", description="3x3, 5x5 or shooters")

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Send package logs to stderr; stdout belongs to the MCP transport."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger("ancb_stats_mcp")
    root.handlers[:] = [handler]
    root.setLevel((level or get_settings().log_level).upper())
    root.propagate = False
