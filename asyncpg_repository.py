"""
asyncpg_repository.py — Production PostgreSQL repository implementation.

Implements the CatalogRepository interface using an asyncpg connection pool
over the breeds_simple, breeders and user_profiles tables.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

import asyncpg

from models import BreederRecord, BreedRecord, Preference, SavedPreferences
from repositories import CatalogRepository

logger = logging.getLogger(__name__)

# ── Connection Pool Manager ──────────────────────────────────────────────────

class DatabasePool:
    """Manages asyncpg connection pool lifecycle."""

    def __init__(self, dsn: str, min_size: int = 2, max_size: int = 10):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None

    async def initialize(self) -> None:
        """Create connection pool and install the jsonb codec."""
        self._pool = await asyncpg.create_pool(
            self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            command_timeout=30,
            init=self._init_connection,
        )
        logger.info(
            "Database pool initialized (min=%d, max=%d)", self.min_size, self.max_size
        )

    async def _init_connection(self, conn: asyncpg.Connection) -> None:
        """Per-connection setup: decode jsonb columns to Python objects."""
        await conn.set_type_codec(
            "jsonb",
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call initialize() first.")
        return self._pool

    @asynccontextmanager
    async def acquire(self):
        async with self.pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self):
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def close(self) -> None:
        if self._pool:
            await self._pool.close()
            logger.info("Database pool closed")


# ── Row Coercion ─────────────────────────────────────────────────────────────

def _truthy(value: Any) -> bool:
    """Legacy tables store booleans as the strings 'True' / 'False'."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    return [v.strip() for v in str(value).split(",") if v.strip()]


def breed_record_from_row(row: dict) -> BreedRecord:
    return BreedRecord(
        id=int(row["id"]),
        name=row["name"],
        alt_names=_as_list(row.get("alt_names")),
        breed_group=row.get("breed_group") or "mixed",
        size_category=row.get("size_category") or "medium",
        breed_type=row.get("breed_type") or "purebred",
        hybrid=_truthy(row.get("hybrid")),
        cover_photo_url=row.get("cover_photo_url"),
        live=_truthy(row.get("live")),
        search_terms=row.get("search_terms"),
    )


def breeder_record_from_row(row: dict) -> BreederRecord:
    return BreederRecord(
        id=int(row["id"]),
        business_name=row.get("business_name") or "",
        city=row.get("city") or "",
        state=row.get("state") or "",
        breeds=_as_list(row.get("breeds")),
        available_puppies=int(row.get("available_puppies") or 0),
        pricing=row.get("pricing"),
        verified=_truthy(row.get("verified")),
        active=_truthy(row.get("active")),
    )


# ── Catalog Repository ───────────────────────────────────────────────────────

class AsyncPGRepository(CatalogRepository):
    """
    Production repository implementing the CatalogRepository interface.

    - list_breed_records() -> list[BreedRecord]
    - get_breed_record(id) -> Optional[BreedRecord]
    - list_breeders_with_puppies() -> list[BreederRecord]
    - get_match_preferences(user_id) -> Optional[SavedPreferences]
    - save_match_preferences(saved) -> SavedPreferences
    """

    def __init__(self, db: DatabasePool):
        self.db = db

    # ── Breeds ───────────────────────────────────────────────────────────

    async def list_breed_records(self) -> list[BreedRecord]:
        async with self.db.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, name, alt_names, breed_group, size_category, breed_type,
                       hybrid, cover_photo_url, live, search_terms
                FROM breeds_simple
                WHERE live = 'True'
                ORDER BY name
                """
            )
            return [breed_record_from_row(dict(r)) for r in rows]

    async def get_breed_record(self, record_id: int) -> Optional[BreedRecord]:
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, name, alt_names, breed_group, size_category, breed_type,
                       hybrid, cover_photo_url, live, search_terms
                FROM breeds_simple
                WHERE id = $1
                """,
                record_id,
            )
            return breed_record_from_row(dict(row)) if row else None

    # ── Breeders ─────────────────────────────────────────────────────────

    async def list_breeders_with_puppies(self) -> list[BreederRecord]:
        async with self.db.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, business_name, city, state, breeds, available_puppies,
                       pricing, verified, active
                FROM breeders
                WHERE active = 'True' AND available_puppies > 0
                ORDER BY id
                """
            )
            return [breeder_record_from_row(dict(r)) for r in rows]

    # ── Match Preferences ────────────────────────────────────────────────

    async def get_match_preferences(self, user_id: str) -> Optional[SavedPreferences]:
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT match_preferences, updated_at FROM user_profiles WHERE user_id = $1",
                user_id,
            )
        if not row or not row["match_preferences"]:
            return None
        prefs = row["match_preferences"]
        return SavedPreferences(
            user_id=user_id,
            preferences=Preference.model_validate(prefs),
            updated_at=_iso(row["updated_at"]),
        )

    async def save_match_preferences(self, saved: SavedPreferences) -> SavedPreferences:
        payload = saved.preferences.model_dump(by_alias=True)
        async with self.db.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO user_profiles (user_id, match_preferences, updated_at)
                VALUES ($1, $2, $3)
                ON CONFLICT (user_id) DO UPDATE
                SET match_preferences = EXCLUDED.match_preferences,
                    updated_at = EXCLUDED.updated_at
                """,
                saved.user_id,
                payload,
                datetime.fromisoformat(saved.updated_at),
            )
        logger.info("Saved match preferences for %s", saved.user_id)
        return saved


def _iso(value: Any) -> str:
    return value.isoformat() if isinstance(value, datetime) else str(value)
