"""
Movies service - persistence operations for the movie resource
"""

import logging
from datetime import date
from typing import Dict, Any

import asyncpg
from fastapi import Depends

from database.connection import get_db_pool
from models.enums import ServiceErrorType
from models.movie import INT4_MAX
from services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

# Columns a client may write, in insert order
WRITABLE_FIELDS = ("title", "genre_id", "language_id", "oscar_count", "release_date")

MOVIE_SELECT = """
    SELECT m.id, m.title, m.genre_id, m.language_id, m.oscar_count, m.release_date,
           g.id AS genre_pk, g.name AS genre_name,
           l.id AS language_pk, l.name AS language_name
    FROM movies m
    JOIN genres g ON g.id = m.genre_id
    JOIN languages l ON l.id = m.language_id
"""

def _movie_from_row(row: asyncpg.Record) -> Dict[str, Any]:
    """Shape a joined row into a movie with its genre and language expanded"""
    return {
        "id": row["id"],
        "title": row["title"],
        "genre_id": row["genre_id"],
        "language_id": row["language_id"],
        "oscar_count": row["oscar_count"],
        "release_date": row["release_date"],
        "genres": {"id": row["genre_pk"], "name": row["genre_name"]},
        "languages": {"id": row["language_pk"], "name": row["language_name"]},
    }

class MoviesService(BaseService):
    """Service for movie CRUD operations"""

    def __init__(self, db_pool: asyncpg.Pool):
        super().__init__(db_pool, "movies")

    async def list_movies(self) -> ServiceResult:
        """All movies ordered by title, with genre and language expanded"""
        try:
            async with self.db_pool.acquire() as conn:
                rows = await conn.fetch(MOVIE_SELECT + " ORDER BY m.title ASC")
            return ServiceResult.ok([_movie_from_row(row) for row in rows])
        except Exception as e:
            return self._failure_from_exception("list_movies", e)

    async def list_movies_by_genre(self, genre_name: str) -> ServiceResult:
        """
        Movies whose genre name matches, ignoring case

        Args:
            genre_name: Genre name to filter on

        Returns:
            ServiceResult with the (possibly empty) list of movies
        """
        try:
            async with self.db_pool.acquire() as conn:
                rows = await conn.fetch(
                    MOVIE_SELECT + " WHERE lower(g.name) = lower($1) ORDER BY m.title ASC",
                    genre_name
                )
            return ServiceResult.ok([_movie_from_row(row) for row in rows])
        except Exception as e:
            return self._failure_from_exception("list_movies_by_genre", e)

    async def get_movie_by_id(self, movie_id: int) -> ServiceResult:
        """Fetch one movie row, RESOURCE_NOT_FOUND when absent"""
        # SERIAL ids are positive int4; anything else cannot be bound or stored
        if not 1 <= movie_id <= INT4_MAX:
            return ServiceResult.fail(ServiceErrorType.RESOURCE_NOT_FOUND, f"Movie {movie_id} not found")

        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT id, title, genre_id, language_id, oscar_count, release_date FROM movies WHERE id = $1",
                    movie_id
                )
        except Exception as e:
            return self._failure_from_exception("get_movie_by_id", e)

        if not row:
            return ServiceResult.fail(ServiceErrorType.RESOURCE_NOT_FOUND, f"Movie {movie_id} not found")
        return ServiceResult.ok([dict(row)])

    async def find_movie_by_title(self, title: str) -> ServiceResult:
        """Look up a movie by title, ignoring case. Empty data when none exists"""
        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT id, title FROM movies WHERE lower(title) = lower($1) LIMIT 1",
                    title
                )
            return ServiceResult.ok([dict(row)] if row else [])
        except Exception as e:
            return self._failure_from_exception("find_movie_by_title", e)

    async def create_movie(
        self,
        title: str,
        genre_id: int,
        language_id: int,
        oscar_count: int,
        release_date: date
    ) -> ServiceResult:
        """
        Insert a movie unless one with the same title already exists

        The title lookup answers the common case without a write; the unique
        index on lower(title) catches concurrent inserts that pass the lookup.

        Returns:
            ServiceResult with the created row, or CONFLICT for a duplicate title
        """
        existing = await self.find_movie_by_title(title)
        if not existing.success:
            return existing
        if existing.data:
            logger.info(f"Rejected duplicate movie title: {title}")
            return ServiceResult.fail(ServiceErrorType.CONFLICT, "A movie with this title already exists")

        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO movies (title, genre_id, language_id, oscar_count, release_date)
                    VALUES ($1, $2, $3, $4, $5)
                    RETURNING id, title, genre_id, language_id, oscar_count, release_date
                """, title, genre_id, language_id, oscar_count, release_date)
        except asyncpg.UniqueViolationError:
            logger.info(f"Concurrent insert of movie title: {title}")
            return ServiceResult.fail(ServiceErrorType.CONFLICT, "A movie with this title already exists")
        except Exception as e:
            return self._failure_from_exception("create_movie", e)

        logger.info(f"Created movie {row['id']}: {title}")
        return ServiceResult.ok([dict(row)])

    async def update_movie(self, movie_id: int, fields: Dict[str, Any]) -> ServiceResult:
        """
        Partially update a movie

        Args:
            movie_id: Identifier of the movie
            fields: Column values to overwrite; columns not present are left untouched

        Returns:
            ServiceResult with the updated row, RESOURCE_NOT_FOUND if the id is unknown
        """
        existing = await self.get_movie_by_id(movie_id)
        if not existing.success:
            return existing

        updates = {key: value for key, value in fields.items() if key in WRITABLE_FIELDS}
        if not updates:
            return existing

        set_clauses = []
        params = []
        for param_count, (field_name, value) in enumerate(updates.items(), start=1):
            set_clauses.append(f"{field_name} = ${param_count}")
            params.append(value)
        params.append(movie_id)

        query = f"""
            UPDATE movies SET {', '.join(set_clauses)}
            WHERE id = ${len(params)}
            RETURNING id, title, genre_id, language_id, oscar_count, release_date
        """

        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(query, *params)
        except asyncpg.UniqueViolationError:
            return ServiceResult.fail(ServiceErrorType.CONFLICT, "A movie with this title already exists")
        except Exception as e:
            return self._failure_from_exception("update_movie", e)

        if not row:
            # Deleted between the lookup and the update
            return ServiceResult.fail(ServiceErrorType.RESOURCE_NOT_FOUND, f"Movie {movie_id} not found")

        logger.info(f"Updated movie {movie_id}: {sorted(updates)}")
        return ServiceResult.ok([dict(row)])

    async def delete_movie(self, movie_id: int) -> ServiceResult:
        """Delete a movie, RESOURCE_NOT_FOUND if the id is unknown"""
        existing = await self.get_movie_by_id(movie_id)
        if not existing.success:
            return existing

        try:
            async with self.db_pool.acquire() as conn:
                status = await conn.execute("DELETE FROM movies WHERE id = $1", movie_id)
        except Exception as e:
            return self._failure_from_exception("delete_movie", e)

        if self._affected_rows(status) == 0:
            return ServiceResult.fail(ServiceErrorType.RESOURCE_NOT_FOUND, f"Movie {movie_id} not found")

        logger.info(f"Deleted movie {movie_id}")
        return ServiceResult.ok(existing.data)

def get_movies_service(db_pool: asyncpg.Pool = Depends(get_db_pool)) -> MoviesService:
    """FastAPI dependency building the movies service over the application pool"""
    return MoviesService(db_pool)
