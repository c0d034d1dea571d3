"""
Movies route tests
Exercise every verb through the HTTP layer against the in-memory service.
"""

import logging
from datetime import date

import asyncpg
import httpx
import pytest
import pytest_asyncio

from app import create_app
from infrastructure import make_pool
from models.enums import ServiceErrorType


NEW_MOVIE = {
    "title": "Inception",
    "genre_id": 3,
    "language_id": 1,
    "oscar_count": 4,
    "release_date": "2010-07-16",
}


def titles(response):
    return [movie["title"] for movie in response.json()]


class TestListMovies:

    @pytest.mark.asyncio
    async def test_empty_list(self, client):
        response = await client.get("/movies")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_sorted_by_title(self, client, movies_store):
        for title in ["Zeta", "Alpha", "Mid"]:
            movies_store.add(title)

        response = await client.get("/movies")

        assert response.status_code == 200
        assert titles(response) == ["Alpha", "Mid", "Zeta"]

    @pytest.mark.asyncio
    async def test_expands_genre_and_language(self, client, movies_store):
        movies_store.add("Cidade de Deus", genre_id=2, language_id=2, release_date=date(2002, 8, 30))

        movie = (await client.get("/movies")).json()[0]

        assert movie["genres"] == {"id": 2, "name": "Drama"}
        assert movie["languages"] == {"id": 2, "name": "Portuguese"}
        assert movie["release_date"] == "2002-08-30"

    @pytest.mark.asyncio
    async def test_persistence_failure_is_500(self, client, movies_store):
        movies_store.fail_with = ServiceErrorType.DATABASE_ERROR

        response = await client.get("/movies")

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to list movies"
        assert "connection refused" not in response.text


class TestListMoviesByGenre:

    @pytest.mark.asyncio
    async def test_filters_by_genre(self, client, movies_store):
        movies_store.add("Airplane!", genre_id=1)
        movies_store.add("Alien", genre_id=3)
        movies_store.add("Superbad", genre_id=1)

        response = await client.get("/movies/Comedy")

        assert response.status_code == 200
        assert titles(response) == ["Airplane!", "Superbad"]

    @pytest.mark.asyncio
    async def test_genre_match_ignores_case(self, client, movies_store):
        movies_store.add("Airplane!", genre_id=1)
        movies_store.add("Alien", genre_id=3)

        lower = await client.get("/movies/comedy")
        exact = await client.get("/movies/Comedy")

        assert lower.status_code == 200
        assert lower.json() == exact.json()

    @pytest.mark.asyncio
    async def test_unknown_genre_is_empty(self, client, movies_store):
        movies_store.add("Alien", genre_id=3)

        response = await client.get("/movies/Western")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_persistence_failure_is_500(self, client, movies_store):
        movies_store.fail_with = ServiceErrorType.DATABASE_ERROR

        response = await client.get("/movies/comedy")

        assert response.status_code == 500


class TestCreateMovie:

    @pytest.mark.asyncio
    async def test_create_returns_201_with_empty_body(self, client, movies_store):
        response = await client.post("/movies", json=NEW_MOVIE)

        assert response.status_code == 201
        assert response.content == b""
        stored = [m for m in movies_store.movies.values() if m["title"] == "Inception"]
        assert len(stored) == 1
        assert stored[0]["release_date"] == date(2010, 7, 16)

    @pytest.mark.asyncio
    async def test_duplicate_title_ignoring_case_is_409(self, client, movies_store):
        movies_store.add("Inception")

        response = await client.post("/movies", json={**NEW_MOVIE, "title": "inception"})

        assert response.status_code == 409
        assert response.json()["message"] == "A movie with this title already exists"
        assert len(movies_store.movies) == 1

    @pytest.mark.asyncio
    async def test_missing_field_is_422(self, client, movies_store):
        payload = {k: v for k, v in NEW_MOVIE.items() if k != "genre_id"}

        response = await client.post("/movies", json=payload)

        assert response.status_code == 422
        assert movies_store.movies == {}

    @pytest.mark.asyncio
    async def test_invalid_release_date_is_422(self, client):
        response = await client.post("/movies", json={**NEW_MOVIE, "release_date": "not a date"})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_persistence_failure_is_500_with_generic_message(self, client, movies_store):
        movies_store.fail_with = ServiceErrorType.DATABASE_ERROR

        response = await client.post("/movies", json=NEW_MOVIE)

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to create movie"

    @pytest.mark.asyncio
    async def test_invalid_reference_is_400(self, client, movies_store):
        movies_store.fail_with = ServiceErrorType.INVALID_REFERENCE

        response = await client.post("/movies", json=NEW_MOVIE)

        assert response.status_code == 400


class TestUpdateMovie:

    @pytest.mark.asyncio
    async def test_partial_update_keeps_absent_fields(self, client, movies_store):
        movie_id = movies_store.add("Inception", oscar_count=4, release_date=date(2010, 7, 16))

        response = await client.put(f"/movies/{movie_id}", json={"oscar_count": 5})

        assert response.status_code == 200
        assert response.content == b""
        movie = movies_store.movies[movie_id]
        assert movie["oscar_count"] == 5
        assert movie["title"] == "Inception"
        assert movie["release_date"] == date(2010, 7, 16)

    @pytest.mark.asyncio
    async def test_release_date_is_parsed(self, client, movies_store):
        movie_id = movies_store.add("Inception")

        response = await client.put(f"/movies/{movie_id}", json={"release_date": "2010-07-16"})

        assert response.status_code == 200
        assert movies_store.movies[movie_id]["release_date"] == date(2010, 7, 16)

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, client, movies_store):
        movie_id = movies_store.add("Inception")
        before = dict(movies_store.movies[movie_id])

        response = await client.put("/movies/999999", json={"title": "Other"})

        assert response.status_code == 404
        assert movies_store.movies[movie_id] == before

    @pytest.mark.asyncio
    async def test_non_integer_id_is_422(self, client):
        response = await client.put("/movies/abc", json={"title": "Other"})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_persistence_failure_is_500(self, client, movies_store):
        movie_id = movies_store.add("Inception")
        movies_store.fail_with = ServiceErrorType.DATABASE_ERROR

        response = await client.put(f"/movies/{movie_id}", json={"title": "Other"})

        assert response.status_code == 500


class TestDeleteMovie:

    @pytest.mark.asyncio
    async def test_delete_then_delete_again(self, client, movies_store):
        movie_id = movies_store.add("Inception")
        movies_store.add("Memento")

        first = await client.delete(f"/movies/{movie_id}")
        listing = await client.get("/movies")
        second = await client.delete(f"/movies/{movie_id}")

        assert first.status_code == 200
        assert first.json() == {"message": "Movie deleted successfully"}
        assert titles(listing) == ["Memento"]
        assert second.status_code == 404

    @pytest.mark.asyncio
    async def test_persistence_failure_is_500(self, client, movies_store):
        movie_id = movies_store.add("Inception")
        movies_store.fail_with = ServiceErrorType.DATABASE_ERROR

        response = await client.delete(f"/movies/{movie_id}")

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to delete movie"


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_responses_carry_trace_id(self, client):
        response = await client.get("/movies")

        assert response.headers["X-Trace-ID"]

    @pytest.mark.asyncio
    async def test_error_body_shape(self, client):
        response = await client.delete("/movies/42")

        body = response.json()
        assert body["error"] == "HTTP 404"
        assert body["message"] == "Movie 42 not found"
        assert "timestamp" in body


class TestIntegerBounds:
    """Integers beyond the int4 columns never reach the database"""

    @pytest_asyncio.fixture
    async def db_client(self, conn):
        application = create_app()
        application.state.db_pool = make_pool(conn)
        transport = httpx.ASGITransport(app=application)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
            yield http_client

    @pytest.mark.asyncio
    async def test_update_id_above_int4_is_404(self, db_client, conn):
        conn.fetchrow.side_effect = asyncpg.DataError("value out of int32 range")

        response = await db_client.put("/movies/2147483648", json={"title": "Other"})

        assert response.status_code == 404
        conn.fetchrow.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_id_above_int4_is_404(self, db_client, conn):
        conn.fetchrow.side_effect = asyncpg.DataError("value out of int32 range")

        response = await db_client.delete("/movies/2147483648")

        assert response.status_code == 404
        conn.fetchrow.assert_not_awaited()
        conn.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_id_at_int4_max_is_looked_up(self, db_client, conn):
        conn.fetchrow.return_value = None

        response = await db_client.delete("/movies/2147483647")

        assert response.status_code == 404
        assert conn.fetchrow.call_args.args[1] == 2147483647

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["genre_id", "language_id", "oscar_count"])
    async def test_create_oversized_integer_is_422(self, db_client, conn, field):
        response = await db_client.post("/movies", json={**NEW_MOVIE, field: 2147483648})

        assert response.status_code == 422
        conn.fetchrow.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_oversized_genre_is_422(self, db_client, conn):
        response = await db_client.put("/movies/1", json={"genre_id": 2147483648})

        assert response.status_code == 422
        conn.fetchrow.assert_not_awaited()


class TestFailureLogging:

    @pytest.mark.asyncio
    async def test_database_failure_logged_once_per_layer(self, conn, caplog):
        conn.fetch.side_effect = OSError("connection refused")
        application = create_app()
        application.state.db_pool = make_pool(conn)

        transport = httpx.ASGITransport(app=application)
        with caplog.at_level(logging.ERROR):
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
                response = await http_client.get("/movies")

        assert response.status_code == 500
        errors = [record.name for record in caplog.records if record.levelno >= logging.ERROR]
        assert errors.count("services.base_service") == 1
        assert errors.count("utils.error_handling") == 1
        assert "api.routes.movies" not in errors
