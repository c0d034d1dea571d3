"""
Movies API Server
CRUD over movies, with genre and language references, backed by PostgreSQL
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS, AUTO_MIGRATE
from database.connection import init_database, close_database
from api.routes import health, movies
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the database pool for the lifetime of the process"""
    app.state.db_pool = await init_database(apply_schema=AUTO_MIGRATE)
    yield
    await close_database(app.state.db_pool)

def create_app() -> FastAPI:
    app = FastAPI(
        title="Movies API",
        description="Create, list, update and delete movies",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=ALLOWED_ORIGINS != ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    setup_error_handling(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(movies.router, prefix="/movies", tags=["Movies"])

    return app

# FastAPI app instance is exported for use by uvicorn
app = create_app()
