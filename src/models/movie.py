"""
Movie-related Pydantic models
"""

from typing import Optional
from datetime import date
from pydantic import BaseModel, Field

# Range of the PostgreSQL INTEGER / SERIAL columns
INT4_MAX = 2_147_483_647


class GenreData(BaseModel):
    id: int
    name: str


class LanguageData(BaseModel):
    id: int
    name: str


class MovieCreateRequest(BaseModel):
    title: str
    genre_id: int = Field(..., ge=1, le=INT4_MAX)
    language_id: int = Field(..., ge=1, le=INT4_MAX)
    oscar_count: int = Field(0, ge=0, le=INT4_MAX)
    release_date: date


class MovieUpdateRequest(BaseModel):
    title: Optional[str] = None
    genre_id: Optional[int] = Field(None, ge=1, le=INT4_MAX)
    language_id: Optional[int] = Field(None, ge=1, le=INT4_MAX)
    oscar_count: Optional[int] = Field(None, ge=0, le=INT4_MAX)
    release_date: Optional[date] = None


class MovieResponse(BaseModel):
    id: int
    title: str
    genre_id: int
    language_id: int
    oscar_count: int
    release_date: date
    genres: GenreData
    languages: LanguageData
