"""
Movies API routes
All database operations go through the movies service layer.
"""

from typing import List
from fastapi import APIRouter, HTTPException, Depends, Response, status

from models.enums import ERROR_STATUS_CODES
from models.movie import MovieCreateRequest, MovieUpdateRequest, MovieResponse
from services.base_service import ServiceResult
from services.movies_service import MoviesService, get_movies_service
from utils.error_handling import set_endpoint_context

router = APIRouter()

def raise_for_result(result: ServiceResult, failure_message: str):
    """Map a failed service result to an HTTPException.

    Precondition failures keep the service message; database failures are
    answered with ``failure_message`` so no internals reach the caller.
    """
    if result.success:
        return

    status_code = ERROR_STATUS_CODES.get(result.error_type, 500)
    if status_code >= 500:
        raise HTTPException(status_code=status_code, detail=failure_message)
    raise HTTPException(status_code=status_code, detail=result.error)

@router.get("", response_model=List[MovieResponse])
async def list_movies(service: MoviesService = Depends(get_movies_service)):
    """List every movie ordered by title"""
    set_endpoint_context("list_movies")
    result = await service.list_movies()
    raise_for_result(result, "Failed to list movies")
    return result.data

@router.get("/{genre_name}", response_model=List[MovieResponse])
async def list_movies_by_genre(
    genre_name: str,
    service: MoviesService = Depends(get_movies_service)
):
    """List movies of one genre, matching the genre name case-insensitively"""
    set_endpoint_context("list_movies_by_genre")
    result = await service.list_movies_by_genre(genre_name)
    raise_for_result(result, "Failed to list movies by genre")
    return result.data

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_movie(
    request: MovieCreateRequest,
    service: MoviesService = Depends(get_movies_service)
):
    """Create a movie, rejecting titles that already exist in any letter case"""
    set_endpoint_context("create_movie")
    result = await service.create_movie(
        title=request.title,
        genre_id=request.genre_id,
        language_id=request.language_id,
        oscar_count=request.oscar_count,
        release_date=request.release_date
    )
    raise_for_result(result, "Failed to create movie")
    return Response(status_code=status.HTTP_201_CREATED)

@router.put("/{movie_id}")
async def update_movie(
    movie_id: int,
    request: MovieUpdateRequest,
    service: MoviesService = Depends(get_movies_service)
):
    """Apply a partial update; fields missing from the body keep their value"""
    set_endpoint_context("update_movie")
    update_data = request.model_dump(exclude_unset=True, exclude_none=True)
    result = await service.update_movie(movie_id, update_data)
    raise_for_result(result, "Failed to update movie")
    return Response(status_code=status.HTTP_200_OK)

@router.delete("/{movie_id}")
async def delete_movie(
    movie_id: int,
    service: MoviesService = Depends(get_movies_service)
):
    """Delete a movie"""
    set_endpoint_context("delete_movie")
    result = await service.delete_movie(movie_id)
    raise_for_result(result, "Failed to delete movie")
    return {"message": "Movie deleted successfully"}
