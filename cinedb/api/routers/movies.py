# cinedb/api/routers/movies.py

from fastapi import APIRouter, Depends, Request

from cinedb.api.deps import get_models
from cinedb.api.errors import (
    bad_request_response,
    edit_conflict_response,
    failed_validation_response,
    not_found_response,
    server_error_response,
)
from cinedb.api.helpers import (
    BadRequest,
    EnvelopeResponse,
    read_csv,
    read_id_param,
    read_int,
    read_json,
    read_str,
    write_json,
)
from cinedb.api.schemas import MovieCreate, MoviePatch
from cinedb.core.errors import CineDBError, EditConflictError, RecordNotFoundError
from cinedb.core.models.filters import Filters, validate_filters
from cinedb.core.models.movie import Movie, Runtime, validate_movie
from cinedb.core.store import Models
from cinedb.core.validator import Validator


router = APIRouter(tags=["movies"])

EXPECTED_VERSION_HEADER = "X-Expected-Version"


@router.post("", status_code=201, name="movies.create")
async def create_movie(request: Request, models: Models = Depends(get_models)) -> EnvelopeResponse:
    try:
        payload = await read_json(request, MovieCreate)
    except BadRequest as e:
        return bad_request_response(e)

    movie = Movie(
        title=payload.title,
        year=payload.year,
        runtime=Runtime(payload.runtime),
        genres=payload.genres,
    )

    v = Validator()
    validate_movie(v, movie)
    if not v.valid():
        return failed_validation_response(v.errors)

    try:
        await models.movies.insert(movie)
    except CineDBError as e:
        return server_error_response(request, e)

    return write_json(201, {"movie": movie.to_wire()}, {"Location": f"/v1/movies/{movie.id}"})


@router.get("", name="movies.list")
async def list_movies(request: Request, models: Models = Depends(get_models)) -> EnvelopeResponse:
    """
    ?title= substring match, ?genres=a,b must all be present,
    ?page= / ?page_size= paging. Always ordered by id.
    """
    qs = request.query_params
    v = Validator()

    title = read_str(qs, "title", "")
    genres = read_csv(qs, "genres", [])
    filters = Filters(
        page=read_int(qs, "page", 1, v),
        page_size=read_int(qs, "page_size", 20, v),
    )
    validate_filters(v, filters)
    if not v.valid():
        return failed_validation_response(v.errors)

    try:
        movies, metadata = await models.movies.get_all(title, genres, filters)
    except CineDBError as e:
        return server_error_response(request, e)

    return write_json(200, {
        "movies": [m.to_wire() for m in movies],
        "metadata": metadata.to_wire(),
    })


@router.get("/{id}", name="movies.show")
async def show_movie(id: str, request: Request, models: Models = Depends(get_models)) -> EnvelopeResponse:
    movie_id = read_id_param(id)
    if movie_id is None:
        return not_found_response()

    try:
        movie = await models.movies.get(movie_id)
    except RecordNotFoundError:
        return not_found_response()
    except CineDBError as e:
        return server_error_response(request, e)

    return write_json(200, {"movie": movie.to_wire() if movie else None})


@router.patch("/{id}", name="movies.update")
async def update_movie(id: str, request: Request, models: Models = Depends(get_models)) -> EnvelopeResponse:
    """
    Partial update. Only keys present in the body are changed; the write
    is conditional on the version read here, so a concurrent edit
    surfaces as 409 instead of being overwritten.
    """
    movie_id = read_id_param(id)
    if movie_id is None:
        return not_found_response()

    try:
        movie = await models.movies.get(movie_id)
    except RecordNotFoundError:
        return not_found_response()
    except CineDBError as e:
        return server_error_response(request, e)
    if movie is None:
        return not_found_response()

    expected = request.headers.get(EXPECTED_VERSION_HEADER)
    if expected is not None and expected.strip() != str(movie.version):
        return edit_conflict_response()

    try:
        patch = await read_json(request, MoviePatch)
    except BadRequest as e:
        return bad_request_response(e)

    if patch.title is not None:
        movie.title = patch.title
    if patch.year is not None:
        movie.year = patch.year
    if patch.runtime is not None:
        movie.runtime = Runtime(patch.runtime)
    if patch.genres is not None:
        movie.genres = patch.genres

    v = Validator()
    validate_movie(v, movie)
    if not v.valid():
        return failed_validation_response(v.errors)

    try:
        await models.movies.update(movie)
    except EditConflictError:
        return edit_conflict_response()
    except CineDBError as e:
        return server_error_response(request, e)

    return write_json(200, {"movie": movie.to_wire()})


@router.delete("/{id}", name="movies.delete")
async def delete_movie(id: str, request: Request, models: Models = Depends(get_models)) -> EnvelopeResponse:
    movie_id = read_id_param(id)
    if movie_id is None:
        return not_found_response()

    try:
        await models.movies.delete(movie_id)
    except RecordNotFoundError:
        return not_found_response()
    except CineDBError as e:
        return server_error_response(request, e)

    return write_json(200, {"message": "movie successfully deleted"})
