"""FastAPI entrypoint exposing the movie catalog over HTTP/JSON."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.core.logging_config import configure_logging
from catalog.db import MovieRepository, get_session, init_models
from catalog.models import Movie
from catalog.services.models import MovieData

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Configure logging + ensure database tables before serving."""

    configure_logging()
    init_models()
    yield


app = FastAPI(title="Movie Catalog", lifespan=lifespan)
repo = MovieRepository()


class MovieSchema(BaseModel):
    """Movie as it travels over the wire. Field names are capitalized."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | None = Field(default=None, alias="ID")
    date: int | None = Field(default=None, alias="Date")
    title: str = Field(..., alias="Title", min_length=1)
    year: int = Field(..., alias="Year")
    rating: int | None = Field(default=None, alias="Rating", ge=1, le=10)
    imdb_rating: float | None = Field(default=None, alias="ImdbRating", gt=0, le=10)
    genres: list[str] = Field(default_factory=list, alias="Genres")
    directors: list[str] = Field(default_factory=list, alias="Directors")

    @field_validator("genres", "directors", mode="before")
    @classmethod
    def _null_list_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_movie_data(self) -> MovieData:
        return MovieData(
            title=self.title,
            year=self.year,
            rating=self.rating,
            imdb_rating=self.imdb_rating,
            genres=list(self.genres),
            directors=list(self.directors),
        )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    message = _validation_message(exc.errors())
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return PlainTextResponse(message, status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(SQLAlchemyError)
async def handle_store_error(request: Request, exc: SQLAlchemyError) -> PlainTextResponse:
    if isinstance(exc, IntegrityError):
        logger.error("Constraint violation on %s %s", request.method, request.url.path, exc_info=exc)
    else:
        logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return PlainTextResponse(
        "Internal Server Error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/movies", response_model=list[MovieSchema])
def list_movies(
    limit: int = Query(default=100, ge=0),
    skip: int = Query(default=0, ge=0),
    session: Session = Depends(get_session),
) -> list[MovieSchema]:
    records = repo.list_movies(session, limit=limit, skip=skip)
    return [_movie_to_response(record) for record in records]


@app.get("/movies/{movie_id}", response_model=MovieSchema)
def get_movie(movie_id: int, session: Session = Depends(get_session)) -> MovieSchema:
    record = repo.get(session, movie_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")
    return _movie_to_response(record)


@app.post("/movies", response_class=PlainTextResponse)
def add_movie(payload: MovieSchema, session: Session = Depends(get_session)) -> str:
    """Insert a movie with its genres and directors in one transaction."""

    date_added = int(datetime.now(timezone.utc).timestamp())
    with session.begin():
        repo.create(session, payload.to_movie_data(), date_added=date_added)
    return "Movie successfully added."


@app.put("/update/{movie_id}", response_class=PlainTextResponse)
def update_movie(
    movie_id: int,
    payload: MovieSchema,
    session: Session = Depends(get_session),
) -> str:
    """Replace the movie's fields and associations atomically.

    An unknown id is acknowledged like a successful update; nothing is written.
    """

    with session.begin():
        repo.update(session, movie_id, payload.to_movie_data())
    return "Movie successfully updated."


@app.delete("/movies/{movie_id}", response_class=PlainTextResponse)
def delete_movie(movie_id: int, session: Session = Depends(get_session)) -> str:
    with session.begin():
        repo.delete(session, movie_id)
    return "Movie successfully deleted."


def _movie_to_response(movie: Movie) -> MovieSchema:
    return MovieSchema(
        id=movie.id,
        date=movie.date,
        title=movie.title,
        year=movie.year,
        rating=movie.rating,
        imdb_rating=movie.imdb_rating,
        genres=[genre.name for genre in movie.genres],
        directors=[director.name for director in movie.directors],
    )


def _validation_message(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = first.get("loc") or ()
    source = location[0] if location else None
    if source == "path":
        return "Invalid movie ID"
    if source == "query":
        return "Invalid query parameters"
    if first.get("type") == "json_invalid":
        return "Invalid JSON"
    return "Invalid movie"
