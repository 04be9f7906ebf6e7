"""Input validation for the add/edit and filter forms.

Every ``accept_*`` predicate looks at the whole prospective buffer and
decides whether the keystroke that produced it is kept.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from catalog.services.models import MovieData

_INTEGER = re.compile(r"[+-]?\d+")
_DECIMAL = re.compile(r"\+?(?:\d+\.?\d*|\.\d+)")

ADD_FIELD_LABELS = (
    "Title: ",
    "Year: ",
    "Your Rating: ",
    "IMDB Rating: ",
    "Genres: ",
    "Directors: ",
)
TITLE, YEAR, RATING, IMDB_RATING, GENRES, DIRECTORS = range(len(ADD_FIELD_LABELS))

FILTER_FIELD_LABELS = (
    "Title contains: ",
    "Year from: ",
    "Year to: ",
    "Genre: ",
    "Director: ",
    "Min Rating: ",
)


def accept_any(text: str) -> bool:
    return True


def accept_year(text: str) -> bool:
    return _INTEGER.fullmatch(text) is not None


def accept_rating(text: str) -> bool:
    """Whole number between 1 and 10."""
    if _INTEGER.fullmatch(text) is None:
        return False
    return 1 <= int(text) <= 10


def accept_imdb_rating(text: str) -> bool:
    """Decimal in (0, 10] with at most one digit after the point."""
    if _DECIMAL.fullmatch(text) is None:
        return False
    _, _, decimals = text.partition(".")
    if len(decimals) > 1:
        return False
    value = float(text)
    return 0 < value <= 10


ADD_FIELD_RULES = (
    accept_any,
    accept_year,
    accept_rating,
    accept_imdb_rating,
    accept_any,
    accept_any,
)

FILTER_FIELD_RULES = (
    accept_any,
    accept_year,
    accept_year,
    accept_any,
    accept_any,
    accept_rating,
)


def split_names(text: str) -> list[str]:
    """Split a comma separated field, stripping spaces and dropping empty pieces."""
    pieces = (piece.strip(" ") for piece in text.split(","))
    return [piece for piece in pieces if piece]


def can_submit(fields: tuple[str, ...]) -> bool:
    """The Add button is enabled once Title and Year are filled in."""
    return bool(fields[TITLE]) and accept_year(fields[YEAR])


def fields_to_movie(fields: tuple[str, ...]) -> MovieData:
    """Build the request body from the add form. Call only when ``can_submit``."""
    if not can_submit(fields):
        raise ValueError("Title and Year are required")
    rating = fields[RATING]
    imdb_rating = fields[IMDB_RATING]
    return MovieData(
        title=fields[TITLE],
        year=int(fields[YEAR]),
        rating=int(rating) if accept_rating(rating) else None,
        imdb_rating=float(imdb_rating) if accept_imdb_rating(imdb_rating) else None,
        genres=split_names(fields[GENRES]),
        directors=split_names(fields[DIRECTORS]),
    )


def movie_to_fields(movie: MovieData) -> tuple[str, ...]:
    """Pre-fill the form when editing an existing movie."""
    return (
        movie.title,
        str(movie.year),
        str(movie.rating) if movie.rating is not None else "",
        format(movie.imdb_rating, "g") if movie.imdb_rating is not None else "",
        movie.genres_as_string(),
        movie.directors_as_string(),
    )


@dataclass(frozen=True, slots=True)
class MovieFilter:
    """Client-side criteria applied to the fetched movie list."""

    title: str = ""
    year_from: int | None = None
    year_to: int | None = None
    genre: str = ""
    director: str = ""
    min_rating: int | None = None

    @classmethod
    def from_fields(cls, fields: tuple[str, ...]) -> "MovieFilter":
        title, year_from, year_to, genre, director, min_rating = fields
        return cls(
            title=title.strip(),
            year_from=int(year_from) if accept_year(year_from) else None,
            year_to=int(year_to) if accept_year(year_to) else None,
            genre=genre.strip(),
            director=director.strip(),
            min_rating=int(min_rating) if accept_rating(min_rating) else None,
        )

    @property
    def is_empty(self) -> bool:
        return self == MovieFilter()

    def matches(self, movie: MovieData) -> bool:
        if self.title and self.title.lower() not in movie.title.lower():
            return False
        if self.year_from is not None and movie.year < self.year_from:
            return False
        if self.year_to is not None and movie.year > self.year_to:
            return False
        if self.genre and self.genre not in movie.genres:
            return False
        if self.director and self.director not in movie.directors:
            return False
        if self.min_rating is not None and (movie.rating is None or movie.rating < self.min_rating):
            return False
        return True
