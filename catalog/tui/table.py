"""Turn movies into the cells of the main table."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from catalog.services.models import MovieData

HEADERS = (
    "Date Added",
    "Year",
    "Title",
    "Your Rating",
    "IMDB Score",
    "Directors",
    "Genres",
)
YEAR_COLUMN = 1

HEADER_BACKGROUND = (40, 40, 40)
ODD_ROW_BACKGROUND = (60, 60, 60)
EVEN_ROW_BACKGROUND = (80, 80, 80)


@dataclass(frozen=True, slots=True)
class Cell:
    text: str
    color: str
    background: tuple[int, int, int]
    align: str
    selectable: bool = True

    @property
    def style(self) -> str:
        red, green, blue = self.background
        return f"{self.color} on rgb({red},{green},{blue})"


def format_date(timestamp: int) -> str:
    """ISO date of a unix timestamp in the local time zone."""
    return datetime.fromtimestamp(timestamp).date().isoformat()


def format_imdb_rating(value: float | None) -> str:
    return format(value, "g") if value is not None else ""


def cell_text(movie: MovieData, column: int) -> str:
    if column == 0:
        return format_date(movie.date_added)
    if column == 1:
        return str(movie.year)
    if column == 2:
        return movie.title
    if column == 3:
        return str(movie.rating) if movie.rating is not None else ""
    if column == 4:
        return format_imdb_rating(movie.imdb_rating)
    if column == 5:
        return movie.directors_as_string()
    if column == 6:
        return movie.genres_as_string()
    raise IndexError(f"no column {column}")


def header_row() -> list[Cell]:
    return [
        Cell(text=title, color="yellow", background=HEADER_BACKGROUND, align="center", selectable=False)
        for title in HEADERS
    ]


def movie_row(movie: MovieData, row: int) -> list[Cell]:
    """Cells for data row ``row`` (1-based, row 0 is the header)."""
    background = ODD_ROW_BACKGROUND if row % 2 == 1 else EVEN_ROW_BACKGROUND
    return [
        Cell(
            text=cell_text(movie, column),
            color="white",
            background=background,
            align="right" if column == YEAR_COLUMN else "left",
        )
        for column in range(len(HEADERS))
    ]


def build_rows(movies: Sequence[MovieData]) -> list[list[Cell]]:
    rows = [header_row()]
    rows.extend(movie_row(movie, index) for index, movie in enumerate(movies, start=1))
    return rows
