"""SQLAlchemy ORM models.

This module defines the catalog tables: ``movies`` plus the shared
``genres``/``directors`` name tables and the two association tables that
link them. Column names follow the persisted layout the HTTP service has
always used (``imdbRating``, ``movieId`` ...), attribute names are snake_case.
"""

from __future__ import annotations

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


movies_genres = Table(
    "movies_genres",
    Base.metadata,
    Column(
        "movieId",
        ForeignKey("movies.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "genreId",
        ForeignKey("genres.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

movies_directors = Table(
    "movies_directors",
    Base.metadata,
    Column(
        "movieId",
        ForeignKey("movies.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "directorId",
        ForeignKey("directors.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Genre(Base):
    __tablename__ = "genres"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Genre(id={self.id}, name={self.name!r})"


class Director(Base):
    __tablename__ = "directors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Director(id={self.id}, name={self.name!r})"


class Movie(Base):
    """A catalog entry together with its genre and director links."""

    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    imdb_rating: Mapped[float | None] = mapped_column("imdbRating", Float, nullable=True)

    genres: Mapped[list[Genre]] = relationship(
        secondary=movies_genres,
        order_by=Genre.name,
        viewonly=True,
    )
    directors: Mapped[list[Director]] = relationship(
        secondary=movies_directors,
        order_by=Director.name,
        viewonly=True,
    )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Movie(id={self.id}, title={self.title!r}, year={self.year})"
