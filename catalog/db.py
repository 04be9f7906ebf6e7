"""Database session management and repositories."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator

from sqlalchemy import Engine, Table, create_engine, delete, event, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, selectinload, sessionmaker

from catalog.core.config import get_settings
from catalog.models import Base, Director, Genre, Movie, movies_directors, movies_genres
from catalog.services.models import MovieData

logger = logging.getLogger(__name__)


def create_catalog_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections get foreign keys switched on."""

    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    new_engine = create_engine(url, echo=echo, future=True, connect_args=connect_args)
    if is_sqlite:
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


_settings = get_settings()
engine = create_catalog_engine(_settings.database_url, echo=_settings.sql_echo)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_models(bind: Engine | None = None) -> None:
    """Create tables if they do not exist."""
    Base.metadata.create_all(bind=bind or engine)


def get_session() -> Iterator[Session]:
    """FastAPI-friendly dependency that manages commits/rollbacks."""

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def unique_names(names: Iterable[str]) -> list[str]:
    """Drop repeated names, keeping first-seen order. Names are compared byte-exactly."""
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


def _insert_ignore(session: Session, table: Table, values: dict[str, Any]) -> None:
    """INSERT that silently skips rows violating a unique or primary key."""

    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        session.execute(sqlite_insert(table).values(**values).on_conflict_do_nothing())
    elif dialect == "postgresql":
        session.execute(pg_insert(table).values(**values).on_conflict_do_nothing())
    else:
        clauses = [table.c[key] == value for key, value in values.items()]
        exists = session.execute(select(table).where(*clauses).limit(1)).first()
        if exists is None:
            session.execute(table.insert().values(**values))


class MovieRepository:
    """Data access helpers for movies and their genre/director links.

    None of the methods commit: callers wrap them in ``session.begin()`` so a
    movie row and all of its links are written in one transaction.
    """

    def list_movies(self, session: Session, *, limit: int, skip: int) -> list[Movie]:
        query = (
            select(Movie)
            .options(selectinload(Movie.genres), selectinload(Movie.directors))
            .order_by(Movie.id)
            .limit(limit)
            .offset(skip)
        )
        return list(session.execute(query).scalars())

    def get(self, session: Session, movie_id: int) -> Movie | None:
        query = (
            select(Movie)
            .options(selectinload(Movie.genres), selectinload(Movie.directors))
            .where(Movie.id == movie_id)
        )
        return session.execute(query).scalar_one_or_none()

    def create(self, session: Session, movie: MovieData, *, date_added: int) -> int:
        record = Movie(
            date=date_added,
            title=movie.title,
            year=movie.year,
            rating=movie.rating,
            imdb_rating=movie.imdb_rating,
        )
        session.add(record)
        session.flush()  # assign the id before writing links
        self._replace_genres(session, record.id, movie.genres)
        self._replace_directors(session, record.id, movie.directors)
        logger.info("Created movie %s (%r)", record.id, movie.title)
        return record.id

    def update(self, session: Session, movie_id: int, movie: MovieData) -> bool:
        """Overwrite the movie row and its links. Returns False for an unknown id."""

        result = session.execute(
            update(Movie)
            .where(Movie.id == movie_id)
            .values(
                title=movie.title,
                year=movie.year,
                rating=movie.rating,
                imdb_rating=movie.imdb_rating,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.info("Update for unknown movie %s ignored", movie_id)
            return False
        self._replace_genres(session, movie_id, movie.genres)
        self._replace_directors(session, movie_id, movie.directors)
        logger.info("Updated movie %s", movie_id)
        return True

    def delete(self, session: Session, movie_id: int) -> bool:
        session.execute(delete(movies_genres).where(movies_genres.c.movieId == movie_id))
        session.execute(delete(movies_directors).where(movies_directors.c.movieId == movie_id))
        result = session.execute(
            delete(Movie)
            .where(Movie.id == movie_id)
            .execution_options(synchronize_session=False)
        )
        deleted = result.rowcount > 0
        logger.info("Delete movie %s (found=%s)", movie_id, deleted)
        return deleted

    def _replace_genres(self, session: Session, movie_id: int, names: Iterable[str]) -> None:
        self._sync_links(
            session,
            movie_id,
            names,
            name_table=Genre.__table__,
            link_table=movies_genres,
            link_column="genreId",
        )

    def _replace_directors(self, session: Session, movie_id: int, names: Iterable[str]) -> None:
        self._sync_links(
            session,
            movie_id,
            names,
            name_table=Director.__table__,
            link_table=movies_directors,
            link_column="directorId",
        )

    def _sync_links(
        self,
        session: Session,
        movie_id: int,
        names: Iterable[str],
        *,
        name_table: Table,
        link_table: Table,
        link_column: str,
    ) -> None:
        """Upsert a link for every name, then prune links that are no longer wanted."""

        wanted: list[int] = []
        for name in unique_names(names):
            _insert_ignore(session, name_table, {"name": name})
            name_id = session.execute(
                select(name_table.c.id).where(name_table.c.name == name)
            ).scalar_one()
            _insert_ignore(session, link_table, {"movieId": movie_id, link_column: name_id})
            wanted.append(name_id)

        prune = delete(link_table).where(link_table.c.movieId == movie_id)
        if wanted:
            prune = prune.where(link_table.c[link_column].not_in(wanted))
        session.execute(prune)
