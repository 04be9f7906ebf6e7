"""Shared dataclasses for service layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class MovieData:
    """Movie value exchanged between the HTTP layer, the store and the TUI."""

    title: str
    year: int
    rating: int | None = None
    imdb_rating: float | None = None
    genres: list[str] = field(default_factory=list)
    directors: list[str] = field(default_factory=list)
    id: int = 0
    date_added: int = 0

    def genres_as_string(self) -> str:
        return ", ".join(self.genres)

    def directors_as_string(self) -> str:
        return ", ".join(self.directors)

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the capitalized field names of the HTTP contract."""
        return {
            "ID": self.id,
            "Date": self.date_added,
            "Title": self.title,
            "Year": self.year,
            "Rating": self.rating,
            "ImdbRating": self.imdb_rating,
            "Genres": list(self.genres),
            "Directors": list(self.directors),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "MovieData":
        rating = payload.get("Rating")
        imdb_rating = payload.get("ImdbRating")
        return cls(
            id=int(payload.get("ID") or 0),
            date_added=int(payload.get("Date") or 0),
            title=str(payload["Title"]),
            year=int(payload["Year"]),
            rating=int(rating) if rating is not None else None,
            imdb_rating=float(imdb_rating) if imdb_rating is not None else None,
            genres=list(payload.get("Genres") or []),
            directors=list(payload.get("Directors") or []),
        )
