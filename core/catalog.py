"""Static movie catalog and the context block embedded in every prompt."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from core.errors import CatalogError

CONTEXT_HEADER = "Movie Database Information:"

_REQUIRED_KEYS = ("title", "year", "director", "genre", "plot", "actors", "rating")


@dataclass(frozen=True)
class Movie:
    title: str
    year: int
    director: str
    genre: Tuple[str, ...]
    plot: str
    actors: Tuple[str, ...]
    rating: float

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Movie":
        return cls(
            title=str(raw["title"]),
            year=int(raw["year"]),
            director=str(raw["director"]),
            genre=tuple(str(g) for g in raw["genre"]),
            plot=str(raw["plot"]),
            actors=tuple(str(a) for a in raw["actors"]),
            rating=float(raw["rating"]),
        )

    def render(self) -> str:
        return "\n".join(
            [
                f"Title: {self.title}",
                f"Year: {self.year}",
                f"Director: {self.director}",
                f"Genre: {', '.join(self.genre)}",
                f"Plot: {self.plot}",
                f"Actors: {', '.join(self.actors)}",
                f"Rating: {self.rating:g}",
            ]
        )


def _data_path() -> Path:
    path = os.getenv("MOVIE_BOT_DATA_PATH")
    if path:
        return Path(path)
    return Path(__file__).resolve().parents[1] / "data" / "movies.json"


def load_catalog(path: Path | None = None) -> Tuple[Movie, ...]:
    """Read the dataset file, keeping file order.

    Raises ``CatalogError`` if the file is missing, is not a JSON array, or
    an entry lacks one of the movie fields or has a field of the wrong type.
    """
    src = path or _data_path()
    try:
        with open(src, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise CatalogError(f"Unable to read movie catalog at {src}: {e}") from e
    if not isinstance(raw, list):
        raise CatalogError(f"Movie catalog at {src} must be a JSON array")

    movies: List[Movie] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise CatalogError(f"Catalog entry {i} is not an object")
        missing = [k for k in _REQUIRED_KEYS if k not in item]
        if missing:
            raise CatalogError(f"Catalog entry {i} is missing: {', '.join(missing)}")
        for key in ("genre", "actors"):
            if not isinstance(item[key], list):
                raise CatalogError(f"Catalog entry {i} is invalid: {key} must be a list")
        try:
            movies.append(Movie.from_dict(item))
        except (TypeError, ValueError) as e:
            raise CatalogError(f"Catalog entry {i} is invalid: {e}") from e
    return tuple(movies)


@lru_cache(maxsize=1)
def get_catalog() -> Tuple[Movie, ...]:
    return load_catalog()


def build_context(movies: Sequence[Movie]) -> str:
    blocks = [movie.render() for movie in movies]
    return f"{CONTEXT_HEADER}\n\n" + "\n\n".join(blocks) + "\n"
