"""
Vocabulary catalog: the fixed list of words a deck is drawn from.

The catalog is loaded once at startup from YAML and is immutable afterwards.
Every entry carries a stable id; entries that do not declare one get a ULID
assigned at load time.
"""

import logging
from collections.abc import Iterable, Iterator
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError, field_validator
from ulid import ULID

from ridquiz.domain.constants import ENTRY_ID_PREFIX
from ridquiz.domain.models import Gender, VocabEntry

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when a catalog file cannot be read or is invalid."""


class _WordRecord(BaseModel):
    id: str | None = None
    word: str
    meaning: str
    gender: Gender
    categories: list[str] = []

    @field_validator("word", "meaning")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("gender", mode="before")
    @classmethod
    def lower_gender(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


def generate_entry_id() -> str:
    """Generate a stable entry ID using ULID."""
    return f"{ENTRY_ID_PREFIX}{ULID()}"


def make_entry(
    word: str,
    meaning: str,
    gender: Gender | str,
    categories: Iterable[str] = (),
    entry_id: str | None = None,
) -> VocabEntry:
    """Build a VocabEntry, assigning an id when none is given."""
    return VocabEntry(
        id=entry_id or generate_entry_id(),
        word=word,
        meaning=meaning,
        gender=Gender(gender),
        categories=frozenset(categories),
    )


class VocabularyCatalog:
    """
    Read-only, ordered collection of vocabulary entries.
    """

    def __init__(self, entries: Iterable[VocabEntry], categories: Iterable[str] | None = None):
        self._entries = tuple(entries)
        self._by_id = {e.id: e for e in self._entries}
        if len(self._by_id) != len(self._entries):
            raise CatalogError("Duplicate entry ids in catalog")

        if categories is not None:
            self._categories = list(dict.fromkeys(categories))
        else:
            seen: dict[str, None] = {}
            for entry in self._entries:
                for cat in sorted(entry.categories):
                    seen.setdefault(cat, None)
            self._categories = list(seen)

    def all(self) -> tuple[VocabEntry, ...]:
        return self._entries

    def categories(self) -> list[str]:
        """Category names in their declared (or first-seen) order."""
        return list(self._categories)

    def by_category(self, name: str) -> list[VocabEntry]:
        return [e for e in self._entries if name in e.categories]

    def get(self, entry_id: str) -> VocabEntry | None:
        return self._by_id.get(entry_id)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[VocabEntry]:
        return iter(self._entries)


def _read_catalog_text(path: Path | None) -> tuple[str, str]:
    if path is None:
        ref = resources.files("ridquiz").joinpath("data/vocabulary.yaml")
        return ref.read_text(encoding="utf-8"), "<bundled vocabulary>"
    try:
        return Path(path).read_text(encoding="utf-8"), str(path)
    except OSError as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e


def load_catalog(path: Path | None = None) -> VocabularyCatalog:
    """
    Load a catalog from YAML.

    Args:
        path: Catalog file. Defaults to the vocabulary bundled with the package.

    Returns:
        The loaded VocabularyCatalog.

    Raises:
        CatalogError: The file is unreadable, not valid YAML, or has invalid
            or duplicate entries.
    """
    text, source = _read_catalog_text(path)

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in {source}: {e}") from e

    if isinstance(data, list):
        data = {"words": data}
    if not isinstance(data, dict) or not isinstance(data.get("words"), list):
        raise CatalogError(f"{source}: expected a 'words' list")

    entries: list[VocabEntry] = []
    seen_ids: set[str] = set()
    seen_meanings: set[str] = set()
    ids_assigned = 0

    for i, raw in enumerate(data["words"]):
        try:
            record = _WordRecord.model_validate(raw)
        except ValidationError as e:
            raise CatalogError(f"{source}: word #{i + 1} is invalid: {e}") from e

        entry_id = record.id
        if not entry_id:
            entry_id = generate_entry_id()
            ids_assigned += 1
        if entry_id in seen_ids:
            raise CatalogError(f"{source}: duplicate id {entry_id!r}")
        seen_ids.add(entry_id)

        if record.meaning in seen_meanings:
            logger.warning(f"{source}: meaning {record.meaning!r} appears more than once")
        seen_meanings.add(record.meaning)

        entries.append(
            make_entry(
                record.word,
                record.meaning,
                record.gender,
                (c.strip() for c in record.categories if c.strip()),
                entry_id=entry_id,
            )
        )

    declared = data.get("categories")
    categories = [str(c) for c in declared] if isinstance(declared, list) else None

    logger.debug(f"Loaded {len(entries)} words from {source} ({ids_assigned} ids assigned)")
    return VocabularyCatalog(entries, categories)
