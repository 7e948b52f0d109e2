from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import yaml

logger = logging.getLogger(__name__)


class InvalidContent(ValueError):
    """Raised when a level list is empty or malformed."""


class ContentLoadFailure(Exception):
    """Raised when a content source cannot be read or parsed."""


@dataclass(frozen=True)
class WordEntry:
    word: str
    clue: str
    definition: str = ""


@dataclass(frozen=True)
class Level:
    ordinal: int
    words: tuple[WordEntry, ...]

    @property
    def letters(self) -> str:
        """All letters of the level's words, concatenated in word order."""
        return "".join(entry.word for entry in self.words)


@dataclass(frozen=True)
class Category:
    key: str
    name: str
    levels: tuple[Level, ...]


DEFAULT_LEVELS: tuple[Level, ...] = (
    Level(
        ordinal=1,
        words=(
            WordEntry("DOG", "A loyal pet that barks", "A domesticated carnivorous mammal."),
            WordEntry("CAT", "Feline pet that purrs", "A small domesticated carnivorous mammal."),
            WordEntry("SUN", "Source of daylight", "The star around which the earth orbits."),
        ),
    ),
    Level(
        ordinal=2,
        words=(
            WordEntry("APPLE", "Fruit that keeps doctors away", "A sweet, red or green fruit."),
            WordEntry("BEACH", "Sandy shore by the ocean", "A pebbly or sandy shore by the ocean."),
            WordEntry("CLOUD", "Floats in the sky", "A visible mass of condensed water vapor."),
        ),
    ),
    Level(
        ordinal=3,
        words=(
            WordEntry("ELEPHANT", "Large gray mammal with trunk", "A very large herbivorous mammal."),
            WordEntry("MOUNTAIN", "Tall natural elevation", "A large natural elevation of the earth's surface."),
            WordEntry("HOSPITAL", "Place for medical treatment", "An institution providing medical treatment."),
            WordEntry("BUTTERFLY", "Flying insect with colorful wings", "A nectar-feeding insect with large wings."),
        ),
    ),
)

DEFAULT_CATEGORY = Category(key="classic", name="Classic", levels=DEFAULT_LEVELS)


def validate_levels(levels: Sequence[Level]) -> None:
    """Raise InvalidContent unless *levels* can be played from start to finish."""
    if not levels:
        raise InvalidContent("level list is empty")
    for position, level in enumerate(levels):
        label = f"level #{position + 1}"
        if level.ordinal < 1:
            raise InvalidContent(f"{label}: ordinal must be >= 1, got {level.ordinal}")
        if not level.words:
            raise InvalidContent(f"{label}: has no words")
        seen: set[str] = set()
        for entry in level.words:
            word = entry.word
            if not word or not word.isalpha() or word != word.upper():
                raise InvalidContent(f"{label}: invalid word {word!r}")
            if word in seen:
                # first-match-wins would leave the repeat unfindable
                raise InvalidContent(f"{label}: word {word!r} appears more than once")
            seen.add(word)


def parse_levels(raw_levels: Any, source: str = "<content>") -> tuple[Level, ...]:
    """Build validated levels from the ``levels`` list of a content document."""
    if not isinstance(raw_levels, list) or not raw_levels:
        raise InvalidContent(f"{source}: expected a non-empty 'levels' list")

    levels: List[Level] = []
    for position, raw in enumerate(raw_levels, start=1):
        if not isinstance(raw, dict):
            raise InvalidContent(f"{source}: level #{position} is not a mapping")
        ordinal = raw.get("level", position)
        if isinstance(ordinal, bool) or not isinstance(ordinal, int):
            raise InvalidContent(f"{source}: level #{position} has invalid 'level' {ordinal!r}")
        raw_words = raw.get("words")
        if not isinstance(raw_words, list):
            raise InvalidContent(f"{source}: level {ordinal} is missing 'words'")
        words = tuple(_parse_word(item, f"{source}: level {ordinal}") for item in raw_words)
        levels.append(Level(ordinal=ordinal, words=words))

    result = tuple(levels)
    try:
        validate_levels(result)
    except InvalidContent as e:
        raise InvalidContent(f"{source}: {e}") from e
    return result


def _parse_word(item: Any, where: str) -> WordEntry:
    if not isinstance(item, dict):
        raise InvalidContent(f"{where}: word entry is not a mapping")
    word = item.get("word")
    clue = item.get("clue")
    if not word or not isinstance(word, str):
        raise InvalidContent(f"{where}: missing or invalid 'word'")
    if not clue or not isinstance(clue, str):
        raise InvalidContent(f"{where}: missing or invalid 'clue' for {word!r}")
    definition = item.get("definition") or ""
    return WordEntry(word=word.strip().upper(), clue=clue.strip(), definition=str(definition).strip())


def load_levels_document(path: Path) -> tuple[Level, ...]:
    """Load a JSON document of the form ``{"levels": [...]}``."""
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        raise ContentLoadFailure(f"Could not read level document {path}: {e}") from e
    if not isinstance(payload, dict):
        raise ContentLoadFailure(f"{Path(path).name}: expected a JSON object with 'levels'")
    try:
        return parse_levels(payload.get("levels"), Path(path).name)
    except InvalidContent as e:
        raise ContentLoadFailure(str(e)) from e


class LevelRepository:
    """Categories of levels loaded from YAML files, plus an optional JSON document.

    Each source is loaded on its own: a source that cannot be used is logged
    and listed in ``skipped_sources`` while the others are still served. Only
    when no category survives are the built-in classic levels used, with
    ``fallback_used`` set.
    """

    def __init__(self, base_dir: Optional[Path] = None, document: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path(__file__).resolve().parent.parent / "data" / "categories"
        self._document = document
        self._skipped: List[str] = []
        self._categories = self._load_categories()
        self._fallback_used = not self._categories
        if self._fallback_used:
            logger.warning("No usable categories, falling back to built-in levels")
            self._categories = {DEFAULT_CATEGORY.key: DEFAULT_CATEGORY}

    @property
    def fallback_used(self) -> bool:
        return self._fallback_used

    @property
    def skipped_sources(self) -> List[str]:
        """Names of content sources that failed to load."""
        return list(self._skipped)

    def all(self) -> List[Category]:
        return list(self._categories.values())

    def get(self, key: str) -> Category:
        return self._categories[key]

    def _skip(self, source: str, error: ContentLoadFailure) -> None:
        logger.warning("Skipping content source %s: %s", source, error)
        self._skipped.append(source)

    def _load_categories(self) -> Dict[str, Category]:
        categories: Dict[str, Category] = {}
        if self._document is not None:
            try:
                levels = load_levels_document(self._document)
            except ContentLoadFailure as e:
                self._skip(Path(self._document).name, e)
            else:
                categories["custom"] = Category(key="custom", name="Custom", levels=levels)

        if not self._base_dir.exists():
            self._skip(str(self._base_dir), ContentLoadFailure("categories directory not found"))
            return categories

        def _sort_key(p: Path) -> tuple[int, str]:
            m = re.match(r"^(\d+)[-_]", p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        for path in sorted(self._base_dir.glob("*.yaml"), key=_sort_key):
            try:
                category = self._load_category_file(path)
            except ContentLoadFailure as e:
                self._skip(path.name, e)
                continue
            categories[category.key] = category
        return categories

    @staticmethod
    def _load_category_file(path: Path) -> Category:
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as e:
            raise ContentLoadFailure(f"{path.name}: {e}") from e
        if not raw or not isinstance(raw, dict):
            raise ContentLoadFailure(f"{path.name}: expected YAML with 'title' and 'levels'")
        title = raw.get("title")
        if not title or not isinstance(title, str):
            raise ContentLoadFailure(f"{path.name}: missing or invalid 'title'")
        try:
            levels = parse_levels(raw.get("levels"), path.name)
        except InvalidContent as e:
            raise ContentLoadFailure(str(e)) from e
        key = re.sub(r"^\d+[-_]", "", path.stem)
        return Category(key=key, name=title.strip(), levels=levels)


def total_letters(words: Iterable[WordEntry]) -> int:
    return sum(len(entry.word) for entry in words)
