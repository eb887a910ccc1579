"""KeywordTable — loads the free-text keyword YAML into typed, compiled rules.

This is the single source of truth for how free text contributes to the
triage score.  The table is loaded once at startup and is read-only
afterwards, so one instance can be shared by every request.

Usage::

    table = KeywordTable()          # defaults to the bundled keywords.yaml
    table.load()

    for category in table.match("đau nhiều, khó thở"):
        print(category.id, category.points)
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from postop_triage.models.keywords import KeywordCategory, KeywordTableSchema

logger = logging.getLogger(__name__)

DEFAULT_KEYWORD_PATH = Path(__file__).resolve().parent / "data" / "keywords.yaml"


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _compile_terms(terms: list[str]) -> re.Pattern[str]:
    """Build one whole-word alternation for a category's terms.

    Longer terms go first so multi-word phrases win over their prefixes.
    ``(?<!\\w)`` / ``(?!\\w)`` rather than ``\\b`` so that terms ending in
    punctuation (``can't``) still anchor correctly.
    """
    ordered = sorted(terms, key=len, reverse=True)
    alternation = "|".join(re.escape(t) for t in ordered)
    return re.compile(rf"(?<!\w)(?:{alternation})(?!\w)")


# ---------------------------------------------------------------------------
# KeywordTable
# ---------------------------------------------------------------------------

class KeywordTable:
    """Loads keyword categories from YAML and matches them against free text.

    Attributes populated after :meth:`load`:

        categories — list[KeywordCategory] in file order
        version    — table version string from the YAML header
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else DEFAULT_KEYWORD_PATH

        # Populated by load()
        self.categories: list[KeywordCategory] = []
        self.version: str = ""
        self._patterns: list[tuple[KeywordCategory, re.Pattern[str]]] = []

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> KeywordTable:
        """Parse the YAML file into typed categories and compile patterns.

        Call this once at startup.  Raises ``FileNotFoundError`` if the file
        is missing and ``ValueError`` if category ids repeat.  Returns
        ``self`` so construction and loading can be chained.
        """
        raw = load_yaml(self._path)
        schema = KeywordTableSchema.model_validate(raw)

        seen: set[str] = set()
        for category in schema.categories:
            if category.id in seen:
                raise ValueError(f"Duplicate keyword category: {category.id}")
            seen.add(category.id)

        self.version = schema.version
        self.categories = list(schema.categories)
        self._patterns = [(c, _compile_terms(c.terms)) for c in self.categories]

        logger.info(
            "KeywordTable loaded: version=%s, %d categories from %s",
            self.version, len(self.categories), self._path,
        )
        return self

    @classmethod
    def from_categories(cls, categories: list[KeywordCategory]) -> KeywordTable:
        """Build a table from already-validated categories (no file I/O)."""
        table = cls()
        table.version = "inline"
        table.categories = list(categories)
        table._patterns = [(c, _compile_terms(c.terms)) for c in table.categories]
        return table

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def match(self, text: str) -> list[KeywordCategory]:
        """Return every category with at least one term present in *text*.

        *text* is expected to be normalized (lowercased, NFC) already.
        Each category appears at most once, in table order.
        """
        if not text:
            return []
        return [c for c, pattern in self._patterns if pattern.search(text)]

    def get(self, category_id: str) -> KeywordCategory:
        """Look up a category by id.  Raises ``KeyError`` if unknown."""
        for category in self.categories:
            if category.id == category_id:
                return category
        raise KeyError(f"Unknown keyword category: {category_id}")
