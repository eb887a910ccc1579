"""Pydantic models for the free-text keyword table.

These mirror ``postop_triage/data/keywords.yaml``::

    categories:
      - id: dyspnea
        points: 40
        override: true
        terms: ["khó thở", "shortness of breath", ...]
"""

import unicodedata
from typing import List

from pydantic import BaseModel, Field, field_validator


class KeywordCategory(BaseModel):
    """One clinical concept matched in free text.

    ``points`` is added once when any term matches.  ``override`` marks
    categories that force the emergency tier on their own.
    """

    id: str
    points: float = Field(ge=0)
    override: bool = False
    terms: List[str] = Field(min_length=1)

    @field_validator("terms")
    @classmethod
    def _lowercase_terms(cls, terms: List[str]) -> List[str]:
        # Free text is NFC-normalized and lowercased by the normalizer.
        cleaned = [unicodedata.normalize("NFC", t.strip().lower()) for t in terms]
        if any(not t for t in cleaned):
            raise ValueError("keyword terms must be non-empty")
        return cleaned


class KeywordTableSchema(BaseModel):
    """Top-level shape of a keyword YAML file."""

    version: str = "1"
    categories: List[KeywordCategory]
