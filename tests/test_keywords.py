"""KeywordTable tests — YAML loading, validation, and whole-word matching."""

import pytest
from pydantic import ValidationError

from postop_triage.keywords import DEFAULT_KEYWORD_PATH, KeywordTable
from postop_triage.models.keywords import KeywordCategory


def ids(categories):
    return [c.id for c in categories]


# =====================================================================
# Loading
# =====================================================================


class TestLoading:

    def test_bundled_table_loads(self, keyword_table):
        assert keyword_table.path == DEFAULT_KEYWORD_PATH
        assert keyword_table.version == "1"
        assert set(ids(keyword_table.categories)) == {
            "bleeding", "dyspnea", "fever", "severe_pain",
            "purulence", "swelling", "numbness",
        }

    def test_only_dyspnea_overrides(self, keyword_table):
        overriding = [c.id for c in keyword_table.categories if c.override]
        assert overriding == ["dyspnea"]

    def test_get(self, keyword_table):
        assert keyword_table.get("dyspnea").points == 40
        with pytest.raises(KeyError):
            keyword_table.get("nope")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            KeywordTable(tmp_path / "absent.yaml").load()

    def test_duplicate_ids_rejected(self, tmp_path):
        path = tmp_path / "dup.yaml"
        path.write_text(
            "categories:\n"
            "  - {id: a, points: 1, terms: [x]}\n"
            "  - {id: a, points: 2, terms: [y]}\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="Duplicate"):
            KeywordTable(path).load()

    def test_custom_table(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            'version: "7"\n'
            "categories:\n"
            "  - id: rash\n"
            "    points: 5\n"
            "    terms: [Phát Ban, rash]\n",
            encoding="utf-8",
        )
        table = KeywordTable(str(path)).load()
        assert table.version == "7"
        assert ids(table.match("có phát ban ở chân")) == ["rash"]


# =====================================================================
# Category validation
# =====================================================================


class TestCategoryModel:

    def test_terms_are_lowercased(self):
        category = KeywordCategory(id="x", points=1, terms=["Khó Thở"])
        assert category.terms == ["khó thở"]

    def test_negative_points_rejected(self):
        with pytest.raises(ValidationError):
            KeywordCategory(id="x", points=-1, terms=["a"])

    def test_empty_terms_rejected(self):
        with pytest.raises(ValidationError):
            KeywordCategory(id="x", points=1, terms=[])
        with pytest.raises(ValidationError):
            KeywordCategory(id="x", points=1, terms=["  "])


# =====================================================================
# Matching
# =====================================================================


class TestMatching:

    def test_empty_text(self, keyword_table):
        assert keyword_table.match("") == []

    def test_multiword_phrase(self, keyword_table):
        assert ids(keyword_table.match("i have shortness of breath")) == ["dyspnea"]

    def test_whole_word_only(self, keyword_table):
        """'tê' (numb) must not match inside 'tên' (name)."""
        assert keyword_table.match("tên tôi là lan") == []
        assert ids(keyword_table.match("chân bị tê")) == ["numbness"]

    def test_prefix_does_not_match_longer_word(self, keyword_table):
        assert keyword_table.match("bloodstream") == []

    def test_apostrophe_terms(self, keyword_table):
        assert ids(keyword_table.match("i can't breathe well")) == ["dyspnea"]

    def test_each_category_once_in_table_order(self, keyword_table):
        matched = keyword_table.match("sưng, sưng tấy, chảy máu và ra máu, khó thở")
        assert ids(matched) == ["bleeding", "dyspnea", "swelling"]

    def test_from_categories(self):
        table = KeywordTable.from_categories([
            KeywordCategory(id="itch", points=3, terms=["ngứa"]),
        ])
        assert ids(table.match("hơi ngứa")) == ["itch"]
        assert table.version == "inline"
