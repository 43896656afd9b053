from __future__ import annotations

import pytest

from inkwell.app.util.tags import MAX_TAG_LENGTH, canonicalize, canonicalize_all


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Python", "python"),
        ("  Hello World ", "hello-world"),
        ("snake_case_tag", "snake-case-tag"),
        ("C++ & Rust!", "c-rust"),
        ("--edge--", "edge"),
    ],
)
def test_canonicalize_produces_kebab_case(raw: str, expected: str) -> None:
    assert canonicalize(raw) == expected


def test_canonicalize_expands_emoji_shortcodes() -> None:
    assert canonicalize(":tada:") == "\U0001f389"
    assert canonicalize("\U0001f389") == "\U0001f389"


@pytest.mark.parametrize("raw", ["", "   ", "!!!", ":definitely-not-an-emoji:"])
def test_canonicalize_rejects_empty_values(raw: str) -> None:
    with pytest.raises(ValueError):
        canonicalize(raw)


def test_canonicalize_truncates_long_tags() -> None:
    assert len(canonicalize("a" * 200)) == MAX_TAG_LENGTH


def test_canonicalize_all_merges_equivalents_and_skips_empty() -> None:
    assert canonicalize_all(["Python", "python", " PYTHON ", "", "web dev"]) == frozenset(
        {"python", "web-dev"}
    )
    assert canonicalize_all(None) == frozenset()
