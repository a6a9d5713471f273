"""Slug derivation tests"""

import pytest

from clinicsite.utils.slug import slugify


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Eye Care!! 2024", "eye-care-2024"),
        ("Preventive healthcare", "preventive-healthcare"),
        ("Child   health", "child-health"),
        ("  --Hello---World--  ", "hello-world"),
        ("What's new - in 2025?", "whats-new-in-2025"),
        ("snake_case title", "snake_case-title"),
    ],
)
def test_slugify(title, expected):
    assert slugify(title) == expected


def test_slugify_is_deterministic():
    assert slugify("Eye Care!! 2024") == slugify("Eye Care!! 2024")


def test_slugify_drops_non_ascii_letters():
    slug = slugify("Café Clinic")
    assert slug == "caf-clinic"
    assert slug.isascii()


def test_slugify_punctuation_only_is_empty():
    assert slugify("!!! ???") == ""
