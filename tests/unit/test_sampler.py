from __future__ import annotations

import random
from collections import Counter

import pytest

from jsonbench.errors import EmptyDocumentError
from jsonbench.sampler import random_field_name, random_in_range

DRAWS = 2_000


@pytest.mark.parametrize("minimum,maximum", [(1, 1), (1, 6), (0, 3), (-5, 5), (10, 11)])
def test_random_in_range_stays_within_inclusive_bounds(minimum: int, maximum: int) -> None:
    rng = random.Random(0)
    values = {random_in_range(minimum, maximum, rng) for _ in range(DRAWS)}
    assert min(values) == minimum
    assert max(values) == maximum
    assert all(isinstance(v, int) for v in values)


def test_random_in_range_reaches_both_ends_of_identifier_range() -> None:
    rng = random.Random(42)
    counts = Counter(random_in_range(1, 6, rng) for _ in range(DRAWS))
    assert set(counts) == {1, 2, 3, 4, 5, 6}


def test_random_in_range_rejects_empty_range() -> None:
    with pytest.raises(ValueError, match="empty range"):
        random_in_range(5, 4)


def test_random_field_name_returns_top_level_key() -> None:
    rng = random.Random(3)
    document = {"a": 1, "b": {"c": 2}, "d": [1, 2]}
    names = {random_field_name(document, rng) for _ in range(200)}
    assert names == {"a", "b", "d"}


def test_random_field_name_single_field() -> None:
    assert random_field_name({"a": 1}) == "a"


@pytest.mark.parametrize("document", [{}, [], [1, 2], "text", 3, None])
def test_random_field_name_rejects_documents_without_fields(document) -> None:
    with pytest.raises(EmptyDocumentError):
        random_field_name(document)
