import math

import pytest
from conftest import make_mcq, near_vector, unit_vector

from sakumon.services.dedup import DUPLICATE_THRESHOLD, cosine, deduplicate, select_backfill


def test_cosine_self_similarity():
    v = [0.3, -1.2, 4.0]
    assert cosine(v, v) == pytest.approx(1.0, abs=1e-6)


def test_cosine_zero_vector_is_safe():
    assert cosine([0.0, 0.0], [0.0, 0.0]) == 0.0
    assert cosine([0.0, 0.0], [1.0, 2.0]) == 0.0


def test_cosine_orthogonal_and_opposite():
    assert cosine([1.0, 0.0], [0.0, 1.0]) == 0.0
    assert cosine([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_threshold_is_strict():
    assert DUPLICATE_THRESHOLD == 0.9
    items = [make_mcq(prompt="a"), make_mcq(prompt="b")]

    at_threshold = deduplicate(items, [unit_vector(2, 0), near_vector(2, 0, 1, 0.9)])
    assert len(at_threshold.kept) == 2
    assert at_threshold.issues == []

    above = deduplicate(items, [unit_vector(2, 0), near_vector(2, 0, 1, 0.9000001)])
    assert [p.prompt for p in above.kept] == ["a"]
    assert above.issues == ["重複疑い: Q2"]


def test_first_seen_wins_and_indices_are_original_positions():
    items = [make_mcq(prompt=f"p{i}") for i in range(4)]
    vectors = [
        unit_vector(5, 0),
        unit_vector(5, 1),
        near_vector(5, 1, 4, 0.99),
        unit_vector(5, 2),
    ]
    result = deduplicate(items, vectors)
    assert [p.prompt for p in result.kept] == ["p0", "p1", "p3"]
    assert result.kept_vectors == [vectors[0], vectors[1], vectors[3]]
    assert result.kept_indices == [0, 1, 3]
    assert result.issues == ["重複疑い: Q3"]


def test_dropped_item_does_not_shadow_later_items():
    # Q2 は Q1 と重複で落ちる。Q3 は Q2 にだけ近いので残る
    items = [make_mcq(prompt=f"p{i}") for i in range(3)]
    q2 = near_vector(2, 0, 1, 0.95)
    q3 = [math.cos(math.radians(40)), math.sin(math.radians(40))]
    assert cosine(q2, q3) > DUPLICATE_THRESHOLD
    result = deduplicate(items, [unit_vector(2, 0), q2, q3])
    assert result.kept_indices == [0, 2]
    assert result.issues == ["重複疑い: Q2"]


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        deduplicate([make_mcq()], [])


def test_backfill_restores_count_by_position():
    original = [f"Q{i}" for i in range(1, 13)]
    kept = ["Q1", "Q2", "Q4", "Q5", "Q7", "Q10", "Q12"]
    result = select_backfill(kept, original, 10)
    assert len(result) == 10
    assert result[:7] == kept
    # 元リストの 8, 9, 10 番目を順に補充 (重複扱いの Q8, Q9 も戻る)
    assert result[7:] == ["Q8", "Q9", "Q10"]


def test_backfill_truncates_to_target():
    assert select_backfill(list("abcdef"), list("abcdef"), 4) == list("abcd")


def test_backfill_limited_by_original_length():
    assert select_backfill(["a"], ["a", "b", "c"], 10) == ["a", "b", "c"]


def test_backfill_does_not_mutate_kept():
    kept = ["a"]
    select_backfill(kept, ["a", "b"], 2)
    assert kept == ["a"]
