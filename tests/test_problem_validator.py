from conftest import make_free, make_mcq

from sakumon.schema.problem import Problem
from sakumon.services.problem_validator import dedupe_choices, ensure_mcq_validity


def test_clean_mcq_is_unchanged():
    item = make_mcq(choices=["A", "B", "C"], answer="B")
    items, issues = ensure_mcq_validity([item])
    assert issues == []
    assert items == [item]


def test_duplicate_choices_removed_keeping_first_occurrence():
    item = make_mcq(choices=["A", "B", "A", "C"], answer="A")
    items, issues = ensure_mcq_validity([item])
    assert items[0].choices == ["A", "B", "C"]
    assert issues == ["Q1: choices に重複があります"]
    # 入力は書き換えない
    assert item.choices == ["A", "B", "A", "C"]


def test_missing_answer_is_flagged_not_fixed():
    item = make_mcq(choices=["A", "B"], answer="Z")
    items, issues = ensure_mcq_validity([item])
    assert issues == ["Q1: answer が choices に含まれていません"]
    assert items[0].choices == ["A", "B"]
    assert items[0].answer == "Z"


def test_insufficient_choices_skips_further_checks():
    one = make_mcq(choices=["A"], answer="Z")
    none = Problem(type="mcq", prompt="選択肢なし", answer="A")
    items, issues = ensure_mcq_validity([one, none])
    assert issues == ["Q1: choices が不足しています", "Q2: choices が不足しています"]
    assert items == [one, none]


def test_issue_index_is_one_based_position():
    items, issues = ensure_mcq_validity(
        [
            make_free(),
            make_mcq(choices=["A", "B"], answer="A"),
            make_mcq(choices=["A", "A", "B"], answer="C"),
        ]
    )
    assert len(items) == 3
    assert issues == [
        "Q3: answer が choices に含まれていません",
        "Q3: choices に重複があります",
    ]


def test_free_items_pass_through():
    item = make_free()
    items, issues = ensure_mcq_validity([item])
    assert items == [item]
    assert issues == []


def test_dedupe_choices_preserves_order():
    assert dedupe_choices(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]
