"""
記述問題 (free) のルーブリック補完。
"""

from sakumon.schema.problem import Problem, Rubric, RubricCriterion


def default_rubric() -> Rubric:
    return Rubric(
        max_points=5,
        criteria=[
            RubricCriterion(name="定義の適切さ", points=2, desc="用語・式の定義が正しい"),
            RubricCriterion(name="筋道・根拠", points=2, desc="導出や因果の説明が一貫"),
            RubricCriterion(name="最終表現", points=1, desc="記号・表記・年号などが正確"),
        ],
    )


def complete_rubrics(items: list[Problem]) -> list[Problem]:
    """rubric を持たない free 問題にだけ既定ルーブリックを付ける。"""
    return [
        item.model_copy(update={"rubric": default_rubric()})
        if item.type == "free" and item.rubric is None
        else item
        for item in items
    ]
