from sakumon.db.repositories.worksheet import problem_from_record, worksheet_repo

__all__ = [
    "problem_from_record",
    "worksheet_repo",
]
