from sakumon.db.connection import engine, get_session
from sakumon.db.models import ProblemRecord, Worksheet
from sakumon.db.repositories.worksheet import worksheet_repo

__all__ = [
    "engine",
    "get_session",
    "ProblemRecord",
    "Worksheet",
    "worksheet_repo",
]
