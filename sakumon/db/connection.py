"""
SQLModel エンジン・セッション (PostgreSQL + pgvector)。
"""

import threading
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import text
from sqlmodel import Session, SQLModel, create_engine

from sakumon.core.config import settings
from sakumon.db.models import ProblemRecord, Worksheet  # noqa: F401 - テーブル登録

# postgresql:// → postgresql+psycopg:// (psycopg3 ドライバ)
_db_url = settings.DATABASE_URL.replace("postgresql://", "postgresql+psycopg://", 1)
engine = create_engine(_db_url, echo=False)

_initialized = False
_init_lock = threading.Lock()


def init_db() -> None:
    """pgvector 拡張とテーブルがなければ作成する。初回の同時リクエストでも 1 回だけ実行。"""
    global _initialized
    if _initialized:
        return
    with _init_lock:
        if _initialized:
            return
        with engine.connect() as conn:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            conn.commit()
        SQLModel.metadata.create_all(engine)
        _initialized = True


@contextmanager
def get_session() -> Generator[Session, None, None]:
    init_db()
    with Session(engine) as session:
        yield session
