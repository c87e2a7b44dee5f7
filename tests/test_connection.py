import threading
import time
from types import SimpleNamespace

from sakumon.db import connection


class FakeConn:
    def __init__(self, log):
        self.log = log

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, stmt):
        # 競合が起きやすいように少し待つ
        time.sleep(0.05)
        self.log.append(str(stmt))

    def commit(self):
        pass


class FakeEngine:
    def __init__(self):
        self.log = []

    def connect(self):
        return FakeConn(self.log)


def test_init_db_runs_once_under_concurrent_first_calls(monkeypatch):
    engine = FakeEngine()
    created = []
    monkeypatch.setattr(connection, "engine", engine)
    monkeypatch.setattr(connection, "_initialized", False)
    fake_sqlmodel = SimpleNamespace(metadata=SimpleNamespace(create_all=lambda bind: created.append(bind)))
    monkeypatch.setattr(connection, "SQLModel", fake_sqlmodel)

    threads = [threading.Thread(target=connection.init_db) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert engine.log == ["CREATE EXTENSION IF NOT EXISTS vector"]
    assert created == [engine]
    assert connection._initialized is True

    connection.init_db()
    assert len(engine.log) == 1
