import pytest

from sqlalchemy import create_engine, event

from sqlalchemy_record import RecordSession

from models import User, Post

SCHEMA = [
    "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL)",
    "CREATE TABLE posts (id INTEGER PRIMARY KEY, user_id INTEGER, title TEXT, body TEXT)",
]


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        for ddl in SCHEMA:
            conn.exec_driver_sql(ddl)

    yield engine

    engine.dispose()


@pytest.fixture
def session(engine):
    session = RecordSession(engine)
    session.register(User, "users")
    session.register(Post, "posts")
    yield session


@pytest.fixture
def seeded(engine):
    with engine.begin() as conn:
        for idx in range(1, 5):
            conn.exec_driver_sql(
                "INSERT INTO posts (id, title, body) VALUES (?, ?, ?)",
                (idx, f"post {idx}", f"body {idx}"),
            )


@pytest.fixture
def statements(engine):
    """
    Every (statement, parameters) pair sent to the driver during the test.
    """
    captured = []

    def _capture(conn, cursor, statement, parameters, context, executemany):
        captured.append((statement, tuple(parameters)))

    event.listen(engine, "before_cursor_execute", _capture)
    yield captured
    event.remove(engine, "before_cursor_execute", _capture)
