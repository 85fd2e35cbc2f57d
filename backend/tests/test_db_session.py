import pytest

from planner.db.session import describe_database, engine_options


def test_sqlite_connections_are_shareable_across_threads():
    assert engine_options("sqlite:///./planner.db") == {"connect_args": {"check_same_thread": False}}
    assert engine_options("postgresql+psycopg://planner:secret@db/planner") == {}


@pytest.mark.parametrize(
    "url,expected",
    [
        ("sqlite:///./planner.db", "sqlite (./planner.db)"),
        ("sqlite://", "sqlite (in-memory)"),
        ("postgresql+psycopg://planner:secret@db/planner", "postgresql (planner)"),
        ("mysql+pymysql://planner:secret@db/planner", "mysql (planner)"),
    ],
)
def test_database_description_names_the_backend(url, expected):
    description = describe_database(url)
    assert description == expected
    assert "secret" not in description
