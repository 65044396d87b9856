import re

import pytest

from db.providers import register_provider, unregister_provider
from repositories.query_gateway import QueryGateway

_FUNCTION_RE = re.compile(r"SELECT\s+(?:\*\s+FROM\s+)?(\w+)\s*\(", re.IGNORECASE)


class FakeDatabaseError(Exception):
    pass


class FakeOperationalError(FakeDatabaseError):
    pass


class LostConnectionError(FakeDatabaseError):
    pass


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self._rows = []
        self.closed = False

    def execute(self, sql, params=None):
        db = self.conn.db
        db.executed.append((sql, params))
        match = _FUNCTION_RE.search(sql)
        function = match.group(1) if match else None
        if function is not None and function in db.fail_on:
            raise db.fail_error(f"{function} failed")
        handler = db.handlers.get(function)
        if handler is None:
            self.description = None
            self._rows = []
            return
        columns, rows = handler(*(params or ()))
        self.description = [(c, None, None, None, None, None, None) for c in columns]
        self._rows = list(rows)

    def fetchall(self):
        return list(self._rows)

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, db, connection_string):
        self.db = db
        self.connection_string = connection_string
        self.closed = False
        self.commits = 0
        self.rollbacks = 0
        self.cursors = []

    def cursor(self):
        cur = FakeCursor(self)
        self.cursors.append(cur)
        return cur

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1
        if self.db.rollback_fails:
            raise LostConnectionError("connection already closed")

    def close(self):
        self.closed = True


class FakeDatabase:
    """Scriptable DB-API driver recording everything the gateway does."""

    def __init__(self):
        self.connections = []
        self.executed = []
        self.handlers = {}
        self.fail_on = set()
        self.unreachable = False
        self.rollback_fails = False
        self.fail_error = FakeDatabaseError

    def connect(self, connection_string):
        if self.unreachable:
            raise FakeOperationalError("could not connect to server")
        conn = FakeConnection(self, connection_string)
        self.connections.append(conn)
        return conn

    def returns(self, function, columns, rows):
        self.handlers[function] = lambda *params: (columns, rows)

    @property
    def open_connections(self):
        return [c for c in self.connections if not c.closed]


@pytest.fixture()
def fake_db():
    db = FakeDatabase()
    register_provider("fake", db.connect, "pyformat")
    yield db
    unregister_provider("fake")


@pytest.fixture()
def gateway(fake_db):
    return QueryGateway("fake", "host=fake dbname=chronos")


@pytest.fixture()
def sqlite_gateway(tmp_path):
    return QueryGateway("sqlite3", str(tmp_path / "chronos_test.db"))
