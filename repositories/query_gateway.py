"""
repositories/query_gateway.py
-----------------------------
Data access layer for the Chronos document engine.

The engine exposes every operation as a stored function (set_attr,
create_doc, list_docs, ...). QueryGateway formats calls to those functions,
runs them one by one or as a single all-or-nothing batch, and decodes
their results. Usernames are always resolved by the engine through
`uid(name)` inside the statement; every call re-sends the password.
"""

from contextlib import closing
from datetime import datetime
from typing import Union

from config import DATABASE_URL, DB_PROVIDER
from db.connection import open_connection, run, transaction
from db.providers import get_factory
from models.result_table import ResultTable
from models.statement import Statement, as_statement
from utils.decoders import decode_bool, decode_int, decode_str, format_timestamp
from utils.logger import get_logger

logger = get_logger(__name__)

StatementLike = Union[Statement, str]

# ── Engine function templates ─────────────────────────────
SET_ATTR = "SELECT set_attr(%s, %s, %s, %s, uid(%s), %s);"
RESET_ATTR = "SELECT reset_attr(%s, %s, uid(%s), %s);"
INSERT_ATTR = "SELECT insert_attr(%s, %s, %s, %s, uid(%s), %s);"
REMOVE_ATTR = "SELECT remove_attr(%s, %s, %s, uid(%s), %s);"
REMOVE_DOC = "SELECT remove_doc(%s, uid(%s), %s);"
CREATE_DOC = "SELECT create_doc(uid(%s), %s);"
INSERT_DOC = "SELECT insert_doc(%s, %s, uid(%s), %s);"
CREATE_USER = "SELECT create_user(%s, %s, %s, uid(%s), %s);"
LEASE = "SELECT lease(%s, uid(%s), %s, uid(%s));"
CREDENTIALS = "SELECT credentials(uid(%s), %s);"
IS_ADMIN = "SELECT isAdmin(uid(%s));"
IS_CREATOR = "SELECT isCreator(%s, uid(%s));"
SCAN_DOCS = "SELECT * FROM scandocs(%s, %s);"
LIST_DOCS = "SELECT * FROM list_docs(uid(%s), %s);"
LIST_ALL_DOCS = "SELECT * FROM list_all_docs(uid(%s), %s);"
LIST_USERS = "SELECT * FROM list_users(uid(%s), %s);"
LIST_LESSEES = "SELECT * FROM list_lessees(%s, uid(%s), %s);"
GET_SCHEME_ID = "SELECT get_scheme_id(%s, uid(%s), %s);"
GET_NAME = "SELECT get_name(%s, uid(%s), %s);"
HAS_SHADOW = "SELECT has_shadow(%s, uid(%s), %s);"


class QueryGateway:
    """
    Gateway to the engine's stored functions.

    Holds only the provider name, the connection string and the queue of
    pending statements. A connection is opened per call and closed before
    the call returns. Not safe for concurrent use.
    """

    def __init__(self, provider_name: str, connection_string: str):
        self._provider = provider_name
        self._connection_string = connection_string
        self._queue: list[Statement] = []

    @classmethod
    def from_config(cls) -> "QueryGateway":
        """Build a gateway from DB_PROVIDER / DATABASE_URL in config."""
        return cls(DB_PROVIDER, DATABASE_URL)

    @property
    def queue(self) -> tuple[Statement, ...]:
        """Snapshot of the pending statements, in execution order."""
        return tuple(self._queue)

    # ── EXECUTION ─────────────────────────────────────────

    def test_connection(self) -> None:
        """
        Open and immediately close a connection.

        Raises:
            ProviderNotFoundError: If the provider cannot be resolved.
            The driver's error if the target is unreachable or rejects
            the credentials.
        """
        factory = get_factory(self._provider)
        try:
            with open_connection(factory, self._connection_string):
                pass
            logger.info(f"Connection test via '{factory.name}' succeeded.")
        except Exception as e:
            logger.error(f"Connection test via '{factory.name}' failed: {type(e).__name__}")
            raise

    def execute_scalar(self, statement: StatementLike) -> None:
        """
        Run one statement that returns no rows, committing on success.

        Args:
            statement: A Statement or raw SQL text.
        """
        self._execute(as_statement(statement), fetch=False)

    def execute_query(self, statement: StatementLike) -> ResultTable:
        """
        Run one statement and read its whole result set.

        The call is committed as well, since engine functions such as
        create_doc both change data and return a value.

        Args:
            statement: A Statement or raw SQL text.

        Returns:
            ResultTable with every row of the result.
        """
        return self._execute(as_statement(statement), fetch=True)

    def execute_batch(self) -> None:
        """
        Run every queued statement, in order, inside one transaction.

        Either all statements take effect or none do: the first failure
        rolls the transaction back and propagates. An empty queue commits
        an empty transaction. The queue is NOT cleared afterwards; call
        `clear_queue()` when done.
        """
        pending = list(self._queue)
        factory = get_factory(self._provider)
        current = None
        try:
            with open_connection(factory, self._connection_string) as conn:
                with transaction(conn):
                    with closing(conn.cursor()) as cur:
                        for current in pending:
                            logger.debug(f"Batch: executing {current.function}")
                            run(cur, current, factory.paramstyle)
            logger.info(f"Committed batch of {len(pending)} statement(s).")
        except Exception as e:
            failed = current.function if current is not None else "batch"
            logger.error(f"Batch rolled back at {failed}: {type(e).__name__}")
            raise

    def _execute(self, statement: Statement, fetch: bool) -> ResultTable | None:
        factory = get_factory(self._provider)
        try:
            with open_connection(factory, self._connection_string) as conn:
                with transaction(conn):
                    with closing(conn.cursor()) as cur:
                        run(cur, statement, factory.paramstyle)
                        table = ResultTable.from_cursor(cur) if fetch else None
            logger.debug(f"Executed {statement.function}")
            return table
        except Exception as e:
            logger.error(f"Failed to execute {statement.function}: {type(e).__name__}")
            raise

    def _query_first(self, statement: Statement):
        return self.execute_query(statement).first()

    # ── QUEUE ─────────────────────────────────────────────

    def add_to_queue(self, statement: StatementLike) -> None:
        """Append a statement to the pending batch without executing it."""
        self._queue.append(as_statement(statement))

    def clear_queue(self) -> None:
        """Drop all pending statements without executing them."""
        self._queue.clear()

    def add_set_attribute(self, doc_id: int, name: str, value: str, link: bool, user: str, pwd: str) -> None:
        """Queue setting a scalar attribute."""
        self.add_to_queue(Statement(SET_ATTR, (doc_id, name, value, link, user, pwd)))

    def add_reset_attribute(self, doc_id: int, name: str, user: str, pwd: str) -> None:
        """Queue clearing a scalar attribute."""
        self.add_to_queue(Statement(RESET_ATTR, (doc_id, name, user, pwd)))

    def add_insert_attribute(self, doc_id: int, name: str, value: str, link: bool, user: str, pwd: str) -> None:
        """Queue inserting a value into a container attribute."""
        self.add_to_queue(Statement(INSERT_ATTR, (doc_id, name, value, link, user, pwd)))

    def add_remove_attribute(self, doc_id: int, name: str, value: str, user: str, pwd: str) -> None:
        """Queue removing a value from a container attribute."""
        self.add_to_queue(Statement(REMOVE_ATTR, (doc_id, name, value, user, pwd)))

    def add_remove_doc(self, doc_id: int, user: str, pwd: str) -> None:
        """Queue removing a document (creator only)."""
        self.add_to_queue(Statement(REMOVE_DOC, (doc_id, user, pwd)))

    # ── ATTRIBUTES ────────────────────────────────────────

    def set_attribute(self, doc_id: int, name: str, value: str, link: bool, user: str, pwd: str) -> None:
        """
        Set a scalar attribute on a document.

        Args:
            doc_id: Document ID.
            name: Attribute name.
            value: Attribute value.
            link: True if the value references another document.
            user: Acting username.
            pwd: Acting user's password.
        """
        self.execute_scalar(Statement(SET_ATTR, (doc_id, name, value, link, user, pwd)))

    def reset_attribute(self, doc_id: int, name: str, user: str, pwd: str) -> None:
        """Clear a scalar attribute on a document."""
        self.execute_scalar(Statement(RESET_ATTR, (doc_id, name, user, pwd)))

    def insert_attribute(self, doc_id: int, name: str, value: str, link: bool, user: str, pwd: str) -> None:
        """Insert a value into a container attribute."""
        self.execute_scalar(Statement(INSERT_ATTR, (doc_id, name, value, link, user, pwd)))

    def remove_attribute(self, doc_id: int, name: str, value: str, user: str, pwd: str) -> None:
        """Remove a value from a container attribute."""
        self.execute_scalar(Statement(REMOVE_ATTR, (doc_id, name, value, user, pwd)))

    # ── DOCUMENTS ─────────────────────────────────────────

    def create_doc(self, creator: str, pwd: str) -> int:
        """
        Create a new, empty document.

        Returns:
            The new document's ID.
        """
        return decode_int(self._query_first(Statement(CREATE_DOC, (creator, pwd))))

    def insert_doc(self, doc_id: int, name: str, creator: str, pwd: str) -> int:
        """
        Create a new document inside container attribute `name` of `doc_id`.

        Returns:
            The new document's ID.
        """
        return decode_int(self._query_first(Statement(INSERT_DOC, (doc_id, name, creator, pwd))))

    def scan_docs(self, doc_id: int, as_of: datetime) -> ResultTable:
        """
        Read a document's attributes and values as they were at `as_of`.

        Args:
            doc_id: Document ID.
            as_of: Point in time; sent with microsecond precision.
        """
        return self.execute_query(Statement(SCAN_DOCS, (doc_id, format_timestamp(as_of))))

    def list_docs(self, user: str, pwd: str) -> ResultTable:
        """Documents owned by or leased to the user."""
        return self.execute_query(Statement(LIST_DOCS, (user, pwd)))

    def list_all_docs(self, user: str, pwd: str) -> ResultTable:
        """Every document (admin view)."""
        return self.execute_query(Statement(LIST_ALL_DOCS, (user, pwd)))

    def get_scheme_id(self, doc_id: int, user: str, pwd: str) -> int:
        return decode_int(self._query_first(Statement(GET_SCHEME_ID, (doc_id, user, pwd))))

    def get_name(self, doc_id: int, user: str, pwd: str) -> str:
        return decode_str(self._query_first(Statement(GET_NAME, (doc_id, user, pwd))))

    def has_shadow(self, doc_id: int, user: str, pwd: str) -> bool:
        """True if the document has a derived (shadow) document."""
        return decode_bool(self._query_first(Statement(HAS_SHADOW, (doc_id, user, pwd))))

    def is_creator(self, doc_id: int, user: str) -> bool:
        return decode_bool(self._query_first(Statement(IS_CREATOR, (doc_id, user))))

    # ── USERS & LEASES ────────────────────────────────────

    def create_user(self, user: str, pwd: str, admin: bool, creator: str, creator_pwd: str) -> int:
        """
        Create a user account. The creator must be an admin.

        Returns:
            The new user's ID.
        """
        return decode_int(self._query_first(Statement(CREATE_USER, (user, pwd, admin, creator, creator_pwd))))

    def create_lease(self, doc_id: int, lessor: str, pwd: str, lessee: str) -> None:
        """Grant `lessee` access to a document owned by `lessor`."""
        self.execute_scalar(Statement(LEASE, (doc_id, lessor, pwd, lessee)))

    def credentials(self, user: str, pwd: str) -> None:
        """
        Check a username/password pair.

        Raises:
            The driver's error if the engine rejects the credentials.
        """
        self.execute_scalar(Statement(CREDENTIALS, (user, pwd)))

    def is_admin(self, user: str) -> bool:
        return decode_bool(self._query_first(Statement(IS_ADMIN, (user,))))

    def list_users(self, user: str, pwd: str) -> ResultTable:
        return self.execute_query(Statement(LIST_USERS, (user, pwd)))

    def list_lessees(self, doc_id: int, user: str, pwd: str) -> ResultTable:
        """Users the document is leased to."""
        return self.execute_query(Statement(LIST_LESSEES, (doc_id, user, pwd)))
