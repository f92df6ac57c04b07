"""Storage-level exceptions raised by the query builder."""

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class DatabaseError(Exception):
    """Raised when a storage call fails (unreachable store, rejected write, bad response)."""

    pass


class UniqueViolationError(DatabaseError):
    """Raised when a write is rejected by a unique constraint."""

    pass
