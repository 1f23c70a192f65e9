from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConflictError


class Repository:
    """
    Shared plumbing for repositories.

    The session is injected once at application start (see create_app); with
    Flask-SQLAlchemy it is the scoped session, so each request/app context
    gets its own connection from the pool.
    """

    def __init__(self, session):
        self.session = session

    def _commit(self) -> None:
        """Commit, rolling back first if anything fails so no partial state leaks."""
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def _save(self, obj):
        self.session.add(obj)
        self._commit()
        return obj

    def _refuse_if_referenced(self, query, message: str) -> None:
        """Raise ConflictError when `query` still matches a row pointing at the record."""
        if self.session.query(query.exists()).scalar():
            raise ConflictError(message)
