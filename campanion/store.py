"""
Entity store gateway.

Collection-scoped CRUD over Flask-SQLAlchemy models. Database errors are
rolled back and re-raised as CollaboratorFailure; batch updates run each
item in its own SAVEPOINT and report per-item outcomes instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from campanion import db
from campanion.errors import CollaboratorFailure, NotFound
from campanion.models import Camp, Organizer, User


@dataclass(frozen=True)
class ItemOutcome:
    """Result of one item of a batch update."""

    record_id: int
    ok: bool
    error: Optional[str] = None


@dataclass
class BatchReport:
    """Aggregate result of a batch update."""

    outcomes: List[ItemOutcome] = field(default_factory=list)

    @property
    def attempted(self):
        return len(self.outcomes)

    @property
    def succeeded(self):
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self):
        return self.attempted - self.succeeded

    @property
    def failures(self):
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def succeeded_ids(self):
        return [outcome.record_id for outcome in self.outcomes if outcome.ok]

    @property
    def is_complete(self):
        return self.failed == 0


class EntityStore:
    """
    Gateway for one collection (model class).

    Args:
        model: Flask-SQLAlchemy model class.
        kind (str): Name used in NotFound and log messages.
    """

    def __init__(self, model, kind):
        self.model = model
        self.kind = kind

    def get(self, record_id):
        """
        Fetch a record by id.

        Raises:
            NotFound: If no record has this id.
            CollaboratorFailure: If the database call fails.
        """
        try:
            record = db.session.get(self.model, record_id)
        except SQLAlchemyError as exc:
            self._fail(f'get {self.kind} {record_id}', exc)
        if record is None:
            raise NotFound(self.kind, record_id)
        return record

    def list(self, *criteria, order_by=None) -> List:
        """
        Fetch records matching SQLAlchemy filter expressions.

        Args:
            *criteria: Filter expressions, e.g. Camp.status == 'active'.
            order_by: Optional ordering expression.
        """
        try:
            query = self.model.query.filter(*criteria)
            if order_by is not None:
                query = query.order_by(order_by)
            return query.all()
        except SQLAlchemyError as exc:
            self._fail(f'list {self.kind}', exc)

    def create(self, data) -> int:
        """Insert a record and return its new id."""
        try:
            record = self.model(**data)
            db.session.add(record)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail(f'create {self.kind}', exc)
        return record.id

    def update(self, record_id, partial) -> None:
        """Apply a partial field update to one record."""
        record = self.get(record_id)
        try:
            _apply(record, partial)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail(f'update {self.kind} {record_id}', exc)

    def delete(self, record_id) -> None:
        """Remove a record permanently."""
        record = self.get(record_id)
        try:
            db.session.delete(record)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail(f'delete {self.kind} {record_id}', exc)

    def batch_update(self, updates: Iterable[Tuple[int, dict]]) -> BatchReport:
        """
        Apply independent partial updates.

        Each item runs in its own SAVEPOINT; a failing item is rolled back
        and recorded, the others are committed together. If the final commit
        fails, every item is reported as failed.
        """
        report = BatchReport()
        for record_id, partial in updates:
            try:
                with db.session.begin_nested():
                    record = db.session.get(self.model, record_id)
                    if record is None:
                        raise NotFound(self.kind, record_id)
                    _apply(record, partial)
            except (SQLAlchemyError, NotFound) as exc:
                current_app.logger.warning("Batch update of %s %s failed: %s", self.kind, record_id, exc)
                report.outcomes.append(ItemOutcome(record_id, False, str(exc)))
            else:
                report.outcomes.append(ItemOutcome(record_id, True))
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.exception("Batch update of %s failed at commit: %s", self.kind, exc)
            report.outcomes = [
                outcome if not outcome.ok else ItemOutcome(outcome.record_id, False, str(exc))
                for outcome in report.outcomes
            ]
        return report

    def _fail(self, operation, exc):
        db.session.rollback()
        current_app.logger.exception("Store operation '%s' failed: %s", operation, exc)
        raise CollaboratorFailure(operation, exc) from exc


def _apply(record, partial):
    for name, value in partial.items():
        setattr(record, name, value)


camps = EntityStore(Camp, 'camp')
organizers = EntityStore(Organizer, 'organizer')
users = EntityStore(User, 'user')
