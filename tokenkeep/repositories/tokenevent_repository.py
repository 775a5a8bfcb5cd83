"""
Repository for TokenEvent database operations
Append-only event log: records are only ever inserted, or removed by a token delete
"""

from sqlalchemy import func

from tokenkeep.constants import EVENT_TYPES
from tokenkeep.db import db
from tokenkeep.exceptions import ValidationFailed, translate_storage_errors
from tokenkeep.models.tokenevent import TokenEvent
from tokenkeep.utils import ensure_utc, now_utc


class TokenEventRepository:
    """Repository for TokenEvent database operations"""

    @staticmethod
    @translate_storage_errors
    def append(token_id, event_type, description=None, occurred_at=None, app_name=None, actor=None, commit=True):
        """Append a new immutable event record"""
        if event_type not in EVENT_TYPES:
            raise ValidationFailed(f"Unknown event type '{event_type}'", field="event_type")

        item = TokenEvent(
            token_id=token_id,
            event_type=event_type,
            description=description,
            app_name=app_name,
            actor=actor,
            occurred_at=occurred_at or now_utc(),
        )
        db.session.add(item)
        if commit:
            db.session.commit()
        else:
            db.session.flush()
        return item

    @staticmethod
    @translate_storage_errors
    def most_recent(token_id, event_type):
        """Latest occurred_at for a (token, type) pair, or None"""
        result = (
            db.session.query(func.max(TokenEvent.occurred_at))
            .filter(TokenEvent.token_id == token_id, TokenEvent.event_type == event_type)
            .scalar()
        )
        return ensure_utc(result)

    @staticmethod
    @translate_storage_errors
    def most_recent_batch(token_ids, event_type):
        """
        Latest occurred_at per token for one event type, as {token_id: datetime}.
        A single grouped aggregation, whatever the number of tokens.
        """
        token_ids = set(token_ids)
        if not token_ids:
            return {}

        rows = (
            db.session.query(TokenEvent.token_id, func.max(TokenEvent.occurred_at).label("occurred_at"))
            .filter(TokenEvent.event_type == event_type, TokenEvent.token_id.in_(token_ids))
            .group_by(TokenEvent.token_id)
            .all()
        )
        return {row.token_id: ensure_utc(row.occurred_at) for row in rows}

    @staticmethod
    @translate_storage_errors
    def last_event(token_id, event_type):
        """Most recent event of a type for a token"""
        return (
            TokenEvent.query.filter_by(token_id=token_id, event_type=event_type)
            .order_by(TokenEvent.occurred_at.desc(), TokenEvent.id.desc())
            .first()
        )

    @staticmethod
    @translate_storage_errors
    def list_for_token(token_id, event_type=None):
        """Chronological audit trail for a token"""
        query = TokenEvent.query.filter_by(token_id=token_id)
        if event_type:
            query = query.filter_by(event_type=event_type)
        return query.order_by(TokenEvent.occurred_at.asc(), TokenEvent.id.asc()).all()

    @staticmethod
    @translate_storage_errors
    def list_unattached(app_name=None):
        """Failed checks that matched no token"""
        query = TokenEvent.query.filter(TokenEvent.token_id.is_(None))
        if app_name:
            query = query.filter_by(app_name=app_name)
        return query.order_by(TokenEvent.occurred_at.asc(), TokenEvent.id.asc()).all()

    @staticmethod
    @translate_storage_errors
    def delete_all_for_token(token_id, commit=True):
        """Delete every event of a token; only used by the cascading token delete"""
        deleted = TokenEvent.query.filter_by(token_id=token_id).delete(synchronize_session="fetch")
        if commit:
            db.session.commit()
        return deleted

    @staticmethod
    @translate_storage_errors
    def count(token_id=None, event_type=None):
        """Count TokenEvent records"""
        query = TokenEvent.query
        if token_id is not None:
            query = query.filter_by(token_id=token_id)
        if event_type:
            query = query.filter_by(event_type=event_type)
        return query.count()
