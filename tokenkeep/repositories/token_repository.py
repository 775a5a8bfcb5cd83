"""
Repository for Token database operations
The token store: entities, uniqueness guards and secret generation
"""

import secrets

import structlog
from flask import current_app
from sqlalchemy.exc import IntegrityError

from tokenkeep.constants import DEFAULT_SETTINGS, UPDATABLE_FIELDS
from tokenkeep.db import db
from tokenkeep.exceptions import (
    DuplicateAppName,
    NotFound,
    SecretCollision,
    ValidationFailed,
    translate_storage_errors,
)
from tokenkeep.models.token import Token
from tokenkeep.utils import now_utc, sanitize_sensitive_data

logger = structlog.get_logger("tokens")


def _token_settings():
    settings = current_app.config.get("TOKENKEEP") or DEFAULT_SETTINGS
    return settings.get("tokens", DEFAULT_SETTINGS["tokens"])


def _candidate_secret(nbytes):
    return secrets.token_hex(nbytes)


def raise_for_integrity_error(error, app_name=None):
    """
    Map a unique constraint violation on the token table to a typed failure.
    The session is rolled back first so the lookup below sees committed state.
    """
    db.session.rollback()
    if app_name is not None and Token.query.filter_by(app_name=app_name).first() is not None:
        raise DuplicateAppName(app_name) from error
    if "secret" in str(error.orig).lower():
        raise SecretCollision() from error
    raise error


class TokenRepository:
    """Repository for Token database operations"""

    @staticmethod
    @translate_storage_errors
    def get_all():
        """Get all Token records, unfiltered and unsorted"""
        return Token.query.all()

    @staticmethod
    @translate_storage_errors
    def get_by_id(id):
        """Get Token by ID"""
        return db.session.get(Token, id)

    @staticmethod
    @translate_storage_errors
    def get_by_app_name(app_name):
        """Get Token by application name"""
        return Token.query.filter_by(app_name=app_name).first()

    @staticmethod
    @translate_storage_errors
    def create(app_name, display_name, secret, enabled=True, commit=True):
        """Create new Token record"""
        # Fast path; the unique constraint stays the authoritative guard
        if TokenRepository.get_by_app_name(app_name) is not None:
            raise DuplicateAppName(app_name)

        try:
            item = Token(app_name=app_name, display_name=display_name, secret=secret, enabled=enabled)
            db.session.add(item)
            if commit:
                db.session.commit()
                db.session.refresh(item)
            else:
                db.session.flush()
            return item
        except IntegrityError as e:
            raise_for_integrity_error(e, app_name)

    @staticmethod
    @translate_storage_errors
    def update(id, commit=True, **kwargs):
        """Update Token record with the fields present in kwargs"""
        item = db.session.get(Token, id)
        if not item:
            raise NotFound(id)

        for key in kwargs:
            if key not in UPDATABLE_FIELDS and key != "secret":
                raise ValidationFailed(f"Field '{key}' cannot be updated", field=key)

        logger.debug("Updating token record", token_id=id, **sanitize_sensitive_data(kwargs))
        for key, value in kwargs.items():
            setattr(item, key, value)

        item.updated_at = now_utc()
        try:
            if commit:
                db.session.commit()
            else:
                db.session.flush()
        except IntegrityError as e:
            raise_for_integrity_error(e)
        return item

    @staticmethod
    @translate_storage_errors
    def delete(id, commit=True):
        """Delete Token record; its events are removed by the caller"""
        item = db.session.get(Token, id)
        if not item:
            raise NotFound(id)

        db.session.delete(item)
        if commit:
            db.session.commit()
        else:
            db.session.flush()
        return True

    @staticmethod
    @translate_storage_errors
    def count():
        """Count total Token records"""
        return Token.query.count()

    @staticmethod
    @translate_storage_errors
    def generate_secret(max_attempts=None, nbytes=None):
        """
        Produce a secret no existing token holds.

        Candidates come from `secrets`, so a collision is practically
        impossible; the attempt cap only guards against a broken uniqueness
        index looping forever.
        """
        settings = _token_settings()
        max_attempts = max_attempts or settings.get("max_secret_attempts", 10)
        nbytes = nbytes or settings.get("secret_bytes", 16)

        for attempt in range(1, max_attempts + 1):
            candidate = _candidate_secret(nbytes)
            if not db.session.query(Token.query.filter_by(secret=candidate).exists()).scalar():
                return candidate
            logger.warning("Generated secret already in use, retrying", attempt=attempt)

        raise SecretCollision(max_attempts)
