"""
Token Lifecycle - create, update, reset and delete tokens

Each operation commits its token write and the matching audit event in a
single transaction. Uniqueness is pre-checked for a clear error and enforced
by the storage constraints.
"""

import structlog
from sqlalchemy.exc import IntegrityError

from tokenkeep.constants import EVENT_RESET_REQUEST, EVENT_SIGN_UP, UPDATABLE_FIELDS
from tokenkeep.db import db
from tokenkeep.exceptions import NotFound, ValidationFailed, translate_storage_errors
from tokenkeep.metrics import track_lifecycle
from tokenkeep.repositories.token_repository import TokenRepository, raise_for_integrity_error
from tokenkeep.repositories.tokenevent_repository import TokenEventRepository

logger = structlog.get_logger("tokens")


class TokenLifecycle:
    """Token lifecycle operations"""

    @staticmethod
    @track_lifecycle("create")
    @translate_storage_errors
    def create_token(app_name, display_name, enabled=True, actor=None):
        """Issue a token with a unique secret and its sign_up event"""
        app_name = app_name or ""
        if not app_name.strip():
            raise ValidationFailed("Application name is required", field="app_name")
        display_name = (display_name or "").strip()

        secret = TokenRepository.generate_secret()
        try:
            token = TokenRepository.create(app_name, display_name, secret, enabled=enabled, commit=False)
            TokenEventRepository.append(token.id, EVENT_SIGN_UP, app_name=app_name, actor=actor, commit=False)
            db.session.commit()
        except IntegrityError as e:
            raise_for_integrity_error(e, app_name)
        except Exception:
            db.session.rollback()
            raise

        logger.info("Token created", app_name=app_name, token_id=token.id, actor=actor)
        return token

    @staticmethod
    @track_lifecycle("update")
    @translate_storage_errors
    def update_token(id, **patch):
        """
        Apply display_name / enabled changes. Unchanged values are skipped and
        no audit event is written for metadata edits.
        """
        token = TokenRepository.get_by_id(id)
        if token is None:
            raise NotFound(id)

        changes = {}
        for name, value in patch.items():
            if name not in UPDATABLE_FIELDS:
                raise ValidationFailed(f"Field '{name}' cannot be updated", field=name)
            if name == "display_name":
                value = (value or "").strip()
            elif name == "enabled":
                value = bool(value)
            if value != getattr(token, name):
                changes[name] = value

        if not changes:
            return token

        token = TokenRepository.update(id, **changes)
        logger.info("Token updated", app_name=token.app_name, token_id=id, fields=sorted(changes))
        return token

    @staticmethod
    @track_lifecycle("reset")
    @translate_storage_errors
    def reset_token(id, actor=None):
        """Regenerate the secret and record a reset_request event"""
        token = TokenRepository.get_by_id(id)
        if token is None:
            raise NotFound(id)

        secret = TokenRepository.generate_secret()
        try:
            token = TokenRepository.update(id, commit=False, secret=secret)
            TokenEventRepository.append(
                token.id, EVENT_RESET_REQUEST, app_name=token.app_name, actor=actor, commit=False
            )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info("Token reset", app_name=token.app_name, token_id=id, actor=actor)
        return token

    @staticmethod
    @track_lifecycle("delete")
    @translate_storage_errors
    def delete_token(id):
        """Delete a token together with all of its events"""
        token = TokenRepository.get_by_id(id)
        if token is None:
            raise NotFound(id)
        app_name = token.app_name

        try:
            removed = TokenEventRepository.delete_all_for_token(id, commit=False)
            TokenRepository.delete(id, commit=False)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info("Token deleted", app_name=app_name, token_id=id, events_removed=removed)
