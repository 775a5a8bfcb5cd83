"""
Token Authenticator - validates an (app_name, secret) pair

Every attempt is written to the event log, success or failure. A wrong
secret, a disabled token or an unknown app_name is a False result, never an
error; only storage failures propagate.
"""

import hmac

import structlog
from sqlalchemy.exc import IntegrityError

from tokenkeep.constants import EVENT_CHECK_FAILED, EVENT_SIGN_IN
from tokenkeep.db import db
from tokenkeep.exceptions import translate_storage_errors
from tokenkeep.metrics import token_checks_total
from tokenkeep.repositories.token_repository import TokenRepository
from tokenkeep.repositories.tokenevent_repository import TokenEventRepository

logger = structlog.get_logger("auth")


class TokenAuthenticator:
    """Token checks with a guaranteed audit event per call"""

    @staticmethod
    def _matches(token, secret):
        if token is None or not token.enabled or secret is None:
            return False
        return hmac.compare_digest(token.secret.encode("utf-8"), str(secret).encode("utf-8"))

    @staticmethod
    @translate_storage_errors
    def check(app_name, secret):
        """Return True if app_name exists, is enabled and secret matches exactly."""
        token = TokenRepository.get_by_app_name(app_name)
        success = TokenAuthenticator._matches(token, secret)
        token_id = token.id if token is not None else None

        try:
            TokenEventRepository.append(
                token_id,
                EVENT_SIGN_IN if success else EVENT_CHECK_FAILED,
                app_name=app_name,
            )
        except IntegrityError:
            # The token was deleted between lookup and commit: record the attempt unattached
            db.session.rollback()
            logger.warning("Token vanished during check", app_name=app_name, token_id=token_id)
            success = False
            token, token_id = None, None
            TokenEventRepository.append(None, EVENT_CHECK_FAILED, app_name=app_name)

        token_checks_total.labels(result="success" if success else "failure").inc()
        if success:
            logger.info("Token check succeeded", app_name=app_name, token_id=token_id)
        elif token is None:
            logger.warning("Token check failed: unknown application", app_name=app_name)
        else:
            logger.warning(
                "Token check failed",
                app_name=app_name,
                token_id=token_id,
                enabled=token.enabled,
            )
        return success
