"""
tokenkeep - Custom Exceptions and storage error translation
"""
from functools import wraps

import structlog
from sqlalchemy.exc import DBAPIError, OperationalError

logger = structlog.get_logger('exceptions')


class TokenKeepException(Exception):
    """Base exception for tokenkeep"""
    def __init__(self, message: str, code: str = "TOKENKEEP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self):
        return {
            'error': True,
            'code': self.code,
            'message': self.message
        }


class NotFound(TokenKeepException):
    """Operation referenced a token id that does not exist"""
    def __init__(self, token_id):
        super().__init__(f"Token with ID '{token_id}' not found", code="NOT_FOUND")
        self.token_id = token_id
        logger.info("Token not found", token_id=token_id)


class DuplicateAppName(TokenKeepException):
    """Create attempted with an application name already in use"""
    def __init__(self, app_name: str):
        super().__init__(f"Application name '{app_name}' is already in use", code="DUPLICATE_APP_NAME")
        self.app_name = app_name
        logger.warning("Duplicate application name", app_name=app_name)


class SecretCollision(TokenKeepException):
    """No unique secret could be produced within the attempt budget"""
    def __init__(self, attempts: int = None):
        if attempts is None:
            message = "Generated token secret collided with an existing token"
        else:
            message = f"Could not generate a unique token secret after {attempts} attempts"
        super().__init__(message, code="SECRET_COLLISION")
        self.attempts = attempts
        logger.error("Secret generation exhausted", attempts=attempts)


class ValidationFailed(TokenKeepException):
    """Caller supplied values that fail field constraints"""
    def __init__(self, message: str, field: str = None):
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field
        logger.warning(f"Validation error: {message}", field=field)

    def to_dict(self):
        data = super().to_dict()
        if self.field:
            data['field'] = self.field
        return data


class StorageUnavailable(TokenKeepException):
    """Underlying persistence could not be reached"""
    def __init__(self, message: str = "Storage unavailable"):
        super().__init__(message, code="STORAGE_UNAVAILABLE")
        logger.error(f"Storage error: {message}")


def translate_storage_errors(f):
    """
    Decorator for store and service entry points.
    Rolls back the session and raises StorageUnavailable when the database
    cannot be reached; typed tokenkeep failures pass through untouched.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        from tokenkeep.db import db

        try:
            return f(*args, **kwargs)
        except (OperationalError, DBAPIError) as e:
            # IntegrityError is a DBAPIError too, but callers translate it themselves
            if not (isinstance(e, OperationalError) or e.connection_invalidated):
                raise
            db.session.rollback()
            raise StorageUnavailable(f"{f.__name__}: {e.orig}") from e

    return wrapper
