import argparse
import logging
import sys

from tokenkeep.app import create_app
from tokenkeep.exceptions import TokenKeepException
from tokenkeep.repositories.token_repository import TokenRepository
from tokenkeep.services import TokenLifecycle

logger = logging.getLogger(__name__)


def reset_token(app_name, actor=None):
    """Regenerate the secret of the token issued to app_name."""
    logger.info(f"Attempting to reset token for application: {app_name}")

    with create_app().app_context():
        token = TokenRepository.get_by_app_name(app_name)
        if token is None:
            logger.warning(f"No token issued to '{app_name}'.")
            return None

        try:
            token = TokenLifecycle.reset_token(token.id, actor=actor)
        except TokenKeepException as e:
            logger.error(f"Failed to reset token: {e.message}")
            return None

        logger.info("Token reset successfully.")
        return token.secret


def main():
    parser = argparse.ArgumentParser(description="Reset an application's API token")
    parser.add_argument("app_name", help="Application whose token is reset")
    parser.add_argument("--actor", default="cli", help="Name recorded on the reset event")

    args = parser.parse_args()

    secret = reset_token(args.app_name, actor=args.actor)
    if secret:
        print(secret)
        sys.exit(0)
    else:
        print("FAILURE")
        sys.exit(1)


if __name__ == "__main__":
    main()
