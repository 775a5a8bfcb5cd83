"""
tokenkeep - API token issuance and audit engine

    from tokenkeep import create_app
    from tokenkeep.services import TokenLifecycle, TokenAuthenticator

    app = create_app()
    with app.app_context():
        token = TokenLifecycle.create_token("billing", "Billing service", actor="admin")
        TokenAuthenticator.check("billing", token.secret)
"""

from .app import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
