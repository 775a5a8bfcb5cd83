"""
Tests for token checks and their audit events
"""
from types import SimpleNamespace

from prometheus_client import REGISTRY

from tokenkeep.constants import EVENT_CHECK_FAILED, EVENT_SIGN_IN, EVENT_SIGN_UP
from tokenkeep.repositories.token_repository import TokenRepository
from tokenkeep.repositories.tokenevent_repository import TokenEventRepository
from tokenkeep.services import TokenAuthenticator, TokenLifecycle


def _checks(result):
    return REGISTRY.get_sample_value("tokenkeep_token_checks_total", {"result": result}) or 0.0


class TestCheck:
    """Tests for TokenAuthenticator.check"""

    def test_correct_secret_succeeds(self, app, make_token):
        token = make_token("billing")
        secret, token_id = token.secret, token.id
        successes = _checks("success")

        assert TokenAuthenticator.check("billing", secret) is True

        events = TokenEventRepository.list_for_token(token_id)
        assert [e.event_type for e in events] == [EVENT_SIGN_UP, EVENT_SIGN_IN]
        assert _checks("success") == successes + 1

    def test_wrong_secret_fails(self, app, make_token):
        token = make_token("billing")
        token_id = token.id
        failures = _checks("failure")

        assert TokenAuthenticator.check("billing", "not-the-secret") is False

        assert TokenEventRepository.count(token_id, EVENT_CHECK_FAILED) == 1
        assert TokenEventRepository.count(token_id, EVENT_SIGN_IN) == 0
        assert _checks("failure") == failures + 1

    def test_disabled_token_fails_with_correct_secret(self, app, make_token):
        token = make_token("billing", enabled=False)
        secret, token_id = token.secret, token.id

        assert TokenAuthenticator.check("billing", secret) is False
        assert TokenEventRepository.count(token_id, EVENT_CHECK_FAILED) == 1

    def test_secret_comparison_is_exact(self, app, make_token):
        token = make_token("billing")
        secret = token.secret

        assert TokenAuthenticator.check("billing", secret.upper()) is False
        assert TokenAuthenticator.check("billing", secret + " ") is False
        assert TokenAuthenticator.check("billing", None) is False

    def test_unknown_app_name_records_unattached_event(self, app, make_token):
        make_token("billing")

        assert TokenAuthenticator.check("ghost", "whatever") is False

        unattached = TokenEventRepository.list_unattached("ghost")
        assert len(unattached) == 1
        assert unattached[0].event_type == EVENT_CHECK_FAILED

    def test_one_event_per_call(self, app, make_token):
        token = make_token("billing")
        secret, token_id = token.secret, token.id
        before = TokenEventRepository.count()

        TokenAuthenticator.check("billing", secret)
        TokenAuthenticator.check("billing", "wrong")
        TokenAuthenticator.check("ghost", secret)

        assert TokenEventRepository.count() == before + 3
        assert TokenEventRepository.count(token_id) == 3

    def test_token_deleted_during_check(self, app, make_token, monkeypatch):
        """A check racing a delete fails and leaves an unattached event"""
        token = make_token("billing")
        secret, token_id = token.secret, token.id
        TokenLifecycle.delete_token(token_id)
        stale = SimpleNamespace(id=token_id, enabled=True, secret=secret)
        monkeypatch.setattr(TokenRepository, "get_by_app_name", staticmethod(lambda app_name: stale))

        assert TokenAuthenticator.check("billing", secret) is False

        assert TokenEventRepository.count(token_id) == 0
        unattached = TokenEventRepository.list_unattached("billing")
        assert [e.event_type for e in unattached] == [EVENT_CHECK_FAILED]
