"""
Tests for the event aggregator
"""
from datetime import datetime, timezone

import pytest

from tokenkeep.constants import EVENT_RESET_REQUEST, EVENT_SIGN_IN, EVENT_SIGN_UP
from tokenkeep.exceptions import ValidationFailed
from tokenkeep.repositories.tokenevent_repository import TokenEventRepository
from tokenkeep.services import EventAggregator


class TestEventAggregator:
    """Tests for EventAggregator"""

    def test_every_token_gets_every_field(self, app, make_token):
        used = make_token("billing")
        unused = make_token("reports")
        when = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        TokenEventRepository.append(used.id, EVENT_SIGN_IN, occurred_at=when)

        result = EventAggregator.derived_fields([used, unused], ["last_sign_in_time", "last_reset_time"])

        assert result[used.id] == {"last_sign_in_time": when, "last_reset_time": None}
        assert result[unused.id] == {"last_sign_in_time": None, "last_reset_time": None}

    def test_defaults_to_all_derived_fields(self, app, make_token):
        token = make_token("billing")

        result = EventAggregator.derived_fields([token])

        assert set(result[token.id]) == {"last_sign_in_time", "sign_up_time", "last_reset_time"}
        assert result[token.id]["sign_up_time"] is not None

    def test_unknown_field_rejected(self, app, make_token):
        token = make_token("billing")

        with pytest.raises(ValidationFailed):
            EventAggregator.derived_fields([token], ["last_password_change"])

    def test_collect_one_query_per_type(self, app, make_token, query_counter):
        tokens = [make_token(f"app{i}") for i in range(15)]
        # Load the instances expired by the commits above
        token_ids = [t.id for t in tokens]
        before = len(query_counter)

        result = EventAggregator.collect(tokens, [EVENT_SIGN_UP, EVENT_SIGN_IN, EVENT_RESET_REQUEST, EVENT_SIGN_IN])

        assert len(query_counter) - before == 3
        assert all(EVENT_SIGN_UP in result[token_id] for token_id in token_ids)
        assert not any(EVENT_SIGN_IN in result[token_id] for token_id in token_ids)

    def test_collect_without_tokens(self, app, query_counter):
        assert EventAggregator.collect([], [EVENT_SIGN_IN]) == {}
        assert query_counter == []
