"""
Event Aggregator - most recent event times for a set of tokens

Lets the listing treat event-derived values (last_sign_in_time, sign_up_time,
last_reset_time) like ordinary columns without one query per token: each
requested event type costs exactly one grouped query.
"""

from typing import Dict, Iterable, Optional

from tokenkeep.constants import DERIVED_FIELDS
from tokenkeep.exceptions import ValidationFailed
from tokenkeep.repositories.tokenevent_repository import TokenEventRepository


class EventAggregator:
    """Batch merge of per-token event aggregates"""

    @staticmethod
    def collect(tokens, event_types: Iterable[str]) -> Dict[int, Dict[str, object]]:
        """Map token id -> {event_type: most recent occurred_at} for the given types"""
        token_ids = {token.id for token in tokens}
        result = {token_id: {} for token_id in token_ids}
        if not token_ids:
            return result

        for event_type in dict.fromkeys(event_types):
            latest = TokenEventRepository.most_recent_batch(token_ids, event_type)
            for token_id, occurred_at in latest.items():
                result[token_id][event_type] = occurred_at
        return result

    @staticmethod
    def derived_fields(tokens, fields: Optional[Iterable[str]] = None) -> Dict[int, Dict[str, object]]:
        """
        Map token id -> {derived field: datetime or None}.
        Every token gets every requested field, absent events as None.
        """
        fields = list(dict.fromkeys(fields or DERIVED_FIELDS))
        for field in fields:
            if field not in DERIVED_FIELDS:
                raise ValidationFailed(f"Unknown derived field '{field}'", field=field)

        tokens = list(tokens)
        latest = EventAggregator.collect(tokens, [DERIVED_FIELDS[field] for field in fields])
        return {
            token.id: {field: latest[token.id].get(DERIVED_FIELDS[field]) for field in fields}
            for token in tokens
        }
