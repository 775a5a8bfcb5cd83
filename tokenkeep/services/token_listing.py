"""
Token Listing - filtered, sorted and paginated view of all tokens

Order is fixed: load -> enrich -> filter -> sort -> paginate. Enrichment runs
first because filters and sorting may reference the event-derived fields.
"""

from typing import Any, Dict, List, Optional

import structlog
from flask import current_app

from tokenkeep.constants import DEFAULT_SETTINGS, DERIVED_FIELDS, TOKEN_FIELDS
from tokenkeep.exceptions import ValidationFailed, translate_storage_errors
from tokenkeep.metrics import listing_duration_seconds, track_duration
from tokenkeep.repositories.token_repository import TokenRepository
from tokenkeep.services.event_aggregator import EventAggregator
from tokenkeep.utils import date_fragments, natural_sort_key

logger = structlog.get_logger("listing")

# Derived fields always merged into rows
LISTED_DERIVED_FIELDS = ("last_sign_in_time", "sign_up_time")

SORT_ORDERS = ("asc", "desc")


def _listing_settings():
    settings = current_app.config.get("TOKENKEEP") or DEFAULT_SETTINGS
    return settings.get("listing", DEFAULT_SETTINGS["listing"])


def _render_text(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def matches_text(value, needle):
    """Case-insensitive substring match against the stored value"""
    return needle.casefold() in _render_text(value).casefold()


def matches_event_time(value, needle, unknown_label):
    """
    Match a derived timestamp when its weekday, month or year alone
    contains the value.
    A missing timestamp only matches the unknown label itself.
    """
    if value is None:
        return needle.strip().casefold() == unknown_label.casefold()
    needle = needle.casefold()
    return any(needle in fragment.casefold() for fragment in date_fragments(value))


class TokenListing:
    """Listing pipeline over the token store and the event aggregator"""

    @staticmethod
    def _validate(filters, sort_field, sort_order, page, size, fields):
        for name in filters:
            if name not in fields:
                raise ValidationFailed(f"Cannot filter on '{name}'", field=name)
        if sort_field not in fields:
            raise ValidationFailed(f"Cannot sort on '{sort_field}'", field="sort_field")
        if sort_order not in SORT_ORDERS:
            raise ValidationFailed("Sort order must be 'asc' or 'desc'", field="sort_order")
        if (page is None) != (size is None):
            raise ValidationFailed("Page and size must be given together", field="page")
        if page is not None:
            if int(page) < 0:
                raise ValidationFailed("Page must not be negative", field="page")
            if int(size) <= 0:
                raise ValidationFailed("Size must be positive", field="size")

    @staticmethod
    @track_duration(listing_duration_seconds)
    @translate_storage_errors
    def list_tokens(
        filters: Optional[Dict[str, str]] = None,
        sort_field: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Optional[int] = None,
        size: Optional[int] = None,
        derived: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Returns {"count": total tokens, "count_filtered": tokens left after
        filtering, "rows": the requested page}. Rows are plain dicts of the
        token fields plus derived event times; the secret is never included.
        """
        settings = _listing_settings()
        filters = filters or {}
        sort_field = sort_field or settings.get("default_sort_field", "app_name")
        sort_order = (sort_order or settings.get("default_sort_order", "asc")).lower()
        unknown_label = settings.get("unknown_label", "Unknown")

        for name in derived or []:
            if name not in DERIVED_FIELDS:
                raise ValidationFailed(f"Unknown derived field '{name}'", field=name)

        derived_fields = list(LISTED_DERIVED_FIELDS)
        for name in list(derived or []) + [sort_field, *filters]:
            if name in DERIVED_FIELDS and name not in derived_fields:
                derived_fields.append(name)

        TokenListing._validate(filters, sort_field, sort_order, page, size, TOKEN_FIELDS + tuple(DERIVED_FIELDS))

        # 1. Load: unfiltered, unsorted, unpaginated
        tokens = TokenRepository.get_all()
        total = len(tokens)

        # 2. Enrich: one grouped query per derived field
        computed = EventAggregator.derived_fields(tokens, derived_fields)
        rows = []
        for token in tokens:
            row = token.to_dict()
            row.update(computed[token.id])
            rows.append(row)

        # 3. Filter
        for name, value in filters.items():
            if value is None or str(value) == "":
                continue
            value = str(value)
            if name in DERIVED_FIELDS:
                rows = [row for row in rows if matches_event_time(row[name], value, unknown_label)]
            else:
                rows = [row for row in rows if matches_text(row[name], value)]

        # 4. Count filtered results
        total_filtered = len(rows)

        # 5. Sort (stable in both directions)
        rows = sorted(rows, key=lambda row: natural_sort_key(row[sort_field]), reverse=sort_order == "desc")

        # 6. Paginate
        if page is not None and size is not None:
            offset = int(size) * int(page)
            rows = rows[offset:offset + int(size)]

        logger.debug(
            "Token listing built",
            count=total,
            count_filtered=total_filtered,
            rows=len(rows),
            sort_field=sort_field,
            sort_order=sort_order,
        )
        return {
            "count": total,
            "count_filtered": total_filtered,
            "rows": rows,
        }
