"""
Services package

Business operations composed from the repositories:
- event_aggregator.py     batched most-recent event times
- token_authenticator.py  (app_name, secret) checks
- token_lifecycle.py      create / update / reset / delete
- token_listing.py        load, enrich, filter, sort, paginate
"""

from .event_aggregator import EventAggregator
from .token_authenticator import TokenAuthenticator
from .token_lifecycle import TokenLifecycle
from .token_listing import TokenListing

__all__ = [
    "EventAggregator",
    "TokenAuthenticator",
    "TokenLifecycle",
    "TokenListing",
]
