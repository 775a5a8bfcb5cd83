"""
Human-readable rendering of token events.

Events are stored as structured records (type, app name, actor, note);
sentences like "Token for billing created by admin on ..." are only built
here, at the presentation boundary.
"""

from tokenkeep.constants import (
    EVENT_CHECK_FAILED,
    EVENT_RESET_REQUEST,
    EVENT_SIGN_IN,
    EVENT_SIGN_UP,
)
from tokenkeep.utils import format_datetime


def describe_event(event):
    """Build the audit sentence for a TokenEvent (or a dict with the same keys)."""
    if isinstance(event, dict):
        fields = event
    else:
        fields = event.to_dict()

    app_name = fields.get("app_name") or "unknown application"
    actor = fields.get("actor")
    when = format_datetime(fields.get("occurred_at"))
    event_type = fields.get("event_type")

    if event_type == EVENT_SIGN_UP:
        if actor:
            sentence = f"Token for {app_name} created by {actor} on {when}."
        else:
            sentence = f"Token for {app_name} created on {when}."
    elif event_type == EVENT_SIGN_IN:
        sentence = f"Token for {app_name} used at {when}."
    elif event_type == EVENT_CHECK_FAILED:
        sentence = f"Token for {app_name} check failed at {when}."
    elif event_type == EVENT_RESET_REQUEST:
        if actor:
            sentence = f"Token for {app_name} has been reset by {actor} on {when}."
        else:
            sentence = f"Token for {app_name} has been reset on {when}."
    else:
        sentence = f"Token for {app_name}: {event_type} at {when}."

    note = fields.get("description")
    if note:
        sentence = f"{sentence} {note}"
    return sentence
