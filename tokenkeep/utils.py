import logging
import re
from datetime import datetime, timezone

from tokenkeep.constants import MONTH_NAMES, WEEKDAY_NAMES


# Custom logging formatter to support colors
class ColoredFormatter(logging.Formatter):
    # Define color codes
    COLORS = {
        'DEBUG': '\033[94m',   # Blue
        'INFO': '\033[92m',    # Green
        'WARNING': '\033[93m', # Yellow
        'ERROR': '\033[91m',   # Red
        'CRITICAL': '\033[95m' # Magenta
    }
    RESET = '\033[0m'  # Reset color

    def format(self, record):
        # Add color to the log level name
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"

        return super().format(record)


def sanitize_sensitive_data(data, sensitive_keys=None):
    """
    Remove or mask sensitive data before logging.

    Args:
        data: Dictionary, list or other data to sanitize
        sensitive_keys: List of keys to mask (default: token credential keys)

    Returns:
        Sanitized version of the data
    """
    if sensitive_keys is None:
        sensitive_keys = ['secret', 'token', 'api_token', 'password', 'authorization']

    if isinstance(data, dict):
        sanitized = {}
        for k, v in data.items():
            key_lower = str(k).lower()
            if any(sens in key_lower for sens in sensitive_keys):
                # Show only first 2 and last 2 chars if string, else mask completely
                if isinstance(v, str) and len(v) > 4:
                    sanitized[k] = f"{v[:2]}***{v[-2:]}"
                else:
                    sanitized[k] = "***"
            elif isinstance(v, (dict, list)):
                sanitized[k] = sanitize_sensitive_data(v, sensitive_keys)
            else:
                sanitized[k] = v
        return sanitized

    elif isinstance(data, list):
        return [sanitize_sensitive_data(item, sensitive_keys) if isinstance(item, (dict, list)) else item for item in data]

    return data


def now_utc():
    """Returns current datetime in UTC (aware)"""
    return datetime.now(timezone.utc)


def ensure_utc(dt):
    """
    Ensure a datetime object is aware and in UTC.
    Handles ISO strings, None, and naive datetimes (assumed UTC, as SQLite stores them).
    """
    if dt is None:
        return None

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt.replace('Z', '+00:00'))
        except (ValueError, TypeError):
            return None

    if not hasattr(dt, 'tzinfo'):
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def format_datetime(dt, format="%Y-%m-%d %H:%M:%S"):
    """Format a datetime in UTC; naive values are assumed to be UTC."""
    dt = ensure_utc(dt)
    if dt is None:
        return None
    return dt.strftime(format)


def date_fragments(dt):
    """
    Split the searchable part of a timestamp into (weekday, month, year),
    e.g. ("Friday", "January", "2026"). Names are fixed English, not locale dependent.
    """
    dt = ensure_utc(dt)
    if dt is None:
        return None
    return WEEKDAY_NAMES[dt.weekday()], MONTH_NAMES[dt.month - 1], f"{dt.year:04d}"


_digits = re.compile(r'(\d+)')


def natural_sort_key(value):
    """
    Case-insensitive natural ordering key, so "token2" sorts before "token10".
    None sorts as the empty string; booleans as 0/1; datetimes by ISO form.
    """
    if value is None:
        text = ""
    elif isinstance(value, bool):
        text = str(int(value))
    elif isinstance(value, datetime):
        text = ensure_utc(value).isoformat()
    else:
        text = str(value)

    # re.split with a capture group keeps text at even and digits at odd positions
    parts = _digits.split(text.casefold())
    return tuple(int(part) if i % 2 else part for i, part in enumerate(parts))
