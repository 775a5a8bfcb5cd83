import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_DIR = os.environ.get("TOKENKEEP_CONFIG_DIR", os.path.join(APP_DIR, "config"))
DB_FILE = os.path.join(CONFIG_DIR, "tokenkeep.db")
CONFIG_FILE = os.environ.get("TOKENKEEP_CONFIG", os.path.join(CONFIG_DIR, "settings.yaml"))

TOKENKEEP_DB = "sqlite:///" + DB_FILE

# Token event types
EVENT_SIGN_UP = "sign_up"
EVENT_SIGN_IN = "sign_in"
EVENT_CHECK_FAILED = "check_failed"
EVENT_RESET_REQUEST = "reset_request"

EVENT_TYPES = (
    EVENT_SIGN_UP,
    EVENT_SIGN_IN,
    EVENT_CHECK_FAILED,
    EVENT_RESET_REQUEST,
)

# Listing fields computed from the event log
DERIVED_FIELDS = {
    "last_sign_in_time": EVENT_SIGN_IN,
    "sign_up_time": EVENT_SIGN_UP,
    "last_reset_time": EVENT_RESET_REQUEST,
}

# Token columns a listing may sort or filter on (secret is never exposed)
TOKEN_FIELDS = ("id", "app_name", "display_name", "enabled", "created_at", "updated_at")

# Fields an update may change; app_name is fixed at creation
UPDATABLE_FIELDS = ("display_name", "enabled")

# Fixed English names keep the date filter locale independent
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

UNKNOWN_LABEL = "Unknown"

DEFAULT_SETTINGS = {
    "database": {
        "uri": TOKENKEEP_DB,
    },
    "tokens": {
        "secret_bytes": 16,
        "max_secret_attempts": 10,
    },
    "listing": {
        "default_sort_field": "app_name",
        "default_sort_order": "asc",
        "unknown_label": UNKNOWN_LABEL,
    },
    "logging": {
        "level": "INFO",
        "format": "console",
    },
}
