from tokenkeep.app import create_app
from tokenkeep.metrics import metrics_snapshot
from tokenkeep.presentation import describe_event
from tokenkeep.repositories.tokenevent_repository import TokenEventRepository
from tokenkeep.services import TokenListing
from tokenkeep.utils import format_datetime


def list_tokens(show_events=False, show_metrics=False):
    with create_app().app_context():
        if show_metrics:
            output, _ = metrics_snapshot()
            print(output.decode("utf-8"))

        listing = TokenListing.list_tokens()
        if not listing["rows"]:
            print("No tokens found in the database.")
            return

        print(f"Tokens found ({listing['count']}):")
        for row in listing["rows"]:
            state = "enabled" if row["enabled"] else "disabled"
            last_used = format_datetime(row["last_sign_in_time"]) or "never"
            print(f"- {row['app_name']} (ID: {row['id']}, {state}, last used: {last_used})")
            if show_events:
                for event in TokenEventRepository.list_for_token(row["id"]):
                    print(f"    {describe_event(event)}")


if __name__ == "__main__":
    import sys

    list_tokens(show_events="--events" in sys.argv, show_metrics="--metrics" in sys.argv)
