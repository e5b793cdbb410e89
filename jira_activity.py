#!/usr/bin/env python3
import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

from activity_config import ActivityConfig
from activity_errors import ActivityReportError, ConfigurationError, ValidationError
from activity_feed import group_entries, parse_feed
from activity_render import print_report
from issue_fields import IssueFieldResolver, resolve_safely
from jira_http import jira_get, jira_session

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d-%m-%Y"
DEFAULT_MAX_RESULTS = 100


# ---------- Query window ----------
def parse_report_date(value, today=None):
    """DD-MM-YYYY, or DD-MM for the current year."""
    today = today or datetime.now()
    value = (value or "").strip()
    if len(value) < 10:
        value = f"{value}-{today.year}"
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"date {value!r} is not DD-MM or DD-MM-YYYY") from None


def query_window(day, offset_hours):
    start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc) + timedelta(hours=offset_hours)
    return start, start + timedelta(hours=24)


def to_millis(dt):
    return int(dt.timestamp() * 1000)


def build_activity_url(config, user, start, end, max_results=DEFAULT_MAX_RESULTS):
    # assembled by hand: the stream filters use literal "+" separators
    parts = [
        f"streams=user+IS+{quote(user)}",
        f"streams=update-date+BETWEEN+{to_millis(start)}+{to_millis(end)}",
        f"maxResults={max_results}",
        config.exclude_fragment.lstrip("&"),
    ]
    return f"{config.jira_url}/activity?" + "&".join(p for p in parts if p)


# ---------- Main ----------
def parse_args(argv=None, default_user=None):
    ap = argparse.ArgumentParser(
        description="Print a user's Jira activity for one day, grouped by ticket with topix/job numbers."
    )
    ap.add_argument("-u", dest="user", default=default_user,
                    help="User name (default: $J_DEFAULT_USER)")
    ap.add_argument("-d", dest="date", default=datetime.now().strftime("%d-%m"),
                    help="Date as DD-MM-YYYY or DD-MM (default: today)")
    ap.add_argument("--max-results", type=int, default=DEFAULT_MAX_RESULTS,
                    help="Maximum number of activity entries to fetch")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap.parse_args(argv)


def run(config, args, out=None):
    out = out or sys.stdout
    user = (args.user or "").strip()
    if not user:
        raise ValidationError("username can't be empty")
    if args.max_results < 1:
        raise ValidationError("--max-results must be at least 1")

    start, end = query_window(parse_report_date(args.date), config.time_zone_offset)
    print(f"Username: {user} active from {start.strftime(DATE_FORMAT)} to {end.strftime(DATE_FORMAT)}", file=out)

    session = jira_session(config)
    url = build_activity_url(config, user, start, end, args.max_results)
    feed = parse_feed(jira_get(session, url, config.request_timeout).content)
    groups = group_entries(feed.entries)
    logger.debug("%d entries in %d groups", len(feed.entries), len(groups))

    resolver = IssueFieldResolver(session, config)
    print_report(groups, lambda ticket: resolve_safely(resolver, ticket), config.browse_url, out)
    return groups


def main(argv=None):
    args = parse_args(argv)
    try:
        config = ActivityConfig.from_env()
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    if args.user is None:
        args.user = config.default_user

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(message)s")
    try:
        run(config, args)
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except ActivityReportError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    # Env vars required:
    #   J_JIRA_URL            (e.g., https://jira.example.com)
    #   J_JIRA_TOKEN          (sent as the Authorization header, e.g. "Bearer <pat>")
    #   J_DEFAULT_USER
    #   J_TOPIX_FIELD_NAME    (e.g., customfield_12345)
    #   J_JOB_FIELD_NAME
    #   J_EXCLUDE_CONFLUENCE  (activity-stream query fragment)
    sys.exit(main())
