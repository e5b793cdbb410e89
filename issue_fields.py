"""Topix/job number lookup for a ticket, walking up the parent chain."""
import json
import logging
import re
from typing import NamedTuple

from activity_errors import NetworkError, ResolutionError
from jira_http import jira_get

logger = logging.getLogger(__name__)

TICKET_RE = re.compile(r"\w+-\d+", re.ASCII)
PARENT_PATH = "fields.parent.key"
MISSING = "Missing"


class IssueFields(NamedTuple):
    topix_number: str
    job_number: str


def is_valid_ticket(ticket):
    return bool(ticket) and TICKET_RE.fullmatch(ticket.strip()) is not None


def lookup_path(document, path):
    cur = document
    for part in path.split("."):
        if not isinstance(cur, dict):
            return None
        cur = cur.get(part)
    return cur


def field_text(value):
    """Render a Jira field value as display text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        # select-list options carry "value", users/versions carry "name"
        for k in ("value", "name", "key"):
            if isinstance(value.get(k), str):
                return value[k]
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, list):
        return ", ".join(t for t in (field_text(v) for v in value) if t)
    return str(value)


class IssueFieldResolver:
    def __init__(self, session, config):
        self.session = session
        self.config = config

    def fetch_issue(self, ticket):
        r = jira_get(self.session, self.config.issue_url(ticket), self.config.request_timeout)
        try:
            return r.json()
        except ValueError as e:
            raise NetworkError(f"issue {ticket}: response is not JSON") from e

    def resolve(self, ticket):
        """
        Return the topix and job numbers for ``ticket``.

        When the ticket has no topix number, its parent is asked next, and so
        on up the chain; the job number comes from the same ticket as the
        topix number. A chain ending without one yields ``"Missing"`` with the
        last ticket's job number.
        """
        topix_path = f"fields.{self.config.topix_field}"
        job_path = f"fields.{self.config.job_field}"

        current, visited = ticket, []
        while True:
            if not is_valid_ticket(current):
                return IssueFields(f"Invalid ticket number {current}", "")
            if current in visited:
                chain = " -> ".join(visited + [current])
                raise ResolutionError(f"cyclic parent chain for {ticket}: {chain}")
            if len(visited) > self.config.max_parent_hops:
                raise ResolutionError(
                    f"parent chain of {ticket} is longer than {self.config.max_parent_hops} hops"
                )
            visited.append(current)

            issue = self.fetch_issue(current)
            topix = field_text(lookup_path(issue, topix_path))
            job = field_text(lookup_path(issue, job_path))
            parent = field_text(lookup_path(issue, PARENT_PATH)).strip()

            if topix.strip():
                return IssueFields(topix, job)
            if not parent:
                return IssueFields(MISSING, job)
            logger.debug("%s has no topix number, trying parent %s", current, parent)
            current = parent


def resolve_safely(resolver, ticket):
    """resolve(), degrading a failed lookup of one ticket to placeholders."""
    try:
        return resolver.resolve(ticket)
    except (NetworkError, ResolutionError) as e:
        logger.warning("Could not resolve fields for %s: %s", ticket, e)
        return IssueFields(MISSING, "")
