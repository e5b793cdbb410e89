import json

import pytest

from activity_config import ActivityConfig


class FakeResponse:
    def __init__(self, body=None, status_code=200, content=None):
        self.status_code = status_code
        self._body = body
        if content is None:
            content = json.dumps(body).encode("utf-8") if body is not None else b""
        self.content = content
        self.text = content.decode("utf-8", "replace")

    def json(self):
        return json.loads(self.content)


class FakeSession:
    """Answers GETs from a url -> response (or exception) table."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        answer = self.routes[url]
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def config():
    return ActivityConfig(
        topix_field="customfield_100",
        job_field="customfield_200",
        jira_url="https://jira.example.com",
        exclude_fragment="streams=key+NOT+CONF",
        token="Bearer secret",
        default_user="jdoe",
    )


@pytest.fixture
def issue_route(config):
    def route(ticket, topix=None, job=None, parent=None, status_code=200):
        fields = {config.topix_field: topix, config.job_field: job}
        if parent:
            fields["parent"] = {"key": parent}
        return config.issue_url(ticket), FakeResponse({"key": ticket, "fields": fields}, status_code)
    return route
