import os
from dataclasses import dataclass

from activity_errors import ConfigurationError

# check here for the correct exclude value:
#   <jira_url>/rest/activity-stream/1.0/config
REQUIRED_ENV = {
    "topix_field": "J_TOPIX_FIELD_NAME",
    "job_field": "J_JOB_FIELD_NAME",
    "jira_url": "J_JIRA_URL",
    "exclude_fragment": "J_EXCLUDE_CONFLUENCE",
    "token": "J_JIRA_TOKEN",
    "default_user": "J_DEFAULT_USER",
}

DEFAULT_TIME_ZONE_OFFSET = -7
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_MAX_PARENT_HOPS = 10


@dataclass(frozen=True)
class ActivityConfig:
    """Settings for one report run, read once at startup."""

    topix_field: str
    job_field: str
    jira_url: str
    exclude_fragment: str
    token: str
    default_user: str
    time_zone_offset: int = DEFAULT_TIME_ZONE_OFFSET
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_parent_hops: int = DEFAULT_MAX_PARENT_HOPS

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        missing = [name for name in REQUIRED_ENV.values() if not (environ.get(name) or "").strip()]
        if missing:
            raise ConfigurationError(f"env var(s) required: {', '.join(missing)}")

        values = {attr: environ[name].strip() for attr, name in REQUIRED_ENV.items()}
        values["jira_url"] = values["jira_url"].rstrip("/")
        return cls(
            time_zone_offset=_env_number(environ, "J_TIME_ZONE_OFFSET", DEFAULT_TIME_ZONE_OFFSET, int),
            request_timeout=_env_number(environ, "J_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float),
            max_parent_hops=_env_number(environ, "J_MAX_PARENT_HOPS", DEFAULT_MAX_PARENT_HOPS, int),
            **values,
        )

    def browse_url(self, ticket):
        return f"{self.jira_url}/browse/{ticket}"

    def issue_url(self, ticket):
        return f"{self.jira_url}/rest/api/latest/issue/{ticket}"


def _env_number(environ, name, default, kind):
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"env var {name} must be a number, got {raw!r}") from None
