import logging

import requests

from activity_errors import NetworkError, RetryableError

logger = logging.getLogger(__name__)


def jira_session(config):
    s = requests.Session()
    # static token, sent as-is (e.g. "Bearer <pat>")
    s.headers.update({"Authorization": config.token})
    return s


def jira_get(session, url, timeout):
    logger.debug("GET %s", url)
    try:
        r = session.get(url, timeout=timeout)
    except requests.Timeout as e:
        raise RetryableError(f"timed out after {timeout}s fetching {url}") from e
    except requests.RequestException as e:
        raise NetworkError(f"request to {url} failed: {e}") from e

    if not 200 <= r.status_code < 300:
        raise NetworkError(f"HTTP {r.status_code} from {url}: {r.text[:200]}")
    return r
