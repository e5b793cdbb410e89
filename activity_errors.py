"""Errors raised while building the activity report."""


class ActivityReportError(Exception):
    pass


class ConfigurationError(ActivityReportError):
    """A required setting is missing or unreadable."""


class ParseError(ActivityReportError):
    """The activity feed is not a well-formed feed document."""


class ValidationError(ActivityReportError):
    pass


class NetworkError(ActivityReportError):
    """Transport failure or non-2xx answer from Jira."""


class RetryableError(NetworkError):
    """The request timed out; running again may succeed."""


class ResolutionError(ActivityReportError):
    """The parent chain of a ticket could not be walked to an end."""
