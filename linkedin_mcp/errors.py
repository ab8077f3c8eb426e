"""
Failure taxonomy for LinkedIn tool calls.

Every expected failure inside a tool pipeline derives from LinkedInError. The
message is what the caller sees; upstream failures embed the HTTP status and
the raw body.
"""


class LinkedInError(Exception):
    """
    Base class for every expected failure of a tool call.

    Attributes:
        message: Human-readable error description, surfaced to the caller
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnknownAccount(LinkedInError):
    """The account key is not part of the fixed catalog."""


class MissingCredential(LinkedInError):
    """No secret is configured for the requested account."""


class MalformedInput(LinkedInError):
    """Tool arguments violate their declared constraints."""


class UpstreamError(LinkedInError):
    """
    LinkedIn answered with a non-success status.

    The body is kept exactly as received (not re-parsed) so the caller sees
    LinkedIn's own diagnostic.

    Attributes:
        status: HTTP status code returned by LinkedIn
        body: Raw response text
    """

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"LinkedIn API {status}: {body}")
