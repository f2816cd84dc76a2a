from __future__ import annotations


class TeamsNotifyError(RuntimeError):
    pass


class ValidationError(TeamsNotifyError):
    pass


class MalformedURL(ValidationError):
    pass


class URLPatternMismatch(ValidationError):
    pass


class MissingTitle(ValidationError):
    pass


class MissingText(ValidationError):
    pass


class SerializationError(TeamsNotifyError):
    pass


class SendError(TeamsNotifyError):
    pass


class InvalidDestination(SendError):
    pass


class InvalidMessage(SendError):
    pass


class SerializationFailed(SendError):
    pass


class SendTimeout(SendError):
    pass


class TransportFailure(SendError):
    pass


class EndpointError(SendError):
    def __init__(self, status_code: int, reason: str, body: str) -> None:
        super().__init__(f"error on code: {status_code} {reason}, {body!r}")
        self.status_code = status_code
        self.reason = reason
        self.body = body


class UnexpectedResponseBody(SendError):
    def __init__(self, body: str, expected: str) -> None:
        super().__init__(f"got {body!r}, expected {expected!r}: message unsuccessful, invalid webhook response text")
        self.body = body
        self.expected = expected
