from enum import Enum


class ErrorKind(Enum):
    """What went wrong, independent of which call raised it."""

    # Outbound API calls
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    API = "api"
    NETWORK = "network"

    # Inbound webhooks
    FORGED = "forged"
    MALFORMED = "malformed"
    SCHEMA_MISMATCH = "schema_mismatch"


# HTTP status a webhook endpoint should answer with for each rejection kind.
WEBHOOK_REJECTION_STATUS = {
    ErrorKind.FORGED: 403,
    ErrorKind.MALFORMED: 400,
    ErrorKind.SCHEMA_MISMATCH: 400,
}


class GatewayError(Exception):
    """Raised for every failure surfaced by this library.

    The ``kind`` attribute tells callers how to react; the remaining attributes
    are filled in when the gateway answered with an HTTP error.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.API,
        status_code: int | None = None,
        response_body: str | None = None,
        errors: dict | list | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.response_body = response_body
        self.errors = errors if errors is not None else []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class InvalidSignatureError(GatewayError):
    """An inbound webhook was rejected and must not be processed.

    ``kind`` is one of FORGED (signature mismatch), MALFORMED (body is not a
    JSON object) or SCHEMA_MISMATCH (valid JSON that does not describe a
    transaction this library understands).
    """

    def __init__(self, message: str = "Invalid webhook signature", kind: ErrorKind = ErrorKind.FORGED):
        if kind not in WEBHOOK_REJECTION_STATUS:
            raise ValueError(f"{kind} is not a webhook rejection kind")
        super().__init__(message, kind=kind, status_code=WEBHOOK_REJECTION_STATUS[kind])

    @property
    def http_status(self) -> int:
        return WEBHOOK_REJECTION_STATUS[self.kind]
