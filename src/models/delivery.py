from dataclasses import dataclass
from datetime import datetime


@dataclass
class NotificationAttempt:
    """One POST of a webhook notification to a merchant endpoint."""

    attempt_id: str
    transaction_id: str
    url: str
    status_code: int | None
    timestamp: datetime
    response_time_ms: float
    error: str | None = None

    @property
    def accepted(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300
