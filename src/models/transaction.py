from enum import Enum


class _WireEnum(Enum):
    """Enum that also accepts member names and any letter case on the wire."""

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        key = value.strip().upper()
        for member in cls:
            if key in (member.value, member.name):
                return member
        return None


class TransactionStatus(_WireEnum):
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"
    AUTHORIZED = "AUTHORIZED"  # funds held, awaiting capture
    REFUNDED = "REFUNDED"


class TransactionType(_WireEnum):
    SALE = "SALE"
    AUTH = "AUTH"
    CAPTURE = "CAPT"
    REFUND = "REFUND"
    VOID = "VOID"
