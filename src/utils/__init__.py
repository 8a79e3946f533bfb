from .crypto import generate_signature, verify_signature
from .fields import FIELD_ALIASES, first_present, lookup

__all__ = [
    "generate_signature", "verify_signature",
    "FIELD_ALIASES", "first_present", "lookup",
]
