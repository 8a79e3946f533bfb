import hashlib
import hmac


def generate_signature(body: bytes | str, secret: str, algorithm=hashlib.sha256) -> str:
    """Generate the lowercase hex HMAC of a raw webhook body."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, algorithm).hexdigest()


def verify_signature(body: bytes | str, secret: str, signature: str, algorithm=hashlib.sha256) -> bool:
    """Check a provided signature against the body in constant time.

    Any mismatch, including a different length or a value that is not text,
    is reported as False.
    """
    if not isinstance(signature, str):
        return False
    expected = generate_signature(body, secret, algorithm)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
