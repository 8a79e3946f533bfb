import hashlib
import json
from decimal import Decimal

import pytest

from src.errors import ErrorKind, InvalidSignatureError
from src.models.transaction import TransactionStatus, TransactionType
from src.utils.crypto import generate_signature
from src.webhook_verifier.verifier import WebhookVerifier


SALE_BODY = b'{"transactionId":"TXN1","status":"PROCESSED","transactionType":"SALE","amount":50.00,"currency":"EUR"}'


class TestVerifySignature:
    """Tests for WebhookVerifier.verify_signature()."""

    @pytest.mark.unit
    def test_valid_signature(self, verifier):
        sig = generate_signature(SALE_BODY, "sec")
        assert verifier.verify_signature(SALE_BODY, sig, "sec") is True

    @pytest.mark.unit
    def test_mismatch_is_false_not_an_error(self, verifier):
        assert verifier.verify_signature(SALE_BODY, "wrong", "sec") is False

    @pytest.mark.unit
    def test_configured_algorithm_is_used(self):
        verifier = WebhookVerifier(algorithm=hashlib.sha1)
        sha1_sig = generate_signature(SALE_BODY, "sec", algorithm=hashlib.sha1)
        assert verifier.verify_signature(SALE_BODY, sha1_sig, "sec") is True
        assert verifier.verify_signature(SALE_BODY, generate_signature(SALE_BODY, "sec"), "sec") is False


class TestParseSigned:
    """Tests for WebhookVerifier.parse() with signature verification."""

    @pytest.mark.unit
    def test_successful_parse(self, verifier):
        sig = generate_signature(SALE_BODY, "sec")
        payload = verifier.parse(SALE_BODY, sig, "sec")

        assert payload.transaction_id == "TXN1"
        assert payload.status is TransactionStatus.PROCESSED
        assert payload.transaction_type is TransactionType.SALE
        assert payload.amount == Decimal("50.00")
        assert payload.currency == "EUR"
        assert payload.is_processed() is True
        assert payload.is_declined() is False

    @pytest.mark.unit
    def test_declined_classification(self, verifier):
        body = SALE_BODY.replace(b"PROCESSED", b"DECLINED")
        payload = verifier.parse(body, generate_signature(body, "sec"), "sec")

        assert payload.is_processed() is False
        assert payload.is_declined() is True

    @pytest.mark.unit
    def test_bad_signature_fails_closed(self, verifier):
        with pytest.raises(InvalidSignatureError) as exc_info:
            verifier.parse(b'{"a":1}', "wrong", "s")

        assert exc_info.value.kind is ErrorKind.FORGED
        assert exc_info.value.http_status == 403

    @pytest.mark.unit
    def test_bad_signature_is_checked_before_parsing(self, verifier, monkeypatch):
        from src.models.webhook import WebhookPayload

        def fail(*args, **kwargs):
            raise AssertionError("payload must not be built for a forged body")

        monkeypatch.setattr(WebhookPayload, "from_dict", fail)
        with pytest.raises(InvalidSignatureError):
            verifier.parse(SALE_BODY, "0" * 64, "sec")

    @pytest.mark.unit
    def test_tampered_body_is_rejected(self, verifier):
        sig = generate_signature(SALE_BODY, "sec")
        tampered = SALE_BODY.replace(b"50.00", b"5000.00")
        with pytest.raises(InvalidSignatureError) as exc_info:
            verifier.parse(tampered, sig, "sec")
        assert exc_info.value.kind is ErrorKind.FORGED

    @pytest.mark.unit
    def test_malformed_json_with_valid_signature(self, verifier):
        body = b"{not json"
        with pytest.raises(InvalidSignatureError) as exc_info:
            verifier.parse(body, generate_signature(body, "sec"), "sec")

        assert exc_info.value.kind is ErrorKind.MALFORMED
        assert exc_info.value.http_status == 400
        assert str(exc_info.value).startswith("invalid payload")


class TestParseUnsigned:
    """Tests for WebhookVerifier.parse() without a signature or secret."""

    @pytest.mark.unit
    def test_unsigned_parse_skips_verification(self, verifier):
        payload = verifier.parse(SALE_BODY, None, None)
        assert payload.transaction_id == "TXN1"

    @pytest.mark.unit
    def test_signature_without_secret_skips_verification(self, verifier):
        assert verifier.parse(SALE_BODY, "garbage", None).transaction_id == "TXN1"

    @pytest.mark.unit
    def test_secret_without_signature_skips_verification(self, verifier):
        assert verifier.parse(SALE_BODY, None, "sec").transaction_id == "TXN1"

    @pytest.mark.unit
    def test_str_body_is_accepted(self, verifier):
        assert verifier.parse(SALE_BODY.decode()).is_processed()

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "body",
        [b"{not json", b"", b"\x80\x81\x82\x83", b"   ", b"[" * 100000 + b"]" * 100000],
        ids=["truncated", "empty", "not-utf8", "blank", "deeply-nested"],
    )
    def test_malformed_body(self, verifier, body):
        with pytest.raises(InvalidSignatureError) as exc_info:
            verifier.parse(body)
        assert exc_info.value.kind is ErrorKind.MALFORMED

    @pytest.mark.unit
    @pytest.mark.parametrize("body", [b"[]", b'"TXN1"', b"42", b"null"])
    def test_non_object_json_is_malformed(self, verifier, body):
        with pytest.raises(InvalidSignatureError) as exc_info:
            verifier.parse(body)
        assert exc_info.value.kind is ErrorKind.MALFORMED
        assert "expected a JSON object" in str(exc_info.value)

    @pytest.mark.unit
    def test_unknown_status_is_schema_mismatch(self, verifier):
        body = SALE_BODY.replace(b"PROCESSED", b"SETTLED")
        with pytest.raises(InvalidSignatureError) as exc_info:
            verifier.parse(body)
        assert exc_info.value.kind is ErrorKind.SCHEMA_MISMATCH
        assert "SETTLED" in str(exc_info.value)

    @pytest.mark.unit
    def test_amount_is_parsed_exactly(self, verifier):
        body = json.dumps({
            "transactionId": "TXN2",
            "status": "PROCESSED",
            "transactionType": "SALE",
            "amount": 0.1,
            "currency": "EUR",
        }).encode()
        assert verifier.parse(body).amount == Decimal("0.1")

    @pytest.mark.unit
    def test_udf_access(self, verifier):
        body = json.dumps({
            "transactionId": "TXN3",
            "status": "PROCESSED",
            "transactionType": "SALE",
            "amount": 10,
            "currency": "EUR",
            "UDF1": "X",
        }).encode()
        payload = verifier.parse(body)
        assert payload.udf(1) == "X"
        assert payload.udf(2) is None
