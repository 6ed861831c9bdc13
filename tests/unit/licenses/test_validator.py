"""
Unit tests for LicenseValidator.
"""
import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from core.domain.exceptions import InvalidArgumentError
from core.domain.value_objects import SignatureAlgorithm, ValidationErrorKind
from licenses.domain.signed_license import SignedLicense
from licenses.domain.validation import ValidationOptions, ValidationResult

VALID_FROM = datetime(2024, 1, 1, tzinfo=timezone.utc)
VALID_TO = datetime(2024, 12, 31, 23, 59, 59, tzinfo=timezone.utc)


def _at(reference, **kwargs):
    return ValidationOptions(reference_time=reference, **kwargs)


class TestSignatureVerification:
    """Tests for signature checks."""

    def test_valid_license(self, validator, signed_license, key_pair, sample_payload, mid_2024):
        """Test a freshly signed license validates."""
        result = validator.validate(signed_license, key_pair.public_key_pem, _at(mid_2024))
        assert result.is_valid is True
        assert result.error_kind is None
        assert result.payload == sample_payload
        assert result.details["license_id"] == sample_payload.license_id
        assert result.details["key_fingerprint_match"] == "true"

    def test_wrong_key(self, validator, signed_license, other_key_pair, mid_2024):
        """Test an unrelated public key gives a signature mismatch."""
        result = validator.validate(signed_license, other_key_pair.public_key_pem, _at(mid_2024))
        assert result.is_valid is False
        assert result.error_kind is ValidationErrorKind.SIGNATURE_MISMATCH
        assert result.payload is None

    @pytest.mark.parametrize(
        "changes",
        [
            {"licensed_to": "Evil Corp"},
            {"valid_to": datetime(2099, 12, 31, tzinfo=timezone.utc)},
            {"metadata": {"seats": "25000", "region": "eu"}},
            {"max_api_calls_per_month": None},
        ],
    )
    def test_tampered_payload(self, validator, signed_license, key_pair, mid_2024, changes):
        """Test any payload change breaks the signature."""
        tampered = replace(signed_license, payload=replace(signed_license.payload, **changes))
        result = validator.validate(tampered, key_pair.public_key_pem, _at(mid_2024))
        assert result.error_kind is ValidationErrorKind.SIGNATURE_MISMATCH

    def test_tampered_signature(self, validator, signed_license, key_pair, mid_2024):
        """Test a modified signature is a mismatch."""
        first = signed_license.signature[0]
        signature = ("A" if first != "A" else "B") + signed_license.signature[1:]
        result = validator.validate(
            replace(signed_license, signature=signature), key_pair.public_key_pem, _at(mid_2024)
        )
        assert result.error_kind is ValidationErrorKind.SIGNATURE_MISMATCH

    def test_algorithm_swap(self, validator, signed_license, key_pair, mid_2024):
        """Test relabelling a PS256 signature as RS256 fails."""
        swapped = replace(signed_license, signature_algorithm="RS256")
        result = validator.validate(swapped, key_pair.public_key_pem, _at(mid_2024))
        assert result.error_kind is ValidationErrorKind.SIGNATURE_MISMATCH

    def test_rs256_license(self, validator, signer, sample_payload, key_pair, mid_2024):
        """Test RS256 licenses validate."""
        signed = signer.sign(sample_payload, key_pair.private_key_pem, algorithm=SignatureAlgorithm.RS256)
        assert validator.validate(signed, key_pair.public_key_pem, _at(mid_2024)).is_valid

    def test_fingerprint_mismatch_is_informational(self, validator, signed_license, key_pair, mid_2024):
        """Test a wrong keyFingerprint field does not fail validation on its own."""
        relabelled = replace(signed_license, key_fingerprint="sha256:" + "0" * 64)
        result = validator.validate(relabelled, key_pair.public_key_pem, _at(mid_2024))
        assert result.is_valid is True
        assert result.details["key_fingerprint_match"] == "false"

    @pytest.mark.parametrize("pem", ["", "garbage", "-----BEGIN PUBLIC KEY-----\nAAAA\n-----END PUBLIC KEY-----"])
    def test_invalid_public_key(self, validator, signed_license, pem, mid_2024):
        """Test unusable public keys are reported as key format errors."""
        result = validator.validate(signed_license, pem, _at(mid_2024))
        assert result.error_kind is ValidationErrorKind.INVALID_KEY_FORMAT
        assert result.message

    def test_private_key_given_as_public_key(self, validator, signed_license, key_pair, mid_2024):
        """Test a private key PEM is not accepted as the public key."""
        result = validator.validate(signed_license, key_pair.private_key_pem, _at(mid_2024))
        assert result.error_kind is ValidationErrorKind.INVALID_KEY_FORMAT

    def test_not_a_signed_license(self, validator, key_pair):
        """Test arbitrary objects are malformed input."""
        result = validator.validate({"payload": {}}, key_pair.public_key_pem)
        assert result.error_kind is ValidationErrorKind.MALFORMED_INPUT

    def test_payload_text_not_encodable(self, validator, signed_license, key_pair, mid_2024):
        """Test a payload holding a lone surrogate is malformed input."""
        payload = replace(signed_license.payload, issuer="Test \ud800 Issuer")
        result = validator.validate(replace(signed_license, payload=payload), key_pair.public_key_pem, _at(mid_2024))
        assert result.error_kind is ValidationErrorKind.MALFORMED_INPUT
        assert result.payload is None


class TestTemporalValidity:
    """Tests for validity window checks."""

    def test_not_yet_valid(self, validator, signed_license, key_pair, sample_payload):
        """Test a license before its window."""
        result = validator.validate(
            signed_license, key_pair.public_key_pem, _at(datetime(2023, 12, 31, tzinfo=timezone.utc))
        )
        assert result.error_kind is ValidationErrorKind.NOT_YET_VALID
        assert result.payload == sample_payload
        assert "2024-01-01T00:00:00.000Z" in result.message

    def test_expired(self, validator, signed_license, key_pair):
        """Test a license after its window."""
        result = validator.validate(
            signed_license, key_pair.public_key_pem, _at(datetime(2025, 1, 1, tzinfo=timezone.utc))
        )
        assert result.is_valid is False
        assert result.error_kind is ValidationErrorKind.EXPIRED

    def test_window_bounds_are_inclusive(self, validator, signed_license, key_pair):
        """Test the exact start and end instants are valid."""
        assert validator.validate(signed_license, key_pair.public_key_pem, _at(VALID_FROM)).is_valid
        assert validator.validate(signed_license, key_pair.public_key_pem, _at(VALID_TO)).is_valid

    def test_one_millisecond_outside(self, validator, signed_license, key_pair):
        """Test one millisecond outside either bound fails."""
        before = _at(VALID_FROM - timedelta(milliseconds=1))
        after = _at(VALID_TO + timedelta(milliseconds=1))
        assert validator.validate(signed_license, key_pair.public_key_pem, before).error_kind is (
            ValidationErrorKind.NOT_YET_VALID
        )
        assert validator.validate(signed_license, key_pair.public_key_pem, after).error_kind is (
            ValidationErrorKind.EXPIRED
        )

    def test_clock_skew_applies_to_both_ends(self, validator, signed_license, key_pair):
        """Test skew tolerance at the start and end of the window."""
        skew = timedelta(seconds=5)
        early = _at(VALID_FROM - timedelta(seconds=5), allowed_clock_skew=skew)
        late = _at(VALID_TO + timedelta(seconds=5), allowed_clock_skew=skew)
        too_late = _at(VALID_TO + timedelta(seconds=6), allowed_clock_skew=skew)
        assert validator.validate(signed_license, key_pair.public_key_pem, early).is_valid
        assert validator.validate(signed_license, key_pair.public_key_pem, late).is_valid
        assert validator.validate(signed_license, key_pair.public_key_pem, too_late).error_kind is (
            ValidationErrorKind.EXPIRED
        )

    def test_grace_period(self, validator, signed_license, key_pair):
        """Test an expired license inside the grace period is accepted and flagged."""
        options = _at(VALID_TO + timedelta(days=2), grace_period=timedelta(days=3))
        result = validator.validate(signed_license, key_pair.public_key_pem, options)
        assert result.is_valid is True
        assert result.details["grace_period"] == "true"
        assert result.details["grace_period_expires_at"] == "2025-01-03T23:59:59.000Z"

    def test_after_grace_period(self, validator, signed_license, key_pair):
        """Test the grace period ends."""
        options = _at(VALID_TO + timedelta(days=4), grace_period=timedelta(days=3))
        result = validator.validate(signed_license, key_pair.public_key_pem, options)
        assert result.error_kind is ValidationErrorKind.EXPIRED

    def test_expires_soon(self, validator, signed_license, key_pair):
        """Test licenses close to expiry are flagged."""
        result = validator.validate(
            signed_license, key_pair.public_key_pem, _at(datetime(2024, 12, 28, tzinfo=timezone.utc))
        )
        assert result.is_valid is True
        assert result.details["expires_soon"] == "true"
        assert result.details["days_until_expiry"] == "3"

    def test_not_expiring_soon(self, validator, signed_license, key_pair, mid_2024):
        """Test licenses far from expiry are not flagged."""
        result = validator.validate(signed_license, key_pair.public_key_pem, _at(mid_2024))
        assert "expires_soon" not in result.details

    def test_validation_is_repeatable(self, validator, signed_license, key_pair, mid_2024):
        """Test validating twice with the same inputs gives the same outcome."""
        first = validator.validate(signed_license, key_pair.public_key_pem, _at(mid_2024))
        second = validator.validate(signed_license, key_pair.public_key_pem, _at(mid_2024))
        assert (first.is_valid, first.error_kind, first.payload) == (
            second.is_valid,
            second.error_kind,
            second.payload,
        )

    def test_default_reference_time_is_now(self, validator, signer, sample_payload, key_pair):
        """Test validation without options uses the current time."""
        now = datetime.now(timezone.utc)
        payload = replace(sample_payload, valid_from=now - timedelta(days=1), valid_to=now + timedelta(days=30))
        signed = signer.sign(payload, key_pair.private_key_pem)
        assert validator.validate(signed, key_pair.public_key_pem).is_valid

    def test_latest_reference_time(self, validator, signed_license, key_pair):
        """Test the latest representable reference time is expired, not an error."""
        latest = datetime.max.replace(tzinfo=timezone.utc)
        options = _at(latest, allowed_clock_skew=timedelta(seconds=5))
        result = validator.validate(signed_license, key_pair.public_key_pem, options)
        assert result.error_kind is ValidationErrorKind.EXPIRED

    def test_earliest_reference_time(self, validator, signed_license, key_pair):
        """Test the earliest representable reference time is not yet valid."""
        earliest = datetime.min.replace(tzinfo=timezone.utc)
        options = _at(earliest, allowed_clock_skew=timedelta(seconds=5))
        result = validator.validate(signed_license, key_pair.public_key_pem, options)
        assert result.error_kind is ValidationErrorKind.NOT_YET_VALID

    def test_unbounded_grace_period(self, validator, signed_license, key_pair):
        """Test a grace period past the calendar limit saturates."""
        latest = datetime.max.replace(tzinfo=timezone.utc)
        options = _at(latest, grace_period=timedelta.max, allowed_clock_skew=timedelta(seconds=5))
        result = validator.validate(signed_license, key_pair.public_key_pem, options)
        assert result.is_valid is True
        assert result.details["grace_period"] == "true"
        assert result.details["grace_period_expires_at"] == "9999-12-31T23:59:59.999Z"

    def test_unbounded_clock_skew(self, validator, signed_license, key_pair):
        """Test a skew past the calendar limit accepts any reference time."""
        earliest = datetime.min.replace(tzinfo=timezone.utc)
        latest = datetime.max.replace(tzinfo=timezone.utc)
        for reference in (earliest, latest):
            options = _at(reference, allowed_clock_skew=timedelta.max)
            assert validator.validate(signed_license, key_pair.public_key_pem, options).is_valid


class TestValidateJson:
    """Tests for validate_json."""

    def test_round_trip_through_json(self, validator, signed_license, key_pair, mid_2024):
        """Test a serialized license validates."""
        result = validator.validate_json(signed_license.to_json(), key_pair.public_key_pem, _at(mid_2024))
        assert result.is_valid is True

    def test_edited_json_field(self, validator, signed_license, key_pair, mid_2024):
        """Test editing the JSON document breaks the signature."""
        data = json.loads(signed_license.to_json())
        data["payload"]["tier"] = "enterprise"
        result = validator.validate_json(json.dumps(data), key_pair.public_key_pem, _at(mid_2024))
        assert result.error_kind is ValidationErrorKind.SIGNATURE_MISMATCH

    def test_character_flip_in_string_value(self, validator, signed_license, key_pair, mid_2024):
        """Test flipping one character inside a signed string value."""
        document = signed_license.to_json()
        tampered = document.replace('"Acme Corp"', '"Acme Corq"', 1)
        assert tampered != document
        result = validator.validate_json(tampered, key_pair.public_key_pem, _at(mid_2024))
        assert result.error_kind is ValidationErrorKind.SIGNATURE_MISMATCH

    def test_reformatting_json_keeps_signature(self, validator, signed_license, key_pair, mid_2024):
        """Test whitespace and key order of the document are not signed."""
        data = json.loads(signed_license.to_json())
        compact = json.dumps(data, separators=(",", ":"), sort_keys=True)
        assert validator.validate_json(compact, key_pair.public_key_pem, _at(mid_2024)).is_valid

    @pytest.mark.parametrize(
        "document",
        ["", "not json", "[]", '{"payload": {}}', "{"],
    )
    def test_malformed_documents(self, validator, key_pair, document):
        """Test undecodable documents are malformed input."""
        result = validator.validate_json(document, key_pair.public_key_pem)
        assert result.error_kind is ValidationErrorKind.MALFORMED_INPUT
        assert result.payload is None

    def test_unknown_algorithm(self, validator, signed_license, key_pair):
        """Test an unsupported algorithm name is malformed input."""
        data = json.loads(signed_license.to_json())
        data["signatureAlgorithm"] = "HS256"
        result = validator.validate_json(json.dumps(data), key_pair.public_key_pem)
        assert result.error_kind is ValidationErrorKind.MALFORMED_INPUT

    def test_feature_order_is_not_signed(self, validator, signed_license, key_pair, mid_2024):
        """Test reordering features in the document keeps the signature valid."""
        data = json.loads(signed_license.to_json())
        data["payload"]["features"].reverse()
        result = validator.validate_json(json.dumps(data), key_pair.public_key_pem, _at(mid_2024))
        assert result.is_valid is True
        assert {feature.name for feature in result.payload.features} == {"Reporting", "sso", "Export"}

    def test_lone_surrogate_escape(self, validator, signed_license, key_pair, mid_2024):
        """Test a \\u escape that decodes to a lone surrogate is malformed input."""
        data = json.loads(signed_license.to_json())
        data["payload"]["issuer"] = "Test \ud800 Issuer"
        document = json.dumps(data)
        assert "\\ud800" in document
        result = validator.validate_json(document, key_pair.public_key_pem, _at(mid_2024))
        assert result.error_kind is ValidationErrorKind.MALFORMED_INPUT
        assert result.payload is None


class TestValidateFromFile:
    """Tests for validate_from_file."""

    def test_valid_files(self, validator, signed_license, key_pair, tmp_path, mid_2024):
        """Test validating license and key files."""
        license_path = tmp_path / "license.json"
        key_path = tmp_path / "public.pem"
        license_path.write_text(signed_license.to_json(), encoding="utf-8")
        key_path.write_text(key_pair.public_key_pem, encoding="utf-8")
        result = validator.validate_from_file(license_path, str(key_path), _at(mid_2024))
        assert result.is_valid is True

    def test_missing_license_file(self, validator, key_pair, tmp_path):
        """Test a missing file is an IO error."""
        key_path = tmp_path / "public.pem"
        key_path.write_text(key_pair.public_key_pem, encoding="utf-8")
        result = validator.validate_from_file(tmp_path / "missing.json", key_path)
        assert result.error_kind is ValidationErrorKind.IO_ERROR

    def test_missing_key_file(self, validator, signed_license, tmp_path):
        """Test a missing key file is an IO error."""
        license_path = tmp_path / "license.json"
        license_path.write_text(signed_license.to_json(), encoding="utf-8")
        result = validator.validate_from_file(license_path, tmp_path / "missing.pem")
        assert result.error_kind is ValidationErrorKind.IO_ERROR

    def test_binary_license_file(self, validator, key_pair, tmp_path):
        """Test non-UTF-8 content is malformed input."""
        license_path = tmp_path / "license.json"
        key_path = tmp_path / "public.pem"
        license_path.write_bytes(b"\xff\xfe\x00garbage")
        key_path.write_text(key_pair.public_key_pem, encoding="utf-8")
        result = validator.validate_from_file(license_path, key_path)
        assert result.error_kind is ValidationErrorKind.MALFORMED_INPUT

    def test_lone_surrogate_in_file(self, validator, signed_license, key_pair, tmp_path, mid_2024):
        """Test an escaped lone surrogate in a license file is malformed input."""
        data = json.loads(signed_license.to_json())
        data["payload"]["licensedTo"] = "Acme \udc00 Corp"
        license_path = tmp_path / "license.json"
        key_path = tmp_path / "public.pem"
        license_path.write_text(json.dumps(data), encoding="utf-8")
        key_path.write_text(key_pair.public_key_pem, encoding="utf-8")
        result = validator.validate_from_file(license_path, key_path, _at(mid_2024))
        assert result.error_kind is ValidationErrorKind.MALFORMED_INPUT


class TestValidationOptionsAndResult:
    """Tests for ValidationOptions and ValidationResult."""

    def test_negative_skew_rejected(self):
        """Test negative durations are invalid."""
        with pytest.raises(InvalidArgumentError):
            ValidationOptions(allowed_clock_skew=timedelta(seconds=-1))

    def test_non_timedelta_rejected(self):
        """Test durations must be timedeltas."""
        with pytest.raises(InvalidArgumentError):
            ValidationOptions(grace_period=3)

    def test_reference_time_normalized(self):
        """Test naive reference times are UTC."""
        options = ValidationOptions(reference_time=datetime(2024, 6, 1))
        assert options.resolve_reference_time() == datetime(2024, 6, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("reference_time", ["2024-06-01T00:00:00Z", 1717200000, timedelta(days=1)])
    def test_non_datetime_reference_time_rejected(self, reference_time):
        """Test reference times must be datetimes."""
        with pytest.raises(InvalidArgumentError, match="reference_time"):
            ValidationOptions(reference_time=reference_time)

    def test_failure_to_dict(self):
        """Test the JSON form of a failure."""
        checked_at = datetime(2024, 6, 1, tzinfo=timezone.utc)
        result = ValidationResult.failure(ValidationErrorKind.EXPIRED, "License expired", checked_at)
        assert result.to_dict() == {
            "isValid": False,
            "errorKind": "EXPIRED",
            "payload": None,
            "checkedAt": "2024-06-01T00:00:00.000Z",
            "details": {"message": "License expired"},
        }

    def test_success_has_no_message(self, sample_payload):
        """Test successful results carry no failure message."""
        result = ValidationResult.success(sample_payload, datetime(2024, 6, 1, tzinfo=timezone.utc))
        assert result.message is None
        assert result.to_dict()["payload"]["licensedTo"] == "Acme Corp"
