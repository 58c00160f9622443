"""Tests for ResultAssertions test helper."""

import pytest

from railway import ErrorCode, Result, ResultAssertions


class TestAssertSuccess:
    def test_passes_on_success(self):
        value = ResultAssertions.assert_success(Result.success(42))
        assert value == 42

    def test_fails_on_failure_with_clear_message(self):
        result = Result.failure(ErrorCode.INVALID_INPUT, "must not be empty")
        with pytest.raises(AssertionError, match="Expected Success but got Failure"):
            ResultAssertions.assert_success(result)

    def test_custom_message(self):
        result = Result.failure(ErrorCode.SIGNING_ERROR, "x")
        with pytest.raises(AssertionError, match="custom context"):
            ResultAssertions.assert_success(result, "custom context")


class TestAssertFailure:
    def test_passes_on_failure(self):
        error = ResultAssertions.assert_failure(
            Result.failure(ErrorCode.ENCODING_ERROR, "bad DER")
        )
        assert error.code == ErrorCode.ENCODING_ERROR

    def test_checks_error_code(self):
        error = ResultAssertions.assert_failure(
            Result.failure(ErrorCode.INVALID_INPUT, "bad"),
            ErrorCode.INVALID_INPUT,
        )
        assert error.message == "bad"

    def test_fails_on_wrong_error_code(self):
        result = Result.failure(ErrorCode.SIGNING_ERROR, "x")
        with pytest.raises(AssertionError, match="Expected error code INVALID_INPUT"):
            ResultAssertions.assert_failure(result, ErrorCode.INVALID_INPUT)

    def test_fails_on_success(self):
        with pytest.raises(AssertionError, match="Expected Failure but got Success"):
            ResultAssertions.assert_failure(Result.success(42))


class TestAssertFailureMessage:
    def test_contains_substring(self):
        result = Result.failure(ErrorCode.INVALID_INPUT, "Country code must be 2 letters")
        ResultAssertions.assert_failure_message_contains(result, "country")

    def test_case_insensitive(self):
        result = Result.failure(ErrorCode.INVALID_INPUT, "COUNTRY CODE")
        ResultAssertions.assert_failure_message_contains(result, "country")

    def test_fails_when_not_contained(self):
        result = Result.failure(ErrorCode.INVALID_INPUT, "Locality is required")
        with pytest.raises(AssertionError, match="Expected failure message to contain"):
            ResultAssertions.assert_failure_message_contains(result, "country")


class TestAssertFailureLocation:
    def test_field_matches(self):
        result = Result.failure(ErrorCode.INVALID_INPUT, "x", field="state")
        ResultAssertions.assert_failure_field(result, "state")

    def test_field_mismatch(self):
        result = Result.failure(ErrorCode.INVALID_INPUT, "x", field="state")
        with pytest.raises(AssertionError, match="Expected failure field 'locality'"):
            ResultAssertions.assert_failure_field(result, "locality")

    def test_stage_matches(self):
        result = Result.failure(ErrorCode.SIGNING_ERROR, "x", stage="signing")
        ResultAssertions.assert_failure_stage(result, "signing")

    def test_stage_mismatch(self):
        result = Result.failure(ErrorCode.SIGNING_ERROR, "x")
        with pytest.raises(AssertionError, match="Expected failure stage 'signing'"):
            ResultAssertions.assert_failure_stage(result, "signing")


class TestAssertSuccessValue:
    def test_exact_value_match(self):
        ResultAssertions.assert_success_value(Result.success(42), 42)

    def test_fails_on_wrong_value(self):
        with pytest.raises(AssertionError, match="Expected success value"):
            ResultAssertions.assert_success_value(Result.success(42), 99)

    def test_fails_on_failure(self):
        with pytest.raises(AssertionError, match="Expected Success"):
            ResultAssertions.assert_success_value(
                Result.failure(ErrorCode.INVALID_INPUT, "x"), 42
            )
