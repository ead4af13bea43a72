"""Unit tests for VerificationCodeIssuer."""

import pytest

from errors import (
    IncorrectCodeError,
    VerificationExhaustedError,
    VerificationExpiredError,
    VerificationMissingError,
)
from services.auth.verification import (
    EXHAUSTED_MESSAGE,
    EXPIRED_MESSAGE,
    VerificationCodeIssuer,
    incorrect_code_message,
)
from shared.crypto import hash_token


@pytest.fixture
def codes():
    return iter(["111111", "222222", "333333"])


@pytest.fixture
def issuer(email_provider, clock, codes):
    return VerificationCodeIssuer(
        email_provider,
        clock=clock,
        expiry_seconds=300,
        max_attempts=3,
        code_generator=lambda: next(codes),
    )


# ---------------------------------------------------------------------------
# Issuing
# ---------------------------------------------------------------------------


class TestIssue:
    async def test_sends_code_and_stores_digest(self, issuer, email_provider, clock):
        issued = await issuer.issue("jane@example.com")

        assert issued.code == "111111"
        assert issued.delivered is True
        assert email_provider.codes == [("jane@example.com", "111111", 5)]
        assert issuer.state.code_hash == hash_token("111111")
        assert "111111" not in issuer.state.model_dump_json()
        assert issuer.state.attempts == 0
        assert issuer.time_remaining_ms() == 300_000

    async def test_undelivered_is_reported(self, issuer, email_provider):
        email_provider.deliver = False
        issued = await issuer.issue("jane@example.com")
        assert issued.delivered is False

    async def test_reissue_replaces_code_and_resets_attempts(self, issuer, clock):
        await issuer.issue("jane@example.com")
        with pytest.raises(IncorrectCodeError):
            issuer.verify("999999")
        clock.advance(minutes=4)

        issued = await issuer.reissue()

        assert issued.code == "222222"
        assert issuer.state.attempts == 0
        assert issuer.time_remaining_ms() == 300_000
        with pytest.raises(IncorrectCodeError):
            issuer.verify("111111")
        assert issuer.verify("222222") == "jane@example.com"

    async def test_reissue_without_code_raises(self, issuer):
        with pytest.raises(VerificationMissingError):
            await issuer.reissue()


# ---------------------------------------------------------------------------
# Verifying
# ---------------------------------------------------------------------------


class TestVerify:
    async def test_correct_code_returns_email_and_clears(self, issuer):
        await issuer.issue("jane@example.com")
        assert issuer.verify("111111") == "jane@example.com"
        assert issuer.state is None

    async def test_incorrect_code_counts_down(self, issuer):
        await issuer.issue("jane@example.com")

        with pytest.raises(IncorrectCodeError) as first:
            issuer.verify("000000")
        assert first.value.remaining == 2
        assert first.value.message == "Incorrect code. 2 attempts remaining."

        with pytest.raises(IncorrectCodeError) as second:
            issuer.verify("000000")
        assert second.value.message == "Incorrect code. 1 attempt remaining."
        assert issuer.state.attempts == 2

    async def test_third_wrong_attempt_exhausts(self, issuer):
        await issuer.issue("jane@example.com")
        for _ in range(2):
            with pytest.raises(IncorrectCodeError):
                issuer.verify("000000")

        with pytest.raises(VerificationExhaustedError) as exc_info:
            issuer.verify("000000")
        assert exc_info.value.message == EXHAUSTED_MESSAGE
        assert issuer.state is None

    async def test_correct_code_still_accepted_on_last_attempt(self, issuer):
        await issuer.issue("jane@example.com")
        for _ in range(2):
            with pytest.raises(IncorrectCodeError):
                issuer.verify("000000")
        assert issuer.verify("111111") == "jane@example.com"

    async def test_expired_after_ttl(self, issuer, clock):
        await issuer.issue("jane@example.com")
        clock.advance(seconds=301)

        with pytest.raises(VerificationExpiredError) as exc_info:
            issuer.verify("111111")
        assert exc_info.value.message == EXPIRED_MESSAGE
        assert issuer.state is None
        assert issuer.time_remaining_ms() == 0

    async def test_expires_exactly_at_deadline(self, issuer, clock):
        await issuer.issue("jane@example.com")
        clock.advance(seconds=300)
        with pytest.raises(VerificationExpiredError):
            issuer.verify("111111")

    async def test_valid_just_before_deadline(self, issuer, clock):
        await issuer.issue("jane@example.com")
        clock.advance(seconds=299)
        assert issuer.time_remaining_ms() == 1000
        assert issuer.verify("111111") == "jane@example.com"

    def test_without_code_raises_missing(self, issuer):
        with pytest.raises(VerificationMissingError):
            issuer.verify("111111")


async def test_restored_state_is_honoured(issuer, email_provider, clock):
    await issuer.issue("jane@example.com")
    with pytest.raises(IncorrectCodeError):
        issuer.verify("000000")

    # A new issuer built from persisted state continues the same count
    restored = VerificationCodeIssuer(
        email_provider, clock=clock, max_attempts=3, state=issuer.state
    )
    with pytest.raises(IncorrectCodeError) as exc_info:
        restored.verify("000000")
    assert exc_info.value.remaining == 1


@pytest.mark.parametrize(
    "remaining, message",
    [(2, "Incorrect code. 2 attempts remaining."), (1, "Incorrect code. 1 attempt remaining.")],
    ids=["plural", "singular"],
)
def test_incorrect_code_message(remaining, message):
    assert incorrect_code_message(remaining) == message
