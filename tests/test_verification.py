"""
Tests for the email verification flow.

The provider is the in-memory one, or a subclass of it that returns a
scripted verify_otp result.
"""

import asyncio
from typing import Optional

import pytest

from storefront.accounts import VerificationFlow, VerificationState, read_token
from storefront.accounts.verification import (
    ALREADY_CONFIRMED_MESSAGE,
    EXPIRED_MESSAGE,
    HOME_PATH,
    NO_TOKEN_MESSAGE,
    NO_USER_MESSAGE,
    RESEND_PATH,
    SUCCESS_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    VERIFIED_PATH,
)
from storefront.models.account import Identity
from storefront.services.auth import AuthError, InMemoryAuthProvider


class ScriptedAuthProvider(InMemoryAuthProvider):
    """verify_otp returns or raises whatever the test sets."""

    def __init__(self, result: Optional[Identity] = None, error: Optional[Exception] = None):
        super().__init__()
        self.result = result
        self.error = error
        self.verify_calls: list[tuple[str, str]] = []

    async def verify_otp(self, token_hash: str, type: str = "email") -> Optional[Identity]:
        self.verify_calls.append((token_hash, type))
        if self.error is not None:
            raise self.error
        return self.result


USER = Identity(id="user-1", email="a@b.com")


def make_flow(auth, delay: float = 0.01):
    visited: list[str] = []
    return VerificationFlow(auth, visited.append, redirect_delay=delay), visited


class TestReadToken:
    """Tests for pulling the token out of the link."""

    def test_prefers_token_hash(self):
        """token_hash wins over token."""
        assert read_token({"token_hash": "h", "token": "t"}) == ("h", "email")

    def test_falls_back_to_token(self):
        """token is used when token_hash is absent."""
        assert read_token({"token": "t", "type": "signup"}) == ("t", "signup")

    def test_empty_values_are_missing(self):
        """Blank parameters count as absent; type defaults to email."""
        assert read_token({"token_hash": "", "type": ""}) == (None, "email")


class TestVerificationOutcomes:
    """One test per row of the outcome table."""

    @pytest.mark.asyncio
    async def test_no_token_errors_without_calling_provider(self):
        """Missing token -> ERROR, provider untouched."""
        auth = ScriptedAuthProvider(result=USER)
        flow, visited = make_flow(auth)

        state = await flow.start({})

        assert state == VerificationState.ERROR
        assert flow.message == NO_TOKEN_MESSAGE
        assert auth.verify_calls == []
        assert not flow.redirect_pending
        assert visited == []

    @pytest.mark.asyncio
    async def test_success_schedules_redirect(self):
        """User returned -> SUCCESS and a pending redirect home."""
        auth = ScriptedAuthProvider(result=USER)
        flow, visited = make_flow(auth)

        state = await flow.start({"token_hash": "abc", "type": "signup"})

        assert state == VerificationState.SUCCESS
        assert flow.message == SUCCESS_MESSAGE
        assert flow.identity == USER
        assert auth.verify_calls == [("abc", "signup")]
        assert flow.redirect_pending

        assert await flow.wait_for_redirect() is True
        assert visited == [VERIFIED_PATH]

    @pytest.mark.asyncio
    async def test_already_confirmed_message_is_not_failure(self):
        """'already been confirmed' in the message -> ALREADY_CONFIRMED."""
        auth = ScriptedAuthProvider(error=AuthError("Email has already been confirmed"))
        flow, _ = make_flow(auth)

        state = await flow.start({"token": "abc"})

        assert state == VerificationState.ALREADY_CONFIRMED
        assert flow.message == ALREADY_CONFIRMED_MESSAGE
        assert not flow.redirect_pending

    @pytest.mark.asyncio
    async def test_already_confirmed_code(self):
        """A structured code is enough, whatever the wording."""
        auth = ScriptedAuthProvider(error=AuthError("Nope", code="email_already_confirmed"))
        flow, _ = make_flow(auth)
        assert await flow.start({"token": "abc"}) == VerificationState.ALREADY_CONFIRMED

    @pytest.mark.asyncio
    async def test_expired_asks_for_new_link(self):
        """'expired' -> ERROR with the request-a-new-link message."""
        auth = ScriptedAuthProvider(error=AuthError("Token has expired or is invalid"))
        flow, _ = make_flow(auth)

        state = await flow.start({"token_hash": "abc"})

        assert state == VerificationState.ERROR
        assert flow.message == EXPIRED_MESSAGE

    @pytest.mark.asyncio
    async def test_expired_code(self):
        """otp_expired is classified without looking at the message."""
        auth = ScriptedAuthProvider(error=AuthError("Forbidden", code="otp_expired"))
        flow, _ = make_flow(auth)
        await flow.start({"token_hash": "abc"})
        assert flow.message == EXPIRED_MESSAGE

    @pytest.mark.asyncio
    async def test_other_error_shows_provider_message(self):
        """Unknown errors surface the raw message."""
        auth = ScriptedAuthProvider(error=AuthError("Database unavailable"))
        flow, _ = make_flow(auth)

        state = await flow.start({"token_hash": "abc"})

        assert state == VerificationState.ERROR
        assert flow.message == "Database unavailable"

    @pytest.mark.asyncio
    async def test_no_user_is_generic_error(self):
        """No error but no user -> ERROR with the generic message."""
        auth = ScriptedAuthProvider(result=None)
        flow, _ = make_flow(auth)

        state = await flow.start({"token_hash": "abc"})

        assert state == VerificationState.ERROR
        assert flow.message == NO_USER_MESSAGE
        assert not flow.redirect_pending

    @pytest.mark.asyncio
    async def test_unexpected_exception(self):
        """Non-provider exceptions become a generic ERROR, not a crash."""
        auth = ScriptedAuthProvider(error=RuntimeError("boom"))
        flow, _ = make_flow(auth)

        assert await flow.start({"token_hash": "abc"}) == VerificationState.ERROR
        assert flow.message == UNEXPECTED_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_terminal_state_is_final(self):
        """A second start() does not call the provider again."""
        auth = ScriptedAuthProvider(error=AuthError("Database unavailable"))
        flow, _ = make_flow(auth)

        await flow.start({"token_hash": "abc"})
        await flow.start({"token_hash": "abc"})

        assert len(auth.verify_calls) == 1


class TestRedirectAndActions:
    """Tests for the scheduled redirect and the user actions."""

    @pytest.mark.asyncio
    async def test_close_cancels_redirect(self):
        """Leaving the page early cancels the pending redirect."""
        flow, visited = make_flow(ScriptedAuthProvider(result=USER), delay=10)
        await flow.start({"token_hash": "abc"})

        flow.close()
        flow.close()

        assert await flow.wait_for_redirect() is False
        assert visited == []

    @pytest.mark.asyncio
    async def test_continue_to_app_navigates_once(self):
        """Continuing after success goes to the verified home page and stops the timer."""
        flow, visited = make_flow(ScriptedAuthProvider(result=USER), delay=0.05)
        await flow.start({"token_hash": "abc"})

        flow.continue_to_app()
        await asyncio.sleep(0.1)

        assert visited == [VERIFIED_PATH]

    @pytest.mark.asyncio
    async def test_continue_after_real_verification(self):
        """A link from the in-memory provider verifies, then continue carries the verified marker."""
        auth = InMemoryAuthProvider()
        await auth.sign_up("a@b.com", "secret123")
        token = auth.latest_token("a@b.com")
        flow, visited = make_flow(auth, delay=10)

        assert await flow.start({"token_hash": token}) == VerificationState.SUCCESS
        flow.continue_to_app()

        assert visited == ["/?verified=true"]
        assert await flow.wait_for_redirect() is False

    @pytest.mark.asyncio
    async def test_continue_from_error_goes_home(self):
        """Without a success there is no verified marker."""
        auth = ScriptedAuthProvider(error=AuthError("Token has expired"))
        flow, visited = make_flow(auth)
        await flow.start({"token_hash": "abc"})

        flow.continue_to_app()

        assert visited == [HOME_PATH]

    @pytest.mark.asyncio
    async def test_continue_when_already_confirmed_goes_home(self):
        """An already-confirmed link continues to the plain home page."""
        auth = ScriptedAuthProvider(error=AuthError("Email has already been confirmed"))
        flow, visited = make_flow(auth)
        await flow.start({"token_hash": "abc"})

        flow.continue_to_app()

        assert visited == [HOME_PATH]

    @pytest.mark.asyncio
    async def test_resend_only_from_error(self):
        """The resend action exists only in the ERROR state and never calls the provider."""
        auth = ScriptedAuthProvider(error=AuthError("Token has expired"))
        flow, visited = make_flow(auth)
        await flow.start({"token_hash": "abc"})

        assert flow.resend_verification() is True
        assert visited == [RESEND_PATH]
        assert auth.calls == []

    @pytest.mark.asyncio
    async def test_resend_ignored_after_success(self):
        """No resend from SUCCESS."""
        flow, visited = make_flow(ScriptedAuthProvider(result=USER), delay=10)
        await flow.start({"token_hash": "abc"})

        assert flow.resend_verification() is False
        flow.close()
        assert visited == []

    @pytest.mark.asyncio
    async def test_wait_without_redirect(self):
        """Nothing to wait for when no redirect was scheduled."""
        flow, _ = make_flow(ScriptedAuthProvider())
        await flow.start({})
        assert await flow.wait_for_redirect() is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
