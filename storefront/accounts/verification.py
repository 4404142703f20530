"""
Email Verification Flow

Consumes the one-time token from a verification link and settles into
exactly one terminal state:

    LOADING -> SUCCESS | ALREADY_CONFIRMED | ERROR

Rules:
- token_hash is preferred over token; type defaults to "email"
- no token means ERROR without calling the provider
- the provider is called at most once per start(); nothing is retried
- SUCCESS schedules a redirect home after redirect_delay seconds
- the redirect is a task owned by the flow; close() or any manual
  navigation cancels it
"""

import asyncio
from enum import Enum
from typing import Callable, Mapping, Optional

from storefront.log import get_logger
from storefront.models.account import Identity
from storefront.services.auth import (
    AuthError,
    AuthErrorKind,
    AuthProviderInterface,
    classify_auth_error,
)

HOME_PATH = "/"
VERIFIED_PATH = "/?verified=true"
RESEND_PATH = "/?view=resend"

NO_TOKEN_MESSAGE = "No verification token found in the URL."
SUCCESS_MESSAGE = (
    "Your email has been successfully verified! "
    "You can now sign in to your account."
)
ALREADY_CONFIRMED_MESSAGE = (
    "Your email has already been confirmed. You can sign in to your account."
)
EXPIRED_MESSAGE = (
    "The verification link has expired. Please request a new verification email."
)
NO_USER_MESSAGE = "Verification failed. Please try again or contact support."
GENERIC_ERROR_MESSAGE = "Verification failed. Please try again."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred during verification."


class VerificationState(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ALREADY_CONFIRMED = "already_confirmed"
    ERROR = "error"


def read_token(params: Mapping[str, str]) -> tuple[Optional[str], str]:
    """Pull (token, type) out of the link's query parameters."""
    token = params.get("token_hash") or params.get("token") or None
    otp_type = params.get("type") or "email"
    return token, otp_type


class VerificationFlow:
    """
    One verification attempt for one page visit.

    Args:
        auth: Provider used for verify_otp
        navigate: Called with a path when the flow leaves the page
        redirect_delay: Seconds before SUCCESS navigates home
    """

    def __init__(
        self,
        auth: AuthProviderInterface,
        navigate: Callable[[str], None],
        redirect_delay: float = 3.0,
    ):
        self._auth = auth
        self._navigate = navigate
        self._redirect_delay = redirect_delay
        self._redirect_task: Optional[asyncio.Task] = None
        self._logger = get_logger(__name__)

        self.state = VerificationState.LOADING
        self.message = ""
        self.identity: Optional[Identity] = None

    @property
    def is_terminal(self) -> bool:
        return self.state != VerificationState.LOADING

    @property
    def redirect_pending(self) -> bool:
        return self._redirect_task is not None and not self._redirect_task.done()

    def _finish(self, state: VerificationState, message: str) -> VerificationState:
        self.state = state
        self.message = message
        self._logger.info("verification_finished", state=state.value)
        return state

    async def start(self, params: Mapping[str, str]) -> VerificationState:
        """Run the flow against the link's query parameters."""
        if self.is_terminal:
            return self.state

        token, otp_type = read_token(params)
        if not token:
            return self._finish(VerificationState.ERROR, NO_TOKEN_MESSAGE)

        self._logger.info("verification_started", otp_type=otp_type)

        try:
            identity = await self._auth.verify_otp(token, type=otp_type)
        except AuthError as e:
            return self._handle_error(e)
        except Exception as e:
            self._logger.error("verification_unexpected_error", error=str(e))
            return self._finish(VerificationState.ERROR, UNEXPECTED_ERROR_MESSAGE)

        if identity is None:
            return self._finish(VerificationState.ERROR, NO_USER_MESSAGE)

        self.identity = identity
        self._schedule_redirect()
        return self._finish(VerificationState.SUCCESS, SUCCESS_MESSAGE)

    def _handle_error(self, error: AuthError) -> VerificationState:
        kind = classify_auth_error(error)
        self._logger.warning(
            "verification_rejected",
            kind=kind.value,
            code=error.code,
            error=error.message,
        )

        if kind == AuthErrorKind.ALREADY_CONFIRMED:
            return self._finish(VerificationState.ALREADY_CONFIRMED, ALREADY_CONFIRMED_MESSAGE)
        if kind == AuthErrorKind.EXPIRED:
            return self._finish(VerificationState.ERROR, EXPIRED_MESSAGE)
        return self._finish(VerificationState.ERROR, error.message or GENERIC_ERROR_MESSAGE)

    # =========================================================================
    # REDIRECT
    # =========================================================================

    def _schedule_redirect(self) -> None:
        self._redirect_task = asyncio.ensure_future(self._redirect_later())

    async def _redirect_later(self) -> None:
        await asyncio.sleep(self._redirect_delay)
        self._navigate(VERIFIED_PATH)

    async def wait_for_redirect(self) -> bool:
        """
        Wait until the scheduled redirect fires.

        Returns:
            True if the redirect happened, False if there was none or it
            was cancelled
        """
        if self._redirect_task is None:
            return False
        try:
            await self._redirect_task
        except asyncio.CancelledError:
            return False
        return True

    def close(self) -> None:
        """Cancel the pending redirect, if any. Safe to call repeatedly."""
        if self.redirect_pending:
            self._redirect_task.cancel()

    # =========================================================================
    # USER ACTIONS
    # =========================================================================

    def continue_to_app(self) -> None:
        """Go home now. After a success the home page shows the verified notice."""
        self.close()
        if self.state == VerificationState.SUCCESS:
            self._navigate(VERIFIED_PATH)
        else:
            self._navigate(HOME_PATH)

    def resend_verification(self) -> bool:
        """
        Send the user to the resend page.

        Only offered from the ERROR state. It does not call the provider.
        """
        if self.state != VerificationState.ERROR:
            return False
        self.close()
        self._navigate(RESEND_PATH)
        return True
