"""
Auth Diagnostics

Backs the debug view. Each check talks to the real provider and records
a DiagnosticResult; results are kept newest-first until cleared.

Every result is also written to the structured log with the level
matching its status, so a failed check can be traced after the page
is gone.

None of these checks raise. Provider failures become ERROR results and
the expected "Email not confirmed" sign-in failure becomes a WARNING.
"""

from typing import Any, Callable, Mapping, Optional

from storefront.accounts.verification import read_token
from storefront.config import (
    get_base_url,
    get_confirmation_url,
    get_settings,
    validate_auth_config,
)
from storefront.log import get_logger
from storefront.models.diagnostics import (
    ConfigSnapshot,
    DiagnosticResult,
    DiagnosticStatus,
    SessionSnapshot,
)
from storefront.services.auth import (
    AuthError,
    AuthProviderInterface,
    is_email_not_confirmed,
)
from storefront.services.supabase_client import ConfigurationError

DEFAULT_TEST_EMAIL = "test@storefrontbuilder.com"
TEST_PASSWORD = "testpassword123"
TEST_FULL_NAME = "Test User"
KEY_PREVIEW_LENGTH = 20


def mask_key(key: Optional[str]) -> Optional[str]:
    """Show only the start of a key."""
    if not key:
        return None
    return key[:KEY_PREVIEW_LENGTH] + "..."


def _error_details(error: AuthError) -> dict:
    return {"message": error.message, "code": error.code, "status": error.status}


class AuthDiagnostics:
    """
    Runs auth checks against a provider and keeps their results.

    Args:
        auth: Provider to test
        origin: Origin of the current page, used for redirect URLs
    """

    def __init__(
        self,
        auth: AuthProviderInterface,
        origin: Optional[str] = None,
        confirmation_url: Optional[Callable[[], str]] = None,
    ):
        self._auth = auth
        self._origin = origin
        self._confirmation_url = confirmation_url or (lambda: get_confirmation_url(self._origin))
        self._logger = get_logger(__name__)
        self.results: list[DiagnosticResult] = []

    def add_result(
        self,
        test: str,
        status: DiagnosticStatus,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> DiagnosticResult:
        result = DiagnosticResult(
            test=test,
            status=status,
            message=message[:500],
            details=details,
        )
        self.results.insert(0, result)

        log_dict = result.to_log_dict()
        if status == DiagnosticStatus.ERROR:
            self._logger.error("diagnostic_result", **log_dict)
        elif status == DiagnosticStatus.WARNING:
            self._logger.warning("diagnostic_result", **log_dict)
        else:
            self._logger.info("diagnostic_result", **log_dict)

        return result

    def clear_results(self) -> None:
        self.results = []

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def load_configuration(self) -> ConfigSnapshot:
        """Provider settings with the key masked, plus any config issues."""
        check = validate_auth_config()
        url = None
        key_preview = None
        if check["is_valid"]:
            supabase = get_settings().supabase
            url = supabase.url
            key_preview = mask_key(supabase.anon_key)

        return ConfigSnapshot(
            supabase_url=url,
            anon_key_preview=key_preview,
            base_url=get_base_url(self._origin),
            expected_confirm_url=self._confirmation_url(),
            issues=check["issues"],
        )

    async def check_session(self) -> SessionSnapshot:
        try:
            identity = await self._auth.get_session()
        except AuthError as e:
            return SessionSnapshot(has_session=False, error=e.message)
        except ConfigurationError as e:
            return SessionSnapshot(has_session=False, error=str(e))

        if identity is None:
            return SessionSnapshot(has_session=False)

        return SessionSnapshot(
            has_session=True,
            user_id=identity.id,
            email=identity.email,
            email_confirmed=identity.is_confirmed,
        )

    # =========================================================================
    # CHECKS
    # =========================================================================

    async def test_email_verification(self, email: str = DEFAULT_TEST_EMAIL) -> DiagnosticResult:
        """Sign up a throwaway account so the provider sends a verification email."""
        test = "Email Verification"
        self.add_result(test, DiagnosticStatus.WARNING, "Starting email verification test...")

        try:
            current = await self._auth.get_session()
            if current is not None and current.email == email:
                self.add_result(
                    "Pre-check",
                    DiagnosticStatus.WARNING,
                    "User already signed in with test email, signing out first...",
                )
                await self._auth.sign_out()

            identity = await self._auth.sign_up(
                email,
                TEST_PASSWORD,
                metadata={"full_name": TEST_FULL_NAME},
                redirect_url=self._confirmation_url(),
            )
        except AuthError as e:
            return self.add_result(
                test, DiagnosticStatus.ERROR, f"Test failed: {e.message}", _error_details(e)
            )
        except Exception as e:
            return self.add_result(test, DiagnosticStatus.ERROR, f"Unexpected error: {e}")

        return self.add_result(
            test,
            DiagnosticStatus.SUCCESS,
            f"Verification email sent to {email}. Check your email for the verification link.",
            {
                "user_id": identity.id if identity else None,
                "email_confirmed": identity.is_confirmed if identity else False,
            },
        )

    async def test_direct_verification(self, params: Mapping[str, str]) -> DiagnosticResult:
        """Verify the token in the current page's query parameters, if any."""
        test = "Direct Verification"
        self.add_result(test, DiagnosticStatus.WARNING, "Testing direct token verification...")

        token, otp_type = read_token(params)
        if not token:
            return self.add_result(
                test,
                DiagnosticStatus.WARNING,
                "No token found in URL. This test requires a verification token.",
            )

        try:
            identity = await self._auth.verify_otp(token, type=otp_type)
        except AuthError as e:
            return self.add_result(
                test, DiagnosticStatus.ERROR, f"Verification failed: {e.message}", _error_details(e)
            )
        except Exception as e:
            return self.add_result(test, DiagnosticStatus.ERROR, f"Unexpected error: {e}")

        return self.add_result(
            test,
            DiagnosticStatus.SUCCESS,
            "Token verification successful!",
            {"user_id": identity.id if identity else None},
        )

    async def test_auth_flow(self, email: str = DEFAULT_TEST_EMAIL) -> DiagnosticResult:
        """Try signing in with the test account."""
        test = "Auth Flow"
        self.add_result(test, DiagnosticStatus.WARNING, "Testing complete authentication flow...")

        try:
            identity = await self._auth.sign_in_with_password(email, TEST_PASSWORD)
        except AuthError as e:
            if is_email_not_confirmed(e):
                return self.add_result(
                    test,
                    DiagnosticStatus.WARNING,
                    "Email not confirmed - this is expected for unverified accounts",
                    _error_details(e),
                )
            return self.add_result(
                test, DiagnosticStatus.ERROR, f"Sign in failed: {e.message}", _error_details(e)
            )
        except Exception as e:
            return self.add_result(test, DiagnosticStatus.ERROR, f"Unexpected error: {e}")

        return self.add_result(
            test,
            DiagnosticStatus.SUCCESS,
            "Sign in successful!",
            {
                "user_id": identity.id,
                "email": identity.email,
                "email_confirmed": identity.is_confirmed,
            },
        )
