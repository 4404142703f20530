"""
Session Store

Holds who is signed in. Lifecycle:
1. Created with loading = True and no identity
2. initialize() fetches the current session and subscribes to the
   provider's auth events. A provider that cannot be reached or is
   misconfigured leaves the store signed out
3. Every auth event replaces the identity and clears loading
4. close() drops the provider subscription

On SIGNED_UP the store provisions the user's profile. Provisioning is
fire-and-forget: failures are logged and never reach the UI, which does
not wait on the profile existing.

sign_in / sign_up / sign_out / resend_verification delegate to the
provider and let AuthError propagate to the caller.
"""

from typing import Callable, Optional

from storefront.accounts.provisioner import ProfileProvisioner
from storefront.models.account import AuthEvent, Identity, SignUpResult
from storefront.services.auth import AuthError, AuthProviderInterface, AuthSubscription
from storefront.services.supabase_client import ConfigurationError
from storefront.state.store import Store

CHECK_EMAIL_MESSAGE = (
    "Account created successfully! Please check your email and click the "
    "verification link to activate your account."
)
WELCOME_MESSAGE = "Account created successfully! You are now signed in."


class SessionStore(Store["SessionStore"]):
    """Current identity + loading flag, driven by provider events."""

    def __init__(
        self,
        auth: AuthProviderInterface,
        provisioner: ProfileProvisioner,
        confirmation_url: Optional[Callable[[], str]] = None,
    ):
        super().__init__()
        self._auth = auth
        self._provisioner = provisioner
        self._confirmation_url = confirmation_url
        self._subscription: Optional[AuthSubscription] = None
        self.identity: Optional[Identity] = None
        self.loading = True

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def _set(self, identity: Optional[Identity], loading: bool) -> None:
        self.identity = identity
        self.loading = loading
        self._notify()

    async def initialize(self) -> None:
        """Load the current session and start listening for auth events."""
        identity = None
        try:
            if self._subscription is None:
                self._subscription = await self._auth.on_auth_state_change(self.handle_auth_event)
            identity = await self._auth.get_session()
        except AuthError as e:
            self._logger.error("session_fetch_failed", error=e.message, code=e.code)
        except ConfigurationError as e:
            self._logger.error("session_fetch_failed", error=str(e), reason="configuration")
        self._set(identity, loading=False)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def handle_auth_event(
        self,
        event: AuthEvent,
        identity: Optional[Identity],
    ) -> None:
        self._logger.info(
            "auth_state_changed",
            auth_event=event.value,
            user_id=identity.id if identity else None,
        )
        self._set(identity, loading=False)

        if event == AuthEvent.SIGNED_UP and identity is not None:
            await self._provision_quietly(identity)

    async def _provision_quietly(self, identity: Identity) -> None:
        try:
            await self._provisioner.provision(
                identity.id,
                identity.email,
                identity.full_name,
            )
        except Exception as e:
            self._logger.error(
                "profile_provision_failed",
                user_id=identity.id,
                error=str(e),
            )

    async def sign_in(self, email: str, password: str) -> Identity:
        return await self._auth.sign_in_with_password(email, password)

    async def sign_up(self, email: str, password: str, full_name: str) -> SignUpResult:
        """
        Register a new account.

        If the provider confirms the email immediately (confirmation
        disabled), the profile is provisioned right away.
        """
        redirect_url = self._confirmation_url() if self._confirmation_url else None
        identity = await self._auth.sign_up(
            email,
            password,
            metadata={"full_name": full_name},
            redirect_url=redirect_url,
        )

        if identity is not None and identity.is_confirmed:
            await self._provision_quietly(identity)
            return SignUpResult(
                identity=identity,
                needs_confirmation=False,
                message=WELCOME_MESSAGE,
            )

        return SignUpResult(
            identity=identity,
            needs_confirmation=True,
            message=CHECK_EMAIL_MESSAGE,
        )

    async def sign_out(self) -> None:
        await self._auth.sign_out()

    async def resend_verification(self, email: str) -> None:
        redirect_url = self._confirmation_url() if self._confirmation_url else None
        await self._auth.resend("signup", email, redirect_url=redirect_url)
