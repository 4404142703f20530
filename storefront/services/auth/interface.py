"""
Abstract Auth Provider Interface

The session store and verification flow only talk to this interface.
Implementations: SupabaseAuthProvider and InMemoryAuthProvider.

Every method raises AuthError on failure. Listeners registered with
on_auth_state_change receive (event, identity) for each transition.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from storefront.log import get_logger
from storefront.models.account import AuthEvent, Identity

AuthListener = Callable[[AuthEvent, Optional[Identity]], Awaitable[None]]


class AuthSubscription:
    """Handle returned by on_auth_state_change; call unsubscribe() to stop."""

    def __init__(self, unsubscribe: Callable[[], None]):
        self._unsubscribe = unsubscribe
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._unsubscribe()


class AuthProviderInterface(ABC):
    """
    Abstract interface for the hosted auth provider.

    Concrete providers keep a listener list here and call _emit()
    whenever the signed-in identity changes.
    """

    def __init__(self):
        self._listeners: list[AuthListener] = []
        self._logger = get_logger(__name__)

    def _add_listener(self, listener: AuthListener) -> AuthSubscription:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return AuthSubscription(remove)

    async def _emit(self, event: AuthEvent, identity: Optional[Identity]) -> None:
        """Deliver an event to every listener, in registration order."""
        for listener in list(self._listeners):
            try:
                await listener(event, identity)
            except Exception as e:
                # A broken listener must not turn a successful provider call into a failure
                self._logger.error(
                    "auth_listener_failed",
                    auth_event=event.value,
                    error=str(e),
                )

    @abstractmethod
    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict] = None,
        redirect_url: Optional[str] = None,
    ) -> Optional[Identity]:
        """
        Register a new identity.

        Args:
            email: Login email
            password: Plain password (sent to the provider only)
            metadata: User metadata stored with the identity (e.g. full_name)
            redirect_url: Where the verification link should land

        Returns:
            The new identity (usually unconfirmed), or None if the provider
            returned no user
        """
        pass

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        pass

    @abstractmethod
    async def get_session(self) -> Optional[Identity]:
        """Return the identity of the current session, if any."""
        pass

    @abstractmethod
    async def on_auth_state_change(self, listener: AuthListener) -> AuthSubscription:
        pass

    @abstractmethod
    async def verify_otp(self, token_hash: str, type: str = "email") -> Optional[Identity]:
        """
        Exchange a one-time token from a verification link.

        Returns:
            The confirmed identity, or None if the provider returned no user

        Raises:
            AuthError: invalid, expired or already-used token
        """
        pass

    @abstractmethod
    async def resend(
        self,
        type: str,
        email: str,
        redirect_url: Optional[str] = None,
    ) -> None:
        """Ask the provider to send another verification email."""
        pass
