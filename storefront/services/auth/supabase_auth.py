"""
Supabase Auth Implementation

Wraps the SDK's auth client behind AuthProviderInterface:
- SDK users are converted to Identity
- SDK exceptions are converted to AuthError (message, code, status)
- SDK auth events are forwarded to our listeners

The SDK never reports "this sign-up was just confirmed" as its own event;
it reports SIGNED_IN. We emit SIGNED_UP ourselves after a successful
sign-up/email token verification, which is what provisioning keys off.
The SDK does not say whether the token confirmed a new address, so an
email-OTP sign-in of an account confirmed long ago emits SIGNED_UP too.
Listeners must treat it as "may be new". Profile uniqueness in storage
makes the repeat harmless.
"""

import asyncio
from typing import Any, Optional

from storefront.models.account import AuthEvent, Identity
from storefront.services.auth.errors import AuthError
from storefront.services.auth.interface import (
    AuthListener,
    AuthProviderInterface,
    AuthSubscription,
)
from storefront.services.supabase_client import SupabaseClient

CONFIRMATION_TYPES = {"signup", "email"}


def to_identity(user: Any) -> Optional[Identity]:
    """Convert an SDK user object to an Identity."""
    if user is None:
        return None
    metadata = dict(getattr(user, "user_metadata", None) or {})
    return Identity(
        id=str(user.id),
        email=getattr(user, "email", None) or "",
        full_name=metadata.get("full_name") or "",
        email_confirmed_at=getattr(user, "email_confirmed_at", None),
        metadata=metadata,
    )


def to_auth_error(error: Exception) -> AuthError:
    """Convert an SDK exception into our AuthError."""
    if isinstance(error, AuthError):
        return error
    message = getattr(error, "message", None) or str(error)
    return AuthError(
        message,
        code=getattr(error, "code", None),
        status=getattr(error, "status", None),
    )


class SupabaseAuthProvider(AuthProviderInterface):
    """Auth provider backed by Supabase (GoTrue)."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        super().__init__()
        self._client = client or SupabaseClient()
        self._sdk_subscription = None
        self._pending: set[asyncio.Task] = set()

    async def _auth(self):
        db = await self._client.connect()
        return db.auth

    def _forward_sdk_event(self, event: str, session: Any) -> None:
        """SDK callback (synchronous) - schedule delivery on the running loop."""
        try:
            auth_event = AuthEvent(event)
        except ValueError:
            self._logger.info("auth_event_ignored", auth_event=event)
            return

        identity = to_identity(getattr(session, "user", None)) if session else None
        task = asyncio.ensure_future(self._emit(auth_event, identity))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict] = None,
        redirect_url: Optional[str] = None,
    ) -> Optional[Identity]:
        auth = await self._auth()
        options: dict = {"data": metadata or {}}
        if redirect_url:
            options["email_redirect_to"] = redirect_url
        try:
            response = await auth.sign_up({
                "email": email,
                "password": password,
                "options": options,
            })
        except Exception as e:
            raise to_auth_error(e) from e
        return to_identity(response.user)

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        auth = await self._auth()
        try:
            response = await auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as e:
            raise to_auth_error(e) from e

        identity = to_identity(response.user)
        if identity is None:
            raise AuthError("Sign in returned no user")
        return identity

    async def sign_out(self) -> None:
        auth = await self._auth()
        try:
            await auth.sign_out()
        except Exception as e:
            raise to_auth_error(e) from e

    async def get_session(self) -> Optional[Identity]:
        auth = await self._auth()
        try:
            session = await auth.get_session()
        except Exception as e:
            raise to_auth_error(e) from e
        if session is None:
            return None
        return to_identity(session.user)

    async def on_auth_state_change(self, listener: AuthListener) -> AuthSubscription:
        if self._sdk_subscription is None:
            auth = await self._auth()
            self._sdk_subscription = auth.on_auth_state_change(self._forward_sdk_event)
        return self._add_listener(listener)

    async def verify_otp(self, token_hash: str, type: str = "email") -> Optional[Identity]:
        auth = await self._auth()
        try:
            response = await auth.verify_otp({
                "token_hash": token_hash,
                "type": type,
            })
        except Exception as e:
            raise to_auth_error(e) from e

        identity = to_identity(response.user)
        if identity is not None and type in CONFIRMATION_TYPES:
            await self._emit(AuthEvent.SIGNED_UP, identity)
        return identity

    async def resend(
        self,
        type: str,
        email: str,
        redirect_url: Optional[str] = None,
    ) -> None:
        auth = await self._auth()
        params: dict = {"type": type, "email": email}
        if redirect_url:
            params["options"] = {"email_redirect_to": redirect_url}
        try:
            await auth.resend(params)
        except Exception as e:
            raise to_auth_error(e) from e

    def close(self) -> None:
        """Stop listening to the SDK."""
        if self._sdk_subscription is not None:
            self._sdk_subscription.unsubscribe()
            self._sdk_subscription = None
        for task in list(self._pending):
            task.cancel()
