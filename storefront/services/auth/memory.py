"""
In-memory auth provider.

Behaves like the hosted provider closely enough to drive the whole
sign-up -> email link -> confirmation flow without a network:
- sign_up stores an unconfirmed account and "sends" an email with a token
- verify_otp confirms the account and emits SIGNED_IN then SIGNED_UP
- a token that was already used reports "already been confirmed"

Attributes useful in tests:
    sent_emails: every verification email "sent", oldest first
    calls: names of provider methods invoked, in order
"""

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from storefront.models.account import AuthEvent, Identity, utc_now
from storefront.services.auth.errors import AuthError
from storefront.services.auth.interface import (
    AuthListener,
    AuthProviderInterface,
    AuthSubscription,
)


@dataclass
class _Account:
    identity: Identity
    password: str


class InMemoryAuthProvider(AuthProviderInterface):
    """Auth provider that keeps accounts in a dict."""

    def __init__(self, require_email_confirmation: bool = True):
        super().__init__()
        self.require_email_confirmation = require_email_confirmation
        self.sent_emails: list[dict] = []
        self.calls: list[str] = []
        self._accounts: dict[str, _Account] = {}
        self._tokens: dict[str, str] = {}
        self._used_tokens: dict[str, str] = {}
        self._current: Optional[Identity] = None

    def _send_verification(self, email: str, redirect_url: Optional[str]) -> str:
        token_hash = uuid4().hex
        self._tokens[token_hash] = email
        self.sent_emails.append({
            "email": email,
            "token_hash": token_hash,
            "redirect_url": redirect_url,
        })
        return token_hash

    def _confirm(self, email: str) -> Identity:
        account = self._accounts[email]
        confirmed = account.identity.model_copy(update={"email_confirmed_at": utc_now()})
        account.identity = confirmed
        return confirmed

    def expire_token(self, token_hash: str) -> None:
        """Make a sent token unusable, as if its link timed out."""
        self._tokens.pop(token_hash, None)

    def latest_token(self, email: str) -> Optional[str]:
        for sent in reversed(self.sent_emails):
            if sent["email"] == email:
                return sent["token_hash"]
        return None

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict] = None,
        redirect_url: Optional[str] = None,
    ) -> Optional[Identity]:
        self.calls.append("sign_up")
        existing = self._accounts.get(email)
        if existing and existing.identity.is_confirmed:
            raise AuthError("User already registered", code="user_already_exists", status=422)
        if len(password) < 6:
            raise AuthError(
                "Password should be at least 6 characters",
                code="weak_password",
                status=422,
            )

        metadata = dict(metadata or {})
        identity = Identity(
            id=existing.identity.id if existing else str(uuid4()),
            email=email,
            full_name=metadata.get("full_name") or "",
            metadata=metadata,
        )
        self._accounts[email] = _Account(identity=identity, password=password)

        if not self.require_email_confirmation:
            identity = self._confirm(email)
            self._current = identity
            await self._emit(AuthEvent.SIGNED_IN, identity)
            return identity

        self._send_verification(email, redirect_url)
        return identity

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        self.calls.append("sign_in_with_password")
        account = self._accounts.get(email)
        if account is None or account.password != password:
            raise AuthError("Invalid login credentials", code="invalid_credentials", status=400)
        if not account.identity.is_confirmed:
            raise AuthError("Email not confirmed", code="email_not_confirmed", status=400)

        self._current = account.identity
        await self._emit(AuthEvent.SIGNED_IN, account.identity)
        return account.identity

    async def sign_out(self) -> None:
        self.calls.append("sign_out")
        self._current = None
        await self._emit(AuthEvent.SIGNED_OUT, None)

    async def get_session(self) -> Optional[Identity]:
        self.calls.append("get_session")
        return self._current

    async def on_auth_state_change(self, listener: AuthListener) -> AuthSubscription:
        return self._add_listener(listener)

    async def verify_otp(self, token_hash: str, type: str = "email") -> Optional[Identity]:
        self.calls.append("verify_otp")
        if token_hash in self._used_tokens:
            raise AuthError(
                "Email address has already been confirmed",
                status=403,
            )

        email = self._tokens.pop(token_hash, None)
        if email is None:
            raise AuthError(
                "Email link is invalid or has expired",
                code="otp_expired",
                status=403,
            )

        self._used_tokens[token_hash] = email
        first_confirmation = not self._accounts[email].identity.is_confirmed
        identity = self._confirm(email) if first_confirmation else self._accounts[email].identity

        self._current = identity
        await self._emit(AuthEvent.SIGNED_IN, identity)
        if first_confirmation:
            await self._emit(AuthEvent.SIGNED_UP, identity)
        return identity

    async def resend(
        self,
        type: str,
        email: str,
        redirect_url: Optional[str] = None,
    ) -> None:
        self.calls.append("resend")
        account = self._accounts.get(email)
        if account is None:
            # The hosted provider does not reveal whether an email is registered
            return
        if account.identity.is_confirmed:
            raise AuthError("Email address has already been confirmed", status=422)
        self._send_verification(email, redirect_url)
