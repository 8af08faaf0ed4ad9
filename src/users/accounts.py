"""
Account Service

Register, login and profile for the users API. Credentials are handled by the
remote auth service; the user record itself goes through the generic
RecordController so it gets the same validation, timestamps and
empty-confirmation policy as any other record.
"""

import logging
from typing import Any, Dict, Union

from src.store.auth import AuthClient
from src.store.controller import RecordController
from src.store.log import get_logger
from src.store.outcomes import FlashLevel, Outcome, OutcomeKind
from src.store.results import FaultKind, StoreFault
from src.store.validation import LoginInput, RegistrationInput, validate


class AccountService:
    """Account operations; every method returns an Outcome."""

    def __init__(
        self,
        auth: AuthClient,
        users: RecordController,
        logger: Union[logging.Logger, logging.LoggerAdapter, None] = None,
    ):
        self.auth = auth
        self.users = users
        self.logger = logger or get_logger(__name__)

    def _failed(self, fault: StoreFault) -> Outcome:
        message = f"Registration failed: {fault.describe()}"
        self.logger.error(message, extra={"fault": fault.kind.value})
        return Outcome.failure(fault.kind, message)

    async def register(self, data: Dict[str, Any]) -> Outcome:
        """
        Validate, sign up with the auth service, then create the user record.

        The password is only ever sent to the auth service. Signing up an
        email that already has an account is a conflict, unless no user
        record exists for it yet; then the record is created.
        """
        parsed, errors = validate(RegistrationInput, data)
        if parsed is None:
            self.logger.info("Rejected registration input", extra={"fields": sorted(errors)})
            return Outcome.redirect(
                "/register",
                FlashLevel.ERROR,
                fault=FaultKind.VALIDATION_FAILED,
                errors=errors,
                old_input={k: v for k, v in data.items() if k != "password"},
            )

        signed_up = await self.auth.sign_up(parsed.email, parsed.password)
        if isinstance(signed_up, StoreFault) and signed_up.kind == FaultKind.CONFLICT:
            # an earlier registration may have stopped between sign-up and record insert
            existing = await self.users.client.find_by(self.users.collection, "email", parsed.email)
            if isinstance(existing, StoreFault):
                return self._failed(existing)
            if existing:
                return self._failed(signed_up)
            self.logger.warning(
                "Account exists without a user record, creating it",
                extra={"email": parsed.email},
            )
        elif isinstance(signed_up, StoreFault):
            return self._failed(signed_up)

        outcome = await self.users.submit_create({"name": parsed.name, "email": parsed.email})
        if outcome.kind == OutcomeKind.REDIRECT and not outcome.is_error:
            return Outcome.redirect(
                outcome.target,
                FlashLevel.SUCCESS,
                "User registered successfully.",
                payload=outcome.payload,
            )
        return outcome

    async def login(self, data: Dict[str, Any]) -> Outcome:
        parsed, errors = validate(LoginInput, data)
        if parsed is None:
            return Outcome.redirect(
                "/login",
                FlashLevel.ERROR,
                fault=FaultKind.VALIDATION_FAILED,
                errors=errors,
                old_input={k: v for k, v in data.items() if k != "password"},
            )

        session = await self.auth.sign_in(parsed.email, parsed.password)
        if isinstance(session, StoreFault):
            self.logger.warning(f"Login failed: {session.describe()}", extra={"email": parsed.email})
            return Outcome.failure(session.kind, session.message)

        self.logger.info("User logged in", extra={"email": parsed.email})
        return Outcome.success({
            "access_token": session.get("access_token"),
            "token_type": session.get("token_type", "bearer"),
            "expires_in": session.get("expires_in"),
            "user": session.get("user"),
        })

    async def profile(self, access_token: str) -> Outcome:
        user = await self.auth.get_user(access_token)
        if isinstance(user, StoreFault):
            return Outcome.failure(user.kind, user.message)
        return Outcome.success({"user": user})
