"""Credential validator - timeout-bounded calls to the account collaborator.

The account store may sit behind the network. Every call made here is
bounded by a timeout, and every way the store can fail (timeout, outage)
is reported as DependencyUnavailableError so the orchestrator never
mistakes an outage for a wrong password.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from tokenguard.application.exceptions.exceptions import DependencyUnavailableError
from tokenguard.domain.entities.account import AccountSnapshot, CredentialCheck
from tokenguard.domain.exceptions import AccountStoreUnavailableException
from tokenguard.domain.repositories.account_store import IAccountStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CredentialValidator:
    """
    Wraps IAccountStore with a timeout and a single failure type.

    Owns no account data itself.
    """

    def __init__(self, account_store: IAccountStore, timeout_seconds: float = 3.0):
        """
        Initialize the validator.

        Args:
            account_store: External account collaborator
            timeout_seconds: Upper bound for each collaborator call

        Raises:
            ValueError: If timeout_seconds is not positive
        """
        if timeout_seconds <= 0:
            raise ValueError("Credential timeout must be positive")

        self._account_store = account_store
        self._timeout_seconds = timeout_seconds

    async def verify(self, identifier: str, secret: str) -> CredentialCheck:
        """
        Verify credentials against the account store.

        Raises:
            DependencyUnavailableError: On timeout or store outage
        """
        return await self._call(
            self._account_store.verify_credentials(identifier, secret),
            operation="verify_credentials",
        )

    async def get_account(self, subject_id: str) -> AccountSnapshot | None:
        """
        Read the current account snapshot for a subject.

        Raises:
            DependencyUnavailableError: On timeout or store outage
        """
        return await self._call(
            self._account_store.get_account(subject_id),
            operation="get_account",
        )

    async def _call(self, call: Awaitable[T], operation: str) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout_seconds)
        except TimeoutError as exc:
            logger.warning(
                f"Account store {operation} timed out after {self._timeout_seconds}s"
            )
            raise DependencyUnavailableError() from exc
        except AccountStoreUnavailableException as exc:
            logger.warning(f"Account store {operation} unavailable: {exc.message}")
            raise DependencyUnavailableError() from exc
