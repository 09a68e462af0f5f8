"""
Authentication Service for the civic reporter.
Handles sign-up, sign-in, and the on-device session.
"""
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import (
    AccountNotFoundError,
    InvalidCredentialsError,
    StorageError,
)
from ..models import Account, Session, encode_account, decode_account
from ...utils.ids import generate_account_id, generate_session_token
from ...utils.locks import store_lock
from .interfaces import IKeyValueStore
from .validation_service import validate_login, validate_registration

logger = logging.getLogger(__name__)

CREDENTIALS_KEY_PREFIX = "user_credentials_"
SESSION_ACCOUNT_KEY = "user_data"
SESSION_TOKEN_KEY = "user_token"


def credentials_key(mobile_number: str) -> str:
    return f"{CREDENTIALS_KEY_PREFIX}{mobile_number}"


class AuthService:
    """Service for handling all authentication operations"""

    def __init__(self, store: IKeyValueStore):
        self.store = store
        # Account and session keys share one lock per store
        self._lock = store_lock(store, SESSION_TOKEN_KEY)

    # =========================================================================
    # Registration / Sign-in
    # =========================================================================

    def register(
        self,
        full_name: str,
        mobile_number: str,
        password: str,
        confirm_password: str,
    ) -> Session:
        """
        Register a new account and sign it in.

        Args:
            full_name: Display name, stamped on submitted reports
            mobile_number: Exactly 10 digits, the account key
            password: At least 6 characters, stored as entered
            confirm_password: Must equal password

        Returns:
            The new Session

        Raises:
            ValidationError: Naming the first invalid field
            StorageError: If the store cannot be read or written
        """
        validate_registration(full_name, mobile_number, password, confirm_password)

        account = Account(
            full_name=full_name,
            mobile_number=mobile_number,
            password=password,
            id=generate_account_id(),
        )

        with self._lock:
            # Re-registration replaces the previous account under this number
            if self.store.get(credentials_key(mobile_number)) is not None:
                logger.warning(f"Overwriting existing account for mobile ending {mobile_number[-4:]}")

            session = Session(token=generate_session_token(), account=account)
            encoded = encode_account(account)
            self.store.set_many({
                credentials_key(mobile_number): encoded,
                SESSION_ACCOUNT_KEY: encoded,
                SESSION_TOKEN_KEY: session.token,
            })

        logger.info(f"Registered account {account.id}")
        return session

    def login(self, mobile_number: str, password: str) -> Session:
        """
        Sign in with mobile number and password.

        Raises:
            ValidationError: Bad mobile format or missing password
            AccountNotFoundError: No account for this number
            InvalidCredentialsError: Password mismatch (nothing is written)
            StorageError: If the store cannot be read or written
        """
        validate_login(mobile_number, password)

        with self._lock:
            account = self._load_account(credentials_key(mobile_number))
            if account is None:
                raise AccountNotFoundError(mobile_number)

            if account.password != password:
                raise InvalidCredentialsError()

            session = Session(token=generate_session_token(), account=account)
            self.store.set_many({
                SESSION_ACCOUNT_KEY: encode_account(account),
                SESSION_TOKEN_KEY: session.token,
            })

        logger.info(f"Signed in account {account.id}")
        return session

    def logout(self) -> None:
        """Clear the session. Safe to call when nobody is signed in."""
        with self._lock:
            self.store.remove_many([SESSION_TOKEN_KEY, SESSION_ACCOUNT_KEY])
        logger.info("Signed out")

    # =========================================================================
    # Session lookup
    # =========================================================================

    def current_session(self) -> Optional[Session]:
        token = self.store.get(SESSION_TOKEN_KEY)
        if not token:
            return None

        account = self._load_account(SESSION_ACCOUNT_KEY)
        if account is None:
            logger.warning("Session token present without cached account; treating as signed out")
            return None

        return Session(token=token, account=account)

    def is_authenticated(self) -> bool:
        """Startup check: signed in iff a complete session is persisted."""
        return self.current_session() is not None

    # =========================================================================
    # Helpers
    # =========================================================================

    def _load_account(self, key: str) -> Optional[Account]:
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            return decode_account(raw)
        except PydanticValidationError as e:
            logger.error(f"Stored account under '{key}' is unreadable: {e}")
            raise StorageError("decode", f"corrupt account record under {key}")
