"""Profile domain service - read/update profile data and change password."""

import logging
from dataclasses import dataclass

from .exceptions import InvalidCredentialsError, NotFoundError, ValidationError
from .passwords import DEFAULT_ROUNDS, hash_password, verify_password
from .ports import AccountRepository, Profile, ProfileData
from .registration import normalize_email

logger = logging.getLogger(__name__)


@dataclass
class ProfileService:
    accounts: AccountRepository
    bcrypt_rounds: int = DEFAULT_ROUNDS

    def get_profile(self, account_id: int) -> Profile:
        profile = self.accounts.get_profile(account_id)
        if profile is None:
            raise NotFoundError(str(account_id))
        return profile

    def update_profile(
        self, account_id: int, name: str, email: str, data: ProfileData | None = None
    ) -> Profile:
        """
        Update name, email and quiz answers.

        Raises:
            ValidationError: Name or email blank
            EmailInUseError: Email belongs to another account
            NotFoundError: Account does not exist
        """
        name = name.strip()
        normalized_email = normalize_email(email)
        if not name or not normalized_email:
            raise ValidationError(["Nome e email são obrigatórios"])

        self.accounts.update_profile(account_id, name, normalized_email, data)
        logger.info("Profile updated for account %s", account_id)
        return self.get_profile(account_id)

    def change_password(self, account_id: int, current_password: str, new_password: str) -> None:
        """
        Replace the password after checking the current one.

        Raises:
            ValidationError: Either password missing
            NotFoundError: Account does not exist
            InvalidCredentialsError: Current password is wrong
        """
        if not current_password or not new_password:
            raise ValidationError(["Senha atual e nova senha são obrigatórias"])

        account = self.accounts.find_by_id(account_id)
        if account is None:
            raise NotFoundError(str(account_id))
        if not verify_password(current_password, account.password_hash):
            raise InvalidCredentialsError("wrong current password")

        self.accounts.update_password_hash(
            account_id, hash_password(new_password, rounds=self.bcrypt_rounds)
        )
        logger.info("Password changed for account %s", account_id)
