"""Unit tests for InMemoryAccountRepository."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from nutrisnap.domain.exceptions import ConflictError, EmailInUseError, NotFoundError
from nutrisnap.domain.ports import ExternalIdentity, ProfileData


class TestCreateFromHash:
    def test_creates_verified_account(self, account_repository) -> None:
        account = account_repository.create_from_hash("Ana", "ana@x.com", "$2b$10$hash")

        assert account.email_verified is True
        assert account_repository.find_by_email("ana@x.com") == account
        assert account_repository.find_by_id(account.id) == account

    def test_verified_email_conflicts(self, account_repository) -> None:
        account_repository.create_from_hash("Ana", "ana@x.com", "$2b$10$hash")

        with pytest.raises(ConflictError):
            account_repository.create_from_hash("Other", "ana@x.com", "$2b$10$other")

    def test_unverified_row_is_overwritten(self, account_repository) -> None:
        legacy = account_repository.create_from_hash(
            "Old", "ana@x.com", "$2b$10$old", email_verified=False
        )

        account = account_repository.create_from_hash("Ana", "ana@x.com", "$2b$10$new")

        assert account.id == legacy.id
        assert account.name == "Ana"
        assert account.password_hash == "$2b$10$new"
        assert account.email_verified is True

    def test_concurrent_commits_create_one_account(self, account_repository) -> None:
        results = []
        lock = threading.Lock()

        def commit(i: int) -> None:
            try:
                account_repository.create_from_hash(f"Ana{i}", "race@x.com", "$2b$10$hash")
                outcome = "created"
            except ConflictError:
                outcome = "conflict"
            with lock:
                results.append(outcome)

        with ThreadPoolExecutor(max_workers=5) as executor:
            for f in [executor.submit(commit, i) for i in range(5)]:
                f.result()

        assert results.count("created") == 1
        assert results.count("conflict") == 4


class TestIdentityAccounts:
    def test_create_from_identity_has_no_password(self, account_repository) -> None:
        account = account_repository.create_from_identity(
            ExternalIdentity(email="G@X.com", name="Gabi", picture="http://pic")
        )

        assert account.email == "g@x.com"
        assert account.password_hash is None
        assert account.email_verified is True
        assert account.photo == "http://pic"

    def test_create_from_identity_conflicts_on_existing_email(self, account_repository) -> None:
        account_repository.create_from_hash("Ana", "ana@x.com", "$2b$10$hash", email_verified=False)

        with pytest.raises(ConflictError):
            account_repository.create_from_identity(ExternalIdentity(email="ana@x.com", name="Ana"))

    def test_mark_email_verified(self, account_repository) -> None:
        account = account_repository.create_from_hash(
            "Ana", "ana@x.com", "$2b$10$hash", email_verified=False
        )

        account_repository.mark_email_verified(account.id)

        assert account_repository.find_by_id(account.id).email_verified is True


class TestProfiles:
    def test_profile_defaults_to_empty_quiz(self, account_repository) -> None:
        account = account_repository.create_from_hash("Ana", "ana@x.com", "$2b$10$hash")

        profile = account_repository.get_profile(account.id)

        assert profile.account == account
        assert profile.data == ProfileData()

    def test_update_profile_stores_quiz(self, account_repository) -> None:
        account = account_repository.create_from_hash("Ana", "ana@x.com", "$2b$10$hash")
        data = ProfileData(age=30, sex="F", height=1.65, current_weight=70.0, goal="perder_peso")

        account_repository.update_profile(account.id, "Ana Maria", "ana.maria@x.com", data)

        profile = account_repository.get_profile(account.id)
        assert profile.account.name == "Ana Maria"
        assert profile.account.email == "ana.maria@x.com"
        assert profile.data == data

    def test_update_profile_rejects_email_of_other_account(self, account_repository) -> None:
        ana = account_repository.create_from_hash("Ana", "ana@x.com", "$2b$10$hash")
        account_repository.create_from_hash("Bia", "bia@x.com", "$2b$10$hash")

        with pytest.raises(EmailInUseError):
            account_repository.update_profile(ana.id, "Ana", "bia@x.com", None)

    def test_update_missing_account(self, account_repository) -> None:
        with pytest.raises(NotFoundError):
            account_repository.update_profile(99, "Ana", "ana@x.com", None)

    def test_get_profile_missing(self, account_repository) -> None:
        assert account_repository.get_profile(99) is None
