"""Unit tests for AccountApplicationService using an in-memory repository."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.pf_account.application.schemas import CreateAccountRequest, UpdateAccountRequest
from src.pf_account.application.service import AccountApplicationService
from src.pf_common.enums import AccountType
from src.pf_common.errors import AccountNotFoundError, ValidationError
from src.pf_common.unit_of_work import UnitOfWork
from tests.fakes import OTHER_USER_ID, USER_ID, FakeAccountRepository, FakeSession


def _svc(repo: FakeAccountRepository) -> AccountApplicationService:
    return AccountApplicationService(repo=repo, uow=UnitOfWork(timeout_seconds=1))


class TestCreateAccount:
    async def test_checking(self, accounts: FakeAccountRepository, db: FakeSession) -> None:
        req = CreateAccountRequest(name="Main", type=AccountType.CHECKING, balance=Decimal("1000"))

        result = await _svc(accounts).create_account(db, USER_ID, req)

        assert result.type == "checking"
        assert result.balance == Decimal("1000.00")
        assert result.balance_display == "$1,000.00"
        assert result.currency == "USD"
        assert result.details is None
        assert db.commits == 1

    async def test_credit_card_defaults_available_to_limit(
        self, accounts: FakeAccountRepository, db: FakeSession
    ) -> None:
        req = CreateAccountRequest(name="Card", type=AccountType.CREDIT_CARD, credit_limit=Decimal("500"))

        result = await _svc(accounts).create_account(db, USER_ID, req)

        assert result.details is not None
        assert result.details.available_credit == Decimal("500.00")
        assert result.details.utilized_credit == Decimal("0.00")
        assert accounts.available_credit(result.id) == Decimal("500.00")

    async def test_credit_card_requires_limit(self, accounts: FakeAccountRepository) -> None:
        db = MagicMock()
        db.commit = AsyncMock()
        req = CreateAccountRequest(name="Card", type=AccountType.CREDIT_CARD)
        with pytest.raises(ValidationError):
            await _svc(accounts).create_account(db, USER_ID, req)
        assert accounts.accounts == {}
        db.commit.assert_not_awaited()

    async def test_loan_requires_amount(self, accounts: FakeAccountRepository, db: FakeSession) -> None:
        req = CreateAccountRequest(name="Car", type=AccountType.LOAN)
        with pytest.raises(ValidationError, match="loan_amount"):
            await _svc(accounts).create_account(db, USER_ID, req)

    async def test_loan_balance_defaults_to_amount(
        self, accounts: FakeAccountRepository, db: FakeSession
    ) -> None:
        req = CreateAccountRequest(name="Car", type=AccountType.LOAN, loan_amount=Decimal("9000"))
        result = await _svc(accounts).create_account(db, USER_ID, req)
        assert result.details is not None
        assert result.details.loan_balance == Decimal("9000.00")

    async def test_currency_uppercased(self, accounts: FakeAccountRepository, db: FakeSession) -> None:
        req = CreateAccountRequest(name="Euro", type=AccountType.SAVINGS, currency="eur")
        result = await _svc(accounts).create_account(db, USER_ID, req)
        assert result.currency == "EUR"


class TestReads:
    async def test_get_includes_details(self, accounts: FakeAccountRepository) -> None:
        card = accounts.add("0", AccountType.CREDIT_CARD, available_credit="300", credit_limit="500")
        result = await _svc(accounts).get_account(MagicMock(), USER_ID, card.id)
        assert result.details is not None
        assert result.details.utilized_credit == Decimal("200")

    async def test_get_other_user_not_found(self, accounts: FakeAccountRepository) -> None:
        acc = accounts.add("10")
        with pytest.raises(AccountNotFoundError):
            await _svc(accounts).get_account(MagicMock(), OTHER_USER_ID, acc.id)

    async def test_list_filters_by_type(self, accounts: FakeAccountRepository) -> None:
        accounts.add("10", AccountType.CHECKING)
        accounts.add("20", AccountType.SAVINGS)
        result = await _svc(accounts).list_accounts(MagicMock(), USER_ID, "savings", None)
        assert [a.type for a in result.accounts] == ["savings"]

    async def test_balance_summary(self, accounts: FakeAccountRepository) -> None:
        accounts.add("100", AccountType.CHECKING)
        accounts.add("50.50", AccountType.SAVINGS)
        accounts.add("999", AccountType.CHECKING, user_id=OTHER_USER_ID)
        result = await _svc(accounts).balance_summary(MagicMock(), USER_ID)
        assert result.total_balance == Decimal("150.50")
        assert result.total_balance_display == "$150.50"
        assert result.by_type["checking"] == Decimal("100")


class TestUpdateAccount:
    async def test_descriptive_fields(self, accounts: FakeAccountRepository, db: FakeSession) -> None:
        acc = accounts.add("100")
        req = UpdateAccountRequest(name="Bills", currency="eur", institution_name="Local Bank")

        result = await _svc(accounts).update_account(db, USER_ID, acc.id, req)

        assert result.name == "Bills"
        assert result.currency == "EUR"
        assert result.institution_name == "Local Bank"
        assert result.balance == Decimal("100")
        assert db.commits == 1

    def test_balance_field_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            UpdateAccountRequest.model_validate({"balance": "5000"})

    async def test_null_name_ignored(self, accounts: FakeAccountRepository, db: FakeSession) -> None:
        acc = accounts.add("100")
        req = UpdateAccountRequest.model_validate({"name": None, "institution_name": None})

        result = await _svc(accounts).update_account(db, USER_ID, acc.id, req)

        assert result.name == "checking account"
        assert result.institution_name is None

    async def test_other_user_not_found(self, accounts: FakeAccountRepository, db: FakeSession) -> None:
        acc = accounts.add("100", user_id=OTHER_USER_ID)
        with pytest.raises(AccountNotFoundError):
            await _svc(accounts).update_account(db, USER_ID, acc.id, UpdateAccountRequest(name="x"))
        assert accounts.accounts[acc.id].name == "checking account"
        assert db.rollbacks == 1


class TestActivation:
    async def test_deactivate_hides_from_summary_and_active_list(
        self, accounts: FakeAccountRepository, db: FakeSession
    ) -> None:
        keep = accounts.add("100")
        closed = accounts.add("40")
        svc = _svc(accounts)

        result = await svc.deactivate_account(db, USER_ID, closed.id)

        assert result.is_active is False
        assert result.balance == Decimal("40")
        summary = await svc.balance_summary(db, USER_ID)
        assert summary.total_balance == Decimal("100")
        active = await svc.list_accounts(db, USER_ID, None, True)
        assert [a.id for a in active.accounts] == [keep.id]
        inactive = await svc.list_accounts(db, USER_ID, None, False)
        assert [a.id for a in inactive.accounts] == [closed.id]

    async def test_reactivate_restores(self, accounts: FakeAccountRepository, db: FakeSession) -> None:
        acc = accounts.add("40")
        svc = _svc(accounts)
        await svc.deactivate_account(db, USER_ID, acc.id)

        result = await svc.reactivate_account(db, USER_ID, acc.id)

        assert result.is_active is True
        assert (await svc.balance_summary(db, USER_ID)).total_balance == Decimal("40")

    async def test_flag_via_update(self, accounts: FakeAccountRepository, db: FakeSession) -> None:
        acc = accounts.add("40")
        result = await _svc(accounts).update_account(
            db, USER_ID, acc.id, UpdateAccountRequest(is_active=False)
        )
        assert result.is_active is False

    async def test_unknown_account(self, accounts: FakeAccountRepository, db: FakeSession) -> None:
        with pytest.raises(AccountNotFoundError):
            await _svc(accounts).deactivate_account(
                db, USER_ID, "99999999-9999-9999-9999-999999999999"
            )
