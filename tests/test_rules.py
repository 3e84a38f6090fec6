from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError
from app.domain import rules
from app.domain.account import Account
from app.domain.payout import PayoutRequest


def _account(earned="1000.00", verified=True, status="active") -> Account:
    return Account(
        id="acc-1",
        role="supplier",
        display_name="Ram",
        email="ram@example.com",
        status=status,
        verification_status="verified" if verified else "unverified",
        total_earned=Decimal(earned),
    )


def _payout(amount: str, status: str) -> PayoutRequest:
    return PayoutRequest(account_id="acc-1", amount=Decimal(amount), status=status)


# ---------------------------
# Constructors
# ---------------------------

def test_new_account_lists_every_violation():
    with pytest.raises(ValidationError) as exc:
        rules.new_account(role="owner", display_name="  ", email="")
    assert set(exc.value.errors) == {"role", "display_name", "email"}


def test_new_account_normalizes_email():
    account = rules.new_account(role="supplier", display_name="Ram", email=" Ram@Example.COM ")
    assert account.email == "ram@example.com"
    assert account.verification_status == "unverified"
    assert account.status == "active"


def test_new_account_rejects_malformed_email():
    with pytest.raises(ValidationError) as exc:
        rules.new_account(role="supplier", display_name="Ram", email="ram.example.com")
    assert "email" in exc.value.errors


def test_new_submission_requires_documents():
    with pytest.raises(ValidationError) as exc:
        rules.new_submission(account_id="acc-1", documents=[], max_documents=10)
    assert exc.value.errors == {"documents": ["must contain at least one document"]}


def test_new_submission_reports_all_document_problems():
    docs = [
        {"kind": "gmail", "reference": "a@gmail.com"},
        {"kind": "", "reference": "b@gmail.com"},
        {"kind": "gmail", "reference": "A@gmail.com"},
        "not-a-document",
    ]
    with pytest.raises(ValidationError) as exc:
        rules.new_submission(account_id="acc-1", documents=docs, max_documents=10)
    assert set(exc.value.errors) == {
        "documents[1].kind",
        "documents[2].reference",
        "documents[3]",
    }


def test_new_submission_enforces_max_documents():
    docs = [{"kind": "gmail", "reference": f"{i}@gmail.com"} for i in range(3)]
    with pytest.raises(ValidationError) as exc:
        rules.new_submission(account_id="acc-1", documents=docs, max_documents=2)
    assert "documents" in exc.value.errors


def test_new_submission_keeps_document_order():
    docs = [{"kind": "Outlook", "reference": "z@outlook.com"}, {"kind": "gmail", "reference": "a@gmail.com"}]
    submission = rules.new_submission(account_id="acc-1", documents=docs, max_documents=10)
    assert [d["reference"] for d in submission.documents] == ["z@outlook.com", "a@gmail.com"]
    assert submission.documents[0]["kind"] == "outlook"
    assert submission.document_count == 2
    assert submission.status == "pending"


@pytest.mark.parametrize("amount", ["0", "-5", "abc", "10.001", None])
def test_new_payout_request_rejects_bad_amounts(amount):
    with pytest.raises(ValidationError) as exc:
        rules.new_payout_request(account_id="acc-1", amount=amount, payment_details={"method": "esewa"})
    assert "amount" in exc.value.errors


def test_new_payout_request_needs_profile_and_amount_together():
    with pytest.raises(ValidationError) as exc:
        rules.new_payout_request(account_id="acc-1", amount="-1", payment_details=None)
    assert set(exc.value.errors) == {"amount", "payout_profile"}


def test_new_payout_request_applies_minimum():
    with pytest.raises(ValidationError):
        rules.new_payout_request(
            account_id="acc-1", amount="5", payment_details={"method": "esewa"}, min_amount=Decimal("10")
        )


def test_payout_profile_requires_method_fields():
    with pytest.raises(ValidationError) as exc:
        rules.validate_payout_profile({"method": "bank_transfer", "bank_name": "NIC Asia"})
    assert set(exc.value.errors) == {"account_holder_name", "account_number"}


def test_payout_profile_unknown_method():
    with pytest.raises(ValidationError) as exc:
        rules.validate_payout_profile({"method": "cheque"})
    assert "method" in exc.value.errors


def test_payout_profile_is_normalized():
    profile = rules.validate_payout_profile(
        {"method": "khalti", "wallet_id": " 9800000000 ", "bank_name": "ignored"}
    )
    assert profile == {"method": "khalti", "wallet_id": "9800000000"}


def test_require_reason():
    assert rules.require_reason("reason", "  missing doc ") == "missing doc"
    with pytest.raises(ValidationError):
        rules.require_reason("reason", "   ")


# ---------------------------
# Predicates
# ---------------------------

def test_available_balance_counts_only_approved_and_paid():
    history = [
        _payout("100", "approved"),
        _payout("200", "paid"),
        _payout("300", "rejected"),
        _payout("50", "requested"),
    ]
    account = _account()
    assert rules.available_balance(account, history) == Decimal("700")
    assert rules.requestable_balance(account, history) == Decimal("650")


def test_can_request_payout():
    history = [_payout("600", "approved")]
    assert rules.can_request_payout(_account(), Decimal("400"), history)
    assert not rules.can_request_payout(_account(), Decimal("400.01"), history)
    assert not rules.can_request_payout(_account(verified=False), Decimal("1"), [])
    assert not rules.can_request_payout(_account(status="deactivated"), Decimal("1"), [])
