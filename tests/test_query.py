from datetime import timedelta, timezone
from decimal import Decimal

import pytest

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.domain.enums import EntityType
from app.domain.mixins import utcnow
from app.schemas.query import ListFilter, PageRequest, SortSpec
from app.services.payouts import PayoutService
from app.services.query import QueryService
from app.services.review import ReviewService

pytestmark = pytest.mark.anyio


async def _submit(session, actor, reference: str):
    return await ReviewService(session).submit(
        actor, None, [{"kind": "gmail", "reference": reference}]
    )


@pytest.fixture
async def queue(session, admin, supplier, other_supplier):
    """Four submissions: pending, in_review, verified, pending (oldest first)."""
    review = ReviewService(session)
    first = await _submit(session, supplier, "1@gmail.com")
    second = await _submit(session, other_supplier, "2@gmail.com")
    third = await _submit(session, supplier, "3@gmail.com")
    fourth = await _submit(session, other_supplier, "4@gmail.com")
    await review.claim(admin, second.id)
    await review.claim(admin, third.id)
    await review.verify(admin, third.id)
    return [first.id, second.id, third.id, fourth.id]


async def test_review_queue_is_fifo_over_open_submissions(session, admin, queue, snapshots):
    page = await QueryService(session, snapshots).view(admin, "review-queue")
    assert [s.id for s in page.items] == [queue[0], queue[1], queue[3]]
    assert {s.status for s in page.items} == {"pending", "in_review"}
    assert page.total == 3


async def test_filter_by_status_set_and_account(session, admin, supplier, queue, snapshots):
    query = QueryService(session, snapshots)
    page = await query.list(
        admin,
        EntityType.SUBMISSION,
        ListFilter(statuses=["pending", "verified"], account_id=supplier.id),
    )
    assert [s.id for s in page.items] == [queue[0], queue[2]]


async def test_sort_by_status_uses_lifecycle_order(session, admin, queue, snapshots):
    page = await QueryService(session, snapshots).list(
        admin, EntityType.SUBMISSION, sort=SortSpec(field="status", order="asc")
    )
    assert [s.status for s in page.items] == ["pending", "pending", "in_review", "verified"]
    # Equal keys fall back to id order
    pending = [s.id for s in page.items[:2]]
    assert pending == sorted(pending)


async def test_newest_first(session, admin, queue, snapshots):
    page = await QueryService(session, snapshots).list(
        admin, EntityType.SUBMISSION, sort=SortSpec(field="created_at", order="desc")
    )
    assert [s.id for s in page.items] == list(reversed(queue))


async def test_date_range_filter(session, admin, queue, snapshots):
    query = QueryService(session, snapshots)
    future = utcnow() + timedelta(days=1)
    page = await query.list(admin, EntityType.SUBMISSION, ListFilter(created_from=future))
    assert page.total == 0

    with pytest.raises(ValidationError) as exc:
        await query.list(
            admin,
            EntityType.SUBMISSION,
            ListFilter(created_from=future, created_to=future - timedelta(days=2)),
        )
    assert "created_from" in exc.value.errors


async def test_date_range_filter_accepts_offset_timestamps(session, admin, queue, snapshots):
    query = QueryService(session, snapshots)
    kathmandu = timezone(timedelta(hours=5, minutes=45))
    an_hour_ago = (utcnow() - timedelta(hours=1)).astimezone(kathmandu)

    since = await query.list(admin, EntityType.SUBMISSION, ListFilter(created_from=an_hour_ago))
    assert since.total == 4
    until = await query.list(admin, EntityType.SUBMISSION, ListFilter(created_to=an_hour_ago))
    assert until.total == 0


async def test_unknown_status_is_rejected(session, admin, snapshots):
    with pytest.raises(ValidationError) as exc:
        await QueryService(session, snapshots).list(
            admin, EntityType.PAYOUT_REQUEST, ListFilter(statuses=["in_review"])
        )
    assert "statuses" in exc.value.errors


async def test_pages_come_from_one_snapshot(session, admin, supplier, queue, snapshots):
    query = QueryService(session, snapshots)
    first = await query.list(admin, EntityType.SUBMISSION, page=PageRequest(page=1, limit=3))
    assert first.total == 4
    assert len(first.items) == 3

    # A write between page fetches must not shift the sweep
    await _submit(session, supplier, "5@gmail.com")

    second = await query.list(
        admin,
        EntityType.SUBMISSION,
        page=PageRequest(page=2, limit=3, snapshot_id=first.snapshot_id),
    )
    assert second.total == 4
    assert second.snapshot_id == first.snapshot_id
    swept = [s.id for s in first.items + second.items]
    assert swept == queue

    fresh = await query.list(admin, EntityType.SUBMISSION)
    assert fresh.total == 5
    assert fresh.snapshot_id != first.snapshot_id


async def test_snapshot_belongs_to_its_owner(session, admin, other_admin, queue, snapshots):
    query = QueryService(session, snapshots)
    first = await query.list(admin, EntityType.SUBMISSION, page=PageRequest(limit=1))
    with pytest.raises(ValidationError) as exc:
        await query.list(
            other_admin,
            EntityType.SUBMISSION,
            page=PageRequest(page=2, limit=1, snapshot_id=first.snapshot_id),
        )
    assert "snapshot" in exc.value.errors
    with pytest.raises(ValidationError):
        await query.list(
            admin,
            EntityType.PAYOUT_REQUEST,
            page=PageRequest(page=2, limit=1, snapshot_id=first.snapshot_id),
        )
    with pytest.raises(ValidationError):
        await query.list(admin, EntityType.SUBMISSION, page=PageRequest(snapshot_id="nope"))


async def test_suppliers_only_see_their_own_rows(
    session, supplier, other_supplier, queue, snapshots
):
    query = QueryService(session, snapshots)
    page = await query.list(supplier, EntityType.SUBMISSION)
    assert [s.id for s in page.items] == [queue[0], queue[2]]
    assert all(s.account_id == supplier.id for s in page.items)

    with pytest.raises(AuthorizationError):
        await query.list(supplier, EntityType.SUBMISSION, ListFilter(account_id=other_supplier.id))


async def test_payment_views(session, admin, funded_supplier, snapshots):
    payouts = PayoutService(session)
    requested = await payouts.request(funded_supplier, None, Decimal("100"))
    paid = await payouts.request(funded_supplier, None, Decimal("200"))
    await payouts.decide(admin, paid.id, "approved")
    await payouts.mark_paid(admin, paid.id, "TXN7")

    query = QueryService(session, snapshots)
    open_requests = await query.view(admin, "payout-requests")
    assert [p.id for p in open_requests.items] == [requested.id]
    payments = await query.view(admin, "payments")
    assert [p.id for p in payments.items] == [paid.id]
    assert payments.items[0].external_reference == "TXN7"


async def test_unknown_view(session, admin, snapshots):
    with pytest.raises(NotFoundError):
        await QueryService(session, snapshots).view(admin, "archive")


async def test_accounts_are_not_listable(session, admin, snapshots):
    with pytest.raises(ValidationError):
        await QueryService(session, snapshots).list(admin, EntityType.ACCOUNT)


async def test_snapshot_is_bound_to_its_view(session, admin, queue, snapshots):
    query = QueryService(session, snapshots)
    first = await query.view(admin, "review-queue", page=PageRequest(limit=2))

    with pytest.raises(ValidationError) as exc:
        await query.view(
            admin, "verified", page=PageRequest(page=2, limit=2, snapshot_id=first.snapshot_id)
        )
    assert "snapshot" in exc.value.errors

    with pytest.raises(ValidationError):
        await query.list(
            admin,
            EntityType.SUBMISSION,
            ListFilter(statuses=["verified"]),
            page=PageRequest(page=2, limit=2, snapshot_id=first.snapshot_id),
        )

    second = await query.view(
        admin, "review-queue", page=PageRequest(page=2, limit=2, snapshot_id=first.snapshot_id)
    )
    assert [s.id for s in first.items + second.items] == [queue[0], queue[1], queue[3]]
