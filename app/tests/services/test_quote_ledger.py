import uuid
from datetime import timedelta

import pytest

from app.core.errors import Conflict, NotFound, ValidationError
from app.models.quote import Quote
from app.services.quote_ledger import QuoteLedger
from app.services.sms import Notifier
from app.tests.fakes import FakeSms


def create_quote(ledger, db, owner, **overrides):
    args = dict(
        owner_id=owner.id,
        window_count=2,
        measurements=[{"width": 1, "height": 1}, {"width": 2, "height": 1}],
        material="fiberglass",
        mesh_type="sliding",
        location="Nairobi",
        warranty="standard",
        owner_phone=owner.phone,
    )
    args.update(overrides)
    return ledger.create(db, **args)


def test_create_persists_priced_pending_quote(db, ledger, make_user, sms):
    owner = make_user()
    q = create_quote(ledger, db, owner)

    stored = db.get(Quote, q.id)
    assert stored.total_area == pytest.approx(3.0)
    assert stored.total_cost == pytest.approx(6300.0)
    assert stored.status == "pending"
    assert stored.payment_status == "pending"
    assert stored.payment_details is None
    assert stored.valid_until - stored.created_at == timedelta(days=7)
    assert stored.measurements == [{"width": 1.0, "height": 1.0}, {"width": 2.0, "height": 1.0}]

    assert len(sms.sent) == 1
    to, text = sms.sent[0]
    assert to == "+254712345678"
    assert "KES 6300" in text


def test_create_survives_notification_failure(db, make_user):
    ledger = QuoteLedger(notifier=Notifier(FakeSms(fail=True)))
    q = create_quote(ledger, db, make_user())
    assert db.get(Quote, q.id) is not None


def test_create_rejects_invalid_pricing_input(db, ledger, make_user):
    owner = make_user()
    with pytest.raises(ValidationError):
        create_quote(ledger, db, owner, material="gold")
    assert db.query(Quote).count() == 0


def test_get_by_id_hides_other_owners(db, ledger, make_user):
    alice = make_user(email="alice@example.com")
    bob = make_user(email="bob@example.com")
    q = create_quote(ledger, db, alice)

    assert ledger.get_by_id(db, str(q.id), owner_id=alice.id).id == q.id
    with pytest.raises(NotFound):
        ledger.get_by_id(db, q.id, owner_id=bob.id)
    with pytest.raises(NotFound):
        ledger.get_by_id(db, "not-a-uuid")
    with pytest.raises(NotFound):
        ledger.get_by_id(db, uuid.uuid4())


def test_list_by_owner_newest_first(db, ledger, make_user):
    owner = make_user()
    older = create_quote(ledger, db, owner, location="Thika")
    newer = create_quote(ledger, db, owner, location="Karen")
    older.created_at = newer.created_at - timedelta(hours=1)
    db.commit()

    assert [q.id for q in ledger.list_by_owner(db, owner.id)] == [newer.id, older.id]


def test_completed_payment_never_regresses(db, ledger, make_user):
    q = create_quote(ledger, db, make_user())
    details = {"transactionId": "ws_CO_1", "amount": 3150, "phone": "254712345678", "date": "2026-10-17T10:00:00+00:00"}
    ledger.update_payment_status(db, q.id, "completed", details)

    for target in ("pending", "failed"):
        with pytest.raises(Conflict):
            ledger.update_payment_status(db, q.id, target, {"transactionId": "other"})

    db.expire_all()
    stored = db.get(Quote, q.id)
    assert stored.payment_status == "completed"
    assert stored.payment_details == details


def test_reapplying_completed_keeps_original_details(db, ledger, make_user):
    q = create_quote(ledger, db, make_user())
    first = {"transactionId": "ws_CO_1", "amount": 3150}
    ledger.update_payment_status(db, q.id, "completed", first)
    ledger.update_payment_status(db, q.id, "completed", {"transactionId": "ws_CO_1", "amount": 3150, "date": "later"})

    db.expire_all()
    assert db.get(Quote, q.id).payment_details == first


def test_failed_payment_can_be_retried(db, ledger, make_user):
    q = create_quote(ledger, db, make_user())
    ledger.update_payment_status(db, q.id, "failed")
    ledger.update_payment_status(db, q.id, "failed")

    with pytest.raises(Conflict):
        ledger.update_payment_status(db, q.id, "completed", {"transactionId": "late"})

    q = ledger.update_payment_status(db, q.id, "pending", checkout_request_id="ws_CO_2")
    assert q.payment_status == "pending"
    assert q.checkout_request_id == "ws_CO_2"


def test_unknown_payment_status_rejected(db, ledger, make_user):
    q = create_quote(ledger, db, make_user())
    with pytest.raises(ValidationError):
        ledger.update_payment_status(db, q.id, "refunded")


def test_mark_accepted_only_from_pending(db, ledger, make_user):
    q = create_quote(ledger, db, make_user())
    assert ledger.mark_accepted(db, q.id).status == "accepted"
    with pytest.raises(Conflict):
        ledger.mark_accepted(db, q.id)


def test_pricing_columns_untouched_by_payment_updates(db, ledger, make_user):
    q = create_quote(ledger, db, make_user())
    before = (q.total_area, q.base_cost, q.warranty_cost, q.total_cost)
    ledger.update_payment_status(db, q.id, "pending", checkout_request_id="ws_CO_9")
    ledger.update_payment_status(db, q.id, "completed", {"transactionId": "ws_CO_9"})
    ledger.mark_accepted(db, q.id)

    db.expire_all()
    stored = db.get(Quote, q.id)
    assert (stored.total_area, stored.base_cost, stored.warranty_cost, stored.total_cost) == before


@pytest.mark.parametrize("target", ["failed", "pending"])
def test_completion_committed_by_another_session_is_not_regressed(file_session_factory, ledger, shared_quote, target):
    quote, _ = shared_quote
    session_a = file_session_factory()
    session_b = file_session_factory()
    try:
        held = ledger.get_by_id(session_a, quote.id)
        assert held.payment_status == "pending"

        ledger.update_payment_status(session_b, quote.id, "completed", {"transactionId": "ws_CO_1"})

        with pytest.raises(Conflict):
            ledger.update_payment_status(session_a, quote.id, target, checkout_request_id="ws_CO_2")
    finally:
        session_a.close()
        session_b.close()

    with file_session_factory() as s:
        stored = s.get(Quote, quote.id)
        assert stored.payment_status == "completed"
        assert stored.payment_details == {"transactionId": "ws_CO_1"}
        assert stored.checkout_request_id is None
