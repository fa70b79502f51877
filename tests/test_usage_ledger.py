from decimal import Decimal

import pytest

from app.errors import NotFoundError, ValidationError
from app.schemas.out_manage import ApprovalStatus, ContractUpsertRequest, UsageSaveRequest
from app.services import code_service, contract_ledger, usage_ledger
from conftest import OTHER_TENANT, TENANT


def _save(db, tenant_id=TENANT, **kwargs):
    fields = {
        "staff_id": "dev001",
        "leave_type_code": "30",
        "approval_status_code": ApprovalStatus.APPROVED.value,
        "period_start": "20250310",
        "period_end": "20250310",
        "quantity": Decimal("1"),
    }
    fields.update(kwargs)
    return usage_ledger.save_usage_entry(
        db, tenant_id, UsageSaveRequest(**fields), "mgr001"
    )


@pytest.fixture
def contract(seeded):
    return contract_ledger.create_contract(
        seeded,
        TENANT,
        ContractUpsertRequest(
            staff_id="dev001",
            period_start="20250101",
            period_end="20251231",
            total_entitlement=Decimal("10"),
            service_entitlement=Decimal("2"),
            note="annual",
        ),
        "mgr001",
    )


def test_summary_counts_only_approved_usage_inside_the_contract(seeded, contract):
    _save(seeded, quantity=Decimal("1.5"))
    _save(seeded, period_start="20250801", period_end="20250801", quantity=Decimal("0.5"))
    _save(seeded, approval_status_code=ApprovalStatus.REQUESTED.value, quantity=Decimal("3"))
    _save(seeded, approval_status_code=ApprovalStatus.REJECTED.value, quantity=Decimal("4"))
    # Straddles the contract end, so it is outside the span.
    _save(seeded, period_start="20251231", period_end="20260102", quantity=Decimal("2"))
    _save(seeded, OTHER_TENANT, quantity=Decimal("5"))

    (summary,) = usage_ledger.list_usage_summary(seeded, TENANT, None, None)

    assert summary.staff_id == "dev001"
    assert summary.name == "Lee Developer"
    assert summary.note == "annual"
    assert summary.total == Decimal("12")
    assert summary.used == Decimal("2")
    assert summary.remaining == Decimal("10")


def test_summary_without_usage_reports_full_balance(seeded, contract):
    contract_ledger.create_contract(
        seeded,
        TENANT,
        ContractUpsertRequest(staff_id="dev002", period_start="20250101", period_end="20251231"),
        "mgr001",
    )

    summaries = usage_ledger.list_usage_summary(seeded, TENANT, "2025-06-01", None)

    assert [s.staff_id for s in summaries] == ["dev001", "dev002"]
    dev002 = summaries[1]
    assert dev002.total == Decimal("11")
    assert dev002.used == Decimal("0")
    assert dev002.remaining == Decimal("11")


def test_summary_can_go_negative(seeded, contract):
    _save(seeded, quantity=Decimal("13"))

    (summary,) = usage_ledger.list_usage_summary(seeded, TENANT, None, "lee")

    assert summary.remaining == Decimal("-1")


def test_summary_applies_name_filter(seeded, contract):
    assert usage_ledger.list_usage_summary(seeded, TENANT, None, "park") == []


def test_save_inserts_then_overwrites_same_entry(seeded):
    created = _save(seeded, requested_on="2025-03-01", note=" first ")
    assert created.id is not None
    assert created.requested_on == "20250301"
    assert created.note == "first"

    updated = _save(seeded, id=created.id, quantity=Decimal("0.5"), note=None)
    again = _save(seeded, id=created.id, quantity=Decimal("0.5"), note=None)

    assert updated.id == created.id == again.id
    assert again.quantity == Decimal("0.5")
    assert again.note is None
    detail = usage_ledger.list_usage_detail(seeded, TENANT, "dev001", "20250101", "20251231")
    assert len(detail) == 1


def test_save_defaults_missing_quantity_to_zero(seeded):
    saved = _save(seeded, quantity=None)
    assert saved.quantity == Decimal("0")


def test_save_unknown_id_raises_not_found(seeded):
    with pytest.raises(NotFoundError) as excinfo:
        _save(seeded, id=9999)
    assert excinfo.value.details == {"id": 9999}


def test_save_cannot_overwrite_another_tenants_entry(seeded):
    foreign = _save(seeded, OTHER_TENANT)
    with pytest.raises(NotFoundError):
        _save(seeded, id=foreign.id)


def test_save_requires_period(seeded):
    with pytest.raises(ValidationError) as excinfo:
        _save(seeded, period_end=" ")
    assert excinfo.value.field == "period_end"


def test_detail_orders_newest_request_first_and_resolves_names(seeded):
    older = _save(seeded, requested_on="20250301")
    newer = _save(
        seeded,
        requested_on="20250305",
        leave_type_code="10",
        approval_status_code=ApprovalStatus.REQUESTED.value,
    )
    undated = _save(seeded, requested_on=None, leave_type_code="99")
    unknown = _save(seeded, requested_on="20250303", leave_type_code="77", approval_status_code="40")
    _save(seeded, period_start="20260101", period_end="20260101")

    detail = usage_ledger.list_usage_detail(seeded, TENANT, "dev001", "2025-01-01", "2025-12-31")

    assert [d.id for d in detail] == [newer.id, unknown.id, older.id, undated.id]
    by_id = {d.id: d for d in detail}
    assert by_id[newer.id].leave_type_name == "Half Day AM"
    assert by_id[newer.id].approval_status_name == "Requested"
    assert by_id[newer.id].approval_status is ApprovalStatus.REQUESTED
    assert by_id[older.id].leave_type_name == "Full Day"
    assert by_id[older.id].approval_status is ApprovalStatus.APPROVED
    # Inactive and unknown codes fall back to the raw code.
    assert by_id[undated.id].leave_type_name == "99"
    assert by_id[unknown.id].leave_type_name == "77"
    assert by_id[unknown.id].approval_status_name == "40"
    assert by_id[unknown.id].approval_status is None


def test_detail_without_entries_is_empty(seeded):
    assert usage_ledger.list_usage_detail(seeded, TENANT, "dev002", "20250101", "20251231") == []


def test_delete_reports_whether_anything_was_removed(seeded):
    first = _save(seeded)
    second = _save(seeded)

    assert usage_ledger.delete_usage_entries(seeded, TENANT, []) is False
    assert usage_ledger.delete_usage_entries(seeded, OTHER_TENANT, [first.id]) is False
    assert usage_ledger.delete_usage_entries(seeded, TENANT, [first.id, second.id, 4242]) is True
    assert usage_ledger.delete_usage_entries(seeded, TENANT, [first.id]) is False
    assert usage_ledger.list_usage_detail(seeded, TENANT, "dev001", "20250101", "20251231") == []


def test_code_lookups_skip_inactive_codes(seeded):
    codes = code_service.list_codes(seeded, TENANT, code_service.LEAVE_TYPE_GROUP)

    assert [c.code for c in codes] == ["10", "20", "30"]
    assert code_service.code_names(seeded, TENANT, code_service.APPROVAL_STATUS_GROUP) == {
        "10": "Requested",
        "20": "Approved",
        "30": "Rejected",
    }
    assert "99" not in code_service.code_names(seeded, TENANT, code_service.LEAVE_TYPE_GROUP)
    assert code_service.list_codes(seeded, OTHER_TENANT, "GNT_CD") == []
    assert code_service.code_names(seeded, OTHER_TENANT, "GNT_CD") == {}
