import json

import pytest

from src.client.blacklist import BlacklistPhase, BlacklistWorkflow
from src.client.resolution import DetailResolver

API = "/api/support/applications"

FULL_RECORD = {"id": 5, "name": "Veli Demir", "email": "veli@example.com", "phoneNumber": "5550001122"}


async def _workflow(api, support_client, record) -> BlacklistWorkflow:
    api.add("GET", f"{API}/carrier_application/5", json_body={"success": True, "data": record})
    resolver = DetailResolver(support_client, "carrier_application", 5)
    await resolver.resolve()
    return BlacklistWorkflow(support_client, resolver)


@pytest.mark.anyio
async def test_confirm_disabled_when_reason_blank(api, support_client):
    workflow = await _workflow(api, support_client, FULL_RECORD)

    workflow.reason = "   "
    assert workflow.can_propose is False
    assert workflow.propose() is False
    assert workflow.phase is BlacklistPhase.EDITING


@pytest.mark.anyio
@pytest.mark.parametrize("missing", ["name", "email", "phoneNumber"])
async def test_confirm_disabled_when_any_contact_field_blank(api, support_client, missing):
    record = dict(FULL_RECORD)
    record[missing] = " "
    workflow = await _workflow(api, support_client, record)

    workflow.reason = "Sahte belge"
    assert workflow.can_propose is False


@pytest.mark.anyio
async def test_confirm_disabled_without_resolved_record(support_client):
    workflow = BlacklistWorkflow(support_client, DetailResolver(support_client, "dealer_form", 1))
    workflow.reason = "Sahte belge"
    assert workflow.can_propose is False


@pytest.mark.anyio
async def test_propose_confirm_submits_contact_fields(api, support_client):
    api.add("POST", f"{API}/blacklist", json_body={"success": True})
    workflow = await _workflow(api, support_client, FULL_RECORD)

    workflow.reason = "Sahte belge"
    assert workflow.propose() is True
    assert workflow.phase is BlacklistPhase.CONFIRMING

    assert await workflow.confirm() is True
    assert workflow.phase is BlacklistPhase.EDITING
    assert workflow.reason == ""
    assert workflow.error is None

    assert json.loads(api.requests[-1].content) == {
        "application_type": "carrier_application",
        "application_id": "5",
        "email": "veli@example.com",
        "phone": "5550001122",
        "name": "Veli Demir",
        "reason": "Sahte belge",
    }


@pytest.mark.anyio
async def test_confirm_without_propose_does_nothing(api, support_client):
    workflow = await _workflow(api, support_client, FULL_RECORD)
    workflow.reason = "Sahte belge"

    assert await workflow.confirm() is False
    assert api.paths() == [f"{API}/carrier_application/5"]


@pytest.mark.anyio
async def test_confirm_rechecks_reason_cleared_after_propose(api, support_client):
    workflow = await _workflow(api, support_client, FULL_RECORD)
    workflow.reason = "Sahte belge"
    assert workflow.propose() is True

    workflow.reason = "  "
    assert await workflow.confirm() is False
    assert workflow.phase is BlacklistPhase.EDITING
    assert api.paths() == [f"{API}/carrier_application/5"]


@pytest.mark.anyio
async def test_cancel_returns_to_editing(api, support_client):
    workflow = await _workflow(api, support_client, FULL_RECORD)
    workflow.reason = "Sahte belge"
    workflow.propose()

    workflow.cancel()
    assert workflow.phase is BlacklistPhase.EDITING
    assert workflow.reason == "Sahte belge"


@pytest.mark.anyio
async def test_failed_enrollment_keeps_reason(api, support_client):
    api.add("POST", f"{API}/blacklist", status=409, json_body={"success": False, "message": "Zaten kara listede."})
    workflow = await _workflow(api, support_client, FULL_RECORD)
    workflow.reason = "Sahte belge"
    workflow.propose()

    assert await workflow.confirm() is False
    assert workflow.error == "Zaten kara listede."
    assert workflow.reason == "Sahte belge"
    assert workflow.phase is BlacklistPhase.EDITING


@pytest.mark.anyio
async def test_check_passes_only_given_params(api, support_client):
    api.add("GET", f"{API}/blacklist/check", json_body={"success": True, "blacklisted": True})
    workflow = await _workflow(api, support_client, FULL_RECORD)

    result = await workflow.check(email="veli@example.com")

    assert result.ok
    assert result.data["blacklisted"] is True
    assert list(api.requests[-1].url.params.multi_items()) == [("email", "veli@example.com")]
