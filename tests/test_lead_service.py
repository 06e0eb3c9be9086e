import pytest
from pydantic import ValidationError as PydanticValidationError

from leadtracker.core.exceptions import ForbiddenError, NotFoundError
from leadtracker.schemas.lead import LeadCreate, LeadSearch, LeadUpdate
from leadtracker.services.lead_service import LeadService

from conftest import identity_of, make_lead


def _new_lead(**overrides):
    data = {
        "name": "Jane Smith",
        "company": "Softnix Technology",
        "email": "jane@example.com",
        "phone": "0812345678",
        "source": "Referral",
        "budget": "฿2,500,000",
    }
    data.update(overrides)
    return LeadCreate(**data)


async def test_create_stamps_owner_and_timestamps(session, rep):
    lead = await LeadService(session).create(identity_of(rep), _new_lead())

    assert lead.id is not None
    assert lead.status == "New"
    assert lead.created_by_id == rep.id
    assert lead.created_by == "Sam Rivera"
    assert lead.created_at > 0
    assert lead.updated_at == lead.created_at


async def test_get_missing_lead(session):
    with pytest.raises(NotFoundError):
        await LeadService(session).get(999)


async def test_owner_updates_own_lead(session, rep):
    service = LeadService(session)
    lead = await service.create(identity_of(rep), _new_lead())

    updated = await service.update(identity_of(rep), lead.id, LeadUpdate(status="Qualified"))

    assert updated.status == "Qualified"
    assert updated.name == "Jane Smith"
    assert updated.updated_at >= updated.created_at


async def test_rep_cannot_update_or_delete_other_rep_lead(session, rep, other_rep):
    lead = await make_lead(session, owner=rep)
    service = LeadService(session)

    with pytest.raises(ForbiddenError) as excinfo:
        await service.update(identity_of(other_rep), lead.id, LeadUpdate(status="Lost"))
    assert excinfo.value.reason == "not_owner"

    with pytest.raises(ForbiddenError):
        await service.delete(identity_of(other_rep), lead.id)

    assert (await service.get(lead.id)).status == "New"


async def test_manager_overrides_ownership(session, rep, manager):
    lead = await make_lead(session, owner=rep)
    service = LeadService(session)

    updated = await service.update(identity_of(manager), lead.id, LeadUpdate(budget="100"))
    assert updated.budget == "100"

    assert await service.delete(identity_of(manager), lead.id)
    with pytest.raises(NotFoundError):
        await service.get(lead.id)


async def test_repeated_update_is_idempotent(session, rep):
    service = LeadService(session)
    lead = await service.create(identity_of(rep), _new_lead())
    changes = LeadUpdate(status="In Progress", project_name="Data Platform")

    first = await service.update(identity_of(rep), lead.id, changes)
    first_state = first.model_dump(exclude={"updated_at"})
    second = await service.update(identity_of(rep), lead.id, changes)

    assert second.model_dump(exclude={"updated_at"}) == first_state


async def test_update_keeps_unset_fields(session, rep):
    service = LeadService(session)
    lead = await service.create(identity_of(rep), _new_lead(product="Analytics"))

    updated = await service.update(identity_of(rep), lead.id, LeadUpdate(phone="0899999999"))

    assert updated.product == "Analytics"
    assert updated.phone == "0899999999"


async def test_update_clears_optional_field_with_null(session, rep):
    service = LeadService(session)
    lead = await service.create(identity_of(rep), _new_lead(product="Analytics"))

    updated = await service.update(identity_of(rep), lead.id, LeadUpdate(budget=None))

    assert updated.budget is None
    assert updated.product == "Analytics"


@pytest.mark.parametrize("field", ["name", "company", "email", "phone", "source", "status"])
def test_required_lead_fields_cannot_be_nulled(field):
    with pytest.raises(PydanticValidationError):
        LeadUpdate(**{field: None})


async def test_delete_all_requires_administrator(session, manager, admin):
    await make_lead(session)
    await make_lead(session)
    service = LeadService(session)

    with pytest.raises(ForbiddenError) as excinfo:
        await service.delete_all(identity_of(manager))
    assert excinfo.value.reason == "role_too_low"

    assert await service.delete_all(identity_of(admin)) == 2
    assert await service.list() == []


async def test_bulk_delete_uses_session_exec(session, admin, recwarn):
    await make_lead(session)

    assert await LeadService(session).delete_all(identity_of(admin)) == 1

    assert not [w for w in recwarn if "session.exec()" in str(w.message)]


async def test_list_by_date_range_is_inclusive_and_newest_first(session):
    old = await make_lead(session, name="Old", created_at=1_000)
    middle = await make_lead(session, name="Middle", created_at=2_000)
    new = await make_lead(session, name="New", created_at=3_000)
    service = LeadService(session)

    assert [lead.id for lead in await service.list()] == [new.id, middle.id, old.id]
    assert [lead.id for lead in await service.list(from_ms=2_000)] == [new.id, middle.id]
    assert [lead.id for lead in await service.list(to_ms=2_000)] == [middle.id, old.id]
    assert [lead.id for lead in await service.list(2_000, 2_000)] == [middle.id]


async def test_keyword_search_matches_any_field(session):
    by_company = await make_lead(session, company="ACME Corp")
    by_org = await make_lead(session, company="Other", end_user_organization="Acme Holdings")
    by_email = await make_lead(session, company="Other", email="buyer@acme.co.th")
    await make_lead(session, company="Globex", email="x@globex.com")

    results = await LeadService(session).search(LeadSearch(keyword="acme"))

    assert {lead.id for lead in results} == {by_company.id, by_org.id, by_email.id}


async def test_keyword_wins_over_field_filters(session):
    await make_lead(session, company="Acme", product="CRM")

    results = await LeadService(session).search(LeadSearch(keyword="acme", product="Nothing"))

    assert len(results) == 1


async def test_field_filters_are_combined(session):
    match = await make_lead(session, company="Acme", product="Data Platform")
    await make_lead(session, company="Acme", product="CRM")
    await make_lead(session, company="Globex", product="Data Platform")

    results = await LeadService(session).search(LeadSearch(company="acme", product="data"))

    assert [lead.id for lead in results] == [match.id]


async def test_search_escapes_wildcards(session):
    await make_lead(session, name="100% Organic")
    await make_lead(session, name="Plain")

    results = await LeadService(session).search(LeadSearch(keyword="%"))

    assert [lead.name for lead in results] == ["100% Organic"]


async def test_blank_search_returns_everything(session):
    await make_lead(session)
    await make_lead(session)

    assert len(await LeadService(session).search(LeadSearch(keyword="   "))) == 2
    assert len(await LeadService(session).search()) == 2
