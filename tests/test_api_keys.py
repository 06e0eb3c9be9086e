import pytest

from leadtracker.core.exceptions import NotFoundError, UnauthorizedError
from leadtracker.core.security import mask_api_key
from leadtracker.schemas.api_key import ApiKeyCreate
from leadtracker.services.api_key_service import ApiKeyService

from conftest import auth_headers, identity_of, make_api_key, make_lead


def test_mask_api_key():
    assert mask_api_key("ltk_abcdefghijkl") == "ltk_abcd..."


async def test_issue_key_for_user(session, admin, rep):
    created = await ApiKeyService(session).create(identity_of(admin), ApiKeyCreate(name="CRM sync", user_id=rep.id))

    assert created.key.startswith("ltk_")
    assert len(created.key) > 20
    assert created.user_name == "Sam Rivera"
    assert created.is_active
    assert created.last_used is None


async def test_issue_key_for_missing_user(session, admin):
    with pytest.raises(NotFoundError):
        await ApiKeyService(session).create(identity_of(admin), ApiKeyCreate(name="x", user_id=404))


async def test_listing_masks_keys(session, admin, rep):
    service = ApiKeyService(session)
    created = await service.create(identity_of(admin), ApiKeyCreate(name="CRM sync", user_id=rep.id))

    listed = await service.list()

    assert [item.key for item in listed] == [created.key[:8] + "..."]
    assert (await service.get_full(created.id)).key == created.key


async def test_authenticate_resolves_owner_and_stamps_last_used(session, rep):
    api_key = await make_api_key(session, rep)

    identity = await ApiKeyService(session).authenticate("ltk_test-key")

    assert identity.id == rep.id
    assert identity.role == "Sales Representative"
    await session.refresh(api_key)
    assert api_key.last_used is not None


@pytest.mark.parametrize("key", [None, "", "ltk_unknown"])
async def test_authenticate_rejects_missing_or_unknown_key(session, key):
    with pytest.raises(UnauthorizedError):
        await ApiKeyService(session).authenticate(key)


async def test_inactive_key_is_rejected(session, admin, rep):
    api_key = await make_api_key(session, rep)
    service = ApiKeyService(session)

    await service.set_active(identity_of(admin), api_key.id, False)

    with pytest.raises(UnauthorizedError):
        await service.authenticate("ltk_test-key")


async def test_external_search_requires_api_key(client):
    response = await client.get("/api/v1/leads/search")

    assert response.status_code == 401


async def test_external_search_with_key(client, session, rep):
    await make_api_key(session, rep)
    await make_lead(session, company="Acme Inc.", project_name="Smart Factory")
    await make_lead(session, company="Globex", email="a@globex.com")

    response = await client.get(
        "/api/v1/leads/search",
        params={"projectName": "factory"},
        headers={"X-API-Key": "ltk_test-key"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["data"][0]["projectName"] == "Smart Factory"


async def test_external_create_and_update_use_key_owner(client, session, rep, other_rep):
    await make_api_key(session, rep)
    others_lead = await make_lead(session, owner=other_rep)
    headers = {"X-API-Key": "ltk_test-key"}

    response = await client.post("/api/v1/leads", json={
        "name": "Jane Smith",
        "company": "Softnix",
        "email": "jane@example.com",
        "phone": "0812345678",
        "source": "Event",
    }, headers=headers)
    assert response.status_code == 201
    lead = response.json()["lead"]
    assert lead["createdById"] == rep.id

    response = await client.patch(f"/api/v1/leads/{lead['id']}", json={"status": "Qualified"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["lead"]["status"] == "Qualified"

    response = await client.patch(f"/api/v1/leads/{others_lead.id}", json={"status": "Lost"}, headers=headers)
    assert response.status_code == 403
    assert response.json()["reason"] == "not_owner"


async def test_inactive_key_over_http(client, session, rep):
    await make_api_key(session, rep, is_active=False)

    response = await client.get("/api/v1/leads/search", headers={"X-API-Key": "ltk_test-key"})

    assert response.status_code == 401


async def test_key_management_is_admin_only(client, session, admin, manager, rep):
    response = await client.get("/api/api-keys", headers=auth_headers(manager))
    assert response.status_code == 403

    response = await client.post(
        "/api/api-keys",
        json={"name": "CRM sync", "userId": rep.id},
        headers=auth_headers(admin),
    )
    assert response.status_code == 201
    key = response.json()["apiKey"]

    response = await client.get("/api/api-keys", headers=auth_headers(admin))
    assert response.json()["apiKeys"][0]["key"].endswith("...")

    response = await client.patch(f"/api/api-keys/{key['id']}", json={"isActive": False}, headers=auth_headers(admin))
    assert response.json()["apiKey"]["isActive"] is False

    response = await client.delete(f"/api/api-keys/{key['id']}", headers=auth_headers(admin))
    assert response.status_code == 204

    response = await client.get(f"/api/api-keys/{key['id']}/full", headers=auth_headers(admin))
    assert response.status_code == 404
