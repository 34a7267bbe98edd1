"""HTTP tests for /api/properties and /api/landlords."""

import pytest


@pytest.fixture
async def owners(make_user):
    landlord = await make_user(role="landlord")
    rival = await make_user(role="landlord")
    tenant = await make_user(role="tenant", landlord_id=landlord.id)
    return landlord, rival, tenant


NEW_PROPERTY = {
    "title": "Harbor View 5",
    "address": "5 Harbor Rd",
    "city": "Portland",
    "bedrooms": 2,
    "bathrooms": 1.5,
    "rent_amount": 1850,
}


class TestPropertyCrud:

    async def test_landlord_creates_and_reads(self, client, bearer, owners):
        landlord, _, _ = owners
        created = await client.post("/api/properties", json=NEW_PROPERTY, headers=bearer(landlord))

        assert created.status_code == 201
        prop = created.json()
        assert prop["landlord_id"] == landlord.id
        assert prop["status"] == "available"

        fetched = await client.get(f"/api/properties/{prop['id']}", headers=bearer(landlord))
        assert fetched.json()["title"] == "Harbor View 5"

    async def test_tenant_cannot_create(self, client, bearer, owners):
        _, _, tenant = owners
        resp = await client.post("/api/properties", json=NEW_PROPERTY, headers=bearer(tenant))
        assert resp.status_code == 403

    async def test_bad_status_rejected(self, client, bearer, owners):
        landlord, _, _ = owners
        resp = await client.post(
            "/api/properties", json={**NEW_PROPERTY, "status": "demolished"}, headers=bearer(landlord)
        )
        assert resp.status_code == 400

    async def test_owner_updates(self, client, bearer, owners, make_property):
        landlord, _, _ = owners
        prop = await make_property(landlord)

        resp = await client.put(
            f"/api/properties/{prop.id}",
            json={"rent_amount": 1300, "status": "maintenance"},
            headers=bearer(landlord),
        )

        assert resp.status_code == 200
        assert resp.json()["rent_amount"] == 1300
        assert resp.json()["status"] == "maintenance"
        assert resp.json()["landlord_id"] == landlord.id

    async def test_rival_cannot_update_or_delete(self, client, bearer, owners, make_property):
        landlord, rival, _ = owners
        prop = await make_property(landlord)

        put = await client.put(f"/api/properties/{prop.id}", json={"title": "Mine now"}, headers=bearer(rival))
        delete = await client.delete(f"/api/properties/{prop.id}", headers=bearer(rival))

        assert put.status_code == 403
        assert delete.status_code == 403

    async def test_empty_update(self, client, bearer, owners, make_property):
        landlord, _, _ = owners
        prop = await make_property(landlord)
        resp = await client.put(f"/api/properties/{prop.id}", json={}, headers=bearer(landlord))
        assert resp.status_code == 400

    async def test_owner_deletes(self, client, bearer, owners, make_property):
        landlord, _, _ = owners
        prop = await make_property(landlord)

        resp = await client.delete(f"/api/properties/{prop.id}", headers=bearer(landlord))
        assert resp.status_code == 204

        gone = await client.get(f"/api/properties/{prop.id}", headers=bearer(landlord))
        assert gone.status_code == 404

    async def test_visibility(self, client, bearer, owners, make_user, make_property):
        landlord, rival, tenant = owners
        prop = await make_property(landlord)
        stranger = await make_user(role="tenant", landlord_id=rival.id)

        assert (await client.get(f"/api/properties/{prop.id}", headers=bearer(tenant))).status_code == 200
        assert (await client.get(f"/api/properties/{prop.id}", headers=bearer(stranger))).status_code == 403
        assert (await client.get(f"/api/properties/{prop.id}", headers=bearer(rival))).status_code == 403


class TestPropertyListing:

    async def test_scoped_by_role(self, client, bearer, owners, make_user, make_property, make_lease):
        landlord, rival, tenant = owners
        leased = await make_property(landlord, title="Leased")
        await make_property(landlord, title="Vacant")
        await make_property(rival, title="Rival's")
        await make_lease(leased, tenant)
        admin = await make_user(role="admin")

        as_landlord = await client.get("/api/properties", headers=bearer(landlord))
        as_tenant = await client.get("/api/properties", headers=bearer(tenant))
        as_admin = await client.get("/api/properties", headers=bearer(admin))

        assert {p["title"] for p in as_landlord.json()} == {"Leased", "Vacant"}
        assert [p["title"] for p in as_tenant.json()] == ["Leased"]
        assert len(as_admin.json()) == 3


class TestLandlordTenants:

    async def test_landlord_lists_own_tenants(self, client, bearer, owners, make_user):
        landlord, rival, tenant = owners
        await make_user(role="tenant", landlord_id=rival.id)

        resp = await client.get(f"/api/landlords/{landlord.id}/tenants", headers=bearer(landlord))

        assert resp.status_code == 200
        assert [u["id"] for u in resp.json()] == [tenant.id]

    async def test_admin_may_list(self, client, bearer, owners, make_user):
        landlord, _, tenant = owners
        admin = await make_user(role="admin")
        resp = await client.get(f"/api/landlords/{landlord.id}/tenants", headers=bearer(admin))
        assert [u["id"] for u in resp.json()] == [tenant.id]

    async def test_others_forbidden(self, client, bearer, owners):
        landlord, rival, tenant = owners
        for caller in (rival, tenant):
            resp = await client.get(f"/api/landlords/{landlord.id}/tenants", headers=bearer(caller))
            assert resp.status_code == 403
