from datetime import date, timedelta

NEXT_MONTH = (date.today() + timedelta(days=30)).isoformat()


def property_tax_for(user_id, **overrides):
    payload = {
        "user_id": user_id,
        "property_id": "P-100",
        "tax_type": "Property Tax",
        "amount": 15000,
        "due_date": "2025-03-31",
        "financial_year": "2024-25",
    }
    payload.update(overrides)
    return payload


async def test_admin_creates_record_visible_to_owner(client, admin, citizen):
    response = await client.post(
        "/api/v1/admin/tax-records",
        json=property_tax_for(citizen["id"], due_date=NEXT_MONTH),
        headers=admin["headers"],
    )
    assert response.status_code == 201, response.text

    response = await client.get("/api/v1/tax/records", headers=citizen["headers"])
    records = response.json()
    assert len(records) == 1
    assert records[0]["status"] == "pending"
    assert records[0]["paid_date"] is None
    assert records[0]["amount"] == 15000.0
    assert records[0]["property_id"] == "P-100"


async def test_past_due_record_is_reported_overdue(client, admin, citizen):
    await client.post("/api/v1/admin/tax-records", json=property_tax_for(citizen["id"]), headers=admin["headers"])

    response = await client.get("/api/v1/tax/records", headers=citizen["headers"])
    assert response.json()[0]["status"] == "overdue"

    response = await client.get("/api/v1/tax/summary", headers=citizen["headers"])
    assert response.json()["overdue_amount"] == 15000.0


async def test_non_admin_cannot_use_admin_endpoints(client, citizen):
    response = await client.get("/api/v1/admin/tax-records", headers=citizen["headers"])
    assert response.status_code == 403
    assert response.json()["detail"] == "Administrator access required"

    response = await client.post(
        "/api/v1/admin/tax-records", json=property_tax_for(citizen["id"]), headers=citizen["headers"]
    )
    assert response.status_code == 403

    response = await client.get("/api/v1/admin/users/eligible", headers=citizen["headers"])
    assert response.status_code == 403


async def test_create_rejects_unknown_user_and_bad_amount(client, admin, citizen):
    response = await client.post(
        "/api/v1/admin/tax-records", json=property_tax_for("not-a-user"), headers=admin["headers"]
    )
    assert response.status_code == 400

    response = await client.post(
        "/api/v1/admin/tax-records", json=property_tax_for(citizen["id"], amount=0), headers=admin["headers"]
    )
    assert response.status_code == 400
    assert "greater than zero" in response.json()["detail"]


async def test_eligible_users_listing(client, admin, citizen):
    response = await client.get("/api/v1/admin/users/eligible", headers=admin["headers"])

    assert response.status_code == 200
    names = {u["full_name"] for u in response.json()}
    assert names == {"Ravi Kumar", "Nagar Nigam Admin"}
    ravi = next(u for u in response.json() if u["id"] == citizen["id"])
    assert ravi["national_id_number"] == "234567890123"


async def test_user_detail_not_found(client, admin):
    response = await client.get("/api/v1/admin/users/missing", headers=admin["headers"])
    assert response.status_code == 404


async def test_mark_paid_twice_keeps_paid_date(client, admin, citizen):
    created = await client.post(
        "/api/v1/admin/tax-records", json=property_tax_for(citizen["id"]), headers=admin["headers"]
    )
    record_id = created.json()["id"]

    first = await client.post(f"/api/v1/admin/tax-records/{record_id}/mark-paid", headers=admin["headers"])
    second = await client.post(f"/api/v1/admin/tax-records/{record_id}/mark-paid", headers=admin["headers"])

    assert first.status_code == 200
    assert second.json()["status"] == "paid"
    assert second.json()["paid_date"] == first.json()["paid_date"]

    response = await client.post("/api/v1/admin/tax-records/missing/mark-paid", headers=admin["headers"])
    assert response.status_code == 404


async def test_update_record(client, admin, citizen):
    created = await client.post(
        "/api/v1/admin/tax-records", json=property_tax_for(citizen["id"]), headers=admin["headers"]
    )
    record_id = created.json()["id"]

    response = await client.put(
        f"/api/v1/admin/tax-records/{record_id}",
        json={"amount": 18000, "tax_type": "Water Tax", "due_date": NEXT_MONTH},
        headers=admin["headers"],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["amount"] == 18000.0
    assert body["tax_type"] == "Water Tax"
    assert body["status"] == "pending"
    assert body["created_at"] == created.json()["created_at"]


async def test_delete_requires_confirmation(client, admin, citizen):
    created = await client.post(
        "/api/v1/admin/tax-records", json=property_tax_for(citizen["id"]), headers=admin["headers"]
    )
    record_id = created.json()["id"]

    response = await client.delete(f"/api/v1/admin/tax-records/{record_id}", headers=admin["headers"])
    assert response.status_code == 400

    response = await client.delete(
        f"/api/v1/admin/tax-records/{record_id}", params={"confirm": "true"}, headers=admin["headers"]
    )
    assert response.status_code == 200

    response = await client.get("/api/v1/admin/tax-records", headers=admin["headers"])
    assert record_id not in [r["id"] for r in response.json()]


async def test_admin_listing_search(client, admin, citizen, register_user):
    sita = await register_user("sita@gmail.com", full_name="Sita Devi", national_id_number="555566667777")
    await client.post("/api/v1/admin/tax-records", json=property_tax_for(citizen["id"]), headers=admin["headers"])
    await client.post(
        "/api/v1/admin/tax-records",
        json=property_tax_for(sita["id"], property_id="SHOP-7", tax_type="Trade License"),
        headers=admin["headers"],
    )

    response = await client.get("/api/v1/admin/tax-records", headers=admin["headers"])
    assert [r["property_id"] for r in response.json()] == ["SHOP-7", "P-100"]

    response = await client.get("/api/v1/admin/tax-records", params={"search": "5555"}, headers=admin["headers"])
    results = response.json()
    assert len(results) == 1
    assert results[0]["user_full_name"] == "Sita Devi"


async def test_citizen_pays_own_record_only(client, admin, citizen, register_user):
    other = await register_user("other@gmail.com")
    created = await client.post(
        "/api/v1/admin/tax-records", json=property_tax_for(citizen["id"]), headers=admin["headers"]
    )
    record_id = created.json()["id"]

    response = await client.post(f"/api/v1/tax/records/{record_id}/pay", headers=other["headers"])
    assert response.status_code == 403

    response = await client.post(f"/api/v1/tax/records/{record_id}/pay", headers=citizen["headers"])
    assert response.status_code == 200
    assert response.json()["status"] == "paid"
    assert response.json()["paid_date"] is not None


async def test_paid_record_stays_paid(client, admin, citizen):
    created = await client.post(
        "/api/v1/admin/tax-records", json=property_tax_for(citizen["id"]), headers=admin["headers"]
    )
    record_id = created.json()["id"]
    paid = await client.post(f"/api/v1/admin/tax-records/{record_id}/mark-paid", headers=admin["headers"])

    response = await client.put(
        f"/api/v1/admin/tax-records/{record_id}", json={"status": "pending"}, headers=admin["headers"]
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Paid records cannot be reopened"

    response = await client.get("/api/v1/tax/records", headers=citizen["headers"])
    assert response.json()[0]["status"] == "paid"
    assert response.json()[0]["paid_date"] == paid.json()["paid_date"]
