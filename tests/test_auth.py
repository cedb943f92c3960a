SIGNUP = {
    "email": "sita.devi@gmail.com",
    "password": "secret123",
    "full_name": "Sita Devi",
    "phone": "9000011111",
    "national_id_number": "5555 6666 7777",
    "address": "Mithanpura, Ward 5",
}


async def test_register_creates_account_and_profile(client):
    response = await client.post("/api/v1/auth/register", json=SIGNUP)

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == SIGNUP["email"]
    assert body["is_admin"] is False
    assert body["profile"]["full_name"] == "Sita Devi"
    assert body["profile"]["national_id_number"] == "XXXXXXXX7777"
    assert body["profile"]["is_eligible"] is True


async def test_register_rejects_duplicate_email(client):
    await client.post("/api/v1/auth/register", json=SIGNUP)
    response = await client.post("/api/v1/auth/register", json=SIGNUP)

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


async def test_register_validates_national_id_and_phone(client):
    response = await client.post("/api/v1/auth/register", json={**SIGNUP, "national_id_number": "12345"})
    assert response.status_code == 422

    response = await client.post("/api/v1/auth/register", json={**SIGNUP, "phone": "98765"})
    assert response.status_code == 422

    response = await client.post(
        "/api/v1/auth/register", json={**SIGNUP, "phone": "९१२३४५६७८०", "national_id_number": "२३४५६७८९०१२३"}
    )
    assert response.status_code == 422


async def test_login_with_wrong_password(client):
    await client.post("/api/v1/auth/register", json=SIGNUP)
    response = await client.post(
        "/api/v1/auth/login", json={"email": SIGNUP["email"], "password": "wrong-password"}
    )
    assert response.status_code == 401


async def test_session_reports_admin_role(client, citizen, admin):
    response = await client.get("/api/v1/auth/me", headers=citizen["headers"])
    assert response.status_code == 200
    assert response.json()["is_admin"] is False

    response = await client.get("/api/v1/auth/me", headers=admin["headers"])
    assert response.json()["is_admin"] is True


async def test_session_requires_token(client):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401

    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_refresh_rotates_and_revokes_old_token(client, citizen):
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": citizen["refresh_token"]})
    assert response.status_code == 200
    new_tokens = response.json()
    assert new_tokens["refresh_token"] != citizen["refresh_token"]

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": citizen["refresh_token"]})
    assert response.status_code == 401


async def test_logout_revokes_refresh_token(client, citizen):
    response = await client.post(
        "/api/v1/auth/logout",
        json={"refresh_token": citizen["refresh_token"]},
        headers=citizen["headers"],
    )
    assert response.status_code == 200

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": citizen["refresh_token"]})
    assert response.status_code == 401


async def test_profile_update_revalidates_fields(client, register_user):
    user = await register_user("amit@gmail.com", phone="9000022222")
    response = await client.put("/api/v1/profile", json={"address": "Brahmpura, Ward 3"}, headers=user["headers"])

    assert response.status_code == 200
    assert response.json()["profile"]["address"] == "Brahmpura, Ward 3"

    response = await client.put("/api/v1/profile", json={"phone": "123"}, headers=user["headers"])
    assert response.status_code == 422
