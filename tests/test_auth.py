from datetime import datetime, timedelta, timezone
from jose import jwt
from conftest import PWD, bearer, email_for, login, register
from db.db_operation import mongo_conn
from services.metrics_service import metrics
from settings.config import settings
from utils.jwt_handler import create_access_token


def test_register_returns_user_and_token(client):
    res = client.post("/api/auth", json={"name": "pizza diner", "email": "d@jwt.com", "password": "pw"})

    assert res.status_code == 200
    body = res.json()
    assert body["user"]["name"] == "pizza diner"
    assert body["user"]["email"] == "d@jwt.com"
    assert body["user"]["roles"] == [{"role": "diner"}]
    assert isinstance(body["token"], str)


def test_register_requires_all_fields(client):
    res = client.post("/api/auth", json={"name": "incomplete"})

    assert res.status_code == 400
    assert res.json() == {"message": "name, email, and password are required"}


def test_register_without_body_gets_fixed_message(client):
    res = client.post("/api/auth")

    assert res.status_code == 400
    assert res.json() == {"message": "name, email, and password are required"}


def test_register_with_non_string_field_gets_fixed_message(client):
    res = client.post("/api/auth", json={"name": 5, "email": "n@jwt.com", "password": "pw"})

    assert res.status_code == 400
    assert res.json() == {"message": "name, email, and password are required"}


def test_register_rejects_duplicate_email(client):
    email = email_for("dup")
    register(client, email=email)

    res = client.post("/api/auth", json={"name": "again", "email": email, "password": PWD})
    assert res.status_code == 409


def test_registration_token_is_usable_immediately(client):
    reg = register(client)

    me = client.get("/api/user/me", headers=bearer(reg["token"]))
    assert me.status_code == 200
    assert me.json()["id"] == reg["user"]["id"]


def test_login_default_admin(client):
    res = login(client, "a@jwt.com", "admin")

    assert res.status_code == 200
    user = res.json()["user"]
    assert user["email"] == "a@jwt.com"
    assert user["roles"] == [{"role": "admin"}]
    assert isinstance(user["id"], int)


def test_login_bad_password_is_unauthorized(client):
    reg = register(client)

    res = login(client, reg["user"]["email"], "wrong")
    assert res.status_code == 401
    assert "message" in res.json()
    assert metrics.auth_failures == 1


def test_login_unknown_user_is_unauthorized(client):
    res = login(client, email_for("ghost"))
    assert res.status_code == 401


def test_logout_revokes_token(client, diner):
    token = login(client, diner["user"]["email"]).json()["token"]
    assert metrics.active_users == 1

    res = client.delete("/api/auth", headers=bearer(token))
    assert res.status_code == 200
    assert res.json() == {"message": "logout successful"}
    assert metrics.active_users == 0

    again = client.get("/api/user/me", headers=bearer(token))
    assert again.status_code == 401


def test_logout_keeps_other_sessions(client, diner):
    first = login(client, diner["user"]["email"]).json()["token"]
    second = login(client, diner["user"]["email"]).json()["token"]

    client.delete("/api/auth", headers=bearer(first))

    assert client.get("/api/user/me", headers=bearer(second)).status_code == 200


def test_logout_requires_token(client):
    res = client.delete("/api/auth")
    assert res.status_code == 401
    assert res.json() == {"message": "unauthorized"}


def test_missing_header_is_unauthorized(client):
    res = client.get("/api/user/me")
    assert res.status_code == 401
    assert res.json() == {"message": "unauthorized"}


def test_malformed_token_is_unauthorized(client):
    res = client.get("/api/user/me", headers=bearer("not-a-jwt"))
    assert res.status_code == 401
    assert res.json() == {"message": "unauthorized"}


def test_token_of_deleted_user_is_unauthorized(client, admin_token, diner):
    client.delete(f"/api/user/{diner['user']['id']}", headers=bearer(admin_token))

    res = client.get("/api/user/me", headers=bearer(diner["token"]))
    assert res.status_code == 401


def _claims_for(user: dict) -> dict:
    return {
        "sub": str(user["id"]),
        "id": user["id"],
        "name": user["name"],
        "email": user["email"],
        "roles": user["roles"],
        "token_version": 0,
    }


def _open_session(client, jti: str, user_id: int):
    async def _insert():
        await mongo_conn.auth_collection.insert_one({"jti": jti, "user_id": user_id})
    client.portal.call(_insert)


def test_expired_token_is_unauthorized(client, diner):
    user = diner["user"]
    live, live_jti = create_access_token(_claims_for(user))
    expired, expired_jti = create_access_token(_claims_for(user), expires_minutes=-1)
    _open_session(client, live_jti, user["id"])
    _open_session(client, expired_jti, user["id"])

    assert client.get("/api/user/me", headers=bearer(live)).status_code == 200

    res = client.get("/api/user/me", headers=bearer(expired))
    assert res.status_code == 401
    assert res.json() == {"message": "unauthorized"}


def test_token_signed_with_other_key_is_unauthorized(client, diner):
    user = diner["user"]
    claims = {**_claims_for(user), "jti": "forged", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
    forged = jwt.encode(claims, "not-the-server-secret", algorithm=settings.ALGORITHM)
    _open_session(client, "forged", user["id"])

    res = client.get("/api/user/me", headers=bearer(forged))
    assert res.status_code == 401
    assert res.json() == {"message": "unauthorized"}
