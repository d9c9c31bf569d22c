import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient
from judge.auth import get_current_user
from judge.middleware import AuthMiddleware


@pytest.fixture
def auth_app():
    app = FastAPI()
    app.add_middleware(AuthMiddleware)

    @app.get("/state")
    async def read_state(request: Request):
        return {"user_id": getattr(request.state, "user_id", None)}

    @app.get("/me")
    async def read_me(user_id=Depends(get_current_user)):
        return {"user_id": user_id}

    return app


def test_auth_middleware_sets_user_id(auth_app, test_jwt_token, test_user_id):
    client = TestClient(auth_app)
    response = client.get(
        "/state", headers={"Authorization": f"Bearer {test_jwt_token}"}
    )
    assert response.status_code == 200
    assert response.json()["user_id"] == test_user_id

    # Ensure dependency uses middleware value
    me_resp = client.get("/me", headers={"Authorization": f"Bearer {test_jwt_token}"})
    assert me_resp.status_code == 200
    assert me_resp.json()["user_id"] == test_user_id


def test_auth_middleware_invalid_token(auth_app):
    client = TestClient(auth_app)
    response = client.get("/state", headers={"Authorization": "Bearer invalid"})
    assert response.status_code == 401
    assert "detail" in response.json()


def test_non_numeric_subject_is_rejected(auth_app, token_for):
    token = token_for("someone")
    client = TestClient(auth_app)
    response = client.get("/state", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_anonymous_request_has_no_user(auth_app):
    client = TestClient(auth_app)
    assert client.get("/state").json()["user_id"] is None
    assert client.get("/me").status_code in (401, 403)
