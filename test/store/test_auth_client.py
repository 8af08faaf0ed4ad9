import httpx

from src.store.auth import AuthClient
from src.store.results import FaultKind, StoreFault


def test_sign_up_sign_in_and_resolve_token(auth_client, run):
    user = run(auth_client.sign_up("alice@example.com", "s3cret-pass"))
    assert user["email"] == "alice@example.com"

    session = run(auth_client.sign_in("alice@example.com", "s3cret-pass"))
    assert session["token_type"] == "bearer"

    resolved = run(auth_client.get_user(session["access_token"]))
    assert resolved["id"] == user["id"]


def test_bad_credentials_are_rejected(auth_client, run):
    run(auth_client.sign_up("alice@example.com", "s3cret-pass"))

    fault = run(auth_client.sign_in("alice@example.com", "nope-nope"))
    assert isinstance(fault, StoreFault)
    assert fault.kind == FaultKind.REMOTE_REJECTED
    assert fault.message == "Invalid credentials"

    fault = run(auth_client.get_user("not-a-token"))
    assert fault.kind == FaultKind.REMOTE_REJECTED


def test_duplicate_sign_up_is_a_conflict(auth_client, run):
    run(auth_client.sign_up("alice@example.com", "s3cret-pass"))
    fault = run(auth_client.sign_up("alice@example.com", "s3cret-pass"))
    assert fault.kind == FaultKind.CONFLICT
    assert fault.message == "User already registered"
    assert fault.code == "user_already_exists"


def test_duplicate_detected_from_message_alone(run):
    def handler(request):
        return httpx.Response(400, json={"msg": "User already registered"})

    client = AuthClient("http://store.test", "k", httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    assert run(client.sign_up("a@example.com", "s3cret-pass")).kind == FaultKind.CONFLICT


def test_other_sign_up_rejections_stay_rejections(run):
    def handler(request):
        return httpx.Response(422, json={"code": 422, "error_code": "weak_password", "msg": "Password is too weak"})

    client = AuthClient("http://store.test", "k", httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    fault = run(client.sign_up("a@example.com", "s3cret-pass"))
    assert fault.kind == FaultKind.REMOTE_REJECTED
    assert fault.code == "weak_password"


def test_auth_service_unreachable(auth_client, fake_store, run):
    fake_store.offline = True
    fault = run(auth_client.sign_in("alice@example.com", "s3cret-pass"))
    assert fault.kind == FaultKind.REMOTE_UNAVAILABLE
