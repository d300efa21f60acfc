"""
Tests for the shop HTTP and WebSocket endpoints.

Services run against in-memory repositories through FastAPI
dependency overrides. Validates status codes, response bodies,
Location headers, authorization, security headers and rate limiting.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.application.shop.auth_service import AuthService
from app.application.shop.category_service import CategoryService
from app.application.shop.order_service import OrderService
from app.application.shop.product_service import ProductService
from app.application.shop.user_service import UserService
from app.core.config import settings
from app.domain.shop.entities import Category, UserRole
from app.infrastructure.shop.notifications import (
    EmailOutbox,
    LoggingEmailSender,
    NotificationHub,
)
from app.interfaces.shop.dependencies import (
    get_auth_service,
    get_category_service,
    get_email_outbox,
    get_notification_hub,
    get_order_service,
    get_product_service,
    get_user_service,
)
from app.main import app
from app.shared.security.headers import CSP_HEADER, SECURE_HEADERS, headers_for_path
from app.shared.security.rate_limiting import limiter
from conftest import make_product, make_user, seed


class ExplodingCategoryService(CategoryService):
    async def find_all(self):
        raise ConnectionError("database unreachable at 10.0.0.5")


@pytest.fixture
def hub() -> NotificationHub:
    return NotificationHub()


@pytest.fixture
def client(
    category_repo,
    user_repo,
    product_repo,
    order_repo,
    hasher,
    token_service,
    notifier,
    email_queue,
    hub,
):
    outbox = EmailOutbox(LoggingEmailSender())
    overrides = {
        get_category_service: lambda: CategoryService(category_repo),
        get_user_service: lambda: UserService(user_repo, hasher),
        get_auth_service: lambda: AuthService(user_repo, hasher, token_service),
        get_product_service: lambda: ProductService(product_repo, category_repo, notifier),
        get_order_service: lambda: OrderService(
            order_repo, product_repo, user_repo, notifier, email_queue
        ),
        get_notification_hub: lambda: hub,
        get_email_outbox: lambda: outbox,
    }
    app.dependency_overrides.update(overrides)
    limiter.reset()
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def alice(user_repo):
    return seed(user_repo, make_user("alice", password="secret1"))


@pytest.fixture
def admin(user_repo):
    return seed(user_repo, make_user("root", password="secret1", role=UserRole.ADMIN))


def _auth(token_service, user) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_service.issue(user)}"}


class TestCategoryEndpoints:
    """Tests for /api/v1/categories."""

    def test_create_returns_201_with_location(self, client) -> None:
        resp = client.post("/api/v1/categories", json={"name": "Electronics"})

        assert resp.status_code == 201
        assert resp.json()["name"] == "Electronics"
        assert resp.headers["location"].endswith("/api/v1/categories/1")

    def test_short_name_returns_400(self, client) -> None:
        resp = client.post("/api/v1/categories", json={"name": "AB"})

        assert resp.status_code == 400
        assert "at least 3" in resp.json()["message"]

    def test_duplicate_returns_409(self, client) -> None:
        client.post("/api/v1/categories", json={"name": "Electronics"})
        resp = client.post("/api/v1/categories", json={"name": "Electronics"})
        assert resp.status_code == 409

    def test_missing_returns_404(self, client) -> None:
        assert client.get("/api/v1/categories/42").status_code == 404
        assert client.put("/api/v1/categories/42", json={"name": "Garden"}).status_code == 404

    def test_update_returns_200(self, client, category_repo) -> None:
        seed(category_repo, Category(name="Toys"))

        resp = client.put("/api/v1/categories/1", json={"name": "Games"})

        assert resp.status_code == 200
        assert resp.json()["name"] == "Games"

    def test_delete_returns_204_then_404(self, client, category_repo) -> None:
        seed(category_repo, Category(name="Toys"))

        deleted = client.delete("/api/v1/categories/1")

        assert deleted.status_code == 204
        assert deleted.content == b""
        assert client.get("/api/v1/categories/1").status_code == 404

    def test_list_returns_200(self, client, category_repo) -> None:
        seed(category_repo, Category(name="Toys"))
        resp = client.get("/api/v1/categories")
        assert resp.status_code == 200
        assert [c["name"] for c in resp.json()] == ["Toys"]

    def test_malformed_id_returns_400(self, client) -> None:
        assert client.get("/api/v1/categories/abc").status_code == 400

    def test_unexpected_fault_returns_generic_500(self, client, category_repo) -> None:
        app.dependency_overrides[get_category_service] = lambda: ExplodingCategoryService(
            category_repo
        )

        resp = client.get("/api/v1/categories")

        assert resp.status_code == 500
        assert resp.json() == {"message": "Internal server error"}
        assert "10.0.0.5" not in resp.text


class TestProductEndpoints:
    """Tests for /api/v1/products (raise-and-handle path)."""

    def test_create_returns_201(self, client, category_repo) -> None:
        seed(category_repo, Category(name="Electronics"))

        resp = client.post(
            "/api/v1/products",
            json={"name": "Laptop", "price": "999.99", "stock": 3, "category_id": 1},
        )

        assert resp.status_code == 201
        assert resp.headers["location"].endswith("/api/v1/products/1")

    def test_invalid_product_returns_400_with_errors(self, client, category_repo) -> None:
        seed(category_repo, Category(name="Electronics"))

        resp = client.post(
            "/api/v1/products",
            json={"name": "TV", "price": "0", "stock": 1, "category_id": 1},
        )

        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid product data"
        assert len(resp.json()["errors"]) == 2

    def test_missing_product_returns_404(self, client) -> None:
        assert client.get("/api/v1/products/9").status_code == 404

    def test_missing_category_returns_404(self, client) -> None:
        resp = client.post(
            "/api/v1/products",
            json={"name": "Laptop", "price": "10", "stock": 1, "category_id": 5},
        )
        assert resp.status_code == 404

    def test_delete_returns_204(self, client, product_repo) -> None:
        seed(product_repo, make_product())
        assert client.delete("/api/v1/products/1").status_code == 204
        assert client.get("/api/v1/products").json() == []


class TestAuthEndpoints:
    """Tests for /api/v1/auth."""

    def test_signup_returns_201(self, client) -> None:
        resp = client.post(
            "/api/v1/auth/signup",
            json={"username": "bob", "email": "bob@x.com", "password": "secret"},
        )

        assert resp.status_code == 201
        assert resp.json()["user"]["role"] == "USER"
        assert resp.json()["token"]
        assert "password" not in resp.text

    def test_signup_conflict_returns_409(self, client, alice) -> None:
        resp = client.post(
            "/api/v1/auth/signup",
            json={"username": "alice", "email": "other@shop.com", "password": "secret"},
        )
        assert resp.status_code == 409

    def test_signin_returns_200(self, client, alice) -> None:
        resp = client.post(
            "/api/v1/auth/signin", json={"username": "alice", "password": "secret1"}
        )
        assert resp.status_code == 200
        assert resp.json()["user"]["username"] == "alice"

    def test_signin_failures_are_indistinguishable(self, client, alice) -> None:
        unknown = client.post(
            "/api/v1/auth/signin", json={"username": "nobody", "password": "secret1"}
        )
        wrong = client.post(
            "/api/v1/auth/signin", json={"username": "alice", "password": "nope123"}
        )

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()

    def test_signin_is_rate_limited(self, client) -> None:
        allowed = int(settings.rate_limit_heavy.split("/")[0])
        body = {"username": "nobody", "password": "secret1"}

        statuses = [
            client.post("/api/v1/auth/signin", json=body).status_code
            for _ in range(allowed + 1)
        ]

        assert statuses[:allowed] == [401] * allowed
        assert statuses[-1] == 429


class TestUserEndpoints:
    """Tests for /api/v1/users."""

    def test_me_requires_token(self, client) -> None:
        assert client.get("/api/v1/users/me").status_code == 401

    def test_me_returns_caller(self, client, token_service, alice) -> None:
        resp = client.get("/api/v1/users/me", headers=_auth(token_service, alice))
        assert resp.status_code == 200
        assert resp.json()["username"] == "alice"

    def test_listing_requires_admin(self, client, token_service, alice) -> None:
        resp = client.get("/api/v1/users", headers=_auth(token_service, alice))
        assert resp.status_code == 403

    def test_admin_lists_users(self, client, token_service, alice, admin) -> None:
        resp = client.get("/api/v1/users", headers=_auth(token_service, admin))
        assert resp.status_code == 200
        assert {u["username"] for u in resp.json()} == {"alice", "root"}

    def test_admin_creates_user(self, client, token_service, admin) -> None:
        resp = client.post(
            "/api/v1/users",
            json={"username": "carol", "email": "carol@shop.com", "password": "secret1"},
            headers=_auth(token_service, admin),
        )
        assert resp.status_code == 201
        assert resp.headers["location"].endswith(f"/api/v1/users/{resp.json()['id']}")

    def test_admin_deletes_user(self, client, token_service, alice, admin) -> None:
        headers = _auth(token_service, admin)

        assert client.delete(f"/api/v1/users/{alice.id}", headers=headers).status_code == 204
        assert client.get(f"/api/v1/users/{alice.id}", headers=headers).status_code == 404


class TestOrderEndpoints:
    """Tests for /api/v1/orders."""

    def test_place_order(self, client, token_service, alice, product_repo, email_queue) -> None:
        seed(product_repo, make_product(stock=4))

        resp = client.post(
            "/api/v1/orders",
            json={"lines": [{"product_id": 1, "quantity": 2}]},
            headers=_auth(token_service, alice),
        )

        assert resp.status_code == 201
        assert resp.json()["status"] == "PENDING"
        assert resp.headers["location"].endswith(f"/api/v1/orders/{resp.json()['id']}")
        assert len(email_queue.messages) == 1

    def test_out_of_stock_returns_400(self, client, token_service, alice, product_repo) -> None:
        seed(product_repo, make_product(stock=1))

        resp = client.post(
            "/api/v1/orders",
            json={"lines": [{"product_id": 1, "quantity": 2}]},
            headers=_auth(token_service, alice),
        )

        assert resp.status_code == 400
        assert "Insufficient stock" in resp.json()["message"]

    def test_anonymous_order_returns_401(self, client) -> None:
        resp = client.post("/api/v1/orders", json={"lines": [{"product_id": 1, "quantity": 1}]})
        assert resp.status_code == 401

    def test_other_users_order_is_forbidden(
        self, client, token_service, alice, user_repo, product_repo
    ) -> None:
        bob = seed(user_repo, make_user("bob"))
        seed(product_repo, make_product())
        placed = client.post(
            "/api/v1/orders",
            json={"lines": [{"product_id": 1, "quantity": 1}]},
            headers=_auth(token_service, alice),
        ).json()

        resp = client.get(f"/api/v1/orders/{placed['id']}", headers=_auth(token_service, bob))

        assert resp.status_code == 403

    def test_status_change_requires_admin(
        self, client, token_service, alice, admin, product_repo
    ) -> None:
        seed(product_repo, make_product())
        placed = client.post(
            "/api/v1/orders",
            json={"lines": [{"product_id": 1, "quantity": 1}]},
            headers=_auth(token_service, alice),
        ).json()
        url = f"/api/v1/orders/{placed['id']}/status"

        denied = client.put(url, json={"status": "PROCESSING"}, headers=_auth(token_service, alice))
        allowed = client.put(url, json={"status": "PROCESSING"}, headers=_auth(token_service, admin))
        illegal = client.put(url, json={"status": "PENDING"}, headers=_auth(token_service, admin))

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["status"] == "PROCESSING"
        assert illegal.status_code == 400


class TestWebSocketEndpoints:
    """Tests for /ws/v1/*."""

    def test_products_stream_answers_ping(self, client) -> None:
        with client.websocket_connect("/ws/v1/products") as ws:
            assert ws.receive_json()["event"] == "connected"
            ws.send_json({"action": "ping"})
            assert ws.receive_json()["event"] == "pong"

    def test_orders_stream_rejects_bad_token(self, client) -> None:
        with client.websocket_connect("/ws/v1/orders?token=garbage") as ws:
            rejection = ws.receive_json()
            assert rejection["event"] == "error"
            assert rejection["status"] == 401
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()

        assert exc_info.value.code == 1008

    def test_orders_stream_accepts_valid_token(self, client, token_service, alice, hub) -> None:
        token = token_service.issue(alice)
        with client.websocket_connect(f"/ws/v1/orders?token={token}") as ws:
            greeting = ws.receive_json()
            assert greeting["event"] == "connected"
            assert greeting["channel"] == "orders"


class TestSecurityHeaders:
    """Tests for security headers on responses."""

    def test_security_headers_present(self, client) -> None:
        resp = client.get("/api/v1/health")

        assert resp.status_code == 200
        for name, value in SECURE_HEADERS.items():
            assert resp.headers[name] == value

    def test_headers_on_error_responses(self, client) -> None:
        resp = client.get("/api/v1/categories/42")
        assert resp.status_code == 404
        assert resp.headers["X-Frame-Options"] == "DENY"

    def test_docs_pages_skip_csp(self) -> None:
        assert CSP_HEADER not in headers_for_path("/docs")
        assert headers_for_path("/api/v1/categories")[CSP_HEADER] == "default-src 'self'"


class TestHealthEndpoints:
    """Tests for /api/v1/health."""

    def test_liveness(self, client) -> None:
        resp = client.get("/api/v1/health")
        assert resp.json() == {"status": "ok", "version": settings.version}

    def test_notifications_report_stopped_worker(self, client) -> None:
        with client.websocket_connect("/ws/v1/products") as ws:
            ws.receive_json()
            resp = client.get("/api/v1/health/notifications")

        body = resp.json()
        assert resp.status_code == 200
        assert body["status"] == "degraded"
        assert body["websocket"]["active_connections"] == 1
        assert body["email"]["pending"] == 0
