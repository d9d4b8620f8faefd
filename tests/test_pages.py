import pytest


@pytest.mark.parametrize(
    "path",
    ["/", "/menu", "/reservations", "/verify-otp", "/reservation-confirmed", "/contact", "/auth/login", "/admin"],
)
async def test_page_renders(client, path):
    response = await client.get(path)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Bella Vista" in response.text


async def test_menu_page_lists_available_dishes(client, admin_headers):
    category = await client.post(
        "/api/admin/menu-categories", json={"name": "Dolci"}, headers=admin_headers
    )
    await client.post(
        "/api/admin/menu-items",
        json={"category_id": category.json()["id"], "name": "Panna Cotta", "price": 7.5},
        headers=admin_headers,
    )

    response = await client.get("/menu")

    assert "Panna Cotta" in response.text
    assert "7.50" in response.text


async def test_unknown_route_uses_error_body(client):
    response = await client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False


async def test_api_root_and_health(client):
    root = await client.get("/api")
    assert root.status_code == 200
    assert root.json()["health"] == "/health"

    health = await client.get("/health")
    assert health.status_code == 200
    body = health.json()
    assert body["database"] == "healthy"
    assert body["notification_service"] == "healthy"
    assert body["status"] in ("operational", "degraded")
