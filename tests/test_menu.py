import pytest


@pytest.fixture
def add_category(client, admin_headers):
    async def _add(name: str, **fields) -> dict:
        response = await client.post(
            "/api/admin/menu-categories", json={"name": name, **fields}, headers=admin_headers
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _add


@pytest.fixture
def add_item(client, admin_headers):
    async def _add(category_id: str, name: str, price: float = 12.0, **fields) -> dict:
        response = await client.post(
            "/api/admin/menu-items",
            json={"category_id": category_id, "name": name, "price": price, **fields},
            headers=admin_headers,
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _add


# =============================================================================
# CATEGORIES
# =============================================================================

async def test_create_and_list_categories(client, admin_headers, add_category, add_item):
    dolci = await add_category("Dolci", display_order=2)
    antipasti = await add_category("Antipasti", display_order=1)
    await add_item(antipasti["id"], "Bruschetta")

    response = await client.get("/api/admin/menu-categories", headers=admin_headers)

    assert response.status_code == 200
    assert [(c["name"], c["item_count"]) for c in response.json()] == [
        ("Antipasti", 1),
        ("Dolci", 0),
    ]
    assert dolci["item_count"] == 0


async def test_duplicate_category_name_conflicts(client, admin_headers, add_category):
    await add_category("Primi")

    response = await client.post(
        "/api/admin/menu-categories", json={"name": "Primi"}, headers=admin_headers
    )

    assert response.status_code == 409
    assert "Primi" in response.json()["error"]


async def test_rename_category_updates_items(client, admin_headers, add_category, add_item):
    category = await add_category("Pasta")
    item = await add_item(category["id"], "Carbonara")

    response = await client.put(
        f"/api/admin/menu-categories/{category['id']}",
        json={"name": "Primi Piatti"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Primi Piatti"

    items = await client.get("/api/admin/menu-items", headers=admin_headers)
    assert items.json()[0]["id"] == item["id"]
    assert items.json()[0]["category"] == "Primi Piatti"


async def test_rename_onto_existing_name_conflicts(client, admin_headers, add_category):
    await add_category("Secondi")
    other = await add_category("Contorni")

    response = await client.put(
        f"/api/admin/menu-categories/{other['id']}",
        json={"name": "Secondi"},
        headers=admin_headers,
    )

    assert response.status_code == 409


async def test_delete_category_removes_its_items(client, admin_headers, add_category, add_item):
    category = await add_category("Pizze")
    await add_item(category["id"], "Margherita")
    await add_item(category["id"], "Diavola")

    response = await client.delete(
        f"/api/admin/menu-categories/{category['id']}", headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Category deleted with 2 items"
    assert (await client.get("/api/admin/menu-items", headers=admin_headers)).json() == []


async def test_missing_category(client, admin_headers):
    response = await client.put(
        "/api/admin/menu-categories/missing", json={"name": "X"}, headers=admin_headers
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Category not found"


# =============================================================================
# ITEMS
# =============================================================================

async def test_create_item_reports_category_name(add_category, add_item):
    category = await add_category("Antipasti")

    item = await add_item(
        category["id"],
        "Burrata",
        price=14.5,
        allergens=["dairy"],
        dietary_info=["vegetarian"],
    )

    assert item["category"] == "Antipasti"
    assert item["category_id"] == category["id"]
    assert item["price"] == 14.5
    assert item["allergens"] == ["dairy"]
    assert item["is_available"] is True


async def test_item_without_category_is_rejected(client, admin_headers):
    response = await client.post(
        "/api/admin/menu-items", json={"name": "Orphan", "price": 5}, headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Category ID is required"


async def test_item_with_unknown_category_is_rejected(client, admin_headers):
    response = await client.post(
        "/api/admin/menu-items",
        json={"category_id": "missing", "name": "Orphan", "price": 5},
        headers=admin_headers,
    )

    assert response.status_code == 404


async def test_update_item_moves_it_between_categories(client, admin_headers, add_category, add_item):
    pasta = await add_category("Pasta")
    specials = await add_category("Specials")
    item = await add_item(pasta["id"], "Cacio e Pepe", price=16)

    response = await client.put(
        f"/api/admin/menu-items/{item['id']}",
        json={"category_id": specials["id"], "price": 18},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["category"] == "Specials"
    assert response.json()["price"] == 18
    assert response.json()["name"] == "Cacio e Pepe"


async def test_delete_item(client, admin_headers, add_category, add_item):
    item = await add_item((await add_category("Dolci"))["id"], "Tiramisù")
    url = f"/api/admin/menu-items/{item['id']}"

    assert (await client.delete(url, headers=admin_headers)).status_code == 200
    assert (await client.delete(url, headers=admin_headers)).status_code == 404


async def test_menu_admin_requires_session(client):
    response = await client.post("/api/admin/menu-categories", json={"name": "Sneaky"})

    assert response.status_code == 401


# =============================================================================
# PUBLIC MENU
# =============================================================================

async def test_public_menu_hides_unavailable_items_and_inactive_categories(
    client, add_category, add_item
):
    mains = await add_category("Secondi", display_order=1)
    hidden = await add_category("Seasonal", is_active=False)
    await add_item(mains["id"], "Ossobuco")
    await add_item(mains["id"], "Sold Out", is_available=False)
    await add_item(hidden["id"], "Truffle Risotto")

    response = await client.get("/api/menu")

    assert response.status_code == 200
    menu = response.json()
    assert [section["name"] for section in menu] == ["Secondi"]
    assert [item["name"] for item in menu[0]["items"]] == ["Ossobuco"]


async def test_featured_items(client, add_category, add_item):
    category = await add_category("Chef")
    await add_item(category["id"], "Signature", is_featured=True)
    await add_item(category["id"], "Regular")

    response = await client.get("/api/menu/featured")

    assert [item["name"] for item in response.json()] == ["Signature"]
