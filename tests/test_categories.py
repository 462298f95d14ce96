import math
from uuid import uuid4

from ticketing_api.db import get_session_scope
from ticketing_api.tables import CategoriesTable


def unique_name(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:8]}"


async def create_category(async_client, name: str, parent_id: int | None = None) -> dict:
    response = await async_client.post(
        "/categories",
        json={"name": name, "parent_id": parent_id},
    )
    assert response.status_code == 201
    return response.json()


async def get_general_category(async_client) -> dict:
    response = await async_client.get("/categories/tree")
    assert response.status_code == 200
    return next(node for node in response.json() if node["name"] == "General")


async def test_create_category(app, async_client) -> None:
    name = unique_name("Concerts")

    response = await async_client.post("/categories", json={"name": name})

    assert response.status_code == 201
    payload = response.json()
    assert isinstance(payload["id"], int)
    assert payload["name"] == name
    assert payload["parent_id"] is None


async def test_create_category_strips_name(app, async_client) -> None:
    name = unique_name("Opera")

    payload = await create_category(async_client, f"  {name}  ")

    assert payload["name"] == name


async def test_category_persists_in_db(app, async_client) -> None:
    parent = await create_category(async_client, unique_name("Festivals"))
    payload = await create_category(async_client, unique_name("Summer"), parent["id"])

    async with get_session_scope() as session:
        category = await session.get(CategoriesTable, payload["id"])
        assert category is not None
        assert category.name == payload["name"]
        assert category.parent_id == parent["id"]


async def test_create_category_rejects_empty_name(app, async_client) -> None:
    response = await async_client.post("/categories", json={"name": "   "})

    assert response.status_code == 422


async def test_create_category_rejects_long_name(app, async_client) -> None:
    response = await async_client.post("/categories", json={"name": "x" * 31})

    assert response.status_code == 422


async def test_create_category_rejects_duplicate_name(app, async_client) -> None:
    name = unique_name("Comedy")
    await create_category(async_client, name)

    response = await async_client.post("/categories", json={"name": name})

    assert response.status_code == 409
    assert response.json()["detail"] == "Category name already exists."


async def test_create_category_rejects_unknown_parent(app, async_client) -> None:
    response = await async_client.post(
        "/categories",
        json={"name": unique_name("Orphan"), "parent_id": 987654},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Parent category not found."


async def test_get_category(app, async_client) -> None:
    created = await create_category(async_client, unique_name("Ballet"))

    response = await async_client.get(f"/categories/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


async def test_get_category_not_found(app, async_client) -> None:
    response = await async_client.get("/categories/987654")

    assert response.status_code == 404
    assert response.json()["detail"] == "Category with ID 987654 not found."


async def test_list_categories_paginates(app, async_client) -> None:
    for _ in range(12):
        await create_category(async_client, unique_name("Page"))

    response = await async_client.get("/categories", params={"page": 2, "limit": 10})

    assert response.status_code == 200
    payload = response.json()
    assert payload["current_page"] == 2
    assert payload["items_per_page"] == 10
    assert payload["total_pages"] == math.ceil(payload["total_items"] / 10)
    assert 0 < len(payload["categories"]) <= 10


async def test_list_categories_defaults(app, async_client) -> None:
    response = await async_client.get("/categories")

    assert response.status_code == 200
    payload = response.json()
    assert payload["current_page"] == 1
    assert payload["items_per_page"] == 10


async def test_list_categories_rejects_oversized_limit(app, async_client) -> None:
    response = await async_client.get("/categories", params={"limit": 101})

    assert response.status_code == 422


async def test_get_category_tree(app, async_client) -> None:
    root = await create_category(async_client, unique_name("Sports"))
    child = await create_category(async_client, unique_name("Football"), root["id"])
    grandchild = await create_category(async_client, unique_name("Cup"), child["id"])

    response = await async_client.get("/categories/tree")

    assert response.status_code == 200
    node = next(item for item in response.json() if item["id"] == root["id"])
    assert node["parent_id"] is None
    assert [c["id"] for c in node["children"]] == [child["id"]]
    assert [c["id"] for c in node["children"][0]["children"]] == [grandchild["id"]]


async def test_general_category_is_seeded(app, async_client) -> None:
    general = await get_general_category(async_client)

    assert general["parent_id"] is None


async def test_resolve_category_filter(app, async_client) -> None:
    root = await create_category(async_client, unique_name("Arts"))
    child = await create_category(async_client, unique_name("Painting"), root["id"])
    grandchild = await create_category(async_client, unique_name("Oil"), child["id"])
    other = await create_category(async_client, unique_name("Film"))

    response = await async_client.get(
        "/categories/descendants",
        params={"category_ids": [root["id"]], "category_names": [other["name"]]},
    )

    assert response.status_code == 200
    assert response.json()["category_ids"] == sorted(
        [root["id"], child["id"], grandchild["id"], other["id"]]
    )


async def test_update_category(app, async_client) -> None:
    parent = await create_category(async_client, unique_name("Family"))
    created = await create_category(async_client, unique_name("Circus"))
    new_name = unique_name("Circus")

    response = await async_client.patch(
        f"/categories/{created['id']}",
        json={"name": new_name, "parent_id": parent["id"]},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["id"] == created["id"]
    assert payload["name"] == new_name
    assert payload["parent_id"] == parent["id"]


async def test_update_category_moves_to_root(app, async_client) -> None:
    parent = await create_category(async_client, unique_name("Kids"))
    created = await create_category(async_client, unique_name("Puppets"), parent["id"])

    response = await async_client.patch(
        f"/categories/{created['id']}", json={"parent_id": None}
    )

    assert response.status_code == 200
    assert response.json()["parent_id"] is None


async def test_update_category_rejects_null_name(app, async_client) -> None:
    created = await create_category(async_client, unique_name("Magic"))

    response = await async_client.patch(
        f"/categories/{created['id']}", json={"name": None}
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Fields cannot be null: name"


async def test_update_category_rejects_empty_payload(app, async_client) -> None:
    created = await create_category(async_client, unique_name("Poetry"))

    response = await async_client.patch(f"/categories/{created['id']}", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "No fields to update."


async def test_update_category_rejects_cycle(app, async_client) -> None:
    root = await create_category(async_client, unique_name("Dance"))
    child = await create_category(async_client, unique_name("Salsa"), root["id"])

    response = await async_client.patch(
        f"/categories/{root['id']}", json={"parent_id": child["id"]}
    )

    assert response.status_code == 409
    assert response.json()["detail"] == (
        "Category cannot be moved under one of its own descendants."
    )


async def test_update_general_category_name_is_rejected(app, async_client) -> None:
    general = await get_general_category(async_client)

    response = await async_client.patch(
        f"/categories/{general['id']}", json={"name": unique_name("Misc")}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == 'The "General" category cannot be renamed.'

    async with get_session_scope() as session:
        stored = await session.get(CategoriesTable, general["id"])
        assert stored is not None
        assert stored.name == "General"


async def test_update_category_not_found(app, async_client) -> None:
    response = await async_client.patch("/categories/987654", json={"name": "Nope"})

    assert response.status_code == 404


async def test_delete_category_reparents_children(app, async_client) -> None:
    general = await get_general_category(async_client)
    parent = await create_category(async_client, unique_name("Talks"))
    child = await create_category(async_client, unique_name("Science"), parent["id"])

    response = await async_client.delete(f"/categories/{parent['id']}")

    assert response.status_code == 204
    assert response.content == b""

    async with get_session_scope() as session:
        assert await session.get(CategoriesTable, parent["id"]) is None
        moved_child = await session.get(CategoriesTable, child["id"])
        assert moved_child is not None
        assert moved_child.parent_id == general["id"]


async def test_delete_general_category_is_rejected(app, async_client) -> None:
    general = await get_general_category(async_client)

    response = await async_client.delete(f"/categories/{general['id']}")

    assert response.status_code == 400
    assert response.json()["detail"] == 'The "General" category cannot be deleted.'


async def test_delete_category_not_found(app, async_client) -> None:
    response = await async_client.delete("/categories/987654")

    assert response.status_code == 404
