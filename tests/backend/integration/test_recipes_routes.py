import pytest

from recipehub.main import app
from recipehub.models.recipe import Recipe


pytestmark = pytest.mark.asyncio


async def create_recipe(client, headers, **overrides):
    body = {
        "title": "Shakshuka",
        "description": "Eggs poached in spiced tomato sauce",
        "ingredients": ["eggs", "tomatoes", "cumin"],
        "instructions": "Simmer the sauce, crack in the eggs, cover.",
    }
    body.update(overrides)
    resp = await client.post("/api/v1/recipes", json=body, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def subscribe(open_conn, recipe_id, user_id=1):
    """Register a fake OPEN socket subscribed to recipe_id on the app's hub."""
    conn = open_conn(user_id)
    hub = app.state.realtime
    hub.registry.register(user_id, conn)
    hub.subscriptions.subscribe(recipe_id, conn)
    return conn


async def test_create_and_get_recipe(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    recipe = await create_recipe(client, headers)
    assert recipe["authorId"] == user.id
    assert recipe["ingredients"] == ["eggs", "tomatoes", "cumin"]
    assert recipe["averageRating"] is None
    assert recipe["reviewCount"] == 0

    resp = await client.get(f"/api/v1/recipes/{recipe['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["title"] == "Shakshuka"


async def test_get_missing_recipe(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    resp = await client.get("/api/v1/recipes/999", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "RECIPE_NOT_FOUND"


async def test_private_recipe_hidden_from_others(client, create_user, auth_header_factory):
    author, author_pw = await create_user()
    reader, reader_pw = await create_user()
    recipe = await create_recipe(client, await auth_header_factory(author.email, author_pw), isPublic=False)

    resp = await client.get(f"/api/v1/recipes/{recipe['id']}", headers=await auth_header_factory(reader.email, reader_pw))
    assert resp.status_code == 404


async def test_update_notifies_subscribers(client, create_user, auth_header_factory, open_conn):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)
    recipe = await create_recipe(client, headers)

    watcher = subscribe(open_conn, recipe["id"])
    # Subscribed by string id, published by the integer primary key
    other_device = subscribe(open_conn, str(recipe["id"]), user_id=2)
    bystander = subscribe(open_conn, recipe["id"] + 1000)

    resp = await client.patch(f"/api/v1/recipes/{recipe['id']}", json={"title": "Green shakshuka"}, headers=headers)

    assert resp.status_code == 200
    assert resp.json()["data"]["title"] == "Green shakshuka"
    assert resp.json()["data"]["description"] == "Eggs poached in spiced tomato sauce"
    expected = [{"type": "recipe_update", "recipeId": recipe["id"]}]
    assert watcher.websocket.sent == expected
    assert other_device.websocket.sent == expected
    assert bystander.websocket.sent == []
    assert (await Recipe.get(id=recipe["id"])).title == "Green shakshuka"


async def test_only_author_can_update(client, create_user, auth_header_factory, open_conn):
    author, author_pw = await create_user()
    intruder, intruder_pw = await create_user()
    recipe = await create_recipe(client, await auth_header_factory(author.email, author_pw))
    watcher = subscribe(open_conn, recipe["id"])

    resp = await client.patch(
        f"/api/v1/recipes/{recipe['id']}",
        json={"title": "Hijacked"},
        headers=await auth_header_factory(intruder.email, intruder_pw),
    )

    assert resp.status_code == 403
    assert resp.json()["detail"] == "FORBIDDEN_NOT_AUTHOR"
    assert watcher.websocket.sent == []
    assert (await Recipe.get(id=recipe["id"])).title == "Shakshuka"


async def test_update_missing_recipe(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    resp = await client.patch("/api/v1/recipes/999", json={"title": "Ghost"}, headers=headers)
    assert resp.status_code == 404


async def test_review_updates_rating_and_notifies(client, create_user, auth_header_factory, open_conn):
    author, author_pw = await create_user()
    reader, reader_pw = await create_user()
    recipe = await create_recipe(client, await auth_header_factory(author.email, author_pw))
    watcher = subscribe(open_conn, recipe["id"])
    reader_headers = await auth_header_factory(reader.email, reader_pw)

    first = await client.post(f"/api/v1/recipes/{recipe['id']}/reviews", json={"rating": 5, "comment": "Great"},
                              headers=reader_headers)
    second = await client.post(f"/api/v1/recipes/{recipe['id']}/reviews", json={"rating": 2},
                               headers=reader_headers)

    assert first.status_code == 200
    assert second.json()["data"]["recipe"]["averageRating"] == 3.5
    assert second.json()["data"]["recipe"]["reviewCount"] == 2
    assert watcher.websocket.frames("recipe_update") == [
        {"type": "recipe_update", "recipeId": recipe["id"]},
        {"type": "recipe_update", "recipeId": recipe["id"]},
    ]


async def test_review_rejects_out_of_range_rating(client, create_user, auth_header_factory, open_conn):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)
    recipe = await create_recipe(client, headers)
    watcher = subscribe(open_conn, recipe["id"])

    resp = await client.post(f"/api/v1/recipes/{recipe['id']}/reviews", json={"rating": 6}, headers=headers)
    assert resp.status_code == 422
    assert watcher.websocket.sent == []


async def test_review_missing_recipe(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.email, password)

    resp = await client.post("/api/v1/recipes/999/reviews", json={"rating": 4}, headers=headers)
    assert resp.status_code == 404


async def test_recipes_require_auth(client):
    resp = await client.post("/api/v1/recipes", json={"title": "Anonymous stew"})
    assert resp.status_code == 401
