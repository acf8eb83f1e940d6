import pytest
from conftest import bearer, register, rand
from services.metrics_service import metrics

MENU_ITEM = {"title": "Veggie", "description": "A garden of delight", "image": "pizza1.png", "price": 0.0038}


@pytest.fixture
def store(client, admin_token):
    franchise = client.post(
        "/api/franchise", json={"name": f"Fr-{rand()}", "admins": []}, headers=bearer(admin_token)
    ).json()
    store = client.post(
        f"/api/franchise/{franchise['id']}/store", json={"name": "SLC"}, headers=bearer(admin_token)
    ).json()
    return franchise["id"], store["id"]


@pytest.fixture
def menu_item(client, admin_token):
    menu = client.put("/api/order/menu", json=MENU_ITEM, headers=bearer(admin_token)).json()
    return menu[-1]


def order_body(store, menu_item):
    franchise_id, store_id = store
    return {
        "franchiseId": franchise_id,
        "storeId": store_id,
        "items": [{"menuId": menu_item["id"], "description": menu_item["title"], "price": menu_item["price"]}],
    }


def test_menu_is_public(client):
    res = client.get("/api/order/menu")
    assert res.status_code == 200
    assert res.json() == []


def test_admin_adds_menu_item(client, admin_token):
    res = client.put("/api/order/menu", json=MENU_ITEM, headers=bearer(admin_token))

    assert res.status_code == 200
    assert res.json() == [{"id": 1, **MENU_ITEM}]
    assert client.get("/api/order/menu").json() == res.json()


def test_diner_cannot_add_menu_item(client, diner):
    res = client.put("/api/order/menu", json=MENU_ITEM, headers=bearer(diner["token"]))

    assert res.status_code == 403
    assert res.json() == {"message": "unable to add menu item"}


def test_orders_require_auth(client):
    res = client.get("/api/order")
    assert res.status_code == 401
    assert res.json() == {"message": "unauthorized"}


def test_empty_order_history(client, diner):
    res = client.get("/api/order", headers=bearer(diner["token"]))

    assert res.status_code == 200
    assert res.json() == {"dinerId": diner["user"]["id"], "orders": [], "page": 1}


def test_place_order_success(client, diner, store, menu_item, factory_ok):
    res = client.post("/api/order", json=order_body(store, menu_item), headers=bearer(diner["token"]))

    assert res.status_code == 200
    body = res.json()
    assert body["jwt"] == "factory-jwt"
    assert body["followLinkToEndChaos"] == "https://factory.example/report/1"
    assert body["order"]["franchiseId"] == store[0]
    assert body["order"]["storeId"] == store[1]
    assert body["order"]["items"][0]["menuId"] == menu_item["id"]

    assert factory_ok[0]["diner"] == {"id": diner["user"]["id"], "name": diner["user"]["name"], "email": diner["user"]["email"]}
    assert factory_ok[0]["order"]["id"] == body["order"]["id"]

    history = client.get("/api/order", headers=bearer(diner["token"])).json()
    assert [o["id"] for o in history["orders"]] == [body["order"]["id"]]
    assert metrics.pizzas_sold == 1
    assert metrics.revenue == pytest.approx(menu_item["price"])


def test_place_order_factory_failure(client, diner, store, menu_item, factory_down):
    res = client.post("/api/order", json=order_body(store, menu_item), headers=bearer(diner["token"]))

    assert res.status_code == 500
    assert res.json() == {
        "message": "Failed to fulfill order at factory",
        "followLinkToEndChaos": "https://factory.example/chaos",
    }
    # rejected orders are not persisted
    assert client.get("/api/order", headers=bearer(diner["token"])).json()["orders"] == []
    assert metrics.pizza_failures == 1


def test_place_order_unknown_menu_item(client, diner, store, menu_item, factory_ok):
    body = order_body(store, menu_item)
    body["items"][0]["menuId"] = 999

    res = client.post("/api/order", json=body, headers=bearer(diner["token"]))
    assert res.status_code == 404
    assert factory_ok == []


def test_place_order_store_from_other_franchise(client, diner, store, menu_item, factory_ok):
    body = order_body(store, menu_item)
    body["franchiseId"] = store[0] + 100

    res = client.post("/api/order", json=body, headers=bearer(diner["token"]))
    assert res.status_code == 404


def test_place_order_without_items_is_bad_request(client, diner, store, menu_item):
    body = order_body(store, menu_item)
    body["items"] = []

    res = client.post("/api/order", json=body, headers=bearer(diner["token"]))
    assert res.status_code == 400
    assert "message" in res.json()


def test_orders_survive_user_deletion(client, admin_token, store, menu_item, factory_ok):
    diner = register(client)
    order_id = client.post("/api/order", json=order_body(store, menu_item), headers=bearer(diner["token"])).json()["order"]["id"]

    assert client.delete(f"/api/user/{diner['user']['id']}", headers=bearer(admin_token)).status_code == 204

    # the store still counts the deleted diner's order in its revenue
    franchises = client.get("/api/franchise", headers=bearer(admin_token)).json()["franchises"]
    store_view = next(s for f in franchises for s in f["stores"] if s["id"] == store[1])
    assert order_id > 0
    assert store_view["totalRevenue"] == pytest.approx(menu_item["price"])
