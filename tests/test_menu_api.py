import pytest

from api.menu.menu_model import MenuItem
from api.menu.menu_service import round_price, slugify
from conftest import png_bytes


@pytest.mark.parametrize(
    "name, slug",
    [
        ("Platos Fríos", "platos-frios"),
        ("  Café & Té  ", "cafe-te"),
        ("¡¡¡", "cat"),
        ("x" * 80, "x" * 60),
    ],
)
def test_slugify(name, slug):
    assert slugify(name) == slug


def test_round_price():
    assert str(round_price(12.345)) == "12.35"
    assert str(round_price("7")) == "7.00"


def _category(client, headers, name, **extra):
    res = client.post("/api/menu/categories", json={"name": name, **extra}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def test_categories_crud(client, admin_headers):
    drinks = _category(client, admin_headers, "Bebidas Frías", sortOrder=20)
    starters = _category(client, admin_headers, "Entradas", sort_order=10)
    assert drinks["slug"] == "bebidas-frias"

    res = client.get("/api/menu/categories")
    assert res.status_code == 200
    assert [c["id"] for c in res.json()] == [starters["id"], drinks["id"]]

    res = client.put(f"/api/menu/categories/{drinks['id']}", json={"name": "Bebidas"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["slug"] == "bebidas"
    assert res.json()["sort_order"] == 20

    res = client.put(f"/api/menu/categories/{drinks['id']}", json={}, headers=admin_headers)
    assert res.status_code == 400

    assert client.delete(f"/api/menu/categories/{drinks['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/menu/categories/{drinks['id']}", headers=admin_headers).status_code == 404
    assert client.put("/api/menu/categories/missing", json={"name": "Nada"}, headers=admin_headers).status_code == 404


def test_category_slug_conflict(client, admin_headers):
    _category(client, admin_headers, "Postres")
    res = client.post("/api/menu/categories", json={"name": "POSTRES"}, headers=admin_headers)
    assert res.status_code == 409


def test_category_name_too_short(client, admin_headers):
    res = client.post("/api/menu/categories", json={"name": "a"}, headers=admin_headers)
    assert res.status_code == 422


def test_menu_writes_are_admin_only(client, worker_headers):
    assert client.post("/api/menu/categories", json={"name": "Sopas"}, headers=worker_headers).status_code == 403
    assert client.post("/api/menu/items", data={"name": "Sopa", "price": "10"}).status_code == 401


def test_items_crud(client, admin_headers, db):
    fondos = _category(client, admin_headers, "Fondos")

    res = client.post(
        "/api/menu/items",
        data={"name": "Lomo Saltado", "price": "32.499", "category_id": fondos["id"]},
        files={"image": ("lomo.png", png_bytes(), "image/png")},
        headers=admin_headers,
    )
    assert res.status_code == 201, res.text
    lomo = res.json()
    assert lomo["price"] == 32.5
    assert lomo["active"] is True
    assert lomo["sort_order"] == 100
    assert lomo["category_slug"] == "fondos"
    assert lomo["image_url"].startswith("/uploads/menu/")
    assert client.get(lomo["image_url"]).status_code == 200

    res = client.post(
        "/api/menu/items", data={"name": "Chicha Morada", "price": "6", "sort_order": "1"}, headers=admin_headers
    )
    assert res.status_code == 201
    chicha = res.json()
    assert chicha["category_id"] is None

    res = client.get("/api/menu/items")
    assert [i["name"] for i in res.json()] == ["Chicha Morada", "Lomo Saltado"]
    res = client.get("/api/menu/items", params={"q": "lomo"})
    assert [i["id"] for i in res.json()] == [lomo["id"]]
    res = client.get("/api/menu/items", params={"category_id": fondos["id"]})
    assert [i["id"] for i in res.json()] == [lomo["id"]]

    res = client.put(
        f"/api/menu/items/{chicha['id']}",
        data={"price": "7.5", "active": "false"},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["price"] == 7.5
    assert res.json()["active"] is False

    res = client.put(f"/api/menu/items/{chicha['id']}", data={}, headers=admin_headers)
    assert res.status_code == 400

    assert client.delete(f"/api/menu/items/{chicha['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/menu/items/{chicha['id']}", headers=admin_headers).status_code == 404

    # deleting a category removes its items
    assert client.delete(f"/api/menu/categories/{fondos['id']}", headers=admin_headers).status_code == 200
    db.expire_all()
    assert db.query(MenuItem).count() == 0


def test_item_with_invalid_image(client, admin_headers):
    res = client.post(
        "/api/menu/items",
        data={"name": "Ceviche", "price": "28"},
        files={"image": ("ceviche.png", b"not really a png", "image/png")},
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "INVALID_IMAGE"


def test_item_with_unknown_category(client, admin_headers):
    res = client.post(
        "/api/menu/items",
        data={"name": "Ceviche", "price": "28", "category_id": "missing"},
        headers=admin_headers,
    )
    assert res.status_code == 400


def test_item_negative_price(client, admin_headers):
    res = client.post("/api/menu/items", data={"name": "Gratis", "price": "-1"}, headers=admin_headers)
    assert res.status_code == 422
