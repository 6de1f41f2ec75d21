"""HTTP tests for /api/products."""

import pytest


def _draft(category, **overrides):
    data = {
        "name": "Rose Oud",
        "description": "Rose over a dark oud base.",
        "category_id": category.id,
        "images": ["https://cdn.vintagebeauty.test/rose-oud.jpg"],
        "stock": 5,
        "price": 1450,
        "regular_price": 1800,
        "sizes": [{"size": "50ml", "price": 1450}, {"size": "100ml", "price": 2300}],
        "gender": "unisex",
        "top_notes": ["Bergamot"],
        "heart_notes": ["Rose"],
        "base_notes": ["Oud", "Amber"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def create(client, admin_auth):
    def _create(category, **overrides):
        response = client.post("/api/products/admin", json=_draft(category, **overrides), auth=admin_auth)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


# ======================================================================
# Admin access
# ======================================================================


def test_create_requires_credentials(client, perfumes):
    response = client.post("/api/products/admin", json=_draft(perfumes))
    assert response.status_code == 401


def test_create_rejects_wrong_password(client, admin_auth, perfumes):
    response = client.post("/api/products/admin", json=_draft(perfumes), auth=(admin_auth[0], "wrong"))
    assert response.status_code == 401


def test_create_requires_admin_role(client, customer_auth, perfumes):
    response = client.post("/api/products/admin", json=_draft(perfumes), auth=customer_auth)
    assert response.status_code == 403


def test_configured_admin_email_is_admin(client, db, perfumes):
    from vintage_beauty.models.user import User

    db.add(User(email="owner@vintagebeauty.test", password="pw", role="USER"))
    db.commit()
    response = client.post("/api/products/admin", json=_draft(perfumes), auth=("owner@vintagebeauty.test", "pw"))
    assert response.status_code == 201


# ======================================================================
# Create / validation
# ======================================================================


def test_create_returns_derived_fields(create, perfumes):
    product = create(perfumes, stock=0, in_stock=True)
    assert product["slug"] == "rose-oud-perfumes"
    assert product["category_name"] == "Perfumes"
    assert product["in_stock"] is False
    assert product["is_gift_set"] is False
    assert product["price"] == 1450
    assert product["brand_name"] == "VINTAGE BEAUTY"


@pytest.mark.parametrize(
    "overrides",
    [
        {"images": []},
        {"stock": -1},
        {"rating": 5.5},
        {"gender": "kids"},
        {"name": "   "},
        {"name": "!!!"},
        {"name": "★ ★"},
        {"gift_set_discount": 120},
        {"sizes": [{"size": "50ml", "price": -1}]},
        {"gift_set_items": [{"product": 1, "quantity": 0}]},
    ],
)
def test_create_validation_errors(client, admin_auth, perfumes, overrides):
    response = client.post("/api/products/admin", json=_draft(perfumes, **overrides), auth=admin_auth)
    assert response.status_code == 422


def test_create_missing_description(client, admin_auth, perfumes):
    draft = _draft(perfumes)
    del draft["description"]
    response = client.post("/api/products/admin", json=draft, auth=admin_auth)
    assert response.status_code == 422


def test_create_unknown_category(client, admin_auth, perfumes):
    response = client.post("/api/products/admin", json=_draft(perfumes, category_id=999), auth=admin_auth)
    assert response.status_code == 400
    assert "999" in response.json()["detail"]


def test_duplicate_slug_conflicts(client, admin_auth, create, perfumes):
    create(perfumes)
    response = client.post("/api/products/admin", json=_draft(perfumes), auth=admin_auth)
    assert response.status_code == 409
    assert "rose-oud-perfumes" in response.json()["detail"]


# ======================================================================
# Gift sets
# ======================================================================


@pytest.fixture
def duo(create, perfumes, gift_sets):
    amber = create(perfumes, name="Amber Nights", price=500, sizes=[])
    musk = create(perfumes, name="Velvet Musk", price=0, sizes=[{"size": "50ml", "price": 300}])
    bundle = create(
        gift_sets,
        name="Evening Duo",
        price=0,
        regular_price=0,
        sizes=[],
        gift_set_items=[
            {"product": amber["id"], "quantity": 2},
            {"product": musk["id"], "quantity": 1, "selected_size": "50ml"},
        ],
        gift_set_discount=10,
    )
    return amber, musk, bundle


def test_gift_set_pricing(duo):
    _, _, bundle = duo
    assert bundle["is_gift_set"] is True
    assert bundle["gift_set_total_price"] == 1300
    assert bundle["gift_set_discounted_price"] == 1170
    assert bundle["price"] == 1170
    assert bundle["regular_price"] == 1300


def test_gift_set_manual_price(client, admin_auth, duo):
    _, _, bundle = duo
    response = client.put(
        f"/api/products/admin/{bundle['id']}", json={"gift_set_manual_price": 999}, auth=admin_auth
    )
    assert response.status_code == 200
    body = response.json()
    assert body["price"] == 999
    assert body["regular_price"] == 1300


def test_gift_set_items_with_deleted_component(client, admin_auth, duo):
    amber, musk, bundle = duo
    assert client.delete(f"/api/products/admin/{musk['id']}", auth=admin_auth).status_code == 200

    items = client.get(f"/api/products/{bundle['id']}/gift-set-items").json()
    assert [i["available"] for i in items] == [True, False]
    assert items[0]["name"] == "Amber Nights"
    assert items[0]["unit_price"] == 500
    assert items[0]["line_total"] == 1000

    recalculated = client.post(f"/api/products/admin/{bundle['id']}/recalculate", auth=admin_auth)
    assert recalculated.status_code == 200
    assert recalculated.json()["gift_set_total_price"] == 1000
    assert recalculated.json()["price"] == 900


def test_recalculate_rejects_regular_products(client, admin_auth, duo):
    amber, _, _ = duo
    response = client.post(f"/api/products/admin/{amber['id']}/recalculate", auth=admin_auth)
    assert response.status_code == 400


# ======================================================================
# Reads
# ======================================================================


def test_get_by_id_and_slug(client, create, perfumes):
    product = create(perfumes)
    assert client.get(f"/api/products/{product['id']}").json()["slug"] == "rose-oud-perfumes"
    assert client.get("/api/products/slug/rose-oud-perfumes").json()["id"] == product["id"]
    assert client.get("/api/products/slug/missing").status_code == 404
    assert client.get("/api/products/4242").status_code == 404


def test_list_filters(client, duo):
    page = client.get("/api/products/", params={"category": "gift-sets"}).json()
    assert page["total"] == 1
    assert page["items"][0]["name"] == "Evening Duo"

    by_name = client.get("/api/products/", params={"category": "Perfumes"}).json()
    assert by_name["total"] == 2

    bundles = client.get("/api/products/", params={"is_gift_set": True}).json()
    assert [p["name"] for p in bundles["items"]] == ["Evening Duo"]

    search = client.get("/api/products/", params={"search": "musk"}).json()
    assert [p["name"] for p in search["items"]] == ["Velvet Musk"]


def test_list_pagination(client, create, perfumes):
    for name in ("Iris", "Neroli", "Vetiver"):
        create(perfumes, name=name)
    first = client.get("/api/products/", params={"size": 2}).json()
    second = client.get("/api/products/", params={"size": 2, "page": 1}).json()
    assert first["total"] == second["total"] == 3
    assert len(first["items"]) == 2
    assert len(second["items"]) == 1


def test_related_products(client, create, perfumes, gift_sets):
    rose = create(perfumes)
    create(perfumes, name="Iris")
    create(gift_sets, name="Holiday Box")
    related = client.get(f"/api/products/{rose['id']}/related").json()
    assert [p["name"] for p in related] == ["Iris"]


# ======================================================================
# Update / delete / upload
# ======================================================================


def test_partial_update_keeps_slug(client, admin_auth, create, perfumes):
    product = create(perfumes)
    response = client.put(
        f"/api/products/admin/{product['id']}", json={"description": "New copy", "stock": 0}, auth=admin_auth
    )
    body = response.json()
    assert body["slug"] == "rose-oud-perfumes"
    assert body["description"] == "New copy"
    assert body["in_stock"] is False
    assert body["price"] == 1450


def test_update_cannot_clear_required_field(client, admin_auth, create, perfumes):
    product = create(perfumes)
    response = client.put(f"/api/products/admin/{product['id']}", json={"name": None}, auth=admin_auth)
    assert response.status_code == 422


def test_update_rejects_name_without_letters_or_digits(client, admin_auth, create, perfumes):
    product = create(perfumes)
    response = client.put(f"/api/products/admin/{product['id']}", json={"name": "---"}, auth=admin_auth)
    assert response.status_code == 422
    assert client.get(f"/api/products/{product['id']}").json()["slug"] == "rose-oud-perfumes"


def test_rename_into_existing_slug_conflicts(client, admin_auth, create, perfumes):
    create(perfumes)
    other = create(perfumes, name="Iris")
    response = client.put(f"/api/products/admin/{other['id']}", json={"name": "Rose Oud"}, auth=admin_auth)
    assert response.status_code == 409
    assert client.get(f"/api/products/{other['id']}").json()["slug"] == "iris-perfumes"


def test_delete(client, admin_auth, create, perfumes):
    product = create(perfumes)
    assert client.delete(f"/api/products/admin/{product['id']}", auth=admin_auth).json() == {"message": "Product deleted"}
    assert client.get(f"/api/products/{product['id']}").status_code == 404
    assert client.delete(f"/api/products/admin/{product['id']}", auth=admin_auth).status_code == 404


def test_upload_image(client, admin_auth):
    response = client.post(
        "/api/products/upload",
        files={"file": ("bottle.png", b"\x89PNG\r\n\x1a\n", "image/png")},
        auth=admin_auth,
    )
    assert response.status_code == 200
    url = response.json()["url"]
    assert url.startswith("/media/products/") and url.endswith(".png")
    assert client.get(url).content == b"\x89PNG\r\n\x1a\n"


def test_upload_rejects_non_images(client, admin_auth):
    response = client.post(
        "/api/products/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        auth=admin_auth,
    )
    assert response.status_code == 400
