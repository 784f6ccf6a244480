def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_default_categories_are_seeded(client):
    res = client.get("/api/categories")
    assert res.status_code == 200
    ids = {c["id"] for c in res.json()}
    assert ids == {"cleansers", "moisturizers", "serums", "sunscreens", "masks", "lipbody"}
    serums = next(c for c in res.json() if c["id"] == "serums")
    assert serums["name"] == "Serums & Treatments"


def test_about_page(client):
    body = client.get("/api/about").json()
    assert body["storeName"] == "Nainzaka Aesthetics"
    assert len(body["highlights"]) == 4
    assert body["contactDetails"]["email"] == "info@nainzaka.com"


def test_listing_filters_by_category_id_and_name(client, add_product):
    add_product(name="Glow Serum", category="Serums & Treatments")
    add_product(name="Retinol Night Serum", category="serums")
    add_product(name="Gentle Foam", category="Cleansers")

    res = client.get("/api/products", params={"category": "serums"})
    assert res.status_code == 200
    assert [p["name"] for p in res.json()] == ["Glow Serum", "Retinol Night Serum"]

    assert len(client.get("/api/products", params={"category": "all"}).json()) == 3


def test_listing_search_price_window_and_sort(client, add_product):
    add_product(name="Glow Serum", price="1500", salePrice="1200")
    add_product(name="Clay Mask", price="900", category="Face Masks", description="A serum-infused mask")
    add_product(name="Lip Oil", price="3000", category="Lip & Body Care")

    res = client.get("/api/products", params={"search": "SERUM", "sort": "price-high"})
    assert [p["name"] for p in res.json()] == ["Glow Serum", "Clay Mask"]

    res = client.get("/api/products", params={"min_price": 1000, "max_price": 1200})
    assert [p["name"] for p in res.json()] == ["Glow Serum"]


def test_listing_rejects_unknown_sort(client):
    res = client.get("/api/products", params={"sort": "cheapest"})
    assert res.status_code == 400


def test_detail_counts_views_and_builds_gallery(client, add_product, admin_headers):
    png = ("a.png", b"0" * 32, "image/png")
    product = add_product(name="Glow Serum", price="1500", salePrice="1200", images=[png, png])
    add_product(name="Vitamin C Serum", category="serums")
    add_product(name="Foam", category="Cleansers")

    first = client.get(f"/api/products/{product['id']}")
    assert first.status_code == 200
    body = first.json()
    assert body["product"]["views"] == 0
    assert body["images"] == [product["imageUrl"], *product["additionalImages"]]
    assert len(body["images"]) == 2
    assert body["effectivePrice"] == 1200
    assert body["discountPercent"] == 20
    assert [p["name"] for p in body["recommended"]] == ["Vitamin C Serum"]

    client.get(f"/api/products/{product['id']}")
    stored = client.get(f"/api/admin/products/{product['id']}", headers=admin_headers).json()
    assert stored["views"] == 2
    assert stored["clicks"] == 0


def test_detail_unknown_product(client):
    assert client.get("/api/products/does-not-exist").status_code == 404


def test_home_featured_and_recent(client, add_product):
    for i in range(10):
        add_product(name=f"Featured {i}", featured=True)
    add_product(name="Newest", featured=False)

    body = client.get("/api/home").json()
    assert len(body["featured"]) == 8
    assert all(p["featured"] for p in body["featured"])
    assert [p["name"] for p in body["recent"]] == ["Newest", "Featured 9", "Featured 8"]


def test_unknown_category_id_does_not_filter(client, add_product):
    add_product(name="Glow Serum", category="serums")
    add_product(name="Gentle Foam", category="Cleansers")

    res = client.get("/api/products", params={"category": "toners"})
    assert [p["name"] for p in res.json()] == ["Gentle Foam", "Glow Serum"]
