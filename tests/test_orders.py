from conftest import make_product
from nainzaka.orders import build_whatsapp_link, order_message


def test_order_message_uses_effective_price_with_separators():
    product = make_product(name="Glow Serum", price=1500, salePrice=1250)
    assert order_message(product) == "Hi Nainzaka Aesthetics! I'm interested in Glow Serum (₨1,250)"


def test_link_encodes_like_a_browser():
    url = build_whatsapp_link("923404430083", "Hi there! I'm in (Lahore), 100% sure & ready")
    assert url == (
        "https://wa.me/923404430083?text="
        "Hi%20there!%20I'm%20in%20(Lahore)%2C%20100%25%20sure%20%26%20ready"
    )


def test_order_counts_clicks_and_returns_link(client, add_product, admin_headers):
    product = add_product(name="Glow Serum", price="1500")

    res = client.post(f"/api/products/{product['id']}/order")
    assert res.status_code == 200
    body = res.json()
    assert body["productId"] == product["id"]
    assert body["message"] == "Hi Nainzaka Aesthetics! I'm interested in Glow Serum (₨1,500)"
    assert body["url"] == (
        "https://wa.me/923404430083?text="
        "Hi%20Nainzaka%20Aesthetics!%20I'm%20interested%20in%20Glow%20Serum%20(%E2%82%A81%2C500)"
    )

    client.post(f"/api/products/{product['id']}/order")
    stored = client.get(f"/api/admin/products/{product['id']}", headers=admin_headers).json()
    assert stored["clicks"] == 2
    assert stored["views"] == 0


def test_order_unknown_product(client):
    assert client.post("/api/products/nope/order").status_code == 404
