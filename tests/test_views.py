"""Component tests for the server-rendered views."""
import uuid

from fastapi.testclient import TestClient


def test_products_view_pages_by_five(test_client: TestClient, create_product):
    for i in range(6):
        create_product(title=f"Camiseta {i}", code=f"C{i}")

    first = test_client.get("/products")
    second = test_client.get("/products", params={"page": 2})

    assert first.status_code == 200
    assert "text/html" in first.headers["content-type"]
    assert "Camiseta 4" in first.text
    assert "Camiseta 5" not in first.text
    assert "Página 1 de 2" in first.text
    assert "Camiseta 5" in second.text
    assert "/products?page=1" in second.text


def test_cart_view_lists_lines(test_client: TestClient, create_cart, create_product):
    cart_id = create_cart()
    kept = create_product(title="Camiseta titular")
    gone = create_product(title="Camiseta descontinuada", code="OLD")
    test_client.post(f"/api/carts/{cart_id}/products/{kept}")
    test_client.post(f"/api/carts/{cart_id}/products/{gone}")
    test_client.delete(f"/api/products/{gone}")

    response = test_client.get(f"/carts/{cart_id}")

    assert response.status_code == 200
    assert "Camiseta titular" in response.text
    assert "x 1" in response.text
    assert "Camiseta descontinuada" not in response.text


def test_cart_view_errors(test_client: TestClient):
    assert test_client.get("/carts/nope").json() == {"error": "Invalid object id"}
    assert test_client.get(f"/carts/{uuid.uuid4()}").status_code == 404


def test_realtime_view_renders_form_and_products(test_client: TestClient, create_product):
    product_id = create_product(title="Camiseta alternativa")

    response = test_client.get("/realtimeproducts")

    assert response.status_code == 200
    assert "Camiseta alternativa" in response.text
    assert f'data-product-id="{product_id}"' in response.text
    assert '<form action="/realtimeproducts" method="post">' in response.text
    assert "/static/js/main.js" in response.text


def test_realtime_form_creates_active_product(test_client: TestClient, publisher):
    response = test_client.post(
        "/realtimeproducts",
        data={
            "title": "Camiseta de arquero",
            "description": "Manga larga",
            "code": "GK-1",
            "price": "1500.50",
            "stock": "4",
            "category": "Camisetas de portero",
        },
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"].endswith("/realtimeproducts")

    [product] = test_client.get("/api/products", params={"category": "goalkeeper"}).json()["payload"]
    assert product["price"] == 1500
    assert product["stock"] == 4
    assert product["status"] is True
    assert [event for event, _ in publisher.events] == ["productsChange"]


def test_realtime_form_rejects_bad_price(test_client: TestClient, publisher):
    response = test_client.post(
        "/realtimeproducts",
        data={
            "title": "Camiseta",
            "description": "d",
            "code": "X",
            "price": "gratis",
            "stock": "4",
            "category": "Camisetas locales",
        },
        follow_redirects=False,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid product price"}
    assert publisher.events == []


def test_static_client_script(test_client: TestClient):
    response = test_client.get("/static/js/main.js")

    assert response.status_code == 200
    assert "productsChange" in response.text
