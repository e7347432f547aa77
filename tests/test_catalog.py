class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json == {"status": "ok"}


class TestCategories:
    """Categories and manufacturers are simple named lookups."""

    def test_list_sorted_by_name(self, client):
        names = [c["name"] for c in client.get("/api/categories").json]

        assert names == sorted(names)
        assert "Sarees" in names

    def test_create(self, client):
        response = client.post("/api/categories", json={"name": "  Kurtis "})

        assert response.status_code == 201
        assert response.json["name"] == "Kurtis"
        assert "Kurtis" in [c["name"] for c in client.get("/api/categories").json]

    def test_create_requires_name(self, client):
        response = client.post("/api/categories", json={"name": ""})

        assert response.status_code == 400
        assert "name" in response.json["errors"]

    def test_duplicate_is_conflict(self, client):
        response = client.post("/api/categories", json={"name": "sarees"})

        assert response.status_code == 409
        assert response.json["error"] == "Category already exists"

    def test_wildcard_characters_are_literal(self, client):
        for name in ("Shirt_", "S%"):
            response = client.post("/api/categories", json={"name": name})

            assert response.status_code == 201
            assert response.json["name"] == name

        response = client.post("/api/manufacturers", json={"name": "XYZ_Clothing"})
        assert response.status_code == 201

    def test_manufacturer_create_and_duplicate(self, client):
        first = client.post("/api/manufacturers", json={"name": "Mohan Mills"})
        second = client.post("/api/manufacturers", json={"name": "Mohan Mills"})

        assert first.status_code == 201
        assert second.status_code == 409
        names = [m["name"] for m in client.get("/api/manufacturers").json]
        assert names.count("Mohan Mills") == 1


class TestProducts:
    def _payload(self, products, **overrides):
        sarees = products["12345678"]
        payload = {
            "barcode": "55554444",
            "category_id": sarees["category_id"],
            "manufacturer_id": sarees["manufacturer_id"],
            "quantity": 10,
            "cost_price": 250,
            "sale_price": 499.5,
        }
        payload.update(overrides)
        return payload

    def test_list_includes_lookup_names(self, client):
        products = client.get("/api/products").json

        assert len(products) == 4
        saree = next(p for p in products if p["barcode"] == "12345678")
        assert saree["category"] == "Sarees"
        assert saree["manufacturer"] == "XYZ Clothing"
        assert saree["sale_price"] == 2000.0

    def test_by_barcode(self, client):
        response = client.get("/api/products/10101010")

        assert response.status_code == 200
        assert response.json["category"] == "Shirts"
        assert response.json["quantity"] == 24

    def test_unknown_barcode(self, client):
        response = client.get("/api/products/99999999")

        assert response.status_code == 404
        assert response.json["error"] == "Product not found"

    def test_create(self, client, products):
        response = client.post("/api/products", json=self._payload(products))

        assert response.status_code == 201
        assert response.json["barcode"] == "55554444"
        assert response.json["sale_price"] == 499.5
        assert client.get("/api/products/55554444").status_code == 200

    def test_create_numeric_barcode(self, client, products):
        response = client.post("/api/products", json=self._payload(products, barcode=55554444))

        assert response.status_code == 201
        assert response.json["barcode"] == "55554444"

    def test_barcode_must_have_eight_digits(self, client, products):
        response = client.post("/api/products", json=self._payload(products, barcode="1234"))

        assert response.status_code == 400
        assert "8 digits" in response.json["error"]

    def test_missing_field(self, client, products):
        payload = self._payload(products)
        del payload["sale_price"]

        response = client.post("/api/products", json=payload)

        assert response.status_code == 400
        assert "sale_price" in response.json["errors"]

    def test_duplicate_barcode(self, client, products):
        response = client.post("/api/products", json=self._payload(products, barcode="12345678"))

        assert response.status_code == 409

    def test_unknown_category(self, client, products):
        response = client.post("/api/products", json=self._payload(products, category_id=999))

        assert response.status_code == 400
        assert response.json["error"] == "Unknown category"

    def test_patch_quantity(self, client, products, stock):
        product_id = products["87654321"]["id"]

        response = client.patch(f"/api/products/{product_id}/quantity", json={"quantity": 0})

        assert response.status_code == 200
        assert response.json["quantity"] == 0
        assert stock("87654321") == 0

    def test_patch_quantity_requires_value(self, client, products):
        product_id = products["87654321"]["id"]

        response = client.patch(f"/api/products/{product_id}/quantity", json={})

        assert response.status_code == 400

    def test_patch_quantity_out_of_range(self, client, products, stock):
        product_id = products["87654321"]["id"]

        response = client.patch(f"/api/products/{product_id}/quantity", json={"quantity": 10 ** 20})

        assert response.status_code == 400
        assert stock("87654321") == 20

    def test_patch_unknown_product(self, client):
        response = client.patch("/api/products/999/quantity", json={"quantity": 3})

        assert response.status_code == 404


class TestErrors:
    def test_unknown_route_is_json(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert "error" in response.json

    def test_unexpected_error_is_generic_500(self, client, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr("kala.routes.filter_sales", boom)

        response = client.get("/api/sales")

        assert response.status_code == 500
        assert response.json == {"error": "Internal server error"}
