from decimal import Decimal

from kala.models import Sale


class TestReceipt:
    """GET /sales/<id>/receipt"""

    def _sale(self, client, make_item, sale_type):
        payload = {
            "type": sale_type,
            "customer_name": "Sunita",
            "mobile": "9999988888",
            "items": [make_item("12345678", 1), make_item("10101010", 2)],
            "total_discount": 100,
        }
        return client.post("/api/sales", json=payload).json

    def test_bill_receipt(self, client, make_item):
        created = self._sale(client, make_item, "bill")

        response = client.get(f"/sales/{created['id']}/receipt")

        html = response.get_data(as_text=True)
        assert response.status_code == 200
        assert ">BILL<" in html
        assert created["number"] in html
        assert "Sunita" in html
        assert "KALAN VASTRALYA" in html
        assert "GSTIN: 06AEBPY4971P1ZN" in html
        assert "SGST @ 2.5%" in html
        assert "CGST @ 2.5%" in html
        assert "2500.00" in html
        assert "Goods once sold will not be taken back." in html

    def test_estimate_has_no_tax_rows(self, client, make_item):
        created = self._sale(client, make_item, "estimate")

        html = client.get(f"/sales/{created['id']}/receipt").get_data(as_text=True)

        assert ">ESTIMATE<" in html
        assert "Estimate No.:" in html
        assert "SGST" not in html

    def test_unknown_sale(self, client):
        response = client.get("/sales/55/receipt")

        assert response.status_code == 404


class TestGstBreakdown:
    def test_tax_is_included_in_final_amount(self):
        sale = Sale(final_amount=Decimal("1050.00"))

        gst = sale.gst_breakdown("0.05")

        assert gst["taxable"] == Decimal("1000.00")
        assert gst["sgst"] == Decimal("25.00")
        assert gst["cgst"] == Decimal("25.00")
        assert gst["sgst_rate"] == Decimal("2.5")
