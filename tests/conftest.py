import pytest

from kala import create_app, db
from kala.models import Product, Sale
from kala.seed import seed_database


@pytest.fixture
def app(tmp_path):
    """App bound to a fresh in-memory database with the starter catalog."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
    })

    with app.app_context():
        seed_database()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def products(app):
    """Seeded products keyed by barcode, as plain dicts."""
    with app.app_context():
        return {p.barcode: p.to_dict() for p in Product.query.all()}


@pytest.fixture
def stock(app):
    """Read a product's current quantity through a fresh session."""
    def _stock(barcode):
        with app.app_context():
            return Product.query.filter_by(barcode=barcode).one().quantity
    return _stock


@pytest.fixture
def set_sale_date(app):
    def _set(sale_id, when):
        with app.app_context():
            sale = db.session.get(Sale, sale_id)
            sale.date = when
            db.session.commit()
    return _set


@pytest.fixture
def make_item(products):
    def _item(barcode, quantity, price=None):
        product = products[barcode]
        sale_price = product["sale_price"] if price is None else price
        return {
            "product_id": product["id"],
            "category_name": product["category"],
            "sale_price": sale_price,
            "quantity": quantity,
            "item_final_price": sale_price * quantity,
        }
    return _item
