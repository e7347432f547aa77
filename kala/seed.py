from decimal import Decimal

import click
from flask.cli import with_appcontext

from kala import db
from kala.models import Category, Manufacturer, Product


CATEGORIES = ["Sarees", "Shirts", "Pants", "Coord Set"]
MANUFACTURERS = ["XYZ Clothing", "ABC Manufacturer", "JKL Textiles", "Geeta tailers"]

# barcode, category, manufacturer, quantity, cost, sale
PRODUCTS_DATA = [
    ("12345678", "Sarees", "XYZ Clothing", 31, Decimal("1000.00"), Decimal("2000.00")),
    ("87654321", "Coord Set", "ABC Manufacturer", 20, Decimal("3500.00"), Decimal("5000.00")),
    ("10101010", "Shirts", "JKL Textiles", 24, Decimal("150.00"), Decimal("300.00")),
    ("10000000", "Pants", "Geeta tailers", 32, Decimal("500.00"), Decimal("860.00")),
]


def seed_database():
    """Insert the starter catalog. Returns False when products already exist."""
    db.create_all()

    if Product.query.first() is not None:
        return False

    categories = {}
    for name in CATEGORIES:
        categories[name] = Category.query.filter_by(name=name).first() or Category(name=name)
        db.session.add(categories[name])

    manufacturers = {}
    for name in MANUFACTURERS:
        manufacturers[name] = Manufacturer.query.filter_by(name=name).first() or Manufacturer(name=name)
        db.session.add(manufacturers[name])

    for barcode, category, manufacturer, qty, cost, price in PRODUCTS_DATA:
        db.session.add(Product(
            barcode=barcode,
            category=categories[category],
            manufacturer=manufacturers[manufacturer],
            quantity=qty,
            cost_price=cost,
            sale_price=price,
        ))

    db.session.commit()
    return True


@click.command("seed")
@with_appcontext
def seed_command():
    """Create tables and load the starter catalog."""
    if seed_database():
        click.echo(f"Seeded {len(PRODUCTS_DATA)} products")
    else:
        click.echo("Database already seeded")
