from decimal import Decimal

from kala import db

SALE_TYPES = ("bill", "estimate")
PAYMENT_MODES = ("cash", "upi")
NUMBER_PREFIXES = {"bill": "BILL", "estimate": "EST"}
WALK_IN_CUSTOMER = "Walk In Customer"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# SQLite INTEGER is a signed 64-bit value
MAX_QUANTITY = 2 ** 63 - 1


def money(value):
    if value is None:
        return None
    return float(Decimal(str(value)).quantize(Decimal("0.01")))


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, unique=True)

    def to_dict(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self):
        return f"<Category {self.name}>"


class Manufacturer(db.Model):
    __tablename__ = 'manufacturers'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, unique=True)

    def to_dict(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self):
        return f"<Manufacturer {self.name}>"


class Product(db.Model):
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    barcode = db.Column(db.String(8), nullable=False, unique=True, index=True)

    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False, index=True)
    category = db.relationship('Category', backref=db.backref('products', lazy=True))

    manufacturer_id = db.Column(db.Integer, db.ForeignKey('manufacturers.id'), nullable=False, index=True)
    manufacturer = db.relationship('Manufacturer', backref=db.backref('products', lazy=True))

    # not checked against sales, may drop below zero
    quantity = db.Column(db.Integer, nullable=False, default=0)
    cost_price = db.Column(db.Numeric(10, 2), nullable=False)
    sale_price = db.Column(db.Numeric(10, 2), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "barcode": self.barcode,
            "quantity": self.quantity,
            "cost_price": money(self.cost_price),
            "sale_price": money(self.sale_price),
            "category": self.category.name,
            "manufacturer": self.manufacturer.name,
            "category_id": self.category_id,
            "manufacturer_id": self.manufacturer_id,
        }

    def __repr__(self):
        return f"<Product {self.barcode} qty={self.quantity}>"


class SaleCounter(db.Model):
    """Last number issued per sale type; survives sale deletion."""
    __tablename__ = "sale_counters"

    type = db.Column(db.String(16), primary_key=True)
    last_value = db.Column(db.Integer, nullable=False, default=0)


class Sale(db.Model):
    __tablename__ = "sales"

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(16), nullable=False, index=True)
    number = db.Column(db.String(32), nullable=False, unique=True)

    customer_name = db.Column(db.String(120), nullable=False, default=WALK_IN_CUSTOMER)
    mobile = db.Column(db.String(20), nullable=True)
    payment_mode = db.Column(db.String(16), nullable=True)
    remarks = db.Column(db.Text, nullable=True)

    # local wall-clock time in the configured store timezone
    date = db.Column(db.DateTime, nullable=False, index=True)

    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    total_discount = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    final_amount = db.Column(db.Numeric(10, 2), nullable=False)

    items = db.relationship(
        "SaleItem",
        backref="sale",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="SaleItem.id"
    )

    @property
    def date_display(self):
        return self.date.strftime(DATE_FORMAT)

    def gst_breakdown(self, rate):
        """Split the tax already included in final_amount into SGST and CGST halves."""
        rate = Decimal(str(rate))
        final = Decimal(str(self.final_amount))
        taxable = (final / (Decimal("1") + rate)).quantize(Decimal("0.01"))
        half = (taxable * rate / 2).quantize(Decimal("0.01"))
        return {
            "taxable": taxable,
            "sgst_rate": rate * 100 / 2,
            "cgst_rate": rate * 100 / 2,
            "sgst": half,
            "cgst": half,
        }

    def to_dict(self, with_items=False):
        data = {
            "id": self.id,
            "type": self.type,
            "number": self.number,
            "customer_name": self.customer_name,
            "mobile": self.mobile,
            "payment_mode": self.payment_mode,
            "remarks": self.remarks,
            "date": self.date_display,
            "total_amount": money(self.total_amount),
            "total_discount": money(self.total_discount),
            "final_amount": money(self.final_amount),
        }
        if with_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data

    def __repr__(self):
        return f"<Sale {self.number}>"


class SaleItem(db.Model):
    __tablename__ = "sale_items"

    id = db.Column(db.Integer, primary_key=True)

    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    product = db.relationship("Product", backref=db.backref("sale_items", lazy=True))

    category_name = db.Column(db.String(128), nullable=False)
    sale_price = db.Column(db.Numeric(10, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    item_final_price = db.Column(db.Numeric(10, 2), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "barcode": self.product.barcode if self.product else None,
            "category_name": self.category_name,
            "sale_price": money(self.sale_price),
            "quantity": self.quantity,
            "item_final_price": money(self.item_final_price),
        }

    def __repr__(self):
        return f"<SaleItem {self.id} sale={self.sale_id} product={self.product_id} qty={self.quantity}>"
