"""Sale lifecycle: numbering, stock deduction on create, reconciliation on edit,
restoration on delete. Every public function commits or rolls back as a unit."""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal, InvalidOperation
from zoneinfo import ZoneInfo

from flask import current_app

from kala import db
from kala.errors import AppException, ErrorType
from kala.models import (
    Category, Manufacturer, Product, Sale, SaleItem, SaleCounter,
    SALE_TYPES, PAYMENT_MODES, NUMBER_PREFIXES, WALK_IN_CUSTOMER, MAX_QUANTITY,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def local_now():
    tz = ZoneInfo(current_app.config["TIMEZONE"])
    return datetime.now(tz).replace(tzinfo=None, microsecond=0)


def _invalid(message):
    return AppException(ErrorType.VALIDATION, message)


def _to_decimal(raw, label, default=None):
    if raw is None or raw == "":
        if default is None:
            raise _invalid(f"{label} is required")
        return default
    if isinstance(raw, bool):
        raise _invalid(f"{label} must be a number")
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise _invalid(f"{label} must be a number")
    if not value.is_finite():
        raise _invalid(f"{label} must be a number")
    if value < 0:
        raise _invalid(f"{label} must not be negative")
    return value.quantize(CENT)


def _to_quantity(raw, label):
    if isinstance(raw, bool):
        raise _invalid(f"{label} must be a whole number")
    try:
        qty = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise _invalid(f"{label} must be a whole number")
    if not qty.is_finite() or qty != qty.to_integral_value():
        raise _invalid(f"{label} must be a whole number")
    if qty <= 0:
        raise _invalid(f"{label} must be greater than 0")
    if qty > MAX_QUANTITY:
        raise _invalid(f"{label} is too large")
    return int(qty)


def _optional_text(payload, key):
    value = payload.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


# -----------------------
# Payload parsing
# -----------------------
def parse_items(raw_items):
    if not isinstance(raw_items, list) or not raw_items:
        raise _invalid("Items are required")

    parsed = []
    for idx, raw in enumerate(raw_items, start=1):
        if not isinstance(raw, dict):
            raise _invalid(f"Item {idx}: must be an object")

        product_id = raw.get("product_id")
        if isinstance(product_id, bool) or not str(product_id or "").isdigit():
            raise _invalid(f"Item {idx}: product_id is required")

        quantity = _to_quantity(raw.get("quantity"), f"Item {idx}: quantity")
        sale_price = _to_decimal(raw.get("sale_price"), f"Item {idx}: sale_price")
        item_final_price = _to_decimal(
            raw.get("item_final_price"),
            f"Item {idx}: item_final_price",
            default=(sale_price * quantity).quantize(CENT)
        )

        parsed.append({
            "product_id": int(product_id),
            "quantity": quantity,
            "sale_price": sale_price,
            "item_final_price": item_final_price,
            "category_name": _optional_text(raw, "category_name"),
        })
    return parsed


def parse_totals(payload, items):
    total_amount = _to_decimal(
        payload.get("total_amount"),
        "total_amount",
        default=sum((i["item_final_price"] for i in items), Decimal("0.00"))
    )
    total_discount = _to_decimal(payload.get("total_discount"), "total_discount", default=Decimal("0.00"))
    if total_discount > total_amount:
        raise _invalid("total_discount must not exceed total_amount")

    expected = total_amount - total_discount
    final_amount = _to_decimal(payload.get("final_amount"), "final_amount", default=expected)
    if abs(final_amount - expected) > CENT:
        raise _invalid("final_amount must equal total_amount - total_discount")

    return total_amount, total_discount, expected


def parse_customer(payload):
    payment_mode = _optional_text(payload, "payment_mode")
    if payment_mode is not None:
        payment_mode = payment_mode.lower()
        if payment_mode not in PAYMENT_MODES:
            raise _invalid("payment_mode must be one of: " + ", ".join(PAYMENT_MODES))
    return {
        "customer_name": _optional_text(payload, "customer_name") or WALK_IN_CUSTOMER,
        "mobile": _optional_text(payload, "mobile"),
        "payment_mode": payment_mode,
        "remarks": _optional_text(payload, "remarks"),
    }


# -----------------------
# Stock helpers
# -----------------------
def _load_products(items):
    ids = {i["product_id"] for i in items}
    products = {p.id: p for p in Product.query.filter(Product.id.in_(ids)).all()}
    missing = sorted(ids - set(products))
    if missing:
        raise _invalid(f"Unknown product id: {missing[0]}")
    return products


def _add_items(sale, items, products, changes):
    for line in items:
        product = products[line["product_id"]]
        sale.items.append(SaleItem(
            product=product,
            category_name=line["category_name"] or product.category.name,
            sale_price=line["sale_price"],
            quantity=line["quantity"],
            item_final_price=line["item_final_price"],
        ))
        changes[product] -= line["quantity"]


def _restore_items(sale, changes):
    for item in sale.items:
        changes[item.product] += item.quantity


def _apply_stock(changes):
    """Write {product: delta} as UPDATE ... SET quantity = quantity + delta.

    The loaded quantity may be stale; the arithmetic runs in the database.
    """
    for product, delta in changes.items():
        if delta:
            product.quantity = Product.quantity + delta
    db.session.flush()


def next_sale_number(sale_type):
    counter = SaleCounter.query.filter_by(type=sale_type).first()
    if counter is None:
        counter = SaleCounter(type=sale_type, last_value=0)
        db.session.add(counter)
        db.session.flush()

    # the UPDATE takes the write lock before the new value is read back
    counter.last_value = SaleCounter.last_value + 1
    db.session.flush()
    db.session.refresh(counter)
    return f"{NUMBER_PREFIXES[sale_type]}-{counter.last_value:04d}"


# -----------------------
# Lifecycle
# -----------------------
def get_sale(sale_id):
    sale = db.session.get(Sale, sale_id)
    if sale is None:
        raise AppException(ErrorType.NOT_FOUND, "Sale not found")
    return sale


def create_sale(payload):
    raw_type = payload.get("type")
    sale_type = raw_type.strip().lower() if isinstance(raw_type, str) else ""
    if not sale_type:
        raise _invalid("Type and items are required")
    if sale_type not in SALE_TYPES:
        raise _invalid("type must be one of: " + ", ".join(SALE_TYPES))

    items = parse_items(payload.get("items"))
    total_amount, total_discount, final_amount = parse_totals(payload, items)
    customer = parse_customer(payload)

    try:
        products = _load_products(items)
        sale = Sale(
            type=sale_type,
            number=next_sale_number(sale_type),
            date=local_now(),
            total_amount=total_amount,
            total_discount=total_discount,
            final_amount=final_amount,
            **customer
        )
        db.session.add(sale)
        changes = defaultdict(int)
        _add_items(sale, items, products, changes)
        _apply_stock(changes)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Created %s %s with %d item(s), final %s", sale.type, sale.number, len(items), final_amount)
    return sale


def update_sale(sale_id, payload):
    items = parse_items(payload.get("items"))
    total_amount, total_discount, final_amount = parse_totals(payload, items)

    try:
        sale = get_sale(sale_id)
        products = _load_products(items)

        # put back what the old lines took, then apply the new lines
        changes = defaultdict(int)
        _restore_items(sale, changes)
        sale.items.clear()
        db.session.flush()
        _add_items(sale, items, products, changes)
        _apply_stock(changes)

        sale.total_amount = total_amount
        sale.total_discount = total_discount
        sale.final_amount = final_amount

        for key, value in parse_customer(payload).items():
            if key in payload:
                setattr(sale, key, value)

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Updated %s with %d item(s), final %s", sale.number, len(items), final_amount)
    return sale


def delete_sale(sale_id):
    try:
        sale = get_sale(sale_id)
        number = sale.number
        changes = defaultdict(int)
        _restore_items(sale, changes)
        _apply_stock(changes)
        db.session.delete(sale)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Deleted %s, stock restored", number)
    return number


def set_product_quantity(product_id, quantity):
    product = db.session.get(Product, product_id)
    if product is None:
        raise AppException(ErrorType.NOT_FOUND, "Product not found")
    product.quantity = quantity
    db.session.commit()
    return product


# -----------------------
# Queries
# -----------------------
def filter_sales(day=None, start_date=None, end_date=None, sale_type=None, search=None):
    query = Sale.query

    # a search looks across every day
    if search:
        pattern = f"%{search}%"
        query = query.filter(db.or_(Sale.customer_name.ilike(pattern), Sale.mobile.ilike(pattern)))
    elif day:
        query = query.filter(db.func.date(Sale.date) == day.isoformat())
    elif start_date and end_date:
        query = query.filter(
            db.func.date(Sale.date) >= start_date.isoformat(),
            db.func.date(Sale.date) <= end_date.isoformat()
        )

    if sale_type:
        query = query.filter(Sale.type == sale_type)

    return query.order_by(Sale.date.desc(), Sale.id.desc())


def get_or_create_category(name):
    category = Category.query.filter_by(name=name).first()
    if category is None:
        category = Category(name=name)
        db.session.add(category)
        db.session.flush()
    return category


def get_or_create_manufacturer(name):
    manufacturer = Manufacturer.query.filter_by(name=name).first()
    if manufacturer is None:
        manufacturer = Manufacturer(name=name)
        db.session.add(manufacturer)
        db.session.flush()
    return manufacturer
