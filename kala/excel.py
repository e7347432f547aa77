import logging
import re
from decimal import Decimal, InvalidOperation
from io import BytesIO

from openpyxl import Workbook, load_workbook

from kala import db
from kala.errors import AppException, ErrorType
from kala.models import Product, MAX_QUANTITY, money
from kala.services import get_or_create_category, get_or_create_manufacturer

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

PRODUCT_COLUMNS = ["barcode", "category", "manufacturer", "quantity", "cost_price", "sale_price"]
SALE_COLUMNS = [
    "id", "type", "number", "customer_name", "mobile", "payment_mode",
    "date", "total_amount", "total_discount", "final_amount", "items",
]

BARCODE_RE = re.compile(r"^\d{8}$")


class RowError(ValueError):
    pass


def _cell_text(value):
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _cell_int(value, column):
    try:
        number = Decimal(_cell_text(value))
    except InvalidOperation:
        raise RowError(f"{column} must be a whole number")
    if not number.is_finite() or number != number.to_integral_value():
        raise RowError(f"{column} must be a whole number")
    if number < 0:
        raise RowError(f"{column} must not be negative")
    if number > MAX_QUANTITY:
        raise RowError(f"{column} is too large")
    return int(number)


def _cell_money(value, column):
    try:
        number = Decimal(_cell_text(value))
    except InvalidOperation:
        raise RowError(f"{column} must be a number")
    if not number.is_finite():
        raise RowError(f"{column} must be a number")
    if number < 0:
        raise RowError(f"{column} must not be negative")
    return number.quantize(Decimal("0.01"))


def parse_product_row(row):
    barcode = _cell_text(row.get("barcode"))
    if not BARCODE_RE.match(barcode):
        raise RowError("barcode must be exactly 8 digits")

    category = _cell_text(row.get("category"))
    if not category:
        raise RowError("category is required")
    manufacturer = _cell_text(row.get("manufacturer"))
    if not manufacturer:
        raise RowError("manufacturer is required")

    return {
        "barcode": barcode,
        "category": category,
        "manufacturer": manufacturer,
        "quantity": _cell_int(row.get("quantity"), "quantity"),
        "cost_price": _cell_money(row.get("cost_price"), "cost_price"),
        "sale_price": _cell_money(row.get("sale_price"), "sale_price"),
    }


def read_rows(path):
    """First sheet as a list of dicts keyed by the header row; blank rows skipped."""
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return [], []
        columns = [_cell_text(h) for h in header]

        data = []
        for values in rows:
            if all(v is None or _cell_text(v) == "" for v in values):
                continue
            data.append(dict(zip(columns, values)))
        return columns, data
    finally:
        wb.close()


def import_products(path):
    columns, data = read_rows(path)
    if not data:
        raise AppException(ErrorType.VALIDATION, "Excel file is empty")

    missing = [c for c in PRODUCT_COLUMNS if c not in columns]
    if missing:
        raise AppException(ErrorType.VALIDATION, f"Missing required columns: {', '.join(missing)}")

    imported = 0
    errors = []

    try:
        for index, row in enumerate(data, start=1):
            try:
                values = parse_product_row(row)
            except RowError as e:
                errors.append({"row": index, "error": str(e)})
                continue

            category = get_or_create_category(values["category"])
            manufacturer = get_or_create_manufacturer(values["manufacturer"])

            product = Product.query.filter_by(barcode=values["barcode"]).first()
            if product is None:
                product = Product(barcode=values["barcode"])
                db.session.add(product)

            product.category = category
            product.manufacturer = manufacturer
            product.quantity = values["quantity"]
            product.cost_price = values["cost_price"]
            product.sale_price = values["sale_price"]
            imported += 1

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Imported %d of %d product row(s), %d error(s)", imported, len(data), len(errors))
    return {
        "message": f"Successfully imported {imported} products",
        "total": len(data),
        "imported": imported,
        "errors": errors,
    }


def _workbook_bytes(title, columns, rows):
    wb = Workbook()
    ws = wb.active
    ws.title = title
    ws.append(columns)
    for row in rows:
        ws.append(row)

    buf = BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf


def export_products(products):
    rows = [
        [
            p.barcode,
            p.category.name,
            p.manufacturer.name,
            p.quantity,
            money(p.cost_price),
            money(p.sale_price),
        ]
        for p in products
    ]
    return _workbook_bytes("Products", PRODUCT_COLUMNS, rows)


def export_sales(sales):
    rows = [
        [
            s.id,
            s.type,
            s.number,
            s.customer_name,
            s.mobile,
            s.payment_mode,
            s.date_display,
            money(s.total_amount),
            money(s.total_discount),
            money(s.final_amount),
            len(s.items),
        ]
        for s in sales
    ]
    return _workbook_bytes("Sales", SALE_COLUMNS, rows)
