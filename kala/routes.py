import logging
from decimal import Decimal

from flask import (
    Blueprint, render_template, request, jsonify, send_file, current_app
)

from kala import db
from kala.errors import AppException, ErrorType, form_error
from kala.excel import XLSX_MIMETYPE, import_products, export_products, export_sales
from kala.forms import (
    CategoryForm, ManufacturerForm, ProductForm, QuantityForm,
    SalesFilterForm, ImportProductsForm
)
from kala.models import Category, Manufacturer, Product
from kala.services import (
    create_sale, update_sale, delete_sale, get_sale,
    filter_sales, set_product_quantity
)
from kala.uploads import save_import_file, discard_upload

logger = logging.getLogger(__name__)


# -----------------------
# Blueprints
# -----------------------
api_bp = Blueprint("api", __name__, url_prefix="/api")
main_bp = Blueprint("main", __name__)


# -----------------------
# Helpers
# -----------------------
def _json_payload():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise AppException(ErrorType.VALIDATION, "Request body must be a JSON object")
    return payload


def _validated(form):
    if not form.validate_on_submit():
        raise form_error(form)
    return form


def _sales_from_args():
    form = SalesFilterForm(request.args)
    if not form.validate():
        raise form_error(form)
    return filter_sales(
        day=form.day.data,
        start_date=form.start_date.data,
        end_date=form.end_date.data,
        sale_type=form.sale_type.data or None,
        search=form.search.data or None,
    )


def _products_query():
    return (
        Product.query
        .join(Category)
        .join(Manufacturer)
        .order_by(Product.id.asc())
    )


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok"})


# ---- Categories ----
@api_bp.route("/categories", methods=["GET"])
def list_categories():
    categories = Category.query.order_by(Category.name.asc()).all()
    return jsonify([c.to_dict() for c in categories])


@api_bp.route("/categories", methods=["POST"])
def category_create():
    form = _validated(CategoryForm())
    name = form.name.data

    exists = Category.query.filter(db.func.lower(Category.name) == name.lower()).first()
    if exists:
        raise AppException(ErrorType.CONFLICT, "Category already exists")

    c = Category(name=name)
    db.session.add(c)
    db.session.commit()
    return jsonify(c.to_dict()), 201


# ---- Manufacturers ----
@api_bp.route("/manufacturers", methods=["GET"])
def list_manufacturers():
    manufacturers = Manufacturer.query.order_by(Manufacturer.name.asc()).all()
    return jsonify([m.to_dict() for m in manufacturers])


@api_bp.route("/manufacturers", methods=["POST"])
def manufacturer_create():
    form = _validated(ManufacturerForm())
    name = form.name.data

    exists = Manufacturer.query.filter(db.func.lower(Manufacturer.name) == name.lower()).first()
    if exists:
        raise AppException(ErrorType.CONFLICT, "Manufacturer already exists")

    m = Manufacturer(name=name)
    db.session.add(m)
    db.session.commit()
    return jsonify(m.to_dict()), 201


# ---- Products ----
@api_bp.route("/products", methods=["GET"])
def list_products():
    return jsonify([p.to_dict() for p in _products_query().all()])


@api_bp.route("/products/<barcode>", methods=["GET"])
def product_by_barcode(barcode):
    product = Product.query.filter_by(barcode=barcode.strip()).first()
    if product is None:
        raise AppException(ErrorType.NOT_FOUND, "Product not found")
    return jsonify(product.to_dict())


@api_bp.route("/products", methods=["POST"])
def product_create():
    form = _validated(ProductForm())

    if Product.query.filter_by(barcode=form.barcode.data).first():
        raise AppException(ErrorType.CONFLICT, "Barcode already exists")
    if db.session.get(Category, form.category_id.data) is None:
        raise AppException(ErrorType.VALIDATION, "Unknown category")
    if db.session.get(Manufacturer, form.manufacturer_id.data) is None:
        raise AppException(ErrorType.VALIDATION, "Unknown manufacturer")

    product = Product(
        barcode=form.barcode.data,
        category_id=form.category_id.data,
        manufacturer_id=form.manufacturer_id.data,
        quantity=form.quantity.data,
        cost_price=Decimal(form.cost_price.data).quantize(Decimal("0.01")),
        sale_price=Decimal(form.sale_price.data).quantize(Decimal("0.01")),
    )
    db.session.add(product)
    db.session.commit()
    logger.info("Created product %s", product.barcode)
    return jsonify(product.to_dict()), 201


@api_bp.route("/products/<int:product_id>/quantity", methods=["PATCH"])
def product_quantity(product_id):
    form = _validated(QuantityForm())
    product = set_product_quantity(product_id, form.quantity.data)
    return jsonify(product.to_dict())


# ---- Sales ----
@api_bp.route("/sales", methods=["POST"])
def sale_create():
    sale = create_sale(_json_payload())
    return jsonify({"id": sale.id, "number": sale.number, "date": sale.date_display}), 201


@api_bp.route("/sales", methods=["GET"])
def list_sales():
    sales = _sales_from_args().all()
    return jsonify([s.to_dict() for s in sales])


@api_bp.route("/sales/<int:sale_id>", methods=["GET"])
def sale_detail(sale_id):
    return jsonify(get_sale(sale_id).to_dict(with_items=True))


@api_bp.route("/sales/<int:sale_id>", methods=["PUT"])
def sale_update(sale_id):
    sale = update_sale(sale_id, _json_payload())
    return jsonify(sale.to_dict(with_items=True))


@api_bp.route("/sales/<int:sale_id>", methods=["DELETE"])
def sale_delete(sale_id):
    number = delete_sale(sale_id)
    return jsonify({"id": sale_id, "message": f"Sale {number} deleted successfully"})


# ---- Import / export ----
@api_bp.route("/import/products", methods=["POST"])
def products_import():
    form = _validated(ImportProductsForm())
    path = save_import_file(form.file.data)

    try:
        result = import_products(path)
    finally:
        discard_upload(path)

    return jsonify(result)


@api_bp.route("/export/products", methods=["GET"])
def products_export():
    products = _products_query().all()
    if not products:
        raise AppException(ErrorType.NOT_FOUND, "No products found to export")

    return send_file(
        export_products(products),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name="products.xlsx"
    )


@api_bp.route("/export/sales", methods=["GET"])
def sales_export():
    sales = _sales_from_args().all()
    if not sales:
        raise AppException(ErrorType.NOT_FOUND, "No sales found to export")

    return send_file(
        export_sales(sales),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name="sales.xlsx"
    )


# -----------------------
# Printable receipt
# -----------------------
@main_bp.route("/sales/<int:sale_id>/receipt")
def sale_receipt(sale_id):
    sale = get_sale(sale_id)
    gst = sale.gst_breakdown(current_app.config["GST_RATE"]) if sale.type == "bill" else None
    return render_template("receipt.html", sale=sale, gst=gst, store=current_app.config)
