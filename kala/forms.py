from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileRequired, FileSize
from wtforms import StringField, DecimalField, IntegerField, DateField, FileField
from wtforms.validators import DataRequired, Length, Optional, NumberRange, Regexp, AnyOf

from kala.models import SALE_TYPES, MAX_QUANTITY


def _strip(value):
    # JSON bodies may carry numbers where text is expected (barcodes)
    if value is None:
        return None
    return str(value).strip()


class ApiForm(FlaskForm):
    """Forms fed from JSON bodies or query strings: no browser session, no CSRF token."""

    class Meta:
        csrf = False


class CategoryForm(ApiForm):
    name = StringField("Name", filters=[_strip], validators=[DataRequired(), Length(max=128)])


class ManufacturerForm(ApiForm):
    name = StringField("Name", filters=[_strip], validators=[DataRequired(), Length(max=128)])


class ProductForm(ApiForm):
    barcode = StringField(
        "Barcode",
        filters=[_strip],
        validators=[DataRequired(), Regexp(r"^\d{8}$", message="Barcode must be exactly 8 digits")]
    )
    category_id = IntegerField("Category", validators=[DataRequired()])
    manufacturer_id = IntegerField("Manufacturer", validators=[DataRequired()])

    quantity = IntegerField("Quantity", validators=[NumberRange(min=0, max=MAX_QUANTITY)])
    cost_price = DecimalField("Cost price", places=2, validators=[NumberRange(min=0)])
    sale_price = DecimalField("Sale price", places=2, validators=[NumberRange(min=0)])


class QuantityForm(ApiForm):
    quantity = IntegerField("Quantity", validators=[NumberRange(min=0, max=MAX_QUANTITY)])


class SalesFilterForm(ApiForm):
    day = DateField("Date", name="date", validators=[Optional()])
    start_date = DateField("Start date", name="startDate", validators=[Optional()])
    end_date = DateField("End date", name="endDate", validators=[Optional()])
    sale_type = StringField("Type", name="type", validators=[Optional(), AnyOf(SALE_TYPES)])
    search = StringField("Search", filters=[_strip], validators=[Optional(), Length(max=120)])


class ImportProductsForm(ApiForm):
    file = FileField(
        "File",
        validators=[
            FileRequired("No file uploaded"),
            FileAllowed(["xlsx"], "Only .xlsx files are accepted"),
            FileSize(max_size=5 * 1024 * 1024, message="Max 5MB")
        ]
    )
