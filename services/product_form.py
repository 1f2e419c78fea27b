# services/product_form.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from baserow_service import BaserowAPIError, BaserowService
from utils import get_logger, parse_float

logger = get_logger("product_form")

SELECT = ("", "-Select-")

REQUIRED_FIELDS: Dict[str, str] = {
    "website": "Website is required",
    "product_type": "Product type is required",
    "final_sku_code": "Final SKU Code is required",
    "color_name": "Color name is required",
    "brand_name": "Brand name is required",
    "vendor_name": "Vendor name is required",
    "pricing_category": "Pricing category is required",
    "customization_part": "Customization part is required",
}


class ProductForm(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=False)

    # Website & Product Type
    website: str = ""
    product_type: str = ""

    # Product & SKU Details
    final_sku_code: str = ""
    product_code: str = ""
    standard_code: str = ""
    color_name: str = ""
    category: str = ""
    color_code: str = ""
    sub_category: str = ""
    sku_code_with_color: str = ""
    category_code: str = ""
    product_name: str = ""

    # Vendor Details
    brand_name: str = ""
    vendor_name: str = ""
    vendor_code: str = ""
    vendor_location: str = ""
    brand_logic: str = ""
    vendor_logic: str = ""
    vendor_timeline: str = ""
    stock_availability: str = ""

    # Contact Information
    first_name: str = ""
    last_name: str = ""
    email_id: str = ""
    vendor_gst_number: str = ""
    dispatch_timeline: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    size_chart: str = "NO"

    # Website Pricing
    pricing_category: str = ""
    product_types: str = ""
    buying_price: str = ""
    margin_slb: str = ""
    wp: str = ""
    pb1: str = ""
    mrp: str = ""
    gst: str = ""
    discount: str = ""
    hsn_code: str = ""

    # Tier Pricing
    moq: str = ""
    tier1: str = ""
    price1: str = ""
    tier2: str = ""
    price2: str = ""
    tier3: str = ""
    price3: str = ""
    tier4: str = ""
    price4: str = ""
    tier5: str = ""
    price5: str = ""

    # Dimension / Shipping Details
    product_length: str = ""
    shipping_length: str = ""
    product_height: str = ""
    shipping_height: str = ""
    product_width: str = ""
    shipping_width: str = ""
    product_volumetric_weight: str = ""
    shipping_volumetric_weight: str = ""
    stock_ship_availability: str = ""
    brown_envelope: str = ""
    air_shipping: str = ""
    frontend_dimensions: str = ""

    # Images
    photo_shoot_available: str = "No"
    video_available: str = "NO"
    photo_shoot_required: str = "No"
    tcgs_video_availability: str = "Not Required"
    customization_images_available: str = "No"
    image_url: str = ""

    # Customization
    customisation_options: str = ""
    no_of_printable_sides: str = ""
    printable_area_length: str = ""
    printable_area_breadth: str = ""
    own_box: str = ""
    country_of_origin: str = "India"
    status: str = "Not Checked"
    customization_part: str = "Not Done"

    def validate_required(self) -> Dict[str, str]:
        """One inline message per required field left blank."""
        return {
            name: message
            for name, message in REQUIRED_FIELDS.items()
            if not str(getattr(self, name) or "").strip()
        }

    def tier_price(self) -> str:
        tiers = []
        for n in range(1, 6):
            qty, price = getattr(self, f"tier{n}").strip(), getattr(self, f"price{n}").strip()
            if qty and price:
                tiers.append(f"{qty}:{price}")
        return ", ".join(tiers)

    def dimensions(self) -> str:
        parts = [self.product_length.strip(), self.product_width.strip(), self.product_height.strip()]
        return " x ".join(parts) if all(parts) else self.frontend_dimensions.strip()

    def to_product_fields(self) -> Dict[str, Any]:
        """
        Named product attributes built from the form. Only values that have a
        column in the products table are kept; blanks are dropped.
        """
        categories = ", ".join(c for c in (self.category.strip(), self.sub_category.strip()) if c)
        fields: Dict[str, Any] = {
            "sku": self.final_sku_code.strip(),
            "name": self.product_name.strip() or self.final_sku_code.strip(),
            "price": parse_float(self.mrp) or 0.0,
            "quantity": 0,
            "categories": categories,
            "vendor_code": self.vendor_code.strip() or self.vendor_gst_number.strip(),
            "brand": self.brand_name,
            "color": self.color_name,
            "type": self.product_type,
            "delivery_timeline": self.dispatch_timeline,
            "dimensions": self.dimensions(),
            "tier_price": self.tier_price() or self.buying_price.strip(),
            "sample_price": parse_float(self.wp),
            "customization": self.customisation_options,
        }
        return {k: v for k, v in fields.items() if v is not None and v != ""}


def submit_product_form(form: ProductForm, service: BaserowService) -> Tuple[Dict[str, str], Optional[Dict[str, Any]]]:
    """
    Validates and creates the product. Returns (errors, created_row); the
    service is not called when there are errors. Request failures propagate.
    """
    errors = form.validate_required()
    if errors:
        logger.info("Product form rejected, missing: %s", ", ".join(errors))
        return errors, None
    try:
        created = service.create_product(form.to_product_fields())
    except BaserowAPIError as e:
        logger.error("Failed to create product: %s", e)
        raise
    return {}, created


# ---------------------------------------------------------------------------
# Form layout
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FormField:
    name: str
    label: str
    input: str = "text"
    options: Tuple[Tuple[str, str], ...] = ()

    @property
    def required(self) -> bool:
        return self.name in REQUIRED_FIELDS


@dataclass(frozen=True)
class FormSection:
    title: str
    fields: Tuple[FormField, ...]


def _choices(*values: str, blank: Optional[Tuple[str, str]] = SELECT) -> Tuple[Tuple[str, str], ...]:
    options = tuple((v, v) for v in values)
    return ((blank,) + options) if blank else options


YES_NO = _choices("Yes", "No")

FORM_SECTIONS: List[FormSection] = [
    FormSection("Website & Product Type", (
        FormField("website", "Website", "select", _choices("Main Website", "Secondary Website", "B2B Portal")),
        FormField("product_type", "Product Type", "select", _choices("Simple", "Variable", "Grouped", "External")),
    )),
    FormSection("Product & SKU Details", (
        FormField("final_sku_code", "Final SKU Code"),
        FormField("product_code", "Product Code"),
        FormField("standard_code", "Standard Code"),
        FormField("color_name", "Color Name", "select", _choices("Red", "Blue", "Green", "Black", "White")),
        FormField("category", "Category", "select", _choices("Electronics", "Apparel", "Home")),
        FormField("color_code", "Color Code"),
        FormField("sub_category", "Sub Category", "select", _choices("Subcategory 1", "Subcategory 2")),
        FormField("sku_code_with_color", "SKU Code With Color"),
        FormField("category_code", "Category Code"),
        FormField("product_name", "Product Name"),
    )),
    FormSection("Vendor Details", (
        FormField("brand_name", "Brand Name", "select", _choices("Brand 1", "Brand 2")),
        FormField("vendor_name", "Vendor Name", "select", _choices("Vendor 1", "Vendor 2")),
        FormField("vendor_code", "Vendor Code"),
        FormField("vendor_location", "Vendor Location"),
        FormField("brand_logic", "Brand Logic", "select", _choices("Logic 1", "Logic 2")),
        FormField("vendor_logic", "Vendor Logic", "select", _choices("Blr", blank=("", "Non-Blr"))),
        FormField("vendor_timeline", "Vendor Timeline"),
        FormField("stock_availability", "Stock Availability", "select",
                  _choices("In Stock", "Out of Stock", "Pre-order")),
    )),
    FormSection("Contact Information", (
        FormField("first_name", "Contact First Name"),
        FormField("last_name", "Contact Last Name"),
        FormField("email_id", "Email ID", "email"),
        FormField("vendor_gst_number", "Vendor GST Number"),
        FormField("dispatch_timeline", "Dispatch Timeline", "select", _choices("1-2 days", "3-5 days", "5-7 days")),
        FormField("address_line1", "Address Line 1"),
        FormField("address_line2", "Address Line 2"),
        FormField("city", "City"),
        FormField("state", "State"),
        FormField("postal_code", "Postal Code"),
        FormField("country", "Country", "select", _choices("India", "USA")),
        FormField("size_chart", "Size Chart", "select", _choices("NO", "YES", blank=None)),
    )),
    FormSection("Website Pricing", (
        FormField("pricing_category", "Pricing Category", "select", _choices("Standard", "Premium")),
        FormField("mrp", "MRP", "number"),
        FormField("product_types", "Product Types", "select", _choices("Physical", "Digital")),
        FormField("gst", "GST"),
        FormField("buying_price", "Buying Price", "number"),
        FormField("discount", "Discount", "number"),
        FormField("margin_slb", "Margin SLB", "number"),
        FormField("hsn_code", "HSN Code"),
        FormField("wp", "WP", "number"),
        FormField("pb1", "PB1", "number"),
    )),
    FormSection("Tier Pricing", (
        FormField("moq", "MOQ", "number"),
        *(f for n in range(1, 6) for f in (
            FormField(f"tier{n}", f"Tier {n}", "number"),
            FormField(f"price{n}", f"Price {n}", "number"),
        )),
    )),
    FormSection("Dimension / Shipping Details", (
        FormField("product_length", "Product Length", "number"),
        FormField("shipping_length", "Shipping Length", "number"),
        FormField("product_height", "Product Height", "number"),
        FormField("shipping_height", "Shipping Height", "number"),
        FormField("product_width", "Product Width", "number"),
        FormField("shipping_width", "Shipping Width", "number"),
        FormField("product_volumetric_weight", "Product Volumetric Weight", "number"),
        FormField("shipping_volumetric_weight", "Shipping Volumetric Weight", "number"),
        FormField("stock_ship_availability", "Stock Ship Availability", "select", YES_NO),
        FormField("brown_envelope", "Brown Envelope", "select", YES_NO),
        FormField("air_shipping", "Air Shipping", "select", YES_NO),
        FormField("frontend_dimensions", "Frontend Dimensions"),
    )),
    FormSection("Images", (
        FormField("photo_shoot_available", "Photo Shoot Available", "select", _choices("No", "Yes", blank=None)),
        FormField("video_available", "Video Available", "select", _choices("NO", "YES", blank=None)),
        FormField("photo_shoot_required", "Photo Shoot Required", "select", _choices("No", "Yes", blank=None)),
        FormField("tcgs_video_availability", "TCGS Video Availability", "select",
                  _choices("Not Required", "Available", "Pending", blank=None)),
        FormField("customization_images_available", "Customization Images Available", "select",
                  _choices("No", "Yes", blank=None)),
        FormField("image_url", "Image URL", "url"),
    )),
    FormSection("Buzz Customization", (
        FormField("customisation_options", "Customisation Options", "select", YES_NO),
        FormField("no_of_printable_sides", "No Of Printable Sides", "select", _choices("1", "2")),
        FormField("printable_area_length", "Printable Area Length", "number"),
        FormField("printable_area_breadth", "Printable Area Breadth", "number"),
        FormField("own_box", "Own Box", "select", YES_NO),
        FormField("country_of_origin", "Country of Origin"),
        FormField("status", "Status", "radio", _choices("Not Checked", "Checked", blank=None)),
        FormField("customization_part", "Customization Part", "radio", _choices("Done", "Not Done", blank=None)),
    )),
]
