"""Tests for the create-product form: validation, mapping and submission."""

import pytest

from baserow_service import BaserowAPIError
from services.product_form import (
    FORM_SECTIONS,
    REQUIRED_FIELDS,
    ProductForm,
    submit_product_form,
)


def filled_form(**overrides):
    values = {
        "website": "Main Website",
        "product_type": "Simple",
        "final_sku_code": "MUG-RED-01",
        "color_name": "Red",
        "brand_name": "Brand 1",
        "vendor_name": "Vendor 1",
        "pricing_category": "Standard",
        "customization_part": "Done",
    }
    values.update(overrides)
    return ProductForm(**values)


class TestDefaults:

    def test_initial_values(self):
        form = ProductForm()
        assert form.size_chart == "NO"
        assert form.country_of_origin == "India"
        assert form.status == "Not Checked"
        assert form.customization_part == "Not Done"
        assert form.tcgs_video_availability == "Not Required"
        assert form.website == ""

    def test_unknown_inputs_are_ignored(self):
        form = ProductForm(website="Main Website", csrf="x")
        assert not hasattr(form, "csrf")


class TestValidation:

    def test_complete_form_has_no_errors(self):
        assert filled_form().validate_required() == {}

    def test_blank_website_and_type(self):
        errors = filled_form(website="", product_type="").validate_required()
        assert errors == {
            "website": "Website is required",
            "product_type": "Product type is required",
        }

    def test_whitespace_counts_as_blank(self):
        errors = filled_form(final_sku_code="   ").validate_required()
        assert list(errors) == ["final_sku_code"]

    def test_empty_form_reports_every_required_field(self):
        errors = ProductForm(customization_part="").validate_required()
        assert set(errors) == set(REQUIRED_FIELDS)


class TestProductFields:

    def test_minimal_form(self):
        assert filled_form().to_product_fields() == {
            "sku": "MUG-RED-01",
            "name": "MUG-RED-01",
            "price": 0.0,
            "quantity": 0,
            "brand": "Brand 1",
            "color": "Red",
            "type": "Simple",
        }

    def test_full_mapping(self):
        form = filled_form(
            product_name="Red Mug",
            mrp="249.50",
            wp="180",
            category="Home",
            sub_category="Subcategory 1",
            vendor_gst_number="29ABCDE1234F1Z5",
            dispatch_timeline="3-5 days",
            product_length="10",
            product_width="8",
            product_height="12",
            tier1="50", price1="230",
            tier2="100", price2="",
            tier3="500", price3="199",
            customisation_options="Yes",
        )
        fields = form.to_product_fields()
        assert fields["name"] == "Red Mug"
        assert fields["price"] == 249.5
        assert fields["sample_price"] == 180.0
        assert fields["categories"] == "Home, Subcategory 1"
        assert fields["vendor_code"] == "29ABCDE1234F1Z5"
        assert fields["delivery_timeline"] == "3-5 days"
        assert fields["dimensions"] == "10 x 8 x 12"
        assert fields["tier_price"] == "50:230, 500:199"
        assert fields["customization"] == "Yes"

    def test_partial_dimensions_fall_back_to_frontend_text(self):
        form = filled_form(product_length="10", frontend_dimensions="10cm mug")
        assert form.dimensions() == "10cm mug"

    def test_tier_price_falls_back_to_buying_price(self):
        assert filled_form(buying_price="120").to_product_fields()["tier_price"] == "120"


class RecordingService:
    def __init__(self, error=None):
        self.created = []
        self.error = error

    def create_product(self, fields):
        if self.error:
            raise self.error
        self.created.append(fields)
        return {"id": 99, **fields}


class TestSubmit:

    def test_invalid_form_never_reaches_service(self):
        service = RecordingService()
        errors, created = submit_product_form(filled_form(website="", product_type=""), service)
        assert len(errors) == 2
        assert created is None
        assert service.created == []

    def test_valid_form_is_created(self):
        service = RecordingService()
        errors, created = submit_product_form(filled_form(), service)
        assert errors == {}
        assert created["id"] == 99
        assert service.created[0]["sku"] == "MUG-RED-01"

    def test_service_failure_propagates(self):
        service = RecordingService(error=BaserowAPIError("boom", status_code=500))
        with pytest.raises(BaserowAPIError):
            submit_product_form(filled_form(), service)

    def test_create_goes_through_field_map(self, service, fake_baserow):
        errors, created = submit_product_form(filled_form(mrp="99"), service)
        assert errors == {}
        _, _, _, payload = fake_baserow.calls_for("POST")[-1]
        assert payload["field_5372"] == "MUG-RED-01"
        assert payload["field_5248"] == 99.0
        assert created["id"] > 0


def test_layout_covers_every_form_field():
    names = [f.name for section in FORM_SECTIONS for f in section.fields]
    assert len(names) == len(set(names))
    assert set(names) == set(ProductForm.model_fields)
    required = {f.name for section in FORM_SECTIONS for f in section.fields if f.required}
    assert required == set(REQUIRED_FIELDS)
