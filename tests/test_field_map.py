"""Tests for the configuration-loaded field map."""

import json

import pytest

from field_map import FieldKind, FieldMapError, load_field_map, parse_field_map


class TestFieldMapLookups:

    def test_known_attribute_resolves_to_identifier(self, field_map):
        assert field_map.field_name_for("sku") == "field_5372"
        assert field_map.field_name_for("categories") == "field_10480"

    def test_unknown_attribute_passes_through(self, field_map):
        assert field_map.field_name_for("not_a_column") == "not_a_column"
        assert field_map.field_name_for("id") == "id"

    def test_shared_identifier(self, field_map):
        assert field_map.field_name_for("brand") == field_map.field_name_for("websites")

    def test_option_fields(self, field_map):
        assert field_map.is_option_field("type")
        assert field_map.is_option_field("enable_product")
        assert not field_map.is_option_field("brand")
        assert not field_map.is_option_field("missing")

    def test_kinds_are_parsed(self, field_map):
        assert field_map.spec_for("price").kind is FieldKind.NUMBER
        assert field_map.spec_for("sample_price").kind is FieldKind.OPTIONAL_NUMBER
        assert field_map.spec_for("hidden_from_category").kind is FieldKind.BOOLEAN
        assert field_map.spec_for("image").sortable is False

    def test_category_schema(self, field_map):
        assert field_map.categories.code == "field_4898"
        assert field_map.categories.is_active == "field_4915"
        assert field_map.category_filter_field == "field_10480"


class TestFieldMapLoading:

    def _minimal(self, **products):
        return {
            "products": products or {"sku": {"field": "field_1"}},
            "categories": {"code": "c", "name": "n", "parent_code": "p", "is_active": "a"},
            "category_filter_field": "field_9",
        }

    def test_kind_defaults_to_text(self):
        fm = parse_field_map(self._minimal())
        assert fm.spec_for("sku").kind is FieldKind.TEXT

    def test_unknown_kind_is_rejected(self):
        with pytest.raises(FieldMapError, match="Unknown field kind"):
            parse_field_map(self._minimal(sku={"field": "field_1", "kind": "rating"}))

    def test_entry_without_identifier_is_rejected(self):
        with pytest.raises(FieldMapError, match="needs a 'field'"):
            parse_field_map(self._minimal(sku={"kind": "text"}))

    def test_missing_category_schema_is_rejected(self):
        data = self._minimal()
        del data["categories"]["is_active"]
        with pytest.raises(FieldMapError):
            parse_field_map(data)

    def test_category_filter_field_falls_back_to_categories_attribute(self):
        data = self._minimal(categories={"field": "field_42", "kind": "link"})
        del data["category_filter_field"]
        assert parse_field_map(data).category_filter_field == "field_42"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FieldMapError, match="not found"):
            load_field_map(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(FieldMapError, match="not valid JSON"):
            load_field_map(path)

    def test_loads_custom_deployment(self, tmp_path):
        path = tmp_path / "map.json"
        path.write_text(json.dumps(self._minimal(sku={"field": "field_77"})))
        fm = load_field_map(path)
        assert fm.field_name_for("sku") == "field_77"
        assert fm.source == path
