from __future__ import annotations

import unittest
from datetime import datetime

from app.domain.errors import MalformedTimeError
from app.domain.integration import FieldSpec, IntegrationConfig
from app.mappers.field_mapper import FieldMapper
from app.mappers.transforms import TransformLibrary


def _integration(field_mapping: dict, tables: tuple[str, ...] = ("restaurants",), name: str = "test_layout") -> IntegrationConfig:
    return IntegrationConfig.from_mapping(
        id=1,
        name=name,
        platform_id=7,
        field_mapping=field_mapping,
        tables=tables,
    )


class TestFieldSpec(unittest.TestCase):
    def test_default_key_presence_defines_default(self) -> None:
        spec = FieldSpec.from_dict({"target": "comment", "default": None})
        self.assertTrue(spec.has_default)
        self.assertIsNone(spec.default)
        self.assertFalse(FieldSpec.from_dict({"target": "comment"}).has_default)

    def test_missing_target_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FieldSpec.from_dict({"type": "number"})

    def test_unknown_type_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FieldSpec.from_dict({"target": "x", "type": "decimal"})

    def test_round_trips_persisted_form(self) -> None:
        payload = {"target": "delivery_type", "type": "enum", "enum_values": ["Delivery"], "transform": "deliveryType"}
        self.assertEqual(FieldSpec.from_dict(payload).to_dict(), payload)


class TestFieldMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.mapper = FieldMapper()

    def test_platform_id_is_always_set(self) -> None:
        result = self.mapper.map({"Name": "Pizza"}, _integration({"Name": {"target": "restaurant_name"}}))
        self.assertEqual(result, {"platform_id": 7, "restaurant_name": "Pizza"})

    def test_absent_column_reads_as_empty(self) -> None:
        result = self.mapper.map({}, _integration({"Name": {"target": "restaurant_name"}}))
        self.assertIsNone(result["restaurant_name"])

    def test_default_skips_transform_and_coercion(self) -> None:
        integration = _integration(
            {"Prep": {"target": "prep_time_minutes", "transform": "timeToMinutes", "default": "n/a"}}
        )
        result = self.mapper.map({"Prep": ""}, integration)
        self.assertEqual(result["prep_time_minutes"], "n/a")

    def test_transform_bypasses_type_coercion(self) -> None:
        integration = _integration(
            {"Prep": {"target": "prep_time_minutes", "type": "number", "transform": "timeToMinutes"}}
        )
        self.assertEqual(self.mapper.map({"Prep": "01:02:30"}, integration)["prep_time_minutes"], 63)

    def test_transform_errors_propagate(self) -> None:
        integration = _integration({"Prep": {"target": "prep_time_minutes", "transform": "timeToMinutes"}})
        with self.assertRaises(MalformedTimeError):
            self.mapper.map({"Prep": "12:75"}, integration)

    def test_unknown_transform_passes_value_through(self) -> None:
        integration = _integration({"Note": {"target": "comment", "transform": "notRegistered"}})
        self.assertEqual(self.mapper.map({"Note": "hello"}, integration)["comment"], "hello")

    def test_number_strips_currency_and_separators(self) -> None:
        integration = _integration({"Value": {"target": "order_value", "type": "number"}})
        self.assertEqual(self.mapper.map({"Value": "£1,234.50"}, integration)["order_value"], 1234.5)
        self.assertIsNone(self.mapper.map({"Value": "n/a"}, integration)["order_value"])
        self.assertIsNone(self.mapper.map({"Value": ""}, integration)["order_value"])

    def test_boolean_membership(self) -> None:
        integration = _integration({"Flag": {"target": "completed_flag", "type": "boolean"}})
        self.assertTrue(self.mapper.map({"Flag": "ON"}, integration)["completed_flag"])
        self.assertTrue(self.mapper.map({"Flag": "true"}, integration)["completed_flag"])
        self.assertFalse(self.mapper.map({"Flag": "yes"}, integration)["completed_flag"])
        self.assertFalse(self.mapper.map({"Flag": ""}, integration)["completed_flag"])

    def test_date_invalid_is_none(self) -> None:
        integration = _integration({"When": {"target": "order_datetime", "type": "date"}})
        self.assertEqual(
            self.mapper.map({"When": "2024-03-05 12:30:00"}, integration)["order_datetime"],
            datetime(2024, 3, 5, 12, 30),
        )
        self.assertIsNone(self.mapper.map({"When": "yesterday"}, integration)["order_datetime"])

    def test_enum_matches_case_insensitively_and_falls_back(self) -> None:
        integration = _integration(
            {"Type": {"target": "delivery_type", "type": "enum", "enum_values": ["Delivery", "Collection"]}}
        )
        self.assertEqual(self.mapper.map({"Type": "delivery"}, integration)["delivery_type"], "Delivery")
        self.assertEqual(self.mapper.map({"Type": "Drone"}, integration)["delivery_type"], "Drone")

    def test_untyped_value_is_trimmed(self) -> None:
        integration = _integration({"Name": {"target": "restaurant_name"}})
        self.assertEqual(self.mapper.map({"Name": "  Pizza  "}, integration)["restaurant_name"], "Pizza")

    def test_required_miss_rejects_row(self) -> None:
        integration = _integration(
            {
                "Name": {"target": "restaurant_name"},
                "Order": {"target": "platform_order_id", "required": True},
            }
        )
        self.assertIsNone(self.mapper.map({"Name": "Pizza", "Order": ""}, integration))

    def test_orders_require_platform_order_id(self) -> None:
        integration = _integration({"Name": {"target": "restaurant_name"}}, tables=("orders", "restaurants"))
        self.assertIsNone(self.mapper.map({"Name": "Pizza"}, integration))

    def test_custom_library_is_used(self) -> None:
        library = TransformLibrary({"shout": str.upper})
        mapper = FieldMapper(library)
        integration = _integration({"Name": {"target": "restaurant_name", "transform": "shout"}})
        self.assertIs(mapper.transforms, library)
        self.assertEqual(mapper.map({"Name": "pizza"}, integration)["restaurant_name"], "PIZZA")

    def test_business_segments_recombine_date_and_time(self) -> None:
        integration = _integration(
            {
                "Order ID": {"target": "platform_order_id", "required": True},
                "Date": {"target": "order_datetime", "type": "date"},
                "Minute": {"target": "order_time", "transform": "parseDeliveryPlatform2Time"},
            },
            tables=("orders", "restaurants"),
            name="deliveryplatform2_business_segments",
        )
        result = self.mapper.map({"Order ID": "A1", "Date": "2024-03-05", "Minute": "18:45"}, integration)
        self.assertEqual(result["order_datetime"], datetime(2024, 3, 5, 18, 45))
        self.assertNotIn("order_time", result)


if __name__ == "__main__":
    unittest.main()
