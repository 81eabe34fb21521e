import unittest

from grid_errors import ColumnNotFoundError, OutOfRangeError, SchemaError
from grid_model import CellCoord, DataModel, EMPTY, normalize


class NormalizeTests(unittest.TestCase):
    def test_missing_key_fills_empty(self):
        model = DataModel(["a", "b"], [{"a": 1}])
        self.assertEqual(model.read(0, 0), 1)
        self.assertEqual(model.read(0, 1), EMPTY)

    def test_columns_default_to_union_in_first_seen_order(self):
        model = DataModel(None, [{"b": 1}, {"a": 2, "b": 3}, {"c": 4}])
        self.assertEqual(model.columns, ["b", "a", "c"])
        self.assertEqual(model.read(0, 1), EMPTY)
        self.assertEqual(model.read(2, 2), 4)

    def test_row_values_follow_column_order_not_record_order(self):
        model = DataModel(["x", "y"], [{"y": "second", "x": "first"}])
        self.assertEqual(model.read(0, 0), "first")
        self.assertEqual(model.read(0, 1), "second")

    def test_unknown_keys_are_dropped(self):
        model = DataModel(["a"], [{"a": 1, "zzz": 2}])
        self.assertEqual(model.records(), [{"a": 1}])

    def test_empty_columns_with_rows_is_schema_error(self):
        with self.assertRaises(SchemaError):
            normalize([], [{"a": 1}])

    def test_empty_columns_without_rows_is_allowed(self):
        model = DataModel([], [])
        self.assertEqual(model.column_count, 0)
        self.assertEqual(model.row_count, 0)

    def test_duplicate_columns_rejected(self):
        with self.assertRaises(SchemaError):
            DataModel(["a", "a"], [])

    def test_non_mapping_row_rejected(self):
        with self.assertRaises(SchemaError):
            DataModel(["a"], [["not", "a", "dict"]])

    def test_schema_error_is_value_error(self):
        self.assertTrue(issubclass(SchemaError, ValueError))


class ReadWriteTests(unittest.TestCase):
    def setUp(self):
        self.model = DataModel(
            ["name", "country"],
            [{"name": "Ann", "country": "USA"}, {"name": "Bo", "country": "UK"}],
        )

    def test_write_then_read_round_trip(self):
        for row in range(self.model.row_count):
            for col in range(self.model.column_count):
                value = f"v{row}{col}"
                self.assertEqual(self.model.write(row, col, value), value)
                self.assertEqual(self.model.read(row, col), value)

    def test_write_accepts_binary_payloads(self):
        payload = b"\x89PNG\r\n"
        self.model.write(1, 0, payload)
        self.assertEqual(self.model.read(1, 0), payload)

    def test_write_does_not_touch_other_cells(self):
        self.model.write(0, 1, "Canada")
        self.assertEqual(self.model.read(0, 0), "Ann")
        self.assertEqual(self.model.read(1, 1), "UK")

    def test_out_of_range(self):
        for row, col in [(2, 0), (0, 2), (-1, 0), (0, -1)]:
            with self.assertRaises(OutOfRangeError):
                self.model.read(row, col)
            with self.assertRaises(OutOfRangeError):
                self.model.write(row, col, "x")

    def test_out_of_range_is_index_error_with_position(self):
        with self.assertRaises(IndexError) as ctx:
            self.model.read(5, 1)
        self.assertEqual(ctx.exception.row, 5)
        self.assertEqual(ctx.exception.col, 1)

    def test_non_integer_positions_rejected(self):
        with self.assertRaises(OutOfRangeError):
            self.model.read("0", 0)
        with self.assertRaises(OutOfRangeError):
            self.model.read(0, True)

    def test_to_frame_is_a_copy(self):
        frame = self.model.to_frame()
        frame.iat[0, 0] = "changed"
        self.assertEqual(self.model.read(0, 0), "Ann")


class ColumnLookupTests(unittest.TestCase):
    def setUp(self):
        self.model = DataModel(["name", "country"], [])

    def test_column_index_of(self):
        self.assertEqual(self.model.column_index_of("country"), 1)
        self.assertEqual(self.model.column_by_key("name"), 0)

    def test_column_index_of_missing(self):
        with self.assertRaises(ColumnNotFoundError) as ctx:
            self.model.column_index_of("flag")
        self.assertEqual(ctx.exception.key, "flag")
        self.assertIsInstance(ctx.exception, KeyError)

    def test_column_by_index(self):
        self.assertEqual(self.model.column_by_index(1), "country")
        with self.assertRaises(OutOfRangeError):
            self.model.column_by_index(2)

    def test_coord_carries_key_but_compares_by_position(self):
        model = DataModel(["name"], [{"name": "Ann"}])
        coord = model.coord(0, 0)
        self.assertEqual(coord.key, "name")
        self.assertEqual(coord, CellCoord(0, 0))
        self.assertEqual(hash(coord), hash(CellCoord(0, 0, "other")))


if __name__ == "__main__":
    unittest.main()
