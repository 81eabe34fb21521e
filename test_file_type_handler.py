import json
import tempfile
import unittest
from pathlib import Path

from file_type_handler import FileTypeHandler
from grid_model import DataModel


class FileTypeHandlerTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_json_record_list(self):
        path = self.dir / "people.json"
        path.write_text(json.dumps([{"name": "Ann"}, {"name": "Bo", "country": "UK"}]))
        columns, records = FileTypeHandler(str(path)).load()
        self.assertIsNone(columns)
        self.assertEqual(DataModel(columns, records).columns, ["name", "country"])

    def test_json_with_columns(self):
        path = self.dir / "people.json"
        path.write_text(json.dumps({"columns": ["country", "name"], "rows": [{"name": "Ann"}]}))
        columns, records = FileTypeHandler(str(path)).load()
        self.assertEqual(columns, ["country", "name"])
        self.assertEqual(records, [{"name": "Ann"}])

    def test_csv_values_stay_text(self):
        path = self.dir / "people.csv"
        path.write_text("name,age\nAnn,30\nBo,\n")
        columns, records = FileTypeHandler(str(path)).load()
        self.assertEqual(columns, ["name", "age"])
        self.assertEqual(records, [{"name": "Ann", "age": "30"}, {"name": "Bo", "age": ""}])

    def test_empty_csv(self):
        path = self.dir / "empty.csv"
        path.write_text("")
        self.assertEqual(FileTypeHandler(str(path)).load(), ([], []))

    def test_unsupported_extension_exits(self):
        with self.assertRaises(SystemExit):
            FileTypeHandler(str(self.dir / "notes.txt"))

    def test_missing_file_exits(self):
        with self.assertRaises(SystemExit):
            FileTypeHandler(str(self.dir / "missing.json")).load()


if __name__ == "__main__":
    unittest.main()
