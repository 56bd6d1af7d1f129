import logging
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from camdet.logging_utils import LOG_FORMAT, setup_logging


class TestSetupLogging(unittest.TestCase):
    def test_stream_handler_only_by_default(self) -> None:
        with mock.patch("camdet.logging_utils.logging.basicConfig") as basic:
            setup_logging("info")
        kwargs = basic.call_args.kwargs
        self.assertEqual(kwargs["level"], logging.INFO)
        self.assertEqual(kwargs["format"], LOG_FORMAT)
        self.assertEqual([type(h) for h in kwargs["handlers"]], [logging.StreamHandler])

    def test_file_handler_creates_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "logs" / "camdet.log"
            with mock.patch("camdet.logging_utils.logging.basicConfig") as basic:
                setup_logging("DEBUG", str(log_path))
            handlers = basic.call_args.kwargs["handlers"]
            try:
                self.assertTrue(log_path.parent.is_dir())
                self.assertEqual(basic.call_args.kwargs["level"], logging.DEBUG)
                self.assertIsInstance(handlers[-1], logging.FileHandler)
            finally:
                for handler in handlers:
                    handler.close()

    def test_unknown_level(self) -> None:
        with self.assertRaises(ValueError):
            setup_logging("LOUD")


if __name__ == "__main__":
    unittest.main()
