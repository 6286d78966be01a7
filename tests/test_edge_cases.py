#!/usr/bin/env python3
"""
Test edge cases for mycat.py.
"""

import io
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

# Add parent directory to path to import mycat module
sys.path.insert(0, str(Path(__file__).parent.parent))
import mycat  # pylint: disable=wrong-import-position


class TestEdgeCases(unittest.TestCase):
    def setUp(self):
        # Create a temporary directory
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        # Clean up the temporary directory
        shutil.rmtree(self.test_dir)

    def cat(self, content, opts=None):
        path = os.path.join(self.test_dir, "input.txt")
        with open(path, "wb") as f:
            f.write(content)
        output = io.BytesIO()
        result = mycat.process_file(path, opts or mycat.Options(), mycat.RunState(), output)
        self.assertTrue(result)
        return output.getvalue()

    def test_very_long_lines(self):
        """Test files with very long lines."""
        long_line = b"a" * 100000
        out = self.cat((long_line + b"\n") * 3, mycat.Options(show_ends=True))
        self.assertEqual(out, (long_line + b"$\n") * 3)

    def test_many_blank_lines(self):
        out = self.cat(b"Line 1\n" + b"\n" * 100 + b"Line 2\n", mycat.Options(squeeze_blanks=True))
        self.assertEqual(out, b"Line 1\n\nLine 2\n")

    def test_only_blank_lines(self):
        out = self.cat(b"\n\n\n\n", mycat.Options(squeeze_blanks=True, number_lines=True))
        self.assertEqual(out, b"     1 \n")

    def test_carriage_returns_are_content(self):
        """Only newline ends a line; CR stays in place."""
        out = self.cat(b"one\r\ntwo\rthree\n", mycat.Options(show_ends=True))
        self.assertEqual(out, b"one\r$\ntwo\rthree$\n")

    def test_crlf_blank_line_is_not_blank(self):
        out = self.cat(b"\r\n\r\n", mycat.Options(squeeze_blanks=True, number_non_blank=True))
        self.assertEqual(out, b"     1 \r\n     2 \r\n")

    def test_whitespace_line_is_not_blank(self):
        out = self.cat(b"a\n \n\t\n", mycat.Options(number_non_blank=True))
        self.assertEqual(out, b"     1 a\n     2  \n     3 \t\n")

    def test_bytes_pass_through(self):
        """Non-UTF-8 bytes are written back unchanged."""
        content = b"caf\xe9\n\xff\xfe\x00\n\xe4\xb8\x96\xe7\x95\x8c\n"
        self.assertEqual(self.cat(content), content)

    def test_lines_preserved_without_options(self):
        lines = [b"first", b"", b"\tindented", b"", b"", b"last"]
        out = self.cat(b"\n".join(lines))
        self.assertEqual(out.split(b"\n")[:-1], lines)

    def test_single_newline(self):
        self.assertEqual(self.cat(b"\n", mycat.Options(number_non_blank=True)), b"\n")

    def test_tabs_only_line(self):
        out = self.cat(b"\t\t\n", mycat.Options(show_tabs=True, show_ends=True))
        self.assertEqual(out, b"^I^I$\n")

    def test_literal_caret_not_confused(self):
        out = self.cat(b"^I\t$\n", mycat.Options(show_tabs=True, show_ends=True))
        self.assertEqual(out, b"^I^I$$\n")


if __name__ == "__main__":
    unittest.main()
