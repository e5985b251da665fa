"""
Tests for the directory batch runner
"""

import unittest
from unittest import mock
import tempfile
import shutil
from pathlib import Path

from jlscheck import runner
from jlscheck.exceptions import AnymapFormatError
from jlscheck.runner import RasterKind, classify_file, iter_files, run_directory
from tests.fixtures import gradient_image, save_anymap


class TestClassifyFile(unittest.TestCase):
    """Test extension-based raster classification."""

    def test_known_extensions(self):
        self.assertIs(classify_file('a/b/gray.pgm'), RasterKind.MONOCHROME)
        self.assertIs(classify_file('color.ppm'), RasterKind.COLOR)
        self.assertIs(classify_file('TEST8.PPM'), RasterKind.COLOR)

    def test_other_extensions(self):
        for name in ('image.jls', 'notes.txt', 'bitmap.pbm', 'README'):
            self.assertIs(classify_file(name), RasterKind.UNRECOGNIZED)


class TestIterFiles(unittest.TestCase):
    """Test recursive directory traversal."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_sorted_recursive_order(self):
        (self.temp_dir / 'b').mkdir()
        (self.temp_dir / 'a').mkdir()
        for name in ('z.pgm', 'a/y.ppm', 'b/x.pgm', 'a/w.txt'):
            (self.temp_dir / name).write_bytes(b'')

        files = [path.relative_to(self.temp_dir).as_posix() for path in iter_files(self.temp_dir)]

        self.assertEqual(files, ['z.pgm', 'a/w.txt', 'a/y.ppm', 'b/x.pgm'])


@mock.patch('jlscheck.runner.click.echo')
class TestRunDirectory(unittest.TestCase):
    """Test batch runs over a directory tree."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def echoed(self, echo):
        return [call.args[0] for call in echo.call_args_list]

    def test_empty_directory_passes(self, echo):
        self.assertTrue(run_directory(self.temp_dir))
        echo.assert_not_called()

    def test_missing_directory_raises(self, echo):
        with self.assertRaises(NotADirectoryError):
            run_directory(self.temp_dir / 'missing')

    def test_stops_at_first_failure(self, echo):
        for name in ('a.pgm', 'b.pgm', 'c.pgm'):
            (self.temp_dir / name).write_bytes(b'')
        outcomes = [mock.Mock(passed=True), mock.Mock(passed=False), mock.Mock(passed=True)]

        with mock.patch.object(runner, 'check_file', side_effect=outcomes) as single:
            self.assertFalse(run_directory(self.temp_dir))

        self.assertEqual(single.call_count, 2)
        lines = self.echoed(echo)
        self.assertEqual(lines, [
            f"Checking file: {self.temp_dir / 'a.pgm'}",
            " Status: Passed",
            f"Checking file: {self.temp_dir / 'b.pgm'}",
            " Status: Failed",
        ])

    def test_dispatch_by_kind(self, echo):
        for name in ('gray.pgm', 'color.ppm', 'notes.txt'):
            (self.temp_dir / name).write_bytes(b'')

        with mock.patch.object(runner, 'check_file', return_value=mock.Mock(passed=True)) as single, \
                mock.patch.object(runner, 'check_color_file', return_value=True) as color:
            self.assertTrue(run_directory(self.temp_dir, near_lossless=1, write_output=False))

        single.assert_called_once_with(self.temp_dir / 'gray.pgm', near_lossless=1, write_output=False)
        color.assert_called_once_with(self.temp_dir / 'color.ppm', near_lossless=1, write_output=False)
        self.assertNotIn(f"Checking file: {self.temp_dir / 'notes.txt'}", self.echoed(echo))

    def test_real_images_pass(self, echo):
        nested = self.temp_dir / 'nested'
        nested.mkdir()
        save_anymap(self.temp_dir / 'gray.pgm', gradient_image(20, 10))
        save_anymap(nested / 'color.ppm', gradient_image(20, 10, components=3))
        (self.temp_dir / 'readme.txt').write_text('not an image')

        self.assertTrue(run_directory(self.temp_dir))

        self.assertTrue((self.temp_dir / 'gray-none.jls').exists())
        self.assertTrue((nested / 'color-sample.jls').exists())
        self.assertEqual(self.echoed(echo).count(" Status: Passed"), 2)

    def test_collaborator_error_propagates(self, echo):
        (self.temp_dir / 'broken.ppm').write_bytes(b'not an anymap')
        with self.assertRaises(AnymapFormatError):
            run_directory(self.temp_dir)


if __name__ == '__main__':
    unittest.main()
