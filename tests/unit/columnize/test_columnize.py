"""Tests for color tags, the table writer and ANSI width helpers."""

from __future__ import annotations

import io
import unittest

from gls import ansi
from gls.columnize import Color, TableWriter, colorize, columnize_row


class ColorizeTests(unittest.TestCase):
    def test_colorize_wraps_text_in_sgr_sequences(self) -> None:
        self.assertEqual(colorize(Color.GREEN, "f"), "\x1b[000032mf\x1b[000000m")

    def test_reset_color_leaves_text_plain(self) -> None:
        self.assertEqual(colorize(Color.RESET, "f"), "f")

    def test_palette_covers_every_listing_color(self) -> None:
        self.assertEqual(
            {color.name for color in Color},
            {"RESET", "GREEN", "YELLOW", "RED", "BLUE", "LIGHT_BLUE", "BLINKING_RED_BACKGROUND"},
        )

    def test_columnize_row_tags_only_the_selected_cell(self) -> None:
        self.assertEqual(
            columnize_row(Color.RED, 1, ["a", "b", "c"]),
            ["a", ("b", Color.RED), "c"],
        )


class TableWriterTests(unittest.TestCase):
    def test_standard_mode_left_aligns_with_two_space_gutter(self) -> None:
        out = io.StringIO()
        writer = TableWriter.standard(out)
        writer.emit_row(["Blue:", "x"])
        writer.emit_row(["Light Blue:", "y"])
        writer.flush()
        self.assertEqual(out.getvalue(), "Blue:        x\nLight Blue:  y\n")

    def test_colored_cells_align_by_visible_width(self) -> None:
        out = io.StringIO()
        with TableWriter.standard(out) as writer:
            writer.emit_row([("Blue:", Color.BLUE), "x"])
            writer.emit_row(["Light Blue:", "y"])
        first, second = out.getvalue().splitlines()
        self.assertEqual(first, "\x1b[000034mBlue:\x1b[000000m        x")
        self.assertEqual(ansi.display_width(first), ansi.display_width(second))

    def test_right_aligned_mode_pads_on_the_left(self) -> None:
        out = io.StringIO()
        with TableWriter.right_aligned(out) as writer:
            writer.emit_row(["a", "bb", "name1"])
            writer.emit_row(["ccc", "d", "n2"])
        self.assertEqual(out.getvalue(), "   a bbname1\n ccc  dn2\n")

    def test_right_aligned_mode_discards_empty_columns(self) -> None:
        out = io.StringIO()
        with TableWriter.right_aligned(out) as writer:
            writer.emit_row(["", "x", "n"])
            writer.emit_row(["", "yy", "m"])
        self.assertEqual(out.getvalue(), "  xn\n yym\n")

    def test_last_cell_is_never_padded(self) -> None:
        out = io.StringIO()
        with TableWriter.standard(out) as writer:
            writer.emit_row(["short"])
            writer.emit_row(["a much longer name"])
        self.assertEqual(out.getvalue(), "short\na much longer name\n")

    def test_context_manager_flushes_on_error(self) -> None:
        out = io.StringIO()
        with self.assertRaises(RuntimeError):
            with TableWriter.standard(out) as writer:
                writer.emit_row(["kept"])
                raise RuntimeError("boom")
        self.assertEqual(out.getvalue(), "kept\n")

    def test_flush_resets_buffer(self) -> None:
        out = io.StringIO()
        writer = TableWriter.standard(out)
        writer.emit_row(["once"])
        writer.flush()
        writer.flush()
        self.assertEqual(out.getvalue(), "once\n")

    def test_control_bytes_in_names_are_escaped(self) -> None:
        out = io.StringIO()
        with TableWriter.standard(out) as writer:
            writer.emit_row([("bad\x07name", Color.GREEN)])
        self.assertEqual(out.getvalue(), "\x1b[000032mbad\\x07name\x1b[000000m\n")


class AnsiWidthTests(unittest.TestCase):
    def test_display_width_ignores_escape_sequences(self) -> None:
        self.assertEqual(ansi.display_width("\x1b[000031mab\x1b[000000m"), 2)

    def test_display_width_counts_wide_characters_twice(self) -> None:
        self.assertEqual(ansi.display_width("日本"), 4)
        self.assertEqual(ansi.display_width("é"), 1)

    def test_sanitize_leaves_plain_text_untouched(self) -> None:
        self.assertEqual(ansi.sanitize_terminal_text("plain.txt"), "plain.txt")
        self.assertEqual(ansi.sanitize_terminal_text("a\nb"), "a\\x0ab")


if __name__ == "__main__":
    unittest.main()
