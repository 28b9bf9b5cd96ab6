"""Tests for listing presentation decisions, sorting and collection."""

from __future__ import annotations

import logging
import os
import tempfile
import unittest
from dataclasses import replace
from pathlib import Path

from gls.columnize import Color
from gls.config import ListingConfig
from gls.errors import SymlinkResolutionError, TimeParseError
from gls.file_model import FileRecord, StorageState, xattr_oracle
from gls.listing import Listing, ListingRequest, build_request, sort_records

BASE_RECORD = FileRecord(
    name="file.dat",
    path="/gpfs/themis/file.dat",
    is_directory=False,
    is_symlink=False,
    is_regular=True,
    permission_string="-rw-r--r--",
    owner="root",
    group="root",
    size_bytes=45,
    modified_at="Mar 31 04:28 2021",
)


def _record(**overrides) -> FileRecord:
    return replace(BASE_RECORD, **overrides)


def _listing(**flags) -> Listing:
    return Listing(ListingRequest(paths=[], **flags), ListingConfig(), oracle=lambda _path: 0)


class PresentTests(unittest.TestCase):
    def test_directories_are_blue_or_plain(self) -> None:
        record = _record(name="sub", is_directory=True, is_regular=False, permission_string="drwxr-xr-x")
        self.assertEqual(_listing().present(record, "/gpfs/themis"), ("sub", Color.BLUE))
        self.assertEqual(_listing(no_color=True).present(record, "/gpfs/themis"), ("sub", Color.RESET))

    def test_storage_states_map_to_colors(self) -> None:
        listing = _listing()
        cases = {
            StorageState.RESIDENT: Color.GREEN,
            StorageState.PREMIGRATED: Color.YELLOW,
            StorageState.MIGRATED: Color.RED,
            StorageState.UNKNOWN: Color.RESET,
        }
        for state, color in cases.items():
            with self.subTest(state=state):
                self.assertEqual(listing.present(_record(storage_state=state), "/b"), ("file.dat", color))

    def test_no_color_mode_annotates_storage_state(self) -> None:
        listing = _listing(no_color=True)
        self.assertEqual(
            listing.present(_record(storage_state=StorageState.RESIDENT), "/b"),
            ("(Resident) file.dat", Color.RESET),
        )
        self.assertEqual(
            listing.present(_record(storage_state=StorageState.PREMIGRATED), "/b"),
            ("(Premigrated) file.dat", Color.RESET),
        )
        self.assertEqual(
            listing.present(_record(storage_state=StorageState.MIGRATED), "/b"),
            ("(Migrated) file.dat", Color.RESET),
        )
        self.assertEqual(listing.present(_record(), "/b"), ("file.dat", Color.RESET))

    def test_configured_labels_replace_default_annotations(self) -> None:
        config = ListingConfig(state_labels={"resident": "Disk", "premigrated": "Both", "migrated": "Tape"})
        listing = Listing(ListingRequest(paths=[], no_color=True), config, oracle=lambda _path: 0)
        self.assertEqual(
            listing.present(_record(storage_state=StorageState.MIGRATED), "/b"),
            ("(Tape) file.dat", Color.RESET),
        )

    def test_oversize_overrides_storage_state(self) -> None:
        record = _record(storage_state=StorageState.MIGRATED, oversize_for_migration=True)
        self.assertEqual(_listing().present(record, "/b"), ("file.dat", Color.BLINKING_RED_BACKGROUND))
        self.assertEqual(
            _listing(no_color=True).present(record, "/b"),
            ("(TOO LARGE TO MIGRATE) file.dat", Color.RESET),
        )

    def test_symlink_target_is_rewritten_relative_to_base(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = str(Path(tmp).resolve())
            Path(base, "target.txt").write_text("x", encoding="utf-8")
            os.symlink(os.path.join(base, "target.txt"), os.path.join(base, "link"))
            record = _record(name="link", is_symlink=True, is_regular=False, permission_string="lrwxrwxrwx")

            long_text = _listing(long=True).present(record, base)
            short_text = _listing().present(record, base)

        self.assertEqual(long_text, ("link -> ./target.txt", Color.LIGHT_BLUE))
        self.assertEqual(short_text, ("link", Color.LIGHT_BLUE))

    def test_symlink_outside_base_keeps_absolute_target(self) -> None:
        with tempfile.TemporaryDirectory() as outside, tempfile.TemporaryDirectory() as tmp:
            outside_target = os.path.join(str(Path(outside).resolve()), "elsewhere.txt")
            Path(outside_target).write_text("x", encoding="utf-8")
            base = str(Path(tmp).resolve())
            os.symlink(outside_target, os.path.join(base, "link"))
            record = _record(name="link", is_symlink=True, is_regular=False, permission_string="lrwxrwxrwx")

            text, color = _listing(long=True, no_color=True).present(record, base)

        self.assertEqual(text, f"link -> {outside_target}")
        self.assertIs(color, Color.RESET)

    def test_broken_symlink_is_fatal_in_every_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = str(Path(tmp).resolve())
            os.symlink(os.path.join(base, "nowhere"), os.path.join(base, "dangling"))
            record = _record(name="dangling", is_symlink=True, is_regular=False, permission_string="lrwxrwxrwx")
            for flags in ({"long": True}, {}, {"no_color": True}):
                with self.subTest(**flags):
                    with self.assertRaises(SymlinkResolutionError):
                        _listing(**flags).present(record, base)

    def test_short_mode_shows_only_the_link_name(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = str(Path(tmp).resolve())
            Path(base, "target.txt").write_text("t", encoding="utf-8")
            os.symlink(os.path.join(base, "target.txt"), os.path.join(base, "link"))
            record = _record(name="link", is_symlink=True, is_regular=False, permission_string="lrwxrwxrwx")

            self.assertEqual(_listing().present(record, base), ("link", Color.LIGHT_BLUE))


class SortTests(unittest.TestCase):
    def test_sort_by_name_is_idempotent(self) -> None:
        records = [_record(name=name) for name in ("c", "a", "b")]
        sort_records(records, by_time=False)
        once = [record.name for record in records]
        sort_records(records, by_time=False)
        self.assertEqual(once, ["a", "b", "c"])
        self.assertEqual([record.name for record in records], once)

    def test_sort_by_time_orders_oldest_first(self) -> None:
        records = [
            _record(name="new", modified_at="Jan 02 10:00 2024"),
            _record(name="old", modified_at="Dec 31 23:59 2019"),
            _record(name="mid", modified_at="Jun 15 08:30 2021"),
        ]
        sort_records(records, by_time=True)
        once = [record.name for record in records]
        sort_records(records, by_time=True)
        self.assertEqual(once, ["old", "mid", "new"])
        self.assertEqual([record.name for record in records], once)

    def test_unparseable_time_is_fatal(self) -> None:
        records = [_record(name="a"), _record(name="b", modified_at="yesterday")]
        with self.assertRaises(TimeParseError):
            sort_records(records, by_time=True)

    def test_sort_keeps_group_order(self) -> None:
        listing = _listing()
        listing.groups = {
            "/z": [_record(name="b"), _record(name="a")],
            "/a": [_record(name="d"), _record(name="c")],
        }
        listing.sort()
        self.assertEqual(list(listing.groups), ["/z", "/a"])
        self.assertEqual([record.name for record in listing.groups["/z"]], ["a", "b"])


class CollectTests(unittest.TestCase):
    def test_file_arguments_in_one_directory_share_a_group(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = str(Path(tmp).resolve())
            first = os.path.join(root, "one.txt")
            second = os.path.join(root, "two.txt")
            Path(first).write_text("1", encoding="utf-8")
            Path(second).write_text("2", encoding="utf-8")
            sub = os.path.join(root, "sub")
            os.mkdir(sub)
            listing = Listing(ListingRequest(paths=[sub, first, second]), ListingConfig(), oracle=lambda _p: 0)

            error = listing.collect()

        self.assertIsNone(error)
        self.assertEqual(list(listing.groups), [sub, root])
        self.assertEqual(listing.groups[sub], [])
        self.assertEqual([record.name for record in listing.groups[root]], ["one.txt", "two.txt"])

    def test_debug_request_raises_package_log_level(self) -> None:
        package_logger = logging.getLogger("gls")
        self.addCleanup(package_logger.setLevel, package_logger.level)
        package_logger.setLevel(logging.WARNING)

        _listing()
        self.assertEqual(package_logger.level, logging.WARNING)
        _listing(debug=True)
        self.assertEqual(package_logger.level, logging.DEBUG)

    def test_collect_stops_at_first_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = str(Path(tmp).resolve())
            missing = os.path.join(root, "missing")
            listing = Listing(ListingRequest(paths=[missing, root]), ListingConfig(), oracle=lambda _p: 0)
            error = listing.collect()

        self.assertIsNotNone(error)
        self.assertEqual(listing.groups, {})

    def test_default_oracle_comes_from_config(self) -> None:
        listing = Listing(ListingRequest(paths=[]), ListingConfig())
        self.assertIs(listing.scheduler.oracle, xattr_oracle)

    def test_build_request_fills_eligibility(self) -> None:
        request = build_request(["/gpfs/themis/x", "/tmp"], ListingConfig(), long=True)
        self.assertTrue(request.long)
        self.assertEqual(request.eligible, {"/gpfs/themis/x": True, "/tmp": False})


if __name__ == "__main__":
    unittest.main()
