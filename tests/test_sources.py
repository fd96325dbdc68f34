"""
Tests for catalog source resolution (remote sheet -> local file -> nothing).

HTTP is mocked: no network access during tests.
"""

import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from coursecart.errors import NoDataAvailable
from coursecart.normalize import normalize_rows
from coursecart.sources import LocalSource, RemoteSource, build_sources, resolve


CSV_TWO_ROWS = "Course,Term,Section\nMATH 101,Fall 2025,001\nENGL 101,Fall 2025,010\n"


def _response(status: int, text: str = "") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = "https://example.test/sheet.csv"
    return resp


class TestResolve(unittest.IsolatedAsyncioTestCase):
    async def test_remote_success(self) -> None:
        with mock.patch("coursecart.sources.requests.get", return_value=_response(200, CSV_TWO_ROWS)) as get:
            resolved = await resolve([RemoteSource("https://example.test/sheet.csv")])
        get.assert_called_once()
        self.assertEqual(resolved.source_label, "remote")
        self.assertEqual(resolved.header, ["Course", "Term", "Section"])
        self.assertEqual(len(resolved.rows), 2)

    async def test_remote_404_falls_back_to_local(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "courses.csv"
            p.write_text(CSV_TWO_ROWS, encoding="utf-8")
            sources = [RemoteSource("https://example.test/sheet.csv"), LocalSource(p)]
            with mock.patch("coursecart.sources.requests.get", return_value=_response(404)) as get:
                resolved = await resolve(sources)

        get.assert_called_once()
        self.assertEqual(resolved.source_label, "local")
        records = normalize_rows(resolved.header, resolved.rows)
        self.assertEqual(len(records), 2)
        self.assertEqual(records[1].course, "ENGL 101")

    async def test_transport_error_falls_back(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "courses.csv"
            p.write_text(CSV_TWO_ROWS, encoding="utf-8")
            err = requests.ConnectionError("offline")
            with mock.patch("coursecart.sources.requests.get", side_effect=err):
                resolved = await resolve([RemoteSource("https://example.test/x"), LocalSource(p)])
        self.assertEqual(resolved.source_label, "local")

    async def test_header_only_source_is_not_accepted(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "courses.csv"
            p.write_text(CSV_TWO_ROWS, encoding="utf-8")
            with mock.patch("coursecart.sources.requests.get", return_value=_response(200, "Course,Term\n")):
                resolved = await resolve([RemoteSource("https://example.test/x"), LocalSource(p)])
        self.assertEqual(resolved.source_label, "local")

    async def test_all_sources_fail(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            missing = Path(d) / "missing.csv"
            with mock.patch("coursecart.sources.requests.get", return_value=_response(500)):
                with self.assertRaises(NoDataAvailable) as ctx:
                    await resolve([RemoteSource("https://example.test/x"), LocalSource(missing)])
        self.assertEqual([f.label for f in ctx.exception.failures], ["remote", "local"])

    async def test_no_sources(self) -> None:
        with self.assertRaises(NoDataAvailable):
            await resolve([])

    async def test_one_attempt_per_source(self) -> None:
        with mock.patch("coursecart.sources.requests.get", return_value=_response(503)) as get:
            with self.assertRaises(NoDataAvailable):
                await resolve([RemoteSource("https://example.test/x")])
        self.assertEqual(get.call_count, 1)


class TestBuildSources(unittest.TestCase):
    def test_remote_skipped_without_url(self) -> None:
        sources = build_sources(sheet_url="", local_csv="courses.csv")
        self.assertEqual([s.label for s in sources], ["local"])

    def test_priority_order(self) -> None:
        sources = build_sources(sheet_url="https://example.test/x", local_csv="courses.csv")
        self.assertEqual([s.label for s in sources], ["remote", "local"])

    def test_relative_local_path_uses_base_dir(self) -> None:
        src = LocalSource("courses.csv", base_dir=Path("/srv/data"))
        self.assertEqual(src.path, Path("/srv/data/courses.csv"))


if __name__ == "__main__":
    unittest.main()
