"""
Tests for the export flow module.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import pytest

from gbif_explorer.datasources.gbif.occurrences import OccurrencePage
from gbif_explorer.flows import export
from gbif_explorer.geometry import Bounds
from gbif_explorer.schemas import OccurrenceFilters

if TYPE_CHECKING:
    from pathlib import Path


def api_page(results: list[dict[str, object]], count: int | None = None) -> OccurrencePage:
    return OccurrencePage(
        offset=0,
        limit=len(results),
        end_of_records=True,
        count=len(results) if count is None else count,
        results=results,
    )


API_RECORDS = [
    {"key": 101, "scientificName": "Lynx lynx", "decimalLatitude": 60.0, "decimalLongitude": 10.0, "year": 2020, "month": 3},
    {"key": 102, "scientificName": "Lynx lynx", "decimalLatitude": 61.0, "decimalLongitude": 11.0, "year": 2021, "month": 5},
]  # fmt: skip


class TestResolveBounds:
    def test_bbox(self) -> None:
        bounds, name = export.resolve_bounds(None, [10, 58, 20, 62])
        assert bounds == Bounds(west=10, south=58, east=20, north=62)
        assert name == "Custom bounding box"

    def test_region(self) -> None:
        bounds, name = export.resolve_bounds("africa", None)
        assert name == "Africa"
        assert bounds is not None
        assert bounds.north == 37

    def test_unknown_region(self) -> None:
        with pytest.raises(ValueError, match="Unknown region"):
            export.resolve_bounds("atlantis", None)

    def test_nothing(self) -> None:
        assert export.resolve_bounds(None, None) == (None, None)


class TestFetchOccurrences:
    @patch("gbif_explorer.flows.export.make_client")
    @patch("gbif_explorer.flows.export.fetch_up_to")
    def test_returns_count_and_results(self, mock_fetch: Mock, mock_client: Mock) -> None:
        mock_fetch.return_value = api_page(API_RECORDS, count=5000)
        filters = OccurrenceFilters(taxon_key=212)

        result = export.fetch_occurrences(filters, 2)

        assert result == {"count": 5000, "results": API_RECORDS}
        mock_fetch.assert_called_once_with(mock_client.return_value, filters, 2)


class TestLoadImports:
    def test_later_files_continue_key_sequence(self, tmp_path: Path) -> None:
        first = tmp_path / "a.csv"
        first.write_text("decimalLatitude,decimalLongitude\n1,2\n3,4\n", encoding="utf-8")
        second = tmp_path / "b.csv"
        second.write_text("decimalLatitude,decimalLongitude\n5,6\n", encoding="utf-8")

        records = export.load_imports([str(first), str(second)])

        assert [r["key"] for r in records] == [-1, -2, -3]

    def test_no_files(self) -> None:
        assert export.load_imports([]) == []


class TestWriteExport:
    def test_creates_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "out.csv"
        assert export.write_export("a,b", target) == target
        assert target.read_text(encoding="utf-8") == "a,b"


class TestExportFlow:
    """Test the export flow end to end with the fetch mocked out."""

    @patch("gbif_explorer.flows.export.make_client")
    @patch("gbif_explorer.flows.export.fetch_up_to")
    def test_writes_default_formats(self, mock_fetch: Mock, _client: Mock, tmp_path: Path) -> None:
        mock_fetch.return_value = api_page(API_RECORDS, count=40)

        result = export.export_occurrences(
            region="europe", taxon_keys=[212], continent="EUROPE", out_dir=str(tmp_path)
        )

        assert result["fetched"] == 2
        assert result["total_count"] == 40
        assert result["exported"] == 2
        assert set(result["outputs"]) == {"geojson", "csv"}
        geojson = json.loads((tmp_path / "gbif-occurrences.geojson").read_text(encoding="utf-8"))
        assert len(geojson["features"]) == 2
        csv_text = (tmp_path / "gbif-occurrences.csv").read_text(encoding="utf-8")
        assert csv_text.splitlines()[0].startswith("key,scientificName")

        filters = mock_fetch.call_args.args[1]
        assert filters.taxon_keys == (212,)
        assert filters.continent == "EUROPE"
        assert filters.geometry is not None
        assert filters.geometry.startswith("POLYGON((")

    @patch("gbif_explorer.flows.export.fetch_up_to")
    def test_without_taxon_only_imports(self, mock_fetch: Mock, tmp_path: Path) -> None:
        imported = tmp_path / "local.csv"
        imported.write_text("decimalLatitude,decimalLongitude,year\n1,2,2020\n", encoding="utf-8")

        result = export.export_occurrences(
            imports=[str(imported)], out_dir=str(tmp_path / "out"), formats=["csv"]
        )

        mock_fetch.assert_not_called()
        assert result["fetched"] == 0
        assert result["imported"] == 1
        assert result["exported"] == 1
        assert (tmp_path / "out" / "gbif-occurrences.csv").exists()

    @patch("gbif_explorer.flows.export.make_client")
    @patch("gbif_explorer.flows.export.fetch_up_to")
    def test_timeline_and_report(self, mock_fetch: Mock, _client: Mock, tmp_path: Path) -> None:
        mock_fetch.return_value = api_page(API_RECORDS)

        result = export.export_occurrences(
            bbox=[5, 55, 15, 65],
            taxon_keys=[212],
            year=2020,
            month=3,
            out_dir=str(tmp_path),
            formats=["report"],
        )

        assert result["exported"] == 1
        html = (tmp_path / "gbif-occurrences.html").read_text(encoding="utf-8")
        assert "Lynx lynx" in html
        assert "Custom bounding box" in html

    def test_unknown_format(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unknown export format"):
            export.export_occurrences(taxon_keys=[212], out_dir=str(tmp_path), formats=["pdf"])
