"""Tests for occurrence file import (CSV, JSON, ZIP)."""

from __future__ import annotations

import io
import json
import zipfile
from pathlib import Path

import pytest

from gbif_explorer.datasources.imports import (
    ImportParseError,
    normalize_header,
    parse_occurrences_bytes,
    parse_occurrences_csv,
    parse_occurrences_file,
    parse_occurrences_json,
)
from gbif_explorer.renderers.csv_export import to_csv


class TestNormalizeHeader:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("decimal latitude", "decimalLatitude"),
            ("  Decimal   Longitude ", "decimalLongitude"),
            ("Latitude", "decimalLatitude"),
            ("scientific name", "scientificName"),
            ("eventDate", "eventDate"),
            ("my field", "myfield"),
        ],
    )
    def test_aliases(self, header: str, expected: str) -> None:
        assert normalize_header(header) == expected


class TestParseCsv:
    def test_drops_rows_without_latitude(self) -> None:
        text = (
            "scientificName,decimalLatitude,decimalLongitude\n"
            "Puma concolor,45.5,-122.6\n"
            "Lynx lynx,,15.0\n"
            "Vulpes vulpes,60.1,10.7\n"
        )
        records = parse_occurrences_csv(text)
        assert len(records) == 2
        assert [r["key"] for r in records] == [-1, -2]
        assert records[1]["scientificName"] == "Vulpes vulpes"
        assert records[0]["decimalLatitude"] == 45.5

    def test_semicolon_delimiter_and_aliases(self) -> None:
        text = "Scientific Name;Decimal Latitude;Decimal Longitude;Event Date\nA b;1,5;2;2020-06-01\n"
        records = parse_occurrences_csv(text)
        assert len(records) == 1
        assert records[0]["decimalLatitude"] == 1.5
        assert records[0]["eventDate"] == "2020-06-01"
        assert records[0]["year"] == 2020

    def test_tab_delimiter(self) -> None:
        text = "decimalLatitude\tdecimalLongitude\tyear\tmonth\n10\t20\t2019\t7\n"
        records = parse_occurrences_csv(text)
        assert records == [
            {"key": -1, "decimalLatitude": 10.0, "decimalLongitude": 20.0, "year": 2019, "month": 7}
        ]

    def test_out_of_range_coordinates_dropped(self) -> None:
        text = "decimalLatitude,decimalLongitude\n91,0\n0,181\n0,0\n"
        assert len(parse_occurrences_csv(text)) == 1

    def test_quoted_field_with_comma(self) -> None:
        text = 'scientificName,decimalLatitude,decimalLongitude\n"Puma concolor (Linnaeus, 1771)",1,2\n'
        records = parse_occurrences_csv(text)
        assert records[0]["scientificName"] == "Puma concolor (Linnaeus, 1771)"

    def test_header_only(self) -> None:
        assert parse_occurrences_csv("decimalLatitude,decimalLongitude\n") == []

    def test_semicolon_decimal_commas(self) -> None:
        records = parse_occurrences_csv("decimalLatitude;decimalLongitude\n59,91;10,75\n")
        assert len(records) == 1
        assert records[0]["decimalLatitude"] == 59.91
        assert records[0]["decimalLongitude"] == 10.75

    def test_comma_delimited_thousands_separator(self) -> None:
        records = parse_occurrences_csv('decimalLatitude,decimalLongitude,year\n1,2,"2,019"\n')
        assert records[0]["year"] == 2019

    def test_multiline_quoted_field(self) -> None:
        text = 'decimalLatitude,decimalLongitude,locality\n1,2,"Line one\n\nLine three"\n\n3,4,x\n'
        records = parse_occurrences_csv(text)
        assert [r["locality"] for r in records] == ["Line one\n\nLine three", "x"]

    def test_export_reimports_intact(self) -> None:
        exported = [
            {
                "key": -1,
                "scientificName": 'Lynx "the" lynx',
                "decimalLatitude": 59.91,
                "decimalLongitude": 10.75,
                "locality": "Oslo, Norway\n\nnear the fjord",
            }
        ]
        (record,) = parse_occurrences_csv(to_csv(exported))
        assert record["scientificName"] == 'Lynx "the" lynx'
        assert record["locality"] == "Oslo, Norway\n\nnear the fjord"
        assert record["decimalLatitude"] == 59.91
        assert record["decimalLongitude"] == 10.75


class TestParseJson:
    def test_array(self) -> None:
        data = [
            {"key": 555, "decimalLatitude": 1, "decimalLongitude": 2, "scientificName": "X y"},
            {"decimalLatitude": 3, "decimalLongitude": 4},
            {"decimalLatitude": None, "decimalLongitude": 4},
        ]
        records = parse_occurrences_json(json.dumps(data))
        assert [r["key"] for r in records] == [555, -1]

    def test_results_wrapper(self) -> None:
        text = json.dumps({"results": [{"decimalLatitude": "1.5", "decimalLongitude": "2.5"}]})
        records = parse_occurrences_json(text)
        assert records[0]["decimalLatitude"] == 1.5

    def test_negative_key_replaced(self) -> None:
        text = json.dumps([{"key": -9, "decimalLatitude": 1, "decimalLongitude": 2}])
        assert parse_occurrences_json(text)[0]["key"] == -1

    def test_invalid_json(self) -> None:
        assert parse_occurrences_json("{nope") == []

    def test_year_from_event_date(self) -> None:
        text = json.dumps([{"decimalLatitude": 1, "decimalLongitude": 2, "eventDate": "2018"}])
        record = parse_occurrences_json(text)[0]
        assert record["year"] == 2018
        assert "month" not in record


class TestParseBytes:
    def test_zip_with_csv(self) -> None:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("meta.xml", "<x/>")
            zf.writestr("occurrence.csv", "decimalLatitude,decimalLongitude\n1,2\n")
        records = parse_occurrences_bytes(buf.getvalue(), "download.zip")
        assert len(records) == 1

    def test_zip_with_json(self) -> None:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("data.json", json.dumps([{"decimalLatitude": 1, "decimalLongitude": 2}]))
        assert len(parse_occurrences_bytes(buf.getvalue(), "export.zip")) == 1

    def test_bad_zip(self) -> None:
        with pytest.raises(ImportParseError, match="not a valid ZIP"):
            parse_occurrences_bytes(b"not a zip", "broken.zip")

    def test_no_usable_rows(self) -> None:
        with pytest.raises(ImportParseError, match="No occurrences"):
            parse_occurrences_bytes(b"a,b\n1,2\n", "empty.csv")

    def test_unknown_extension_tries_json_then_csv(self) -> None:
        csv_bytes = b"decimalLatitude,decimalLongitude\n1,2\n"
        assert len(parse_occurrences_bytes(csv_bytes, "records.dat")) == 1

    def test_utf8_bom_stripped(self) -> None:
        data = "\ufeffdecimalLatitude,decimalLongitude\n1,2\n".encode()
        assert parse_occurrences_bytes(data, "bom.csv")[0]["decimalLatitude"] == 1.0


class TestParseFile:
    def test_reads_from_disk(self, tmp_path: Path) -> None:
        path = tmp_path / "obs.csv"
        path.write_text("latitude,longitude,scientificName\n59.3,18.1,Pica pica\n")
        records = parse_occurrences_file(path)
        assert records[0]["scientificName"] == "Pica pica"
        assert records[0]["key"] == -1

    def test_parse_error_for_garbage(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("hello world\n")
        with pytest.raises(ImportParseError):
            parse_occurrences_file(path)
