"""Tests for predefined regions and taxon presets."""

from __future__ import annotations

from gbif_explorer.reference import (
    IUCN_CATEGORIES,
    REGIONS,
    TAXON_CLASS_KEYS,
    get_region,
    get_region_bounds,
)


class TestRegions:
    def test_ids_unique(self) -> None:
        ids = [r.id for r in REGIONS]
        assert len(ids) == len(set(ids))

    def test_bounds_well_formed(self) -> None:
        for region in REGIONS:
            b = region.bounds
            assert -180 <= b.west < b.east <= 180, region.id
            assert -90 <= b.south < b.north <= 90, region.id

    def test_lookup(self) -> None:
        region = get_region("oceania")
        assert region is not None
        assert region.name == "Oceania"
        assert get_region_bounds("world") == get_region("world").bounds  # type: ignore[union-attr]
        assert get_region("fav-1") is None
        assert get_region_bounds("nowhere") is None


class TestTaxa:
    def test_presets_are_positive_keys(self) -> None:
        assert TAXON_CLASS_KEYS
        assert all(isinstance(k, int) and k > 0 for k in TAXON_CLASS_KEYS.values())

    def test_iucn_codes(self) -> None:
        assert "EN" in IUCN_CATEGORIES
