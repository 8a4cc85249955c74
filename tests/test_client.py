"""Tests for areafinder.client module."""

from pathlib import Path

import pytest

from areafinder import AreaFinder
from areafinder.exceptions import DirectoryNotFound, MalformedAreaCode
from areafinder.models import CoverageResult, SearchResult
from areafinder.redirect import AREA_REDIRECT_DELAY


@pytest.fixture()
def finder(directory) -> AreaFinder:
    return AreaFinder(directory)


class TestSearch:
    def test_ranked_result(self, finder: AreaFinder):
        result = finder.search("wells")
        assert isinstance(result, SearchResult)
        assert result.areas[0].town == "Wells"
        assert result.no_matches is False

    def test_no_matches_flag(self, finder: AreaFinder):
        result = finder.search("zzz")
        assert len(result) == 0
        assert result.no_matches is True

    def test_empty_query_is_not_no_matches(self, finder: AreaFinder):
        result = finder.search("  ")
        assert result.areas == ()
        assert result.no_matches is False

    def test_browse_when_empty(self, finder: AreaFinder):
        result = finder.search("", browse_when_empty=True)
        assert result.areas == finder.areas[:8]

    def test_browse_only_applies_to_empty_query(self, finder: AreaFinder):
        result = finder.search("ba16", browse_when_empty=True)
        assert [a.code for a in result] == ["BA16"]

    def test_first_match(self, finder: AreaFinder):
        assert finder.first_match("bridg").town == "Bridgwater"
        assert finder.first_match("zzz") is None

    def test_to_dict(self, finder: AreaFinder):
        d = finder.search("street").to_dict()
        assert d["query"] == "street"
        assert d["no_matches"] is False
        assert [a["town"] for a in d["areas"]] == ["Street", "Glastonbury"]


class TestCoverage:
    def test_covered(self, finder: AreaFinder):
        result = finder.check_coverage("ta6 3xy")
        assert result == CoverageResult(True, "Bridgwater", "TA6")

    def test_not_covered(self, finder: AreaFinder):
        assert finder.check_coverage("ZZ99").covered is False


class TestLookup:
    def test_get_by_id(self, finder: AreaFinder):
        assert finder.get("TA-TA6/7").town == "Bridgwater"
        assert finder.get("XX-1") is None


class TestController:
    def test_bound_to_booking_path(self, directory, scheduler, navigations):
        finder = AreaFinder(directory, booking_path="/quote")
        controller = finder.controller(navigations.append, scheduler=scheduler)
        controller.select(finder.first_match("yeovil"))
        scheduler.advance(AREA_REDIRECT_DELAY)
        assert len(navigations) == 1
        assert navigations[0].startswith("/quote?intent=quote&postcode=BA20")


class TestConstruction:
    def test_default_uses_bundled_data(self):
        finder = AreaFinder()
        assert len(finder.areas) == 35
        assert finder.check_coverage("DT9 3PL").district_name == "Sherborne"

    def test_from_path(self, directory_file: Path):
        finder = AreaFinder(directory_file)
        assert finder.directory.source == str(directory_file)
        assert finder.search("ba21").areas[0].town == "Yeovil"

    def test_missing_path(self, tmp_path: Path):
        with pytest.raises(DirectoryNotFound):
            AreaFinder(tmp_path / "missing.json")

    def test_malformed_data_fails_at_start(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text(
            '{"groups": [{"prefix": "BA", "name": "Bath", '
            '"areas": [{"code": "BA5/abc", "town": "Wells"}]}]}',
            encoding="utf-8",
        )
        with pytest.raises(MalformedAreaCode):
            AreaFinder(path)


class TestHealthCheck:
    def test_healthy(self, finder: AreaFinder):
        status = finder.health_check()
        assert status["healthy"] is True
        assert status["groups"] == 2
        assert status["areas"] == 6
        assert status["districts"] == 9
