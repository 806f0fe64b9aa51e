"""Tests for directory listings and output filenames."""

from datetime import datetime

from bni_scraper.extractors.directory import (
    DirectoryListing,
    build_filename,
    search_keyword,
)
from bni_scraper.types.profiles import DashboardProfile

WHEN = datetime(2024, 12, 1, 14, 5, 9)


class TestSearchKeyword:
    def test_query_parameter(self):
        url = "https://www.bni.example/en-US/findamember?chapter=Down%20Town!"
        assert search_keyword(url) == "downtown"

    def test_query_parameter_priority(self):
        url = "https://www.bni.example/find?city=Austin&search=Plumbers"
        assert search_keyword(url) == "plumbers"

    def test_unknown_parameters_ignored(self):
        url = "https://www.bni.example/find?page=2&sort=name"
        assert search_keyword(url) == "general"

    def test_page_filters_fallback(self):
        url = "https://www.bni.example/find"
        filters = {"input_0": "  ", "select_1": "Real Estate"}
        assert search_keyword(url, filters) == "realestate"

    def test_query_beats_page_filters(self):
        url = "https://www.bni.example/find?industry=Legal"
        assert search_keyword(url, {"chip_0": "Finance"}) == "legal"

    def test_unusable_values_fall_through(self):
        url = "https://www.bni.example/find?search=%21%21"
        assert search_keyword(url, {"chip_0": "Dental"}) == "general"


class TestBuildFilename:
    def test_format(self):
        assert build_filename("downtown", when=WHEN) == "BNI-downtown-20241201-140509.csv"

    def test_prefix_and_extension(self):
        name = build_filename("general", prefix="Export", extension="xlsx", when=WHEN)
        assert name == "Export-general-20241201-140509.xlsx"


class TestDirectoryListing:
    def make_listing(self):
        rows = [
            DashboardProfile(name="A", profile_link="https://example.test/a"),
            DashboardProfile(name="No link"),
            DashboardProfile(name="C", profile_link="https://example.test/c"),
        ]
        return DirectoryListing(url="https://www.bni.example/find?region=West", rows=rows)

    def test_targets_skip_rows_without_links(self):
        targets = self.make_listing().targets

        assert [t.index for t in targets] == [0, 2]
        assert [t.profile_number for t in targets] == [1, 3]

    def test_targets_ignore_blank_links(self):
        rows = [
            DashboardProfile(name="Blank", profile_link="   "),
            DashboardProfile(name="B", profile_link=" https://example.test/b "),
        ]
        targets = DirectoryListing(url="https://www.bni.example/find", rows=rows).targets

        assert [(t.index, t.url) for t in targets] == [(1, "https://example.test/b")]

    def test_limited(self):
        listing = self.make_listing()

        assert len(listing.limited(None)) == 2
        assert [t.index for t in listing.limited(1)] == [0]

    def test_row_for(self):
        listing = self.make_listing()
        target = listing.targets[1]

        assert listing.row_for(target).name == "C"

    def test_filename(self):
        assert self.make_listing().filename(when=WHEN) == "BNI-west-20241201-140509.csv"
