"""Tests for profile and target models."""

from bni_scraper.types.profiles import DashboardProfile, MergedProfile, ProfileRecord
from bni_scraper.types.targets import Target, build_targets


class TestProfileModels:
    def test_record_from_page_data(self):
        record = ProfileRecord.model_validate(
            {"name": "  Ada  ", "postalCode": " 12345 ", "phone1": None, "unknown": "x"}
        )

        assert record.name == "Ada"
        assert record.postal_code == "12345"
        assert record.phone1 == ""
        assert not record.is_empty

    def test_empty_record(self):
        assert ProfileRecord.model_validate({"name": "", "email": "   "}).is_empty

    def test_dashboard_alias(self):
        row = DashboardProfile.model_validate(
            {"name": "Ada", "profileLink": "https://example.test/ada", "connect": "+"}
        )

        assert row.profile_link == "https://example.test/ada"

    def test_merged_without_listing_row(self):
        merged = MergedProfile.from_parts(None, ProfileRecord(name="Ada"), url="https://x")

        assert merged.profile_link == "https://x"
        assert merged.detailed_name == "Ada"
        assert merged.connect == "+"


class TestTargets:
    def test_profile_number(self):
        assert Target(index=0, url="u").profile_number == 1

    def test_build_targets_keeps_positions(self):
        targets = build_targets(["a", "", "  ", "d"])

        assert [(t.index, t.url) for t in targets] == [(0, "a"), (3, "d")]

    def test_start_index(self):
        assert [t.index for t in build_targets(["a", "b"], start_index=10)] == [10, 11]
