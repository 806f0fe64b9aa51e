"""Tests for merging and exporting scraped profiles."""

import asyncio
from datetime import datetime

import orjson
import pytest

from bni_scraper.output import (
    COLUMNS,
    CSVExporter,
    SnapshotWriter,
    XLSXExporter,
    build_snapshot,
    merge_profiles,
)
from bni_scraper.orchestration.scheduler import RunResult, RunStatus
from bni_scraper.types.profiles import MergedProfile, ProfileRecord
from bni_scraper.types.targets import TargetOutcome

from fakes import make_listing


def sample_outcomes(listing):
    targets = listing.targets
    return [
        TargetOutcome.failure(
            targets[2], error="No data extracted", error_type="TargetNoData", attempts=3
        ),
        TargetOutcome.success(
            targets[0],
            ProfileRecord(name="Ada Lovelace", phone1="555-0100", email="ada@example.com"),
            attempts=1,
        ),
        TargetOutcome.success(
            targets[1],
            ProfileRecord(name="Grace Hopper", about='Says "hello", often'),
            attempts=2,
        ),
    ]


class TestMergeProfiles:
    def test_rows_follow_listing_order(self):
        listing = make_listing(3)

        rows = merge_profiles(listing, sample_outcomes(listing))

        assert [r.name for r in rows] == ["Member 0", "Member 1", "Member 2"]
        assert rows[0].detailed_name == "Ada Lovelace"
        assert rows[0].phone_no == "555-0100"
        assert rows[0].industry_tag == "Consulting"
        assert rows[0].connect == "+"

    def test_failed_target_has_empty_detail_columns(self):
        listing = make_listing(3)

        rows = merge_profiles(listing, sample_outcomes(listing))

        failed = rows[2]
        assert failed.company == "Company 2"
        assert failed.detailed_name == ""
        assert failed.detailed_email == ""

    def test_unresolved_targets_left_out(self):
        listing = make_listing(5)

        rows = merge_profiles(listing, sample_outcomes(listing))

        assert len(rows) == 3


class TestCSVExporter:
    def test_header_and_quoting(self):
        listing = make_listing(3)
        rows = merge_profiles(listing, sample_outcomes(listing))

        content = CSVExporter().render(rows)
        lines = content.split("\n")

        assert lines[0].startswith('"NAME","PROFILE LINK","CHAPTER"')
        assert lines[0].endswith('"KEYWORD","OTHER"')
        assert len(lines) == 4
        assert all(line.startswith('"') and line.endswith('"') for line in lines)
        assert '"Says ""hello"", often"' in lines[2]
        assert not content.endswith("\n")

    def test_every_column_present(self):
        content = CSVExporter().render([MergedProfile(name="Solo")])
        header, row = content.split("\n")

        assert header.count(",") == len(COLUMNS) - 1
        assert row.count('","') == len(COLUMNS) - 1

    def test_write_to_output_dir(self, tmp_path):
        listing = make_listing(3)
        rows = merge_profiles(listing, sample_outcomes(listing))

        path = CSVExporter(tmp_path / "exports").write(rows, "BNI-test.csv")

        assert path == tmp_path / "exports" / "BNI-test.csv"
        assert path.read_text(encoding="utf-8").startswith('"NAME"')


class TestXLSXExporter:
    def test_writes_workbook(self, tmp_path):
        listing = make_listing(3)
        rows = merge_profiles(listing, sample_outcomes(listing))

        path = XLSXExporter(tmp_path).write(rows, "BNI-test.xlsx")

        assert path.exists()
        # xlsx files are zip archives
        assert path.read_bytes()[:2] == b"PK"


class TestSnapshotWriter:
    def test_snapshot_contents(self, tmp_path):
        listing = make_listing(3)
        outcomes = sorted(sample_outcomes(listing), key=lambda o: o.target.index)
        result = RunResult(
            started_at=datetime(2024, 12, 1, 9, 0, 0),
            completed_at=datetime(2024, 12, 1, 9, 0, 30),
            total_targets=4,
            outcomes=outcomes,
            status=RunStatus.CANCELLED,
            pacing={"short_pauses": 0},
        )
        snapshot = build_snapshot(
            result, batch_size=5, directory_url=listing.url, files={"csv": "BNI-x.csv"}
        )

        path = asyncio.run(SnapshotWriter(tmp_path).write(snapshot, "BNI-x.json"))
        data = orjson.loads(path.read_bytes())

        assert data["directory_url"] == listing.url
        assert data["statistics"]["succeeded"] == 2
        assert data["statistics"]["failed"] == 1
        assert data["statistics"]["unresolved"] == 1
        assert data["statistics"]["cancelled"] is True
        assert data["statistics"]["duration_seconds"] == 30.0
        assert data["statistics"]["average_seconds_per_profile"] == 10.0
        assert data["files"] == {"csv": "BNI-x.csv"}
        assert data["failures"][0]["profile_number"] == 3
        assert data["failures"][0]["error_type"] == "TargetNoData"
        assert data["started_at"].startswith("2024-12-01T09:00:00")

    def test_creates_output_dir(self, tmp_path):
        result = RunResult(total_targets=0, completed_at=datetime.now())
        snapshot = build_snapshot(result, batch_size=5)

        path = asyncio.run(SnapshotWriter(tmp_path / "new").write(snapshot, "s.json"))

        assert path.exists()
