"""Tests for the archive location collector module."""

from unittest.mock import MagicMock

import pytest

from rubrik_prometheus_exporter.collectors import archive
from rubrik_prometheus_exporter.rubrikapi import client, types


@pytest.fixture
def mock_client() -> MagicMock:
    mock = MagicMock(spec=client.RubrikClient)
    mock.get_archive_locations.return_value = [
        types.ArchiveLocation(
            id="loc-1",
            name="s3",
            location_type="S3",
            is_active=True,
        ),
        types.ArchiveLocation(id="loc-2", name="nfs", location_type="NFS"),
    ]
    mock.get_data_location_usage.return_value = [
        types.DataLocationUsage(
            location_id="loc-1",
            data_archived=5000,
            data_downloaded=200,
            num_vms_archived=12,
        ),
    ]
    mock.get_archival_bandwidth.side_effect = lambda location_id, _range: (
        [types.TimeSeriesPoint(stat=1.0), types.TimeSeriesPoint(stat=3.5)]
        if location_id == "loc-1"
        else []
    )
    return mock


def test_fetch_bandwidth_per_location(mock_client: MagicMock):
    archive.fetch(mock_client, "-2h")

    calls = [c.args for c in mock_client.get_archival_bandwidth.call_args_list]
    assert calls == [("loc-1", "-2h"), ("loc-2", "-2h")]


def test_fetch_joins_usage_by_location(mock_client: MagicMock):
    result = {loc.id: loc for loc in archive.fetch(mock_client)}

    assert result["loc-1"].data_archived == 5000
    assert result["loc-1"].bandwidth == 3.5
    assert result["loc-1"].archived_objects["vm"] == 12
    # Location without usage or bandwidth data
    assert result["loc-2"].data_archived == 0
    assert result["loc-2"].bandwidth == 0.0
    assert result["loc-2"].archived_objects == {}


def test_generate_metrics(mock_client: MagicMock):
    metrics = {m.name: m for m in archive.generate_metrics(archive.fetch(mock_client))}

    active = {
        s.labels["location_id"]: s.value
        for s in metrics["rubrik_archive_location_active"].samples
    }
    assert active == {"loc-1": 1, "loc-2": 0}

    archived = metrics["rubrik_archive_data_archived_bytes"].samples
    assert {s.labels["location_name"]: s.value for s in archived} == {
        "s3": 5000,
        "nfs": 0,
    }

    objects = {
        s.labels["kind"]: s.value
        for s in metrics["rubrik_archive_objects_archived"].samples
        if s.labels["location_id"] == "loc-1"
    }
    assert set(objects) == set(archive.ARCHIVED_OBJECT_FIELDS)
    assert objects["vm"] == 12


def test_generate_metrics_no_locations():
    metrics = {m.name: m for m in archive.generate_metrics([])}

    assert all(m.samples == [] for m in metrics.values())
