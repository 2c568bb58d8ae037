"""Tests for the cluster storage collector module."""

from unittest.mock import MagicMock

import pytest

from rubrik_prometheus_exporter.collectors import storage
from rubrik_prometheus_exporter.rubrikapi import client, types


@pytest.fixture
def mock_client() -> MagicMock:
    mock = MagicMock(spec=client.RubrikClient)
    mock.get_system_storage.return_value = types.SystemStorage(
        total=1000,
        used=600,
        available=400,
        snapshot=300,
        live_mount=50,
        miscellaneous=20,
    )
    mock.get_physical_ingest.return_value = [
        types.TimeSeriesPoint(time="t0", stat=10.0),
        types.TimeSeriesPoint(time="t1", stat=25.0),
    ]
    mock.get_stream_count.return_value = 4
    mock.get_runway_remaining.return_value = 120
    mock.get_average_storage_growth_per_day.return_value = 2048
    return mock


def test_fetch_combines_storage_sources(mock_client: MagicMock):
    result = storage.fetch(mock_client, "-5min")

    mock_client.get_physical_ingest.assert_called_once_with("-5min")
    assert result == storage.StorageMetric(
        total=1000,
        used=600,
        available=400,
        snapshot=300,
        live_mount=50,
        miscellaneous=20,
        stream_count=4,
        runway_remaining_days=120,
        average_growth_bytes_per_day=2048,
        physical_ingest_bytes=25.0,
    )


def test_fetch_empty_ingest_series_is_zero(mock_client: MagicMock):
    mock_client.get_physical_ingest.return_value = []

    assert storage.fetch(mock_client).physical_ingest_bytes == 0.0


def test_generate_system_storage_by_type(mock_client: MagicMock):
    metrics = {m.name: m for m in storage.generate_metrics(storage.fetch(mock_client))}

    by_type = {
        s.labels["type"]: s.value
        for s in metrics["rubrik_system_storage_bytes"].samples
    }
    assert by_type == {
        "total": 1000,
        "used": 600,
        "available": 400,
        "snapshot": 300,
        "live_mount": 50,
        "miscellaneous": 20,
    }


def test_generate_scalar_gauges(mock_client: MagicMock):
    metrics = {m.name: m for m in storage.generate_metrics(storage.fetch(mock_client))}

    assert metrics["rubrik_streams"].samples[0].value == 4
    assert metrics["rubrik_runway_remaining_days"].samples[0].value == 120
    growth = metrics["rubrik_average_storage_growth_bytes_per_day"]
    assert growth.samples[0].value == 2048
    assert metrics["rubrik_physical_ingest_bytes"].samples[0].value == 25.0


def test_generate_zero_snapshot():
    """A fully degraded client reports zeros rather than omitting series."""
    metrics = {m.name: m for m in storage.generate_metrics(storage.StorageMetric())}

    assert all(
        s.value == 0 for s in metrics["rubrik_system_storage_bytes"].samples
    )
    assert len(metrics["rubrik_system_storage_bytes"].samples) == len(
        storage.STORAGE_KINDS,
    )
    assert metrics["rubrik_streams"].samples[0].value == 0
