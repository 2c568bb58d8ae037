"""Cluster storage metrics collector for Rubrik.

Combines system storage capacity, stream count, runway, storage growth, and
the latest physical ingest sample into a single snapshot.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from .. import rubrikapi
from ..rubrikapi import client as rubrik_client

STORAGE_KINDS = (
    "total",
    "used",
    "available",
    "snapshot",
    "live_mount",
    "miscellaneous",
)


@dataclass
class StorageMetric:
    """Cluster-wide storage snapshot. Capacities are in bytes."""

    total: int = 0
    used: int = 0
    available: int = 0
    snapshot: int = 0
    live_mount: int = 0
    miscellaneous: int = 0
    stream_count: int = 0
    runway_remaining_days: int = 0
    average_growth_bytes_per_day: int = 0
    physical_ingest_bytes: float = 0.0


def fetch(
    client: rubrikapi.RubrikClient,
    physical_ingest_range: str = rubrik_client.DEFAULT_PHYSICAL_INGEST_RANGE,
) -> StorageMetric:
    """Fetch the storage snapshot from the appliance.

    Args:
        client: Rubrik client to use for fetching.
        physical_ingest_range: Relative range for the physical ingest series.

    Returns:
        Storage snapshot; fields the appliance could not provide are 0.
    """
    storage = client.get_system_storage()
    ingest = client.get_physical_ingest(physical_ingest_range)
    return StorageMetric(
        total=storage.total,
        used=storage.used,
        available=storage.available,
        snapshot=storage.snapshot,
        live_mount=storage.live_mount,
        miscellaneous=storage.miscellaneous,
        stream_count=client.get_stream_count(),
        runway_remaining_days=client.get_runway_remaining(),
        average_growth_bytes_per_day=client.get_average_storage_growth_per_day(),
        physical_ingest_bytes=ingest[-1].stat if ingest else 0.0,
    )


def generate_metrics(storage: StorageMetric) -> Iterator[Metric]:
    """Generate Prometheus metrics from the storage snapshot."""
    system_storage = GaugeMetricFamily(
        "rubrik_system_storage_bytes",
        "Cluster storage in bytes",
        labels=["type"],
    )
    for kind in STORAGE_KINDS:
        system_storage.add_metric([kind], getattr(storage, kind))
    yield system_storage

    streams = GaugeMetricFamily("rubrik_streams", "Number of active streams")
    streams.add_metric([], storage.stream_count)
    yield streams

    runway = GaugeMetricFamily(
        "rubrik_runway_remaining_days",
        "Days remaining before the cluster fills up",
    )
    runway.add_metric([], storage.runway_remaining_days)
    yield runway

    growth = GaugeMetricFamily(
        "rubrik_average_storage_growth_bytes_per_day",
        "Average storage growth per day in bytes",
    )
    growth.add_metric([], storage.average_growth_bytes_per_day)
    yield growth

    ingest = GaugeMetricFamily(
        "rubrik_physical_ingest_bytes",
        "Latest physical ingest sample in bytes",
    )
    ingest.add_metric([], storage.physical_ingest_bytes)
    yield ingest
