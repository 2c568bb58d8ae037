"""Archive location metrics collector for Rubrik.

Fetches archive locations, their data usage, and the latest archival
bandwidth sample of each location.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from .. import rubrikapi
from ..rubrikapi import client as rubrik_client
from ..rubrikapi import types

ARCHIVED_OBJECT_FIELDS = {
    "vm": "num_vms_archived",
    "fileset": "num_filesets_archived",
    "linux_fileset": "num_linux_filesets_archived",
    "windows_fileset": "num_windows_filesets_archived",
    "share_fileset": "num_share_filesets_archived",
    "mssql_db": "num_mssql_dbs_archived",
    "hyperv_vm": "num_hyperv_vms_archived",
    "nutanix_vm": "num_nutanix_vms_archived",
    "managed_volume": "num_managed_volumes_archived",
}


@dataclass
class ArchiveMetric:
    """An archive location with its usage and bandwidth."""

    id: str
    name: str = ""
    location_type: str = ""
    is_active: bool = False
    data_archived: int = 0
    data_downloaded: int = 0
    bandwidth: float = 0.0
    archived_objects: dict[str, int] = field(default_factory=dict)


def _transform_location(
    location: types.ArchiveLocation,
    usage: types.DataLocationUsage | None,
    bandwidth: list[types.TimeSeriesPoint],
) -> ArchiveMetric:
    metric = ArchiveMetric(
        id=location.id,
        name=location.name,
        location_type=location.location_type,
        is_active=location.is_active,
        bandwidth=bandwidth[-1].stat if bandwidth else 0.0,
    )
    if usage is not None:
        metric.data_archived = usage.data_archived
        metric.data_downloaded = usage.data_downloaded
        metric.archived_objects = {
            kind: getattr(usage, attr) for kind, attr in ARCHIVED_OBJECT_FIELDS.items()
        }
    return metric


def fetch(
    client: rubrikapi.RubrikClient,
    bandwidth_range: str = rubrik_client.DEFAULT_ARCHIVAL_BANDWIDTH_RANGE,
) -> list[ArchiveMetric]:
    """Fetch archive location metrics from the appliance.

    Args:
        client: Rubrik client to use for fetching.
        bandwidth_range: Relative range for the archival bandwidth series.

    Returns:
        List of archive location metrics.
    """
    usage_by_id = {
        usage.location_id: usage for usage in client.get_data_location_usage()
    }
    return [
        _transform_location(
            location,
            usage_by_id.get(location.id),
            client.get_archival_bandwidth(location.id, bandwidth_range),
        )
        for location in client.get_archive_locations()
    ]


def generate_metrics(locations: list[ArchiveMetric]) -> Iterator[Metric]:
    """Generate Prometheus metrics from archive location data."""
    labels = ["location_id", "location_name"]

    active = GaugeMetricFamily(
        "rubrik_archive_location_active",
        "1 if the archive location is active",
        labels=[*labels, "location_type"],
    )
    archived = GaugeMetricFamily(
        "rubrik_archive_data_archived_bytes",
        "Bytes archived to the location",
        labels=labels,
    )
    downloaded = GaugeMetricFamily(
        "rubrik_archive_data_downloaded_bytes",
        "Bytes downloaded from the location",
        labels=labels,
    )
    bandwidth = GaugeMetricFamily(
        "rubrik_archive_bandwidth_bytes",
        "Latest archival bandwidth sample in bytes per second",
        labels=labels,
    )
    objects = GaugeMetricFamily(
        "rubrik_archive_objects_archived",
        "Number of archived objects per kind",
        labels=[*labels, "kind"],
    )

    for location in locations:
        values = [location.id, location.name]
        active.add_metric(
            [*values, location.location_type],
            int(location.is_active),
        )
        archived.add_metric(values, location.data_archived)
        downloaded.add_metric(values, location.data_downloaded)
        bandwidth.add_metric(values, location.bandwidth)
        for kind, count in location.archived_objects.items():
            objects.add_metric([*values, kind], count)

    yield active
    yield archived
    yield downloaded
    yield bandwidth
    yield objects
