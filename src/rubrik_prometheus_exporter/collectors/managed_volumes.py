"""Managed volume metrics collector for Rubrik."""

from collections.abc import Iterator

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from .. import rubrikapi
from ..rubrikapi import types

# (metric suffix, ManagedVolume attribute, help text)
VOLUME_GAUGES = (
    ("size_bytes", "volume_size", "Provisioned size of the managed volume in bytes"),
    ("used_bytes", "used_size", "Used size of the managed volume in bytes"),
    ("snapshots", "snapshot_count", "Number of snapshots of the managed volume"),
    (
        "pending_snapshots",
        "pending_snapshot_count",
        "Number of pending snapshots of the managed volume",
    ),
    ("channels", "num_channels", "Number of channels of the managed volume"),
    ("writable", "is_writable", "1 if the managed volume is writable"),
    ("relic", "is_relic", "1 if the managed volume is a relic"),
)


def fetch(client: rubrikapi.RubrikClient) -> list[types.ManagedVolume]:
    return client.get_managed_volumes()


def generate_metrics(volumes: list[types.ManagedVolume]) -> Iterator[Metric]:
    """Generate one gauge family per managed volume attribute.

    Every family is labeled by volume name and effective SLA domain name.
    """
    labels = ["volume_id", "volume_name", "sla_domain"]

    info = GaugeMetricFamily(
        "rubrik_managed_volume_info",
        "Information about Rubrik managed volumes",
        labels=[*labels, "state"],
    )
    for volume in volumes:
        info.add_metric(
            [volume.id, volume.name, volume.effective_sla_domain_name, volume.state],
            1,
        )
    yield info

    for suffix, attribute, description in VOLUME_GAUGES:
        family = GaugeMetricFamily(
            f"rubrik_managed_volume_{suffix}",
            description,
            labels=labels,
        )
        for volume in volumes:
            family.add_metric(
                [volume.id, volume.name, volume.effective_sla_domain_name],
                float(getattr(volume, attribute)),
            )
        yield family
