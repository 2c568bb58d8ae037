"""Tests for the managed volume collector module."""

from rubrik_prometheus_exporter.collectors import managed_volumes
from rubrik_prometheus_exporter.rubrikapi import types


def _volume(**kwargs) -> types.ManagedVolume:
    defaults = {
        "id": "mv-1",
        "name": "oracle",
        "state": "Exported",
        "effective_sla_domain_name": "Gold",
    }
    return types.ManagedVolume(**{**defaults, **kwargs})


def test_info_metric_labels():
    metrics = {
        m.name: m for m in managed_volumes.generate_metrics([_volume()])
    }

    sample = metrics["rubrik_managed_volume_info"].samples[0]
    assert sample.value == 1
    assert sample.labels == {
        "volume_id": "mv-1",
        "volume_name": "oracle",
        "sla_domain": "Gold",
        "state": "Exported",
    }


def test_gauge_values():
    volume = _volume(
        volume_size=1024,
        used_size=512,
        snapshot_count=7,
        pending_snapshot_count=1,
        num_channels=4,
        is_writable=True,
    )

    metrics = {m.name: m for m in managed_volumes.generate_metrics([volume])}

    values = {name: m.samples[0].value for name, m in metrics.items()}
    assert values["rubrik_managed_volume_size_bytes"] == 1024
    assert values["rubrik_managed_volume_used_bytes"] == 512
    assert values["rubrik_managed_volume_snapshots"] == 7
    assert values["rubrik_managed_volume_pending_snapshots"] == 1
    assert values["rubrik_managed_volume_channels"] == 4
    assert values["rubrik_managed_volume_writable"] == 1
    assert values["rubrik_managed_volume_relic"] == 0


def test_one_family_per_gauge_even_without_volumes():
    metrics = {m.name: m for m in managed_volumes.generate_metrics([])}

    expected = {"rubrik_managed_volume_info"} | {
        f"rubrik_managed_volume_{suffix}"
        for suffix, _, _ in managed_volumes.VOLUME_GAUGES
    }
    assert set(metrics) == expected
    assert all(m.samples == [] for m in metrics.values())
