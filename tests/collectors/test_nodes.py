"""Tests for the nodes collector module."""

from unittest.mock import MagicMock

import pytest
from prometheus_client.core import GaugeMetricFamily

from rubrik_prometheus_exporter.collectors import nodes
from rubrik_prometheus_exporter.rubrikapi import client, types


def _series(*values: float) -> list[types.TimeStat]:
    return [types.TimeStat(time=f"t{i}", stat=v) for i, v in enumerate(values)]


@pytest.fixture
def node_ok() -> types.Node:
    return types.Node(
        id="RVM1",
        brik_id="brik-1",
        status="OK",
        ip_address="10.0.0.1",
    )


@pytest.fixture
def node_bad() -> types.Node:
    return types.Node(
        id="RVM2",
        brik_id="brik-1",
        status="BAD",
        ip_address="10.0.0.2",
        needs_inspection=True,
    )


@pytest.fixture
def busy_stats() -> types.NodeStats:
    """Statistics with several samples per series."""
    return types.NodeStats(
        cpu_stat=_series(10.0, 55.5),
        iops=types.Iops(
            reads_per_second=_series(100, 120),
            writes_per_second=_series(30, 40),
        ),
        io_throughput=types.IoThroughput(
            read_bytes_per_second=_series(1000, 2000),
            write_bytes_per_second=_series(500),
        ),
        network_stat=types.NetworkStat(
            bytes_received=_series(7, 8),
            bytes_transmitted=_series(9),
        ),
    )


def _metrics(node_metrics: list[nodes.NodeMetric]) -> dict[str, GaugeMetricFamily]:
    return {m.name: m for m in nodes.generate_metrics(node_metrics)}


def _by_direction(family: GaugeMetricFamily, node_id: str) -> dict[str, float]:
    return {
        s.labels["direction"]: s.value
        for s in family.samples
        if s.labels["node"] == node_id
    }


# ---------------------------------------------------------------------------
# Transformation
# ---------------------------------------------------------------------------


def test_transform_uses_latest_sample(
    node_ok: types.Node,
    busy_stats: types.NodeStats,
):
    metric = nodes._transform_node(node_ok, busy_stats)

    assert metric.cpu_percent == 55.5
    assert metric.reads_per_second == 120
    assert metric.writes_per_second == 40
    assert metric.read_bytes_per_second == 2000
    assert metric.write_bytes_per_second == 500
    assert metric.bytes_received == 8
    assert metric.bytes_transmitted == 9


def test_transform_empty_stats_are_zero(node_ok: types.Node):
    """Unavailable statistics (a zero-valued record) give zero rates."""
    metric = nodes._transform_node(node_ok, types.NodeStats())

    assert metric.cpu_percent == 0.0
    assert metric.reads_per_second == 0.0
    assert metric.bytes_transmitted == 0.0


@pytest.mark.parametrize(("status", "healthy"), [("OK", True), ("BAD", False)])
def test_is_healthy(status: str, healthy: bool):
    assert nodes.NodeMetric(id="n", status=status).is_healthy is healthy


def test_fetch_queries_stats_per_node(
    node_ok: types.Node,
    node_bad: types.Node,
):
    mock_client = MagicMock(spec=client.RubrikClient)
    mock_client.get_nodes.return_value = [node_ok, node_bad]
    mock_client.get_node_stats.return_value = types.NodeStats()

    result = nodes.fetch(mock_client)

    assert [m.id for m in result] == [node_ok.id, node_bad.id]
    assert [c.args[0] for c in mock_client.get_node_stats.call_args_list] == [
        node_ok.id,
        node_bad.id,
    ]


# ---------------------------------------------------------------------------
# Metric generation
# ---------------------------------------------------------------------------


def test_count_per_status(node_ok: types.Node, node_bad: types.Node):
    node_ok_2 = node_ok.model_copy(update={"id": "RVM3"})
    metrics = _metrics(
        [
            nodes._transform_node(n, types.NodeStats())
            for n in (node_ok, node_bad, node_ok_2)
        ],
    )

    counts = {
        s.labels["status"]: s.value
        for s in metrics["rubrik_node_count_per_status"].samples
    }
    assert counts == {"OK": 2, "BAD": 1}


def test_node_up_and_needs_inspection(node_ok: types.Node, node_bad: types.Node):
    metrics = _metrics(
        [nodes._transform_node(n, types.NodeStats()) for n in (node_ok, node_bad)],
    )

    up = {s.labels["node"]: s.value for s in metrics["rubrik_node_up"].samples}
    inspection = {
        s.labels["node"]: s.value
        for s in metrics["rubrik_node_needs_inspection"].samples
    }
    assert up == {"RVM1": 1, "RVM2": 0}
    assert inspection == {"RVM1": 0, "RVM2": 1}


def test_directional_families(node_ok: types.Node, busy_stats: types.NodeStats):
    metrics = _metrics([nodes._transform_node(node_ok, busy_stats)])

    assert _by_direction(metrics["rubrik_node_iops"], "RVM1") == {
        "read": 120,
        "write": 40,
    }
    assert _by_direction(metrics["rubrik_node_io_throughput_bytes"], "RVM1") == {
        "read": 2000,
        "write": 500,
    }
    assert _by_direction(metrics["rubrik_node_network_bytes"], "RVM1") == {
        "received": 8,
        "transmitted": 9,
    }


def test_no_nodes_yields_empty_families():
    metrics = _metrics([])

    expected = {
        "rubrik_node_count_per_status",
        "rubrik_node_up",
        "rubrik_node_needs_inspection",
        "rubrik_node_cpu_percent",
        "rubrik_node_iops",
        "rubrik_node_io_throughput_bytes",
        "rubrik_node_network_bytes",
    }
    assert set(metrics) == expected
    assert all(m.samples == [] for m in metrics.values())
