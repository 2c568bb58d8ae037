"""Node metrics collector for Rubrik.

Fetches cluster nodes and their recent performance statistics and generates
Prometheus metrics for node status, CPU, IOPS, throughput, and network
traffic. Statistics are reduced to their most recent sample.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from .. import rubrikapi
from ..rubrikapi import types

HEALTHY_STATUS = "OK"


@dataclass
class NodeMetric:
    """Represents metrics for a single Rubrik node.

    Rates are the latest sample of the node's statistics time series;
    0.0 when the series is empty or the statistics are unavailable.
    """

    id: str
    brik_id: str = ""
    status: str = ""
    ip_address: str = ""
    needs_inspection: bool = False
    cpu_percent: float = 0.0
    reads_per_second: float = 0.0
    writes_per_second: float = 0.0
    read_bytes_per_second: float = 0.0
    write_bytes_per_second: float = 0.0
    bytes_received: float = 0.0
    bytes_transmitted: float = 0.0

    @property
    def is_healthy(self) -> bool:
        return self.status == HEALTHY_STATUS


def _latest(series: list[types.TimeStat]) -> float:
    """Return the value of the most recent sample, or 0.0 for an empty series."""
    return series[-1].stat if series else 0.0


def _transform_node(node: types.Node, stats: types.NodeStats) -> NodeMetric:
    """Combine a node record with its statistics into a NodeMetric.

    Args:
        node: Node record from the node inventory.
        stats: Statistics for the same node (zero-valued if unavailable).

    Returns:
        NodeMetric with the latest sample of each statistic.
    """
    return NodeMetric(
        id=node.id,
        brik_id=node.brik_id,
        status=node.status,
        ip_address=node.ip_address,
        needs_inspection=node.needs_inspection,
        cpu_percent=_latest(stats.cpu_stat),
        reads_per_second=_latest(stats.iops.reads_per_second),
        writes_per_second=_latest(stats.iops.writes_per_second),
        read_bytes_per_second=_latest(stats.io_throughput.read_bytes_per_second),
        write_bytes_per_second=_latest(stats.io_throughput.write_bytes_per_second),
        bytes_received=_latest(stats.network_stat.bytes_received),
        bytes_transmitted=_latest(stats.network_stat.bytes_transmitted),
    )


def _count_nodes_by_status(nodes: list[NodeMetric]) -> dict[str, int]:
    node_count_per_status: dict[str, int] = {}
    for node in nodes:
        node_count_per_status[node.status] = (
            node_count_per_status.get(node.status, 0) + 1
        )
    return node_count_per_status


def fetch(client: rubrikapi.RubrikClient) -> list[NodeMetric]:
    """Fetch node metrics from the appliance.

    Args:
        client: Rubrik client to use for fetching.

    Returns:
        List of node metrics.
    """
    return [
        _transform_node(node, client.get_node_stats(node.id))
        for node in client.get_nodes()
    ]


def generate_metrics(nodes: list[NodeMetric]) -> Iterator[Metric]:
    """Generate Prometheus metrics from node data.

    Args:
        nodes: List of node metrics.

    Yields:
        Prometheus Metric objects.
    """
    node_count_per_status = GaugeMetricFamily(
        "rubrik_node_count_per_status",
        "nodes per status",
        labels=["status"],
    )
    for status, count in _count_nodes_by_status(nodes).items():
        node_count_per_status.add_metric([status], count)
    yield node_count_per_status

    node_up = GaugeMetricFamily(
        "rubrik_node_up",
        "1 if the node reports status OK",
        labels=["node", "brik_id", "ip_address"],
    )
    needs_inspection = GaugeMetricFamily(
        "rubrik_node_needs_inspection",
        "1 if the node needs inspection",
        labels=["node"],
    )
    cpu = GaugeMetricFamily(
        "rubrik_node_cpu_percent",
        "Node CPU utilization in percent",
        labels=["node"],
    )
    iops = GaugeMetricFamily(
        "rubrik_node_iops",
        "Node I/O operations per second",
        labels=["node", "direction"],
    )
    throughput = GaugeMetricFamily(
        "rubrik_node_io_throughput_bytes",
        "Node I/O throughput in bytes per second",
        labels=["node", "direction"],
    )
    network = GaugeMetricFamily(
        "rubrik_node_network_bytes",
        "Node network traffic in bytes per second",
        labels=["node", "direction"],
    )

    for node in nodes:
        node_up.add_metric(
            [node.id, node.brik_id, node.ip_address],
            int(node.is_healthy),
        )
        needs_inspection.add_metric([node.id], int(node.needs_inspection))
        cpu.add_metric([node.id], node.cpu_percent)
        iops.add_metric([node.id, "read"], node.reads_per_second)
        iops.add_metric([node.id, "write"], node.writes_per_second)
        throughput.add_metric([node.id, "read"], node.read_bytes_per_second)
        throughput.add_metric([node.id, "write"], node.write_bytes_per_second)
        network.add_metric([node.id, "received"], node.bytes_received)
        network.add_metric([node.id, "transmitted"], node.bytes_transmitted)

    yield node_up
    yield needs_inspection
    yield cpu
    yield iops
    yield throughput
    yield network
