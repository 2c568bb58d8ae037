"""API protocol health collector.

Exposes which protocol last served each resource category, so that an
appliance outage can be told apart from an appliance with nothing to report.
Register it after the other collectors so it reflects the current scrape.
"""

from collections.abc import Iterator

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from .. import rubrikapi
from ..rubrikapi import client as rubrik_client

PROTOCOLS = (rubrik_client.GRAPHQL, rubrik_client.REST, rubrik_client.FAILED)


def fetch(client: rubrikapi.RubrikClient) -> dict[str, str]:
    return client.protocol_status()


def generate_metrics(status: dict[str, str]) -> Iterator[Metric]:
    """Yield a one-hot gauge per category over graphql, rest and failed."""
    protocol = GaugeMetricFamily(
        "rubrik_api_protocol",
        "Protocol that served the category on the last retrieval "
        "(failed means both protocols failed)",
        labels=["category", "protocol"],
    )
    for category, outcome in sorted(status.items()):
        for name in PROTOCOLS:
            protocol.add_metric([category, name], int(outcome == name))
    yield protocol
