"""Rubrik Prometheus Exporter.

Prometheus exporter for Rubrik backup appliances that collects node health,
protected workload inventory, storage capacity, archival throughput, and job
outcomes via the appliance's GraphQL API with a fallback to its REST API.
"""

__version__ = "0.1.0"
