"""GraphQL response shapes.

One model per query document in :mod:`.queries`. Lists are mostly exposed
as connection edges (``edges[].node``) and SLA domains as nested optional
objects, unlike the flat REST records in :mod:`.types`.
"""

from typing import Generic, TypeVar

from pydantic import Field

from .types import RubrikModel

N = TypeVar("N")


class Edge(RubrikModel, Generic[N]):
    node: N


class Connection(RubrikModel, Generic[N]):
    edges: list[Edge[N]] = Field(default_factory=list)

    def nodes(self) -> list[N]:
        return [edge.node for edge in self.edges]


class SlaDomainRef(RubrikModel):
    id: str = ""
    name: str = ""


class ClusterRef(RubrikModel):
    id: str = ""
    name: str = ""


# Nodes


class GraphNode(RubrikModel):
    id: str = ""
    name: str = ""
    status: str = ""
    ip_address: str = ""
    needs_inspection: bool = False
    cluster: ClusterRef | None = None


class NodesResponse(RubrikModel):
    nodes: list[GraphNode] = Field(default_factory=list)


# Virtual machines


class GraphVirtualMachine(RubrikModel):
    id: str = ""
    name: str = ""
    effective_sla_domain: SlaDomainRef | None = None


class VmwareVmsResponse(RubrikModel):
    vmware_vms: Connection[GraphVirtualMachine] = Field(default_factory=Connection)


class NutanixVmsResponse(RubrikModel):
    nutanix_vms: Connection[GraphVirtualMachine] = Field(default_factory=Connection)


class HypervVmsResponse(RubrikModel):
    hyperv_vms: Connection[GraphVirtualMachine] = Field(default_factory=Connection)


# Managed volumes


class GraphManagedVolume(RubrikModel):
    id: str = ""
    name: str = ""
    state: str = ""
    num_channels: float = 0.0
    configured_sla_domain_name: str = ""
    configured_sla_domain_id: str = ""
    effective_sla_domain: SlaDomainRef | None = None
    effective_sla_domain_name: str = ""
    primary_cluster_id: str = ""
    used_size: float = 0.0
    volume_size: float = 0.0
    sla_assignment: str = ""
    is_writable: bool = False
    is_relic: bool = False
    snapshot_count: float = 0.0
    pending_snapshot_count: float = 0.0


class ManagedVolumesResponse(RubrikModel):
    managed_volumes: Connection[GraphManagedVolume] = Field(default_factory=Connection)


# Archive locations


class GraphArchiveLocation(RubrikModel):
    id: str = ""
    name: str = ""
    archival_location_type: str = ""
    status: str = ""


class ArchiveLocationsResponse(RubrikModel):
    archive_locations: Connection[GraphArchiveLocation] = Field(
        default_factory=Connection,
    )


class GraphDataLocationUsage(RubrikModel):
    id: str = ""
    name: str = ""
    data_downloaded: int = 0
    data_archived: int = 0
    num_vms_archived: int = Field(0, alias="numVMsArchived")
    num_filesets_archived: int = 0
    num_linux_filesets_archived: int = 0
    num_windows_filesets_archived: int = 0
    num_share_filesets_archived: int = 0
    num_mssql_dbs_archived: int = 0
    num_hyperv_vms_archived: int = 0
    num_nutanix_vms_archived: int = 0
    num_managed_volumes_archived: int = 0


class DataLocationUsageResponse(RubrikModel):
    archive_locations: Connection[GraphDataLocationUsage] = Field(
        default_factory=Connection,
    )


# System statistics


class GraphStorage(RubrikModel):
    total: int = 0
    used: int = 0
    available: int = 0
    snapshot: int = 0
    live_mount: int = 0
    miscellaneous: int = 0


class GraphStreams(RubrikModel):
    count: int = 0


class GraphTimeSeriesPoint(RubrikModel):
    date: str = ""
    value: float = 0.0


class GraphTimeSeries(RubrikModel):
    time_series: list[GraphTimeSeriesPoint] = Field(default_factory=list)


class GraphSystem(RubrikModel):
    """The ``system`` root object; each query selects a subset of it."""

    storage: GraphStorage = Field(default_factory=GraphStorage)
    streams: GraphStreams = Field(default_factory=GraphStreams)
    physical_ingest: GraphTimeSeries = Field(default_factory=GraphTimeSeries)
    archival_bandwidth: GraphTimeSeries = Field(default_factory=GraphTimeSeries)
    runway_remaining: int = 0
    average_storage_growth_per_day: float = 0.0


class SystemResponse(RubrikModel):
    system: GraphSystem = Field(default_factory=GraphSystem)


class GraphVmStorage(RubrikModel):
    id: str = ""
    name: str = ""
    logical_bytes: float = 0.0
    ingested_bytes: float = 0.0
    exclusive_physical_bytes: float = 0.0
    shared_physical_bytes: float = 0.0
    index_storage_bytes: float = 0.0


class PerVmStorageResponse(RubrikModel):
    vmware_vms: Connection[GraphVmStorage] = Field(default_factory=Connection)


# Reports


class GraphReport(RubrikModel):
    id: str = ""
    name: str = ""
    report_type: str = ""
    report_template: str = ""
    status: str = ""


class ReportsResponse(RubrikModel):
    reports: Connection[GraphReport] = Field(default_factory=Connection)
