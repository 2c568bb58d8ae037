"""Domain types for the Rubrik API.

Pydantic models for the flat records returned by the REST API. The GraphQL
path is transformed into these same models (see :mod:`.transforms`), so
every retrieval operation yields one type per resource category regardless
of the protocol that served it. Every field has a zero-valued default
because field completeness differs between the two protocols.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class RubrikModel(BaseModel):
    """Base model mapping snake_case fields to the API's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Explicit nulls fall back to the field default.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class ListEnvelope(RubrikModel, Generic[T]):
    """REST list response: payload list plus pagination metadata."""

    has_more: bool = False
    total: int = 0
    data: list[T] = Field(default_factory=list)


# Authentication


class OAuth2TokenResponse(BaseModel):
    """Response of the OAuth2 client-credentials token endpoint."""

    access_token: str = ""
    token_type: str = ""
    expires_in: int = 0
    scope: str = ""


class SessionResponse(RubrikModel):
    """Response of the session endpoint."""

    id: str = ""
    organization_id: str = ""
    token: str = ""
    user_id: str = ""


# Cluster nodes


class Node(RubrikModel):
    """A Rubrik cluster node."""

    id: str = ""
    brik_id: str = ""
    status: str = ""
    ip_address: str = ""
    needs_inspection: bool = False


class TimeStat(RubrikModel):
    """A single timestamped sample from a REST time series."""

    time: str = ""
    stat: float = 0.0


class NetworkStat(RubrikModel):
    bytes_received: list[TimeStat] = Field(default_factory=list)
    bytes_transmitted: list[TimeStat] = Field(default_factory=list)


class Iops(RubrikModel):
    reads_per_second: list[TimeStat] = Field(default_factory=list)
    writes_per_second: list[TimeStat] = Field(default_factory=list)


class IoThroughput(RubrikModel):
    read_bytes_per_second: list[TimeStat] = Field(default_factory=list)
    write_bytes_per_second: list[TimeStat] = Field(default_factory=list)


class NodeStats(RubrikModel):
    """Per-node performance statistics (REST only)."""

    id: str = ""
    brik_id: str = ""
    status: str = ""
    ip_address: str = ""
    needs_inspection: bool = False
    network_stat: NetworkStat = Field(default_factory=NetworkStat)
    iops: Iops = Field(default_factory=Iops)
    io_throughput: IoThroughput = Field(default_factory=IoThroughput)
    cpu_stat: list[TimeStat] = Field(default_factory=list)


# Protected workloads


class VirtualMachine(RubrikModel):
    """A protected virtual machine of any hypervisor family.

    ``hypervisor`` is not part of the wire format; the client tags each
    record with the family it was listed from.
    """

    id: str = ""
    name: str = ""
    effective_sla_domain_id: str = ""
    hypervisor: str = ""


class ManagedVolume(RubrikModel):
    id: str = ""
    name: str = ""
    state: str = ""
    num_channels: float = 0.0
    configured_sla_domain_name: str = ""
    configured_sla_domain_id: str = ""
    effective_sla_domain_id: str = ""
    effective_sla_domain_name: str = ""
    primary_cluster_id: str = ""
    used_size: float = 0.0
    volume_size: float = 0.0
    sla_assignment: str = ""
    is_writable: bool = False
    is_relic: bool = False
    snapshot_count: float = 0.0
    pending_snapshot_count: float = 0.0


# Archival


class ArchiveLocation(RubrikModel):
    id: str = ""
    name: str = ""
    location_type: str = ""
    is_active: bool = False
    ip_address: str = ""
    bucket: str = ""


class DataLocationUsage(RubrikModel):
    """Archived data volume and object counts for one archive location."""

    location_id: str = ""
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


# Storage


class SystemStorage(RubrikModel):
    """Cluster-wide storage capacity snapshot, in bytes."""

    total: int = 0
    used: int = 0
    available: int = 0
    snapshot: int = 0
    live_mount: int = 0
    miscellaneous: int = 0


class VmStorage(RubrikModel):
    """Storage consumed by a single protected VM, in bytes."""

    id: str = ""
    logical_bytes: float = 0.0
    ingested_bytes: float = 0.0
    exclusive_physical_bytes: float = 0.0
    shared_physical_bytes: float = 0.0
    index_storage_bytes: float = 0.0


class TimeSeriesPoint(TimeStat):
    """A point of a cluster time series (physical ingest, archival bandwidth)."""


class StreamCount(RubrikModel):
    count: int = 0


class RunwayRemaining(RubrikModel):
    days: int = 0


class StorageGrowth(RubrikModel):
    bytes: int = 0


# Reports


class Report(RubrikModel):
    id: str = ""
    name: str = ""
    report_type: str = ""
    report_template: str = ""
    update_time: str = ""
    update_status: str = ""


class ReportDataPoint(RubrikModel):
    measure: str = ""
    value: float = 0.0


class ReportDataColumn(RubrikModel):
    label: str = ""
    data_points: list[ReportDataPoint] = Field(default_factory=list)


class ReportChart(RubrikModel):
    """One chart of a report, as returned by the report chart endpoint."""

    id: str = ""
    name: str = ""
    attribute: str = ""
    chart_type: str = ""
    measure: str = ""
    data_columns: list[ReportDataColumn] = Field(default_factory=list)
