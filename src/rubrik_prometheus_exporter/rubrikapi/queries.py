"""Fixed GraphQL query documents, one per resource category."""

SYSTEM_STORAGE = """
query SystemStorage {
  system {
    storage {
      total
      used
      available
      snapshot
      liveMount
      miscellaneous
    }
  }
}
"""

NODES = """
query Nodes {
  nodes {
    id
    name
    status
    ipAddress
    cluster {
      id
      name
    }
  }
}
"""

VMWARE_VMS = """
query VMwareVMs {
  vmwareVms {
    edges {
      node {
        id
        name
        effectiveSlaDomain {
          id
          name
        }
      }
    }
  }
}
"""

NUTANIX_VMS = """
query NutanixVMs {
  nutanixVms {
    edges {
      node {
        id
        name
        effectiveSlaDomain {
          id
          name
        }
      }
    }
  }
}
"""

HYPERV_VMS = """
query HypervVMs {
  hypervVms {
    edges {
      node {
        id
        name
        effectiveSlaDomain {
          id
          name
        }
      }
    }
  }
}
"""

ARCHIVE_LOCATIONS = """
query ArchiveLocations {
  archiveLocations {
    edges {
      node {
        id
        name
        archivalLocationType
        status
      }
    }
  }
}
"""

MANAGED_VOLUMES = """
query ManagedVolumes {
  managedVolumes {
    edges {
      node {
        id
        name
        state
        numChannels
        configuredSlaDomainName
        effectiveSlaDomain {
          id
          name
        }
        primaryClusterId
        usedSize
        slaAssignment
        configuredSlaDomainId
        isWritable
        volumeSize
        effectiveSlaDomainName
        snapshotCount
        pendingSnapshotCount
        isRelic
      }
    }
  }
}
"""

PER_VM_STORAGE = """
query PerVMStorage {
  vmwareVms {
    edges {
      node {
        id
        name
        logicalBytes
        ingestedBytes
        exclusivePhysicalBytes
        sharedPhysicalBytes
        indexStorageBytes
      }
    }
  }
}
"""

STREAMS_COUNT = """
query StreamsCount {
  system {
    streams {
      count
    }
  }
}
"""

DATA_LOCATION_USAGE = """
query DataLocationUsage {
  archiveLocations {
    edges {
      node {
        id
        name
        dataDownloaded
        dataArchived
        numVMsArchived
        numFilesetsArchived
        numLinuxFilesetsArchived
        numWindowsFilesetsArchived
        numShareFilesetsArchived
        numMssqlDbsArchived
        numHypervVmsArchived
        numNutanixVmsArchived
        numManagedVolumesArchived
      }
    }
  }
}
"""

PHYSICAL_INGEST_TIME_SERIES = """
query PhysicalIngestTimeSeries($range: String!) {
  system {
    physicalIngest {
      timeSeries(range: $range) {
        date
        value
      }
    }
  }
}
"""

ARCHIVAL_BANDWIDTH_TIME_SERIES = """
query ArchivalBandwidthTimeSeries($range: String!, $locationId: String!) {
  system {
    archivalBandwidth(locationId: $locationId) {
      timeSeries(range: $range) {
        date
        value
      }
    }
  }
}
"""

RUNWAY_REMAINING = """
query RunwayRemaining {
  system {
    runwayRemaining
  }
}
"""

AVERAGE_STORAGE_GROWTH = """
query AverageStorageGrowth {
  system {
    averageStorageGrowthPerDay
  }
}
"""

REPORTS = """
query Reports {
  reports {
    edges {
      node {
        id
        name
        reportType
        reportTemplate
        status
      }
    }
  }
}
"""
