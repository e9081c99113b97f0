"""Response models for the system monitor API.

Python attribute names are snake_case; the JSON names are the field aliases,
which FastAPI applies when rendering a response.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProcessState(str, Enum):
    RUNNING = "RUNNING"
    SLEEPING = "SLEEPING"
    WAITING = "WAITING"
    STOPPED = "STOPPED"
    ZOMBIE = "ZOMBIE"
    OTHER = "OTHER"


class Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ProcessorInfo(Snapshot):
    name: str = Field(..., description="Processor identifier, eg: AMD Ryzen 7 5700G with Radeon Graphics")
    physical_cores: int = Field(..., alias="physicalCores")
    logical_cores: int = Field(..., alias="logicalCores")
    max_freq_hz: int = Field(..., alias="maxFreqHz")
    usage_percentage: float = Field(
        ...,
        alias="usagePercentage",
        description="System-wide load over the sampling window, 0-100",
    )


class MemoryInfo(Snapshot):
    # The "Mb" names are historical; the values are whole GiB.
    total_gb: int = Field(..., alias="totalMb")
    available_gb: int = Field(..., alias="availableMb")
    used_gb: int = Field(..., alias="usedMb")


class DiskInfo(Snapshot):
    model: str
    size_gb: int = Field(..., alias="sizeGb")


class GpuInfo(Snapshot):
    name: str
    vram_gb: int = Field(..., alias="vramGb")


class ProcessInfo(Snapshot):
    name: str
    pid: int
    parent_pid: int = Field(..., alias="parentPid")
    state: ProcessState


class ProcessesInfo(Snapshot):
    total_processes: int = Field(
        ...,
        alias="totalProcesses",
        description="Live process count; read separately from the process table",
    )
    processes: list[ProcessInfo]
    uptime_sec: int = Field(..., alias="uptimeSec")


class OsInfo(Snapshot):
    code_name: str = Field(..., alias="codeName")
    family: str
    version: str
