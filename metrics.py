from models import (
    DiskInfo,
    GpuInfo,
    MemoryInfo,
    OsInfo,
    ProcessInfo,
    ProcessesInfo,
    ProcessorInfo,
    ProcessState,
)
from provider import HostProvider

CPU_SAMPLE_INTERVAL = 0.8  # seconds; usage needs two samples

_STATES = {
    "running": ProcessState.RUNNING,
    "sleeping": ProcessState.SLEEPING,
    "idle": ProcessState.SLEEPING,
    "disk-sleep": ProcessState.WAITING,
    "waiting": ProcessState.WAITING,
    "waking": ProcessState.WAITING,
    "locked": ProcessState.WAITING,
    "parked": ProcessState.WAITING,
    "stopped": ProcessState.STOPPED,
    "tracing-stop": ProcessState.STOPPED,
    "zombie": ProcessState.ZOMBIE,
    "dead": ProcessState.ZOMBIE,
}


def bytes_to_gb(size: int) -> int:
    """Whole GiB, truncated: 1.5 GiB -> 1."""
    return size // 1024 // 1024 // 1024


def process_state(status: str) -> ProcessState:
    return _STATES.get(status.lower(), ProcessState.OTHER)


def get_processor_info(provider: HostProvider, sample_interval: float = CPU_SAMPLE_INTERVAL) -> ProcessorInfo:
    """Processor identity plus a load sample; blocks for ``sample_interval``."""
    proc = provider.processor()
    usage = provider.cpu_load(sample_interval)
    return ProcessorInfo(
        name=proc.name,
        physical_cores=proc.physical_cores,
        logical_cores=proc.logical_cores,
        max_freq_hz=proc.max_freq_hz,
        usage_percentage=usage,
    )


def get_memory_info(provider: HostProvider) -> MemoryInfo:
    mem = provider.memory()
    total = bytes_to_gb(mem.total)
    available = bytes_to_gb(mem.available)
    # subtract after truncating, not from raw bytes
    return MemoryInfo(total_gb=total, available_gb=available, used_gb=total - available)


def get_disk_info(provider: HostProvider) -> list[DiskInfo]:
    return [DiskInfo(model=d.model, size_gb=bytes_to_gb(d.size)) for d in provider.disks()]


def get_gpu_info(provider: HostProvider) -> list[GpuInfo]:
    return [GpuInfo(name=g.name, vram_gb=bytes_to_gb(g.vram)) for g in provider.gpus()]


def get_processes_info(provider: HostProvider) -> ProcessesInfo:
    """
    Count, full process table and uptime.

    The count and the table are two separate reads and are allowed to disagree.
    """
    total = provider.process_count()
    processes = [
        ProcessInfo(name=p.name, pid=p.pid, parent_pid=p.ppid, state=process_state(p.status))
        for p in provider.processes()
    ]
    return ProcessesInfo(
        total_processes=total,
        processes=processes,
        uptime_sec=int(provider.uptime()),
    )


def get_os_info(provider: HostProvider) -> OsInfo:
    os_ = provider.os_identity()
    return OsInfo(code_name=os_.code_name, family=os_.family, version=os_.version)
