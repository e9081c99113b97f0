"""Host introspection: the raw OS/hardware readings behind every endpoint."""

import functools
import logging
import os
import platform
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import psutil
import pynvml

logger = logging.getLogger(__name__)

SECTOR_SIZE = 512  # /sys/block/<dev>/size is always in 512-byte units
PROCESS_ATTRS = ["pid", "ppid", "name", "status"]

CARD_NAME = re.compile(r"card\d+")
DISPLAY_CLASS = "0x03"  # PCI base class: display controller
NVIDIA_VENDOR = "0x10de"
PCI_VENDORS = {
    "0x1002": "AMD",
    "0x8086": "Intel",
    "0x10de": "NVIDIA",
    "0x1af4": "Virtio",
    "0x15ad": "VMware",
    "0x1234": "QEMU",
}


class IntrospectionError(Exception):
    """A hardware/OS facet could not be read."""

    def __init__(self, facet: str, message: str) -> None:
        super().__init__(f"{facet}: {message}")
        self.facet = facet


@dataclass(slots=True, frozen=True)
class ProcessorReading:
    name: str
    physical_cores: int
    logical_cores: int
    max_freq_hz: int


@dataclass(slots=True, frozen=True)
class MemoryReading:
    total: int  # Bytes
    available: int  # Bytes


@dataclass(slots=True, frozen=True)
class DiskReading:
    model: str
    size: int  # Bytes


@dataclass(slots=True, frozen=True)
class GpuReading:
    name: str
    vram: int  # Bytes


@dataclass(slots=True, frozen=True)
class ProcessReading:
    name: str
    pid: int
    ppid: int
    status: str  # platform status text, e.g. 'running', 'disk-sleep'


@dataclass(slots=True, frozen=True)
class OsReading:
    code_name: str
    family: str
    version: str


class HostProvider(Protocol):
    """Narrow interface over whatever can introspect the host."""

    def processor(self) -> ProcessorReading: ...

    def cpu_load(self, interval: float) -> float:
        """System-wide CPU usage 0-100, sampled over ``interval`` seconds."""

    def memory(self) -> MemoryReading: ...

    def disks(self) -> list[DiskReading]: ...

    def gpus(self) -> list[GpuReading]: ...

    def process_count(self) -> int: ...

    def processes(self) -> list[ProcessReading]: ...

    def uptime(self) -> float:
        """Seconds since boot."""

    def os_identity(self) -> OsReading: ...


def _facet(name: str):
    """Re-raise backend failures while reading ``name`` as IntrospectionError."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except IntrospectionError:
                raise
            except (psutil.Error, OSError, pynvml.NVMLError) as exc:
                raise IntrospectionError(name, f"{type(exc).__name__}: {exc}") from exc

        return wrapper

    return decorator


class PsutilProvider:
    """
    HostProvider backed by psutil, procfs/sysfs, NVML and the platform module.

    Holds no state besides the filesystem roots, so one instance can serve
    concurrent requests.
    """

    def __init__(self, proc_root: str = "/proc", sysfs_root: str = "/sys") -> None:
        self._proc_root = Path(proc_root)
        self._sysfs_root = Path(sysfs_root)

    @_facet("processor")
    def processor(self) -> ProcessorReading:
        physical = psutil.cpu_count(logical=False)
        logical = psutil.cpu_count(logical=True)
        if physical is None or logical is None:
            raise IntrospectionError("processor", "core count not reported by this platform")
        freq = psutil.cpu_freq()
        if freq is None:
            raise IntrospectionError("processor", "frequency not reported by this platform")
        return ProcessorReading(
            name=self._processor_name(),
            physical_cores=physical,
            logical_cores=logical,
            max_freq_hz=int(freq.max * 1_000_000),  # psutil reports MHz
        )

    def _processor_name(self) -> str:
        cpuinfo = self._proc_root / "cpuinfo"
        if platform.system() == "Linux" and cpuinfo.exists():
            with open(cpuinfo, "r") as f:
                for line in f:
                    if line.startswith("model name"):
                        return line.split(":", 1)[1].strip()
        return platform.processor() or platform.machine()

    @_facet("processor")
    def cpu_load(self, interval: float) -> float:
        return psutil.cpu_percent(interval=interval)

    @_facet("memory")
    def memory(self) -> MemoryReading:
        vm = psutil.virtual_memory()
        return MemoryReading(total=vm.total, available=vm.available)

    @_facet("disks")
    def disks(self) -> list[DiskReading]:
        block = self._sysfs_root / "block"
        if platform.system() == "Linux" and block.is_dir():
            return self._block_devices(block)
        disks: list[DiskReading] = []
        seen: set[str] = set()
        for p in psutil.disk_partitions(all=False):
            if not (os.name == "nt" or p.fstype) or p.device in seen:  # skip unmapped and repeat mounts
                continue
            seen.add(p.device)
            disks.append(DiskReading(model=p.device, size=psutil.disk_usage(p.mountpoint).total))
        return disks

    def _block_devices(self, block: Path) -> list[DiskReading]:
        disks: list[DiskReading] = []
        for dev in sorted(block.iterdir()):
            # loop, ram and device-mapper nodes have no backing device
            if not (dev / "device").exists():
                continue
            model_file = dev / "device" / "model"
            model = model_file.read_text().strip() if model_file.exists() else ""
            sectors = int((dev / "size").read_text().strip())
            disks.append(DiskReading(model=model or "Unknown", size=sectors * SECTOR_SIZE))
        return disks

    @_facet("gpus")
    def gpus(self) -> list[GpuReading]:
        """NVIDIA adapters through NVML, then any other display adapter in sysfs."""
        gpus = self._nvml_gpus()
        drm = self._sysfs_root / "class" / "drm"
        if platform.system() == "Linux" and drm.is_dir():
            gpus.extend(self._drm_gpus(drm, skip_nvidia=bool(gpus)))
        return gpus

    def _nvml_gpus(self) -> list[GpuReading]:
        try:
            pynvml.nvmlInit()
        except (pynvml.NVMLError_LibraryNotFound, pynvml.NVMLError_DriverNotLoaded) as exc:
            logger.debug("NVML unavailable (%s), skipping NVIDIA adapters", type(exc).__name__)
            return []

        try:
            gpus: list[GpuReading] = []
            for index in range(pynvml.nvmlDeviceGetCount()):
                handle = pynvml.nvmlDeviceGetHandleByIndex(index)
                name = pynvml.nvmlDeviceGetName(handle)
                if isinstance(name, bytes):  # older bindings return bytes
                    name = name.decode()
                vram = pynvml.nvmlDeviceGetMemoryInfo(handle).total
                gpus.append(GpuReading(name=name, vram=vram))
            return gpus
        finally:
            pynvml.nvmlShutdown()

    def _drm_gpus(self, drm: Path, skip_nvidia: bool) -> list[GpuReading]:
        gpus: list[GpuReading] = []
        seen: set[Path] = set()
        for card in sorted(drm.iterdir()):
            # connectors (card0-HDMI-A-1) and render nodes share the directory
            if not CARD_NAME.fullmatch(card.name):
                continue
            device = card / "device"
            pci_class = device / "class"
            if not pci_class.exists() or not pci_class.read_text().strip().startswith(DISPLAY_CLASS):
                continue
            if device.resolve() in seen:
                continue
            seen.add(device.resolve())
            vendor = (device / "vendor").read_text().strip().lower()
            if skip_nvidia and vendor == NVIDIA_VENDOR:
                continue
            label = device / "label"
            if label.exists():
                name = label.read_text().strip()
            else:
                product = (device / "device").read_text().strip().lower()
                name = f"{PCI_VENDORS.get(vendor, vendor)} {product}"
            vram_file = device / "mem_info_vram_total"  # amdgpu only
            vram = int(vram_file.read_text().strip()) if vram_file.exists() else 0
            gpus.append(GpuReading(name=name, vram=vram))
        return gpus

    @_facet("processes")
    def process_count(self) -> int:
        return len(psutil.pids())

    @_facet("processes")
    def processes(self) -> list[ProcessReading]:
        """
        Enumerate the full process table.

        psutil.process_iter() already drops processes that exit mid-iteration.
        An attribute hidden behind AccessDenied comes back as None and fails
        the whole read.
        """
        processes: list[ProcessReading] = []
        for proc in psutil.process_iter(attrs=PROCESS_ATTRS):
            info = proc.info
            missing = [attr for attr in PROCESS_ATTRS if info.get(attr) is None]
            if missing:
                raise IntrospectionError(
                    "processes", f"pid {info.get('pid')}: {', '.join(missing)} not readable"
                )
            processes.append(
                ProcessReading(
                    name=info["name"],
                    pid=info["pid"],
                    ppid=info["ppid"],
                    status=info["status"],
                )
            )
        return processes

    @_facet("processes")
    def uptime(self) -> float:
        return time.time() - psutil.boot_time()

    @_facet("os")
    def os_identity(self) -> OsReading:
        system = platform.system()
        if system == "Linux":
            try:
                release = platform.freedesktop_os_release()
            except OSError:
                release = None
            if release is not None:
                return OsReading(
                    code_name=release.get("VERSION_CODENAME", ""),
                    family=release.get("NAME", system),
                    version=release.get("VERSION") or release.get("VERSION_ID", ""),
                )
        elif system == "Darwin":
            return OsReading(code_name="", family="macOS", version=platform.mac_ver()[0])
        elif system == "Windows":
            release, version, _, _ = platform.win32_ver()
            return OsReading(code_name=release, family="Windows", version=version)
        return OsReading(code_name="", family=system, version=platform.release())
