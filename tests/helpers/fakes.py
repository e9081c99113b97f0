"""Fake HostProvider implementations."""

from itertools import cycle

from provider import (
    DiskReading,
    GpuReading,
    IntrospectionError,
    MemoryReading,
    OsReading,
    ProcessorReading,
    ProcessReading,
)

GIB = 1024**3


class FakeProvider:
    """In-memory HostProvider with canned readings."""

    def __init__(
        self,
        cpu_loads=(12.5, 87.0),
        disks=None,
        gpus=None,
        processes=None,
        process_count=3,
    ) -> None:
        self._cpu_loads = cycle(cpu_loads)
        self._disks = disks if disks is not None else [
            DiskReading(model="Samsung SSD 980 PRO 1TB", size=1_000_204_886_016),
            DiskReading(model="WDC WD40EFRX", size=4_000_787_030_016),
        ]
        self._gpus = gpus if gpus is not None else [
            GpuReading(name="NVIDIA GeForce RTX 3080", vram=10 * GIB),
        ]
        self._processes = processes if processes is not None else [
            ProcessReading(name="systemd", pid=1, ppid=0, status="sleeping"),
            ProcessReading(name="python", pid=4242, ppid=1, status="running"),
        ]
        self._process_count = process_count
        self.load_intervals: list[float] = []

    def processor(self) -> ProcessorReading:
        return ProcessorReading(
            name="AMD Ryzen 7 5700G with Radeon Graphics",
            physical_cores=8,
            logical_cores=16,
            max_freq_hz=4_672_000_000,
        )

    def cpu_load(self, interval: float) -> float:
        self.load_intervals.append(interval)
        return next(self._cpu_loads)

    def memory(self) -> MemoryReading:
        # 15.9 GiB total, 3.9 GiB available
        return MemoryReading(total=int(15.9 * GIB), available=int(3.9 * GIB))

    def disks(self) -> list[DiskReading]:
        return list(self._disks)

    def gpus(self) -> list[GpuReading]:
        return list(self._gpus)

    def process_count(self) -> int:
        return self._process_count

    def processes(self) -> list[ProcessReading]:
        return list(self._processes)

    def uptime(self) -> float:
        return 3723.9

    def os_identity(self) -> OsReading:
        return OsReading(code_name="jammy", family="Ubuntu", version="22.04.3 LTS (Jammy Jellyfish)")


class FailingProvider:
    """HostProvider whose every facet fails to read."""

    def _fail(self, facet: str):
        raise IntrospectionError(facet, "permission denied")

    def processor(self):
        self._fail("processor")

    def cpu_load(self, interval: float):
        self._fail("processor")

    def memory(self):
        self._fail("memory")

    def disks(self):
        self._fail("disks")

    def gpus(self):
        self._fail("gpus")

    def process_count(self):
        self._fail("processes")

    def processes(self):
        self._fail("processes")

    def uptime(self):
        self._fail("processes")

    def os_identity(self):
        self._fail("os")


