import argparse
import logging
import os

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

import metrics
from models import DiskInfo, GpuInfo, MemoryInfo, OsInfo, ProcessesInfo, ProcessorInfo
from provider import HostProvider, IntrospectionError, PsutilProvider

logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]

DOC = "\n".join([
    "System Monitoring API",
    "",
    "GET /cpu    -> ProcessorInfo { name, physicalCores, logicalCores, maxFreqHz, usagePercentage }",
    "GET /ram    -> MemoryInfo { totalMb, availableMb, usedMb }",
    "GET /disk   -> DiskInfo[] { model, sizeGb }",
    "GET /gpu    -> GpuInfo[] { name, vramGb }",
    "GET /procs  -> ProcessesInfo { totalProcesses, processes[], uptimeSec }",
    "    ProcessInfo { name, pid, parentPid, state }",
    "GET /os     -> OsInfo { codeName, family, version }",
    "",
    "Memory values are whole GiB despite the Mb field names.",
    "Content types: JSON for data endpoints, plain text for this documentation.",
])


def get_provider(request: Request) -> HostProvider:
    return request.app.state.provider


async def introspection_failed(request: Request, exc: IntrospectionError) -> PlainTextResponse:
    logger.error("GET %s failed reading %s: %s", request.url.path, exc.facet, exc)
    return PlainTextResponse("Internal Server Error", status_code=500)


def create_app(provider: HostProvider | None = None) -> FastAPI:
    app = FastAPI(title="System Monitor API")
    app.state.provider = provider if provider is not None else PsutilProvider()

    app.add_middleware(CORSMiddleware, allow_origins=["*"],
                       allow_methods=["GET"], allow_headers=["*"])
    app.add_exception_handler(IntrospectionError, introspection_failed)

    # plain def: FastAPI runs these in its thread pool, so the 800ms /cpu
    # sample never stalls other requests
    @app.get("/cpu")
    def cpu(provider: HostProvider = Depends(get_provider)) -> ProcessorInfo:
        return metrics.get_processor_info(provider)

    @app.get("/ram")
    def ram(provider: HostProvider = Depends(get_provider)) -> MemoryInfo:
        return metrics.get_memory_info(provider)

    @app.get("/disk")
    def disk(provider: HostProvider = Depends(get_provider)) -> list[DiskInfo]:
        return metrics.get_disk_info(provider)

    @app.get("/gpu")
    def gpu(provider: HostProvider = Depends(get_provider)) -> list[GpuInfo]:
        return metrics.get_gpu_info(provider)

    @app.get("/procs")
    def procs(provider: HostProvider = Depends(get_provider)) -> ProcessesInfo:
        return metrics.get_processes_info(provider)

    @app.get("/os")
    def os_info(provider: HostProvider = Depends(get_provider)) -> OsInfo:
        return metrics.get_os_info(provider)

    @app.get("/doc", response_class=PlainTextResponse)
    def doc() -> str:
        return DOC

    return app


app = create_app()


def run(argv: list[str] | None = None) -> None:
    """Serve the API; flags override SYSMON_HOST / SYSMON_PORT / SYSMON_LOG_LEVEL."""
    parser = argparse.ArgumentParser(description="System monitor HTTP API")
    parser.add_argument("--host", default=os.getenv("SYSMON_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("SYSMON_PORT", "8080")))
    parser.add_argument("--log-level", choices=LOG_LEVELS, type=str.lower,
                        default=os.getenv("SYSMON_LOG_LEVEL", "info").lower())
    args = parser.parse_args(argv)
    # argparse checks choices only for values given on the command line
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid SYSMON_LOG_LEVEL {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    log_level = args.log_level

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Serving system monitor on %s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=log_level)


if __name__ == "__main__":
    run()
