# Copyright (c) 2025, NVIDIA CORPORATION.  All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
pci-exporter: serve PCI device link and region metrics for Prometheus.

Usage:
    pci-exporter --driver nvme,mlx5_core --port 9101

Every flag can also be set through a PCI_EXPORTER_* environment variable,
e.g. PCI_EXPORTER_DRIVERS=nvme or PCI_EXPORTER_LOG_LEVEL=DEBUG.
"""

import argparse
import logging as log
import threading
from collections.abc import Mapping, Sequence

from prometheus_client import REGISTRY, start_http_server
from prometheus_client.registry import CollectorRegistry

from pci_exporter import __version__
from pci_exporter.config import (
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_WORKERS,
    DEFAULT_PORT,
    DEFAULT_SCRAPE_TIMEOUT,
    LOG_LEVELS,
    ExporterConfig,
    env_defaults,
    parse_driver_filter,
)
from pci_exporter.exporter import PciCollector
from pci_exporter.pcie.sysfs import DEFAULT_SYSFS_BASE

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(funcName)s:%(lineno)d] %(message)s"


def build_parser(environ: Mapping[str, str] | None = None) -> argparse.ArgumentParser:
    env = env_defaults(environ)
    parser = argparse.ArgumentParser(prog="pci-exporter", description="Prometheus exporter for PCI devices")
    parser.add_argument(
        "--driver",
        default=env.get("drivers", ""),
        help="Specify the driver(s) to query (comma-separated). Default: all devices",
    )
    parser.add_argument(
        "--sysfs-path", default=env.get("sysfs", DEFAULT_SYSFS_BASE), help="sysfs mount point (default: %(default)s)"
    )
    parser.add_argument(
        "--listen-address",
        default=env.get("address", DEFAULT_LISTEN_ADDRESS),
        help="Address to serve /metrics on (default: %(default)s)",
    )
    parser.add_argument("--port", type=int, default=env.get("port", DEFAULT_PORT), help="HTTP port (default: %(default)s)")
    parser.add_argument(
        "--workers",
        type=int,
        default=env.get("workers", DEFAULT_MAX_WORKERS),
        help="Threads reading sysfs during a scrape, 1 reads inline (default: %(default)s)",
    )
    parser.add_argument(
        "--scrape-timeout",
        type=float,
        default=env.get("scrape_timeout", DEFAULT_SCRAPE_TIMEOUT),
        help="Seconds a scrape waits for pending reads (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=env.get("log_level", DEFAULT_LOG_LEVEL),
        help="Logging level (default: %(default)s)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_config(argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None) -> ExporterConfig:
    parser = build_parser(environ)
    args = parser.parse_args(argv)
    try:
        return ExporterConfig(
            driver_filter=parse_driver_filter(args.driver),
            sysfs_base=args.sysfs_path,
            listen_address=args.listen_address,
            port=args.port,
            max_workers=args.workers,
            scrape_timeout=args.scrape_timeout,
            log_level=args.log_level,
        )
    except ValueError as e:
        parser.error(str(e))


def configure_logging(level: str) -> None:
    log.basicConfig(level=level, format=LOG_FORMAT)


def serve(
    config: ExporterConfig,
    registry: CollectorRegistry = REGISTRY,
    stop: threading.Event | None = None,
) -> int:
    """Run the exporter until `stop` is set or the process is interrupted.

    Returns the process exit status. Failing to bind the listen socket is the
    only fatal error.
    """
    collector = PciCollector(config)
    registry.register(collector)
    try:
        try:
            server, _ = start_http_server(config.port, addr=config.listen_address, registry=registry)
        except OSError as e:
            log.error(f"Could not listen on {config.listen_address}:{config.port}: {e}")
            return 1

        drivers = ",".join(config.driver_filter) or "all"
        log.info(f"PCI exporter started on {config.listen_address}:{server.server_port}, drivers: {drivers}")
        log.info(f"Metrics available at http://{config.listen_address}:{server.server_port}/metrics")

        stop = stop or threading.Event()
        try:
            while not stop.wait(1):
                pass
        except KeyboardInterrupt:
            log.info("Interrupted, shutting down")
        finally:
            server.shutdown()
            server.server_close()
        return 0
    finally:
        registry.unregister(collector)
        collector.close()


def main(argv: Sequence[str] | None = None) -> int:
    config = parse_config(argv)
    configure_logging(config.log_level)
    return serve(config)


if __name__ == "__main__":
    raise SystemExit(main())
