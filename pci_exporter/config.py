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

import os
from collections.abc import Mapping
from dataclasses import dataclass

from pci_exporter.pcie.sysfs import DEFAULT_SYSFS_BASE

ENV_PREFIX = "PCI_EXPORTER_"

DEFAULT_LISTEN_ADDRESS = "0.0.0.0"
DEFAULT_PORT = 9101
DEFAULT_MAX_WORKERS = 8
DEFAULT_SCRAPE_TIMEOUT = 10.0
DEFAULT_LOG_LEVEL = "INFO"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_driver_filter(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated driver list, e.g. 'nvme, mlx5_core,' -> ('nvme', 'mlx5_core').

    Empty names and repeated names are dropped. An empty result means no
    driver filtering.
    """
    if not value:
        return ()
    names = (name.strip() for name in value.split(","))
    return tuple(dict.fromkeys(name for name in names if name))


@dataclass(frozen=True)
class ExporterConfig:
    """Startup configuration. Immutable for the lifetime of the process."""

    driver_filter: tuple[str, ...] = ()
    sysfs_base: str = DEFAULT_SYSFS_BASE
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    port: int = DEFAULT_PORT
    max_workers: int = DEFAULT_MAX_WORKERS
    scrape_timeout: float = DEFAULT_SCRAPE_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port must be between 0 and 65535, got {self.port}")
        if self.max_workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.max_workers}")
        if self.scrape_timeout <= 0:
            raise ValueError(f"scrape timeout must be positive, got {self.scrape_timeout}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"unknown log level {self.log_level!r}, expected one of {', '.join(LOG_LEVELS)}")
        object.__setattr__(self, "driver_filter", tuple(self.driver_filter))
        object.__setattr__(self, "log_level", self.log_level.upper())


def env_defaults(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect PCI_EXPORTER_* variables, keyed by lower-case suffix.

    PCI_EXPORTER_DRIVERS=nvme -> {'drivers': 'nvme'}
    """
    environ = os.environ if environ is None else environ
    return {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in environ.items()
        if key.startswith(ENV_PREFIX) and value != ""
    }
