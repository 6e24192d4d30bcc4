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
import logging as log
from collections.abc import Iterable

from pci_exporter.pcie.sysfs import DEFAULT_SYSFS_BASE, devices_path, drivers_path

# Driver directories also hold bind/unbind/new_id/module entries next to the
# device links. Device links are named by PCI address in domain 0000.
DEVICE_ADDRESS_PREFIX = "0000"


def list_devices(driver_filter: Iterable[str] = (), sysfs_base: str = DEFAULT_SYSFS_BASE) -> list[str]:
    """List the PCI devices to collect metrics for.

    With an empty filter every entry of /sys/bus/pci/devices is returned.
    Otherwise /sys/bus/pci/drivers/<name> is listed for each driver in filter
    order and the device links found there are concatenated. A device bound
    to two of the listed drivers shows up twice.

    Directories that cannot be listed are logged and skipped.

    Args:
        driver_filter: Driver names, e.g. ('nvme', 'mlx5_core'). Empty for all devices.
        sysfs_base: Base path for sysfs. Default "/sys". Override for testing.

    Returns:
        List of PCI addresses like ['0000:04:00.0', '0000:05:00.0', ...]
    """
    driver_names = list(driver_filter)
    if not driver_names:
        return _list_all_devices(sysfs_base)

    devices = []
    for driver in driver_names:
        driver_path = os.path.join(drivers_path(sysfs_base), driver)
        try:
            entries = os.listdir(driver_path)
        except OSError as e:
            log.warning(f"Could not list driver directory {driver_path}: {e.strerror or e}")
            continue

        bound = [entry for entry in sorted(entries) if entry.startswith(DEVICE_ADDRESS_PREFIX)]
        log.debug(f"Driver {driver} is bound to {len(bound)} devices")
        devices.extend(bound)

    log.debug(f"PCI enumeration for drivers {driver_names}: {len(devices)} devices")
    return devices


def _list_all_devices(sysfs_base: str) -> list[str]:
    path = devices_path(sysfs_base)
    try:
        entries = os.listdir(path)
    except OSError:
        log.exception(f"Failed to read PCI devices directory {path}")
        return []

    log.debug(f"PCI enumeration: {len(entries)} devices")
    return sorted(entries)
