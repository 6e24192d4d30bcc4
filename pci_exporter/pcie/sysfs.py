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

"""Read-only access to the PCI attribute files under sysfs.

Every call goes to the filesystem. Nothing is cached since link speed and
width can change between scrapes.
"""

import errno
import os
from typing import NoReturn

from pci_exporter.errors import AttributeNotPresent, AttributeReadError

DEFAULT_SYSFS_BASE = "/sys"


def devices_path(sysfs_base: str = DEFAULT_SYSFS_BASE) -> str:
    return os.path.join(sysfs_base, "bus", "pci", "devices")


def drivers_path(sysfs_base: str = DEFAULT_SYSFS_BASE) -> str:
    return os.path.join(sysfs_base, "bus", "pci", "drivers")


def device_path(device_id: str, sysfs_base: str = DEFAULT_SYSFS_BASE) -> str:
    return os.path.join(devices_path(sysfs_base), device_id)


def _raise_for(exc: OSError, device_id: str, attribute: str | None, path: str) -> NoReturn:
    if exc.errno in (errno.ENOENT, errno.ENOTDIR):
        raise AttributeNotPresent(device_id, attribute, path, exc.strerror or "") from exc
    raise AttributeReadError(device_id, attribute, path, exc.strerror or str(exc)) from exc


def read_attribute(device_id: str, attribute: str, sysfs_base: str = DEFAULT_SYSFS_BASE) -> str:
    """Read one attribute file of a PCI device.

    Args:
        device_id: PCI address like '0000:04:00.0'.
        attribute: File name under the device directory, e.g. 'current_link_speed'.
        sysfs_base: Base path for sysfs. Default "/sys". Override for testing.

    Returns:
        The raw file content, untrimmed.

    Raises:
        AttributeNotPresent: The file does not exist for this device.
        AttributeReadError: The file exists but reading it failed.
    """
    path = os.path.join(device_path(device_id, sysfs_base), attribute)
    try:
        with open(path, "r") as f:
            return f.read()
    except OSError as e:
        _raise_for(e, device_id, attribute, path)
    except UnicodeDecodeError as e:
        raise AttributeReadError(device_id, attribute, path, "content is not text") from e


def list_device_entries(device_id: str, sysfs_base: str = DEFAULT_SYSFS_BASE) -> list[str]:
    """Return the sorted entry names of a device directory."""
    path = device_path(device_id, sysfs_base)
    try:
        return sorted(os.listdir(path))
    except OSError as e:
        _raise_for(e, device_id, None, path)


def entry_size(device_id: str, entry: str, sysfs_base: str = DEFAULT_SYSFS_BASE) -> int:
    """Return the size in bytes that stat reports for a device entry.

    For resourceN files this is the size of the memory region they map.
    """
    path = os.path.join(device_path(device_id, sysfs_base), entry)
    try:
        return os.stat(path).st_size
    except OSError as e:
        _raise_for(e, device_id, entry, path)
