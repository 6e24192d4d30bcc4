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
import tempfile

import pytest


class FakeSysfs:
    """Builds a fake /sys/bus/pci tree under a temporary directory."""

    def __init__(self, base: str) -> None:
        self.base = base
        self.devices_dir = os.path.join(base, "bus", "pci", "devices")
        self.drivers_dir = os.path.join(base, "bus", "pci", "drivers")
        os.makedirs(self.devices_dir, exist_ok=True)
        os.makedirs(self.drivers_dir, exist_ok=True)

    def add_device(self, addr: str, **attributes: str) -> str:
        device_dir = os.path.join(self.devices_dir, addr)
        os.makedirs(device_dir, exist_ok=True)
        for name, content in attributes.items():
            with open(os.path.join(device_dir, name), "w") as f:
                f.write(content)
        return device_dir

    def add_pcie_device(self, addr: str, speed: str = "8.0 GT/s PCIe\n", width: str = "16\n") -> str:
        """Create a device with every attribute the exporter reads."""
        device_dir = self.add_device(
            addr,
            current_link_speed=speed,
            current_link_width=width,
            revision="0xa1\n",
            vendor="0x10de\n",
            device="0x2330\n",
        )
        self.add_region(addr, "resource", 0)
        self.add_region(addr, "resource0", 4096)
        return device_dir

    def add_region(self, addr: str, name: str, size: int) -> None:
        path = os.path.join(self.devices_dir, addr, name)
        with open(path, "wb") as f:
            f.truncate(size)

    def remove_attribute(self, addr: str, name: str) -> None:
        os.unlink(os.path.join(self.devices_dir, addr, name))

    def bind(self, driver: str, addr: str) -> None:
        driver_dir = os.path.join(self.drivers_dir, driver)
        os.makedirs(driver_dir, exist_ok=True)
        os.symlink(os.path.join(self.devices_dir, addr), os.path.join(driver_dir, addr))

    def add_driver_entry(self, driver: str, name: str) -> None:
        """Create a non-device entry such as bind, unbind or new_id."""
        driver_dir = os.path.join(self.drivers_dir, driver)
        os.makedirs(driver_dir, exist_ok=True)
        open(os.path.join(driver_dir, name), "w").close()


@pytest.fixture
def sysfs():
    with tempfile.TemporaryDirectory() as base:
        yield FakeSysfs(base)
