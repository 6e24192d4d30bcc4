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

import pytest

from pci_exporter.errors import AttributeNotPresent, AttributeReadError
from pci_exporter.pcie.sysfs import entry_size, list_device_entries, read_attribute


class TestReadAttribute:
    def test_returns_raw_content(self, sysfs):
        sysfs.add_device("0000:04:00.0", current_link_speed="16.0 GT/s PCIe\n")
        assert read_attribute("0000:04:00.0", "current_link_speed", sysfs.base) == "16.0 GT/s PCIe\n"

    def test_missing_file(self, sysfs):
        """Test that an absent optional attribute is reported as not present."""
        sysfs.add_device("0000:04:00.0")
        with pytest.raises(AttributeNotPresent) as exc_info:
            read_attribute("0000:04:00.0", "current_link_speed", sysfs.base)
        assert exc_info.value.device_id == "0000:04:00.0"
        assert exc_info.value.attribute == "current_link_speed"
        assert exc_info.value.path.endswith(os.path.join("0000:04:00.0", "current_link_speed"))

    def test_missing_device(self, sysfs):
        """Test that a device removed after enumeration is reported as not present."""
        with pytest.raises(AttributeNotPresent):
            read_attribute("0000:04:00.0", "revision", sysfs.base)

    def test_unreadable_entry(self, sysfs):
        """Test that an entry that exists but cannot be read is a read error."""
        device_dir = sysfs.add_device("0000:04:00.0")
        os.makedirs(os.path.join(device_dir, "revision"))
        with pytest.raises(AttributeReadError) as exc_info:
            read_attribute("0000:04:00.0", "revision", sysfs.base)
        assert not isinstance(exc_info.value, AttributeNotPresent)

    def test_reads_fresh_content_every_call(self, sysfs):
        """Test that values are not cached between calls."""
        sysfs.add_device("0000:04:00.0", current_link_width="16\n")
        assert read_attribute("0000:04:00.0", "current_link_width", sysfs.base) == "16\n"
        sysfs.add_device("0000:04:00.0", current_link_width="8\n")
        assert read_attribute("0000:04:00.0", "current_link_width", sysfs.base) == "8\n"


class TestDeviceEntries:
    def test_lists_sorted_entries(self, sysfs):
        sysfs.add_device("0000:04:00.0", vendor="0x10de\n", device="0x2330\n")
        sysfs.add_region("0000:04:00.0", "resource0", 16)
        assert list_device_entries("0000:04:00.0", sysfs.base) == ["device", "resource0", "vendor"]

    def test_list_missing_device(self, sysfs):
        with pytest.raises(AttributeNotPresent) as exc_info:
            list_device_entries("0000:04:00.0", sysfs.base)
        assert exc_info.value.attribute is None

    def test_entry_size(self, sysfs):
        sysfs.add_device("0000:04:00.0")
        sysfs.add_region("0000:04:00.0", "resource0", 16777216)
        assert entry_size("0000:04:00.0", "resource0", sysfs.base) == 16777216

    def test_entry_size_missing(self, sysfs):
        sysfs.add_device("0000:04:00.0")
        with pytest.raises(AttributeNotPresent):
            entry_size("0000:04:00.0", "resource3", sysfs.base)
