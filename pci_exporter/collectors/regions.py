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

import logging as log
from collections.abc import Iterator

from pci_exporter.collectors.base import MetricCollector, MetricSample
from pci_exporter.errors import AttributeNotPresent, AttributeReadError
from pci_exporter.pcie.parsers import is_region_entry
from pci_exporter.pcie.sysfs import entry_size, list_device_entries


class RegionCollector(MetricCollector):
    """Size of every memory region (BAR) of a device.

    The size comes from the resourceN file itself, not from its content:
    sysfs reports the length of the mapped region as the file size.
    """

    name = "pci_device_region_size_bytes"
    documentation = "The size of each memory region of the pci device"
    labels = ("device", "region")

    def _read(self, device_id: str) -> Iterator[MetricSample]:
        for entry in list_device_entries(device_id, self.sysfs_base):
            if not is_region_entry(entry):
                continue
            try:
                size = entry_size(device_id, entry, self.sysfs_base)
            except (AttributeNotPresent, AttributeReadError) as e:
                log.warning(f"Could not collect size for region {entry} in slot {device_id}: {e}")
                continue
            yield self._sample(float(size), device_id, entry)
