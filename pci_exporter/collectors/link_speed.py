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

from collections.abc import Iterator

from pci_exporter.collectors.base import MetricCollector, MetricSample
from pci_exporter.pcie.parsers import parse_link_speed


class LinkSpeedCollector(MetricCollector):
    name = "pci_device_link_speed_GTs"
    documentation = "The link speed of the pci device"
    attribute = "current_link_speed"

    def _read(self, device_id: str) -> Iterator[MetricSample]:
        text = self._read_attribute(device_id, self.attribute)
        yield self._sample(parse_link_speed(text), device_id)
