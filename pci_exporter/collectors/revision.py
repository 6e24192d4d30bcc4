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
from pci_exporter.pcie.parsers import parse_revision


class RevisionCollector(MetricCollector):
    """Reports the revision as a label on a constant 1 gauge."""

    name = "pci_device_revision"
    documentation = "The revisions of the pci device"
    labels = ("device", "revision")
    attribute = "revision"

    def _read(self, device_id: str) -> Iterator[MetricSample]:
        revision = parse_revision(self._read_attribute(device_id, self.attribute))
        yield self._sample(1, device_id, revision)
