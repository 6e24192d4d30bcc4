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

from pci_exporter.collectors.base import MetricCollector, MetricSample
from pci_exporter.collectors.device_info import DeviceInfoCollector
from pci_exporter.collectors.link_speed import LinkSpeedCollector
from pci_exporter.collectors.link_width import LinkWidthCollector
from pci_exporter.collectors.regions import RegionCollector
from pci_exporter.collectors.revision import RevisionCollector
from pci_exporter.pcie.sysfs import DEFAULT_SYSFS_BASE

__all__ = [
    "MetricCollector",
    "MetricSample",
    "DeviceInfoCollector",
    "LinkSpeedCollector",
    "LinkWidthCollector",
    "RegionCollector",
    "RevisionCollector",
    "default_collectors",
]


def default_collectors(sysfs_base: str = DEFAULT_SYSFS_BASE) -> list[MetricCollector]:
    return [
        RegionCollector(sysfs_base),
        RevisionCollector(sysfs_base),
        LinkSpeedCollector(sysfs_base),
        LinkWidthCollector(sysfs_base),
        DeviceInfoCollector(sysfs_base),
    ]
