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
from collections.abc import Iterable
from typing import ClassVar, NamedTuple

from prometheus_client.core import GaugeMetricFamily

from pci_exporter.errors import AttributeNotPresent, AttributeReadError, ParseError
from pci_exporter.pcie.sysfs import DEFAULT_SYSFS_BASE, read_attribute


class MetricSample(NamedTuple):
    """One gauge value; labels are ordered like the metric's label names."""

    name: str
    labels: tuple[str, ...]
    value: float


class MetricCollector:
    """Reads one kind of PCI device metric.

    Subclasses set the metric name, help text and label names, and implement
    `_read` for a single device. `collect` turns every expected failure into
    an empty result plus a log line so one bad file never stops the others.
    """

    name: ClassVar[str]
    documentation: ClassVar[str]
    labels: ClassVar[tuple[str, ...]] = ("device",)

    def __init__(self, sysfs_base: str = DEFAULT_SYSFS_BASE) -> None:
        self.sysfs_base = sysfs_base

    def describe(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(self.name, self.documentation, labels=self.labels)

    def collect(self, device_id: str) -> list[MetricSample]:
        try:
            return list(self._read(device_id))
        except AttributeNotPresent as e:
            log.debug(f"{self.name}: {e.attribute or 'directory'} not present for device {device_id}")
        except AttributeReadError as e:
            log.warning(f"{self.name}: could not read {e.path}: {e.reason}")
        except ParseError as e:
            log.warning(f"{self.name}: could not parse value for device {device_id}: {e}")
        return []

    def _read(self, device_id: str) -> Iterable[MetricSample]:
        raise NotImplementedError

    def _read_attribute(self, device_id: str, attribute: str) -> str:
        return read_attribute(device_id, attribute, self.sysfs_base)

    def _sample(self, value: float, *labels: str) -> MetricSample:
        return MetricSample(self.name, labels, value)
