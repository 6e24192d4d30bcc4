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


class PciExporterError(Exception):
    """Base class for errors raised while collecting PCI device metrics."""


class SysfsAttributeError(PciExporterError):
    """A sysfs entry of a PCI device could not be used.

    Attributes:
        device_id: PCI address of the device, e.g. '0000:04:00.0'.
        attribute: Entry name under the device directory, or None when the
            device directory itself was the target.
        path: Absolute path that was accessed.
    """

    def __init__(self, device_id: str, attribute: str | None, path: str, reason: str = "") -> None:
        self.device_id = device_id
        self.attribute = attribute
        self.path = path
        self.reason = reason
        message = f"{path}: {reason}" if reason else path
        super().__init__(message)


class AttributeNotPresent(SysfsAttributeError):
    """The entry does not exist. Expected for optional attributes."""


class AttributeReadError(SysfsAttributeError):
    """The entry exists but could not be read."""


class ParseError(PciExporterError, ValueError):
    """Attribute content is not in the expected shape."""
