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

import re
import string

from pci_exporter.errors import ParseError

REGION_PREFIX = "resource"

_LEADING_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")
_REGION_RE = re.compile(rf"{REGION_PREFIX}\d+")
_HEX_DIGITS = frozenset(string.hexdigits)


def parse_link_speed(text: str) -> float:
    """Extract the transfer rate from a current_link_speed value.

    '8.0 GT/s PCIe' -> 8.0, '2.5 GT/s' -> 2.5. Devices that do not report a
    speed show 'Unknown', which has no leading number and is rejected.
    """
    match = _LEADING_NUMBER_RE.match(text.strip())
    if not match:
        raise ParseError(f"no leading number in link speed {text!r}")
    return float(match.group(1))


def parse_link_width(text: str) -> float:
    """Parse a current_link_width value such as '16\\n' into 16.0."""
    value = text.strip()
    if not value.isdecimal():
        raise ParseError(f"link width is not an integer: {text!r}")
    return float(int(value))


def _strip_hex_prefix(text: str, what: str) -> str:
    value = text.strip()
    if value[:2].lower() == "0x":
        value = value[2:]
    if not value or not set(value) <= _HEX_DIGITS:
        raise ParseError(f"{what} is not a hex value: {text!r}")
    return value


def parse_revision(text: str) -> str:
    """Return the hex digits of a revision file, e.g. '0xa1\\n' -> 'a1'."""
    return _strip_hex_prefix(text, "revision")


def parse_hex_id(text: str) -> str:
    """Normalize a vendor or device id file, e.g. '0x10DE\\n' -> '0x10de'."""
    return "0x" + _strip_hex_prefix(text, "id").lower()


def is_region_entry(name: str) -> bool:
    """True for resource0, resource1, resource2_wc and friends.

    The plain 'resource' file lists every region of the device and is
    excluded so the regions are not counted twice.
    """
    return _REGION_RE.match(name) is not None
