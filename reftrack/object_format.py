# object_format.py -- Object format definitions
# Copyright (C) 2025 The reftrack developers
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# reftrack is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Object formats (hash algorithms) a repository may use.

Only the length of the hexadecimal object name matters here: it bounds the
identifiers stored for refs.
"""


class ObjectFormat:
    """Object format (hash algorithm) used in Git."""

    def __init__(self, name: str, hex_length: int) -> None:
        """Initialize an object format.

        Args:
            name: Name of the format (e.g., "sha1", "sha256")
            hex_length: Length of the hexadecimal object ID in characters
        """
        self.name = name
        self.hex_length = hex_length

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ObjectFormat({self.name!r})"


SHA1 = ObjectFormat("sha1", hex_length=40)
SHA256 = ObjectFormat("sha256", hex_length=64)

OBJECT_FORMATS = {
    "sha1": SHA1,
    "sha256": SHA256,
}

DEFAULT_OBJECT_FORMAT = SHA1


def get_object_format(name: str | None = None) -> ObjectFormat:
    """Get an object format by name.

    Args:
        name: Format name ("sha1" or "sha256"). If None, returns default.

    Returns:
        ObjectFormat instance

    Raises:
        ValueError: If the format name is not supported
    """
    if name is None:
        return DEFAULT_OBJECT_FORMAT
    try:
        return OBJECT_FORMATS[name.lower()]
    except KeyError:
        raise ValueError(f"Unsupported object format: {name}")
