# objects.py -- Object identifiers
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

"""Object identifiers as stored on refs."""

import binascii

from .object_format import DEFAULT_OBJECT_FORMAT, ObjectFormat


def valid_hexsha(hex: bytes | str) -> bool:
    """Check whether a string is a plausible hexadecimal object name."""
    if len(hex) not in (40, 64):
        return False
    try:
        binascii.unhexlify(hex)
    except (TypeError, binascii.Error):
        return False
    else:
        return True


class ObjectID(bytes):
    """An object identifier no longer than the hex length of its format.

    Longer input is truncated on construction, so code holding an ObjectID
    never has to check its length again. The empty ObjectID means "no object"
    and is what a tombstoned ref carries.
    """

    __slots__ = ()

    def __new__(
        cls,
        value: bytes | str = b"",
        object_format: ObjectFormat = DEFAULT_OBJECT_FORMAT,
    ) -> "ObjectID":
        if isinstance(value, str):
            value = value.encode("ascii")
        return super().__new__(cls, value[: object_format.hex_length])

    def __repr__(self) -> str:
        return f"ObjectID({bytes(self)!r})"


EMPTY_ID = ObjectID()
