# ref_index.py -- Lookup of refs by object id
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

"""Cache answering which refs point at an object."""

from .errors import RefAllocationError
from .log_utils import getLogger
from .objects import ObjectID
from .refs import Ref, RefCatalog, sort_refs

logger = getLogger(__name__)


class RefIndex:
    """Map from object id to the refs pointing at it.

    The list for an id is built from the catalog the first time that id is
    looked up. After each reload, :meth:`prune_all` drops refs that moved
    away from the id of their list; lists are never rebuilt, and a list that
    becomes empty is kept so the id keeps resolving to nothing.
    """

    def __init__(self, catalog: RefCatalog) -> None:
        self._catalog = catalog
        self._lists: dict[bytes, list[Ref]] = {}

    def __len__(self) -> int:
        return len(self._lists)

    def get(self, id: bytes) -> list[Ref] | None:
        """Look up the refs pointing at an object.

        Args:
          id: Object id
        Returns: The refs in display order, or None if none point at id
        Raises:
          RefAllocationError: if the new list could not be stored
        """
        id = ObjectID(id, self._catalog.object_format)
        if not id:
            return None
        refs = self._lists.get(id)
        if refs is None:
            found = [ref for ref in self._catalog.visible() if ref.id == id]
            if not found:
                return None
            try:
                refs = self._lists[id] = sort_refs(found)
            except MemoryError as e:
                raise RefAllocationError("ref index") from e
        if not refs:
            return None
        return list(refs)

    def prune_all(self) -> int:
        """Drop refs that no longer point at the id of their list.

        Relative order within each list is preserved.

        Returns: Number of refs dropped
        """
        dropped = 0
        for id, refs in self._lists.items():
            kept = [ref for ref in refs if ref.id == id]
            if len(kept) != len(refs):
                dropped += len(refs) - len(kept)
                refs[:] = kept
        if dropped:
            logger.debug("pruned %d stale entries from the ref index", dropped)
        return dropped
