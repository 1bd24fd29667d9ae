# reload.py -- Reconciling the ref catalog with its source
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

"""Reconciling the ref catalog with its source.

A reload walks through these states:

 STALING      every ref is marked stale and the head is forgotten
 INGESTING    HEAD is resolved if needed and every listed ref is stored
 TOMBSTONING  refs that were not listed lose their id
 PRUNING      the ref index drops refs that moved
 SORTED       the catalog is put in display order

and then returns to IDLE. A failure while ingesting aborts the reload
without undoing the refs already stored; the remaining refs stay stale.
"""

from enum import Enum

from .log_utils import getLogger
from .ref_index import RefIndex
from .refs import RefCatalog
from .repo import RepoInfo
from .source import DataSource

logger = getLogger(__name__)


class ReloadState(Enum):
    """States of a reload."""

    IDLE = "idle"
    STALING = "staling"
    INGESTING = "ingesting"
    TOMBSTONING = "tombstoning"
    PRUNING = "pruning"
    SORTED = "sorted"


class RefReconciler:
    """Brings a catalog and its index in line with a ref source."""

    def __init__(self, catalog: RefCatalog, index: RefIndex) -> None:
        self.catalog = catalog
        self.index = index
        self.state = ReloadState.IDLE

    def run(self, source: DataSource, repo: RepoInfo) -> None:
        """Reload the catalog from source.

        Args:
          source: Source listing the refs
          repo: Repository settings; the head is resolved through the
            source if it is not known yet
        Raises:
          SourceError: if the source failed
          RefAllocationError: if the catalog could not be grown
        """
        try:
            self._stale()
            ingested = self._ingest(source, repo)
            tombstoned = self._tombstone()
            pruned = self._prune()
            self._sort()
        finally:
            self.state = ReloadState.IDLE
        logger.debug(
            "reloaded %d refs: %d tombstoned, %d pruned from index",
            ingested,
            tombstoned,
            pruned,
        )

    def _stale(self) -> None:
        self.state = ReloadState.STALING
        self.catalog.mark_stale()

    def _ingest(self, source: DataSource, repo: RepoInfo) -> int:
        self.state = ReloadState.INGESTING
        if not repo.head:
            repo.set_head(source.symbolic_head())
            logger.debug("resolved HEAD to %r", repo.head)
        count = 0
        for id, name in source.iter_refs():
            if self.catalog.add(id, name, repo.remote, repo.head) is not None:
                count += 1
        return count

    def _tombstone(self) -> int:
        self.state = ReloadState.TOMBSTONING
        return self.catalog.tombstone_stale()

    def _prune(self) -> int:
        self.state = ReloadState.PRUNING
        return self.index.prune_all()

    def _sort(self) -> None:
        self.state = ReloadState.SORTED
        self.catalog.sort()
