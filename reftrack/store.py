# store.py -- The ref store
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

"""The ref store, the object a browser talks to about refs."""

from collections.abc import Callable, Iterator

from .log_utils import getLogger
from .ref_index import RefIndex
from .refs import Ref, RefCatalog
from .reload import RefReconciler
from .repo import RepoInfo
from .source import DataSource, GitDataSource

logger = getLogger(__name__)


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


class RefStore:
    """Refs of one repository, with lookup by object id.

    The store owns the catalog, the ref index and the head pointer. It is
    not threadsafe; a host running several threads must serialize access.
    """

    def __init__(self, repo: RepoInfo, source: DataSource | None = None) -> None:
        """Initialize a RefStore.

        Args:
          repo: Settings of the repository
          source: Source of refs; defaults to running git on repo.git_dir
        """
        self.repo = repo
        self.catalog = RefCatalog(repo.object_format)
        self.index = RefIndex(self.catalog)
        self.reconciler = RefReconciler(self.catalog, self.index)
        self._source = source
        self._loaded = False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.repo!r})"

    def __iter__(self) -> Iterator[Ref]:
        """Iterate over the refs that point at an object, in display order."""
        return self.catalog.visible()

    @property
    def source(self) -> DataSource:
        if self._source is None:
            self._source = GitDataSource(self.repo.git_dir)
        return self._source

    @property
    def loaded(self) -> bool:
        return self._loaded

    def reload(self, force: bool = False) -> None:
        """Load the refs from the source.

        Unless forced, nothing is done once a load has succeeded. A forced reload
        also resolves HEAD again.

        Raises:
          SourceError: if the source failed
          RefAllocationError: if the catalog could not be grown
        """
        if force:
            self.repo.head = b""
        elif self._loaded:
            return
        if self._source is None and not self.repo.git_dir:
            logger.debug("not in a repository, no refs to load")
        else:
            self.reconciler.run(self.source, self.repo)
        self._loaded = True

    def insert(
        self,
        id: str | bytes,
        name: str | bytes,
        remote: str | bytes = b"",
        head: str | bytes = b"",
    ) -> Ref | None:
        """Add a ref outside of a reload.

        The ref is classified like a listed one, using the given remote and
        head instead of the repository settings.

        Returns: The stored ref, or None if the line was skipped
        Raises:
          RefAllocationError: if the catalog could not be grown
        """
        return self.catalog.add(
            _to_bytes(id), _to_bytes(name), _to_bytes(remote), _to_bytes(head)
        )

    def for_each(self, visitor: Callable[[Ref], bool]) -> None:
        """Call visitor for every ref in display order until it returns False."""
        self.catalog.for_each(visitor)

    def head_ref(self) -> Ref | None:
        """Return the ref HEAD points at, if any."""
        return self.catalog.head

    def lookup(self, id: str | bytes) -> list[Ref] | None:
        """Return the refs pointing at an object, in display order.

        Returns: The refs, or None if no ref points at id
        """
        return self.index.get(_to_bytes(id))
