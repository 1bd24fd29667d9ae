# refs.py -- Ref records and the ref catalog
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

"""Ref handling.

Lines of ``git ls-remote`` output are classified into typed ref records, which
are kept in a :class:`RefCatalog`. Records are never removed from the catalog:
a ref that disappears from the repository is tombstoned (its id is cleared)
so that anything holding on to the record keeps a valid object.
"""

from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from typing import NamedTuple

from .errors import RefAllocationError
from .log_utils import getLogger
from .object_format import DEFAULT_OBJECT_FORMAT, ObjectFormat
from .objects import EMPTY_ID, ObjectID

logger = getLogger(__name__)

HEADREF = b"HEAD"
LOCAL_BRANCH_PREFIX = b"refs/heads/"
LOCAL_TAG_PREFIX = b"refs/tags/"
LOCAL_REMOTE_PREFIX = b"refs/remotes/"
LOCAL_REPLACE_PREFIX = b"refs/replace/"
PEELED_TAG_SUFFIX = b"^{}"

# Display name shared by all replacement refs; they are told apart by id.
REPLACED_NAME = b"replaced"


def strip_branch_prefix(symref: bytes) -> bytes:
    """Turn b"refs/heads/foo" into b"foo"; other refs are returned as is."""
    if symref.startswith(LOCAL_BRANCH_PREFIX):
        return symref[len(LOCAL_BRANCH_PREFIX) :]
    return symref


class RefState(Enum):
    """Where a ref stands in the reload cycle."""

    # Seen by the latest reload, or inserted directly.
    FRESH = "fresh"
    # Waiting to be seen again by the reload in progress.
    STALE = "stale"
    # Not seen by the last reload; the id has been cleared.
    TOMBSTONED = "tombstoned"


class RefFlags(NamedTuple):
    """Category flags of a ref."""

    tag: bool = False
    annotated_tag: bool = False
    head: bool = False
    remote: bool = False
    tracked: bool = False
    replace: bool = False


class ClassifiedRef(NamedTuple):
    """A source line after classification.

    Attributes:
      key: Key the ref is stored under; the name, or for replacement refs
        the id of the replaced object
      name: Name to display
      id: Object id the ref points at
      flags: Category flags
      peeled: Whether the line carried the peeled tag suffix
    """

    key: bytes
    name: bytes
    id: bytes
    flags: RefFlags
    peeled: bool = False


def classify_ref(
    id: bytes, name: bytes, remote: bytes = b"", head: bytes = b""
) -> ClassifiedRef | None:
    """Classify a ``(id, name)`` pair as listed by git ls-remote.

    Args:
      id: Object id the ref points at
      name: Full ref name, e.g. b"refs/heads/master"
      remote: Remote branch being tracked, e.g. b"origin/master"
      head: Name of the checked out branch; empty when HEAD is detached
    Returns: The classification, or None if the line is to be skipped (a
      plain HEAD line while HEAD is a symbolic ref to a known branch)
    """
    if name.startswith(LOCAL_TAG_PREFIX):
        name = name[len(LOCAL_TAG_PREFIX) :]
        peeled = name.endswith(PEELED_TAG_SUFFIX)
        if peeled:
            name = name[: -len(PEELED_TAG_SUFFIX)]
        flags = RefFlags(tag=True, annotated_tag=not peeled)
        return ClassifiedRef(name, name, id, flags, peeled)

    if name.startswith(LOCAL_REMOTE_PREFIX):
        name = name[len(LOCAL_REMOTE_PREFIX) :]
        flags = RefFlags(remote=True, tracked=name == remote)
        return ClassifiedRef(name, name, id, flags)

    if name.startswith(LOCAL_REPLACE_PREFIX):
        replaced = name[len(LOCAL_REPLACE_PREFIX) :]
        return ClassifiedRef(replaced, REPLACED_NAME, replaced, RefFlags(replace=True))

    if name.startswith(LOCAL_BRANCH_PREFIX):
        name = name[len(LOCAL_BRANCH_PREFIX) :]
        return ClassifiedRef(name, name, id, RefFlags(head=name == head))

    if name == HEADREF:
        # HEAD is only listed on its own when it is not a symbolic ref,
        # e.g. during a rebase.
        if head:
            return None
        return ClassifiedRef(name, name, id, RefFlags(head=True))

    return ClassifiedRef(name, name, id, RefFlags())


class Ref:
    """A named reference as shown by the browser."""

    __slots__ = ("flags", "id", "key", "name", "state")

    def __init__(
        self,
        key: bytes,
        name: bytes,
        id: ObjectID = EMPTY_ID,
        flags: RefFlags = RefFlags(),
        state: RefState = RefState.FRESH,
    ) -> None:
        self.key = key
        self.name = name
        self.id = id
        self.flags = flags
        self.state = state

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.name!r}, {bytes(self.id)!r}, "
            f"{self.flags!r}, {self.state.name})"
        )

    @property
    def is_tag(self) -> bool:
        return self.flags.tag

    @property
    def is_annotated_tag(self) -> bool:
        return self.flags.annotated_tag

    @property
    def is_head(self) -> bool:
        return self.flags.head

    @property
    def is_remote(self) -> bool:
        return self.flags.remote

    @property
    def is_tracked(self) -> bool:
        return self.flags.tracked

    @property
    def is_replace(self) -> bool:
        return self.flags.replace

    @property
    def valid(self) -> bool:
        """Whether the ref was confirmed by the latest reload."""
        return self.state is RefState.FRESH

    @property
    def visible(self) -> bool:
        """Whether the ref should be shown: confirmed and pointing somewhere."""
        return self.state is RefState.FRESH and bool(self.id)


def ref_sort_key(ref: Ref) -> tuple[bool, bool, bool, bool, bool, bool, bytes]:
    """Sort key ordering refs the way the browser lists them.

    Tags come first, then annotated tags, the checked out branch, the
    tracked remote branch and replacement refs. Other remote branches come
    last. Ties are broken by name.
    """
    flags = ref.flags
    return (
        not flags.tag,
        not flags.annotated_tag,
        not flags.head,
        not flags.tracked,
        not flags.replace,
        flags.remote,
        ref.name,
    )


def sort_refs(refs: Iterable[Ref]) -> list[Ref]:
    """Return refs sorted by :func:`ref_sort_key`."""
    return sorted(refs, key=ref_sort_key)


class RefCatalog:
    """The deduplicated, ordered collection of refs.

    Refs are keyed by name, except replacement refs, which all share the name
    b"replaced" and are keyed by the id of the object they replace.

    The catalog is not threadsafe.
    """

    def __init__(self, object_format: ObjectFormat = DEFAULT_OBJECT_FORMAT) -> None:
        self.object_format = object_format
        self._refs: list[Ref] = []
        self._by_name: dict[bytes, Ref] = {}
        self._by_replaced_id: dict[bytes, Ref] = {}
        self._head: Ref | None = None
        self._last: Ref | None = None

    def __len__(self) -> int:
        return len(self._refs)

    def __iter__(self) -> Iterator[Ref]:
        """Iterate over all refs, tombstoned ones included."""
        return iter(self._refs)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._refs!r})"

    @property
    def head(self) -> Ref | None:
        """The ref HEAD points at, if known."""
        return self._head

    def visible(self) -> Iterator[Ref]:
        """Iterate over refs that point at an object, in catalog order."""
        return (ref for ref in self._refs if ref.visible)

    def find(self, key: bytes, replace: bool = False) -> Ref | None:
        """Look up a ref by its key.

        Args:
          key: Ref name, or for replacement refs the replaced object id
          replace: Whether to look up a replacement ref
        Returns: The ref, or None if there is none with that key
        """
        if replace:
            return self._by_replaced_id.get(ObjectID(key, self.object_format))
        return self._by_name.get(key)

    def for_each(self, visitor: Callable[[Ref], bool]) -> None:
        """Call visitor for every visible ref until it returns False."""
        for ref in self.visible():
            if not visitor(ref):
                break

    def upsert(self, classified: ClassifiedRef) -> Ref:
        """Create or update the ref for a classified source line.

        An existing ref has its flags and id overwritten, so the last line
        for a name wins. git ls-remote lists the peeled commit of an
        annotated tag right after the tag object, under the same name; the
        peeled line thus moves the tag to the commit while the tag keeps
        its annotated flag.

        Raises:
          RefAllocationError: if the catalog could not be grown
        """
        flags = classified.flags
        if flags.replace:
            key = ObjectID(classified.key, self.object_format)
            table = self._by_replaced_id
        else:
            key = classified.key
            table = self._by_name

        ref = table.get(key)
        if classified.peeled:
            if ref is not None and ref is self._last and ref.is_tag and ref.valid:
                flags = flags._replace(annotated_tag=ref.is_annotated_tag)
            else:
                logger.warning(
                    "peeled tag %s not listed right after its tag object",
                    classified.name.decode("utf-8", "replace"),
                )
        if ref is None:
            ref = Ref(key, classified.name)
            try:
                table[key] = ref
                self._refs.append(ref)
            except MemoryError as e:
                table.pop(key, None)
                raise RefAllocationError("ref catalog") from e

        ref.flags = flags
        ref.id = ObjectID(classified.id, self.object_format)
        ref.state = RefState.FRESH
        self._last = ref
        self.set_head_if_needed(ref)
        return ref

    def add(
        self, id: bytes, name: bytes, remote: bytes = b"", head: bytes = b""
    ) -> Ref | None:
        """Classify a source line and store it.

        Returns: The stored ref, or None if the line was skipped
        """
        classified = classify_ref(id, name, remote, head)
        if classified is None:
            logger.debug("skipping %r, HEAD is %r", name, head)
            return None
        return self.upsert(classified)

    def set_head_if_needed(self, ref: Ref) -> None:
        """Point the head at ref if it is flagged as head."""
        if ref.is_head:
            self._head = ref

    def mark_stale(self) -> None:
        """Mark every ref as waiting for confirmation and forget the head."""
        self._head = None
        self._last = None
        for ref in self._refs:
            ref.state = RefState.STALE

    def tombstone_stale(self) -> int:
        """Clear the id of every ref that was not confirmed.

        Returns: Number of refs that lost their id
        """
        count = 0
        for ref in self._refs:
            if ref.state is not RefState.STALE:
                continue
            if ref.id:
                count += 1
            ref.id = EMPTY_ID
            ref.state = RefState.TOMBSTONED
        return count

    def sort(self) -> None:
        """Put the catalog in display order."""
        self._refs.sort(key=ref_sort_key)
