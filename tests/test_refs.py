# test_refs.py -- tests for refs.py
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

"""Tests for reftrack.refs."""

from reftrack import errors
from reftrack.object_format import SHA256
from reftrack.refs import (
    ClassifiedRef,
    Ref,
    RefCatalog,
    RefFlags,
    RefState,
    classify_ref,
    ref_sort_key,
    sort_refs,
    strip_branch_prefix,
)

from . import TestCase

ONES = b"1" * 40
TWOS = b"2" * 40
THREES = b"3" * 40
FOURS = b"4" * 40


class ClassifyRefTests(TestCase):
    def test_branch(self) -> None:
        self.assertEqual(
            ClassifiedRef(b"topic", b"topic", ONES, RefFlags()),
            classify_ref(ONES, b"refs/heads/topic", b"origin/master", b"master"),
        )

    def test_checked_out_branch(self) -> None:
        classified = classify_ref(ONES, b"refs/heads/master", b"", b"master")
        assert classified is not None
        self.assertEqual(b"master", classified.name)
        self.assertEqual(RefFlags(head=True), classified.flags)

    def test_tag(self) -> None:
        classified = classify_ref(ONES, b"refs/tags/v1.0")
        assert classified is not None
        self.assertEqual(b"v1.0", classified.key)
        self.assertEqual(b"v1.0", classified.name)
        self.assertEqual(RefFlags(tag=True, annotated_tag=True), classified.flags)
        self.assertFalse(classified.peeled)

    def test_peeled_tag(self) -> None:
        classified = classify_ref(TWOS, b"refs/tags/v1.0^{}")
        assert classified is not None
        self.assertEqual(b"v1.0", classified.name)
        self.assertEqual(RefFlags(tag=True), classified.flags)
        self.assertTrue(classified.peeled)

    def test_remote(self) -> None:
        classified = classify_ref(ONES, b"refs/remotes/origin/next", b"origin/master")
        assert classified is not None
        self.assertEqual(b"origin/next", classified.name)
        self.assertEqual(RefFlags(remote=True), classified.flags)

    def test_tracked_remote(self) -> None:
        classified = classify_ref(
            ONES, b"refs/remotes/origin/master", b"origin/master"
        )
        assert classified is not None
        self.assertEqual(RefFlags(remote=True, tracked=True), classified.flags)

    def test_replace(self) -> None:
        self.assertEqual(
            ClassifiedRef(TWOS, b"replaced", TWOS, RefFlags(replace=True)),
            classify_ref(ONES, b"refs/replace/" + TWOS),
        )

    def test_head_when_resolved(self) -> None:
        self.assertIsNone(classify_ref(ONES, b"HEAD", b"", b"master"))

    def test_detached_head(self) -> None:
        classified = classify_ref(ONES, b"HEAD")
        assert classified is not None
        self.assertEqual(b"HEAD", classified.name)
        self.assertEqual(RefFlags(head=True), classified.flags)

    def test_other(self) -> None:
        self.assertEqual(
            ClassifiedRef(b"refs/notes/commits", b"refs/notes/commits", ONES, RefFlags()),
            classify_ref(ONES, b"refs/notes/commits"),
        )


class StripBranchPrefixTests(TestCase):
    def test_branch(self) -> None:
        self.assertEqual(b"master", strip_branch_prefix(b"refs/heads/master"))

    def test_other(self) -> None:
        self.assertEqual(b"refs/tags/v1", strip_branch_prefix(b"refs/tags/v1"))


def _ref(name: bytes, **flags: bool) -> Ref:
    return Ref(name, name, ONES, RefFlags(**flags))


class RefSortTests(TestCase):
    def test_categories(self) -> None:
        tag = _ref(b"v1", tag=True)
        head = _ref(b"master", head=True)
        tracked = _ref(b"origin/master", remote=True, tracked=True)
        remote = _ref(b"origin/next", remote=True)
        branch = _ref(b"topic")
        self.assertEqual(
            [tag, head, tracked, branch, remote],
            sort_refs([remote, branch, tracked, head, tag]),
        )

    def test_annotated_before_lightweight(self) -> None:
        lightweight = _ref(b"a", tag=True)
        annotated = _ref(b"b", tag=True, annotated_tag=True)
        self.assertEqual([annotated, lightweight], sort_refs([lightweight, annotated]))

    def test_replace_before_branch(self) -> None:
        branch = _ref(b"a")
        replace = _ref(b"replaced", replace=True)
        self.assertEqual([replace, branch], sort_refs([branch, replace]))

    def test_name_breaks_ties(self) -> None:
        refs = [_ref(b"b"), _ref(b"c"), _ref(b"a")]
        self.assertEqual([b"a", b"b", b"c"], [ref.name for ref in sort_refs(refs)])

    def test_remote_names(self) -> None:
        refs = [_ref(b"origin/b", remote=True), _ref(b"origin/a", remote=True)]
        self.assertEqual(
            [b"origin/a", b"origin/b"], [ref.name for ref in sort_refs(refs)]
        )

    def test_key_ignores_id(self) -> None:
        self.assertEqual(
            ref_sort_key(Ref(b"a", b"a", ONES)), ref_sort_key(Ref(b"a", b"a", TWOS))
        )


class RefTests(TestCase):
    def test_flags(self) -> None:
        ref = Ref(b"v1", b"v1", ONES, RefFlags(tag=True, annotated_tag=True))
        self.assertTrue(ref.is_tag)
        self.assertTrue(ref.is_annotated_tag)
        self.assertFalse(ref.is_head)
        self.assertFalse(ref.is_remote)
        self.assertFalse(ref.is_tracked)
        self.assertFalse(ref.is_replace)

    def test_visible(self) -> None:
        ref = Ref(b"a", b"a", ONES)
        self.assertTrue(ref.valid)
        self.assertTrue(ref.visible)
        ref.state = RefState.STALE
        self.assertFalse(ref.valid)
        self.assertFalse(ref.visible)

    def test_empty_id_not_visible(self) -> None:
        self.assertFalse(Ref(b"a", b"a").visible)

    def test_repr(self) -> None:
        self.assertIn("b'master'", repr(Ref(b"master", b"master", ONES)))


class RefCatalogTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.catalog = RefCatalog()

    def test_add_creates(self) -> None:
        ref = self.catalog.add(ONES, b"refs/heads/master")
        assert ref is not None
        self.assertEqual(b"master", ref.name)
        self.assertEqual(ONES, ref.id)
        self.assertEqual([ref], list(self.catalog))

    def test_add_updates_in_place(self) -> None:
        first = self.catalog.add(ONES, b"refs/heads/master")
        second = self.catalog.add(TWOS, b"refs/heads/master")
        self.assertIs(first, second)
        self.assertEqual(1, len(self.catalog))
        self.assertEqual(TWOS, second.id)

    def test_add_overwrites_flags(self) -> None:
        ref = self.catalog.add(ONES, b"refs/heads/master", b"", b"master")
        assert ref is not None
        self.assertTrue(ref.is_head)
        self.catalog.add(ONES, b"refs/heads/master", b"", b"other")
        self.assertFalse(ref.is_head)

    def test_add_skipped_head(self) -> None:
        self.assertIsNone(self.catalog.add(ONES, b"HEAD", b"", b"master"))
        self.assertEqual(0, len(self.catalog))

    def test_annotated_tag_collapse(self) -> None:
        self.catalog.add(b"Xobj", b"refs/tags/v1")
        self.catalog.add(b"Ycommit", b"refs/tags/v1^{}")
        self.assertEqual(1, len(self.catalog))
        ref = self.catalog.find(b"v1")
        assert ref is not None
        self.assertEqual(b"v1", ref.name)
        self.assertTrue(ref.is_tag)
        self.assertTrue(ref.is_annotated_tag)
        self.assertEqual(b"Ycommit", ref.id)

    def test_peeled_tag_out_of_order(self) -> None:
        self.catalog.add(ONES, b"refs/tags/v1")
        self.catalog.add(THREES, b"refs/heads/master")
        with self.assertLogs("reftrack.refs", level="WARNING"):
            self.catalog.add(TWOS, b"refs/tags/v1^{}")
        ref = self.catalog.find(b"v1")
        assert ref is not None
        self.assertEqual(TWOS, ref.id)
        self.assertTrue(ref.is_tag)
        self.assertFalse(ref.is_annotated_tag)

    def test_peeled_tag_alone(self) -> None:
        with self.assertLogs("reftrack.refs", level="WARNING"):
            ref = self.catalog.add(TWOS, b"refs/tags/v1^{}")
        assert ref is not None
        self.assertEqual(b"v1", ref.name)
        self.assertFalse(ref.is_annotated_tag)

    def test_replacement_keying(self) -> None:
        first = self.catalog.add(b"A", b"refs/replace/B")
        second = self.catalog.add(b"C", b"refs/replace/D")
        assert first is not None and second is not None
        self.assertIsNot(first, second)
        self.assertEqual(b"replaced", first.name)
        self.assertEqual(b"replaced", second.name)
        self.assertEqual(b"B", first.key)
        self.assertEqual(b"D", second.key)
        self.assertTrue(first.is_replace)
        self.assertTrue(second.is_replace)
        self.assertIs(first, self.catalog.find(b"B", replace=True))
        self.assertIs(second, self.catalog.find(b"D", replace=True))
        self.assertIsNone(self.catalog.find(b"replaced"))

    def test_replacement_does_not_touch_branch(self) -> None:
        branch = self.catalog.add(TWOS, b"refs/heads/master")
        replaced = self.catalog.add(ONES, b"refs/replace/" + TWOS)
        self.assertIsNot(branch, replaced)
        assert branch is not None
        self.assertFalse(branch.is_replace)

    def test_branch_named_replaced(self) -> None:
        replaced = self.catalog.add(ONES, b"refs/replace/" + TWOS)
        branch = self.catalog.add(THREES, b"refs/heads/replaced")
        self.assertIsNot(branch, replaced)
        self.assertEqual(2, len(self.catalog))

    def test_head(self) -> None:
        self.assertIsNone(self.catalog.head)
        self.catalog.add(ONES, b"refs/heads/topic", b"", b"master")
        master = self.catalog.add(TWOS, b"refs/heads/master", b"", b"master")
        self.assertIs(master, self.catalog.head)

    def test_set_head_if_needed(self) -> None:
        ref = Ref(b"a", b"a", ONES)
        self.catalog.set_head_if_needed(ref)
        self.assertIsNone(self.catalog.head)
        ref.flags = RefFlags(head=True)
        self.catalog.set_head_if_needed(ref)
        self.assertIs(ref, self.catalog.head)

    def test_id_bounded(self) -> None:
        ref = self.catalog.add(ONES + b"extra", b"refs/heads/master")
        assert ref is not None
        self.assertEqual(ONES, ref.id)

    def test_id_bounded_sha256(self) -> None:
        catalog = RefCatalog(SHA256)
        long_id = b"a" * 64
        ref = catalog.add(long_id + b"ff", b"refs/heads/master")
        assert ref is not None
        self.assertEqual(long_id, ref.id)

    def test_mark_stale(self) -> None:
        ref = self.catalog.add(ONES, b"refs/heads/master", b"", b"master")
        assert ref is not None
        self.catalog.mark_stale()
        self.assertIs(RefState.STALE, ref.state)
        self.assertIsNone(self.catalog.head)
        self.assertEqual([], list(self.catalog.visible()))

    def test_tombstone_stale(self) -> None:
        kept = self.catalog.add(ONES, b"refs/heads/master")
        gone = self.catalog.add(TWOS, b"refs/heads/topic")
        assert kept is not None and gone is not None
        self.catalog.mark_stale()
        self.catalog.add(ONES, b"refs/heads/master")
        self.assertEqual(1, self.catalog.tombstone_stale())
        self.assertEqual(b"topic", gone.name)
        self.assertEqual(b"", gone.id)
        self.assertIs(RefState.TOMBSTONED, gone.state)
        self.assertIs(RefState.FRESH, kept.state)
        self.assertEqual([kept], list(self.catalog.visible()))
        self.assertEqual(2, len(self.catalog))

    def test_revive_tombstoned(self) -> None:
        ref = self.catalog.add(ONES, b"refs/heads/topic")
        self.catalog.mark_stale()
        self.catalog.tombstone_stale()
        self.assertIs(ref, self.catalog.add(TWOS, b"refs/heads/topic"))
        assert ref is not None
        self.assertEqual(TWOS, ref.id)
        self.assertTrue(ref.visible)

    def test_revive_tombstoned_replacement(self) -> None:
        ref = self.catalog.add(ONES, b"refs/replace/" + TWOS)
        self.catalog.mark_stale()
        self.catalog.tombstone_stale()
        self.assertIs(ref, self.catalog.add(ONES, b"refs/replace/" + TWOS))
        self.assertEqual(1, len(self.catalog))

    def test_sort(self) -> None:
        self.catalog.add(ONES, b"refs/remotes/origin/master")
        self.catalog.add(ONES, b"refs/heads/topic")
        self.catalog.add(ONES, b"refs/tags/v1")
        self.catalog.sort()
        self.assertEqual(
            [b"v1", b"topic", b"origin/master"], [ref.name for ref in self.catalog]
        )

    def test_for_each(self) -> None:
        for name in (b"a", b"b", b"c"):
            self.catalog.add(ONES, b"refs/heads/" + name)
        seen = []

        def visitor(ref: Ref) -> bool:
            seen.append(ref.name)
            return ref.name != b"b"

        self.catalog.for_each(visitor)
        self.assertEqual([b"a", b"b"], seen)

    def test_allocation_failure(self) -> None:
        class FailingList(list):
            def append(self, item: object) -> None:
                raise MemoryError

        self.catalog._refs = FailingList()
        self.assertRaises(
            errors.RefAllocationError, self.catalog.add, ONES, b"refs/heads/master"
        )
        self.assertIsNone(self.catalog.find(b"master"))

    def test_allocation_failure_keeps_one_record_per_key(self) -> None:
        class FailingDict(dict):
            def __setitem__(self, key: object, value: object) -> None:
                raise MemoryError

        self.catalog._by_name = FailingDict()
        self.assertRaises(
            errors.RefAllocationError, self.catalog.add, ONES, b"refs/heads/master"
        )
        self.assertEqual(0, len(self.catalog))
        self.catalog._by_name = {}
        self.catalog.add(ONES, b"refs/heads/master")
        self.catalog.add(TWOS, b"refs/heads/master")
        self.assertEqual(1, len(self.catalog))
