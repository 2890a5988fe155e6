# test_links.py -- tests for links.py
# Copyright (C) 2026 The gitdag authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gitdag is dual-licensed under the Apache License, Version 2.0 and the GNU
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

"""Tests for gitdag.links."""

from dulwich.objects import ShaFile

from gitdag.errors import LinkParseError
from gitdag.links import extract_links, iter_header_fields, parse_tree
from gitdag.objects import ObjectKind, encode_canonical, hex_to_sha

from . import TestCase
from .utils import D, F, make_blob, make_commit, make_tag, make_tree

tree_sha = b"70c190eb48fa8bbb50ddc692a17b44cb781af7f6"
parent1 = b"0d89f20333fbb1d2f3a94da77f4981373d8f4310"
parent2 = b"4cffe90e0a41ad3f5190079d7c8f036bde29cbe6"


def canonical(obj: ShaFile) -> bytes:
    raw = obj.as_raw_string()
    return encode_canonical(obj.type_num, len(raw), raw)


def raw_canonical(kind: ObjectKind, payload: bytes) -> bytes:
    return encode_canonical(kind, len(payload), payload)


class CommitLinkTests(TestCase):
    def test_tree_and_parents(self) -> None:
        payload = (
            b"tree " + tree_sha + b"\n"
            b"parent " + parent1 + b"\n"
            b"parent " + parent2 + b"\n"
            b"author A <a@example.com> 1174773719 +0000\n"
            b"committer A <a@example.com> 1174773719 +0000\n"
            b"\n"
            b"Merge.\n"
        )
        self.assertEqual(
            {tree_sha, parent1, parent2},
            extract_links(raw_canonical(ObjectKind.COMMIT, payload)),
        )

    def test_duplicate_parent_collapses(self) -> None:
        payload = (
            b"tree " + tree_sha + b"\n"
            b"parent " + parent1 + b"\n"
            b"parent " + parent1 + b"\n"
            b"parent " + parent2 + b"\n"
            b"\n"
        )
        links = extract_links(raw_canonical(ObjectKind.COMMIT, payload))
        self.assertEqual({tree_sha, parent1, parent2}, links)
        self.assertEqual(3, len(links))

    def test_root_commit(self) -> None:
        tree = make_tree([(b"a", F, make_blob(b"a"))])
        commit = make_commit(tree)
        self.assertEqual({tree.id}, extract_links(canonical(commit)))

    def test_dulwich_commit(self) -> None:
        tree = make_tree([])
        p1 = make_commit(tree, message=b"one\n")
        p2 = make_commit(tree, message=b"two\n")
        commit = make_commit(tree, parents=[p1, p2])
        self.assertEqual({tree.id, p1.id, p2.id}, extract_links(canonical(commit)))

    def test_message_is_not_parsed(self) -> None:
        payload = (
            b"tree " + tree_sha + b"\n"
            b"\n"
            b"parent " + parent1 + b"\n"
        )
        self.assertEqual(
            {tree_sha}, extract_links(raw_canonical(ObjectKind.COMMIT, payload))
        )

    def test_signature_continuation_lines(self) -> None:
        payload = (
            b"tree " + tree_sha + b"\n"
            b"gpgsig -----BEGIN PGP SIGNATURE-----\n"
            b" parent " + parent2 + b"\n"
            b" -----END PGP SIGNATURE-----\n"
            b"\n"
            b"Signed.\n"
        )
        self.assertEqual(
            {tree_sha}, extract_links(raw_canonical(ObjectKind.COMMIT, payload))
        )

    def test_missing_tree(self) -> None:
        payload = b"parent " + parent1 + b"\n\n"
        self.assertRaises(
            LinkParseError, extract_links, raw_canonical(ObjectKind.COMMIT, payload)
        )

    def test_invalid_parent(self) -> None:
        payload = b"tree " + tree_sha + b"\nparent xyz\n\n"
        with self.assertRaises(LinkParseError) as cm:
            extract_links(raw_canonical(ObjectKind.COMMIT, payload))
        self.assertIn("parent", str(cm.exception))


class TreeLinkTests(TestCase):
    def test_entries(self) -> None:
        a = make_blob(b"a")
        b = make_blob(b"b")
        sub = make_tree([(b"c", F, a)])
        tree = make_tree([(b"a", F, a), (b"b", F, b), (b"sub", D, sub)])
        self.assertEqual({a.id, b.id, sub.id}, extract_links(canonical(tree)))

    def test_shared_entry_collapses(self) -> None:
        a = make_blob(b"same")
        tree = make_tree([(b"one", F, a), (b"two", F, a)])
        self.assertEqual({a.id}, extract_links(canonical(tree)))

    def test_empty_tree(self) -> None:
        self.assertEqual(set(), extract_links(b"tree 0\x00"))

    def test_parse_tree(self) -> None:
        payload = b"100644 a\x00" + hex_to_sha(parent1) + b"40000 d\x00" + (
            hex_to_sha(tree_sha)
        )
        self.assertEqual(
            [(b"a", 0o100644, parent1), (b"d", 0o40000, tree_sha)],
            list(parse_tree(payload)),
        )

    def test_truncated_entry(self) -> None:
        payload = b"100644 a\x00" + hex_to_sha(parent1)[:10]
        self.assertRaises(
            LinkParseError, extract_links, raw_canonical(ObjectKind.TREE, payload)
        )

    def test_bad_mode(self) -> None:
        payload = b"10x644 a\x00" + hex_to_sha(parent1)
        self.assertRaises(
            LinkParseError, extract_links, raw_canonical(ObjectKind.TREE, payload)
        )

    def test_missing_name_terminator(self) -> None:
        payload = b"100644 abc"
        self.assertRaises(
            LinkParseError, extract_links, raw_canonical(ObjectKind.TREE, payload)
        )


class TagLinkTests(TestCase):
    def test_tag(self) -> None:
        commit = make_commit(make_tree([]))
        tag = make_tag(commit)
        self.assertEqual({commit.id}, extract_links(canonical(tag)))

    def test_missing_object(self) -> None:
        payload = b"type commit\ntag v1\n\nmsg\n"
        self.assertRaises(
            LinkParseError, extract_links, raw_canonical(ObjectKind.TAG, payload)
        )


class BlobLinkTests(TestCase):
    def test_blob_has_no_links(self) -> None:
        # Even when the contents look like a commit.
        payload = b"tree " + tree_sha + b"\n\n"
        self.assertEqual(set(), extract_links(raw_canonical(ObjectKind.BLOB, payload)))


class ExtractLinksErrorTests(TestCase):
    def test_size_mismatch(self) -> None:
        self.assertRaises(LinkParseError, extract_links, b"blob 9\x00short")

    def test_garbage(self) -> None:
        self.assertRaises(LinkParseError, extract_links, b"not an object")


class HeaderFieldTests(TestCase):
    def test_stops_at_blank_line(self) -> None:
        self.assertEqual(
            [(b"a", b"1"), (b"b", b"2 3")],
            list(iter_header_fields(b"a 1\nb 2 3\n\nc 4\n")),
        )
