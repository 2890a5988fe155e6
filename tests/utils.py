# utils.py -- Test utilities for gitdag
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

"""Utility functions common to gitdag tests."""

from dulwich.object_store import MemoryObjectStore
from dulwich.objects import Blob, Commit, ShaFile, Tag, Tree

# Plain files are very frequently used in tests, so let the mode be very short.
F = 0o100644
D = 0o040000

DEFAULT_TIME = 1262304000  # 2010-01-01


def make_blob(data: bytes) -> Blob:
    return Blob.from_string(data)


def make_tree(entries: list[tuple[bytes, int, ShaFile]]) -> Tree:
    """Make a tree from (name, mode, object) tuples."""
    tree = Tree()
    for name, mode, obj in entries:
        tree.add(name, mode, obj.id)
    return tree


def make_commit(
    tree: Tree, parents: list[Commit] | None = None, message: bytes = b"Test message.\n"
) -> Commit:
    """Make a commit with a default set of members."""
    commit = Commit()
    commit.tree = tree.id
    commit.parents = [p.id for p in parents or []]
    commit.author = commit.committer = b"Test Author <test@nodomain.com>"
    commit.author_time = commit.commit_time = DEFAULT_TIME
    commit.author_timezone = commit.commit_timezone = 0
    commit.message = message
    return commit


def make_tag(target: ShaFile, name: bytes = b"v1.0") -> Tag:
    """Make an annotated tag pointing at target."""
    tag = Tag()
    tag.object = (type(target), target.id)
    tag.name = name
    tag.tagger = b"Test Tagger <test@nodomain.com>"
    tag.tag_time = DEFAULT_TIME
    tag.tag_timezone = 0
    tag.message = b"Release " + name + b"\n"
    return tag


def build_store(*objects: ShaFile) -> MemoryObjectStore:
    """Create an in-memory object store holding objects."""
    store = MemoryObjectStore()
    for obj in objects:
        store.add_object(obj)
    return store
