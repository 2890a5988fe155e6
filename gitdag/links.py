# links.py -- Discover the objects a canonical object refers to
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

"""Link extraction for canonical git objects.

Only the headers that name other objects are looked at. Nothing else about
the object (author lines, entry ordering, tag names) is validated.
"""

__all__ = [
    "extract_links",
    "iter_header_fields",
    "parse_tree",
]

from collections.abc import Iterator

from .errors import LinkParseError
from .objects import SHA_LENGTH, ObjectKind, parse_canonical, sha_to_hex, valid_hexsha

_TREE_HEADER = b"tree"
_PARENT_HEADER = b"parent"
_OBJECT_HEADER = b"object"


def iter_header_fields(text: bytes) -> Iterator[tuple[bytes, bytes]]:
    """Iterate over the header fields of a commit or tag payload.

    Continuation lines (starting with a space, as used by ``gpgsig``) and
    everything after the first empty line are skipped.

    :yields: tuples of (field, value)
    """
    for line in text.split(b"\n"):
        if line == b"":
            return
        if line.startswith(b" "):
            continue
        field, _, value = line.partition(b" ")
        yield field, value


def parse_tree(text: bytes) -> Iterator[tuple[bytes, int, bytes]]:
    """Parse a tree payload.

    :param text: Serialized tree entries
    :yields: tuples of (name, mode, hexsha)
    :raises LinkParseError: if an entry is truncated or has a bad mode
    """
    count = 0
    length = len(text)
    while count < length:
        mode_end = text.find(b" ", count)
        if mode_end == -1:
            raise LinkParseError(f"tree entry at offset {count} has no mode")
        mode_text = text[count:mode_end]
        try:
            mode = int(mode_text, 8)
        except ValueError:
            raise LinkParseError(f"invalid mode {mode_text!r} in tree entry") from None
        name_end = text.find(b"\0", mode_end)
        if name_end == -1:
            raise LinkParseError(f"tree entry at offset {count} has no name")
        name = text[mode_end + 1 : name_end]
        count = name_end + 1 + SHA_LENGTH
        if count > length:
            raise LinkParseError(f"tree entry {name!r} is truncated")
        yield (name, mode, sha_to_hex(text[name_end + 1 : count]))


def _checked(field: bytes, value: bytes) -> bytes:
    if not valid_hexsha(value):
        raise LinkParseError(f"invalid {field.decode('ascii')} sha {value!r}")
    return value.lower()


def _commit_links(text: bytes) -> set[bytes]:
    links = set()
    tree = None
    for field, value in iter_header_fields(text):
        if field == _TREE_HEADER:
            tree = _checked(field, value)
            links.add(tree)
        elif field == _PARENT_HEADER:
            links.add(_checked(field, value))
    if tree is None:
        raise LinkParseError("commit has no tree header")
    return links


def _tag_links(text: bytes) -> set[bytes]:
    for field, value in iter_header_fields(text):
        if field == _OBJECT_HEADER:
            return {_checked(field, value)}
    raise LinkParseError("tag has no object header")


def extract_links(canonical: bytes) -> set[bytes]:
    """Return the hex identifiers of all objects a canonical object links to.

    Commits link to their tree and parents, trees to every entry, tags to
    the tagged object. Blobs have no links.

    Raises:
      LinkParseError: if the object is malformed for its declared kind
    """
    kind, payload = parse_canonical(canonical)
    if kind == ObjectKind.COMMIT:
        return _commit_links(payload)
    if kind == ObjectKind.TREE:
        return {hexsha for (_name, _mode, hexsha) in parse_tree(payload)}
    if kind == ObjectKind.TAG:
        return _tag_links(payload)
    return set()
