# source.py -- Reading objects from a local git object store
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

"""Object sources: where the objects to push are read from."""

__all__ = [
    "ObjectSource",
    "ObjectStoreSource",
]

import zlib
from typing import TYPE_CHECKING

from .errors import SourceReadError
from .objects import HEX_LENGTH, ObjectKind, sha_to_hex

if TYPE_CHECKING:
    from dulwich.object_store import BaseObjectStore


class ObjectSource:
    """Source of raw git objects."""

    def read(self, sha: bytes) -> tuple["ObjectKind | int", int, bytes]:
        """Read an object.

        Args:
          sha: Hex identifier of the object
        Returns:
          tuple of (kind, declared size, raw payload). Kinds the source does
          not know are returned as their plain type number.
        Raises:
          SourceReadError: if the object is missing or unreadable
        """
        raise NotImplementedError(self.read)


class ObjectStoreSource(ObjectSource):
    """Object source backed by a dulwich object store.

    Works with any :class:`dulwich.object_store.BaseObjectStore`, including
    the object store of an on-disk repository (loose objects and packs) and
    :class:`dulwich.object_store.MemoryObjectStore`.
    """

    def __init__(self, object_store: "BaseObjectStore") -> None:
        self.object_store = object_store

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.object_store!r})"

    def read(self, sha: bytes) -> tuple["ObjectKind | int", int, bytes]:
        if len(sha) != HEX_LENGTH:
            sha = sha_to_hex(sha)
        try:
            type_num, raw = self.object_store.get_raw(sha)
        except KeyError:
            raise SourceReadError(sha, "object not found") from None
        except (OSError, zlib.error, ValueError) as e:
            raise SourceReadError(sha, str(e)) from e
        try:
            kind: ObjectKind | int = ObjectKind(type_num)
        except ValueError:
            kind = type_num
        return kind, len(raw), raw
