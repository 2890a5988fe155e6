# objects.py -- Object identifiers and canonical encoding
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

"""Object identifiers, object kinds and the canonical object encoding.

The canonical form of an object is the loose-object text git hashes to get
the object's name: ``b"<kind> <size>\\0"`` followed by the raw payload.
"""

__all__ = [
    "HEX_LENGTH",
    "SHA_LENGTH",
    "ObjectKind",
    "encode_canonical",
    "hex_to_sha",
    "object_header",
    "parse_canonical",
    "sha_to_hex",
    "valid_hexsha",
]

import binascii
from enum import IntEnum

from .errors import LinkParseError, MalformedIdentifier, UnsupportedObjectKind

SHA_LENGTH = 20
HEX_LENGTH = 40

# Longest possible header: "commit " plus a 20 digit size and the NUL.
_MAX_HEADER_LENGTH = 32


class ObjectKind(IntEnum):
    """Kinds of git object, numbered as in git's pack format."""

    COMMIT = 1
    TREE = 2
    BLOB = 3
    TAG = 4

    @property
    def type_name(self) -> bytes:
        """The word used for this kind in the canonical header."""
        return self.name.lower().encode("ascii")

    @classmethod
    def parse(cls, value: "ObjectKind | int | bytes | str") -> "ObjectKind":
        """Look up a kind by number or by type name.

        Raises:
          UnsupportedObjectKind: if value names no known kind
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise UnsupportedObjectKind(value) from None
        if isinstance(value, str):
            value = value.encode("ascii", "replace")
        if isinstance(value, bytes):
            try:
                return _KINDS_BY_NAME[value]
            except KeyError:
                raise UnsupportedObjectKind(value) from None
        raise UnsupportedObjectKind(value)


_KINDS_BY_NAME = {kind.type_name: kind for kind in ObjectKind}


def sha_to_hex(sha: bytes) -> bytes:
    """Takes a binary sha and returns its lowercase hex form."""
    if len(sha) != SHA_LENGTH:
        raise MalformedIdentifier(sha, f"expected {SHA_LENGTH} bytes, got {len(sha)}")
    return binascii.hexlify(sha)


def hex_to_sha(hexsha: bytes | str) -> bytes:
    """Takes a hex sha and returns a binary sha.

    Raises:
      MalformedIdentifier: if hexsha is not 40 hex digits
    """
    if isinstance(hexsha, str):
        try:
            hexsha = hexsha.encode("ascii")
        except UnicodeEncodeError as e:
            raise MalformedIdentifier(hexsha, "not ascii") from e
    if len(hexsha) != HEX_LENGTH:
        raise MalformedIdentifier(
            hexsha, f"expected {HEX_LENGTH} hex digits, got {len(hexsha)}"
        )
    try:
        return binascii.unhexlify(hexsha)
    except binascii.Error as e:
        raise MalformedIdentifier(hexsha, str(e)) from e


def valid_hexsha(hexsha: bytes | str) -> bool:
    """Check whether hexsha is a well-formed hex object identifier."""
    try:
        hex_to_sha(hexsha)
    except MalformedIdentifier:
        return False
    return True


def object_header(kind: "ObjectKind | int | bytes | str", size: int) -> bytes:
    """Return the canonical header for an object of the given kind and size."""
    kind = ObjectKind.parse(kind)
    return kind.type_name + b" " + str(size).encode("ascii") + b"\0"


def encode_canonical(
    kind: "ObjectKind | int | bytes | str", size: int, payload: bytes
) -> bytes:
    """Build the canonical form of an object.

    Args:
      kind: Object kind, by number or name
      size: Declared size of the payload, as reported by the object store
      payload: Raw, uncompressed object contents
    Returns:
      ``b"<kind> <size>\\0" + payload``
    Raises:
      UnsupportedObjectKind: if kind is not commit, tree, blob or tag
    """
    return object_header(kind, size) + payload


def parse_canonical(data: bytes) -> tuple[ObjectKind, bytes]:
    """Split a canonical object into its kind and payload.

    Raises:
      LinkParseError: if the header is malformed or the declared size does
        not match the payload
    """
    nul = data.find(b"\0", 0, _MAX_HEADER_LENGTH)
    if nul == -1:
        raise LinkParseError("object header is not NUL terminated")
    header = data[:nul]
    try:
        type_name, size_text = header.split(b" ", 1)
    except ValueError:
        raise LinkParseError(f"malformed object header {header!r}") from None
    kind = _KINDS_BY_NAME.get(type_name)
    if kind is None:
        raise LinkParseError(f"unknown object type {type_name!r}")
    if not size_text.isdigit() or (len(size_text) > 1 and size_text[:1] == b"0"):
        raise LinkParseError(f"size {size_text!r} is not in canonical format")
    payload = data[nul + 1 :]
    if int(size_text) != len(payload):
        raise LinkParseError(
            f"declared size {int(size_text)} does not match payload length "
            f"{len(payload)}"
        )
    return kind, payload
