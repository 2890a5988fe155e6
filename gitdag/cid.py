# cid.py -- Content addresses for git objects
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

"""Content addresses (CIDs) for git objects.

A DAG store that understands git objects addresses them with a version 1
CID using the ``git-raw`` codec and a ``sha1`` multihash. The hashed bytes
are exactly the canonical form, so the digest is the git object name and
the expected address can be derived from the identifier alone::

    <multibase 'b'> base32(varint(1) varint(0x78) varint(0x11) varint(20) sha)
"""

__all__ = [
    "CID_VERSION",
    "GIT_RAW_CODEC",
    "SHA1_MULTIHASH",
    "cid_from_canonical",
    "cid_from_hex",
    "cid_from_sha",
    "decode_uvarint",
    "encode_uvarint",
    "sha_from_cid",
    "verify_address",
]

import base64
import binascii
import hashlib

from .errors import AddressMismatch, MalformedIdentifier
from .objects import SHA_LENGTH, hex_to_sha

CID_VERSION = 1
GIT_RAW_CODEC = 0x78
SHA1_MULTIHASH = 0x11

# Multibase prefix for lowercase, unpadded RFC 4648 base32.
_BASE32_PREFIX = "b"


def encode_uvarint(value: int) -> bytes:
    """Encode a non-negative integer as an unsigned LEB128 varint."""
    if value < 0:
        raise ValueError(f"cannot encode negative value {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_uvarint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode an unsigned LEB128 varint.

    Returns:
      tuple of (value, offset just past the varint)
    Raises:
      ValueError: if data ends before the varint does
    """
    value = 0
    shift = 0
    for pos in range(offset, len(data)):
        byte = data[pos]
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, pos + 1
        shift += 7
    raise ValueError("truncated varint")


_CID_PREFIX = (
    encode_uvarint(CID_VERSION)
    + encode_uvarint(GIT_RAW_CODEC)
    + encode_uvarint(SHA1_MULTIHASH)
    + encode_uvarint(SHA_LENGTH)
)


def cid_from_sha(sha: bytes) -> str:
    """Return the CID of the object with binary identifier sha."""
    if len(sha) != SHA_LENGTH:
        raise MalformedIdentifier(sha, f"expected {SHA_LENGTH} bytes, got {len(sha)}")
    encoded = base64.b32encode(_CID_PREFIX + sha).decode("ascii")
    return _BASE32_PREFIX + encoded.rstrip("=").lower()


def cid_from_hex(hexsha: bytes | str) -> str:
    """Return the CID of the object with hex identifier hexsha."""
    return cid_from_sha(hex_to_sha(hexsha))


def cid_from_canonical(data: bytes) -> str:
    """Hash a canonical object and return its CID."""
    return cid_from_sha(hashlib.sha1(data).digest())


def sha_from_cid(cid: str) -> bytes:
    """Decode a git-raw CID back into the binary object identifier.

    Raises:
      MalformedIdentifier: if cid is not a base32 git-raw/sha1 CIDv1
    """
    if not cid.startswith(_BASE32_PREFIX):
        raise MalformedIdentifier(cid, "unsupported multibase")
    text = cid[1:].upper()
    text += "=" * (-len(text) % 8)
    try:
        raw = base64.b32decode(text)
    except binascii.Error as e:
        raise MalformedIdentifier(cid, str(e)) from e
    try:
        version, offset = decode_uvarint(raw)
        codec, offset = decode_uvarint(raw, offset)
        hash_code, offset = decode_uvarint(raw, offset)
        length, offset = decode_uvarint(raw, offset)
    except ValueError as e:
        raise MalformedIdentifier(cid, str(e)) from e
    if version != CID_VERSION:
        raise MalformedIdentifier(cid, f"unsupported CID version {version}")
    if codec != GIT_RAW_CODEC:
        raise MalformedIdentifier(cid, f"unexpected codec 0x{codec:x}")
    if hash_code != SHA1_MULTIHASH:
        raise MalformedIdentifier(cid, f"unexpected multihash 0x{hash_code:x}")
    digest = raw[offset:]
    if length != SHA_LENGTH or len(digest) != SHA_LENGTH:
        raise MalformedIdentifier(cid, "digest is not a sha1")
    return digest


def verify_address(sha: bytes | str, expected: str, reported: str) -> None:
    """Check the address reported by the remote store against the expected one.

    Args:
      sha: Identifier of the uploaded object, used in the error message
      expected: Locally derived CID
      reported: CID returned by the remote store
    Raises:
      AddressMismatch: if the two differ
    """
    if expected != reported:
        raise AddressMismatch(sha, expected, reported)
