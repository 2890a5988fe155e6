# errors.py -- errors for gitdag
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

"""gitdag exception classes.

Every error raised while pushing derives from :class:`GitDagError`. All of
them are fatal to a push run; nothing here is retried.
"""

__all__ = [
    "AddressMismatch",
    "ConfigError",
    "EncodingError",
    "GitDagError",
    "LedgerError",
    "LinkParseError",
    "MalformedIdentifier",
    "NetworkError",
    "ObserverError",
    "PushCancelled",
    "SourceReadError",
    "UnknownRevision",
    "UnsupportedObjectKind",
]

import binascii


def _display_sha(sha: bytes | str) -> str:
    if isinstance(sha, str):
        return sha
    if len(sha) == 20:
        return binascii.hexlify(sha).decode("ascii")
    return sha.decode("ascii", "replace")


class GitDagError(Exception):
    """Base class for all gitdag errors."""


class MalformedIdentifier(GitDagError, ValueError):
    """An object identifier or content address could not be decoded."""

    def __init__(self, value: bytes | str, reason: str | None = None) -> None:
        """Initialize a MalformedIdentifier.

        Args:
          value: The offending identifier text
          reason: Optional explanation of what is wrong with it
        """
        self.value = value
        message = f"malformed identifier {value!r}"
        if reason is not None:
            message += f": {reason}"
        super().__init__(message)


class ConfigError(GitDagError, ValueError):
    """A gitdag setting in the git configuration is invalid."""


class UnknownRevision(GitDagError, KeyError):
    """A revision expression does not name an object."""

    def __init__(self, rev: bytes | str, reason: str | None = None) -> None:
        """Initialize an UnknownRevision.

        Args:
          rev: The revision expression that could not be resolved
          reason: Optional explanation from the resolver
        """
        if isinstance(rev, bytes):
            rev = rev.decode("utf-8", "replace")
        self.rev = rev
        message = f"unknown revision {rev}"
        if reason is not None:
            message += f": {reason}"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class LedgerError(GitDagError):
    """The dedup ledger could not be queried or updated."""


class SourceReadError(GitDagError):
    """An object could not be read from the local object store."""

    def __init__(self, sha: bytes | str, reason: str) -> None:
        """Initialize a SourceReadError.

        Args:
          sha: Identifier of the object that could not be read
          reason: Description of the underlying failure
        """
        self.sha = _display_sha(sha)
        super().__init__(f"unable to read object {self.sha}: {reason}")


class EncodingError(GitDagError):
    """An object could not be turned into its canonical form."""


class UnsupportedObjectKind(EncodingError):
    """The object kind is not one of commit, tree, blob or tag."""

    def __init__(self, kind: object, sha: bytes | str | None = None) -> None:
        """Initialize an UnsupportedObjectKind.

        Args:
          kind: The kind value that was rejected
          sha: Identifier of the object being encoded, if known
        """
        self.kind = kind
        self.sha = None if sha is None else _display_sha(sha)
        message = f"unsupported object kind: {kind!r}"
        if self.sha is not None:
            message = f"encoding {self.sha}: {message}"
        super().__init__(message)


class NetworkError(GitDagError):
    """The remote DAG store was unreachable or rejected the input."""


class AddressMismatch(GitDagError):
    """The remote store reported a different content address than expected."""

    def __init__(self, sha: bytes | str, expected: str, got: str) -> None:
        """Initialize an AddressMismatch.

        Args:
          sha: Identifier of the object that was uploaded
          expected: Content address derived locally
          got: Content address reported by the remote store
        """
        self.sha = _display_sha(sha)
        self.expected = expected
        self.got = got
        super().__init__(
            f"CIDs don't match for {self.sha}: expected {expected}, got {got}"
        )


class LinkParseError(GitDagError):
    """A canonical object could not be parsed for links."""


class ObserverError(GitDagError):
    """The per-object observer callback failed."""


class PushCancelled(GitDagError):
    """The push run was cancelled before the frontier was drained."""
