# ledger.py -- Record of objects already pushed
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

"""Dedup ledgers.

A ledger remembers which objects have been transferred, by identifier.
Entries are only ever added. :class:`DiskLedger` persists them so that a
later run skips everything an earlier run already pushed.
"""

__all__ = [
    "DiskLedger",
    "Ledger",
    "MemoryLedger",
]

import os
import sys
import threading
from collections.abc import Iterable, Iterator

from .errors import LedgerError
from .log_utils import getLogger
from .objects import HEX_LENGTH, SHA_LENGTH, hex_to_sha, sha_to_hex

logger = getLogger(__name__)


def _to_sha(sha: bytes | str) -> bytes:
    if isinstance(sha, bytes) and len(sha) == SHA_LENGTH:
        return sha
    return hex_to_sha(sha)


class Ledger:
    """Ledger interface.

    Identifiers may be given in binary (20 bytes) or hex (40 digits) form.
    """

    def has(self, sha: bytes | str) -> bool:
        """Check whether sha has been recorded.

        Raises:
          LedgerError: if the ledger could not be read
        """
        raise NotImplementedError(self.has)

    def record(self, sha: bytes | str) -> None:
        """Record sha as transferred. Recording twice is not an error.

        Raises:
          LedgerError: if the entry could not be written
        """
        raise NotImplementedError(self.record)

    def add_if_missing(self, sha: bytes | str) -> bool:
        """Atomically record sha unless it is already present.

        Returns:
          True if this call added the entry, False if it was already there
        """
        raise NotImplementedError(self.add_if_missing)

    def __iter__(self) -> Iterator[bytes]:
        """Iterate over the recorded binary identifiers."""
        raise NotImplementedError(self.__iter__)

    def __contains__(self, sha: bytes | str) -> bool:
        return self.has(sha)

    def __len__(self) -> int:
        return sum(1 for _ in self)


class MemoryLedger(Ledger):
    """Ledger that keeps its entries in memory."""

    def __init__(self, entries: Iterable[bytes] | None = None) -> None:
        self._lock = threading.Lock()
        self._entries: set[bytes] = set()
        for sha in entries or []:
            self._entries.add(_to_sha(sha))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self._entries)} entries)"

    def has(self, sha: bytes | str) -> bool:
        with self._lock:
            return _to_sha(sha) in self._entries

    def record(self, sha: bytes | str) -> None:
        with self._lock:
            self._entries.add(_to_sha(sha))

    def add_if_missing(self, sha: bytes | str) -> bool:
        sha = _to_sha(sha)
        with self._lock:
            if sha in self._entries:
                return False
            self._entries.add(sha)
            return True

    def __iter__(self) -> Iterator[bytes]:
        with self._lock:
            return iter(list(self._entries))


class DiskLedger(Ledger):
    """Ledger stored as empty marker files on disk.

    Markers are fanned out by the first two hex digits of the identifier,
    the same way git lays out loose objects: ``<path>/ab/cdef...``. Each
    marker is created with ``O_EXCL`` and synced before :meth:`record`
    returns.
    """

    def __init__(self, path: str | os.PathLike[str], create: bool = True) -> None:
        """Open a ledger directory.

        Args:
          path: Directory holding the ledger
          create: Create the directory if it does not exist
        Raises:
          LedgerError: if the directory is missing and create is False, or
            could not be created
        """
        self.path = os.fspath(path)
        if create:
            try:
                os.makedirs(self.path, exist_ok=True)
            except OSError as e:
                raise LedgerError(f"unable to create ledger at {self.path}: {e}") from e
        elif not os.path.isdir(self.path):
            raise LedgerError(f"no ledger at {self.path}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"

    def _marker_path(self, sha: bytes | str) -> str:
        hexsha = sha_to_hex(_to_sha(sha)).decode("ascii")
        return os.path.join(self.path, hexsha[:2], hexsha[2:])

    def has(self, sha: bytes | str) -> bool:
        path = self._marker_path(sha)
        try:
            os.stat(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise LedgerError(f"unable to check ledger entry {path}: {e}") from e
        return True

    def _create_marker(self, path: str) -> bool:
        dirname = os.path.dirname(path)
        try:
            os.makedirs(dirname, exist_ok=True)
        except OSError as e:
            raise LedgerError(
                f"unable to create ledger directory {dirname}: {e}"
            ) from e
        try:
            fd = os.open(
                path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)
            )
        except FileExistsError:
            return False
        except OSError as e:
            raise LedgerError(f"unable to write ledger entry {path}: {e}") from e
        try:
            os.fsync(fd)
        except OSError as e:
            raise LedgerError(f"unable to sync ledger entry {path}: {e}") from e
        finally:
            os.close(fd)
        self._sync_dir(dirname)
        return True

    @staticmethod
    def _sync_dir(dirname: str) -> None:
        if sys.platform == "win32":
            return
        try:
            fd = os.open(dirname, os.O_RDONLY)
        except OSError as e:
            raise LedgerError(f"unable to sync ledger directory {dirname}: {e}") from e
        try:
            os.fsync(fd)
        except OSError:
            # Some filesystems refuse fsync on directories.
            logger.debug("fsync not supported on %s", dirname)
        finally:
            os.close(fd)

    def record(self, sha: bytes | str) -> None:
        self._create_marker(self._marker_path(sha))

    def add_if_missing(self, sha: bytes | str) -> bool:
        return self._create_marker(self._marker_path(sha))

    def __iter__(self) -> Iterator[bytes]:
        try:
            fanout = sorted(os.listdir(self.path))
        except OSError as e:
            raise LedgerError(f"unable to list ledger {self.path}: {e}") from e
        for prefix in fanout:
            if len(prefix) != 2:
                continue
            subdir = os.path.join(self.path, prefix)
            if not os.path.isdir(subdir):
                continue
            for rest in sorted(os.listdir(subdir)):
                hexsha = prefix + rest
                if len(hexsha) != HEX_LENGTH:
                    continue
                try:
                    yield hex_to_sha(hexsha)
                except ValueError:
                    logger.warning("Ignoring stray ledger file %s", hexsha)
