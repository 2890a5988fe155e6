# push.py -- Push a git object graph into a content-addressed DAG store
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

"""Push the objects reachable from a root into a DAG store.

The traversal is worklist driven: the root goes to the front of the
frontier, every processed object's links are appended to the back, and the
run ends when the frontier is empty or the first error occurs. Objects in
the ledger are never uploaded again, neither in this run nor in later ones.
"""

__all__ = [
    "ObserverFunc",
    "ProgressFunc",
    "Push",
    "push_rev",
    "resolve_rev",
]

import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING

from .cid import cid_from_hex, verify_address
from .errors import (
    EncodingError,
    LedgerError,
    LinkParseError,
    NetworkError,
    ObserverError,
    PushCancelled,
    UnknownRevision,
    UnsupportedObjectKind,
)
from .ledger import Ledger
from .links import extract_links
from .log_utils import getLogger
from .objects import HEX_LENGTH, encode_canonical, hex_to_sha, sha_to_hex
from .remote import DagStore
from .source import ObjectSource, ObjectStoreSource

if TYPE_CHECKING:
    from dulwich.repo import BaseRepo

logger = getLogger(__name__)

ObserverFunc = Callable[[str, bytes], None]
ProgressFunc = Callable[[bytes], None]


def _no_observer(cid: str, data: bytes) -> None:
    pass


def _no_progress(msg: bytes) -> None:
    pass


class Push:
    """A single push run.

    Counters are only progress information:

    - ``todo`` counts every identifier ever queued, minus those that turned
      out to be in the ledger already when dequeued;
    - ``done`` counts the objects uploaded so far.
    """

    def __init__(
        self,
        source: ObjectSource,
        ledger: Ledger,
        store: DagStore,
        observer: ObserverFunc | None = None,
        progress: ProgressFunc | None = None,
    ) -> None:
        """Initialize a Push.

        Args:
          source: Where objects are read from
          ledger: Record of objects already pushed
          store: DAG store to upload to
          observer: Optional callback invoked with (cid, canonical bytes)
            for every verified object; raising from it aborts the run
          progress: Optional callback receiving one progress line per object
        """
        self.source = source
        self.ledger = ledger
        self.store = store
        self.observer: ObserverFunc = observer if observer is not None else _no_observer
        self.progress: ProgressFunc = progress if progress is not None else _no_progress
        self.todo = 0
        self.done = 0
        self._frontier: deque[bytes] = deque()
        self._queued: set[bytes] = set()
        self._cancelled = threading.Event()
        self._started = False

    @classmethod
    def from_repo(
        cls,
        repo: "BaseRepo",
        ledger: Ledger,
        store: DagStore,
        observer: ObserverFunc | None = None,
        progress: ProgressFunc | None = None,
    ) -> "Push":
        """Create a Push reading from a dulwich repository."""
        return cls(
            ObjectStoreSource(repo.object_store),
            ledger,
            store,
            observer=observer,
            progress=progress,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.done}/{self.todo}>"

    def start(self, root: bytes | str) -> "Future[None]":
        """Start pushing everything reachable from root.

        The run happens on a background thread.

        Args:
          root: Identifier of the root object, hex or binary
        Returns:
          A future that completes once, when the frontier is drained or the
          run fails; its exception is the first error encountered
        Raises:
          MalformedIdentifier: if root is not a valid identifier
          RuntimeError: if this Push has already been started
        """
        if self._started:
            raise RuntimeError("push already started")
        hexsha = self._to_hexsha(root)
        self._started = True
        self._frontier.appendleft(hexsha)
        self._queued.add(hexsha)
        self.todo += 1
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gitdag-push")
        try:
            return executor.submit(self._work)
        finally:
            executor.shutdown(wait=False)

    def push(self, root: bytes | str) -> None:
        """Push everything reachable from root and wait for the run to end.

        Raises:
          GitDagError: the first error the run encountered
        """
        self.start(root).result()

    def cancel(self) -> None:
        """Ask a running push to stop before its next object."""
        self._cancelled.set()

    @staticmethod
    def _to_hexsha(sha: bytes | str) -> bytes:
        if isinstance(sha, bytes) and len(sha) != HEX_LENGTH:
            return sha_to_hex(sha)
        return sha_to_hex(hex_to_sha(sha))

    def _work(self) -> None:
        logger.info("Pushing %s", self._frontier[0].decode("ascii"))
        while self._frontier:
            if self._cancelled.is_set():
                raise PushCancelled(
                    f"push cancelled with {len(self._frontier)} objects queued"
                )
            hexsha = self._frontier.popleft()
            self._process(hexsha)
        self._emit(b"\n")
        logger.info("Pushed %d objects", self.done)

    def _process(self, hexsha: bytes) -> None:
        name = hexsha.decode("ascii")
        try:
            pushed = self.ledger.has(hexsha)
        except LedgerError as e:
            raise LedgerError(f"checking ledger for {name}: {e}") from e
        if pushed:
            logger.debug("Skipping %s, already pushed", name)
            self.todo -= 1
            return

        kind, size, payload = self.source.read(hexsha)
        try:
            data = encode_canonical(kind, size, payload)
        except UnsupportedObjectKind as e:
            raise UnsupportedObjectKind(e.kind, hexsha) from e
        except EncodingError as e:
            raise EncodingError(f"encoding {name}: {e}") from e
        expected = cid_from_hex(hexsha)

        self.done += 1
        self._report(name, expected)

        try:
            reported = self.store.put(data, input_enc="raw", format="git")
        except (NetworkError, OSError) as e:
            raise NetworkError(f"uploading {name}: {e}") from e
        verify_address(hexsha, expected, reported)
        try:
            self.ledger.record(hexsha)
        except LedgerError as e:
            raise LedgerError(f"recording {name}: {e}") from e

        try:
            self.observer(expected, data)
        except ObserverError:
            raise
        except Exception as e:
            raise ObserverError(f"observer failed for {name} ({expected}): {e}") from e

        try:
            links = extract_links(data)
        except LinkParseError as e:
            raise LinkParseError(f"parsing links of {name}: {e}") from e
        for link in sorted(links):
            self._enqueue(link)

    def _enqueue(self, hexsha: bytes) -> None:
        if hexsha in self._queued:
            return
        try:
            pushed = self.ledger.has(hexsha)
        except LedgerError as e:
            raise LedgerError(
                f"checking ledger for {hexsha.decode('ascii')}: {e}"
            ) from e
        if pushed:
            return
        self._queued.add(hexsha)
        self.todo += 1
        self._frontier.append(hexsha)

    def _report(self, name: str, cid: str) -> None:
        line = f"{self.done}/{self.todo} {name} {cid}"
        logger.debug("Uploading %s", line)
        self._emit(line.encode("ascii") + b"\r")

    def _emit(self, msg: bytes) -> None:
        try:
            self.progress(msg)
        except Exception:
            logger.warning("Progress callback failed", exc_info=True)


def resolve_rev(repo: "BaseRepo", rev: bytes | str) -> bytes:
    """Resolve a revision expression to a hex object id.

    Raises:
      UnknownRevision: if rev does not name an object in repo
    """
    from dulwich.objectspec import parse_object

    try:
        return parse_object(repo, rev).id
    except KeyError as e:
        raise UnknownRevision(rev) from e
    except ValueError as e:
        raise UnknownRevision(rev, str(e)) from e
    except AssertionError as e:
        # On-disk object stores assert on names that are not object ids.
        raise UnknownRevision(rev) from e


def push_rev(
    repo: "BaseRepo",
    rev: bytes | str,
    ledger: Ledger,
    store: DagStore,
    observer: ObserverFunc | None = None,
    progress: ProgressFunc | None = None,
) -> Push:
    """Push the object named by a revision expression.

    Args:
      repo: dulwich repository to read from
      rev: Branch, tag, hex sha or any other expression
        :func:`dulwich.objectspec.parse_object` understands
      ledger: Record of objects already pushed
      store: DAG store to upload to
      observer: Optional per-object callback
      progress: Optional progress callback
    Returns:
      The finished Push, for its counters
    Raises:
      UnknownRevision: if rev does not name an object in repo
    """
    root = resolve_rev(repo, rev)
    p = Push.from_repo(repo, ledger, store, observer=observer, progress=progress)
    p.push(root)
    return p
