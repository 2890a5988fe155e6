# remote.py -- Content-addressed DAG stores
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

"""Remote DAG stores.

A DAG store accepts a canonical object and returns the content address it
computed for it. :class:`HttpDagStore` talks to the HTTP API of an IPFS
node; :class:`MemoryDagStore` computes addresses locally and is used for
dry runs and tests.
"""

__all__ = [
    "DEFAULT_API_URL",
    "DagStore",
    "HttpDagStore",
    "MemoryDagStore",
    "default_urllib3_manager",
]

import json
import os
import threading
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from . import __version__
from .cid import cid_from_canonical
from .errors import NetworkError
from .log_utils import getLogger

if TYPE_CHECKING:
    import urllib3

logger = getLogger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:5001"

DAG_PUT_PATH = "/api/v0/dag/put"


class DagStore:
    """Interface of a content-addressed DAG store."""

    def put(self, data: bytes, input_enc: str = "raw", format: str = "git") -> str:
        """Store a canonical object.

        Args:
          data: Canonical object bytes
          input_enc: Encoding of data as understood by the store
          format: Codec the store should use to address data
        Returns:
          The content address the store computed
        Raises:
          NetworkError: if the store could not be reached or rejected data
        """
        raise NotImplementedError(self.put)


class MemoryDagStore(DagStore):
    """DAG store that keeps objects in memory.

    Every call to :meth:`put` is appended to :attr:`puts`, which makes it
    convenient for checking upload behaviour.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.objects: dict[str, bytes] = {}
        self.puts: list[tuple[str, str, str]] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.objects)} objects)"

    def put(self, data: bytes, input_enc: str = "raw", format: str = "git") -> str:
        if input_enc != "raw" or format != "git":
            raise NetworkError(
                f"unsupported encoding {input_enc!r} / format {format!r}"
            )
        cid = cid_from_canonical(data)
        with self._lock:
            self.objects[cid] = data
            self.puts.append((cid, input_enc, format))
        return cid

    def __contains__(self, cid: str) -> bool:
        return cid in self.objects


def default_user_agent_string() -> str:
    """Return the User-Agent sent to DAG store APIs."""
    return "gitdag/{}".format(".".join(map(str, __version__)))


def default_urllib3_manager(
    timeout: float | None = None,
    pool_manager_cls: type | None = None,
    proxy_manager_cls: type | None = None,
) -> "urllib3.PoolManager | urllib3.ProxyManager":
    """Return a urllib3 connection pool manager.

    Honours the ``http_proxy`` and ``all_proxy`` environment variables.

    Args:
      timeout: Timeout for HTTP requests in seconds
      pool_manager_cls: Pool manager class to use
      proxy_manager_cls: Proxy manager class to use
    """
    import urllib3

    headers = {"User-agent": default_user_agent_string()}
    kwargs: dict[str, object] = {}
    if timeout is not None:
        kwargs["timeout"] = timeout

    proxy_server = None
    for proxyname in ("http_proxy", "all_proxy"):
        proxy_server = os.environ.get(proxyname)
        if proxy_server:
            break

    if proxy_server:
        if proxy_manager_cls is None:
            proxy_manager_cls = urllib3.ProxyManager
        return proxy_manager_cls(proxy_server, headers=headers, **kwargs)
    if pool_manager_cls is None:
        pool_manager_cls = urllib3.PoolManager
    return pool_manager_cls(headers=headers, **kwargs)


class HttpDagStore(DagStore):
    """DAG store reached through the HTTP API of an IPFS node."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        pool_manager: "urllib3.PoolManager | None" = None,
        timeout: float | None = None,
        pin: bool = False,
    ) -> None:
        """Initialize an HttpDagStore.

        Args:
          api_url: Base URL of the node's API, e.g. ``http://127.0.0.1:5001``
          pool_manager: Optional urllib3 pool manager to send requests with
          timeout: Timeout for each request in seconds
          pin: Ask the node to pin every object it stores
        """
        self.api_url = api_url.rstrip("/")
        self._timeout = timeout
        self.pin = pin
        if pool_manager is None:
            self.pool_manager = default_urllib3_manager(timeout=timeout)
        else:
            self.pool_manager = pool_manager

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.api_url!r})"

    def _put_url(self, input_enc: str, format: str) -> str:
        query = urlencode(
            {
                "input-enc": input_enc,
                "format": format,
                "pin": "true" if self.pin else "false",
            }
        )
        return f"{self.api_url}{DAG_PUT_PATH}?{query}"

    def put(self, data: bytes, input_enc: str = "raw", format: str = "git") -> str:
        import urllib3.exceptions

        url = self._put_url(input_enc, format)
        request_kwargs: dict[str, object] = {
            "fields": {"file": ("object", data, "application/octet-stream")},
        }
        if self._timeout is not None:
            request_kwargs["timeout"] = self._timeout
        try:
            resp = self.pool_manager.request("POST", url, **request_kwargs)
        except urllib3.exceptions.HTTPError as e:
            raise NetworkError(f"dag put to {self.api_url} failed: {e}") from e

        body = resp.data
        if resp.status != 200:
            raise NetworkError(
                f"unexpected http resp {resp.status} for {url}: {_error_message(body)}"
            )
        try:
            return json.loads(body)["Cid"]["/"]
        except (ValueError, KeyError, TypeError) as e:
            raise NetworkError(f"unparsable dag put response {body[:200]!r}") from e


def _error_message(body: bytes) -> str:
    try:
        return json.loads(body)["Message"]
    except (ValueError, KeyError, TypeError):
        return body[:200].decode("utf-8", "replace")
