# config.py -- Settings for pushing
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

"""Push settings, read from git configuration.

Settings live in the ``[gitdag]`` section of any git config file::

    [gitdag]
        api = http://127.0.0.1:5001
        ledger = /var/lib/gitdag/ledger
        timeout = 30
        pin = true

``GITDAG_API`` and ``GITDAG_LEDGER`` in the environment take precedence.
"""

__all__ = [
    "CONFIG_SECTION",
    "PushConfig",
]

import os
from collections.abc import Mapping
from typing import TYPE_CHECKING

from .errors import ConfigError
from .remote import DEFAULT_API_URL

if TYPE_CHECKING:
    from dulwich.config import Config
    from dulwich.repo import Repo

CONFIG_SECTION = (b"gitdag",)


def _get_str(config: "Config", name: bytes) -> str | None:
    try:
        value = config.get(CONFIG_SECTION, name)
    except KeyError:
        return None
    return value.decode("utf-8")


class PushConfig:
    """Resolved settings for a push run."""

    def __init__(
        self,
        ledger_path: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float | None = None,
        pin: bool = False,
    ) -> None:
        self.ledger_path = ledger_path
        self.api_url = api_url
        self.timeout = timeout
        self.pin = pin

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(ledger_path={self.ledger_path!r}, "
            f"api_url={self.api_url!r}, timeout={self.timeout!r}, pin={self.pin!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PushConfig):
            return NotImplemented
        return (self.ledger_path, self.api_url, self.timeout, self.pin) == (
            other.ledger_path,
            other.api_url,
            other.timeout,
            other.pin,
        )

    @classmethod
    def from_config(
        cls,
        config: "Config",
        controldir: str,
        environ: Mapping[str, str] | None = None,
    ) -> "PushConfig":
        """Build settings from a git config.

        Args:
          config: Git configuration to read the ``[gitdag]`` section from
          controldir: The repository's control directory, used for the
            default ledger location
          environ: Environment to read overrides from (defaults to os.environ)
        Raises:
          ConfigError: if ``gitdag.timeout`` or ``gitdag.pin`` is invalid
        """
        if environ is None:
            environ = os.environ

        api_url = environ.get("GITDAG_API") or _get_str(config, b"api")
        ledger_path = environ.get("GITDAG_LEDGER") or _get_str(config, b"ledger")
        if ledger_path is None:
            ledger_path = os.path.join(controldir, "gitdag", "ledger")

        timeout_text = _get_str(config, b"timeout")
        timeout = None
        if timeout_text is not None:
            try:
                timeout = float(timeout_text)
            except ValueError:
                raise ConfigError(
                    f"gitdag.timeout is not a number: {timeout_text!r}"
                ) from None

        try:
            pin = config.get_boolean(CONFIG_SECTION, b"pin", False)
        except ValueError as e:
            raise ConfigError(f"gitdag.pin: {e}") from e

        return cls(
            ledger_path=os.path.expanduser(ledger_path),
            api_url=api_url or DEFAULT_API_URL,
            timeout=timeout,
            pin=pin,
        )

    @classmethod
    def from_repo(
        cls, repo: "Repo", environ: Mapping[str, str] | None = None
    ) -> "PushConfig":
        """Build settings for a repository from its config stack."""
        return cls.from_config(repo.get_config_stack(), repo.controldir(), environ)
