# log_utils.py -- Logging utilities for gitdag
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

"""Logging utilities for gitdag.

gitdag is used as a library as well as from the command line, so the
``gitdag`` logger gets a no-op handler at import time. Library users that
want output configure logging themselves; the command line calls
:func:`default_logging_config`.

Setting ``GITDAG_TRACE`` enables debug output:

- ``1``, ``2`` or ``true`` traces to stderr;
- an integer 3-9 traces to that file descriptor;
- an absolute path traces to that file, or to ``trace.<pid>`` inside it when
  the path is a directory.
"""

import logging
import os
import sys

getLogger = logging.getLogger

TRACE_ENV = "GITDAG_TRACE"

TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


class _NullHandler(logging.Handler):
    """No-op logging handler to avoid unexpected logging warnings."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_GITDAG_LOGGER = getLogger("gitdag")
_GITDAG_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target(environ: dict[str, str] | None = None) -> str | int | None:
    """Work out where trace output should go.

    Returns:
      None when tracing is off, 2 for stderr, another int for a file
      descriptor, or a path.
    """
    if environ is None:
        environ = dict(os.environ)
    value = environ.get(TRACE_ENV, "")
    if not value or value.lower() in ("0", "false"):
        return None
    if value.lower() in ("1", "2", "true"):
        return 2
    try:
        fd = int(value)
    except ValueError:
        pass
    else:
        if 3 <= fd <= 9:
            return fd
        return None
    if os.path.isabs(value):
        return value
    return None


def _configure_logging_from_trace(environ: dict[str, str] | None = None) -> bool:
    """Configure logging from GITDAG_TRACE.

    Returns True if tracing was set up, False otherwise.
    """
    target = _get_trace_target(environ)
    if target is None:
        return False

    if target == 2:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format=TRACE_FORMAT)
        return True

    if isinstance(target, int):
        try:
            stream = os.fdopen(target, "w", buffering=1)
        except OSError as e:
            sys.stderr.write(f"Warning: Failed to open {TRACE_ENV} fd {target}: {e}\n")
            return False
        logging.basicConfig(level=logging.DEBUG, stream=stream, format=TRACE_FORMAT)
        return True

    if os.path.isdir(target):
        filename = os.path.join(target, f"trace.{os.getpid()}")
    else:
        filename = target
    try:
        logging.basicConfig(
            level=logging.DEBUG, filename=filename, filemode="a", format=TRACE_FORMAT
        )
    except OSError as e:
        sys.stderr.write(f"Warning: Failed to open {TRACE_ENV} file {target}: {e}\n")
        return False
    return True


def default_logging_config(verbose: bool = False) -> None:
    """Set up the default gitdag loggers.

    Args:
      verbose: Log at DEBUG rather than INFO when no trace target is set
    """
    remove_null_handler()
    if not _configure_logging_from_trace():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            stream=sys.stderr,
            format="%(levelname)s: %(message)s",
        )


def remove_null_handler() -> None:
    """Remove the null handler from the gitdag logger."""
    _GITDAG_LOGGER.removeHandler(_NULL_HANDLER)
