# __init__.py -- The tests for gitdag
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

"""Tests for gitdag."""

__all__ = ["TestCase"]

import os
import shutil
import tempfile
from unittest import TestCase as _TestCase


class TestCase(_TestCase):
    """Base test case that isolates tests from the user's environment."""

    def setUp(self) -> None:
        super().setUp()
        self.overrideEnv("HOME", "/nonexistent")
        self.overrideEnv("GIT_CONFIG_NOSYSTEM", "1")
        self.overrideEnv("GITDAG_API", None)
        self.overrideEnv("GITDAG_LEDGER", None)
        self.overrideEnv("GITDAG_TRACE", None)

    def overrideEnv(self, name: str, value: str | None) -> None:
        """Set or unset an environment variable for the duration of the test."""

        def restore(oldvalue: str | None) -> None:
            if oldvalue is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = oldvalue

        self.addCleanup(restore, os.environ.get(name))
        if value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = value

    def mkdtemp(self) -> str:
        """Create a temporary directory removed when the test finishes."""
        path = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, path)
        return path
