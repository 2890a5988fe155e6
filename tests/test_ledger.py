# test_ledger.py -- tests for ledger.py
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

"""Tests for gitdag.ledger."""

import os
import threading

from gitdag.errors import LedgerError, MalformedIdentifier
from gitdag.ledger import DiskLedger, MemoryLedger
from gitdag.objects import hex_to_sha

from . import TestCase

SHA1 = b"e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"
SHA2 = b"b6fc4c620b67d95f953a5c1c1230aaab5db5a1b0"


class LedgerTestsMixin:
    def test_empty(self) -> None:
        self.assertFalse(self.ledger.has(SHA1))
        self.assertNotIn(SHA1, self.ledger)
        self.assertEqual(0, len(self.ledger))
        self.assertEqual([], list(self.ledger))

    def test_record(self) -> None:
        self.ledger.record(SHA1)
        self.assertTrue(self.ledger.has(SHA1))
        self.assertFalse(self.ledger.has(SHA2))
        self.assertEqual([hex_to_sha(SHA1)], list(self.ledger))

    def test_record_twice(self) -> None:
        self.ledger.record(SHA1)
        self.ledger.record(SHA1)
        self.assertEqual(1, len(self.ledger))

    def test_binary_and_hex_forms(self) -> None:
        self.ledger.record(hex_to_sha(SHA1))
        self.assertTrue(self.ledger.has(SHA1))
        self.assertTrue(self.ledger.has(SHA1.decode("ascii")))
        self.assertTrue(self.ledger.has(SHA1.upper()))

    def test_add_if_missing(self) -> None:
        self.assertTrue(self.ledger.add_if_missing(SHA1))
        self.assertFalse(self.ledger.add_if_missing(SHA1))
        self.assertTrue(self.ledger.has(SHA1))

    def test_add_if_missing_concurrent(self) -> None:
        results: list[bool] = []
        lock = threading.Lock()

        def add() -> None:
            added = self.ledger.add_if_missing(SHA2)
            with lock:
                results.append(added)

        threads = [threading.Thread(target=add) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(1, results.count(True))
        self.assertEqual(7, results.count(False))

    def test_iter(self) -> None:
        self.ledger.record(SHA1)
        self.ledger.record(SHA2)
        self.assertEqual({hex_to_sha(SHA1), hex_to_sha(SHA2)}, set(self.ledger))

    def test_malformed(self) -> None:
        self.assertRaises(MalformedIdentifier, self.ledger.has, b"nothex")
        self.assertRaises(MalformedIdentifier, self.ledger.record, b"abcd")


class MemoryLedgerTests(LedgerTestsMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.ledger = MemoryLedger()

    def test_initial_entries(self) -> None:
        ledger = MemoryLedger([SHA1, hex_to_sha(SHA2)])
        self.assertTrue(ledger.has(SHA1))
        self.assertTrue(ledger.has(SHA2))
        self.assertEqual(2, len(ledger))


class DiskLedgerTests(LedgerTestsMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.path = os.path.join(self.mkdtemp(), "ledger")
        self.ledger = DiskLedger(self.path)

    def test_creates_directory(self) -> None:
        self.assertTrue(os.path.isdir(self.path))

    def test_missing_directory(self) -> None:
        missing = os.path.join(self.mkdtemp(), "missing")
        self.assertRaises(LedgerError, DiskLedger, missing, create=False)
        self.assertFalse(os.path.exists(missing))

    def test_marker_layout(self) -> None:
        self.ledger.record(SHA1)
        marker = os.path.join(self.path, "e6", SHA1[2:].decode("ascii"))
        self.assertTrue(os.path.isfile(marker))
        self.assertEqual(0, os.path.getsize(marker))

    def test_persists_across_instances(self) -> None:
        self.ledger.record(SHA1)
        reopened = DiskLedger(self.path, create=False)
        self.assertTrue(reopened.has(SHA1))
        self.assertFalse(reopened.add_if_missing(SHA1))

    def test_iter_ignores_stray_files(self) -> None:
        self.ledger.record(SHA1)
        with open(os.path.join(self.path, "README"), "w") as f:
            f.write("not an entry\n")
        os.mkdir(os.path.join(self.path, "zz"))
        with open(os.path.join(self.path, "zz", "x" * 38), "w") as f:
            f.write("")
        with open(os.path.join(self.path, "e6", "short"), "w") as f:
            f.write("")
        with self.assertLogs("gitdag.ledger", level="WARNING"):
            self.assertEqual([hex_to_sha(SHA1)], list(self.ledger))

    def test_fanout_blocked_by_file(self) -> None:
        with open(os.path.join(self.path, "e6"), "w") as f:
            f.write("in the way\n")
        self.assertRaises(LedgerError, self.ledger.record, SHA1)
        self.assertRaises(LedgerError, self.ledger.add_if_missing, SHA1)
        self.assertRaises(LedgerError, self.ledger.has, SHA1)

    def test_repr(self) -> None:
        self.assertEqual(f"DiskLedger({self.path!r})", repr(self.ledger))
