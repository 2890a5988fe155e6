# cli.py -- Command line interface for gitdag
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

"""Command-line interface to gitdag.

Usage: gitdag <command> [options]

Commands:

- ``push [REV]``: push everything reachable from REV (default HEAD)
- ``cid SHA...``: print the content address of git objects
- ``ledger list|has SHA...``: inspect the dedup ledger
"""

__all__ = [
    "Command",
    "cmd_cid",
    "cmd_ledger",
    "cmd_push",
    "commands",
    "main",
]

import argparse
import os
import signal
import sys
import types
from collections.abc import Sequence
from typing import TYPE_CHECKING, TextIO

from .cid import cid_from_hex, sha_from_cid
from .config import PushConfig
from .errors import GitDagError
from .ledger import DiskLedger, Ledger, MemoryLedger
from .log_utils import default_logging_config, getLogger
from .objects import sha_to_hex
from .push import Push, resolve_rev
from .remote import DagStore, HttpDagStore, MemoryDagStore

if TYPE_CHECKING:
    from dulwich.repo import Repo

logger = getLogger(__name__)


def signal_int(signal: int, frame: types.FrameType | None) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


def _open_repo(path: str) -> "Repo":
    from dulwich.errors import NotGitRepository
    from dulwich.repo import Repo

    try:
        return Repo(path)
    except NotGitRepository as e:
        raise GitDagError(f"not a git repository: {path}") from e


class Command:
    """A gitdag subcommand."""

    def __init__(self, stdout: TextIO | None = None, stderr: TextIO | None = None):
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_push(Command):
    """Push the objects reachable from a revision into a DAG store."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the push command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitdag push")
        parser.add_argument(
            "-C", "--repo", default=".", help="Path to the git repository"
        )
        parser.add_argument("--api", help="URL of the DAG store API")
        parser.add_argument("--ledger", help="Path of the dedup ledger")
        parser.add_argument(
            "--pin", action="store_true", default=None, help="Pin pushed objects"
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Compute addresses locally without uploading or recording",
        )
        parser.add_argument(
            "-q", "--quiet", action="store_true", help="Do not report progress"
        )
        parser.add_argument("rev", nargs="?", default="HEAD", help="Revision to push")
        parsed = parser.parse_args(args)

        repo = _open_repo(parsed.repo)
        with repo:
            config = PushConfig.from_repo(repo)
            if parsed.api:
                config.api_url = parsed.api
            if parsed.ledger:
                config.ledger_path = parsed.ledger
            if parsed.pin is not None:
                config.pin = parsed.pin

            store: DagStore
            ledger: Ledger
            if parsed.dry_run:
                # Start from what is already recorded, but never write to it.
                if os.path.isdir(config.ledger_path):
                    ledger = MemoryLedger(DiskLedger(config.ledger_path, create=False))
                else:
                    ledger = MemoryLedger()
                store = MemoryDagStore()
            else:
                ledger = DiskLedger(config.ledger_path)
                store = HttpDagStore(
                    config.api_url, timeout=config.timeout, pin=config.pin
                )

            root = resolve_rev(repo, parsed.rev)

            progress = None if parsed.quiet else self._progress
            p = Push.from_repo(repo, ledger, store, progress=progress)
            logger.debug("Pushing %s with %r", parsed.rev, config)
            p.push(root)
        self.stdout.write(f"{cid_from_hex(root)}\n")
        return 0

    def _progress(self, msg: bytes) -> None:
        self.stderr.write(msg.decode("ascii", "replace"))
        self.stderr.flush()


class cmd_cid(Command):
    """Print the content address of git objects, or decode an address."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the cid command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitdag cid")
        parser.add_argument(
            "-d",
            "--decode",
            action="store_true",
            help="Decode content addresses back to object ids",
        )
        parser.add_argument("values", nargs="+", help="Object ids or addresses")
        parsed = parser.parse_args(args)
        for value in parsed.values:
            if parsed.decode:
                out = sha_to_hex(sha_from_cid(value)).decode("ascii")
            else:
                out = cid_from_hex(value)
            self.stdout.write(f"{out}\n")
        return 0


class cmd_ledger(Command):
    """Inspect the dedup ledger."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the ledger command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gitdag ledger")
        parser.add_argument(
            "-C", "--repo", default=".", help="Path to the git repository"
        )
        parser.add_argument("--ledger", help="Path of the dedup ledger")
        subparsers = parser.add_subparsers(dest="action", required=True)
        subparsers.add_parser("list", help="List recorded object ids")
        has_parser = subparsers.add_parser(
            "has", help="Exit with 0 if all given object ids are recorded"
        )
        has_parser.add_argument("shas", nargs="+")
        parsed = parser.parse_args(args)

        ledger_path = parsed.ledger
        if ledger_path is None:
            with _open_repo(parsed.repo) as repo:
                ledger_path = PushConfig.from_repo(repo).ledger_path
        ledger = DiskLedger(ledger_path, create=False)

        if parsed.action == "list":
            for sha in ledger:
                self.stdout.write(sha_to_hex(sha).decode("ascii") + "\n")
            return 0

        missing = 0
        for hexsha in parsed.shas:
            if ledger.has(hexsha):
                self.stdout.write(f"{hexsha} recorded\n")
            else:
                self.stdout.write(f"{hexsha} missing\n")
                missing += 1
        return 1 if missing else 0


commands: dict[str, type[Command]] = {
    "cid": cmd_cid,
    "ledger": cmd_ledger,
    "push": cmd_push,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the gitdag CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(
        prog="gitdag",
        description="Push git objects into a content-addressed DAG store",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output"
    )
    parser.add_argument(
        "command",
        help=f"Command to run. Available: {', '.join(sorted(commands.keys()))}",
    )
    parser.add_argument("args", nargs=argparse.REMAINDER)
    parsed = parser.parse_args(argv)

    default_logging_config(verbose=parsed.verbose)

    try:
        cmd_kls = commands[parsed.command]
    except KeyError:
        logger.fatal("No such subcommand: %s", parsed.command)
        return 1
    try:
        return cmd_kls().run(parsed.args)
    except GitDagError as e:
        sys.stderr.write(f"error: {e}\n")
        return 1


def _main() -> None:
    signal.signal(signal.SIGINT, signal_int)
    sys.exit(main())


if __name__ == "__main__":
    _main()
