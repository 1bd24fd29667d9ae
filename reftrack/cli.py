# cli.py -- Command line interface for reftrack
# Copyright (C) 2025 The reftrack developers
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# reftrack is dual-licensed under the Apache License, Version 2.0 and the GNU
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

"""Simple command line interface to reftrack.

This is mainly useful to check what a browser would show for the refs of a
repository.
"""

import argparse
import logging
import os
import signal
import sys
from collections.abc import Sequence
from types import FrameType

from .errors import RefsError
from .log_utils import _configure_logging_from_trace, remove_null_handler
from .refs import Ref
from .repo import RepoInfo
from .source import DataSource, FileDataSource
from .store import RefStore


def signal_int(signal: int, frame: FrameType | None) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


def format_flags(ref: Ref) -> str:
    """Describe the category flags of a ref in one word."""
    if ref.is_annotated_tag:
        return "annotated-tag"
    if ref.is_tag:
        return "tag"
    if ref.is_head:
        return "head"
    if ref.is_tracked:
        return "tracked"
    if ref.is_replace:
        return "replace"
    if ref.is_remote:
        return "remote"
    return "branch"


def format_ref(ref: Ref) -> str:
    return "{} {} {}".format(
        ref.id.decode("ascii", "replace"),
        format_flags(ref),
        ref.name.decode("utf-8", "replace"),
    )


class Command:
    """A reftrack subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)

    def _add_common_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--source",
            type=str,
            help="Read saved git ls-remote output instead of running git",
        )
        parser.add_argument(
            "--head",
            type=str,
            default="",
            help="Checked out branch to assume when reading --source",
        )

    def open_store(self, parsed_args: argparse.Namespace) -> RefStore:
        """Load the refs of the repository in the current directory."""
        source: DataSource | None = None
        if parsed_args.source:
            repo = RepoInfo()
            source = FileDataSource(
                parsed_args.source, os.fsencode(parsed_args.head)
            )
        else:
            repo = RepoInfo.discover()
        store = RefStore(repo, source)
        store.reload()
        return store


class cmd_show_refs(Command):
    """List refs in display order."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the show-refs command.

        Args:
            args: Command line arguments
        Returns:
            Exit code (0 for success, 1 if there are no refs)
        """
        parser = argparse.ArgumentParser(prog="reftrack show-refs")
        self._add_common_arguments(parser)
        parsed_args = parser.parse_args(args)
        store = self.open_store(parsed_args)
        found = False
        for ref in store:
            sys.stdout.write(format_ref(ref) + "\n")
            found = True
        return 0 if found else 1


class cmd_refs_at(Command):
    """List refs pointing at an object."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the refs-at command.

        Args:
            args: Command line arguments
        Returns:
            Exit code (0 for success, 1 if no ref points at the object)
        """
        parser = argparse.ArgumentParser(prog="reftrack refs-at")
        self._add_common_arguments(parser)
        parser.add_argument("id", help="Object id")
        parsed_args = parser.parse_args(args)
        store = self.open_store(parsed_args)
        refs = store.lookup(parsed_args.id)
        if refs is None:
            logging.error("No refs point at %s", parsed_args.id)
            return 1
        for ref in refs:
            sys.stdout.write(format_ref(ref) + "\n")
        return 0


class cmd_head(Command):
    """Show the ref HEAD points at."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the head command.

        Args:
            args: Command line arguments
        Returns:
            Exit code (0 for success, 1 if HEAD is unknown)
        """
        parser = argparse.ArgumentParser(prog="reftrack head")
        self._add_common_arguments(parser)
        parsed_args = parser.parse_args(args)
        store = self.open_store(parsed_args)
        ref = store.head_ref()
        if ref is None:
            logging.error("HEAD does not point at a known ref")
            return 1
        sys.stdout.write(format_ref(ref) + "\n")
        return 0


commands = {
    "head": cmd_head,
    "refs-at": cmd_refs_at,
    "show-refs": cmd_show_refs,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the reftrack CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in ("-h", "--help"):
        parser = argparse.ArgumentParser(
            prog="reftrack", description="Show the refs of a Git repository"
        )
        parser.add_argument(
            "command",
            nargs="?",
            help=f"Command to run. Available: {', '.join(sorted(commands.keys()))}",
        )
        parser.print_help()
        return 1

    remove_null_handler()
    if not _configure_logging_from_trace():
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    cmd = argv[0]
    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logging.fatal("No such subcommand: %s", cmd)
        return 1
    try:
        return cmd_kls().run(argv[1:])
    except RefsError as e:
        logging.fatal("%s", e)
        return 1


def _main() -> None:
    signal.signal(signal.SIGINT, signal_int)
    sys.exit(main())


if __name__ == "__main__":
    _main()
