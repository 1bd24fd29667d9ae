# source.py -- Sources of ref listings
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

"""Sources of ref listings.

A source yields ``(id, name)`` pairs in the order ``git ls-remote`` lists
them: the object of an annotated tag comes right before its peeled commit,
which is listed under the same name with a ``^{}`` suffix. The catalog relies
on that order to give annotated tags the id of their commit.
"""

import os
import subprocess
import sys
import tempfile
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Protocol

from .config import ls_remote_argv_from_env
from .errors import SourceError
from .log_utils import getLogger
from .objects import valid_hexsha

logger = getLogger(__name__)


class DataSource(Protocol):
    """Protocol for ref sources."""

    def symbolic_head(self) -> bytes:
        """Return the ref HEAD points at, or b"" if HEAD is detached."""
        ...

    def iter_refs(self) -> Iterator[tuple[bytes, bytes]]:
        """Iterate over ``(id, name)`` pairs.

        Raises:
          SourceError: if the refs could not be listed
        """
        ...


def read_ref_lines(lines: Iterable[bytes]) -> Iterator[tuple[bytes, bytes]]:
    """Split tab separated ``id<TAB>name`` lines.

    Empty lines are skipped, lines without a tab are logged and skipped.
    Ids that do not look like object names are logged but still passed on.
    """
    for line in lines:
        line = line.rstrip(b"\r\n")
        if not line:
            continue
        id, sep, name = line.partition(b"\t")
        if not sep:
            logger.warning("ignoring malformed ref line %r", line)
            continue
        if not valid_hexsha(id):
            logger.warning("ref %r has an invalid object id %r", name, id)
        yield id, name


def find_git_command() -> list[str]:
    """Find command to run for system Git."""
    if sys.platform == "win32":
        return ["cmd", "/c", "git"]
    return ["git"]


class GitDataSource:
    """Lists refs by running git.

    The refs come from ``git ls-remote <git_dir>``, HEAD is resolved with
    ``git symbolic-ref HEAD``. The listing command can be replaced through
    the REFTRACK_LS_REMOTE environment variable.
    """

    def __init__(
        self,
        git_dir: str | bytes,
        git_command: Sequence[str] | None = None,
        ls_remote_argv: Sequence[str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize a GitDataSource.

        Args:
          git_dir: Path of the repository's git directory
          git_command: Command to run git (defaults to the git on PATH)
          ls_remote_argv: Command listing the refs; overrides the environment
          environ: Environment to read settings from and run commands in
        """
        self.git_dir = os.fsdecode(git_dir)
        self._environ = dict(os.environ if environ is None else environ)
        self._git = list(git_command) if git_command else find_git_command()
        if ls_remote_argv is None:
            ls_remote_argv = ls_remote_argv_from_env(self._environ)
        if ls_remote_argv is None:
            ls_remote_argv = [*self._git, "ls-remote", self.git_dir]
        self.ls_remote_argv = list(ls_remote_argv)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.git_dir!r})"

    def _env(self) -> dict[str, str]:
        env = dict(self._environ)
        env["GIT_DIR"] = self.git_dir
        return env

    def symbolic_head(self) -> bytes:
        argv = [*self._git, "symbolic-ref", "HEAD"]
        logger.debug("running %r", argv)
        try:
            res = subprocess.run(
                argv,
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self._env(),
            )
        except subprocess.CalledProcessError as e:
            logger.debug("HEAD is not a symbolic ref: %r", e.stderr)
            return b""
        except OSError as e:
            logger.debug("unable to run %r: %s", argv, e)
            return b""
        return res.stdout.strip()

    def iter_refs(self) -> Iterator[tuple[bytes, bytes]]:
        argv = self.ls_remote_argv
        logger.debug("running %r", argv)
        # stderr goes to a file so the child never blocks on a full pipe
        # while stdout is being read.
        with tempfile.TemporaryFile() as errf:
            try:
                proc = subprocess.Popen(
                    argv,
                    stdout=subprocess.PIPE,
                    stderr=errf,
                    env=self._env(),
                )
            except OSError as e:
                raise SourceError(f"unable to run {argv[0]}: {e}", argv) from e
            with proc:
                assert proc.stdout is not None
                try:
                    yield from read_ref_lines(proc.stdout)
                except OSError as e:
                    raise SourceError(
                        f"unable to read output of {argv[0]}", argv
                    ) from e
                returncode = proc.wait()
            errf.seek(0)
            stderr = errf.read()
        if returncode != 0:
            raise SourceError(
                f"{argv[0]} exited with status {returncode}", argv, returncode, stderr
            )


class StaticDataSource:
    """Ref source replaying a fixed listing."""

    def __init__(
        self, refs: Iterable[tuple[bytes, bytes]] = (), head: bytes = b""
    ) -> None:
        self.refs = list(refs)
        self.head = head

    def symbolic_head(self) -> bytes:
        return self.head

    def iter_refs(self) -> Iterator[tuple[bytes, bytes]]:
        return iter(self.refs)


class FileDataSource:
    """Ref source reading saved ``git ls-remote`` output from a file."""

    def __init__(self, path: str | os.PathLike[str], head: bytes = b"") -> None:
        self.path = path
        self.head = head

    def symbolic_head(self) -> bytes:
        return self.head

    def iter_refs(self) -> Iterator[tuple[bytes, bytes]]:
        try:
            with open(self.path, "rb") as f:
                yield from read_ref_lines(f)
        except OSError as e:
            raise SourceError(f"unable to read {os.fspath(self.path)}: {e}") from e
