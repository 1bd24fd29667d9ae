# repo.py -- Repository settings used for ref tracking
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

"""Repository settings used for ref tracking.

A :class:`RepoInfo` holds what the classifier needs to know about the
repository: where its git directory is, which branch is checked out and
which remote branch that branch tracks.
"""

import os
from collections.abc import Mapping

from .config import ConfigFile, object_format, tracked_remote
from .errors import NotGitRepository
from .log_utils import getLogger
from .object_format import DEFAULT_OBJECT_FORMAT, ObjectFormat
from .refs import strip_branch_prefix

logger = getLogger(__name__)

SYMREF = b"ref: "
GITDIR = b"gitdir: "
CONTROLDIR = ".git"


def parse_symref_value(contents: bytes) -> bytes:
    """Parse a symref value.

    Args:
      contents: Contents to parse
    Returns: Destination
    """
    if contents.startswith(SYMREF):
        return contents[len(SYMREF) :].rstrip(b"\r\n")
    raise ValueError(contents)


def _resolve_control_dir(path: str) -> str | None:
    """Return the git directory a .git entry designates, if it is one."""
    if os.path.isdir(path):
        return path
    if os.path.isfile(path):
        with open(path, "rb") as f:
            contents = f.read()
        if contents.startswith(GITDIR):
            gitdir = os.fsdecode(contents[len(GITDIR) :].strip())
            return os.path.join(os.path.dirname(path), gitdir)
    return None


def find_git_dir(
    start: str | os.PathLike[str] = ".", environ: Mapping[str, str] | None = None
) -> str:
    """Find the git directory for a working directory.

    GIT_DIR in the environment takes precedence; otherwise parent
    directories of start are searched for a .git entry.

    Raises:
      NotGitRepository: if no git directory is found
    """
    if environ is None:
        environ = os.environ
    if environ.get("GIT_DIR"):
        return environ["GIT_DIR"]
    path = os.path.abspath(start)
    while True:
        git_dir = _resolve_control_dir(os.path.join(path, CONTROLDIR))
        if git_dir is not None:
            return git_dir
        parent = os.path.dirname(path)
        if parent == path:
            raise NotGitRepository(f"No git repository was found at {os.fspath(start)}")
        path = parent


class RepoInfo:
    """Settings of the repository whose refs are tracked.

    Attributes:
      git_dir: Path of the git directory; empty if there is no repository
      remote: Remote branch tracked by the checked out branch, e.g.
        b"origin/master"
      head: Short name of the checked out branch; empty if not resolved
      object_format: Object format of the repository
      config: Repository configuration, if it was read
    """

    def __init__(
        self,
        git_dir: str = "",
        remote: bytes = b"",
        head: bytes = b"",
        object_format: ObjectFormat = DEFAULT_OBJECT_FORMAT,
        config: ConfigFile | None = None,
    ) -> None:
        self.git_dir = git_dir
        self.remote = remote
        self.head = head
        self.object_format = object_format
        self.config = config

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.git_dir!r}, remote={self.remote!r}, "
            f"head={self.head!r})"
        )

    @classmethod
    def discover(
        cls,
        start: str | os.PathLike[str] = ".",
        environ: Mapping[str, str] | None = None,
    ) -> "RepoInfo":
        """Describe the repository containing start.

        Raises:
          NotGitRepository: if start is not inside a repository
          ConfigError: if the repository configuration is invalid
        """
        git_dir = find_git_dir(start, environ)
        config_path = os.path.join(git_dir, "config")
        if os.path.exists(config_path):
            config = ConfigFile.from_path(config_path)
            ret = cls(git_dir, object_format=object_format(config), config=config)
        else:
            ret = cls(git_dir)
        try:
            with open(os.path.join(git_dir, "HEAD"), "rb") as f:
                ret.set_head(parse_symref_value(f.read()))
        except (OSError, ValueError):
            logger.debug("HEAD of %s is not a symbolic ref", git_dir)
        return ret

    def set_head(self, symref: bytes) -> None:
        """Record the ref HEAD points at.

        A b"refs/heads/" prefix is stripped. If the configuration is known,
        the tracked remote branch is updated to follow the new head.
        """
        self.head = strip_branch_prefix(symref)
        if self.config is not None:
            self.remote = tracked_remote(self.config, self.head)
