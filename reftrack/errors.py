# errors.py -- errors for reftrack
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

"""reftrack-related exception classes."""

from collections.abc import Sequence


class RefsError(Exception):
    """Base class for errors raised while tracking refs."""


class SourceError(RefsError):
    """The ref source could not be run or its output could not be read."""

    def __init__(
        self,
        msg: str,
        argv: Sequence[str] | None = None,
        returncode: int | None = None,
        stderr: bytes | None = None,
    ) -> None:
        """Initialize a SourceError.

        Args:
            msg: Description of the failure.
            argv: Command line of the source, if it is a command.
            returncode: Exit status of the command, if it exited.
            stderr: Error output of the command, if any was captured.
        """
        self.argv = list(argv) if argv is not None else None
        self.returncode = returncode
        self.stderr = stderr
        if stderr:
            msg += ": " + stderr.decode("utf-8", "replace").strip()
        Exception.__init__(self, msg)


class RefAllocationError(RefsError):
    """Storage for refs or ref lists could not be grown."""

    def __init__(self, what: str) -> None:
        self.what = what
        Exception.__init__(self, f"unable to grow {what}")


class ConfigError(RefsError, ValueError):
    """A configuration file could not be parsed."""

    def __init__(self, msg: str, path: str | None = None) -> None:
        self.path = path
        if path is not None:
            msg = f"{path}: {msg}"
        Exception.__init__(self, msg)


class NotGitRepository(RefsError):
    """No git repository was found at the specified path."""
