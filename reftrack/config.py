# config.py -- Reading Git configuration files
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

"""Reading Git configuration files.

Only what is needed to find the tracked remote branch and the object format
of a repository is supported: sections, quoted subsections, comments, quoted
and escaped values and line continuations. Include directives are ignored.
"""

import os
import shlex
from collections.abc import Mapping
from typing import IO

from .errors import ConfigError
from .log_utils import getLogger
from .object_format import ObjectFormat, get_object_format

logger = getLogger(__name__)

LS_REMOTE_ENVIRONMENT_VARIABLE = "REFTRACK_LS_REMOTE"

Section = tuple[bytes, ...]

_ESCAPE_TABLE = {
    ord(b"\\"): ord(b"\\"),
    ord(b'"'): ord(b'"'),
    ord(b"n"): ord(b"\n"),
    ord(b"t"): ord(b"\t"),
    ord(b"b"): ord(b"\b"),
}
_COMMENT_CHARS = (ord(b"#"), ord(b";"))
_WHITESPACE_CHARS = (ord(b"\t"), ord(b" "))


def _parse_string(value: bytes) -> bytes:
    value_array = bytearray(value.strip())
    ret = bytearray()
    whitespace = bytearray()
    in_quotes = False
    i = 0
    while i < len(value_array):
        c = value_array[i]
        if c == ord(b"\\") and i + 1 < len(value_array):
            i += 1
            if whitespace:
                ret.extend(whitespace)
                whitespace = bytearray()
            ret.append(_ESCAPE_TABLE.get(value_array[i], value_array[i]))
        elif c == ord(b'"'):
            in_quotes = not in_quotes
        elif c in _COMMENT_CHARS and not in_quotes:
            break
        elif c in _WHITESPACE_CHARS and not in_quotes:
            whitespace.append(c)
        else:
            if whitespace:
                ret.extend(whitespace)
                whitespace = bytearray()
            ret.append(c)
        i += 1

    if in_quotes:
        raise ValueError("missing end quote")

    return bytes(ret)


def _strip_comments(line: bytes) -> bytes:
    string_open = False
    for i, character in enumerate(line):
        if character == ord(b'"'):
            string_open = not string_open
        elif not string_open and character in _COMMENT_CHARS:
            return line[:i]
    return line


def _parse_section_header_line(line: bytes) -> tuple[Section, bytes]:
    line = _strip_comments(line).rstrip()
    in_quotes = False
    for i, c in enumerate(line):
        if c == ord(b'"'):
            in_quotes = not in_quotes
        elif c == ord(b"]") and not in_quotes:
            last = i
            break
    else:
        raise ValueError("expected trailing ]")
    pts = line[1:last].split(b" ", 1)
    rest = line[last + 1 :]
    if len(pts) == 2:
        if pts[1][:1] != b'"' or pts[1][-1:] != b'"':
            raise ValueError(f"Invalid subsection {pts[1]!r}")
        return (pts[0].lower(), pts[1][1:-1]), rest
    # Deprecated [section.subsection] syntax
    section, _, subsection = pts[0].partition(b".")
    if subsection:
        return (section.lower(), subsection), rest
    return (section.lower(),), rest


class ConfigFile:
    """A Git configuration file, like .git/config.

    Section and variable names are case insensitive, subsection names are
    not. When a variable is set more than once, the last value wins.
    """

    def __init__(self) -> None:
        self.path: str | None = None
        self._values: dict[Section, dict[bytes, bytes]] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._values!r})"

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object."""
        ret = cls()
        section: Section | None = None
        setting: bytes | None = None
        continuation = b""
        for lineno, line in enumerate(f.readlines()):
            if lineno == 0 and line.startswith(b"\xef\xbb\xbf"):
                line = line[3:]
            if setting is None:
                line = line.lstrip()
                if line[:1] == b"[":
                    section, line = _parse_section_header_line(line)
                    ret._values.setdefault(section, {})
                if _strip_comments(line).strip() == b"":
                    continue
                if section is None:
                    raise ValueError(f"setting {line!r} without section")
                name, sep, value = line.partition(b"=")
                setting = _strip_comments(name).strip().lower()
                if not sep:
                    value = b"true"
                continuation = b""
            else:
                value = line
            stripped = value.rstrip(b"\r\n")
            if stripped.endswith(b"\\") and not stripped.endswith(b"\\\\"):
                continuation += stripped[:-1]
                continue
            assert section is not None
            ret._values[section][setting] = _parse_string(continuation + value)
            setting = None
        return ret

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "ConfigFile":
        """Read configuration from a file on disk.

        Raises:
          ConfigError: if the file is not a valid configuration file
        """
        with open(path, "rb") as f:
            try:
                ret = cls.from_file(f)
            except ValueError as e:
                raise ConfigError(str(e), os.fspath(path)) from e
        ret.path = os.fspath(path)
        return ret

    def get(self, section: Section, name: bytes) -> bytes:
        """Retrieve the contents of a configuration setting.

        Args:
          section: Tuple with section name and optional subsection name
          name: Variable name
        Returns:
          Contents of the setting
        Raises:
          KeyError: if the value is not set
        """
        section = (section[0].lower(), *section[1:])
        return self._values[section][name.lower()]


def tracked_remote(config: ConfigFile, branch: bytes) -> bytes:
    """Find the remote branch a local branch tracks.

    Args:
      config: Repository configuration
      branch: Short name of the local branch, e.g. b"master"
    Returns: Remote branch, e.g. b"origin/master", or b"" if untracked
    """
    if not branch:
        return b""
    try:
        remote = config.get((b"branch", branch), b"remote")
        merge = config.get((b"branch", branch), b"merge")
    except KeyError:
        return b""
    if merge.startswith(b"refs/heads/"):
        merge = merge[len(b"refs/heads/") :]
    return remote + b"/" + merge


def object_format(config: ConfigFile) -> ObjectFormat:
    """Determine the object format a repository is configured for."""
    try:
        name = config.get((b"extensions",), b"objectformat")
    except KeyError:
        return get_object_format()
    return get_object_format(name.decode("ascii"))


def ls_remote_argv_from_env(
    environ: Mapping[str, str] | None = None,
) -> list[str] | None:
    """Get the ref listing command configured in the environment.

    Returns: The command line, or None if it is not overridden
    """
    if environ is None:
        environ = os.environ
    value = environ.get(LS_REMOTE_ENVIRONMENT_VARIABLE)
    if not value:
        return None
    argv = shlex.split(value)
    logger.debug("ref listing command overridden: %r", argv)
    return argv
