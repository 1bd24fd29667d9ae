# log_utils.py -- Logging utilities for reftrack
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

"""Logging utilities for reftrack.

reftrack is mostly used as a library by a terminal browser, which owns the
screen; log output must therefore stay silent unless the caller asks for it.
The package logger carries a no-op handler until :func:`default_logging_config`
or :func:`remove_null_handler` is called.

Modules only need getLogger, which this module re-exports.
"""

import logging
import os
import sys

getLogger = logging.getLogger

TRACE_ENVIRONMENT_VARIABLE = "REFTRACK_TRACE"


class _NullHandler(logging.Handler):
    """No-op logging handler to avoid unexpected logging warnings."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_REFTRACK_LOGGER = getLogger("reftrack")
_REFTRACK_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target() -> int | str | None:
    """Get the trace target from the REFTRACK_TRACE environment variable.

    Returns:
        - None if tracing is disabled
        - 2 for stderr output (values "1", "2", "true")
        - str for an absolute file path
    """
    trace_value = os.environ.get(TRACE_ENVIRONMENT_VARIABLE, "")
    if not trace_value or trace_value.lower() in ("0", "false"):
        return None
    if trace_value.lower() in ("1", "2", "true"):
        return 2
    if os.path.isabs(trace_value):
        return trace_value
    return None


def _configure_logging_from_trace() -> bool:
    """Configure logging based on REFTRACK_TRACE.

    Returns True if trace logging was configured, False otherwise.
    """
    trace_target = _get_trace_target()
    if trace_target is None:
        return False

    trace_format = "%(asctime)s %(name)s %(levelname)s: %(message)s"
    if trace_target == 2:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format=trace_format)
        return True

    assert isinstance(trace_target, str)
    try:
        logging.basicConfig(
            level=logging.DEBUG,
            filename=trace_target,
            filemode="a",
            format=trace_format,
        )
    except OSError as e:
        sys.stderr.write(
            f"Warning: Failed to open {TRACE_ENVIRONMENT_VARIABLE} file "
            f"{trace_target}: {e}\n"
        )
        return False
    return True


def default_logging_config() -> None:
    """Set up the default reftrack loggers.

    Trace output is enabled through REFTRACK_TRACE: "1", "2" or "true" send
    debug output to stderr, an absolute path appends it to that file. Without
    it, informational messages go to stderr.
    """
    remove_null_handler()

    if not _configure_logging_from_trace():
        logging.basicConfig(
            level=logging.INFO,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s: %(message)s",
        )


def remove_null_handler() -> None:
    """Remove the null handler from the reftrack loggers.

    Callers configuring logging themselves may call this first to avoid
    the overhead of the _NullHandler.
    """
    _REFTRACK_LOGGER.removeHandler(_NULL_HANDLER)
