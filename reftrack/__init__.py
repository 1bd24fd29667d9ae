# __init__.py -- Reference tracking for a terminal repository browser
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

"""Track the references of a Git repository for display in a browser.

The central object is :class:`reftrack.store.RefStore`, which keeps an ordered
catalog of branches, tags, remote-tracking branches and replacement refs, and
answers which refs point at a given object.
"""

__version__ = (0, 1, 0)

__all__ = ["__version__"]
