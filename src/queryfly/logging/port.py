# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""LoggingPort: how queryfly's stdlib log records get configured and rendered."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from queryfly.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Anything that can turn the ``queryfly.logging`` section into live logging.

    ``configure`` is called once at startup; ``set_level`` may be called at
    any time afterwards to raise or lower a single module, e.g.
    ``queryfly.data.relational`` to see streamed SQL.
    """

    def configure(self, config: Config) -> None:
        """Apply format and levels from *config*."""
        ...

    def get_logger(self, name: str) -> Any:
        """Return a logger bound to *name*."""
        ...

    def set_level(self, name: str, level: str) -> None:
        """Change the level of one logger by name."""
        ...
