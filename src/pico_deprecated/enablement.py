"""
pico_deprecated.enablement
==========================

Enabled/disabled state of a plugin, tagged with who made the decision.

A plugin starts out :attr:`EnablementSource.UNSET`. The user (or the host
config) makes *explicit* decisions; heuristics such as the legacy adapter's
self-activation make *default* decisions. A default decision never replaces
an explicit one.
"""

import dataclasses
import enum
from typing import Optional


class EnablementSource(enum.Enum):
    UNSET = "unset"
    EXPLICIT = "explicit"
    DEFAULT = "default"


@dataclasses.dataclass(frozen=True)
class Enablement:
    source: EnablementSource = EnablementSource.UNSET
    value: Optional[bool] = None

    @classmethod
    def unset(cls) -> "Enablement":
        return cls()

    @classmethod
    def explicit(cls, value: bool) -> "Enablement":
        return cls(EnablementSource.EXPLICIT, bool(value))

    @classmethod
    def default(cls, value: bool) -> "Enablement":
        return cls(EnablementSource.DEFAULT, bool(value))

    @property
    def is_set(self) -> bool:
        return self.source is not EnablementSource.UNSET

    @property
    def is_explicit(self) -> bool:
        return self.source is EnablementSource.EXPLICIT

    def effective(self, fallback: bool) -> bool:
        """
        The enabled flag, or ``fallback`` while nothing has been decided.

        :param fallback: Class level default of the plugin.
        :type fallback: bool

        :return: Whether the plugin is enabled.
        :rtype: bool
        """
        if self.value is None:
            return fallback
        return self.value


def resolve(current: Enablement, proposal: Enablement) -> Enablement:
    """
    Merge a proposed decision into the current one.

    Explicit proposals always win. Default proposals only replace unset or
    other default decisions. Unset proposals change nothing.

    :param current: The state in effect.
    :type current: Enablement
    :param proposal: The decision being applied.
    :type proposal: Enablement

    :return: The new state.
    :rtype: Enablement
    """
    if proposal.source is EnablementSource.EXPLICIT:
        return proposal
    if proposal.source is EnablementSource.DEFAULT and not current.is_explicit:
        return proposal
    return current
