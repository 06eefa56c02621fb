"""
Process-wide snapshot of the values old plugins used to read from the
``CONTENT_DIR`` and ``CONTENT_EXT`` constants.

The snapshot is defined at most once per process. Once defined, the values
are also available as module attributes::

    from pico_deprecated import constants
    constants.CONTENT_DIR
"""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from .common import getColoredLogger

logger = getColoredLogger("pico_deprecated.constants")


class LegacyConstants(BaseModel):
    """Values of the deprecated global constants"""

    model_config = ConfigDict(title="Deprecated constants", frozen=True, extra="forbid")

    content_dir: Optional[str] = Field(
        None,
        title="Content directory",
        description="CONTENT_DIR, deprecated since v0.9",
    )
    content_ext: Optional[str] = Field(
        None,
        title="Content file extension",
        description="CONTENT_EXT, deprecated since v1.0",
    )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "LegacyConstants":
        content_dir = config.get("content_dir")
        content_ext = config.get("content_ext")
        return cls(
            content_dir=None if content_dir is None else str(content_dir),
            content_ext=None if content_ext is None else str(content_ext),
        )


_CONSTANTS: Optional[LegacyConstants] = None

_ATTRIBUTES = {
    "CONTENT_DIR": "content_dir",
    "CONTENT_EXT": "content_ext",
}


def define_constants(config: Mapping[str, Any]) -> LegacyConstants:
    """
    Define the constants from ``config`` unless they already are.

    :param config: The loaded config.
    :type config: Mapping[str, Any]

    :return: The snapshot in effect, which is the first one ever defined.
    :rtype: LegacyConstants
    """
    global _CONSTANTS
    if _CONSTANTS is None:
        _CONSTANTS = LegacyConstants.from_config(config)
        logger.debug(
            f"Defined CONTENT_DIR={_CONSTANTS.content_dir!r} CONTENT_EXT={_CONSTANTS.content_ext!r}")
    return _CONSTANTS


def get_constants() -> Optional[LegacyConstants]:
    """Return the snapshot, or None if it hasn't been defined yet."""
    return _CONSTANTS


def is_defined(name: str) -> bool:
    return name in _ATTRIBUTES and _CONSTANTS is not None


def __getattr__(name: str) -> Any:
    if name in _ATTRIBUTES:
        if _CONSTANTS is None:
            raise AttributeError(f"{name} has not been defined yet")
        return getattr(_CONSTANTS, _ATTRIBUTES[name])
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
