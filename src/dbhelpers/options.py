from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from libb import ConfigOptions

__all__ = [
    'CommandType',
    'CommandOptions',
    'resolve_options',
]


class CommandType(Enum):
    """How a command's text is interpreted by the driver."""
    TEXT = 'text'
    STORED_PROCEDURE = 'stored_procedure'


@dataclass
class CommandOptions(ConfigOptions):
    """Options applied to each prepared command

    Every field left at its default leaves the driver's own behavior in place.

    - transaction: handle exposing ``.connection``; commands run on that
      connection and are never committed by the helpers (default: None)
    - timeout: seconds before the statement is interrupted, 0 for no limit
      (default: None, driver default)
    - command_type: CommandType or its string value (default: None, plain text)
    - auto_commit: commit after execute/execute_batch when no transaction
      is given, roll back on failure (default: True)
    """
    transaction: Any = None
    timeout: float | None = None
    command_type: CommandType | None = None
    auto_commit: bool = True

    def __post_init__(self):
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f'timeout must be non-negative, got {self.timeout}')
        if isinstance(self.command_type, str):
            self.command_type = CommandType(self.command_type.lower())


def resolve_options(options: CommandOptions | None = None, **overrides: Any) -> CommandOptions:
    """Merge keyword overrides into an options object.

    Overrides that are None are ignored, so helpers can forward their own
    optional keywords unconditionally.
    """
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if options is None:
        return CommandOptions(**overrides)
    if not overrides:
        return options
    return replace(options, **overrides)
