'''Election configuration and derivation of the election phase.

No phase is ever stored. It is computed from the configured window and the
current time on every call, since time moves on between calls:

-   **Unconfigured** - no window was set (start and end are both zero).
-   **Scheduled** - the window is set but has not started yet.
-   **Open** - the current time is within the window, bounds included.
-   **Closed** - the window is over, or voting was stopped early.

Pausing is orthogonal to the phase and is checked separately.
'''

from __future__ import annotations

import enum

from ballotlib.persist import simple_serialization


class Phase(enum.Enum):
    UNCONFIGURED = 'unconfigured'
    SCHEDULED = 'scheduled'
    OPEN = 'open'
    CLOSED = 'closed'


@simple_serialization
class ElectionConfig:
    '''Configuration fields of an election.

    :param admin: Identity of the administrator.
    :param name: Human-readable name of the election.
    :param start: Start of the voting window (0 if not configured).
    :param end: End of the voting window, inclusive (0 if not configured).
    :param stopped: Whether voting was stopped early by the administrator.
    :param paused: Whether the election is paused.
    '''
    def __init__(self,
                 admin: str,
                 name: str = '',
                 start: int = 0,
                 end: int = 0,
                 stopped: bool = False,
                 paused: bool = False,
                 ):
        self.admin = admin
        self.name = name
        self.start = start
        self.end = end
        self.stopped = stopped
        self.paused = paused

    @property
    def configured(self) -> bool:
        return not (self.start == 0 and self.end == 0)

    def __eq__(self, other) -> bool:
        return isinstance(other, ElectionConfig) and vars(self) == vars(other)

    def __repr__(self) -> str:
        return (
            f'<ElectionConfig({self.name!r},admin={self.admin},'
            f'{self.start}-{self.end}'
            + (',stopped' if self.stopped else '')
            + (',paused' if self.paused else '')
            + ')>'
        )


def derive_phase(config: ElectionConfig, now: int) -> Phase:
    '''Return the phase of an election with the configuration at time now.'''
    if not config.configured:
        return Phase.UNCONFIGURED
    elif config.stopped or now > config.end:
        return Phase.CLOSED
    elif now < config.start:
        return Phase.SCHEDULED
    else:
        return Phase.OPEN


def has_started(config: ElectionConfig, now: int) -> bool:
    '''Return True if the window opened at some point (or was stopped).'''
    return derive_phase(config, now) in (Phase.OPEN, Phase.CLOSED)
