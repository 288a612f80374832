'''Time sources for the election.

An election reads the current time from a clock callable returning an
integer. :class:`SystemClock` reads the wall clock in whole seconds;
:class:`ManualClock` is set explicitly, for replaying recorded transactions
and for tests.
'''

import time

from ballotlib.errors import InvalidState


class SystemClock:
    '''Wall clock time in whole seconds since the epoch.'''

    def __call__(self) -> int:
        return int(time.time())


class ManualClock:
    '''A clock that only moves when told to.

    :param now: Initial reading.
    '''
    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def set(self, now: int) -> None:
        '''Move the clock to the given time.

        :raises InvalidState: If the time would go backwards.
        '''
        if now < self.now:
            raise InvalidState(f'clock cannot go back from {self.now} to {now}')
        self.now = now

    def advance(self, seconds: int = 1) -> int:
        '''Move the clock forward and return the new reading.'''
        self.set(self.now + seconds)
        return self.now
