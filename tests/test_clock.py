import sys
import os
import time

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotlib.errors
from ballotlib.clock import ManualClock, SystemClock


def test_manual_clock():
    clock = ManualClock(10)
    assert clock() == 10
    clock.set(10)
    assert clock.advance(5) == 15
    with pytest.raises(ballotlib.errors.InvalidState):
        clock.set(14)
    assert clock() == 15


def test_system_clock():
    reading = SystemClock()()
    assert isinstance(reading, int)
    assert abs(reading - time.time()) < 5
