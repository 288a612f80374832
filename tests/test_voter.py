import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotlib.errors
from ballotlib.voter import Voter, VoterRegistry


def test_register():
    registry = VoterRegistry()
    voter = registry.register('X')
    assert voter.registered
    assert voter.weight == 1
    assert not voter.voted
    assert registry.total_registered == 1
    assert registry.is_registered('X')
    with pytest.raises(ballotlib.errors.AlreadyRegistered):
        registry.register('X')
    assert registry.total_registered == 1


def test_get_unknown():
    registry = VoterRegistry()
    assert registry.get('nobody') == Voter('nobody')
    assert len(registry) == 0


def test_get_returns_copy():
    registry = VoterRegistry()
    registry.register('X')
    registry.get('X').weight = 10
    assert registry.get('X').weight == 1


def test_delegate_of():
    registry = VoterRegistry()
    registry.register('X')
    assert registry.delegate_of('X') is None
    assert registry.delegate_of('nobody') is None
    registry.record('X').delegate = 'Y'
    assert registry.delegate_of('X') == 'Y'


def test_voted_directly():
    assert Voter('X', True, True, weight=1, voted_for=1).voted_directly
    assert not Voter('X', True, True, delegate='Y', weight=1).voted_directly
    assert not Voter('X', True, weight=1).voted_directly


def test_check_batch():
    registry = VoterRegistry()
    registry.register('A')
    assert registry.check_batch(iter(['B', 'C'])) == ['B', 'C']
    with pytest.raises(ballotlib.errors.BatchRegistrationError) as excinfo:
        registry.check_batch(['B', 'A', 'B', None])
    assert [pos for pos, _, _ in excinfo.value.failures] == [1, 2, 3]
    assert excinfo.value.value == ['A', 'B', None]
    assert registry.total_registered == 1


def test_from_list():
    registry = VoterRegistry.from_list([
        Voter('A', registered=True, weight=1),
        Voter('B', weight=2),
    ])
    assert registry.total_registered == 1
    assert registry.get('B').weight == 2
