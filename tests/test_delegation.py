import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotlib.delegation
import ballotlib.errors


def resolve(delegator, target, pointers, **kwargs):
    return ballotlib.delegation.resolve_chain(
        delegator, target, pointers.get, **kwargs
    )


@pytest.mark.parametrize(('pointers', 'target', 'chain'), [
    ({}, 'B', ['B']),
    ({'B': 'C'}, 'B', ['B', 'C']),
    ({'B': 'C', 'C': 'D', 'E': 'A'}, 'B', ['B', 'C', 'D']),
    ({'X': 'Y', 'B': 'X'}, 'B', ['B', 'X', 'Y']),
])
def test_resolve(pointers, target, chain):
    resolution = resolve('A', target, pointers)
    assert resolution.chain == chain
    assert resolution.recipient == chain[-1]


@pytest.mark.parametrize(('pointers', 'target'), [
    ({}, 'A'),
    ({'B': 'A'}, 'B'),
    ({'B': 'C', 'C': 'A'}, 'B'),
    ({'B': 'C', 'C': 'D', 'D': 'E', 'E': 'A'}, 'B'),
])
def test_loop_to_delegator(pointers, target):
    with pytest.raises(ballotlib.errors.DelegationLoop) as excinfo:
        resolve('A', target, pointers)
    assert excinfo.value.chain[0] == 'A'
    assert excinfo.value.chain[-1] == 'A'


def test_foreign_cycle_terminates():
    # corrupted pointers not involving the delegator must not hang
    with pytest.raises(ballotlib.errors.DelegationLoop) as excinfo:
        resolve('A', 'B', {'B': 'C', 'C': 'B'})
    assert excinfo.value.chain == ['A', 'B', 'C', 'B']


def test_max_steps():
    pointers = {str(i): str(i + 1) for i in range(100)}
    assert resolve('A', '0', pointers).recipient == '100'
    with pytest.raises(ballotlib.errors.DelegationLoop):
        resolve('A', '0', pointers, max_steps=10)
