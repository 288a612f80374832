import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotlib.errors
from ballotlib.candidate import Candidate, CandidateRegistry


def test_sequential_ids():
    registry = CandidateRegistry()
    assert [registry.add(name).id for name in 'ABC'] == [1, 2, 3]
    assert registry.ids() == [1, 2, 3]
    assert len(registry) == 3


def test_name_stripped():
    registry = CandidateRegistry()
    assert registry.add('  Alice ').name == 'Alice'


@pytest.mark.parametrize('name', ['', ' \t', None, 12])
def test_invalid_name(name):
    registry = CandidateRegistry()
    with pytest.raises(ballotlib.errors.InvalidInput):
        registry.add(name)
    assert registry.add('A').id == 1


@pytest.mark.parametrize('cand_id', [0, 3, -1])
def test_not_found(cand_id):
    registry = CandidateRegistry()
    registry.add('A')
    registry.add('B')
    with pytest.raises(ballotlib.errors.NotFound):
        registry.get(cand_id)
    with pytest.raises(ballotlib.errors.NotFound):
        registry.add_votes(cand_id, 1)


@pytest.mark.parametrize('cand_id', [True, 1.0, '1', None, [1]])
def test_invalid_id(cand_id):
    registry = CandidateRegistry()
    registry.add('A')
    with pytest.raises(ballotlib.errors.InvalidInput):
        registry.get(cand_id)
    with pytest.raises(ballotlib.errors.InvalidInput):
        registry.add_votes(cand_id, 1)
    assert registry.totals() == {1: 0}


def test_add_votes():
    registry = CandidateRegistry()
    registry.add('A')
    registry.add('B')
    assert registry.add_votes(2, 3) == 3
    assert registry.add_votes(2, 1) == 4
    assert registry.totals() == {1: 0, 2: 4}
    assert registry.get(2) == Candidate(2, 'B', 4)


def test_clear_restarts_numbering():
    registry = CandidateRegistry()
    registry.add('A')
    registry.add('B')
    assert registry.clear() == 2
    assert registry.ids() == []
    assert registry.totals() == {}
    assert registry.add('C').id == 1


def test_from_list():
    registry = CandidateRegistry.from_list([Candidate(1, 'A', 2),
                                            Candidate(2, 'B')])
    assert registry.totals() == {1: 2, 2: 0}
    assert registry.add('C').id == 3


def test_from_list_gap():
    with pytest.raises(ballotlib.errors.InvalidInput):
        CandidateRegistry.from_list([Candidate(1, 'A'), Candidate(3, 'C')])
