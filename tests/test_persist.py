import sys
import os
import json

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotlib.errors
import ballotlib.events
import ballotlib.persist
from ballotlib.candidate import Candidate
from ballotlib.events import Event
from ballotlib.phase import ElectionConfig
from ballotlib.voter import Voter


@pytest.mark.parametrize('record', [
    Candidate(1, 'Alice', 3),
    Voter('X'),
    Voter('Y', registered=True, voted=True, delegate='X', weight=2),
    Voter('Z', registered=True, voted=True, weight=1, voted_for=2),
    ElectionConfig('chair', 'Board', 10, 20, stopped=True),
    Event(1, 5, ballotlib.events.CANDIDATE_ADDED, {'id': 1, 'name': 'A'}),
])
def test_roundtrip(record):
    dict_form = ballotlib.persist.to_dict(record)
    serial = json.dumps(dict_form)
    roundtripped = ballotlib.persist.from_dict(json.loads(serial))
    assert roundtripped == record
    assert json.dumps(roundtripped.to_dict()) == serial


def test_class_key():
    assert ballotlib.persist.to_dict(Candidate(2, 'Bob')) == {
        'class': 'ballotlib.candidate.Candidate',
        'id': 2, 'name': 'Bob', 'votes': 0,
    }


@pytest.mark.parametrize('value', [
    {1: 'a'},
    ('b', 'c'),
    {'key': {2, 3}},
])
def test_unserializable(value):
    with pytest.raises(ValueError):
        ballotlib.persist.serialize_value(value)


@pytest.mark.parametrize('value', [
    [],
    {'name': 'no class'},
    {'class': 'os.system', 'command': 'true'},
    {'class': 'eval'},
    {'class': 'ballotlib.nothing.Here'},
    {'class': 'ballotlib.errors.InvalidInput', 'value': 1},
    {'class': '.relative'},
])
def test_invalid(value):
    with pytest.raises(ballotlib.errors.InvalidInput):
        ballotlib.persist.from_dict(value)
