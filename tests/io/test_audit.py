import sys
import os
import io

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import ballotlib.io.audit
import ballotlib.io.script
from ballotlib.clock import ManualClock
from ballotlib.election import Election


def small_election():
    clock = ManualClock(1)
    election = Election('chair', clock=clock)
    election.add_candidate('chair', 'Ann "the Bold" Lee')
    election.register_voter('chair', 'x')
    election.set_voting_period('chair', 5, 10)
    clock.set(5)
    election.vote('x', 1)
    return election


def test_dump_lines():
    election = small_election()
    lines = ballotlib.io.audit.dumps(election.events()).splitlines()
    assert len(lines) == 4
    digests = [event.digest for event in election.events()]
    assert lines[1] == f'2 1 voter-registered identity=\'"x"\' {digests[1]}'
    assert lines[2] == f'3 1 voting-started end=10 start=5 {digests[2]}'
    assert lines[3].startswith('4 5 voted candidate_id=1 identity=')


def test_load_verifies():
    election = small_election()
    buffer = io.StringIO()
    ballotlib.io.audit.dump(buffer, election.events())
    buffer.seek(0)
    log = ballotlib.io.audit.load(buffer)
    assert log.to_list() == election.events()
    assert log.verify()


def test_load_tampered():
    text = ballotlib.io.audit.dumps(small_election().events())
    tampered = text.replace('candidate_id=1', 'candidate_id=2')
    log = ballotlib.io.audit.loads(tampered)
    assert log.find_broken() == 4


@pytest.mark.parametrize('text', [
    '1 2 paused\n',
    'one 2 paused by="chair" abc\n',
    '1 2 paused by=chair abc\n',
    '1 2 paused by abc\n',
])
def test_malformed(text):
    with pytest.raises(ballotlib.io.audit.AuditParseError):
        ballotlib.io.audit.loads(text)
