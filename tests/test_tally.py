import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotlib.tally


@pytest.mark.parametrize(('totals', 'winners'), [
    ({}, []),
    ({1: 0}, [1]),
    ({1: 0, 2: 0, 3: 0}, [1, 2, 3]),
    ({1: 3, 2: 1}, [1]),
    ({1: 1, 2: 3}, [2]),
    ({1: 5, 2: 5}, [1, 2]),
    ({1: 4, 2: 7, 3: 7, 4: 2}, [2, 3]),
])
def test_winners(totals, winners):
    assert ballotlib.tally.winners(totals) == winners
    assert ballotlib.tally.is_tie(totals) == (len(winners) > 1)


@pytest.mark.parametrize(('totals', 'total'), [
    ({}, 0),
    ({1: 0, 2: 0}, 0),
    ({1: 5, 2: 5}, 10),
    ({1: 4, 2: 7, 3: 7, 4: 2}, 20),
])
def test_total_votes_cast(totals, total):
    assert ballotlib.tally.total_votes_cast(totals) == total


def test_results_stable():
    results = ballotlib.tally.results({1: 2, 2: 5, 3: 2, 4: 9})
    assert list(results.items()) == [(4, 9), (2, 5), (1, 2), (3, 2)]


def test_max_votes_empty():
    assert ballotlib.tally.max_votes({}) == 0
