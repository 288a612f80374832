'''Tally aggregation over candidate vote totals.

All functions take a mapping of candidate identifiers to their accumulated
vote weight, in candidate order, as returned by
:meth:`ballotlib.candidate.CandidateRegistry.totals`. Ties are never broken:
every candidate sharing the maximum is a winner.
'''

import operator
from typing import Dict, List


def max_votes(totals: Dict[int, int]) -> int:
    '''Return the highest vote total, zero if there are no candidates.'''
    return max(totals.values(), default=0)


def winners(totals: Dict[int, int]) -> List[int]:
    '''Return all candidates that reached the maximum vote total.

    With no votes cast at all, every candidate is tied at zero and all are
    returned. With no candidates, the result is empty.

    :param totals: Vote totals of candidates.
    :returns: Identifiers of the winning candidates, in candidate order.
    '''
    best = max_votes(totals)
    return [cand_id for cand_id, n_votes in totals.items() if n_votes == best]


def total_votes_cast(totals: Dict[int, int]) -> int:
    '''Return the sum of vote weight over all candidates.'''
    return sum(totals.values())


def results(totals: Dict[int, int]) -> Dict[int, int]:
    '''Return the totals ordered by descending vote weight.

    Candidates with equal totals keep their relative order.
    '''
    return dict(sorted(
        totals.items(),
        key=operator.itemgetter(1),
        reverse=True    # sorted() is stable with reverse as well
    ))


def is_tie(totals: Dict[int, int]) -> bool:
    '''Return True if more than one candidate shares the maximum.'''
    return len(winners(totals)) > 1
