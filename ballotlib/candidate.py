'''Candidate records and the append-only candidate registry.

Candidates are numbered sequentially from 1 in the order they are added. The
registry never removes a single candidate; it can only be cleared as a whole,
which also restarts the numbering. The registry does not check who is calling
or in which phase the election is; that is the job of
:class:`ballotlib.election.Election`.
'''

from __future__ import annotations

import copy
import logging
from typing import Dict, List

from ballotlib.errors import InvalidInput, NotFound
from ballotlib.persist import simple_serialization


logger = logging.getLogger(__name__)


@simple_serialization
class Candidate:
    '''A candidate standing in the election.

    :param id: Sequential identifier, starting at 1.
    :param name: Display name of the candidate; never empty.
    :param votes: Accumulated vote weight.
    '''
    def __init__(self, id: int, name: str, votes: int = 0):
        self.id = id
        self.name = name
        self.votes = votes

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Candidate)
            and (self.id, self.name, self.votes)
            == (other.id, other.name, other.votes)
        )

    def __repr__(self) -> str:
        return f'<Candidate({self.id},{self.name},{self.votes})>'


def validate_id(cand_id: int) -> int:
    '''Return the candidate identifier if it is an integer.

    :raises InvalidInput: If the identifier is not an int, or is a bool.
    '''
    if not isinstance(cand_id, int) or isinstance(cand_id, bool):
        raise InvalidInput(cand_id, 'an integer candidate id')
    return cand_id


def validate_name(name: str) -> str:
    '''Return the candidate name stripped of surrounding whitespace.

    :raises InvalidInput: If the name is not a string or is blank.
    '''
    if not isinstance(name, str) or not name.strip():
        raise InvalidInput(name, 'a non-empty candidate name')
    return name.strip()


class CandidateRegistry:
    '''Ordered store of candidates keyed by their identifiers.'''

    def __init__(self):
        self._candidates: Dict[int, Candidate] = {}
        self._ids: List[int] = []
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, name: str) -> Candidate:
        '''Store a new candidate under the next sequential identifier.

        :param name: Display name; must be non-empty.
        :returns: The newly created candidate record.
        :raises InvalidInput: If the name is blank.
        '''
        name = validate_name(name)
        cand = Candidate(self._next_id, name)
        self._candidates[cand.id] = cand
        self._ids.append(cand.id)
        self._next_id += 1
        logger.debug('stored candidate %d: %s', cand.id, name)
        return cand

    def get(self, cand_id: int) -> Candidate:
        '''Return a copy of the candidate record.

        :raises InvalidInput: If the identifier is not an integer.
        :raises NotFound: If there is no candidate with the identifier.
        '''
        return copy.copy(self._get(cand_id))

    def _get(self, cand_id: int) -> Candidate:
        validate_id(cand_id)
        try:
            return self._candidates[cand_id]
        except KeyError:
            raise NotFound(cand_id) from None

    def ids(self) -> List[int]:
        '''Return candidate identifiers in the order they were added.'''
        return list(self._ids)

    def totals(self) -> Dict[int, int]:
        '''Return a mapping of candidate identifiers to their vote weight.'''
        return {
            cand_id: self._candidates[cand_id].votes for cand_id in self._ids
        }

    def add_votes(self, cand_id: int, weight: int) -> int:
        '''Add vote weight to a candidate and return its new total.

        :raises NotFound: If there is no candidate with the identifier.
        '''
        cand = self._get(cand_id)
        cand.votes += weight
        return cand.votes

    def clear(self) -> int:
        '''Remove every candidate, restart numbering at 1.

        :returns: Number of candidates removed.
        '''
        n_removed = len(self._ids)
        self._candidates.clear()
        self._ids.clear()
        self._next_id = 1
        return n_removed

    def to_list(self) -> List[Candidate]:
        return [copy.copy(self._candidates[cand_id]) for cand_id in self._ids]

    @classmethod
    def from_list(cls, candidates: List[Candidate]) -> CandidateRegistry:
        '''Rebuild a registry from records in identifier order.

        :raises InvalidInput: If the identifiers are not dense from 1.
        '''
        registry = cls()
        for expected_id, cand in enumerate(candidates, start=1):
            if cand.id != expected_id:
                raise InvalidInput(cand.id, f'candidate id {expected_id}')
            registry._candidates[cand.id] = copy.copy(cand)
            registry._ids.append(cand.id)
        registry._next_id = len(candidates) + 1
        return registry
