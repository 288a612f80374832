'''Voter records and the voter registry.

A voter is created by registration with a weight of 1. Voting or delegating
sets the ``voted`` flag, which is terminal: no further ballot can be cast by
the same identity. Delegated weight accumulates in the ``weight`` field of the
receiving voter until it is used.
'''

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ballotlib.errors import (
    AlreadyRegistered, BatchRegistrationError, ElectionError, InvalidInput,
)
from ballotlib.persist import simple_serialization


logger = logging.getLogger(__name__)


@simple_serialization
class Voter:
    '''State of a single participant.

    :param identity: Identity key of the voter.
    :param registered: Whether the voter was given the right to vote.
    :param voted: Whether the voter has voted or delegated.
    :param delegate: Identity the voter delegated to directly, if any.
    :param weight: Number of votes the voter's ballot counts for.
    :param voted_for: Candidate voted for directly, if any.
    '''
    def __init__(self,
                 identity: str,
                 registered: bool = False,
                 voted: bool = False,
                 delegate: Optional[str] = None,
                 weight: int = 0,
                 voted_for: Optional[int] = None,
                 ):
        self.identity = identity
        self.registered = registered
        self.voted = voted
        self.delegate = delegate
        self.weight = weight
        self.voted_for = voted_for

    @property
    def voted_directly(self) -> bool:
        return self.voted and self.voted_for is not None

    def __eq__(self, other) -> bool:
        return isinstance(other, Voter) and vars(self) == vars(other)

    def __repr__(self) -> str:
        return (
            f'<Voter({self.identity}'
            + (',registered' if self.registered else '')
            + (f',voted={self.voted_for}' if self.voted_for is not None else '')
            + (f',delegate={self.delegate}' if self.delegate is not None else '')
            + f',weight={self.weight})>'
        )


def validate_identity(identity: Any) -> str:
    '''Check that an identity is usable as a voter or administrator key.

    :raises InvalidInput: If the identity is not a non-blank string.
    '''
    if not isinstance(identity, str) or not identity.strip():
        raise InvalidInput(identity, 'a non-empty identity')
    return identity


class VoterRegistry:
    '''Store of voter records keyed by identity.

    Only registered voters and identities that received delegated weight have
    a stored record; :meth:`get` returns an empty record for any other one.
    '''

    def __init__(self):
        self._voters: Dict[str, Voter] = {}
        self.total_registered = 0

    def __len__(self) -> int:
        return len(self._voters)

    def get(self, identity: str) -> Voter:
        '''Return a copy of the voter record (an empty one if unknown).'''
        voter = self._voters.get(identity)
        if voter is None:
            return Voter(identity)
        return copy.copy(voter)

    def record(self, identity: str) -> Voter:
        '''Return the live record for the identity, creating an empty one.

        For use by the election state machine only, after all checks passed.
        '''
        if identity not in self._voters:
            self._voters[identity] = Voter(identity)
        return self._voters[identity]

    def is_registered(self, identity: str) -> bool:
        voter = self._voters.get(identity)
        return voter is not None and voter.registered

    def delegate_of(self, identity: str) -> Optional[str]:
        '''Return the direct delegation target of the identity, if any.'''
        voter = self._voters.get(identity)
        return None if voter is None else voter.delegate

    def check_registrable(self, identity: Any) -> str:
        '''Check that the identity can be registered now.

        :raises InvalidInput: If the identity is malformed.
        :raises AlreadyRegistered: If the identity is already registered.
        '''
        validate_identity(identity)
        if self.is_registered(identity):
            raise AlreadyRegistered(identity)
        return identity

    def register(self, identity: str) -> Voter:
        '''Give the identity the right to vote with a weight of 1.

        :raises InvalidInput: If the identity is malformed.
        :raises AlreadyRegistered: If the identity is already registered.
        '''
        self.check_registrable(identity)
        voter = self.record(identity)
        voter.registered = True
        voter.weight += 1
        self.total_registered += 1
        logger.debug('registered voter %s', identity)
        return voter

    def check_batch(self, identities: Iterable[Any]) -> List[str]:
        '''Check a whole batch of identities before registering any of them.

        Duplicates within the batch count as already registered.

        :returns: The identities as a list, in batch order.
        :raises BatchRegistrationError: Listing every rejected entry.
        '''
        identities = list(identities)
        failures: List[Tuple[int, Any, ElectionError]] = []
        seen = set()
        for pos, identity in enumerate(identities):
            try:
                self.check_registrable(identity)
                if identity in seen:
                    raise AlreadyRegistered(identity)
            except (InvalidInput, AlreadyRegistered) as e:
                failures.append((pos, identity, e))
            else:
                seen.add(identity)
        if failures:
            raise BatchRegistrationError(failures)
        return identities

    def to_list(self) -> List[Voter]:
        return [copy.copy(voter) for voter in self._voters.values()]

    @classmethod
    def from_list(cls, voters: List[Voter]) -> VoterRegistry:
        registry = cls()
        for voter in voters:
            registry._voters[voter.identity] = copy.copy(voter)
            if voter.registered:
                registry.total_registered += 1
        return registry
