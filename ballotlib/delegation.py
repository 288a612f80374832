'''Resolution of delegation chains.

A delegation stores only the direct target. To find out where a new
delegator's weight goes, the chain of stored targets is followed from the
direct target until an identity that has not delegated is found - the
effective recipient. That identity has either voted directly or not voted at
all.

The walk is iterative and keeps a visited set, so it is bounded by the number
of identities in the registry no matter what the stored pointers contain.
'''

import logging
from typing import Callable, List, NamedTuple, Optional

from ballotlib.errors import DelegationLoop


logger = logging.getLogger(__name__)


class Resolution(NamedTuple):
    '''Outcome of following a delegation chain.

    :param chain: Identities on the chain, starting with the direct target
        and ending with the effective recipient.
    '''
    chain: List[str]

    @property
    def recipient(self) -> str:
        '''The effective recipient (last identity of the chain).'''
        return self.chain[-1]


def resolve_chain(delegator: str,
                  target: str,
                  delegate_of: Callable[[str], Optional[str]],
                  max_steps: Optional[int] = None,
                  ) -> Resolution:
    '''Follow delegation pointers from target to the effective recipient.

    :param delegator: Identity that is about to delegate. Reaching it on the
        chain means the delegation would close a loop.
    :param target: Direct delegation target.
    :param delegate_of: Lookup returning the stored delegation target of an
        identity, or None if it has not delegated.
    :param max_steps: Upper bound on the number of pointers followed, usually
        the number of known voters. Exceeding it is reported as a loop.
    :returns: The resolved chain.
    :raises DelegationLoop: If the chain revisits the delegator or any other
        identity already on it.
    '''
    chain = [target]
    visited = {delegator, target}
    if target == delegator:
        raise DelegationLoop([delegator, target])
    current = target
    while True:
        following = delegate_of(current)
        if following is None:
            break
        logger.debug('delegation chain of %s: %s -> %s',
                     delegator, current, following)
        if following in visited:
            raise DelegationLoop([delegator] + chain + [following])
        if max_steps is not None and len(chain) > max_steps:
            raise DelegationLoop([delegator] + chain + [following])
        chain.append(following)
        visited.add(following)
        current = following
    return Resolution(chain)
