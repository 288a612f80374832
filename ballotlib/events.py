'''An append-only, hash-chained log of election events.

Every successful state change of an election appends exactly one event (one
per identity for a batch registration). Each event stores the digest of its
predecessor and its own SHA-256 digest computed over that predecessor digest
and the canonical JSON form of the event, so altering, dropping or reordering
recorded events is detected by :meth:`EventLog.verify`.
'''

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional

from ballotlib.errors import InvalidInput
from ballotlib.persist import simple_serialization


logger = logging.getLogger(__name__)

GENESIS_DIGEST = '0' * 64

CANDIDATE_ADDED = 'candidate-added'
VOTER_REGISTERED = 'voter-registered'
VOTED = 'voted'
DELEGATED = 'delegated'
VOTING_STARTED = 'voting-started'
VOTING_STOPPED = 'voting-stopped'
PAUSED = 'paused'
UNPAUSED = 'unpaused'
OWNERSHIP_TRANSFERRED = 'ownership-transferred'
CANDIDATES_CLEARED = 'candidates-cleared'

KINDS = (
    CANDIDATE_ADDED, VOTER_REGISTERED, VOTED, DELEGATED, VOTING_STARTED,
    VOTING_STOPPED, PAUSED, UNPAUSED, OWNERSHIP_TRANSFERRED,
    CANDIDATES_CLEARED,
)


@simple_serialization
class Event:
    '''A recorded election event.

    :param seq: Position in the log, starting at 1.
    :param time: Clock reading when the event happened.
    :param kind: One of the event kinds from :data:`KINDS`.
    :param args: Event payload, JSON-compatible values only.
    :param prev_digest: Digest of the preceding event.
    :param digest: Digest of this event.
    '''
    def __init__(self,
                 seq: int,
                 time: int,
                 kind: str,
                 args: Dict[str, Any],
                 prev_digest: str = GENESIS_DIGEST,
                 digest: Optional[str] = None,
                 ):
        self.seq = seq
        self.time = time
        self.kind = kind
        self.args = args
        self.prev_digest = prev_digest
        self.digest = self.compute_digest() if digest is None else digest

    def canonical(self) -> str:
        return json.dumps(
            {'seq': self.seq, 'time': self.time,
             'kind': self.kind, 'args': self.args},
            sort_keys=True, separators=(',', ':'),
        )

    def compute_digest(self) -> str:
        hasher = hashlib.sha256(self.prev_digest.encode('ascii'))
        hasher.update(self.canonical().encode('utf8'))
        return hasher.hexdigest()

    def __eq__(self, other) -> bool:
        return isinstance(other, Event) and vars(self) == vars(other)

    def __repr__(self) -> str:
        return f'<Event({self.seq},{self.kind},{self.args})>'


class EventLog:
    '''Ordered event log with subscribers.'''

    def __init__(self):
        self._events: List[Event] = []
        self._subscribers: List[Callable[[Event], None]] = []

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __getitem__(self, index):
        return self._events[index]

    @property
    def head(self) -> str:
        '''Digest of the last event (the genesis digest for an empty log).'''
        return self._events[-1].digest if self._events else GENESIS_DIGEST

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        '''Call the callback with every event appended from now on.

        Exceptions raised by the callback are logged and do not propagate;
        the event is recorded either way.
        '''
        self._subscribers.append(callback)

    def append(self, kind: str, time: int, **args) -> Event:
        '''Record a new event at the end of the log and notify subscribers.'''
        if kind not in KINDS:
            raise InvalidInput(kind, f'an event kind from {KINDS}')
        event = Event(len(self._events) + 1, time, kind, args, self.head)
        self._events.append(event)
        logger.debug('event %d %s %s', event.seq, kind, args)
        for callback in self._subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception('subscriber %r failed on event %d',
                                 callback, event.seq)
        return event

    def find_broken(self) -> Optional[int]:
        '''Return the sequence number of the first event failing the chain.

        Returns None if the whole log is intact.
        '''
        prev_digest = GENESIS_DIGEST
        for expected_seq, event in enumerate(self._events, start=1):
            if (event.seq != expected_seq
                    or event.prev_digest != prev_digest
                    or event.digest != event.compute_digest()):
                return expected_seq
            prev_digest = event.digest
        return None

    def verify(self) -> bool:
        '''Return True if the hash chain over all events is intact.'''
        return self.find_broken() is None

    def to_list(self) -> List[Event]:
        return list(self._events)

    @classmethod
    def from_list(cls, events: List[Event], verify: bool = True) -> EventLog:
        '''Rebuild a log from recorded events.

        :param events: Events in log order.
        :param verify: Whether to check the hash chain right away.
        :raises InvalidInput: If verifying and the events do not form an
            intact chain.
        '''
        log = cls()
        log._events = list(events)
        if not verify:
            return log
        broken = log.find_broken()
        if broken is not None:
            raise InvalidInput(broken, 'an intact event chain (broken at this'
                                       ' sequence number)')
        return log
