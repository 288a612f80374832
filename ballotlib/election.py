'''The election state machine.

:class:`Election` owns the candidate and voter registries, the configuration
and the event log, and exposes every operation of the election: the
administrative controls, voting and delegation, and the read-only queries.

Every mutating operation takes the identity of its caller as the first
argument. All of them run under one lock, check all of their preconditions
before touching any state, and append exactly one event on success (one per
identity for a batch registration). A rejected operation raises a subclass of
:class:`ballotlib.errors.ElectionError` and changes nothing.

The checks of each operation run in a fixed order: caller authorization,
pause, phase, then arguments and records.
'''

from __future__ import annotations

import copy
import functools
import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

import ballotlib.tally
import ballotlib.events
from ballotlib.candidate import Candidate, CandidateRegistry
from ballotlib.clock import SystemClock
from ballotlib.delegation import resolve_chain
from ballotlib.errors import (
    AlreadyVoted, InvalidInput, InvalidState, NotRegistered, Paused,
    SelfDelegation, Unauthorized, WindowClosed, WindowNotOpen,
)
from ballotlib.events import Event, EventLog
from ballotlib.persist import to_dict, from_dict
from ballotlib.phase import ElectionConfig, Phase, derive_phase, has_started
from ballotlib.voter import Voter, VoterRegistry, validate_identity


logger = logging.getLogger(__name__)


def serialized(method: Callable) -> Callable:
    '''Run the method while holding the election lock.'''
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def _check_timestamp(value: Any, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise InvalidInput(value, f'a positive integer {name} time')
    return value


class Election:
    '''A single election with delegable votes.

    :param admin: Identity of the administrator.
    :param name: Human-readable name of the election.
    :param clock: Callable returning the current time as an integer. Defaults
        to the system clock in whole seconds.
    :param require_registered_delegate: Whether votes can only be delegated
        to registered voters. If False, any valid identity can receive
        delegated weight, which stays with it until it votes.
    '''
    def __init__(self,
                 admin: str,
                 name: str = '',
                 clock: Optional[Callable[[], int]] = None,
                 require_registered_delegate: bool = True,
                 ):
        validate_identity(admin)
        self._config = ElectionConfig(admin, name)
        self.clock = SystemClock() if clock is None else clock
        self.require_registered_delegate = require_registered_delegate
        self._candidates = CandidateRegistry()
        self._voters = VoterRegistry()
        self._events = EventLog()
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return (f'<Election({self._config.name!r},'
                f'{len(self._candidates)} candidates,'
                f'{self._voters.total_registered} voters)>')

    # guards

    def _require_admin(self, caller: str, operation: str) -> None:
        if caller != self._config.admin:
            raise Unauthorized(caller, operation)

    def _require_running(self, operation: str) -> None:
        if self._config.paused:
            raise Paused(operation)

    def _require_open(self, now: int) -> None:
        phase = derive_phase(self._config, now)
        if phase is Phase.CLOSED:
            raise WindowClosed(
                f'voting closed at {self._config.end}, now {now}'
            )
        elif phase is not Phase.OPEN:
            raise WindowNotOpen(
                f'voting not open at {now} (phase {phase.value})'
            )

    def _require_voter(self, identity: str) -> Voter:
        if not self._voters.is_registered(identity):
            raise NotRegistered(identity)
        voter = self._voters.record(identity)
        if voter.voted:
            raise AlreadyVoted(identity)
        if voter.weight <= 0:
            raise NotRegistered(identity)
        return voter

    # administrative controls

    @serialized
    def add_candidate(self, caller: str, name: str) -> int:
        '''Add a candidate before the voting window starts.

        :returns: Identifier of the new candidate.
        :raises Unauthorized: If the caller is not the administrator.
        :raises Paused: If the election is paused.
        :raises InvalidState: If the window has started or was stopped.
        :raises InvalidInput: If the name is empty.
        '''
        now = self.clock()
        self._require_admin(caller, 'add candidates')
        self._require_running('add candidates')
        if has_started(self._config, now):
            raise InvalidState('cannot add candidates after voting started')
        cand = self._candidates.add(name)
        self._events.append(ballotlib.events.CANDIDATE_ADDED, now,
                            id=cand.id, name=cand.name)
        logger.info('added candidate %d: %s', cand.id, cand.name)
        return cand.id

    @serialized
    def register_voter(self, caller: str, identity: str) -> None:
        '''Give an identity the right to vote with a weight of 1.

        :raises Unauthorized: If the caller is not the administrator.
        :raises Paused: If the election is paused.
        :raises InvalidInput: If the identity is malformed.
        :raises AlreadyRegistered: If the identity is registered already.
        '''
        now = self.clock()
        self._require_admin(caller, 'register voters')
        self._require_running('register voters')
        self._voters.register(identity)
        self._events.append(ballotlib.events.VOTER_REGISTERED, now,
                            identity=identity)
        logger.info('registered voter %s', identity)

    @serialized
    def register_voters(self, caller: str, identities: Iterable[str]
                        ) -> List[str]:
        '''Register a batch of identities, all or nothing.

        Every entry is checked before anything is registered. If any entry is
        rejected, none of the batch is registered.

        :returns: The registered identities in batch order.
        :raises BatchRegistrationError: Listing all rejected entries.
        '''
        now = self.clock()
        self._require_admin(caller, 'register voters')
        self._require_running('register voters')
        identities = self._voters.check_batch(identities)
        if not identities:
            raise InvalidInput(identities, 'a non-empty batch of identities')
        for identity in identities:
            self._voters.register(identity)
            self._events.append(ballotlib.events.VOTER_REGISTERED, now,
                                identity=identity)
        logger.info('registered %d voters in a batch', len(identities))
        return identities

    @serialized
    def set_voting_period(self, caller: str, start: int, end: int) -> None:
        '''Schedule the voting window; both bounds are inclusive.

        A window that has not started yet can be rescheduled.

        :raises InvalidState: If the window already started or was stopped.
        :raises InvalidInput: If start is not in the future or end is not
            after start.
        '''
        now = self.clock()
        self._require_admin(caller, 'set the voting period')
        self._require_running('set the voting period')
        if has_started(self._config, now):
            raise InvalidState('voting period cannot change after it started')
        _check_timestamp(start, 'start')
        _check_timestamp(end, 'end')
        if start <= now:
            raise InvalidInput(start, f'a start time after {now}')
        if end <= start:
            raise InvalidInput(end, f'an end time after {start}')
        self._config.start = start
        self._config.end = end
        self._events.append(ballotlib.events.VOTING_STARTED, now,
                            start=start, end=end)
        logger.info('voting period set to %d-%d', start, end)

    @serialized
    def stop_voting(self, caller: str) -> None:
        '''Close voting immediately; votes cast so far are kept.

        :raises InvalidState: If no window is configured or it is closed.
        '''
        now = self.clock()
        self._require_admin(caller, 'stop voting')
        self._require_running('stop voting')
        phase = derive_phase(self._config, now)
        if phase is Phase.UNCONFIGURED:
            raise InvalidState('voting period is not configured')
        elif phase is Phase.CLOSED:
            raise InvalidState('voting is already closed')
        self._config.end = now
        self._config.stopped = True
        self._events.append(ballotlib.events.VOTING_STOPPED, now)
        logger.info('voting stopped at %d', now)

    @serialized
    def pause(self, caller: str) -> None:
        now = self.clock()
        self._require_admin(caller, 'pause')
        if self._config.paused:
            raise InvalidState('election is already paused')
        self._config.paused = True
        self._events.append(ballotlib.events.PAUSED, now, by=caller)
        logger.info('election paused by %s', caller)

    @serialized
    def unpause(self, caller: str) -> None:
        now = self.clock()
        self._require_admin(caller, 'unpause')
        if not self._config.paused:
            raise InvalidState('election is not paused')
        self._config.paused = False
        self._events.append(ballotlib.events.UNPAUSED, now, by=caller)
        logger.info('election unpaused by %s', caller)

    @serialized
    def transfer_ownership(self, caller: str, new_admin: str) -> None:
        '''Hand the administrator role over; allowed while paused.'''
        now = self.clock()
        self._require_admin(caller, 'transfer ownership')
        validate_identity(new_admin)
        self._config.admin = new_admin
        self._events.append(ballotlib.events.OWNERSHIP_TRANSFERRED, now,
                            previous=caller, new=new_admin)
        logger.info('ownership transferred from %s to %s', caller, new_admin)

    @serialized
    def clear_all_candidates(self, caller: str) -> int:
        '''Remove all candidates and their tallies; only while paused.

        This is an irreversible reset: the numbering restarts at 1 and all
        vote totals are lost. Voter records keep their state.

        :returns: Number of candidates removed.
        :raises InvalidState: If the election is not paused.
        '''
        now = self.clock()
        self._require_admin(caller, 'clear candidates')
        if not self._config.paused:
            raise InvalidState('candidates can only be cleared while paused')
        n_removed = self._candidates.clear()
        self._events.append(ballotlib.events.CANDIDATES_CLEARED, now,
                            count=n_removed)
        logger.warning('cleared %d candidates with their tallies', n_removed)
        return n_removed

    # voting

    @serialized
    def vote(self, caller: str, candidate_id: int) -> int:
        '''Cast the caller's ballot, with all weight delegated to them.

        :returns: The weight added to the candidate.
        :raises Paused: If the election is paused.
        :raises WindowNotOpen: If the window is not open yet.
        :raises WindowClosed: If the window is over.
        :raises NotRegistered: If the caller has no right to vote.
        :raises AlreadyVoted: If the caller voted or delegated already.
        :raises InvalidInput: If the candidate id is not an integer.
        :raises NotFound: If the candidate does not exist.
        '''
        now = self.clock()
        self._require_running('vote')
        self._require_open(now)
        voter = self._require_voter(caller)
        self._candidates.get(candidate_id)
        voter.voted = True
        voter.voted_for = candidate_id
        total = self._candidates.add_votes(candidate_id, voter.weight)
        self._events.append(ballotlib.events.VOTED, now, identity=caller,
                            candidate_id=candidate_id, weight=voter.weight)
        logger.info('%s voted for %d with weight %d (total %d)',
                    caller, candidate_id, voter.weight, total)
        return voter.weight

    @serialized
    def delegate(self, caller: str, to: str) -> str:
        '''Delegate the caller's ballot to another voter.

        The chain of delegations is followed from ``to`` to the effective
        recipient, the first identity that has not delegated. If the
        recipient already voted, the caller's weight goes to their candidate
        at once; otherwise it is added to the recipient's weight. The weight
        stays where it settled even if the chain changes later.

        :returns: The effective recipient.
        :raises SelfDelegation: If the caller delegates to themselves.
        :raises DelegationLoop: If the chain leads back to the caller.
        :raises NotRegistered: If the caller (or, when registration is
            required, the target) is not registered.
        '''
        now = self.clock()
        self._require_running('delegate')
        self._require_open(now)
        sender = self._require_voter(caller)
        validate_identity(to)
        if to == caller:
            raise SelfDelegation(caller)
        if self.require_registered_delegate and \
                not self._voters.is_registered(to):
            raise NotRegistered(to)
        resolution = resolve_chain(caller, to, self._voters.delegate_of,
                                   max_steps=len(self._voters))
        recipient = self._voters.get(resolution.recipient)
        if recipient.voted_directly:
            self._candidates.get(recipient.voted_for)
        sender.voted = True
        sender.delegate = to
        if recipient.voted_directly:
            self._candidates.add_votes(recipient.voted_for, sender.weight)
            logger.info('%s delegated to %s, weight %d settled on candidate'
                        ' %d via %s', caller, to, sender.weight,
                        recipient.voted_for, ' -> '.join(resolution.chain))
        else:
            self._voters.record(resolution.recipient).weight += sender.weight
            logger.info('%s delegated to %s, weight %d pending with %s',
                        caller, to, sender.weight, resolution.recipient)
        self._events.append(ballotlib.events.DELEGATED, now, delegator=caller,
                            delegate=to)
        return resolution.recipient

    # queries

    @serialized
    def get_candidate(self, candidate_id: int) -> Candidate:
        '''Return a copy of the candidate record.

        :raises InvalidInput: If the candidate id is not an integer.
        :raises NotFound: If the candidate does not exist.
        '''
        return self._candidates.get(candidate_id)

    @serialized
    def list_candidate_ids(self) -> List[int]:
        return self._candidates.ids()

    @serialized
    def get_voter(self, identity: str) -> Voter:
        '''Return a copy of the voter record.

        Never-registered identities get an empty record with
        ``registered`` False instead of an error.
        '''
        return self._voters.get(identity)

    @serialized
    def winners(self) -> List[int]:
        '''Return all candidates with the highest vote total.'''
        return ballotlib.tally.winners(self._candidates.totals())

    @serialized
    def total_votes_cast(self) -> int:
        return ballotlib.tally.total_votes_cast(self._candidates.totals())

    @serialized
    def results(self) -> Dict[int, int]:
        '''Return vote totals ordered by descending weight.'''
        return ballotlib.tally.results(self._candidates.totals())

    @serialized
    def phase(self) -> Phase:
        return derive_phase(self._config, self.clock())

    @serialized
    def config(self) -> ElectionConfig:
        return copy.copy(self._config)

    @property
    def admin(self) -> str:
        return self.config().admin

    @property
    def name(self) -> str:
        return self.config().name

    @property
    def start(self) -> int:
        return self.config().start

    @property
    def end(self) -> int:
        return self.config().end

    @property
    def paused(self) -> bool:
        return self.config().paused

    @property
    def stopped(self) -> bool:
        return self.config().stopped

    @property
    def total_registered(self) -> int:
        with self._lock:
            return self._voters.total_registered

    @serialized
    def events(self) -> List[Event]:
        '''Return the recorded events in order.'''
        return self._events.to_list()

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        '''Call the callback with every future event, under the lock.'''
        with self._lock:
            self._events.subscribe(callback)

    @serialized
    def verify_events(self) -> bool:
        '''Return True if the event log hash chain is intact.'''
        return self._events.verify()

    # persistence

    @serialized
    def snapshot(self) -> Dict[str, Any]:
        '''Return the whole election state as a JSON-ready dictionary.'''
        return {
            'config': to_dict(self._config),
            'require_registered_delegate': self.require_registered_delegate,
            'candidates': [to_dict(c) for c in self._candidates.to_list()],
            'voters': [to_dict(v) for v in self._voters.to_list()],
            'events': [to_dict(e) for e in self._events.to_list()],
        }

    @classmethod
    def from_snapshot(cls,
                      snapshot: Dict[str, Any],
                      clock: Optional[Callable[[], int]] = None,
                      ) -> Election:
        '''Rebuild an election from :meth:`snapshot` output.

        :raises InvalidInput: If the snapshot is malformed or its event log
            fails verification.
        '''
        try:
            config = from_dict(snapshot['config'])
            candidates = [from_dict(c) for c in snapshot['candidates']]
            voters = [from_dict(v) for v in snapshot['voters']]
            recorded = [from_dict(e) for e in snapshot['events']]
            require_registered = snapshot['require_registered_delegate']
        except (KeyError, TypeError) as e:
            raise InvalidInput(snapshot, f'an election snapshot ({e})') from e
        if not isinstance(config, ElectionConfig):
            raise InvalidInput(config, 'an election configuration')
        election = cls(config.admin, config.name, clock=clock,
                       require_registered_delegate=require_registered)
        election._config = config
        election._candidates = CandidateRegistry.from_list(candidates)
        election._voters = VoterRegistry.from_list(voters)
        election._events = EventLog.from_list(recorded)
        return election
