'''Transaction scripts: recorded election operations replayable in order.

A script is a text file. Blank lines and anything after ``#`` are ignored.
The first statement is the header naming the administrator and the election::

    election chair "Board election 2026"

Every further line is one transaction - the time, the caller, the operation
and its arguments, split shell-style so that names can be quoted::

    100 chair add_candidate "Alice Smith"
    100 chair register xavier yvonne zoe
    100 chair set_voting_period 200 300
    200 xavier vote 1
    201 yvonne delegate xavier

Times must not decrease from one transaction to the next.
'''

from __future__ import annotations

import dataclasses
import logging
import shlex
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import ballotlib.io.core
from ballotlib.clock import ManualClock
from ballotlib.election import Election
from ballotlib.errors import ElectionError


logger = logging.getLogger(__name__)

HEADER_KEYWORD = 'election'


class ScriptParseError(ballotlib.io.core.ParseError):
    pass


@dataclasses.dataclass
class Transaction:
    """A single recorded operation call."""
    time: int
    caller: str
    operation: str
    args: Tuple[Any, ...] = ()
    line_no: Optional[int] = None


@dataclasses.dataclass
class TransactionScript:
    """A container for data loadable from a transaction script."""
    admin: str
    name: str
    transactions: List[Transaction] = dataclasses.field(default_factory=list)


# operation -> (Election method, argument converter, min args, max args)
OPERATIONS: Dict[str, Tuple[str, Callable[[str], Any], int, Optional[int]]] = {
    'add_candidate': ('add_candidate', str, 1, 1),
    'register': ('register_voters', str, 1, None),
    'set_voting_period': ('set_voting_period', int, 2, 2),
    'stop_voting': ('stop_voting', str, 0, 0),
    'pause': ('pause', str, 0, 0),
    'unpause': ('unpause', str, 0, 0),
    'transfer_ownership': ('transfer_ownership', str, 1, 1),
    'clear_candidates': ('clear_all_candidates', str, 0, 0),
    'vote': ('vote', int, 1, 1),
    'delegate': ('delegate', str, 1, 1),
}


def load_lines(script_lines: Iterable[str]) -> TransactionScript:
    script = None
    last_time = None
    for line_no, line in enumerate(script_lines, start=1):
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError as e:
            raise ScriptParseError(str(e), line_no) from e
        if not tokens:
            continue
        if script is None:
            script = _parse_header(tokens, line_no)
            continue
        transaction = _parse_transaction(tokens, line_no)
        if last_time is not None and transaction.time < last_time:
            raise ScriptParseError(
                f'time {transaction.time} is before {last_time}', line_no
            )
        last_time = transaction.time
        script.transactions.append(transaction)
    if script is None:
        raise ScriptParseError('empty transaction script')
    return script


load, loads = ballotlib.io.core.loaders(load_lines)


def _parse_header(tokens: List[str], line_no: int) -> TransactionScript:
    if tokens[0] != HEADER_KEYWORD or len(tokens) < 2:
        raise ScriptParseError(
            f'expected header "{HEADER_KEYWORD} ADMIN [NAME]"', line_no
        )
    return TransactionScript(admin=tokens[1], name=' '.join(tokens[2:]))


def _parse_transaction(tokens: List[str], line_no: int) -> Transaction:
    if len(tokens) < 3:
        raise ScriptParseError('expected "TIME CALLER OPERATION [ARGS]"',
                               line_no)
    time_str, caller, operation, *raw_args = tokens
    try:
        time = int(time_str)
    except ValueError:
        raise ScriptParseError(f'invalid time: {time_str!r}', line_no) from None
    if operation not in OPERATIONS:
        raise ScriptParseError(
            f'unknown operation {operation!r}, known: '
            + ', '.join(OPERATIONS.keys()), line_no
        )
    _, converter, min_args, max_args = OPERATIONS[operation]
    if len(raw_args) < min_args or (
            max_args is not None and len(raw_args) > max_args):
        raise ScriptParseError(
            f'{operation} takes {min_args}'
            + ('' if max_args == min_args else
               ' or more' if max_args is None else f' to {max_args}')
            + f' arguments, got {len(raw_args)}', line_no
        )
    try:
        args = tuple(converter(arg) for arg in raw_args)
    except ValueError:
        raise ScriptParseError(
            f'invalid arguments for {operation}: {raw_args!r}', line_no
        ) from None
    return Transaction(time, caller, operation, args, line_no)


def dump_lines(script: TransactionScript) -> Iterable[str]:
    yield shlex.join([HEADER_KEYWORD, script.admin] + (
        [script.name] if script.name else []
    ))
    for trans in script.transactions:
        yield shlex.join(
            [str(trans.time), trans.caller, trans.operation]
            + [str(arg) for arg in trans.args]
        )


dump, dumps = ballotlib.io.core.dumpers(dump_lines)


def apply(election: Election, transaction: Transaction) -> Any:
    '''Call the election operation recorded by the transaction.

    :returns: Whatever the election operation returns.
    :raises ElectionError: If the election rejects the operation.
    '''
    method_name = OPERATIONS[transaction.operation][0]
    method = getattr(election, method_name)
    if transaction.operation == 'register':
        if len(transaction.args) == 1:
            return election.register_voter(transaction.caller,
                                           transaction.args[0])
        return method(transaction.caller, list(transaction.args))
    return method(transaction.caller, *transaction.args)


def replay(script: TransactionScript,
           require_registered_delegate: bool = True,
           ) -> Tuple[Election, List[Tuple[Transaction, ElectionError]]]:
    '''Run all transactions of the script against a fresh election.

    Rejected transactions are logged and collected; they do not stop the
    replay.

    :returns: The resulting election and the list of rejected transactions
        with their errors.
    '''
    clock = ManualClock(script.transactions[0].time
                        if script.transactions else 0)
    election = Election(script.admin, script.name, clock=clock,
                        require_registered_delegate=require_registered_delegate)
    rejected = []
    for trans in script.transactions:
        clock.set(trans.time)
        try:
            apply(election, trans)
        except ElectionError as e:
            logger.warning('line %s: %s %s rejected: %s',
                           trans.line_no, trans.caller, trans.operation, e)
            rejected.append((trans, e))
    return election, rejected
