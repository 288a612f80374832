'''Error kinds raised by the election state machine.

Every rejected operation raises a subclass of :class:`ElectionError`; the
election state is left untouched when that happens. Each precondition has its
own error class so that callers can tell the failures apart without parsing
the message.
'''

from typing import Any, List, Optional, Tuple


class ElectionError(Exception):
    '''An operation was rejected by the election rules.'''
    pass


class Unauthorized(ElectionError):
    '''A caller other than the administrator attempted an admin operation.

    :param caller: Identity of the rejected caller.
    :param operation: Name of the operation attempted.
    '''
    def __init__(self, caller: Any, operation: Optional[str] = None):
        self.caller = caller
        self.operation = operation
        message = f'caller {caller!r} is not the administrator'
        if operation:
            message += f', cannot {operation}'
        super().__init__(message)


class InvalidState(ElectionError):
    '''The operation is not allowed in the current election phase.'''
    pass


class InvalidInput(ElectionError):
    '''An argument is malformed (empty name, invalid identity...).

    :param value: The offending value.
    :param expected: Description of what was expected.
    '''
    def __init__(self, value: Any, expected: Any = None):
        self.value = value
        self.expected = expected
        message = f'invalid input: {value!r}'
        if expected:
            message += f', must be {expected}'
        super().__init__(message)


class BatchRegistrationError(InvalidInput):
    '''Some entries of a batch registration were rejected.

    No identity from the batch is registered when this is raised.

    :param failures: Triples of (position in the batch, identity, error).
    '''
    def __init__(self, failures: List[Tuple[int, Any, ElectionError]]):
        self.failures = failures
        self.value = [identity for _, identity, _ in failures]
        self.expected = None
        details = '; '.join(
            f'#{pos} {identity!r}: {error}' for pos, identity, error in failures
        )
        Exception.__init__(
            self, f'{len(failures)} batch entries rejected: {details}'
        )


class AlreadyRegistered(ElectionError):
    '''The identity is registered already.'''
    def __init__(self, identity: Any):
        self.identity = identity
        super().__init__(f'voter {identity!r} is already registered')


class NotRegistered(ElectionError):
    '''The identity has no right to vote.'''
    def __init__(self, identity: Any):
        self.identity = identity
        super().__init__(f'voter {identity!r} is not registered')


class AlreadyVoted(ElectionError):
    '''The voter has already voted or delegated.'''
    def __init__(self, identity: Any):
        self.identity = identity
        super().__init__(f'voter {identity!r} has already voted')


class SelfDelegation(ElectionError):
    '''A voter tried to delegate to themselves.'''
    def __init__(self, identity: Any):
        self.identity = identity
        super().__init__(f'voter {identity!r} cannot delegate to itself')


class DelegationLoop(ElectionError):
    '''Following the delegation chain would lead back to the delegator.

    :param chain: Identities visited, starting with the delegator and ending
        with the identity that closes the loop.
    '''
    def __init__(self, chain: List[Any]):
        self.chain = chain
        super().__init__(
            'delegation loop: ' + ' -> '.join(repr(item) for item in chain)
        )


class NotFound(ElectionError):
    '''An unknown candidate (or identity) was referenced.'''
    def __init__(self, key: Any, what: str = 'candidate'):
        self.key = key
        self.what = what
        super().__init__(f'{what} {key!r} does not exist')


class WindowNotOpen(ElectionError):
    '''The voting window has not opened yet (or was never configured).'''
    pass


class WindowClosed(ElectionError):
    '''The voting window is over.'''
    pass


class Paused(ElectionError):
    '''The election is paused by the administrator.'''
    def __init__(self, operation: Optional[str] = None):
        self.operation = operation
        message = 'election is paused'
        if operation:
            message += f', cannot {operation}'
        super().__init__(message)
