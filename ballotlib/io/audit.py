'''Plain text audit log of election events.

One line per event, in order::

    SEQ TIME KIND KEY=VALUE... DIGEST

Values are quoted shell-style where needed, so that the log can be read back
by :func:`load` and its hash chain verified independently of the election.
'''

import json
import shlex
from typing import Iterable, List

import ballotlib.io.core
from ballotlib.events import GENESIS_DIGEST, Event, EventLog


class AuditParseError(ballotlib.io.core.ParseError):
    pass


def dump_lines(events: Iterable[Event]) -> Iterable[str]:
    for event in events:
        yield ' '.join(
            [str(event.seq), str(event.time), event.kind]
            + [
                f'{key}={shlex.quote(json.dumps(value))}'
                for key, value in sorted(event.args.items())
            ]
            + [event.digest]
        )


dump, dumps = ballotlib.io.core.dumpers(dump_lines)


def load_lines(audit_lines: Iterable[str]) -> EventLog:
    events: List[Event] = []
    prev_digest = GENESIS_DIGEST
    for line_no, line in enumerate(audit_lines, start=1):
        if not line.strip():
            continue
        try:
            seq, time, kind, *pairs, digest = shlex.split(line)
            args = {}
            for pair in pairs:
                key, value = pair.split('=', 1)
                args[key] = json.loads(value)
            event = Event(int(seq), int(time), kind, args, prev_digest, digest)
        except ValueError as e:
            raise AuditParseError(f'malformed event: {e}', line_no) from e
        events.append(event)
        prev_digest = digest
    return EventLog.from_list(events, verify=False)


load, loads = ballotlib.io.core.loaders(load_lines)
