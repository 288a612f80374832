"""A commandline tool to replay a transaction script and show the tally.

Runs every transaction of the script against a fresh election, reports the
rejected ones and shows the results, the total votes cast and the winners.
Optionally writes the audit log of recorded events and a JSON snapshot of the
final election state.
"""

import argparse
import io
import json
import logging
import sys
from typing import Optional

import ballotlib.io.audit
import ballotlib.io.script
from ballotlib.election import Election

argparser = argparse.ArgumentParser(
    description=__doc__,
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
argparser.add_argument(
    '-i', '--input-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='transaction script to replay',
)
argparser.add_argument(
    '-I', '--use-stdin',
    action='store_true',
    help='read the transaction script from standard input',
)
argparser.add_argument(
    '-a', '--audit',
    type=argparse.FileType('w', encoding='utf8'),
    help='write the audit log of recorded events to this file',
)
argparser.add_argument(
    '-s', '--snapshot',
    type=argparse.FileType('w', encoding='utf8'),
    help='write a JSON snapshot of the final election state to this file',
)
argparser.add_argument(
    '-u', '--allow-unregistered-delegates',
    action='store_true',
    help='allow delegating to identities that are not registered voters',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all log messages including delegation chain steps',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='only show log messages about rejected transactions',
)


def main(input_file: io.TextIOBase,
         use_stdin: bool = False,
         audit: Optional[io.TextIOBase] = None,
         snapshot: Optional[io.TextIOBase] = None,
         allow_unregistered_delegates: bool = False,
         verbose: bool = False,
         quiet: bool = False,
         ) -> int:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    if use_stdin:
        input_file = sys.stdin
    script = ballotlib.io.script.load(input_file)
    election, rejected = ballotlib.io.script.replay(
        script,
        require_registered_delegate=not allow_unregistered_delegates,
    )
    show_summary(election, len(script.transactions), len(rejected))
    print()
    show_results(election)
    if audit is not None:
        ballotlib.io.audit.dump(audit, election.events())
    if snapshot is not None:
        json.dump(election.snapshot(), snapshot, indent=2)
    return 1 if rejected else 0


def show_summary(election: Election, n_transactions: int, n_rejected: int
                 ) -> None:
    print(f'Election: {election.name or "(unnamed)"}')
    print(f'Replayed {n_transactions} transactions, {n_rejected} rejected')
    print(f'{election.total_registered} registered voters')
    print(f'Phase at the end: {election.phase().value}')


def show_results(election: Election) -> None:
    """Show vote totals of all candidates and the winners."""
    results = election.results()
    if not results:
        print('No candidates')
        return
    names = {
        cand_id: election.get_candidate(cand_id).name for cand_id in results
    }
    n_just_chars = max(len(name) for name in names.values())
    for cand_id, n_votes in results.items():
        print(f'{cand_id:>3}', ' ', names[cand_id].ljust(n_just_chars),
              ' ', n_votes)
    print()
    print(f'Total votes cast: {election.total_votes_cast()}')
    winners = election.winners()
    if len(winners) == 1:
        print('Elected', ' ', names[winners[0]])
    else:
        print('Tied', ' ', ', '.join(names[cand_id] for cand_id in winners))


if __name__ == '__main__':
    args = argparser.parse_args()
    if not args.input_file and not args.use_stdin:
        argparser.print_usage()
    else:
        sys.exit(main(**vars(args)))
