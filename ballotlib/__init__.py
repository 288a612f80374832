"""Ballotlib - a deterministic ballot-tallying engine with vote delegation.

A ballotlib election goes through the following:

-   The administrator adds candidates (the ``candidate`` module), registers
    voters (the ``voter`` module) and schedules the voting window.
-   While the window is open, every registered voter either votes for a
    candidate directly or delegates their ballot to another voter. Delegation
    chains are resolved by the ``delegation`` module; delegated weight settles
    on the candidate of the voter at the end of the chain, or waits with that
    voter until they vote.
-   Once voting is closed, the ``tally`` module determines the winners,
    keeping every tied candidate.

All of this is driven by the :class:`Election` object from the ``election``
module, which checks who may do what and when (see the ``phase`` module) and
records every change in a hash-chained event log (the ``events`` module) that
can be verified and exported for audit by the :mod:`io` subpackage.
"""

from ballotlib.election import Election    # noqa: F401
from ballotlib.phase import Phase    # noqa: F401
