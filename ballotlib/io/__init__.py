"""Input/output of election data in text file formats.

This subpackage is structured into modules by file format: :mod:`script` for
transaction scripts that can be replayed against an election, :mod:`audit`
for the plain text audit log of recorded events.
"""
