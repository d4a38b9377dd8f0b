"""sizechecker - check a directory's disk usage against a limit.

Measures either the bytes used by files under a directory or the bytes
available on its filesystem, compares the result with an operator-supplied
limit, and sends rate-limited notifications to a Discord webhook and/or
Pushover when the limit is violated.
"""

__version__ = "0.1.0"
