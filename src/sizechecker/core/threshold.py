"""Threshold evaluation for size checks.

The bound is asymmetric on purpose:

- Used mode treats reaching the limit as a violation (``measured >= limit``).
- Available mode only treats falling below the limit as a violation
  (``measured < limit``); exactly the limit is still acceptable.
"""

from pathlib import Path

from sizechecker.types.models import RunType, Verdict
from sizechecker.utils.formatting import format_size


def is_violation(measured_bytes: int, limit_bytes: int, run_type: RunType) -> bool:
    """Return True when ``measured_bytes`` breaks ``limit_bytes`` for ``run_type``.

    Examples:
        >>> is_violation(100, 100, RunType.USED)
        True
        >>> is_violation(100, 100, RunType.AVAILABLE)
        False
    """
    if run_type is RunType.USED:
        return measured_bytes >= limit_bytes
    return measured_bytes < limit_bytes


def evaluate(measured_bytes: int, limit_bytes: int, run_type: RunType, path: Path) -> Verdict:
    """Compare a probe result against a limit and build the operator message.

    Args:
        measured_bytes: Used or available bytes reported by the probe
        limit_bytes: Parsed limit in bytes
        run_type: Mode the measurement was taken in
        path: Absolute directory path, quoted in the violation message

    Returns:
        Verdict carrying the violation flag and the message to print (and,
        when violated, to deliver to notifiers)
    """
    if measured_bytes < 0 or limit_bytes < 0:
        msg = "byte counts must be non-negative"
        raise ValueError(msg)

    measured = format_size(measured_bytes)
    limit = format_size(limit_bytes)
    violated = is_violation(measured_bytes, limit_bytes, run_type)

    if run_type is RunType.USED:
        if violated:
            message = f"Warning: {measured} used in {path}, which is beyond the limit of {limit}."
        else:
            message = f"Used space is within acceptable limits: {measured} used of {limit}."
    elif violated:
        message = f"Warning: Only {measured} available in {path}, which is below the limit of {limit}."
    else:
        message = f"Sufficient space: {measured} available."

    return Verdict(
        violated=violated,
        message=message,
        measured_bytes=measured_bytes,
        limit_bytes=limit_bytes,
        run_type=run_type,
        path=path,
    )
