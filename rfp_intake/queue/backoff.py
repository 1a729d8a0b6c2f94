"""Retry delay policy for failed analysis deliveries."""


def backoff_seconds(attempt: int, base: float = 2.0, cap: float = 60.0) -> float:
    """Delay before redelivering a job that has failed ``attempt`` times.

    ``min(cap, base * 2 ** (attempt - 1))``; attempt 1 waits ``base``.
    """
    if attempt < 1:
        return 0.0
    base = max(0.0, float(base))
    cap = max(base, float(cap))
    return min(cap, base * (2 ** (attempt - 1)))
