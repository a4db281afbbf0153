"""
Retry delay helpers shared by database transactions and event publishing.
"""

import random


def calculate_retry_delay_with_jitter(
    attempt: int,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
) -> float:
    """
    Calculate retry delay with exponential backoff and jitter.

    Uses decorrelated jitter so concurrent retries do not wake up together.

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
        max_delay: Upper bound for the exponential part

    Returns:
        Delay in seconds with jitter applied
    """
    exp_delay = min(base_delay * (2 ** attempt), max_delay)
    return random.uniform(base_delay, max(base_delay, exp_delay))
