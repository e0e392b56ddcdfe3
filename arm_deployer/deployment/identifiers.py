"""
Random identifier generation for resource and deployment names.

Identifiers are a fixed prefix followed by a random number in
``[0, 10000)``. Uniqueness is only guaranteed against identifiers issued
in the same run; collisions with resources that already exist in the
subscription are possible and are not checked.
"""

import random
from typing import Optional, Set

SUFFIX_SPACE = 10000


def generate_identifier(prefix: str, issued: Optional[Set[str]] = None,
                        rng: Optional[random.Random] = None) -> str:
    """
    Generate ``prefix`` plus a random numeric suffix not present in ``issued``.

    The returned identifier is added to ``issued``.

    Args:
        prefix: Fixed identifier prefix
        issued: Identifiers already handed out in this run
        rng: Random source (defaults to the module-level generator)

    Returns:
        New identifier

    Raises:
        ValueError: If every suffix for ``prefix`` has already been issued

    Example:
        >>> issued = set()
        >>> generate_identifier("testrg", issued)
        'testrg4811'
    """
    if issued is None:
        issued = set()
    rng = rng or random

    taken = sum(
        1 for name in issued
        if name.startswith(prefix) and name[len(prefix):].isascii()
        and name[len(prefix):].isdigit()
        and int(name[len(prefix):]) < SUFFIX_SPACE
    )
    if taken >= SUFFIX_SPACE:
        raise ValueError(f"All {SUFFIX_SPACE} identifiers for prefix '{prefix}' are already issued")

    while True:
        candidate = f"{prefix}{rng.randrange(SUFFIX_SPACE)}"
        if candidate not in issued:
            break

    issued.add(candidate)
    return candidate


class IdentifierGenerator:
    """Hands out identifiers that are unique within one run."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.issued: Set[str] = set()
        self._rng = rng

    def generate(self, prefix: str) -> str:
        return generate_identifier(prefix, self.issued, self._rng)

    def reserve(self, identifier: str) -> None:
        """Mark an externally chosen identifier as issued."""
        self.issued.add(identifier)
