"""Candidate Generator - uniformly distributed group ids"""

import random
from typing import Optional

from ..scan_core.constants import MAX_GROUP_ID


class CandidateGenerator:
    """Draws candidate group ids uniformly from [0, max_id).

    The random source is shared by handle; one generator can serve every
    worker of an engine.
    """

    def __init__(self, max_id: int = MAX_GROUP_ID, rng: Optional[random.Random] = None):
        if max_id <= 0:
            raise ValueError("max_id must be positive")
        self.max_id = max_id
        self.rng = rng or random.Random()

    def next(self) -> int:
        return self.rng.randrange(self.max_id)

    def __repr__(self) -> str:
        return f"CandidateGenerator(max_id={self.max_id})"
