"""Seeding of pseudo-random generators from the operating system."""

from __future__ import annotations

import os
import random

_SEED_BYTES = 4 * 1024


def get_random_engine() -> random.Random:
    """Return a generator seeded with plenty of entropy from the OS."""
    return random.Random(int.from_bytes(os.urandom(_SEED_BYTES), "big"))