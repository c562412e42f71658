from tcpnet.rng import get_random_engine


def test_engine_produces_values_in_range():
    rng = get_random_engine()
    values = [rng.getrandbits(32) for _ in range(100)]
    assert all(0 <= v < 2**32 for v in values)
    assert len(set(values)) > 1


def test_engines_are_independently_seeded():
    first = get_random_engine()
    second = get_random_engine()
    seq_a = [first.getrandbits(64) for _ in range(4)]
    seq_b = [second.getrandbits(64) for _ in range(4)]
    assert len(set(seq_a) | set(seq_b)) == 8


def test_engine_shuffle_is_a_permutation():
    rng = get_random_engine()
    items = list(range(50))
    shuffled = items[:]
    rng.shuffle(shuffled)
    assert sorted(shuffled) == items