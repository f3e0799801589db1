"""Tests for the Alea PRNG."""

from py_terrain.core.alea_prng import AleaPRNG


class TestAleaPRNG:
    """Test seeded random draws."""

    def test_same_seed_same_sequence(self):
        a = AleaPRNG("seed")
        b = AleaPRNG("seed")
        assert [a.random() for _ in range(20)] == [b.random() for _ in range(20)]

    def test_different_seeds_differ(self):
        a = AleaPRNG("seed1")
        b = AleaPRNG("seed2")
        assert [a.random() for _ in range(5)] != [b.random() for _ in range(5)]

    def test_values_in_unit_interval(self):
        prng = AleaPRNG(42)
        values = [prng.random() for _ in range(1000)]
        assert all(0 <= v < 1 for v in values)

    def test_rand_inclusive_bounds(self):
        prng = AleaPRNG("bounds")
        values = {prng.rand(3, 5) for _ in range(500)}
        assert values == {3, 4, 5}

    def test_rand_single_argument(self):
        prng = AleaPRNG("single")
        values = [prng.rand(2) for _ in range(200)]
        assert min(values) >= 0
        assert max(values) <= 2

    def test_certain_chance_consumes_no_draw(self):
        prng = AleaPRNG("chance")
        assert prng.chance(1) is True
        assert prng.chance(0) is False
        assert prng.call_count == 0

        prng.chance(0.5)
        assert prng.call_count == 1
