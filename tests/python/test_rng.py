from pytest import approx

from swarming.sim.core.rng import DeterministicRng


def test_same_seed_repeats_sequence():
    first = DeterministicRng(17)
    second = DeterministicRng(17)
    assert [first.next_float() for _ in range(5)] == [second.next_float() for _ in range(5)]


def test_reset_rewinds_to_seed():
    rng = DeterministicRng(3)
    before = [rng.next_range(-1.0, 1.0) for _ in range(4)]
    rng.reset()
    assert [rng.next_range(-1.0, 1.0) for _ in range(4)] == before

    rng.reset(seed=4)
    assert rng.seed == 4
    assert rng.next_range(-1.0, 1.0) == DeterministicRng(4).next_range(-1.0, 1.0)


def test_points_and_headings_stay_in_bounds():
    rng = DeterministicRng(9)
    for _ in range(50):
        point = rng.next_point(800.0, 600.0)
        assert 0.0 <= point.x <= 800.0
        assert 0.0 <= point.y <= 600.0
        jitter = rng.next_jitter(10.0)
        assert abs(jitter.x) <= 10.0
        assert abs(jitter.y) <= 10.0
        assert rng.next_unit_circle().length() == approx(1.0)
