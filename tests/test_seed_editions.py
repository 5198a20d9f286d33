from training_tracker.models import Edition, Task
from training_tracker.scripts.seed_editions import SAMPLE_EDITIONS, seed_editions


def test_seed_creates_sample_editions(db):
    assert seed_editions(db) == len(SAMPLE_EDITIONS)
    assert db.query(Edition).count() == 3
    assert db.query(Task).count() == 3 * 26


def test_seed_is_idempotent(db):
    seed_editions(db)
    assert seed_editions(db) == 0
    assert db.query(Edition).count() == 3
