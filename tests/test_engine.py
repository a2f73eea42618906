import copy
import logging
from datetime import UTC, datetime, timedelta

from lifehub.engine import (
    STORAGE_KEY_GALLERY,
    STORAGE_KEY_GOALS,
    STORAGE_KEY_LOGS,
    STORAGE_KEY_TEMPLATES,
    STORAGE_KEY_USER,
    LifeHubEngine,
)

T0 = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)  # ISO week 43

BENCH = {
    "exercises": [
        {
            "dbId": "bench",
            "name": "Bench Press",
            "type": "Weight & Reps",
            "sets": [[50, 10]],
            "details": {"target": ["Chest"]},
        }
    ]
}


class FakeStore:
    def __init__(self, data: dict | None = None):
        self.data = data or {}
        self.saves: list[dict] = []
        self.fail = False

    def load(self, key, fallback):
        return copy.deepcopy(self.data.get(key, fallback))

    def save(self, entries):
        if self.fail:
            raise OSError("disk full")
        snapshot = copy.deepcopy(dict(entries))
        self.saves.append(snapshot)
        self.data.update(snapshot)


class FakeReplicator:
    def __init__(self, fail: bool = False):
        self.snapshots: list[dict] = []
        self.fail = fail

    def replicate(self, snapshot):
        if self.fail:
            raise RuntimeError("no network")
        self.snapshots.append(snapshot)


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _engine(store: FakeStore, replicator=None, clock: Clock | None = None) -> LifeHubEngine:
    return LifeHubEngine(store.load, store.save, replicator=replicator, clock=clock or Clock(T0))


def test_fresh_store_defaults():
    store = FakeStore()
    engine = _engine(store)

    assert engine.profile.fitness_level == 1
    assert engine.profile.last_grace_week == 43
    assert engine.goals == {"Weight": 40}
    assert engine.history_logs == []
    assert store.saves == []


def test_legacy_profile_is_normalized_and_grace_reset():
    store = FakeStore(
        {
            STORAGE_KEY_USER: {
                "fitnessPoints": 120,
                "fitnessLevel": 2,
                "graceUsed": 2,
                "lastGraceWeek": 40,
            }
        }
    )
    engine = _engine(store)

    assert engine.profile.fitness_points == 120
    assert engine.profile.prs == {}
    assert engine.profile.muscles == {}
    assert engine.profile.grace_used == 0
    assert engine.profile.last_grace_week == 43
    assert len(store.saves) == 1


def test_check_grace_reset_is_idempotent():
    store = FakeStore({STORAGE_KEY_USER: {"graceUsed": 1, "lastGraceWeek": 43}})
    engine = _engine(store)
    assert not engine.check_grace_reset()
    assert not engine.check_grace_reset()
    assert engine.profile.grace_used == 1
    assert store.saves == []


def test_process_session_persists_everything():
    store = FakeStore({STORAGE_KEY_LOGS: [{"date": "2026-10-01", "data": {"Weight": 60}}]})
    engine = _engine(store)
    report = engine.process_session(BENCH, is_luteal=False, is_complete=True)

    assert report.total_fp == 22
    assert report.earned_prestige == 18
    assert len(store.saves) == 1
    saved = store.saves[0]
    assert set(saved) == {
        STORAGE_KEY_LOGS,
        STORAGE_KEY_GOALS,
        STORAGE_KEY_GALLERY,
        STORAGE_KEY_USER,
    }
    user = saved[STORAGE_KEY_USER]
    assert user["fitnessPoints"] == 22
    assert user["prestigeCurrency"] == 18
    assert user["prs"] == {"bench": 500.0}
    assert user["muscles"] == {"Chest": {"xp": 23, "level": 1}}
    assert user["streak"] == 1
    assert [log["text"] for log in user["systemLogs"]] == [
        "[NEW PR] Bench Press: 500",
        "[WORKOUT COMPLETE] +20 Base FP",
        "[+23 MGP] Chest Growth",
        "[+18 PRESTIGE] Funds Acquired",
    ]
    assert saved[STORAGE_KEY_LOGS] == [{"date": "2026-10-01", "data": {"Weight": 60}}]


def test_profile_survives_reload():
    store = FakeStore()
    _engine(store).process_session(BENCH, is_luteal=False, is_complete=True)

    reloaded = _engine(store, clock=Clock(T0 + timedelta(hours=5)))
    assert reloaded.profile.fitness_points == 22
    assert reloaded.profile.last_workout == T0
    assert reloaded.profile.get_pr("bench") == 500


def test_streak_sequence_and_milestone():
    clock = Clock(T0)
    engine = _engine(FakeStore(), clock=clock)
    streak_fp = []
    for _ in range(5):
        streak_fp.append(engine.process_session(BENCH, False, True).streak_fp)
        clock.advance(hours=10)

    assert streak_fp == [0, 0, 0, 50, 0]
    assert engine.profile.streak == 5

    clock.advance(hours=50)
    engine.process_session(BENCH, False, True)
    assert engine.profile.streak == 1


def test_grace_bridges_a_missed_day():
    clock = Clock(T0)
    engine = _engine(FakeStore(), clock=clock)
    engine.process_session(BENCH, False, True)

    clock.advance(hours=40)
    assert engine.activate_grace()
    clock.advance(hours=40)
    engine.process_session(BENCH, False, True)
    assert engine.profile.streak == 2


def test_activate_grace_saves_until_cap():
    store = FakeStore()
    engine = _engine(store)
    assert engine.activate_grace()
    assert engine.activate_grace()
    assert not engine.activate_grace()
    assert len(store.saves) == 2
    assert store.data[STORAGE_KEY_USER]["graceUsed"] == 2


def test_save_failure_does_not_lose_session(caplog):
    store = FakeStore()
    store.fail = True
    replicator = FakeReplicator()
    engine = _engine(store, replicator=replicator)

    with caplog.at_level(logging.WARNING):
        report = engine.process_session(BENCH, False, True)

    assert report.total_fp == 22
    assert engine.profile.fitness_points == 22
    assert "Local save failed" in caplog.text
    assert replicator.snapshots == []


def test_replicator_receives_snapshot():
    store = FakeStore({STORAGE_KEY_TEMPLATES: [{"name": "Push Day"}]})
    replicator = FakeReplicator()
    engine = _engine(store, replicator=replicator)
    engine.process_session(BENCH, False, True)

    assert len(replicator.snapshots) == 1
    snap = replicator.snapshots[0]
    assert set(snap) == {
        "userProfile",
        "measurements",
        "goals",
        "gallery",
        "templates",
        "lastSync",
    }
    assert snap["userProfile"]["fitnessPoints"] == 22
    assert snap["templates"] == [{"name": "Push Day"}]
    assert snap["lastSync"] == T0.isoformat()


def test_replication_failure_is_reported_not_raised(caplog):
    store = FakeStore()
    engine = _engine(store, replicator=FakeReplicator(fail=True))

    with caplog.at_level(logging.WARNING):
        report = engine.process_session(BENCH, False, True)

    assert report.total_fp == 22
    assert len(store.saves) == 1
    assert "Cloud sync could not be scheduled" in caplog.text


def test_level_status_helpers():
    store = FakeStore(
        {STORAGE_KEY_USER: {"fitnessPoints": 100, "muscles": {"Chest": {"xp": 150, "level": 2}}}}
    )
    engine = _engine(store)

    fitness = engine.fitness_status()
    assert (fitness.level, fitness.pct) == (2, 50)
    chest = engine.muscle_status("Chest")
    assert (chest.level, chest.pct, chest.next_req) == (2, 25, 300)
    assert engine.muscle_status("Calves").level == 1
    assert "Calves" not in engine.profile.muscles


def test_stats_for_date_uses_history():
    store = FakeStore(
        {
            STORAGE_KEY_LOGS: [
                {"date": "2026-10-10", "data": {"Weight": 64}},
                {"date": "2026-09-01", "data": {"Weight": 66}},
            ]
        }
    )
    engine = _engine(store)
    assert engine.stats_for_date("2026-10-01") == {"Weight": "66kg", "BMI": "25.8"}
    assert engine.stats_for_date("2026-10-15") == {"Weight": "64kg", "BMI": "25.0"}
