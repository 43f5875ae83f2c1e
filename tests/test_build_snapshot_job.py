import json
from datetime import datetime, timezone

import pytest

from nightlife_catalog.core import config
from nightlife_catalog.core.config import Settings
from nightlife_catalog.core.query_plan import QueryPlan
from nightlife_catalog.core.snapshot import SnapshotWriteError
from nightlife_catalog.jobs import build_snapshot
from nightlife_catalog.models import Category, Coordinates, Failure, GridAnchor, PhraseQuery, RawResult

PHRASES = [
    PhraseQuery("bar Kraków", Category.BAR),
    PhraseQuery("pub Kraków", Category.PUB),
    PhraseQuery("klub nocny Kraków", Category.NIGHT_CLUB),
]
ANCHORS = [GridAnchor(50.0647, 19.9450, 15), GridAnchor(50.0705, 19.9400, 15)]


def settings_for(tmp_path, **overrides):
    values = dict(
        serpapi_key="test-key",
        snapshot_path=str(tmp_path / "public" / "maps-bars.json"),
        search_delay_seconds=0.3,
        details_delay_seconds=0.35,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def searches():
    return {
        "bar Kraków": [
            RawResult(name="Alchemia", coordinates=Coordinates(50.0519, 19.9463), place_id="pid-alchemia"),
            RawResult(name="Bar Kazimierz", coordinates=Coordinates(50.0513, 19.9445), rating=4.5,
                      operating_hours={"monday": "6 PM–2 AM"}),
        ],
        "pub Kraków": Failure(reason="500 Server Error"),
        "klub nocny Kraków": [
            RawResult(name="alchemia", rating=4.6, place_id="pid-other"),
            RawResult(name="Prozak 2.0", coordinates=Coordinates(50.0600, 19.9380), place_id="pid-prozak"),
        ],
    }


def test_job_runs_full_pipeline(tmp_path, searches, fake_client_factory):
    client = fake_client_factory(
        searches=searches,
        details={"pid-prozak": RawResult(rating=4.1, operating_hours={"saturday": "10 PM–6 AM"})},
    )
    slept = []
    job = build_snapshot.build_job(
        settings_for(tmp_path), client=client, plan=QueryPlan(PHRASES, ANCHORS), sleep=slept.append
    )
    job.clock = lambda: datetime(2024, 11, 8, 22, 0, tzinfo=timezone.utc)

    summary = job.run()

    assert summary.state is build_snapshot.RunState.DONE
    assert summary.tasks == 6
    assert summary.failed_searches == 2
    assert summary.unique_places == 3
    # pid-alchemia has no details reply, pid-prozak does; both are issued.
    assert summary.details_calls == 2
    assert client.details_calls == ["pid-alchemia", "pid-prozak"]
    assert [query for query, _ in client.search_calls] == [p.text for p in PHRASES] * 2
    assert [ll for _, ll in client.search_calls][:3] == ["@50.0647,19.9450,15z"] * 3
    assert slept == [0.3] * 6 + [0.35] * 2

    document = json.loads((tmp_path / "public" / "maps-bars.json").read_text(encoding="utf-8"))
    alchemia, kazimierz, prozak = document["places"]
    assert alchemia["category"] == "bar"
    assert alchemia["rating"] == 4.6
    assert alchemia["place_id"] == "pid-alchemia"
    assert "operating_hours" not in alchemia
    assert kazimierz["rating"] == 4.5
    assert prozak["category"] == "klub_nocny"
    assert prozak["operating_hours"] == {"saturday": "10 PM–6 AM"}
    assert document["last_updated"] == "2024-11-08"
    assert document["meta"]["queries"] == [p.text for p in PHRASES]
    assert len(document["meta"]["grid"]) == 2


def test_failed_search_does_not_stop_sweep(tmp_path, fake_client_factory, caplog):
    client = fake_client_factory(
        searches={
            "bar Kraków": Failure(reason="500 Server Error"),
            "pub Kraków": [RawResult(name="Irish Pub Kraków", coordinates=Coordinates(50.06, 19.93))],
        }
    )
    job = build_snapshot.build_job(
        settings_for(tmp_path), client=client, plan=QueryPlan(PHRASES[:2], ANCHORS[:1]), sleep=lambda _: None
    )

    with caplog.at_level("WARNING"):
        summary = job.run()

    assert len(client.search_calls) == 2
    assert summary.failed_searches == 1
    assert summary.unique_places == 1
    assert job.catalog.entries()[0].category is Category.PUB
    assert "500 Server Error" in " ".join(caplog.messages)


def test_details_budget_bounds_calls(tmp_path, fake_client_factory):
    records = [
        RawResult(name=f"Venue {i}", coordinates=Coordinates(50.0 + i, 19.0), place_id=f"pid-{i}")
        for i in range(5)
    ]
    details = {f"pid-{i}": RawResult(rating=4.0, operating_hours={"monday": "open"}) for i in range(5)}
    client = fake_client_factory(searches={"bar Kraków": records}, details=details)
    job = build_snapshot.build_job(
        settings_for(tmp_path, details_budget=2),
        client=client,
        plan=QueryPlan(PHRASES[:1], ANCHORS[:1]),
        sleep=lambda _: None,
    )

    summary = job.run()

    assert summary.details_calls == 2
    entries = job.catalog.entries()
    assert [e.rating for e in entries] == [4.0, 4.0, None, None, None]
    assert [e.operating_hours is None for e in entries] == [False, False, True, True, True]


def test_write_failure_marks_job_failed(tmp_path, fake_client_factory):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    job = build_snapshot.build_job(
        settings_for(tmp_path, snapshot_path=str(blocker / "maps-bars.json")),
        client=fake_client_factory(),
        plan=QueryPlan(PHRASES[:1], ANCHORS[:1]),
        sleep=lambda _: None,
    )

    with pytest.raises(SnapshotWriteError):
        job.run()

    assert job.state is build_snapshot.RunState.FAILED


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    monkeypatch.delenv("SERPAPI_KEY", raising=False)
    config.get_settings.cache_clear()
    yield monkeypatch
    config.get_settings.cache_clear()


def test_main_missing_key_exits_before_network(clean_env):
    def explode(*args, **kwargs):
        raise AssertionError("no client should be built without a key")

    clean_env.setattr(build_snapshot, "SerpApiMapsClient", explode)

    assert build_snapshot.main() == 1


def test_main_success_and_write_failure(clean_env, tmp_path, fake_client_factory):
    clean_env.setenv("SERPAPI_KEY", "abc")
    clean_env.setenv("SNAPSHOT_PATH", str(tmp_path / "maps-bars.json"))
    clean_env.setenv("SEARCH_DELAY_SECONDS", "0")
    clean_env.setenv("DETAILS_DELAY_SECONDS", "0")
    clean_env.setattr(build_snapshot, "SerpApiMapsClient", lambda *a, **kw: fake_client_factory())
    clean_env.setattr(build_snapshot, "QueryPlan", lambda: QueryPlan(PHRASES[:1], ANCHORS[:1]))

    assert build_snapshot.main() == 0
    assert (tmp_path / "maps-bars.json").exists()

    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    clean_env.setenv("SNAPSHOT_PATH", str(blocker / "maps-bars.json"))
    config.get_settings.cache_clear()

    assert build_snapshot.main() == 1
