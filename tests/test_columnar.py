import threading

from storagegc.core.columnar import clean_columnar_tables, drop_table, list_candidates
from storagegc.core.models import CubeInstance, CubeSegment, Job, JobState, MetadataSnapshot

ME = "kylin_metadata"


def _snapshot(*tables_per_cube, status="READY"):
    cubes = tuple(
        CubeInstance(
            name=f"cube{i}",
            status=status,
            segments=tuple(
                CubeSegment(uuid=f"seg{i}{j}", storage_location_identifier=t)
                for j, t in enumerate(tables)
            ),
        )
        for i, tables in enumerate(tables_per_cube)
    )
    return MetadataSnapshot(jobs=(), cubes=cubes)


def test_segment_tables_are_never_dropped(fakes):
    snapshot = MetadataSnapshot(
        jobs=(Job(id="j1", state=JobState.RUNNING, params={"segmentId": "s1"}),),
        cubes=(
            CubeInstance(
                name="sales",
                status="READY",
                segments=(CubeSegment(uuid="s1", storage_location_identifier="KYLIN_T1"),),
            ),
        ),
    )
    store = fakes.columnar([("KYLIN_T1", ME), ("KYLIN_T2", ME)])

    result = clean_columnar_tables(store, snapshot, deployment_identity=ME)

    assert result.candidates == ["KYLIN_T2"]
    assert result.results is None


def test_disabled_cube_still_protects_its_tables(fakes):
    store = fakes.columnar([("KYLIN_A", ME), ("KYLIN_B", ME)])

    result = clean_columnar_tables(
        store, _snapshot(["KYLIN_A"], status="DISABLED"), deployment_identity=ME
    )

    assert result.candidates == ["KYLIN_B"]


def test_tables_of_other_deployments_are_ignored(fakes):
    store = fakes.columnar(
        [
            ("KYLIN_MINE", "KYLIN_METADATA"),
            ("KYLIN_THEIRS", "other_metadata"),
            ("KYLIN_UNTAGGED", None),
            ("OTHER_TABLE", ME),
        ]
    )

    assert list_candidates(store, ME) == ["KYLIN_MINE"]


def test_report_mode_does_not_touch_the_store(fakes):
    store = fakes.columnar([("KYLIN_X", ME)])

    clean_columnar_tables(store, _snapshot([]), deployment_identity=ME)
    clean_columnar_tables(store, _snapshot([]), deployment_identity=ME)

    assert all(c.startswith("list_tables") for c in store.calls)
    assert "KYLIN_X" in store.tables


def test_drop_disables_enabled_table_first(fakes):
    store = fakes.columnar([("KYLIN_X", ME)], enabled=True)

    assert drop_table(store, "KYLIN_X") is True
    assert store.calls == ["disable:KYLIN_X", "drop:KYLIN_X"]


def test_drop_missing_table_is_a_noop(fakes):
    store = fakes.columnar([])

    assert drop_table(store, "KYLIN_GONE") is False
    assert store.calls == []


def test_delete_continues_after_failure(fakes):
    store = fakes.columnar(
        [("KYLIN_A", ME), ("KYLIN_B", ME), ("KYLIN_C", ME)], fail_on={"KYLIN_B"}
    )

    result = clean_columnar_tables(
        store, _snapshot([]), deployment_identity=ME, delete=True
    )

    by_target = {r.target: r for r in result.results}
    assert by_target["KYLIN_A"].deleted is True
    assert by_target["KYLIN_C"].deleted is True
    assert by_target["KYLIN_B"].deleted is False
    assert "cannot drop" in by_target["KYLIN_B"].error
    assert set(store.tables) == {"KYLIN_B"}


def test_hung_drop_times_out_and_later_tables_are_dropped(fakes):
    release = threading.Event()
    store = fakes.columnar(
        [("KYLIN_HUNG", ME), ("KYLIN_OK", ME)],
        hang={"names": {"KYLIN_HUNG"}, "event": release},
    )

    try:
        result = clean_columnar_tables(
            store,
            _snapshot([]),
            deployment_identity=ME,
            delete=True,
            timeout_seconds=0.2,
        )
    finally:
        release.set()

    by_target = {r.target: r for r in result.results}
    assert by_target["KYLIN_HUNG"].timed_out is True
    assert by_target["KYLIN_HUNG"].deleted is False
    assert by_target["KYLIN_OK"].deleted is True
    assert result.failures == [by_target["KYLIN_HUNG"]]
