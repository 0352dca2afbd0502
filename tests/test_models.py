import pytest

from storagegc.core.models import CubeInstance, Job, JobState, MetadataSnapshot


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("RUNNING", JobState.RUNNING),
        ("running ", JobState.RUNNING),
        ("FINISHED", JobState.SUCCEED),
        ("SUCCEEDED", JobState.SUCCEED),
        ("NEW", JobState.READY),
        ("DISCARDED", JobState.DISCARDED),
        ("EXPLODED", JobState.UNKNOWN),
        (None, JobState.UNKNOWN),
    ],
)
def test_job_state_parse(raw, expected):
    assert JobState.parse(raw) is expected


def test_only_succeed_and_discarded_are_final():
    final = {s for s in JobState if s.is_final}

    assert final == {JobState.SUCCEED, JobState.DISCARDED}
    assert JobState.UNKNOWN.is_final is False
    assert JobState.ERROR.is_final is False


def test_segment_id_is_none_for_non_build_jobs():
    assert Job(id="j1", state=JobState.RUNNING).segment_id is None
    assert Job(id="j2", state=JobState.RUNNING, params={"segmentId": ""}).segment_id is None
    assert Job(id="j3", state=JobState.RUNNING, params={"segmentId": "s1"}).segment_id == "s1"


def test_snapshot_indexes_segments_and_working_jobs():
    snapshot = MetadataSnapshot(
        jobs=(
            Job(id="old", state=JobState.SUCCEED, params={"segmentId": "s1"}),
            Job(id="new", state=JobState.RUNNING, params={"segmentId": "s1"}),
            Job(id="cleanup", state=JobState.PENDING),
        ),
        cubes=(CubeInstance(name="c"),),
    )

    assert snapshot.segment_to_job() == {"s1": "new"}
    assert [j.id for j in snapshot.working_jobs()] == ["new", "cleanup"]
