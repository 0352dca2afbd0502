from storagegc.core.models import CubeInstance, CubeSegment, Job, JobState, MetadataSnapshot
from storagegc.core.paths import clean_job_paths, list_candidates


def _snapshot(jobs=(), segments=()):
    return MetadataSnapshot(
        jobs=tuple(jobs),
        cubes=(CubeInstance(name="sales", segments=tuple(segments)),),
    )


def test_working_job_directories_are_kept(fakes, root_dir):
    fs = fakes.files(["kylin-abc", "kylin-def"])
    snapshot = _snapshot(
        jobs=[
            Job(id="abc", state=JobState.SUCCEED),
            Job(id="def", state=JobState.RUNNING),
        ]
    )

    result = clean_job_paths(fs, snapshot, root=root_dir)

    assert result.candidates == [f"{root_dir}/kylin-abc"]
    assert fs.deleted == []


def test_last_build_job_directory_survives_even_when_job_is_final(fakes, root_dir):
    fs = fakes.files(["kylin-built", "kylin-stale"])
    snapshot = _snapshot(
        jobs=[
            Job(id="built", state=JobState.SUCCEED),
            Job(id="stale", state=JobState.DISCARDED),
        ],
        segments=[CubeSegment(uuid="s1", last_build_job_id="built")],
    )

    result = clean_job_paths(fs, snapshot, root=root_dir)

    assert result.candidates == [f"{root_dir}/kylin-stale"]


def test_segments_without_build_job_protect_nothing(fakes, root_dir):
    fs = fakes.files(["kylin-x"])
    snapshot = _snapshot(segments=[CubeSegment(uuid="s1", last_build_job_id="")])

    assert clean_job_paths(fs, snapshot, root=root_dir).candidates == [
        f"{root_dir}/kylin-x"
    ]


def test_only_job_directories_are_candidates(fakes, root_dir):
    fs = fakes.files(["kylin-1", "resources", "kylin_intermediate_x", "tmp"])

    assert list_candidates(fs, root_dir + "/") == [f"{root_dir}/kylin-1"]


def test_delete_skips_missing_and_survives_failures(fakes, root_dir):
    gone = f"{root_dir}/kylin-gone"
    locked = f"{root_dir}/kylin-locked"
    ok = f"{root_dir}/kylin-ok"
    fs = fakes.files(
        ["kylin-gone", "kylin-locked", "kylin-ok"],
        existing={locked, ok},
        fail_on={locked},
    )

    result = clean_job_paths(fs, _snapshot(), root=root_dir, delete=True)

    by_target = {r.target: r for r in result.results}
    assert by_target[gone].deleted is False
    assert by_target[gone].error is None
    assert "permission denied" in by_target[locked].error
    assert by_target[ok].deleted is True
    assert fs.deleted == [ok]
