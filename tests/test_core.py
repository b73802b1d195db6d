import json
from pathlib import Path

import pytest

from sitepipe.orchestrator.core import (
    Pipeline,
    expand_glob,
    levels,
    stages_to_edges,
    task,
    topo_sort,
)
from sitepipe.orchestrator.logging import get_logger


def _spec(name, result=None, calls=None, exc=None):
    @task(name=name, inputs=[], outputs=[])
    def fn(params):
        if calls is not None:
            calls.append(name)
        if exc is not None:
            raise exc
        return result

    return fn._task_spec


def test_topo_sort_respects_edges_and_declaration_order():
    order = topo_sort(["a", "b", "c", "d"], [("c", "a"), ("a", "d")])
    assert order == ["b", "c", "a", "d"]


def test_topo_sort_rejects_cycles_and_unknown_nodes():
    with pytest.raises(ValueError, match="Cycle"):
        topo_sort(["a", "b"], [("a", "b"), ("b", "a")])
    with pytest.raises(ValueError, match="unknown node"):
        topo_sort(["a"], [("a", "zzz")])


def test_stages_become_levels():
    nodes, edges = stages_to_edges(["clean", ["fonts", "images"], "html"])
    assert nodes == ["clean", "fonts", "images", "html"]
    assert ("clean", "fonts") in edges and ("images", "html") in edges
    assert levels(nodes, edges) == [["clean"], ["fonts", "images"], ["html"]]


def test_stages_reject_duplicates():
    with pytest.raises(ValueError):
        stages_to_edges(["a", ["b", "a"]])


def test_pipeline_returns_highest_status_and_runs_every_step(tmp_path: Path):
    calls = []
    specs = {
        "one": _spec("one", result=1, calls=calls),
        "two": _spec("two", calls=calls),
        "three": _spec("three", result=0, calls=calls),
    }
    pipe = Pipeline.from_stages(specs, ["one", "two", "three"], name="lint")
    code = pipe.run({"project": {"runs_dir": str(tmp_path / "runs")}})
    assert code == 1
    assert calls == ["one", "two", "three"]
    state_files = list((tmp_path / "runs" / "lint").glob("*/state.json"))
    assert len(state_files) == 1
    state = json.loads(state_files[0].read_text())
    assert [s["status"] for s in state["steps"]] == ["failed", "ok", "ok"]
    assert state["exit_code"] == 1


def test_pipeline_parallel_level(tmp_path: Path):
    calls = []
    specs = {n: _spec(n, calls=calls) for n in ("a", "b", "c", "d")}
    pipe = Pipeline.from_stages(specs, ["a", ["b", "c"], "d"], name="par")
    assert pipe.run({"project": {"runs_dir": str(tmp_path)}}, max_workers=2) == 0
    assert calls[0] == "a" and calls[-1] == "d"
    assert sorted(calls[1:3]) == ["b", "c"]


def test_pipeline_exception_aborts(tmp_path: Path):
    calls = []
    specs = {
        "boom": _spec("boom", calls=calls, exc=RuntimeError("bad")),
        "after": _spec("after", calls=calls),
    }
    pipe = Pipeline.from_stages(specs, ["boom", "after"], name="abort")
    with pytest.raises(RuntimeError):
        pipe.run({"project": {"runs_dir": str(tmp_path)}})
    assert calls == ["boom"]
    state = json.loads(next(tmp_path.glob("abort/*/state.json")).read_text())
    assert state["steps"][0]["status"] == "error"


def test_pipeline_step_selection(tmp_path: Path):
    calls = []
    specs = {n: _spec(n, calls=calls) for n in ("a", "b", "c", "d")}
    pipe = Pipeline.from_stages(specs, ["a", "b", "c", "d"], name="sel")
    pipe.run({"project": {"runs_dir": str(tmp_path)}}, from_step="b", until_step="c")
    assert calls == ["b", "c"]
    with pytest.raises(KeyError):
        pipe.run({"project": {"runs_dir": str(tmp_path)}}, from_step="nope")


def test_from_stages_unknown_task():
    with pytest.raises(KeyError):
        Pipeline.from_stages({}, ["missing"], name="x")


def test_task_passes_runtime_params(tmp_path: Path):
    seen = {}

    @task(name="peek", inputs=[], outputs=[])
    def peek(params):
        seen.update(params["runtime"])

    Pipeline({"peek": peek._task_spec}, [], name="rt").run(
        {"project": {"runs_dir": str(tmp_path)}}
    )
    assert seen["pipeline"] == "rt"
    assert seen["run_id"]


def test_expand_glob_double_star_matches_top_level(tmp_path: Path):
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "top.scss").write_text("")
    (tmp_path / "a" / "b" / "deep.scss").write_text("")
    (tmp_path / "a" / "skip.css").write_text("")
    found = expand_glob(f"{tmp_path}/**/*.scss")
    assert found == sorted([tmp_path / "a" / "b" / "deep.scss", tmp_path / "top.scss"], key=str)
    assert expand_glob(str(tmp_path / "top.scss")) == [tmp_path / "top.scss"]
    assert expand_glob(str(tmp_path / "missing" / "*.js")) == []


def test_run_log_collects_step_records(tmp_path: Path):
    log = get_logger("tasks.demo")

    @task(name="talk", inputs=[], outputs=[])
    def talk(params):
        log.info("hello from %s", params["runtime"]["pipeline"])
        return 1

    pipe = Pipeline.from_stages({"talk": talk._task_spec}, ["talk"], name="demo")
    pipe.run({"project": {"runs_dir": str(tmp_path / "runs")}})
    log.info("after the run")
    (run_log,) = (tmp_path / "runs" / "demo").glob("*/pipeline.log")
    text = run_log.read_text()
    assert "sitepipe.tasks.demo | INFO | hello from demo" in text
    assert "Step talk finished with status 1" in text
    assert "after the run" not in text
