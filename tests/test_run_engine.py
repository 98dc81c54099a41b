# tests/test_run_engine.py

import json
import logging
from pathlib import Path

import pytest

import src.run_engine as run_engine
from src.content_graph.scripts import validate_output as validate_script

SAMPLE_SNAPSHOT = Path(__file__).resolve().parent.parent / "data" / "sample_snapshot.json"


@pytest.fixture(autouse=True)
def isolated_run(tmp_path: Path, monkeypatch):
    """Run each CLI call from tmp_path and drop the CLI's log handlers afterwards."""
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def run(*args):
    return run_engine.main(["--snapshot", str(SAMPLE_SNAPSHOT), *args])


def test_get_movie_writes_json_to_stdout(capsys):
    exit_code = run("--query", "get", "--kind", "Movie", "--uid", "m_matrix")

    assert exit_code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["__typename"] == "Movie"
    assert data["uid"] == "m_matrix"
    assert data["credits"]["count"] == 2


def test_logs_are_written_under_working_directory(tmp_path: Path):
    assert run("--query", "list", "--kind", "genres") == 0

    log_file = tmp_path / "logs" / "engine.log"
    assert log_file.exists()
    assert "Loaded snapshot" in log_file.read_text(encoding="utf-8")


def test_headers_flow_into_request_context(capsys):
    exit_code = run(
        "--query", "get", "--kind", "LiveStream", "--uid", "ls_news",
        "--customer-types", "premium", "--time-travel", "2020-07-01",
    )

    assert exit_code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["availability"]["objects"][0]["uid"] == "av_2020"


def test_filtered_object_prints_null(capsys):
    exit_code = run("--query", "get", "--kind", "LiveStream", "--uid", "ls_news", "--customer-types", "premium")

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) is None


def test_search_in_portuguese(capsys):
    exit_code = run("--query", "search", "--text", "verdade", "--language", "pt-PT")

    assert exit_code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["total_count"] == 1
    assert data["objects"][0]["title"] == "Matrix"


def test_by_genre_listing(capsys):
    assert run("--query", "by-genre", "--uid", "g_drama", "--kind", "Movie") == 0

    data = json.loads(capsys.readouterr().out)
    assert [m["uid"] for m in data["movies"]["objects"]] == ["m_spider"]


def test_missing_snapshot_exits_nonzero(tmp_path: Path):
    exit_code = run_engine.main(
        ["--snapshot", str(tmp_path / "missing.json"), "--query", "list"]
    )

    assert exit_code != 0


def test_unknown_object_kind_exits_nonzero():
    assert run("--query", "get", "--kind", "Movie", "--uid", "m_podcast") == 1


def test_set_query_and_validation(tmp_path: Path, capsys):
    """
    Full integration:
      - resolve the home page set into a file
      - run validate_output.py against the produced file
      - assert both succeed
    """
    output_path = tmp_path / "output" / "home.json"

    exit_code = run("--query", "set", "--uid", "home-page", "--output", str(output_path))
    assert exit_code == 0
    assert output_path.exists()

    data = json.loads(output_path.read_text(encoding="utf-8"))
    assert data["type"] == "PAGE"
    assert [item["position"] for item in data["content"]["objects"]] == [1, 2]

    with pytest.raises(SystemExit) as excinfo:
        validate_script.main(argv=["--path", str(output_path)])
    assert excinfo.value.code == 0

    captured = capsys.readouterr()
    assert "VALIDATION PASSED" in captured.out


def test_brand_query_validates(tmp_path: Path, capsys):
    output_path = tmp_path / "brand.json"

    assert run("--query", "brand", "--uid", "b_got", "--output", str(output_path)) == 0

    with pytest.raises(SystemExit) as excinfo:
        validate_script.main(argv=["--path", str(output_path)])
    assert excinfo.value.code == 0
