import subprocess

import pytest

from webprobe.functional import (
    FunctionalTestError,
    main,
    run_and_get_combined_results,
    run_and_get_results,
    run_binary_and_get_results,
    run_test_case,
)


def _make_binary(path, extra_lines=0, stderr_text="", exit_code=0):
    script = '#!/bin/sh\nread line\necho "$line"\necho "args: $*"\n'
    script += "echo extra\n" * extra_lines
    if stderr_text:
        script += f'echo "{stderr_text}" >&2\n'
    script += f"exit {exit_code}\n"
    path.write_text(script)
    path.chmod(0o755)
    return str(path)


def test_binary_results_silent(tmp_path):
    binary = _make_binary(tmp_path / "tool")
    lines = run_binary_and_get_results("example.test", binary, False, ["-a", "-b"])
    assert lines == ["example.test", "args: -a -b -silent"]


def test_binary_results_debug(tmp_path):
    binary = _make_binary(tmp_path / "tool")
    lines = run_binary_and_get_results("example.test", binary, True, ["-a"])
    assert lines == ["example.test", "args: -a -debug"]


def test_binary_failure_raises(tmp_path):
    binary = _make_binary(tmp_path / "tool", exit_code=1)
    with pytest.raises(subprocess.CalledProcessError):
        run_binary_and_get_results("example.test", binary, False, [])


def test_local_binary_results(tmp_path, monkeypatch):
    _make_binary(tmp_path / "webprobe")
    monkeypatch.chdir(tmp_path)
    lines = run_and_get_results("http://example.test", False, "-x")
    assert lines == ["http://example.test", "args: -x -silent"]


def test_local_binary_combined_results(tmp_path, monkeypatch):
    _make_binary(tmp_path / "webprobe", stderr_text="warning line")
    monkeypatch.chdir(tmp_path)
    output = run_and_get_combined_results("http://example.test", False, "-x")
    assert "args: -x -silent" in output
    assert "warning line" in output


def test_run_test_case_equal_outputs(tmp_path):
    main_bin = _make_binary(tmp_path / "main")
    dev_bin = _make_binary(tmp_path / "dev")
    output = run_test_case("example.test tool -status-code", main_bin, dev_bin)
    assert output == ["example.test", "args: -status-code -silent"]


def test_run_test_case_different_outputs(tmp_path):
    main_bin = _make_binary(tmp_path / "main")
    dev_bin = _make_binary(tmp_path / "dev", extra_lines=1)
    with pytest.raises(FunctionalTestError, match="main is not equal to"):
        run_test_case("example.test tool -status-code", main_bin, dev_bin)


def test_main_passes(tmp_path, capsys):
    main_bin = _make_binary(tmp_path / "main")
    dev_bin = _make_binary(tmp_path / "dev")
    cases = tmp_path / "cases.txt"
    cases.write_text("example.test tool -title\n\n")
    assert main(["-main", main_bin, "-dev", dev_bin, "-testcases", str(cases)]) == 0
    assert 'Test "example.test tool -title" passed!' in capsys.readouterr().out


def test_main_reports_failure(tmp_path, capsys):
    main_bin = _make_binary(tmp_path / "main")
    dev_bin = _make_binary(tmp_path / "dev", extra_lines=2)
    cases = tmp_path / "cases.txt"
    cases.write_text("example.test tool -title\n")
    assert main(["-main", main_bin, "-dev", dev_bin, "-testcases", str(cases)]) == 1
    assert "failed" in capsys.readouterr().err


def test_main_missing_testcases(tmp_path, capsys):
    assert main(["-testcases", str(tmp_path / "absent.txt")]) == 1
    assert "could not open test cases" in capsys.readouterr().err