"""Helpers that run the command-line binary and compare two builds of it."""

from __future__ import annotations

import argparse
import os
import subprocess
import sys

LOCAL_BINARY = "./webprobe"
_SUCCESS = "\x1b[32m[\u2713]\x1b[0m"
_FAILED = "\x1b[31m[\u2718]\x1b[0m"


class FunctionalTestError(Exception):
    """A functional test case did not pass."""


def _command_line(prefix: str, extra: list[str] | tuple[str, ...], debug: bool) -> str:
    line = prefix + " ".join(extra)
    return line + (" -debug" if debug else " -silent")


def _result_lines(output: bytes) -> list[str]:
    return [line for line in output.decode("utf-8", "replace").strip().split("\n") if line]


def _run_lines(command: str, debug: bool) -> list[str]:
    completed = subprocess.run(
        ["bash", "-c", command],
        stdout=subprocess.PIPE,
        stderr=None if debug else subprocess.PIPE,
        check=True,
    )
    return _result_lines(completed.stdout)


def run_and_get_results(url: str, debug: bool, *args: str) -> list[str]:
    """Pipe ``url`` into the local binary and return its non-empty output lines."""
    command = _command_line(f'echo "{url}" | {LOCAL_BINARY} ', args, debug)
    return _run_lines(command, debug)


def run_and_get_combined_results(url: str, debug: bool, *args: str) -> str:
    """Pipe ``url`` into the local binary and return stdout and stderr together."""
    command = _command_line(f'echo "{url}" | {LOCAL_BINARY} ', args, debug)
    completed = subprocess.run(
        ["bash", "-c", command], stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=True
    )
    return completed.stdout.decode("utf-8", "replace")


def run_binary_and_get_results(target: str, binary: str, debug: bool, args: list[str]) -> list[str]:
    """Pipe ``target`` into ``binary`` and return its non-empty output lines."""
    command = _command_line(f"echo {target} | {binary} ", args, debug)
    return _run_lines(command, debug)


def run_test_case(testcase: str, main_binary: str, dev_binary: str, debug: bool = False) -> list[str]:
    """Run one 'target <ignored> args...' case on both binaries; return the main output.

    Raises FunctionalTestError when a run fails or the result counts differ.
    """
    parts = testcase.split()
    target, final_args = "", []
    if len(parts) > 1:
        target, final_args = parts[0], parts[2:]
    try:
        main_output = run_binary_and_get_results(target, main_binary, debug, final_args)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise FunctionalTestError(f"could not run main test: {exc}") from exc
    try:
        dev_output = run_binary_and_get_results(target, dev_binary, debug, final_args)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise FunctionalTestError(f"could not run dev test: {exc}") from exc
    if len(main_output) != len(dev_output):
        raise FunctionalTestError(f"{main_output} main is not equal to {dev_output} dev")
    return main_output


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compare the output of two binaries.")
    parser.add_argument("-main", dest="main_binary", default="", help="main branch binary")
    parser.add_argument("-dev", dest="dev_binary", default="", help="dev branch binary")
    parser.add_argument("-testcases", default="", help="test cases file")
    args = parser.parse_args(argv)
    debug = os.environ.get("DEBUG") == "true"

    try:
        with open(args.testcases, encoding="utf-8") as handle:
            cases = [line.strip() for line in handle]
    except OSError as exc:
        print(f"Could not run functional tests: could not open test cases: {exc}", file=sys.stderr)
        return 1

    errored = False
    for case in filter(None, cases):
        try:
            run_test_case(case, args.main_binary, args.dev_binary, debug)
        except FunctionalTestError as exc:
            errored = True
            print(f'{_FAILED} Test "{case}" failed: {exc}', file=sys.stderr)
        else:
            print(f'{_SUCCESS} Test "{case}" passed!')
    return 1 if errored else 0