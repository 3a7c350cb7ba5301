from __future__ import annotations

import argparse
import io
import sys
import unittest
from datetime import datetime
from pathlib import Path

LOG_DIR = Path("tests") / "testlogs"


def _timestamp(now: datetime | None = None) -> str:
    ts = now or datetime.now()
    return ts.strftime("%Y%m%d_%H%M%S")


def _failure_log_path(log_dir: Path, now: datetime | None = None) -> Path:
    return log_dir / f"test_failures_{_timestamp(now)}.txt"


def _build_failure_report(result: unittest.result.TestResult, test_output: str) -> str:
    lines = [
        f"Timestamp: {datetime.now().isoformat(timespec='seconds')}",
        (
            "Summary: "
            f"ran={result.testsRun}, failures={len(result.failures)}, "
            f"errors={len(result.errors)}, skipped={len(result.skipped)}"
        ),
        "Fix hint: inspect stack traces below, fix failing tests, then rerun this script.",
        "",
        test_output.rstrip(),
        "",
    ]
    return "\n".join(lines)


def _write_failure_report(log_dir: Path, content: str, now: datetime | None = None) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    path = _failure_log_path(log_dir, now)
    path.write_text(content, encoding="utf-8")
    return path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the ER editor test suite.")
    parser.add_argument("--pattern", default="test_*.py", help="unittest discovery pattern")
    args = parser.parse_args(argv)

    suite = unittest.TestLoader().discover(start_dir="tests", pattern=args.pattern)
    output = io.StringIO()
    result = unittest.TextTestRunner(stream=output, verbosity=2).run(suite)

    test_output = output.getvalue()
    sys.stdout.write(test_output)
    if result.wasSuccessful():
        print("All tests passed. No failure log written.")
        return 0

    log_path = _write_failure_report(LOG_DIR, _build_failure_report(result, test_output))
    print(f"Test failures detected. Log written to: {log_path}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
