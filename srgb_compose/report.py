"""
Report writers for verification runs.

Two formats:
- Markdown summary for humans (generate_summary)
- JSON for tooling (write_json_report), with each failure's input triple
  kept on one line so diffs between runs stay readable
"""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .constants import __version__
from .verifier import VerificationResult

# Markdown table rows written per check before truncating
MAX_ROWS_PER_CHECK = 50


def _check_counts(result: VerificationResult) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for failure in result.failures:
        counts[failure.check] = counts.get(failure.check, 0) + 1
    return counts


def generate_summary(
    result: VerificationResult,
    summary_path: Union[str, Path],
    start_time: datetime,
    end_time: datetime
) -> str:
    """
    Write a Markdown summary of a verification run.

    Args:
        result: Combined result from run_verification()
        summary_path: Where to write the file
        start_time: When the run started
        end_time: When the run finished

    Returns:
        Path to the written summary
    """
    summary_path = Path(summary_path)
    duration = end_time - start_time

    lines = []
    lines.append("# sRGB Composition Verification")
    lines.append(f"**Date:** {start_time.strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append(f"**Duration:** {duration.total_seconds():.1f} seconds")
    lines.append(f"**Version:** {__version__}")
    lines.append("")

    lines.append("## Results Overview")
    lines.append(f"- **Checks run:** {result.checks_run}")
    lines.append(f"- **Failures:** {result.failure_count}")
    if result.unrecorded_failures:
        lines.append(f"- **Counted but not recorded:** {result.unrecorded_failures}")
    lines.append(f"- **Status:** {'PASS' if result.passed else 'FAIL'}")
    lines.append("")

    if result.failures:
        lines.append("## Failures")
        lines.append("")
        for check, count in _check_counts(result).items():
            lines.append(f"### {check} ({count})")
            lines.append("")
            lines.append("| Foreground | Alpha | Background | Actual | Expected | Note |")
            lines.append("|------------|-------|------------|--------|----------|------|")
            for failure in result.failures_for(check)[:MAX_ROWS_PER_CHECK]:
                expected = "" if failure.expected is None else str(failure.expected)
                lines.append(
                    f"| {failure.foreground} | {failure.alpha} | {failure.background} | "
                    f"{failure.actual} | {expected} | {failure.description} |"
                )
            if count > MAX_ROWS_PER_CHECK:
                lines.append("")
                lines.append(f"_{count - MAX_ROWS_PER_CHECK} more not listed._")
            lines.append("")

    summary_path.parent.mkdir(parents=True, exist_ok=True)
    summary_path.write_text('\n'.join(lines), encoding='utf-8')
    return str(summary_path)


def dumps_compact_arrays(data: Any, indent: int = 2, array_fields: Optional[List[str]] = None) -> str:
    """
    json.dumps with the named numeric arrays collapsed onto one line.

    json.dumps(indent=...) puts every array element on its own line, which
    turns an input triple into five lines. This keeps the indentation for
    everything else and prints `"inputs": [134, 118, 73]` instead.

    Args:
        data: Data structure to serialize
        indent: Indentation width
        array_fields: Field names to compact; None compacts every numeric array

    Returns:
        JSON string
    """
    text = json.dumps(data, indent=indent, ensure_ascii=False)
    numeric_body = r'\[\s*\n\s*([\d\.\-\+eE,\s]+?)\n\s*\]'

    def collapse(match: "re.Match") -> str:
        return '[' + re.sub(r'\s+', ' ', match.group(1).strip()) + ']'

    if array_fields is None:
        return re.sub(numeric_body, collapse, text)

    for name in array_fields:
        text = re.sub(
            rf'("{re.escape(name)}":\s*){numeric_body}',
            lambda m: m.group(1) + '[' + re.sub(r'\s+', ' ', m.group(2).strip()) + ']',
            text
        )
    return text


def build_report(result: VerificationResult) -> Dict[str, Any]:
    """Plain-dict form of a result, ready for JSON."""
    return {
        "version": __version__,
        "passed": result.passed,
        "checks_run": result.checks_run,
        "failure_count": result.failure_count,
        "unrecorded_failures": result.unrecorded_failures,
        "failures_by_check": _check_counts(result),
        "failures": [
            {
                "check": failure.check,
                "inputs": list(failure.inputs),
                "actual": failure.actual,
                "expected": failure.expected,
                "description": failure.description,
            }
            for failure in result.failures
        ],
    }


def write_json_report(result: VerificationResult, path: Union[str, Path]) -> str:
    """
    Write the JSON report for a result.

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_compact_arrays(build_report(result), array_fields=["inputs"]),
                    encoding='utf-8')
    return str(path)
