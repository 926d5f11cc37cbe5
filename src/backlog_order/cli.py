"""Check that a team backlog ranks every dependency before its dependents."""

from __future__ import annotations

import argparse
from typing import Sequence

from backlog_order.config import ORG_URL_ENV_VAR, TOKEN_ENV_VARS, resolve_config
from backlog_order.errors import ContractViolation
from backlog_order.pipeline import run_backlog_validation


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--org-url",
        help=f"Organization URL (default: ${ORG_URL_ENV_VAR}).",
    )
    parser.add_argument("--project", help="Project name.")
    parser.add_argument("--team", help="Team whose backlog is checked.")
    parser.add_argument(
        "--token",
        help=f"Personal access token (default: ${' or $'.join(TOKEN_ENV_VARS)}).",
    )
    parser.add_argument("--config", help="Optional YAML file with defaults.")
    parser.add_argument("--backlog-level", help="Backlog level id.")
    parser.add_argument("--api-version", help="REST API version.")
    parser.add_argument(
        "--timeout-seconds",
        type=int,
        default=None,
        help="HTTP timeout in seconds.",
    )
    parser.add_argument(
        "--output",
        help="CSV export path (default: generated temporary file).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a machine-readable summary after the report.",
    )
    parser.add_argument(
        "--fail-on-violations",
        action="store_true",
        help="Exit 1 when any item is ordered against its dependencies.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        config = resolve_config(
            org_url=args.org_url,
            project=args.project,
            team=args.team,
            token=args.token,
            backlog_level=args.backlog_level,
            api_version=args.api_version,
            timeout_seconds=args.timeout_seconds,
            config_path=args.config,
        )
    except ContractViolation as exc:
        if exc.reason_code == "missing_config":
            print(f"WARN: missing required parameter(s): {exc.context.key}")
            print(f"WARN: {exc.context.detail}")
        else:
            print(f"FAIL: {exc}")
        return 1

    print(
        f"INFO: checking {config.project}/{config.team} at {config.organization_url} "
        f"(token {config.token.name}={config.token.redacted})"
    )
    try:
        report = run_backlog_validation(
            config,
            output_path=args.output,
            progress=lambda message: print(f"INFO: {message}"),
        )
    except ContractViolation as exc:
        print(f"FAIL: {exc}")
        return 1

    if report.passed:
        print(f"PASS: {len(report.result.all_items)} backlog item(s) in dependency order")
    else:
        print(report.to_text())
    print(f"CSV export: {report.export_path}")
    if args.json:
        print(report.to_json())
    if args.fail_on_violations and not report.passed:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
