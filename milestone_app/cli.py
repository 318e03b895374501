"""Command line entry point: maintain the targeted milestones of one repository."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from milestone_app.core.config import GITHUB_DEFAULT_ENDPOINT, GITHUB_TOKEN_FILE
from milestone_app.core.github_client import DryRunGitHubAPI, GitHubAPI, TrackerError
from milestone_app.core.mappers import map_issue, results_to_dataframe
from milestone_app.core.service import MaintainResult, MilestoneService
from milestone_app.core.settings import DEFAULT_SETTINGS_FILE, ConfigError, load_settings

logger = logging.getLogger("milestone_app")

SUMMARY_COLUMNS = ["number", "obj_type", "milestone", "phase", "state", "mutations", "error"]


def _setup_logging(level: str) -> None:
    if logging.getLogger().hasHandlers():
        return
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _read_token(path: Path) -> str:
    try:
        token = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigError(f"could not read token file {path}: {exc}") from exc
    if not token:
        raise ConfigError(f"token file {path} is empty")
    return token


def _build_api(args: argparse.Namespace) -> GitHubAPI:
    token = _read_token(args.token_file)
    if args.confirm:
        return GitHubAPI(token, args.endpoint, bot_name=args.bot_name)
    logger.warning("Using dry-run client - no updates will be made to GitHub (pass --confirm to apply)")
    return DryRunGitHubAPI(token, args.endpoint, bot_name=args.bot_name)


def _print_summary(results: list[MaintainResult]) -> None:
    df = results_to_dataframe(results)
    if df.empty:
        print("no maintained issues or pull requests found")
        return
    cols = [c for c in SUMMARY_COLUMNS if c in df.columns]
    print(df[cols].to_string(index=False))


def _scan(args: argparse.Namespace, service: MilestoneService) -> int:
    results = service.scan(args.org, args.repo)
    _print_summary(results)
    return 1 if any(not r.ok for r in results) else 0


def _maintain_one(args: argparse.Namespace, service: MilestoneService) -> int:
    raw = service.api.get_issue(args.org, args.repo, args.number)
    obj = map_issue(raw, args.org, args.repo)
    result = service.maintain(obj)
    if result is None:
        print(f"{args.org}/{args.repo}#{args.number} is not in a targeted milestone")
        return 0
    _print_summary([result])
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="milestone-maintainer",
        description="Keep issues and pull requests in release milestones compliant with the milestone process.",
    )
    parser.add_argument("--config", type=Path, default=Path(DEFAULT_SETTINGS_FILE), help="milestone settings YAML")
    parser.add_argument("--endpoint", default=GITHUB_DEFAULT_ENDPOINT, help="GitHub API endpoint")
    parser.add_argument("--token-file", type=Path, default=Path(GITHUB_TOKEN_FILE), help="file holding the token")
    parser.add_argument("--bot-name", help="bot login (default: resolved from the token)")
    parser.add_argument("--confirm", action="store_true", help="apply changes (default is a dry run)")
    parser.add_argument("--log-level", default="INFO", help="logging level (default: INFO)")
    parser.add_argument("--org", required=True, help="repository owner")
    parser.add_argument("--repo", required=True, help="repository name")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("scan", help="maintain every open object in the targeted milestones")
    one = sub.add_parser("maintain", help="maintain a single issue or pull request")
    one.add_argument("number", type=int, help="issue or pull request number")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _setup_logging(args.log_level)

    settings = load_settings(args.config)
    service = MilestoneService(_build_api(args), settings)
    if args.command == "scan":
        return _scan(args, service)
    return _maintain_one(args, service)


def run() -> None:
    try:
        raise SystemExit(main())
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(2)
    except TrackerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    run()
