from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, apply_env_overrides, default_config, load_config
from ..errors import FileConstraintError, ParseError, ResolutionError, StorageError
from ..logging.init import log_summary, setup_logging
from ..logging.issue_log import IssueLogBuffer
from ..models.config_models import InsightsConfig
from ..models.dataset import Dataset
from ..services.analytics import summarize
from ..services.progress import ProgressTracker
from ..services.resolution import ResolutionSession
from ..services.summary import (
    render_analytics_summary,
    render_issue_line,
    render_report,
    render_validation_summary,
)
from ..services.validator import filter_issues, issues_by_column
from ..storage.store import DatasetStore, JsonFileStore

"""CLI entrypoint.

Commands:
- load FILE       parse a CSV, store it, report issues
- issues          list current issues (optionally per column / exported)
- resolve         interactive edit / delete / confirm loop
- report          satisfaction, cost and engagement analytics
- inspect         headers and first rows
- clear           remove the stored dataset

Exit codes follow contracts/summary_output.md.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_ISSUES_REMAIN = 2

RESOLVE_PROMPT = "[e]dit [d]elete [c]onfirm [s]kip [q]uit > "

InputFn = Callable[[str], str]


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values take precedence over the YAML config."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="service-insights",
        description="Validate, clean and analyse service satisfaction CSV data",
    )
    p.add_argument("--config", type=Path, default=None, help=f"Config YAML (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    load = sub.add_parser("load", help="Parse a CSV file and store it as the working dataset")
    load.add_argument("file", type=Path)

    issues = sub.add_parser("issues", help="List validation issues of the stored dataset")
    issues.add_argument("--column", action="append", default=None, help="Only show issues for this column (repeatable)")
    issues.add_argument("--export", action="store_true", help="Write issues to logs/issues-*.log (JSON Lines)")

    sub.add_parser("resolve", help="Interactively edit, delete or confirm flagged values")

    report = sub.add_parser("report", help="Print analytics for the stored dataset")
    report.add_argument("--json", action="store_true", help="Print the full summary as JSON")

    sub.add_parser("inspect", help="Print headers and first rows")
    sub.add_parser("clear", help="Remove the stored dataset")
    return p.parse_args(argv)


def _resolve_config(path: Path | None) -> InsightsConfig:
    if path is not None:
        cfg = load_config(path)
    elif DEFAULT_CONFIG_PATH.exists():
        cfg = load_config(DEFAULT_CONFIG_PATH)
    else:
        cfg = default_config()
    return apply_env_overrides(cfg)


def _emit_summary(line: str) -> None:
    # renderers return the full labeled line; the log formatter adds the label
    log_summary(line.removeprefix("SUMMARY "))


def _validation_exit(session: ResolutionSession) -> int:
    rows = len(session.dataset) if session.dataset is not None else 0
    _emit_summary(render_validation_summary(rows, session.issues, len(session.confirmed)))
    return EXIT_SUCCESS if session.complete else EXIT_ISSUES_REMAIN


def _cmd_load(session: ResolutionSession, args: argparse.Namespace) -> int:
    logger = setup_logging()
    try:
        result = session.load_file(args.file)
    except FileConstraintError as e:
        logger.error(f"file: {e}")
        return EXIT_FATAL
    except ParseError as e:
        logger.error(f"parse: {e}")
        return EXIT_FATAL
    for column, n in issues_by_column(result.issues).items():
        logger.info(f"issues column={column} count={n}")
    return _validation_exit(session)


def _cmd_issues(session: ResolutionSession, args: argparse.Namespace) -> int:
    logger = setup_logging()
    shown = filter_issues(session.issues, args.column)
    for n, issue in enumerate(shown, start=1):
        print(render_issue_line(n, issue))
    if args.export:
        buffer = IssueLogBuffer()
        buffer.add_issues(shown)
        path = buffer.flush()
        logger.info(f"exported issues={len(shown)} file={path}")
    return _validation_exit(session)


def resolve_loop(session: ResolutionSession, input_fn: InputFn = input) -> None:
    """Walk the current issue list, applying one operator action at a time.

    Edits and deletes re-validate before the next prompt, so the issue under
    the cursor is always taken from a fresh list. Rejected actions re-prompt.
    """
    logger = setup_logging()
    pos = 0
    with ProgressTracker(len(session.issues)) as progress:
        while pos < len(session.issues):
            issue = session.issues[pos]
            print(render_issue_line(pos + 1, issue))
            try:
                choice = input_fn(RESOLVE_PROMPT).strip().lower()
                if choice in ("q", "quit"):
                    break
                if choice in ("", "s", "skip"):
                    pos += 1
                    continue
                if choice in ("e", "edit"):
                    session.edit(issue, input_fn(f"new value for {issue.column} > "))
                elif choice in ("d", "delete"):
                    session.delete(issue)
                elif choice in ("c", "confirm"):
                    session.confirm(issue)
                else:
                    logger.warning(f"unknown action: {choice}")
                    continue
            except EOFError:
                break
            except ResolutionError as e:
                logger.warning(f"rejected: {e}")
                continue
            progress.update_remaining(len(session.issues))
            progress.set_postfix(remaining=len(session.issues))
    if session.confirmed:
        logger.info(f"confirmed values={len(session.confirmed)} (kept for this session only)")


def _cmd_resolve(session: ResolutionSession, args: argparse.Namespace, input_fn: InputFn) -> int:
    resolve_loop(session, input_fn)
    return _validation_exit(session)


def _cmd_report(session: ResolutionSession, dataset: Dataset, args: argparse.Namespace) -> int:
    logger = setup_logging()
    if not session.complete:
        logger.warning(f"report over unvalidated data: issues={len(session.issues)}")
    summary = summarize(dataset, session.config)
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    else:
        for line in render_report(summary):
            print(line)
    _emit_summary(render_analytics_summary(summary))
    return EXIT_SUCCESS


def _cmd_inspect(dataset: Dataset) -> int:
    print(f"columns={dataset.headers}")
    print("sample_rows=", dataset.rows[:3])
    return EXIT_SUCCESS


def main(argv: list[str] | None = None, input_fn: InputFn = input) -> int:
    # None only: an explicit [] must not fall back to sys.argv (pytest args)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    store = DatasetStore(JsonFileStore(cfg.storage.directory))
    session = ResolutionSession(cfg, store)

    try:
        if args.command == "clear":
            session.clear()
            return EXIT_SUCCESS
        if args.command == "load":
            return _cmd_load(session, args)

        dataset = session.dataset if session.restore() else None
        if dataset is None:
            logger.error(f"no dataset stored in {cfg.storage.directory}; run 'load FILE' first")
            return EXIT_FATAL
        if args.command == "issues":
            return _cmd_issues(session, args)
        if args.command == "resolve":
            return _cmd_resolve(session, args, input_fn)
        if args.command == "report":
            return _cmd_report(session, dataset, args)
        return _cmd_inspect(dataset)
    except StorageError as e:
        logger.error(f"storage: {e}")
        return EXIT_FATAL
