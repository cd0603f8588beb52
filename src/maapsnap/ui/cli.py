from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from maapsnap.app import build_exploration, build_snapshot, execute, snapshot_changes
from maapsnap.config import configure_logging
from maapsnap.domain.model import ChangeType

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build and execute MAAP snapshots")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output, including ignored change keys",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    snapshot = subparsers.add_parser("snapshot", help="Build a snapshot for a teammate")
    snapshot.add_argument(
        "--teammate-id",
        type=int,
        required=True,
        help="Teammate the snapshot describes",
    )
    snapshot.add_argument(
        "--organization-id",
        type=int,
        required=True,
        help="Organization whose catalog scopes the snapshot",
    )
    snapshot.add_argument(
        "--changes",
        type=Path,
        help="JSON file with proposed check-in changes (defaults to none)",
    )
    snapshot.add_argument(
        "--created-by",
        type=int,
        help="Teammate recorded as creator (defaults to the automation actor)",
    )
    snapshot.add_argument(
        "--reason",
        type=str,
        help="Reason stored with the snapshot (defaults to config)",
    )
    snapshot.add_argument(
        "--change-type",
        type=ChangeType,
        choices=list(ChangeType),
        default=ChangeType.BULK_CHECK_IN_FINALIZATION,
        help="Change type recorded on the snapshot",
    )

    exploration = subparsers.add_parser(
        "exploration",
        help="Store an empty exploration snapshot",
    )
    exploration.add_argument("--organization-id", type=int, required=True)
    exploration.add_argument("--created-by", type=int)
    exploration.add_argument("--reason", type=str)

    changes = subparsers.add_parser("changes", help="Compare a snapshot with current state")
    changes.add_argument("--snapshot-id", type=int, required=True)

    execute_parser = subparsers.add_parser("execute", help="Apply a pending snapshot")
    execute_parser.add_argument("--snapshot-id", type=int, required=True)
    execute_parser.add_argument(
        "--executed-by",
        type=int,
        help="Teammate recorded for completions the snapshot left without an actor",
    )

    return parser.parse_args(list(argv))


def _load_changes(path: Path | None) -> Mapping[str, object]:
    if path is None:
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read changes from {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Changes file {path} must contain a JSON object")
    return payload


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(verbose=parsed_args.verbose)
        raw_changes = (
            _load_changes(parsed_args.changes) if parsed_args.command == "snapshot" else {}
        )
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "snapshot":
            result = build_snapshot(
                teammate_id=parsed_args.teammate_id,
                organization_id=parsed_args.organization_id,
                raw_changes=raw_changes,
                created_by_id=parsed_args.created_by,
                reason=parsed_args.reason,
                change_type=parsed_args.change_type,
                request_info={"source": "cli"},
            )
            log.info(
                "Created snapshot %s: applied=%s, dropped=%s",
                result.snapshot.id,
                result.applied,
                result.dropped,
            )
        elif parsed_args.command == "exploration":
            snapshot = build_exploration(
                organization_id=parsed_args.organization_id,
                created_by_id=parsed_args.created_by,
                reason=parsed_args.reason,
            )
            log.info("Created exploration snapshot %s", snapshot.id)
        elif parsed_args.command == "changes":
            report = snapshot_changes(parsed_args.snapshot_id)
            for kind, count in report.counts().items():
                log.info("%s: %d changed", kind, count)
            for dimension in report.dimensions:
                for change in dimension.changes:
                    log.info(
                        "%s %s %s: %r -> %r",
                        dimension.kind,
                        dimension.dimension_id,
                        change.field,
                        change.current,
                        change.proposed,
                    )
        elif parsed_args.command == "execute":
            execute(parsed_args.snapshot_id, executed_by_id=parsed_args.executed_by)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ValueError:
        log.exception("Invalid request")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
