"""Command-line interface for Replicate predictions.

WHY: Trying a model version or checking on a job from the terminal should
not require writing a script. The CLI exposes the client's operations as
subcommands and adds ``run``, the create-then-poll loop every caller of
the library ends up writing.

HOW: Uses argparse with one subcommand per operation. The async client is
driven via asyncio.run(). Status messages go to stderr; prediction JSON
and list lines go to stdout so the output can be piped.

RULES:
- Subcommands: create, get, cancel, run, list
- --model-version defaults to REPLICATE_MODEL_VERSION; create and run
  also take --version, which wins over it. The API key comes from
  REPLICATE_API_KEY (see config.load_api_key)
- --input must be a JSON document (usually an object)
- Errors print "Error: ..." to stderr and exit 1; Ctrl-C exits 130
- ``run`` exits 1 when the prediction ends in any status but succeeded
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Callable, List, Optional

from replicate_predictions.api.client import PredictionClient
from replicate_predictions.api.errors import ReplicateError
from replicate_predictions.api.models import Prediction, Status
from replicate_predictions.config import LOG_LEVEL, REPLICATE_MODEL_VERSION

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_S = 2.0


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed immediately."""
    print(msg, file=sys.stderr, flush=True)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def _parse_input(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ValueError("--input is not valid JSON: {}".format(exc)) from exc


async def poll_until_terminal(
    client: PredictionClient,
    prediction_id: str,
    interval: float = DEFAULT_POLL_INTERVAL_S,
    on_status: Optional[Callable[[Prediction], None]] = None,
) -> Prediction:
    """Re-fetch a prediction until it reaches a terminal status.

    WHY: The API only reports progress when asked. The library leaves the
    polling policy to callers; this is the CLI's policy.

    HOW: get_prediction, report, stop on succeeded/failed/canceled,
    otherwise sleep ``interval`` seconds and try again.

    RULES:
    - The first fetch happens immediately, without sleeping
    - Errors from get_prediction propagate; nothing is retried
    """
    while True:
        prediction = await client.get_prediction(prediction_id)
        if on_status:
            on_status(prediction)
        if prediction.status.is_terminal:
            return prediction
        await asyncio.sleep(interval)


async def _run_command(args: argparse.Namespace) -> int:
    """Execute one subcommand and return the process exit code."""
    async with PredictionClient(args.model_version) as client:
        if args.command == "create":
            prediction = await client.create_prediction(
                _parse_input(args.input), webhook_complete=args.webhook
            )
            _print_json(prediction.to_dict())
            return 0

        if args.command == "get":
            prediction = await client.get_prediction(args.prediction_id)
            _print_json(prediction.to_dict())
            return 0

        if args.command == "cancel":
            await client.cancel_prediction(args.prediction_id)
            _status("Cancel requested for {}".format(args.prediction_id))
            return 0

        if args.command == "run":
            created = await client.create_prediction(_parse_input(args.input))
            _status("Created prediction {}".format(created.id))
            prediction = await poll_until_terminal(
                client,
                created.id,
                interval=args.interval,
                on_status=lambda p: _status("{} {}".format(p.id, p.status.value)),
            )
            if prediction.status is not Status.SUCCEEDED:
                _status("Prediction {} ended as {}: {}".format(
                    prediction.id, prediction.status.value, prediction.error
                ))
                return 1
            _print_json(prediction.output)
            return 0

        if args.command == "list":
            count = 0
            async for item in client.list_predictions():
                if args.limit is not None and count >= args.limit:
                    break
                print("{} {} {}".format(item.id, item.status.value, item.version))
                count += 1
            return 0

    raise ValueError("Unknown command: {}".format(args.command))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Kept separate from main() so tests can inspect it without running
    anything.
    """
    parser = argparse.ArgumentParser(
        prog="replicate_predictions",
        description="Create, poll, cancel and list predictions on Replicate.",
    )
    parser.add_argument(
        "--model-version",
        default=REPLICATE_MODEL_VERSION,
        help="Model version ID the client is bound to "
             "(default: $REPLICATE_MODEL_VERSION).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Start a prediction and print it.")
    create.add_argument("--input", required=True, help="Model input as JSON.")
    create.add_argument("--version", default=None, help="Model version for this prediction (overrides --model-version).")
    create.add_argument("--webhook", default=None, help="URL to call when the prediction completes.")

    get = sub.add_parser("get", help="Print the current state of a prediction.")
    get.add_argument("prediction_id")

    cancel = sub.add_parser("cancel", help="Cancel a running prediction.")
    cancel.add_argument("prediction_id")

    run = sub.add_parser("run", help="Start a prediction and wait for its output.")
    run.add_argument("--input", required=True, help="Model input as JSON.")
    run.add_argument("--version", default=None, help="Model version for this prediction (overrides --model-version).")
    run.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL_S,
        help="Seconds between status checks (default: %(default)s).",
    )

    list_ = sub.add_parser("list", help="List predictions visible to the API key.")
    list_.add_argument("--limit", type=int, default=None, help="Stop after this many items.")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.getLevelName(LOG_LEVEL)
    if not isinstance(level, int):
        print(
            "Error: Invalid LOG_LEVEL {!r}. Use DEBUG, INFO, WARNING, ERROR or CRITICAL.".format(LOG_LEVEL),
            file=sys.stderr,
        )
        sys.exit(1)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level,
    )

    # create/run accept --version after the subcommand
    args.model_version = getattr(args, "version", None) or args.model_version
    if not args.model_version:
        print(
            "Error: No model version given. Use --model-version, --version "
            "or set REPLICATE_MODEL_VERSION.",
            file=sys.stderr,
        )
        sys.exit(1)

    try:
        code = asyncio.run(_run_command(args))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (ReplicateError, ValueError) as e:
        # Config errors (missing API key, bad --input) and API failures
        logger.debug("Command %s failed", args.command, exc_info=True)
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
