"""rampart entry point: http service and one-shot analyses

usage:
    python main.py serve [--host 0.0.0.0] [--port 3001]
    python main.py analyze --type address --input 0x...
    python main.py analyze --type github --input https://github.com/org/repo
    python main.py analyze --type text --input-file Contract.sol
    python main.py config
    python main.py health
"""
import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from config import load_config
from errors import InputValidationError, RampartError
from models.report import InputType, report_to_dict
from utils.health import HealthChecker, HealthStatus
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


def cmd_serve(args, settings) -> int:
    import uvicorn
    from api.server import create_app

    problems = settings.validate()
    for problem in problems:
        logger.warning(problem)

    app = create_app(settings)
    uvicorn.run(
        app,
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
    return 0


def cmd_analyze(args, settings) -> int:
    from api.server import build_dispatcher

    if args.input_file:
        payload = Path(args.input_file).read_text(encoding="utf-8")
    else:
        payload = args.input

    dispatcher = build_dispatcher(settings)
    try:
        report = dispatcher.dispatch({"inputType": args.type, "input": payload})
    except InputValidationError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 2
    except RampartError as e:
        logger.error("Analysis failed: %s", e)
        return 1

    print(json.dumps(report_to_dict(report), indent=2))
    return 0


def cmd_config(args, settings) -> int:
    print(settings.summary())
    problems = settings.validate()
    if problems:
        print("\n" + "=" * 70)
        print("CONFIGURATION PROBLEMS:")
        print("=" * 70)
        for problem in problems:
            print(f"  {problem}")
        print("=" * 70)
        return 1
    return 0


def cmd_health(args, settings) -> int:
    checker = HealthChecker(settings)
    report = checker.report()
    print(json.dumps(report, indent=2))
    return 0 if report["status"] != HealthStatus.UNHEALTHY.value else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rampart - smart contract security analysis orchestrator"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT or 3001)")
    serve.set_defaults(func=cmd_serve)

    analyze = subparsers.add_parser("analyze", help="Run one analysis and print the report as JSON")
    analyze.add_argument(
        "--type", "-t",
        type=str,
        required=True,
        choices=[t.value for t in InputType],
        help="address (deployed contract), github (repository URL) or text (Solidity source)"
    )
    source = analyze.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", "-i", type=str, help="Address, repository URL or source text")
    source.add_argument("--input-file", type=Path, help="Read the input from a file")
    analyze.set_defaults(func=cmd_analyze)

    config_cmd = subparsers.add_parser("config", help="Show configuration and problems")
    config_cmd.set_defaults(func=cmd_config)

    health = subparsers.add_parser("health", help="Check credentials and external tools")
    health.set_defaults(func=cmd_health)
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_config()
    setup_logging(args.log_level or settings.LOG_LEVEL)
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
