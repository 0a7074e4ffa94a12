"""Command-line entry point: run a file, or start the REPL when no file is given."""
import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from reef import __version__
from reef.config.logging_config import get_logger, level_for_debug, setup_logging
from reef.driver.session import Session, run_file
from reef.repl.repl import Repl
from reef.system.models import InterpreterConfig

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reef", description="Run Reef programs or start an interactive session.")
    parser.add_argument("path", nargs="?", help="Source file to run. Starts the REPL when omitted.")
    parser.add_argument("-d", "--debug", type=int, default=0, metavar="N",
                        help="Debug level: 0 off, 1 tokens/AST/statements, 2 also calls and error traces")
    parser.add_argument("--max-depth", type=int, default=200, metavar="N",
                        help="Maximum call depth before a stack overflow is reported (1 to 1000)")
    parser.add_argument("--log-file", help="Write diagnostics to this file instead of stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = InterpreterConfig(
            debug_level=args.debug,
            max_call_depth=args.max_depth,
            log_file=args.log_file,
        )
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        parser.error(f"invalid value for {fields}")

    setup_logging(level_for_debug(config.debug_level), config.log_file)
    logger.info(f"Starting reef {__version__} with {config.model_dump()}")

    if args.path:
        return run_file(args.path, config)

    try:
        Repl(Session(config)).start()
    except KeyboardInterrupt:
        print("\nExiting...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
