"""
MODULE: main
RESPONSIBILITY: Command-line entry point (refresh, list, download, query).
ALLOWED: argparse, Config, CorpusCoordinator, logging.
FORBIDDEN: Pipeline logic.
ERRORS: Exits with status 1 on index, lookup or configuration errors.
"""
import argparse
import sys
from typing import List, Optional

from config.settings import Config, default_workers
from core.exceptions import ConfigurationError, EntityNotFoundError, FilesystemError, IndexLoadError
from logger import configure_logging, logger
from services.corpus_coordinator import CorpusCoordinator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chaos-harvester",
        description="Download Chaos program archives and search the extracted subdomains.",
    )
    parser.add_argument("--refresh", action="store_true", help="Refresh the index.json cache")
    parser.add_argument("--dl", metavar="PROGRAM", default="",
                        help="Download subdomains for a specific program (or 'all')")
    parser.add_argument("--q", metavar="DOMAIN", default="",
                        help="Query for a domain across all downloaded data")
    parser.add_argument("--list", action="store_true", help="List all available programs")
    parser.add_argument("-w", "--workers", type=int, default=None,
                        help=f"Number of concurrent workers (default: CHAOS_WORKERS or {default_workers()})")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    config = Config(args.env_file)
    workers = config.pipeline.workers if args.workers is None else args.workers

    configure_logging(config.logging.level, config.logging.log_dir)

    try:
        config.validate()
        if workers < 1:
            raise ConfigurationError(f"Worker count must be positive, got {workers}")
    except ConfigurationError as error:
        logger.error(f"[-] {error}")
        return 1

    coordinator = CorpusCoordinator.from_config(config)

    needs_index = args.refresh or args.list or bool(args.dl)
    try:
        if needs_index:
            coordinator.load_index(refresh=args.refresh)

        if args.list:
            for name in coordinator.list_entities():
                print(name)
        elif args.dl:
            coordinator.run_download(args.dl, workers=workers)
        elif args.q:
            coordinator.run_query(args.q, workers=workers, sink=sys.stdout.buffer)
        elif not args.refresh:
            parser.print_usage()
    except IndexLoadError as error:
        logger.error(f"[-] {error}")
        return 1
    except EntityNotFoundError as error:
        logger.error(f"[-] {error}")
        return 1
    except FilesystemError as error:
        logger.error(f"[-] {error}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
