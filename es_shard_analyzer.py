import sys
import getpass
import logging
import argparse

from es_index_parser import parse_indices
from es_index_source import read_file, fetch_from_server, build_api_url, yesterday
from es_shard_report import DEFAULT_LIMIT, print_reports, export_records

logger = logging.getLogger(__name__)

MODES = ("file", "api")


def non_negative_int(value):
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {value}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        description="Report the largest, most sharded and least balanced Elasticsearch indexes"
    )
    parser.add_argument("--mode", help="Input mode: file or api (prompted if omitted)")
    parser.add_argument("--file", help="Path to a saved _cat/indices JSON response")
    parser.add_argument("--endpoint", help="Cluster endpoint as host[:port], without scheme")
    parser.add_argument("--username", help="Basic auth username for api mode")
    parser.add_argument("--password", help="Basic auth password (prompted if a username is given)")
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification in api mode",
    )
    parser.add_argument("--top", type=non_negative_int, default=DEFAULT_LIMIT, help="Number of indexes per report")
    parser.add_argument("--json-output", help="Also write all records to this JSON file")
    parser.add_argument("--csv-output", help="Also write all records to this CSV file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostics on stderr",
    )
    return parser


def acquire(args, prompt):
    """Fetch the raw payload for the selected mode. Returns a SourceResult."""
    if args.mode == "file":
        path = args.file or prompt("Enter filename (e.g., example-in.json): ")
        return read_file(path.strip())

    endpoint = args.endpoint or prompt("Enter endpoint: ")
    password = args.password
    if args.username and password is None:
        password = getpass.getpass("Enter password: ")

    url = build_api_url(endpoint.strip(), yesterday())
    return fetch_from_server(
        url,
        username=args.username,
        password=password,
        verify_certs=not args.insecure,
    )


def main(argv=None, prompt=input):
    args = build_parser().parse_args(argv)

    # Initialize logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    mode = args.mode if args.mode is not None else prompt("Enter mode (file/api):\n")
    args.mode = mode.strip().lower()
    if args.mode not in MODES:
        print("Invalid input mode.")
        return 0

    source = acquire(args, prompt)
    if not source.ok:
        logger.error(f"Error reading data: {source.error}", exc_info=source.exception)
        return 1

    parsed = parse_indices(source.text)
    if not parsed.ok:
        logger.error(f"Error reading data: {parsed.error}", exc_info=parsed.exception)
        return 1

    print_reports(parsed.records, limit=args.top)

    if args.json_output or args.csv_output:
        export_records(parsed.records, json_path=args.json_output, csv_path=args.csv_output)

    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
