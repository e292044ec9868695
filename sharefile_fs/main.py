# main.py
import argparse
import logging
import shutil
import sys
from typing import Optional

from .adapter import SharefileAdapter
from .config import get_settings
from .exceptions import FilesystemError
from .sharefile import sharefile_client_from_settings


def setup_logging():
    """Configures logging to console and, when LOG_FILE is set, to a file."""
    settings = get_settings()
    log_level_name = settings.LOG_LEVEL.upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_name)

    # Clear any existing handlers to prevent duplicate logs on re-runs or implicit configs
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if settings.LOG_FILE:
        try:
            file_handler = logging.FileHandler(settings.LOG_FILE)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.error(f"Failed to set up file logging to {settings.LOG_FILE}: {e}")

    # Reducing "noise" from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def initialize_adapter(settings) -> Optional[SharefileAdapter]:
    """
    Builds the ShareFile client and adapter from settings.
    Returns None when the client cannot be created.
    """
    try:
        client = sharefile_client_from_settings(settings)
    except Exception as e:
        logging.error(f"Failed to initialize ShareFile client. Error: {e}", exc_info=True)
        return None

    return SharefileAdapter(
        client,
        prefix=settings.SHAREFILE_ROOT_PREFIX,
        return_sharefile_item=settings.SHAREFILE_INCLUDE_RAW_ITEM,
        stream_timeout=settings.SHAREFILE_REQUEST_TIMEOUT,
    )


def _format_entry(metadata) -> str:
    kind = "d" if metadata.is_dir else "-"
    return f"{kind} {metadata.size:>12} {metadata.path}"


def run_command(adapter: SharefileAdapter, args) -> int:
    """Executes one CLI command against the adapter and returns the exit code."""
    if args.command == "ls":
        for entry in adapter.list_contents(args.path, recursive=args.recursive):
            print(_format_entry(entry))
    elif args.command == "stat":
        metadata = adapter.get_metadata(args.path)
        if metadata is None:
            print(f"{args.path}: not found", file=sys.stderr)
            return 1
        print(metadata.model_dump_json(indent=2, exclude={"contents", "stream"}))
    elif args.command == "cat":
        with adapter.read_stream(args.path) as stream:
            for chunk in stream.iter_chunks():
                sys.stdout.buffer.write(chunk)
        sys.stdout.buffer.flush()
    elif args.command == "get":
        with adapter.read_stream(args.path) as stream, open(args.local, "wb") as f:
            shutil.copyfileobj(stream, f)
    elif args.command == "put":
        with open(args.local, "rb") as f:
            adapter.write_stream(args.path, f)
    elif args.command == "mkdir":
        adapter.create_directory(args.path)
    elif args.command == "rm":
        if args.dir:
            adapter.delete_directory(args.path)
        else:
            adapter.delete(args.path)
    elif args.command == "cp":
        adapter.copy(args.source, args.destination)
    elif args.command == "mv":
        adapter.move(args.source, args.destination)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sharefile-fs",
        description="Browse and manage ShareFile folders through the virtual filesystem adapter.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ls_parser = subparsers.add_parser("ls", help="List a directory.")
    ls_parser.add_argument("path", nargs="?", default="")
    ls_parser.add_argument("-r", "--recursive", action="store_true")

    subparsers.add_parser("stat", help="Show metadata of an item.").add_argument("path")
    subparsers.add_parser("cat", help="Write a file to stdout.").add_argument("path")

    get_parser = subparsers.add_parser("get", help="Download a file.")
    get_parser.add_argument("path")
    get_parser.add_argument("local")

    put_parser = subparsers.add_parser("put", help="Upload a local file.")
    put_parser.add_argument("local")
    put_parser.add_argument("path")

    subparsers.add_parser("mkdir", help="Create a directory.").add_argument("path")

    rm_parser = subparsers.add_parser("rm", help="Delete a file or directory.")
    rm_parser.add_argument("path")
    rm_parser.add_argument("--dir", action="store_true", help="Delete a directory.")

    for name, help_text in (("cp", "Copy a file."), ("mv", "Move a file.")):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument("source")
        command_parser.add_argument("destination")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging()

    adapter = initialize_adapter(get_settings())
    if adapter is None:
        logging.critical("Could not establish a connection to ShareFile.")
        return 1

    try:
        return run_command(adapter, args)
    except FilesystemError as e:
        logging.error(f"{args.command} failed: {e}")
        print(str(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
