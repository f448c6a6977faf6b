"""Command line entry point: parse flags, build settings, serve with uvicorn."""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from .core.config import Settings
from .main import __version__, create_app

logger = logging.getLogger("hashdrop.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashdrop",
        description="Upload server that stores each distinct file once, under a name derived from its content.",
    )
    parser.add_argument("-v", "--version", action="version", version=__version__)
    parser.add_argument("--title", help="the title that is shown in the view")
    parser.add_argument("--page-uri", dest="page_uri", help="the page URI that is used in the view")
    parser.add_argument("--file-uri", dest="file_uri", help="the file URI where the user can find the files")
    parser.add_argument("--host", help="interface to bind")
    parser.add_argument("--port", type=int, help="port that the server should listen to")
    parser.add_argument("--upload-dir", dest="store_dir", help="directory that uploaded files are saved to")
    parser.add_argument("--tmp-dir", dest="tmp_dir", help="directory that uploads are staged in")
    parser.add_argument("--index-view", dest="index_view", help="view to show on the root page")
    parser.add_argument("--disallow-chars", dest="disallow_chars", help="characters removed from stored filenames")
    parser.add_argument(
        "--rand-prefix",
        dest="rand_prefix",
        type=int,
        help="length of the random prefix of staged filenames",
    )
    parser.add_argument(
        "--filename-len",
        dest="filename_len",
        type=int,
        help="length of the stored base filename (excluding extension)",
    )
    parser.add_argument("--hash-algorithm", dest="hash_algorithm", help="hashlib algorithm for content names")
    parser.add_argument("--chunk-size", dest="chunk_size", type=int, help="bytes read per streaming step")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Flags win over ``HASHDROP_*`` variables, which win over defaults."""
    overrides = {name: getattr(args, name, None) for name in Settings.model_fields}
    return Settings(**{name: value for name, value in overrides.items() if value is not None})


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = settings_from_args(args)
    logger.info("Serving on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
