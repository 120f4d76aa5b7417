from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

from .build import BuildResult, build_site
from .config import DEFAULT_CONFIG, SiteConfig, load_config, parse_bool, parse_int
from .errors import HypertextError
from .fs import LocalFileSystem
from .server import RouteResolver, make_server
from .watch import start_watcher


def config_from_args(args: argparse.Namespace) -> SiteConfig:
    return SiteConfig(
        root=Path.cwd(),
        content=args.content,
        static=args.static,
        styles=args.styles,
        templates=args.templates,
        output=args.output,
        build_workers=args.build_workers,
        host=getattr(args, "host", "localhost"),
        port=getattr(args, "port", 8000),
        watch=getattr(args, "watch", False),
    )


def report_build(config: SiteConfig) -> BuildResult:
    start = time.perf_counter()
    result = build_site(config)
    for page in result.pages:
        print(f"Built {page.as_posix()}")
    print(f"Copied {len(result.assets)} asset file(s).")
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s ({len(result.pages)} page(s)).")
    return result


def init_project(config: SiteConfig) -> None:
    fs = LocalFileSystem()
    for path in (config.content_dir, config.static_dir, config.styles_dir, config.templates_dir):
        fs.mkdir(path)
        print(f"Created {path}")
    print("Initialization done!")


def make_rebuild(config: SiteConfig) -> Callable[[], None]:
    """Build callback for the file watcher. Failures are reported and watching goes on."""

    def rebuild() -> None:
        try:
            report_build(config)
        except HypertextError as exc:
            print(f"Rebuild failed: {exc}", file=sys.stderr)
        except Exception as exc:
            print(f"Rebuild failed: {type(exc).__name__}: {exc}", file=sys.stderr)

    return rebuild


def serve_site(config: SiteConfig) -> None:
    report_build(config)
    resolver = RouteResolver(LocalFileSystem(), config.output_dir)
    server = make_server(resolver, config.host, config.port)
    host, port = server.server_address[:2]
    print(f"Serving files from: {config.output_dir}")
    print(f"Starting server at http://{host}:{port}")

    watcher = None
    if config.watch:
        watcher = start_watcher(config, make_rebuild(config))

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down server...")
    finally:
        server.server_close()
        if watcher is not None:
            observer, handler = watcher
            handler.cancel()
            observer.stop()
            observer.join()


def build_parser(config: dict) -> argparse.ArgumentParser:
    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        return str(cfg_value(key, default))

    def cfg_bool(key: str, default: bool) -> bool:
        return parse_bool(cfg_value(key, default))

    def cfg_int(key: str, default: int) -> int:
        return parse_int(cfg_value(key, default), default)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=DEFAULT_CONFIG, help="Path to project config file (TOML/YAML/JSON).")
    common.add_argument("--content", default=cfg_str("content", "content"), help="Directory containing Markdown sources.")
    common.add_argument("--static", default=cfg_str("static", "static"), help="Directory of static assets to copy.")
    common.add_argument("--styles", default=cfg_str("styles", "styles"), help="Directory of stylesheets to copy.")
    common.add_argument("--templates", default=cfg_str("templates", "templates"), help="Directory containing templates.")
    common.add_argument("--output", default=cfg_str("output", "public"), help="Output directory for the site.")
    common.add_argument(
        "--build-workers",
        default=cfg_int("build_workers", 0),
        type=int,
        help="Number of worker threads for rendering (0 = auto).",
    )

    parser = argparse.ArgumentParser(prog="hx", description="An elegant static site generator.")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init", parents=[common], help="Create a new Hypertext project.")
    subparsers.add_parser(
        "build", parents=[common], help="Delete the output directory if there is one and build the site."
    )
    serve = subparsers.add_parser("serve", parents=[common], help="Build the site and serve it locally.")
    serve.add_argument("--host", default=cfg_str("host", "localhost"), help="Interface to bind the preview server to.")
    serve.add_argument("--port", default=cfg_int("port", 8000), type=int, help="Port for the preview server.")
    serve.add_argument(
        "--watch",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("watch", False),
        help="Rebuild when content, templates, static or styles change.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default=DEFAULT_CONFIG)
    pre_args, _ = pre_parser.parse_known_args(argv)
    try:
        parser = build_parser(load_config(Path(pre_args.config)))
    except HypertextError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    args = parser.parse_args(argv)
    config = config_from_args(args)

    try:
        if args.command == "init":
            init_project(config)
        elif args.command == "build":
            report_build(config)
        else:
            serve_site(config)
    except HypertextError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
