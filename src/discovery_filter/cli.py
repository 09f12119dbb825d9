"""discovery-filter CLI entry point.

Usage: discovery-filter [--log-level LEVEL] [run | kinds]

The relay runs this as its write-policy plugin: request lines on stdin,
verdict lines on stdout, diagnostics on stderr.
"""
import argparse
import logging
import sys
from typing import BinaryIO

from discovery_filter.domain.policy import DISCOVERY_RELAY_KINDS
from discovery_filter.plugin.evaluator import AdmissionPolicy
from discovery_filter.plugin.loop import PluginLoop

log = logging.getLogger("discovery_filter")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _run_plugin(
    instream: BinaryIO,
    outstream: BinaryIO,
    install_signals: bool = True,
) -> int:
    policy = AdmissionPolicy(DISCOVERY_RELAY_KINDS)
    loop = PluginLoop(instream, outstream, policy)
    log.info(
        "Discovery relay sync plugin started - filtering for kinds %s",
        ", ".join(str(k) for k in policy.allowlist.kinds),
    )
    if install_signals:
        with loop.install_signal_handlers():
            loop.run()
    else:
        loop.run()
    return 0


def _print_kinds(outstream: BinaryIO) -> int:
    for kind in DISCOVERY_RELAY_KINDS.kinds:
        line = f"{kind}\t{DISCOVERY_RELAY_KINDS.describe(kind)}\n"
        outstream.write(line.encode("utf-8"))
    outstream.flush()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discovery-filter",
        description="Relay write-policy plugin admitting only discovery event kinds.",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic verbosity on stderr (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("run", help="Answer verdict requests on stdin/stdout (default).")
    subparsers.add_parser("kinds", help="List the allowed event kinds and exit.")
    return parser


def main(
    argv: list[str] | None = None,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)
    instream = stdin if stdin is not None else sys.stdin.buffer
    outstream = stdout if stdout is not None else sys.stdout.buffer

    if args.command == "kinds":
        return _print_kinds(outstream)
    # signal.signal() only works in the main thread; callers passing streams own shutdown
    return _run_plugin(instream, outstream, install_signals=stdin is None)
