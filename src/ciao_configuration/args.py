"""Command-line options every CIP accepts for locating its configuration.

A CIP passes its own argv through :func:`settings_from_args`; options it
does not recognise are left for the CIP's own parser.
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping, Sequence
from typing import Any

from ciao_configuration.models import BootstrapSettings

ENV_ETCD_URL = "CIAO_ETCD_URL"
ENV_CONFIG_PATH = "CIAO_CONFIG_PATH"
ENV_CLASSIFIER = "CIAO_CLASSIFIER"


def add_bootstrap_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument(
        "--etcd-url",
        default=os.environ.get(ENV_ETCD_URL),
        help=f"etcd URL holding CIP config (env: {ENV_ETCD_URL})",
    )
    parser.add_argument(
        "--config-path",
        default=os.environ.get(ENV_CONFIG_PATH),
        help=f"Directory for file-based config, default ~/.ciao (env: {ENV_CONFIG_PATH})",
    )
    parser.add_argument(
        "--classifier",
        default=os.environ.get(ENV_CLASSIFIER),
        help="Optional classifier for running several configs of one CIP version",
    )
    parser.add_argument(
        "--etcd-read-timeout", type=float, default=60.0,
        help="Read timeout in seconds for etcd requests",
    )
    return parser


def settings_from_args(
    argv: Sequence[str] | None,
    cip_name: str,
    version: str,
    defaults: Mapping[str, Any] | None = None,
) -> BootstrapSettings:
    """Build bootstrap settings from a CIP's argv plus its identity and defaults."""
    parser = add_bootstrap_arguments(
        argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    )
    args, _unknown = parser.parse_known_args(list(argv or []))
    return BootstrapSettings(
        cip_name=cip_name,
        version=version,
        classifier=args.classifier,
        etcd_url=args.etcd_url,
        config_path=args.config_path,
        defaults=defaults,
        etcd_read_timeout=args.etcd_read_timeout,
    )
