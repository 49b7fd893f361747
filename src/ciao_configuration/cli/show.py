"""CLI handler for ``ciao-config show``."""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from ciao_configuration.config import CiaoConfig
from ciao_configuration.defaults import load_defaults_file
from ciao_configuration.errors import CiaoConfigurationError
from ciao_configuration.telemetry import LoggerTelemetrySink


def _as_json(config: CiaoConfig) -> str:
    payload = {
        "cip_name": config.get_cip_name(),
        "version": config.get_version(),
        "classifier": config.get_classifier(),
        "backend": config.store.backend if config.store else None,
        "location": config.store.location if config.store else None,
        "properties": dict(sorted(config.get_all_properties().items())),
    }
    return json.dumps(payload, indent=2)


def run_show(args: Namespace) -> None:
    defaults = None
    if args.defaults:
        try:
            defaults = load_defaults_file(args.defaults)
        except (OSError, ValueError) as exc:
            print(f"Error: cannot load defaults from {args.defaults}: {exc}", file=sys.stderr)
            sys.exit(1)

    try:
        config = CiaoConfig(
            args.cip_name,
            args.cip_version,
            defaults,
            etcd_url=args.etcd_url,
            config_path=args.config_path,
            classifier=args.classifier,
            etcd_read_timeout=args.etcd_read_timeout,
            telemetry_sink=LoggerTelemetrySink(),
        )
    except (CiaoConfigurationError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(_as_json(config))
    else:
        print(config)
