#!/usr/bin/env python3
"""
ISC DHCP to Windows DHCP Converter

Reads an ISC dhcpd.conf and prints the PowerShell commands (or JSON command
list) that recreate its shared-network subnets as Windows DHCP scopes.

Usage:
    isc-dhcp-convert /etc/dhcp/dhcpd.conf
    isc-dhcp-convert /etc/dhcp/dhcpd.conf --format json --output scopes.json
"""

import argparse
import json
import logging
import os
import sys

from dhcp_errors import DHCPConfigError
from powershell_renderer import render_script
from scope_converter import convert_config

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_INVALID_CONFIG = 2


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert an ISC DHCP server configuration into Windows DHCP Server commands.")
    parser.add_argument("config_file", help="Path to dhcpd.conf")
    parser.add_argument("-f", "--format", choices=("powershell", "json"), default="powershell",
                        help="Output format (default: powershell)")
    parser.add_argument("-o", "--output", help="Write output to this file instead of stdout")
    parser.add_argument("--log-level", default="WARNING",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
                        help="Log level for diagnostics on stderr (default: WARNING)")
    return parser


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr,
    )

    if not os.path.isfile(args.config_file):
        print(f"Error: File not found - {args.config_file}", file=sys.stderr)
        return EXIT_USAGE

    with open(args.config_file, 'r', encoding='utf-8') as f:
        content = f.read()

    try:
        result = convert_config(content)
    except DHCPConfigError as e:
        log.error("Cannot convert %s: %s", args.config_file, e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    if args.format == "json":
        output = json.dumps(result.to_dict(), indent=2) + "\n"
    else:
        output = render_script(result.commands)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(output)
        log.info("Wrote %d commands to %s", len(result.commands), args.output)
    else:
        sys.stdout.write(output)

    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
