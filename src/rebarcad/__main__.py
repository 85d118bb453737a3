#!/usr/bin/env python3
"""
CLI for rebarCAD batch jobs.

Usage:
    python -m rebarcad run JOB.yaml [--output FILE.dxf] [--debug] [--log-file FILE]
    python -m rebarcad check JOB.yaml
    python -m rebarcad bartypes [--catalog metric|imperial] [--path FILE]

Examples:
    # Check that a job builds its geometry and runs
    python -m rebarcad check examples/wall.yaml

    # Run a job and write each operation to its own DXF layer
    python -m rebarcad run examples/wall.yaml --output wall.dxf

    # List the imperial bar types
    python -m rebarcad bartypes --catalog imperial
"""

import argparse
import sys
from pathlib import Path

import yaml

from rebarcad.bartypes import get_bar_type, list_bar_types
from rebarcad.errors import RebarError
from rebarcad.logging_config import configure, get_logger

logger = get_logger(__name__)


def cmd_check(args):
    """Run a job without writing anything."""
    from rebarcad.job import run_job_file

    source_path = Path(args.file)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return 1

    try:
        results = run_job_file(source_path)
    except (ValueError, FileNotFoundError, yaml.YAMLError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for name, curves in results.items():
        print(f"  {name}: {len(curves)} curves")
    print(f"OK: {source_path}")
    return 0


def cmd_run(args):
    """Run a job and export its curves to DXF."""
    from rebarcad.ezdxf_exporter import write_dxf_layers
    from rebarcad.job import run_job_file

    source_path = Path(args.file)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return 1

    configure(debug=args.debug, log_file=args.log_file)
    logger.debug("running job %s", source_path)

    try:
        results = run_job_file(source_path)
    except (ValueError, FileNotFoundError, yaml.YAMLError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output = Path(args.output) if args.output else source_path.with_suffix('.dxf')
    try:
        written = write_dxf_layers(results, output)
    except (RebarError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    total = sum(len(curves) for curves in results.values())
    print(f"Wrote {total} curves to {written}")
    return 0


def cmd_bartypes(args):
    """List the bar types of a catalog."""
    custom_path = Path(args.path) if args.path else None
    try:
        names = list_bar_types(args.catalog, custom_path)
        print(f"{'Name':<8} {'Diameter':>10} {'Bend':>10} {'Hook':>10} {'Tie':>10}")
        for name in names:
            bar = get_bar_type(name, args.catalog, custom_path)
            print(f"{bar.name:<8} {bar.diameter:>10g} {bar.standard_bend_diameter:>10g} "
                  f"{bar.standard_hook_bend_diameter:>10g} {bar.stirrup_tie_bend_diameter:>10g}")
    except (FileNotFoundError, ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m rebarcad',
        description='rebarCAD batch rebar layout',
    )

    subparsers = parser.add_subparsers(dest='action', required=True)

    # check command
    check_parser = subparsers.add_parser('check', help='Run a job file without exporting')
    check_parser.add_argument('file', help='YAML job file')

    # run command
    run_parser = subparsers.add_parser('run', help='Run a job file and export DXF')
    run_parser.add_argument('file', help='YAML job file')
    run_parser.add_argument('-o', '--output', metavar='FILE',
                            help='Output DXF file (default: job name with .dxf)')
    run_parser.add_argument('--debug', action='store_true', help='Log debug messages')
    run_parser.add_argument('--log-file', metavar='FILE', help='Also log to FILE')

    # bartypes command
    bar_parser = subparsers.add_parser('bartypes', help='List bar types of a catalog')
    bar_parser.add_argument('-c', '--catalog', default='metric',
                            help='Catalog name (metric or imperial)')
    bar_parser.add_argument('--path', metavar='FILE', help='Explicit catalog YAML file')

    args = parser.parse_args(argv)

    if args.action == 'check':
        return cmd_check(args)
    elif args.action == 'run':
        return cmd_run(args)
    elif args.action == 'bartypes':
        return cmd_bartypes(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
