"""
Command-line interface for the road sketch engine.

Replays a file of drawn paths through the engine and writes the resulting
meshes and a validation report.
"""

import argparse
import os
import sys

from roadsketch.config import load_config, save_default_config
from roadsketch.tracer import configure_tracer, get_tracer


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Road sketch: build a planar road graph and junction meshes from drawn paths",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Replay paths and write meshes")
    run_parser.add_argument(
        "--paths", "-p",
        required=True,
        help="YAML or JSON file with a list of polylines",
    )
    run_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output directory",
    )
    run_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    run_parser.add_argument(
        "--snap",
        action="store_true",
        help="Snap each point onto nearby nodes and edges before inserting",
    )
    run_parser.add_argument(
        "--svg",
        action="store_true",
        help="Also write preview.svg",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    run_parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    run_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    run_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="roadsketch_config.yaml",
        help="Output path for config file",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_run(args):
    """Handle the run command."""
    config = load_config(args.config)
    configure_tracer(
        enabled=args.trace or config.tracing.enabled,
        level=args.trace_level if args.trace else config.tracing.level,
        file_path=args.trace_file or config.tracing.file_path,
        json_output=args.trace_json or config.tracing.json_output,
    )

    tracer = get_tracer()

    try:
        from roadsketch.io.save_artifacts import load_paths, meshes_to_dict, save_json, save_svg
        from roadsketch.network import RoadNetwork

        with tracer.span("cli_run", module="cli"):
            network = RoadNetwork(config)
            polylines = load_paths(args.paths)
            skipped = 0

            for polyline in polylines:
                points = polyline
                if args.snap:
                    points = [network.snap(p).point for p in polyline]
                for start, end in zip(points, points[1:]):
                    try:
                        network.insert_path(start, end)
                    except ValueError as e:
                        skipped += 1
                        tracer.event(f"Skipped segment: {e}", level="WARN")

            report = network.validate()
            save_json(meshes_to_dict(network), os.path.join(args.out, "meshes.json"))
            save_json(report, os.path.join(args.out, "validation_report.json"))

            if args.svg or config.debug.enabled:
                from roadsketch.export.svg_preview import create_preview_svg
                save_svg(create_preview_svg(network, config), os.path.join(args.out, "preview.svg"))

        print(f"\nReplayed {len(polylines)} paths.")
        print(f"  Nodes: {network.graph.number_of_nodes()}")
        print(f"  Edges: {network.graph.number_of_edges()}")
        print(f"  Skipped zero-length segments: {skipped}")
        print(f"  Validation errors: {report.error_count}")
        print(f"\nOutputs saved to: {args.out}/")

        if report.has_errors:
            print("\n[!] Validation errors detected. Review validation_report.json")
            return 1

        return 0

    except Exception as e:
        tracer.event(f"Run failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
