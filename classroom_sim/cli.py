"""
Command-line interface for the classroom interaction simulator.

Provides commands for generating a session, scoring its participants
and writing reports.
"""

import argparse
import logging
import sys
import json
import os

from .errors import SimulationError
from .network.dynamics import InteractionContext
from .participants.profile import RiskLevel
from .simulation.engine import generate_session
from .analysis.engagement import score_session, rank_by_risk
from .visualization.plots import SessionPlotter, build_network_data


DEFAULT_REFERENCE_PARTICIPATION = 65.0


def create_participant_ids(n: int) -> list:
    """Sequential participant IDs (STU_001, STU_002, ...)."""
    return [f"STU_{i:03d}" for i in range(1, n + 1)]


def run_demo_session(args):
    """Generate and score a demonstration session."""
    print("=" * 60)
    print("Classroom Interaction Simulator - Demo Session")
    print("=" * 60)
    print()

    parameters = {
        "interactionProbability": args.interaction_probability,
        "extrovertBonus": args.extrovert_bonus,
        "academicCorrelation": args.academic_correlation,
    }

    print(f"Generating a {args.minutes}-minute {args.session_type} "
          f"with {args.participants} participants...")

    try:
        session = generate_session(
            course_id=args.course,
            session_type=args.session_type,
            duration_minutes=args.minutes,
            participant_ids=create_participant_ids(args.participants),
            parameters=parameters,
            seed=args.seed,
        )
    except SimulationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(f"  - Interactions: {len(session.interactions)}")
    print(f"  - Density: {session.network_metrics.network_density:.4f}")

    reference = (
        args.reference_participation
        if args.reference_participation is not None
        else DEFAULT_REFERENCE_PARTICIPATION
    )
    records = score_session(session, reference)
    at_risk = [r for r in rank_by_risk(records.values()) if r.risk_category != RiskLevel.LOW]
    print(f"  - Participants scored: {len(records)}")
    print(f"  - At or above medium risk: {len(at_risk)}")

    plotter = SessionPlotter(args.output_dir or ".")
    report = plotter.create_summary_report(session, records)
    print("\n" + report)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)

        report_path = os.path.join(args.output_dir, "session_report.txt")
        with open(report_path, 'w') as f:
            f.write(report)
        print(f"\nReport saved to: {report_path}")

        session_path = os.path.join(args.output_dir, "session.json")
        with open(session_path, 'w') as f:
            f.write(session.to_json())
        print(f"Session saved to: {session_path}")

        engagement_path = os.path.join(args.output_dir, "engagement.json")
        with open(engagement_path, 'w') as f:
            json.dump({pid: r.to_dict() for pid, r in records.items()}, f, indent=2)
        print(f"Engagement saved to: {engagement_path}")

        plotter.export_plot_data(
            build_network_data(session),
            os.path.join(args.output_dir, "network.json"),
        )

        if args.plots:
            plotter.plot_network(session, records, os.path.join(args.output_dir, "network.png"))
            plotter.plot_timeline(session, os.path.join(args.output_dir, "timeline.png"))
            plotter.plot_risk_distribution(
                list(records.values()), os.path.join(args.output_dir, "risk.png")
            )
            print(f"Plots saved to: {args.output_dir}")

    return 0


def main(argv=None):
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        prog="classroom-sim",
        description="""
Classroom Interaction Simulator

Synthesizes pairwise interactions among the participants of a class
session and derives network and engagement/risk metrics from them.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    demo_parser = subparsers.add_parser(
        "demo",
        help="Generate and score a demonstration session",
    )
    demo_parser.add_argument(
        "-n", "--participants",
        type=int,
        default=20,
        help="Number of participants (default: 20)",
    )
    demo_parser.add_argument(
        "-t", "--session-type",
        choices=[c.value for c in InteractionContext],
        default=InteractionContext.GROUP_WORK.value,
        help="Session context (default: group-work)",
    )
    demo_parser.add_argument(
        "-m", "--minutes",
        type=int,
        default=90,
        help="Session duration in minutes (default: 90)",
    )
    demo_parser.add_argument(
        "--course",
        type=str,
        default="COURSE_101",
        help="Course identifier (default: COURSE_101)",
    )
    demo_parser.add_argument(
        "--interaction-probability",
        type=float,
        default=None,
        help="Base interaction probability override",
    )
    demo_parser.add_argument(
        "--extrovert-bonus",
        type=float,
        default=None,
        help="Extrovert multiplier override",
    )
    demo_parser.add_argument(
        "--academic-correlation",
        type=float,
        default=None,
        help="Academic similarity bonus override (added to 1.0)",
    )
    demo_parser.add_argument(
        "-r", "--reference-participation",
        type=float,
        default=None,
        help=f"Reference participation average (default: {DEFAULT_REFERENCE_PARTICIPATION})",
    )
    demo_parser.add_argument(
        "-s", "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    demo_parser.add_argument(
        "-o", "--output-dir",
        type=str,
        default=None,
        help="Directory for output files",
    )
    demo_parser.add_argument(
        "--plots",
        action="store_true",
        help="Also write PNG plots to the output directory",
    )

    parser.add_argument(
        "-v", "--version",
        action="store_true",
        help="Show version information",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.version:
        from . import __version__
        print(f"Classroom Interaction Simulator v{__version__}")
        return 0

    if args.command == "demo":
        return run_demo_session(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
