"""
Command Line Interface for Astrosonic
=====================================

Render an astrological chart (JSON) to a WAV file from the terminal.

Usage Examples:
    # Flat preview of a chart, written to chart.wav
    astrosonic chart.json

    # Melodic arrangement in a jazz style, reproducible note choices
    astrosonic chart.json --mode melodic --genre jazz --seed 7 -o jazz.wav

    # Sandbox mode with the narration printed underneath
    astrosonic chart.json --mode sandbox --narrate

    # Daily transits (the input file holds a list of transiting planets)
    astrosonic transits.json --mode daily

    # JSON summary for scripting
    astrosonic chart.json --json

    # Show help
    astrosonic --help
"""

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import Dict, List, Optional

from astrosonic import __version__
from astrosonic.errors import AstrosonicError


# =============================================================================
# PART 1: ARGUMENT PARSER SETUP
# =============================================================================

MODES = ["flat", "melodic", "sandbox", "daily"]


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser object
    """
    parser = argparse.ArgumentParser(
        prog="astrosonic",
        description="""
Astrosonic - Turn an astrological chart into music.

The input is a JSON chart (metadata, planets, houses), or a JSON list of
transiting planets for --mode daily.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # ─────────────────────────────────────────────────────────────────────────
    # Positional argument: the chart file
    # ─────────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "chart",
        type=str,
        help="Path to a chart JSON file ('-' reads from stdin)"
    )

    # ─────────────────────────────────────────────────────────────────────────
    # Generation options
    # ─────────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "-m", "--mode",
        choices=MODES,
        default="flat",
        help="Composition style (default: flat)"
    )

    parser.add_argument(
        "-g", "--genre",
        type=str,
        default=None,
        help="Genre, e.g. ambient, classical, jazz, electronic"
    )

    parser.add_argument(
        "-d", "--duration",
        type=float,
        default=None,
        help="Length in seconds"
    )

    parser.add_argument(
        "-t", "--tempo",
        type=float,
        default=None,
        help="Tempo in BPM (melodic mode and narration)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for melodic note selection"
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Settings YAML file (overrides ASTROSONIC_CONFIG)"
    )

    # ─────────────────────────────────────────────────────────────────────────
    # Output options
    # ─────────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output WAV path (default: <chart name>.wav)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON summary instead of the text summary"
    )

    parser.add_argument(
        "--narrate",
        action="store_true",
        help="Also print a description of the music (not available with --mode daily)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Show processing details (-vv for debug output)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


# =============================================================================
# PART 2: INPUT AND LOGGING
# =============================================================================

def configure_logging(verbosity: int) -> None:
    """-v shows progress, -vv shows every generator decision."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def read_payload(source: str):
    """Read and parse JSON from a file path, or from stdin for '-'."""
    if source == "-":
        return json.load(sys.stdin)
    with open(source, "r", encoding="utf-8") as f:
        return json.load(f)


def default_output_path(source: str, mode: str) -> Path:
    if source == "-":
        return Path(f"astrosonic_{mode}.wav")
    return Path(source).with_suffix(".wav")


# =============================================================================
# PART 3: OUTPUT FORMATTING
# =============================================================================

def format_result_json(result: Dict, output_path: Path) -> str:
    """
    Format the result as JSON.

    Audio bytes are not included, only where they were written.
    """
    composition = result["composition"]
    output = {
        "mode": result["mode"],
        "genre": result["genre"],
        "tempo": result["tempo"],
        "duration": composition.total_duration,
        "sample_rate": composition.sample_rate,
        "note_count": len(composition.notes),
        "aspects": [aspect.model_dump() for aspect in result["aspects"]],
        "output": str(output_path),
        "wav_bytes": len(result["wav"]),
    }

    session = result.get("session")
    if session is not None:
        output["session"] = {
            "id": session.id,
            "key": session.key,
            "scale": session.scale,
            "phrases": [
                {"planet": p.planet, "role": p.role, "notes": len(p.notes)}
                for p in session.phrases
            ],
        }

    narration = result.get("narration")
    if narration is not None:
        output["narration"] = narration.model_dump()

    return json.dumps(output, indent=2)


# =============================================================================
# PART 4: SINGLE GENERATION
# =============================================================================

def run(args: argparse.Namespace) -> int:
    """
    Run one generation and write the WAV file.

    Returns:
        Process exit status
    """
    from astrosonic.app.generate import (
        format_composition_summary,
        generate_chart_music,
        generate_daily_music,
        load_chart,
        load_transits,
    )
    from astrosonic.config import load_settings

    settings = load_settings(args.config)
    payload = read_payload(args.chart)

    if args.mode == "daily":
        if not isinstance(payload, list):
            raise AstrosonicError("Daily mode expects a JSON list of transiting planets")
        result = generate_daily_music(
            load_transits(payload),
            genre=args.genre,
            duration=args.duration,
            settings=settings,
        )
    else:
        rng = random.Random(args.seed) if args.seed is not None else None
        result = generate_chart_music(
            load_chart(payload),
            mode=args.mode,
            genre=args.genre,
            duration=args.duration,
            tempo=args.tempo,
            rng=rng,
            narrate=args.narrate,
            settings=settings,
        )

    output_path = Path(args.output) if args.output else default_output_path(args.chart, args.mode)
    output_path.write_bytes(result["wav"])

    if args.json:
        print(format_result_json(result, output_path))
        return 0

    print(format_composition_summary(result))
    print(f"\nWrote {output_path}")

    narration = result.get("narration")
    if narration is not None:
        print()
        print(narration.full_narration)
    return 0


# =============================================================================
# PART 5: MAIN ENTRY POINT
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Errors are reported on stderr and exit with status 1.
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.duration is not None and args.duration < 0:
        print(f"Duration must be zero or positive (got {args.duration})", file=sys.stderr)
        return 1
    if args.tempo is not None and args.tempo <= 0:
        print(f"Tempo must be positive (got {args.tempo})", file=sys.stderr)
        return 1
    if args.narrate and args.mode == "daily":
        print("--narrate needs a natal chart and cannot be used with --mode daily", file=sys.stderr)
        return 1

    try:
        return run(args)
    except (AstrosonicError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
