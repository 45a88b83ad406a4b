"""Command line front end for funcstudy.

Each request (``--eval`` or one line of the interactive loop) runs a full
analysis and sampling pass and replaces the previous session.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from . import config
from .analysis import AnalysisSession, start_session
from .config import DEFAULT_PLOT_RANGE, VERSION
from .logging_config import get_logger, setup_logging
from .parser import format_number
from .plotting import count_defined
from .types import AnalysisResult, ParseError

logger = get_logger("cli")

UNDEFINED_RANGE_ERROR = "Function is undefined on the whole plotting range"


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running funcstudy health check...")
    print("-" * 50)

    try:
        import sympy as sp

        print(f"[OK] SymPy {sp.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] SymPy import failed: {e}")
        checks_failed += 1

    try:
        import numpy

        print(f"[OK] NumPy {numpy.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] NumPy import failed: {e}")
        checks_failed += 1

    try:
        from .evaluator import compile_expression

        value = compile_expression("2x + 1")(3)
        if value == 7:
            print("[OK] Expression evaluation works")
            checks_passed += 1
        else:
            print(f"[FAIL] Evaluation check failed: expected 7, got {value}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Evaluation check failed: {e}")
        checks_failed += 1

    try:
        from .evaluator import compile_expression
        from .solver import find_zeros

        roots = find_zeros(compile_expression("x^2 - 4"))
        if roots == [-2.0, 2.0]:
            print("[OK] Root finding works")
            checks_passed += 1
        else:
            print(f"[FAIL] Root finding check failed: {roots}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Root finding check failed: {e}")
        checks_failed += 1

    try:
        from .calculus import symbolic_derivative
        from .evaluator import compile_expression

        df = symbolic_derivative(compile_expression("x^2"))
        if df is not None and df(3) == 6:
            print("[OK] Symbolic differentiation works")
            checks_passed += 1
        else:
            print("[WARN] Symbolic differentiation unavailable (numeric fallback in use)")
    except Exception as e:
        print(f"[WARN] Symbolic differentiation check skipped: {e}")

    print("-" * 50)
    print(f"Results: {checks_passed} passed, {checks_failed} failed")

    if checks_failed > 0:
        print("\n[WARN] Some health checks failed. Core functionality may be impaired.")
        return 1

    print("\n[OK] All health checks passed!")
    return 0


def print_result_pretty(result: AnalysisResult, output_format: str = "human") -> None:
    """Print an analysis result.

    Args:
        result: Result of ``analyze_expression``
        output_format: "json" for JSON output, "human" for human-readable
    """
    if output_format == "json":
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    if not result.ok:
        print("Error:", result.error)
        print("Check the function you entered.")
        return
    print(f"f(x) = {result.expression}")
    width = max((len(prop.name) for prop in result.properties), default=0)
    for prop in result.properties:
        print(f"  {prop.name.replace('_', ' ').ljust(width)}  {prop.value}")
        print(f"  {' ' * width}  ({prop.description})")


def samples_payload(session: AnalysisSession) -> dict:
    return {
        "x_range": session.x_range,
        "samples": [point.to_dict() for point in session.samples],
    }


def print_samples(session: AnalysisSession, output_format: str = "human") -> None:
    """Print the sample table of a session; undefined points show as gaps."""
    if output_format == "json":
        print(json.dumps(samples_payload(session), indent=2))
        return
    print(f"Samples on [-{format_number(session.x_range)}, {format_number(session.x_range)}]"
          f" ({count_defined(list(session.samples))}/{len(session.samples)} defined)")
    for point in session.samples:
        y_text = "-" if point.y is None else format_number(point.y)
        print(f"  {format_number(point.x):>10}  {y_text}")


def print_help_text() -> None:
    print("Enter a function of x, e.g. 2x^2 - 3x + 1, sin(x)/x, ln(x), sqrt(x)")
    print("Functions: sin cos tan cot asin acos atan exp log ln sqrt abs")
    print("Constants: pi e    Powers: ^    Implicit multiplication: 2x, x sin(x)")
    print("Commands:")
    print("  range N   re-sample the current function on [-N, N]")
    print("  samples   print the sample table of the current function")
    print("  help      show this text")
    print("  quit      leave")


def repl_loop(output_format: str = "human", x_range: float = DEFAULT_PLOT_RANGE) -> None:
    """Interactive loop; every expression replaces the current session."""
    session: Optional[AnalysisSession] = None
    print(f"funcstudy {VERSION} - type 'help' for usage, 'quit' to leave")
    while True:
        try:
            line = input(">>> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not line:
            continue
        command = line.lower()
        if command in ("quit", "exit"):
            return
        if command == "help":
            print_help_text()
            continue
        if command == "samples" or command.startswith("range "):
            if session is None:
                print("No function analyzed yet.")
                continue
            if command.startswith("range "):
                session = session.with_range(command.split(None, 1)[1])
                print(f"Range set to ±{format_number(session.x_range)}")
            else:
                print_samples(session, output_format)
            continue
        try:
            session = start_session(line, x_range if session is None else session.x_range)
        except ParseError as e:
            print_result_pretty(AnalysisResult(ok=False, expression=line, error=str(e)), output_format)
            continue
        print_result_pretty(
            AnalysisResult(ok=True, expression=session.expression, properties=list(session.properties)),
            output_format,
        )


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for funcstudy CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(prog="funcstudy")
    parser.add_argument(
        "-e",
        "--eval",
        type=str,
        help="Analyze one expression and exit (non-interactive)",
        dest="eval_expr",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-r", "--range", type=float, default=DEFAULT_PLOT_RANGE, dest="x_range",
        help="Half-width of the sampling window (default: 10)",
    )
    parser.add_argument(
        "--samples", action="store_true", help="Also print the plot sample table"
    )
    parser.add_argument(
        "--numeric-derivative",
        action="store_true",
        help="Use the central difference instead of the symbolic derivative",
    )
    parser.add_argument(
        "--parity-tolerance", type=float, help="Tolerance of the parity check (default: 0.01)"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file)

    # Apply CLI configuration overrides
    if args.numeric_derivative:
        config.SYMBOLIC_DERIVATIVE = False
    if args.parity_tolerance and args.parity_tolerance > 0:
        config.PARITY_TOLERANCE = float(args.parity_tolerance)

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()
    if args.eval_expr is not None:
        expr = args.eval_expr.strip()
        try:
            session = start_session(expr, args.x_range)
        except ParseError as e:
            logger.info(f"Rejected expression {expr!r}: {e}")
            print_result_pretty(AnalysisResult(ok=False, expression=expr, error=str(e)), args.format)
            return 1
        result = AnalysisResult(
            ok=True, expression=session.expression, properties=list(session.properties)
        )
        if not args.samples:
            print_result_pretty(result, args.format)
            return 0
        defined = count_defined(list(session.samples)) > 0
        if args.format == "json":
            samples = samples_payload(session) if defined else {"error": UNDEFINED_RANGE_ERROR}
            payload = {"analysis": result.to_dict(), "samples": samples}
            print(json.dumps(payload, indent=2, ensure_ascii=False))
            return 0 if defined else 1
        print_result_pretty(result, args.format)
        if not defined:
            print(f"Error: {UNDEFINED_RANGE_ERROR}")
            return 1
        print_samples(session, args.format)
        return 0

    repl_loop(args.format, args.x_range)
    return 0


if __name__ == "__main__":
    sys.exit(main_entry())
