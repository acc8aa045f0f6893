import argparse
import sys
import os
import logging

# Ensure project root is in path so we can import 'pipes_engine' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pipes_engine.core.exceptions import GenerationError


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pipes Engine: rotation puzzle generator and solver")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate Command
    gen_parser = subparsers.add_parser("generate", help="Generate a new puzzle")
    gen_parser.add_argument("--grid", type=str, default="square", choices=["square", "hexagonal", "octagonal"], help="Grid kind")
    gen_parser.add_argument("--width", type=int, default=7, help="Puzzle Width")
    gen_parser.add_argument("--height", type=int, default=7, help="Puzzle Height")
    gen_parser.add_argument("--wrap", action="store_true", help="Wrap around the edges")
    gen_parser.add_argument("--branching", type=float, default=0.6, help="Branching amount (0.0 - 1.0)")
    gen_parser.add_argument("--avoid-obvious", type=float, default=0.0, help="Avoid obvious tiles (0.0 - 1.0)")
    gen_parser.add_argument("--avoid-straights", type=float, default=0.0, help="Avoid straight tiles (0.0 - 1.0)")
    gen_parser.add_argument("--solutions", type=str, default="unique", choices=["unique", "multiple", "whatever"], help="Required number of solutions")
    gen_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    gen_parser.add_argument("--max-attempts", type=int, default=100, help="Attempts before giving up")
    gen_parser.add_argument("--out", type=str, help="Output file path (.json for a JSON instance)")
    gen_parser.add_argument("--compress", action="store_true", help="Compress the binary output")
    gen_parser.add_argument("--record-events", type=str, help="Save generation events to binary file")

    # Solve Command
    solve_parser = subparsers.add_parser("solve", help="Solve an existing puzzle")
    solve_parser.add_argument("input_file", help="Path to puzzle file")
    solve_parser.add_argument("--all", action="store_true", help="Find all solutions")
    solve_parser.add_argument("--out", type=str, help="Save the first solution to this path")
    solve_parser.add_argument("--record-events", type=str, help="Save solver events to binary file")

    # Check Command
    check_parser = subparsers.add_parser("check", help="Check a puzzle for a unique solution")
    check_parser.add_argument("input_file", help="Path to puzzle file")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger("pipes_engine")

    if args.command is None:
        parser.print_help()
        return 0

    logger.info(f"Running command: {args.command}")

    if args.command == "generate":
        from pipes_engine.algo.generator import Generator
        from pipes_engine.core.events import EventWriter
        from pipes_engine.core.grids import make_grid
        from pipes_engine.core.layout import LayoutInspector

        grid = make_grid(args.grid, args.width, args.height, args.wrap)
        logger.info(f"Generating {args.width}x{args.height} {grid.KIND} puzzle (solutions={args.solutions})...")

        # Create Event Writer if requested
        evt_writer = None
        if args.record_events:
            evt_writer = EventWriter(args.record_events)
            evt_writer.write_header(grid.width, grid.height)
            logger.info(f"Recording events to {args.record_events}...")

        generator = Generator(grid, max_attempts=args.max_attempts, seed=args.seed, event_writer=evt_writer)
        try:
            tiles = generator.generate(
                branching_amount=args.branching,
                avoid_obvious=args.avoid_obvious,
                avoid_straights=args.avoid_straights,
                solutions_number=args.solutions,
            )
        except GenerationError as e:
            logger.error(str(e))
            return 1
        finally:
            if evt_writer:
                evt_writer.close()

        stats = LayoutInspector.calculate_stats(grid, tiles)
        logger.info(f"Stats: {stats}")

        if args.out:
            logger.info(f"Saving puzzle to {args.out}...")
            from pipes_engine.io.serializer import PuzzleSerializer
            meta = {"seed": args.seed, "branching": args.branching, "solutions": args.solutions}
            PuzzleSerializer.save(grid, tiles, args.out, meta=meta, compress=args.compress)
            logger.info("Save complete.")
        else:
            print(tiles)

    elif args.command == "solve":
        from pipes_engine.algo.solver import Solver
        from pipes_engine.core.events import EventWriter
        from pipes_engine.io.serializer import PuzzleSerializer

        logger.info(f"Loading {args.input_file}...")
        grid, tiles, meta = PuzzleSerializer.load(args.input_file)
        logger.info(f"Loaded {grid.width}x{grid.height} {grid.KIND} puzzle. Meta: {meta}")

        evt_writer = None
        if args.record_events:
            evt_writer = EventWriter(args.record_events)
            evt_writer.write_header(grid.width, grid.height)
            logger.info(f"Recording events to {args.record_events}...")

        solver = Solver(tiles, grid)
        count = 0
        try:
            for stage, step in solver.solve(all_solutions=args.all):
                count += 1
                if evt_writer:
                    evt_writer.log_step(stage, step)
        finally:
            if evt_writer:
                evt_writer.close()

        logger.info(f"Done after {count} steps. Solutions found: {len(solver.solutions)}")
        if not solver.solutions:
            logger.error("Puzzle has no solution")
            return 1
        if args.out:
            PuzzleSerializer.save(grid, solver.solutions[0], args.out, meta={"solved_from": args.input_file})
            logger.info(f"Saved solution to {args.out}")
        else:
            for solution in solver.solutions:
                print(solution)

    elif args.command == "check":
        from pipes_engine.algo.solver import Solver
        from pipes_engine.core.layout import LayoutInspector
        from pipes_engine.io.serializer import PuzzleSerializer

        grid, tiles, _ = PuzzleSerializer.load(args.input_file)
        report = Solver(tiles, grid).mark_ambiguous_tiles()
        logger.info(f"Stats: {LayoutInspector.calculate_stats(grid, tiles)}")
        print(f"solvable={report.solvable} unique={report.unique} ambiguous={report.num_ambiguous}")
        if not (report.solvable and report.unique):
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
