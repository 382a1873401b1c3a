"""
Command Line
============
Lists the legal models or builds one and reports its size.

Usage:
    $ python -m hypermesh --list
    $ python -m hypermesh --list sierpinski-carpet
    $ python -m hypermesh cube -d 4 --plot
    $ python -m hypermesh random-affine-ifs -d 2 -r 3 --seed 7 --iterations 5
"""
from __future__ import annotations

import argparse
import logging
from typing import Sequence

from hypermesh.config import MAX_MODEL_DEPTH
from hypermesh.controller.factory import build, echo, list_models
from hypermesh.logging_config import setup_logging
from hypermesh.model.parameters import Parameters

# __name__ is "__main__" under "python -m"
logger = logging.getLogger("hypermesh")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hypermesh",
        description="Generate meshes of arbitrary-dimensional primitives",
    )
    parser.add_argument(
        "model",
        nargs="?",
        choices=list_models(),
        help="Id of the model to build",
    )
    parser.add_argument(
        "--list",
        dest="list_models",
        action="store_true",
        help="List every legal model as 'depth-id@render depth' and exit",
    )
    parser.add_argument("-d", "--depth", type=int, default=3, help="Model depth (default: %(default)s)")
    parser.add_argument("-r", "--render-depth", type=int, default=0, help="Render depth (default: model depth)")
    parser.add_argument("--radius", type=float, default=1.0, help="Edge length (default: %(default)s)")
    parser.add_argument("--iterations", type=int, default=4, help="IFS iterations (default: %(default)s)")
    parser.add_argument("--functions", type=int, default=3, help="Random IFS functions (default: %(default)s)")
    parser.add_argument("--seed", type=int, default=0, help="PRNG seed (default: %(default)s)")
    parser.add_argument("--post-rotate", action="store_true", help="Random IFS: rotate after translating")
    parser.add_argument("--no-pre-rotate", action="store_true", help="Random IFS: don't rotate before translating")
    parser.add_argument("--plot", action="store_true", help="Show a matplotlib preview")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")

    args = parser.parse_args(argv)
    if not args.list_models and not args.model:
        parser.error("a model id is required unless --list is given")
    return args


def main(argv: Sequence[str] | None = None) -> int:
    # 1. Parse the command line and set up logging
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    # 2. Listing only needs the descriptors
    if args.list_models:
        ids = [args.model] if args.model else list_models()
        for model_id in ids:
            for line in echo(model_id):
                print(line)
        return 0

    if args.depth > MAX_MODEL_DEPTH:
        logger.warning(f"Depth {args.depth} is above the usual maximum of {MAX_MODEL_DEPTH}.")

    # 3. Build the model
    try:
        parameters = Parameters(
            radius=args.radius,
            iterations=args.iterations,
            functions=args.functions,
            seed=args.seed,
            pre_rotate=not args.no_pre_rotate,
            post_rotate=args.post_rotate,
        )
        model = build(args.model, parameters, args.depth, args.render_depth)
    except ValueError as e:
        logger.error(str(e))
        return 2

    logger.info(f"{model.label}: {len(model)} faces, {model.vertex_count()} vertices.")

    # 4. Optional preview; matplotlib is only imported when asked for
    if args.plot:
        from hypermesh.view.preview import plot_model
        plot_model(model)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
