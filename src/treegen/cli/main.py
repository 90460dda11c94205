"""Command-line interface for treegen.

This module provides the ``treegen`` command. It parses the command line,
dispatches to the scan-dir, validate and generate-tree subcommands and turns
errors and signals into exit codes.

Exit Codes:
    0: Successful completion (including a structure reported as not valid by ``validate``)
    1: Runtime error (I/O error, malformed structure, invalid pattern)
    2: Command-line syntax error
    130: Interrupted by SIGINT (Ctrl+C)
    141: Broken pipe (SIGPIPE) on Unix-like systems

Example:
    # Print the structure of a directory
    $ treegen scan-dir -d ./src --type-marker

    # Render it as a tree
    $ treegen generate-tree -d ./src --type-marker --use-in-dir-character
"""

import argparse
import logging
import sys
from typing import Callable, Dict, Optional, Sequence

from treegen.cli.argparser import create_parser, validate_args
from treegen.cli.safe_writer import SafeWriter
from treegen.cli.signal_handler import setup_signal_handling, signal_handler
from treegen.exceptions import MalformedStructureError
from treegen.ignore_rules.ignore_set import IgnoreSet, RuleResolution
from treegen.structure_codec import validate_structure
from treegen.structure_tree.render import RenderOptions
from treegen.treegen import Treegen, load_structure

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, at DEBUG level when ``verbose`` is set and WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)-7s [%(name)s] %(message)s",
        stream=sys.stderr,
    )


def scan_dir(args: argparse.Namespace, ignore_set: IgnoreSet) -> None:
    """Print the structure of ``args.dir``."""
    treegen = Treegen(root_label=args.root, ignore_rules=ignore_set, type_marker=args.type_marker)
    structure = treegen.scan_dir(args.dir)

    with SafeWriter(sys.stdout.fileno()) as writer:
        writer.write(structure)


def validate(args: argparse.Namespace, ignore_set: IgnoreSet) -> None:
    """Report whether the structure file ``args.file`` is valid for ``args.root``."""
    structure = load_structure(args.file, args.encoding)

    try:
        validate_structure(structure, args.root)
    except MalformedStructureError as e:
        print(f"The structure is not valid: {e}", file=sys.stderr)
        return

    print("The structure is valid.")


def generate_tree(args: argparse.Namespace, ignore_set: IgnoreSet) -> None:
    """Render the tree of a structure file or a directory to stdout or ``args.output``."""
    structure = load_structure(args.structure, args.encoding) if args.structure else None

    treegen = Treegen(root_label=args.root, ignore_rules=ignore_set, type_marker=args.type_marker)
    tree = treegen.generate_tree(dir_path=args.dir, structure=structure)

    options = RenderOptions(
        indent_character=args.indent_character,
        tabs=args.tabs,
        tree_character=args.tree_character,
        use_tree_character=args.use_tree_character,
        in_dir_character=args.in_dir_character,
        use_in_dir_character=args.use_in_dir_character,
    )

    if args.output:
        with SafeWriter(args.output) as writer:
            writer.write_lines(treegen.stream_tree(tree, options))
        print(f"Tree written to {args.output}")
    else:
        with SafeWriter(sys.stdout.fileno()) as writer:
            writer.write_lines(treegen.stream_tree(tree, options))


COMMANDS: Dict[str, Callable[[argparse.Namespace, IgnoreSet], None]] = {
    "scan-dir": scan_dir,
    "validate": validate,
    "generate-tree": generate_tree,
}


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the treegen command-line interface.

    Args:
        argv: Arguments to parse instead of ``sys.argv[1:]``.

    Exit codes:
        0: Successful completion
        1: Runtime error during execution
        2: Command-line syntax error
        130: Interrupted by SIGINT (Ctrl+C)
        141: Broken pipe (SIGPIPE) on Unix-like systems
    """
    setup_signal_handling()

    try:
        # Filled in by the --ignore and --exclude-from actions while parsing
        ignore_set = IgnoreSet()

        parser = create_parser(ignore_set)
        args = parser.parse_args(argv)

        validate_args(args)
        configure_logging(args.verbose)

        if hasattr(args, "rule_resolution"):
            ignore_set.resolution = RuleResolution(args.rule_resolution)
        logger.debug("Running %s with %d ignore rules", args.command, len(ignore_set))

        try:
            COMMANDS[args.command](args, ignore_set)
        except BrokenPipeError:
            pass  # SafeWriter is already closed by its context manager

    except Exception as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(1)

    exit_code = signal_handler.exit_code()
    if exit_code is not None:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
