"""Command-line argument parsing for treegen.

This module defines the treegen subcommands (scan-dir, validate, generate-tree)
and the validation that argparse cannot express directly.
"""

import argparse
import os
from pathlib import Path
from typing import Any, List, Optional, Sequence, Type, Union

from treegen import __version__
from treegen.ignore_rules.ignore_set import IgnoreSet, RuleResolution
from treegen.structure_codec import DEFAULT_ROOT, SEPARATOR

EXCLUDE_FROM_OPTIONS = ("-e", "--exclude-from")


def create_ignore_action(ignore_set: IgnoreSet) -> Type[argparse.Action]:
    """Create an action class that feeds ignore options into ``ignore_set``.

    Patterns (``-i/--ignore``) and rule files (``-e/--exclude-from``) are added
    while the command line is parsed, so the rules keep the order in which they
    were given even when both options are mixed.

    Args:
        ignore_set: The ignore set to populate.

    Returns:
        A custom action class for use with argparse.
    """

    class IgnoreRulesAction(argparse.Action):
        """Adds each pattern or rules file to the ignore set as it is parsed."""

        def __init__(self, option_strings: List[str], dest: str, **kwargs: Any) -> None:
            super().__init__(option_strings, dest, **kwargs)

        def __call__(
            self,
            parser: argparse.ArgumentParser,
            namespace: argparse.Namespace,
            values: Union[str, Sequence[Any], None],
            option_string: Optional[str] = None,
        ) -> None:
            if values is None:
                return
            items = [values] if isinstance(values, (str, os.PathLike)) else list(values)

            for item in items:
                if option_string in EXCLUDE_FROM_OPTIONS:
                    ignore_set.load_rules(item)
                else:
                    ignore_set.add_rule(str(item))

            recorded = getattr(namespace, self.dest, None) or []
            setattr(namespace, self.dest, [*recorded, *items])

    return IgnoreRulesAction


def create_parser(ignore_set: IgnoreSet) -> argparse.ArgumentParser:
    """Create and configure the command-line argument parser.

    Args:
        ignore_set: The ignore set populated by ``--ignore`` and ``--exclude-from``.

    Returns:
        An ArgumentParser instance with the treegen subcommands.
    """
    description = """
    treegen: encode directory hierarchies as flat structure text and render them as trees.

    A structure lists every entry on its own line as the full path from a root label,
    with '>' between segments, e.g. 'root>src>main.py'. Segments may carry a type
    marker: 'f::' for files, 'd::' for directories.
    """

    epilog = """
    Examples:
      # Print the structure of the current directory
      treegen scan-dir

      # Scan another directory with type markers and a custom root label
      treegen scan-dir -d ./src --type-marker --root src

      # Leave out entries using gitignore-style patterns or ignore files
      treegen scan-dir -i "*.pyc" "node_modules/" -e .gitignore

      # Let later negated patterns re-include entries
      treegen scan-dir -i "*.log" "!important.log" --rule-resolution last

      # Check a structure file
      treegen validate -f structure.txt

      # Render a directory or a structure file as a tree
      treegen generate-tree -d ./src --type-marker --use-in-dir-character
      treegen generate-tree -s structure.txt -o tree.txt --indent-character " " -t 2
    """

    parser = argparse.ArgumentParser(
        prog="treegen",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"treegen {__version__}", help="Show the version and exit"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debugging information to stderr.",
    )

    IgnoreAction = create_ignore_action(ignore_set)

    root_options = argparse.ArgumentParser(add_help=False)
    root_options.add_argument(
        "--root",
        default=DEFAULT_ROOT,
        metavar="NAME",
        help=f"The name of the root directory in the structure (default: {DEFAULT_ROOT}).",
    )

    encoding_options = argparse.ArgumentParser(add_help=False)
    encoding_options.add_argument(
        "--encoding",
        default="utf-8",
        help="Encoding of the structure file (default: utf-8).",
    )

    scan_options = argparse.ArgumentParser(add_help=False)
    scan_options.add_argument(
        "--type-marker",
        action="store_true",
        help="Include type markers (f::, d::) in the structure.",
    )
    scan_options.add_argument(
        "-i",
        "--ignore",
        nargs="+",
        metavar="PATTERN",
        action=IgnoreAction,
        help=(
            "Gitignore-style patterns of entries to leave out: wildcards (*.log), directory markers "
            "(build/), rooted patterns (/debug.log), negations (!important.log), etc. Can be given "
            "multiple times; patterns keep their command-line order."
        ),
    )
    scan_options.add_argument(
        "-e",
        "--exclude-from",
        type=Path,
        metavar="FILE",
        action=IgnoreAction,
        help="File of gitignore-style patterns (e.g. .gitignore). Can be given multiple times.",
    )
    scan_options.add_argument(
        "--rule-resolution",
        choices=[resolution.value for resolution in RuleResolution],
        default=RuleResolution.ANY_MATCH.value,
        help=(
            "How ignore patterns combine: 'any' leaves out entries matched by any non-negated pattern, "
            "'last' lets the last matching pattern decide so negations re-include entries (default: any)."
        ),
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    scan_parser = subparsers.add_parser(
        "scan-dir",
        parents=[root_options, scan_options],
        help="Scan a directory and output its structure.",
        description="Scan a directory and output its structure.",
    )
    scan_parser.add_argument(
        "-d",
        "--dir",
        type=Path,
        default=Path("./"),
        metavar="PATH",
        help="Directory path to scan (default: ./).",
    )

    validate_parser = subparsers.add_parser(
        "validate",
        parents=[root_options, encoding_options],
        help="Validate a structure file.",
        description="Validate a structure file.",
    )
    validate_parser.add_argument(
        "-f",
        "--file",
        type=Path,
        required=True,
        metavar="PATH",
        help="Structure file to validate.",
    )

    generate_parser = subparsers.add_parser(
        "generate-tree",
        parents=[root_options, encoding_options, scan_options],
        help="Generate a directory tree and output it to the console or a file.",
        description="Generate a directory tree and output it to the console or a file.",
    )
    source = generate_parser.add_mutually_exclusive_group()
    source.add_argument(
        "-d",
        "--dir",
        type=Path,
        metavar="PATH",
        help="Directory path to scan (default: ./ when no structure file is given).",
    )
    source.add_argument(
        "-s",
        "--structure",
        type=Path,
        metavar="PATH",
        help="Structure file to build the tree from.",
    )
    generate_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        metavar="PATH",
        help="File to save the tree to. If not specified, the tree is written to stdout.",
    )
    generate_parser.add_argument(
        "--indent-character",
        default="-",
        metavar="CHAR",
        help="The character used for indentation (default: -).",
    )
    generate_parser.add_argument(
        "-t",
        "--tabs",
        type=int,
        default=4,
        help="How many indentation characters make up one level (default: 4).",
    )
    generate_parser.add_argument(
        "--tree-character",
        default="|",
        metavar="CHAR",
        help="The character drawn at the start of each level (default: |).",
    )
    generate_parser.add_argument(
        "--use-tree-character",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Whether to draw the tree character.",
    )
    generate_parser.add_argument(
        "--in-dir-character",
        default="/",
        metavar="CHAR",
        help="Suffix marking directories; only applies to entries known to be directories (default: /).",
    )
    generate_parser.add_argument(
        "--use-in-dir-character",
        action="store_true",
        help=(
            "Append the in-dir character to directories. Entries are only known to be directories "
            "with --type-marker, or when the structure file carries d:: markers."
        ),
    )

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments.

    Performs additional validation beyond what argparse can handle.

    Args:
        args: Parsed command-line arguments.

    Raises:
        ValueError: If any arguments fail validation.
    """
    root = getattr(args, "root", DEFAULT_ROOT)
    if not root or SEPARATOR in root:
        raise ValueError(f"--root must be non-empty and must not contain '{SEPARATOR}'")

    if getattr(args, "tabs", 0) < 0:
        raise ValueError("--tabs must be zero or positive")
