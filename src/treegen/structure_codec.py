"""Conversion between directory hierarchies, structure text and structure trees.

Structure text lists every entry of a hierarchy as its full path from the root,
one entry per line, with ``>`` between path segments::

    root>d::src
    root>src>f::main.py
    root>f::README.md

Segments may carry a type marker, ``f::`` for files and ``d::`` for directories.
A directory that contains entries appears both on its own line and as the prefix
of the lines of its entries.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, Optional, Pattern, Sequence, Tuple, Union

from treegen.directory_lister import DirectoryLister, FileSystemLister
from treegen.exceptions import MalformedStructureError
from treegen.ignore_rules.ignore_set import IgnoreRule, IgnoreSet, as_ignore_set
from treegen.structure_tree.structure_node import StructureNode
from treegen.types import NodeKind, PathType

logger = logging.getLogger(__name__)

DEFAULT_ROOT = "root"
SEPARATOR = ">"
FILE_MARKER = "f::"
DIRECTORY_MARKER = "d::"
TYPE_MARKERS = {FILE_MARKER: NodeKind.FILE, DIRECTORY_MARKER: NodeKind.DIRECTORY}

IgnoreRules = Union[IgnoreSet, Iterable[IgnoreRule], None]


def iter_structure_lines(
    lister: Optional[DirectoryLister] = None,
    root_label: str = DEFAULT_ROOT,
    ignore_rules: IgnoreRules = None,
    type_marker: bool = False,
    dir_path: PathType = "./",
) -> Iterator[str]:
    """Walk a directory and yield its structure lines, without trailing newlines.

    Entries are visited depth first, in the order the lister returns them. Each
    entry is tested against the ignore rules by its slash-separated path relative
    to ``dir_path``; an ignored directory is not descended into.

    Args:
        lister: Directory lister to use. Defaults to a sorted FileSystemLister.
        root_label: Label starting every line.
        ignore_rules: Rules for entries to leave out.
        type_marker: Prefix entries with ``f::`` or ``d::``.
        dir_path: Directory to scan.

    Yields:
        Structure lines such as ``root>src>main.py``.

    Raises:
        OSError: Whatever the lister raises, unchanged.
    """
    if lister is None:
        lister = FileSystemLister()
    yield from _scan(lister, Path(dir_path), "", root_label, as_ignore_set(ignore_rules), type_marker)


def _scan(
    lister: DirectoryLister,
    path: Path,
    relative_path: str,
    label: str,
    ignore: IgnoreSet,
    type_marker: bool,
) -> Iterator[str]:
    for entry in lister.list_dir(path):
        entry_path = f"{relative_path}/{entry.name}" if relative_path else entry.name
        if ignore.should_ignore(entry_path):
            logger.debug("Skipping ignored entry %s", entry_path)
            continue

        marker = ""
        if type_marker:
            marker = DIRECTORY_MARKER if entry.is_dir else FILE_MARKER
        if SEPARATOR in entry.name or (not marker and entry.name.startswith(tuple(TYPE_MARKERS))):
            logger.warning("Entry %r is written unescaped and will not decode to the same name", entry_path)
        yield f"{label}{SEPARATOR}{marker}{entry.name}"

        if entry.is_dir:
            yield from _scan(
                lister, path / entry.name, entry_path, f"{label}{SEPARATOR}{entry.name}", ignore, type_marker
            )


def encode(
    lister: Optional[DirectoryLister] = None,
    root_label: str = DEFAULT_ROOT,
    ignore_rules: IgnoreRules = None,
    type_marker: bool = False,
    dir_path: PathType = "./",
) -> str:
    """Encode a directory hierarchy as structure text.

    Names are written as they are. A name containing ``>`` is split into several
    segments when decoded, and without type markers a name starting with ``f::``
    or ``d::`` loses that prefix; such entries are logged as warnings.

    Args:
        lister: Directory lister to use. Defaults to a sorted FileSystemLister.
        root_label: Label starting every line.
        ignore_rules: Rules for entries to leave out.
        type_marker: Prefix entries with ``f::`` or ``d::``.
        dir_path: Directory to scan.

    Returns:
        str: One line per entry, each terminated by a newline. An empty directory
        encodes to the empty string.

    Raises:
        OSError: Whatever the lister raises, unchanged.

    Example:
        >>> from treegen.directory_lister import DirectoryEntry
        >>> class Lister:
        ...     tree = {"src": [("lib", True), ("setup.py", False)], "src/lib": [("util.py", False)]}
        ...     def list_dir(self, path):
        ...         return [DirectoryEntry(*entry) for entry in self.tree[Path(path).as_posix()]]
        >>> print(encode(Lister(), type_marker=True, dir_path="src"), end="")
        root>d::lib
        root>lib>f::util.py
        root>f::setup.py
    """
    lines = iter_structure_lines(lister, root_label, ignore_rules, type_marker, dir_path)
    text = "".join(f"{line}\n" for line in lines)
    logger.debug("Encoded %s into %d structure lines", dir_path, text.count("\n"))
    return text


def _split_lines(structure: str) -> Iterator[str]:
    # Only "\n" ends a line; other line breaks are legal inside entry names
    for line in structure.split("\n"):
        yield line[:-1] if line.endswith("\r") else line


def _root_line_pattern(root_label: str) -> Pattern[str]:
    return re.compile(rf"^{re.escape(root_label)}{SEPARATOR}.+$")


def validate_structure(structure: str, root_label: str = DEFAULT_ROOT) -> None:
    """Check that every non-empty line of a structure belongs to ``root_label``.

    Lines are stripped before checking; blank lines are allowed anywhere.

    Args:
        structure: The structure text.
        root_label: The expected root label.

    Raises:
        MalformedStructureError: For the first line not matching ``^<root_label>>.+$``.
    """
    pattern = _root_line_pattern(root_label)
    for line_number, raw_line in enumerate(_split_lines(structure), start=1):
        line = raw_line.strip()
        if line and not pattern.match(line):
            raise MalformedStructureError(root_label, line, line_number)


def is_valid_structure(structure: str, root_label: str = DEFAULT_ROOT) -> bool:
    """Return whether ``structure`` is a valid structure text for ``root_label``.

    Example:
        >>> is_valid_structure("root>src\\nroot>src>main.py\\n")
        True
        >>> is_valid_structure("other>src\\n")
        False
    """
    try:
        validate_structure(structure, root_label)
    except MalformedStructureError:
        return False
    return True


def parse_segment(segment: str) -> Tuple[str, NodeKind]:
    """Split a structure segment into its name and kind.

    Unknown prefixes are left in the name and give an UNSPECIFIED kind.

    Example:
        >>> parse_segment("f::main.py")
        ('main.py', <NodeKind.FILE: 'file'>)
        >>> parse_segment("x::main.py")
        ('x::main.py', <NodeKind.UNSPECIFIED: 'unspecified'>)
    """
    for marker, kind in TYPE_MARKERS.items():
        if segment.startswith(marker):
            return segment[len(marker) :], kind
    return segment, NodeKind.UNSPECIFIED


def _insert_path(root: StructureNode, segments: Sequence[str], ignore: IgnoreSet) -> None:
    cursor = root
    names = []
    for raw_segment in segments:
        segment = raw_segment.strip()
        if not segment:
            continue

        name, kind = parse_segment(segment)
        if not name:
            continue

        names.append(name)
        relative_path = "/".join(names)
        if ignore.should_ignore(relative_path):
            logger.debug("Dropping ignored path %s", relative_path)
            return

        cursor = cursor.add_child(name, kind)


def decode(
    structure: Optional[str] = None,
    root_label: str = DEFAULT_ROOT,
    ignore_rules: IgnoreRules = None,
    *,
    dir_path: PathType = "./",
    lister: Optional[DirectoryLister] = None,
    type_marker: bool = False,
) -> StructureNode:
    """Build a structure tree from structure text.

    When ``structure`` is None the text is first produced by scanning ``dir_path``
    with ``encode``; the ignore rules are then applied during the scan only. Text
    supplied by the caller is validated first and the ignore rules are applied
    while parsing: an ignored segment is left out together with everything after
    it on the same line.

    Lines are processed in order. Segments shared with earlier lines reuse the
    nodes already created, so the first line mentioning an entry fixes both its
    position among its siblings and its kind.

    Args:
        structure: The structure text, or None to scan ``dir_path``.
        root_label: Label starting every line; also the name of the returned root.
        ignore_rules: Rules for entries to leave out.
        dir_path: Directory scanned when ``structure`` is None.
        lister: Directory lister used when ``structure`` is None.
        type_marker: Whether the scan emits type markers.

    Returns:
        StructureNode: The root of the tree, always of kind DIRECTORY.

    Raises:
        MalformedStructureError: If a supplied structure fails validation.
        OSError: If scanning fails.

    Example:
        >>> root = decode("root>d::src\\nroot>src>f::main.py\\nroot>f::README.md\\n")
        >>> [(child.name, child.kind.value) for child in root.children]
        [('src', 'directory'), ('README.md', 'file')]
        >>> print(root.render(), end="")
        root/
        |----src/
        |    |----main.py
        |----README.md
    """
    if structure is None:
        structure = encode(lister, root_label, ignore_rules, type_marker, dir_path)
        ignore = IgnoreSet()
    else:
        validate_structure(structure, root_label)
        ignore = as_ignore_set(ignore_rules)

    root = StructureNode(root_label, kind=NodeKind.DIRECTORY)
    prefix = f"{root_label}{SEPARATOR}"
    line_count = 0
    for raw_line in _split_lines(structure):
        line = raw_line.strip()
        if not line:
            continue
        _insert_path(root, line[len(prefix) :].split(SEPARATOR), ignore)
        line_count += 1

    logger.debug("Decoded %d structure lines under %r", line_count, root_label)
    return root
