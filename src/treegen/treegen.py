"""High-level entry point bundling scanning, parsing and rendering.

The Treegen class keeps the settings shared by every step (root label, ignore
rules, type markers and the directory lister) so callers configure them once.
"""

from pathlib import Path
from typing import Iterator, Optional

from treegen.directory_lister import DirectoryLister, FileSystemLister
from treegen.ignore_rules.ignore_set import IgnoreSet, as_ignore_set
from treegen.structure_codec import DEFAULT_ROOT, SEPARATOR, IgnoreRules, decode, encode, is_valid_structure
from treegen.structure_tree.render import RenderOptions, render, stream_render
from treegen.structure_tree.structure_node import StructureNode
from treegen.types import PathType


def load_structure(path: PathType, encoding: str = "utf-8") -> str:
    """Read structure text from a file.

    Args:
        path: The file to read.
        encoding: Text encoding of the file.

    Returns:
        str: The file contents.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid in ``encoding``.
    """
    return Path(path).read_text(encoding=encoding)


class Treegen:
    """Scan directories into structure text and turn structure text into trees.

    Attributes:
        root_label (str): Label starting every structure line and naming the tree root.
        ignore_rules (IgnoreSet): Rules applied when scanning, and when parsing text
            supplied by the caller.
        type_marker (bool): Whether scans mark entries with ``f::`` or ``d::``.
        lister (DirectoryLister): Lister used for scans.

    Example:
        >>> treegen = Treegen(root_label="~")
        >>> tree = treegen.generate_tree(structure="~>docs\\n~>docs>index.md\\n")
        >>> print(treegen.render_tree(tree, RenderOptions(tabs=2)), end="")
        ~/
        |--docs
        |  |--index.md
    """

    def __init__(
        self,
        *,
        root_label: str = DEFAULT_ROOT,
        ignore_rules: IgnoreRules = None,
        type_marker: bool = False,
        lister: Optional[DirectoryLister] = None,
    ) -> None:
        """Initialize the generator.

        Args:
            root_label: Root label of structures. Must be non-empty and must not
                contain ``>``.
            ignore_rules: An IgnoreSet or any iterable of rules.
            type_marker: Emit type markers when scanning.
            lister: Directory lister. Defaults to a sorted FileSystemLister.

        Raises:
            ValueError: If the root label is empty or contains the separator.
        """
        if not root_label or SEPARATOR in root_label:
            raise ValueError(f"Invalid root label {root_label!r}: must be non-empty and must not contain '{SEPARATOR}'")

        self.root_label = root_label
        self.ignore_rules: IgnoreSet = as_ignore_set(ignore_rules)
        self.type_marker = type_marker
        self.lister: DirectoryLister = lister if lister is not None else FileSystemLister()

    def scan_dir(self, dir_path: PathType = "./") -> str:
        """Encode a directory as structure text.

        Raises:
            OSError: If the directory cannot be listed.
        """
        return encode(self.lister, self.root_label, self.ignore_rules, self.type_marker, dir_path)

    def is_valid_structure(self, structure: str) -> bool:
        """Check structure text against this generator's root label."""
        return is_valid_structure(structure, self.root_label)

    def generate_tree(self, dir_path: Optional[PathType] = None, structure: Optional[str] = None) -> StructureNode:
        """Build a tree from structure text, or from a scan of ``dir_path`` when no text is given.

        Args:
            dir_path: Directory to scan when ``structure`` is None. Defaults to the
                current directory.
            structure: Structure text to parse.

        Returns:
            StructureNode: The root of the tree.

        Raises:
            MalformedStructureError: If the structure text is not valid.
            OSError: If scanning fails.
        """
        return decode(
            structure,
            self.root_label,
            self.ignore_rules,
            dir_path=dir_path if dir_path is not None else "./",
            lister=self.lister,
            type_marker=self.type_marker,
        )

    @staticmethod
    def render_tree(tree: StructureNode, options: Optional[RenderOptions] = None) -> str:
        """Render a tree produced by generate_tree."""
        return render(tree, options)

    @staticmethod
    def stream_tree(tree: StructureNode, options: Optional[RenderOptions] = None) -> Iterator[str]:
        """Render a tree produced by generate_tree one line at a time."""
        return stream_render(tree, options)
