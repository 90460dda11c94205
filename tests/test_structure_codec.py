import logging
import re

import pytest
from anytree import PreOrderIter

from treegen.directory_lister import FileSystemLister
from treegen.exceptions import MalformedStructureError
from treegen.ignore_rules.ignore_set import IgnoreSet
from treegen.structure_codec import (
    decode,
    encode,
    is_valid_structure,
    iter_structure_lines,
    parse_segment,
    validate_structure,
)
from treegen.types import NodeKind


def shape(root):
    """Flatten a tree into comparable (path, kind) pairs in pre-order."""
    return [(tuple(node.name for node in n.path), n.kind) for n in PreOrderIter(root)]


def test_encode_without_markers(memory_lister):
    expected = (
        "root>README.md\n"
        "root>docs\n"
        "root>docs>guide.md\n"
        "root>src\n"
        "root>src>app.py\n"
        "root>src>app.log\n"
        "root>src>lib\n"
    )
    assert encode(memory_lister, dir_path="project") == expected


def test_encode_with_markers_and_root(memory_lister):
    expected = (
        "~>f::README.md\n"
        "~>d::docs\n"
        "~>docs>f::guide.md\n"
        "~>d::src\n"
        "~>src>f::app.py\n"
        "~>src>f::app.log\n"
        "~>src>d::lib\n"
    )
    assert encode(memory_lister, root_label="~", type_marker=True, dir_path="project") == expected


def test_encode_keeps_lister_order(memory_lister):
    # src lists app.py before app.log, which is not alphabetical
    lines = list(iter_structure_lines(memory_lister, dir_path="project"))
    assert lines.index("root>src>app.py") < lines.index("root>src>app.log")


def test_encode_empty_directory(tmp_path):
    assert encode(FileSystemLister(), dir_path=tmp_path) == ""


def test_encode_ignores_by_basename(memory_lister):
    structure = encode(memory_lister, ignore_rules=["*.log"], dir_path="project")
    assert "app.log" not in structure
    assert "root>src>app.py\n" in structure


def test_encode_does_not_descend_into_ignored_directories(memory_lister):
    structure = encode(memory_lister, ignore_rules=["src/"], dir_path="project")
    assert "src" not in structure
    assert "project/src" not in memory_lister.calls


def test_encode_matches_relative_paths(memory_lister):
    # Anchored patterns only match from the scanned root
    assert "root>src>lib\n" in encode(memory_lister, ignore_rules=["/lib"], dir_path="project")
    assert "lib" not in encode(memory_lister, ignore_rules=["/src/lib"], dir_path="project")
    assert "lib" not in encode(memory_lister, ignore_rules=["src/lib"], dir_path="project")


def test_encode_with_regex_rule(memory_lister):
    structure = encode(memory_lister, ignore_rules=[re.compile(r"docs")], dir_path="project")
    assert "docs" not in structure
    assert "guide.md" not in structure


def test_encode_propagates_lister_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        encode(FileSystemLister(), dir_path=tmp_path / "missing")


def test_encode_propagates_errors_from_custom_lister():
    class FailingLister:
        def list_dir(self, path):
            raise PermissionError(f"Permission denied: {path}")

    with pytest.raises(PermissionError):
        encode(FailingLister(), dir_path="anywhere")


def test_encode_real_directory(project_dir):
    structure = encode(FileSystemLister(), type_marker=True, dir_path=project_dir)
    lines = structure.splitlines()

    assert "root>d::src" in lines
    assert "root>src>d::utils" in lines
    assert "root>src>utils>f::helpers.py" in lines
    assert "root>f::README.md" in lines
    # Directories come before their contents
    assert lines.index("root>d::src") < lines.index("root>src>f::main.py")


@pytest.mark.parametrize(
    "structure,valid",
    [
        ("root>x\n", True),
        ("root>x", True),
        ("root>a\nroot>a>b\n", True),
        ("\n\nroot>a\n\n   \nroot>a>b\n", True),
        ("  root>a  \n", True),
        ("", True),
        ("\n", True),
        ("other>x\n", False),
        ("root>\n", False),
        ("root\n", False),
        ("root>a\nbroken line\n", False),
        ("rootx>a\n", False),
    ],
)
def test_is_valid_structure(structure, valid):
    assert is_valid_structure(structure) is valid


def test_validate_structure_custom_root():
    validate_structure("~>a\n~>a>b\n", "~")
    with pytest.raises(MalformedStructureError):
        validate_structure("root>a\n", "~")


def test_validate_structure_escapes_root_label():
    # Regex characters in the root label are literal
    assert is_valid_structure("a.b>x\n", "a.b")
    assert not is_valid_structure("axb>x\n", "a.b")
    assert is_valid_structure("(root)>x\n", "(root)")


def test_validate_structure_reports_first_bad_line():
    with pytest.raises(MalformedStructureError) as exc_info:
        validate_structure("root>a\n\nbad one\nbad two\n")
    error = exc_info.value
    assert error.root_label == "root"
    assert error.line == "bad one"
    assert error.line_number == 3
    assert "root>" in str(error)


def test_decode_rejects_foreign_root():
    with pytest.raises(MalformedStructureError):
        decode("other>x\n")


def test_decode_simple_structure():
    root = decode("root>x\n")
    assert root.name == "root"
    assert root.kind is NodeKind.DIRECTORY
    assert [child.name for child in root.children] == ["x"]
    assert root.children[0].kind is NodeKind.UNSPECIFIED


def test_decode_empty_structure():
    root = decode("")
    assert root.name == "root"
    assert root.children == ()


def test_decode_merges_shared_prefixes():
    root = decode("root>a\nroot>a>b\nroot>a>c\nroot>d\nroot>a>b>e\n")
    assert [child.name for child in root.children] == ["a", "d"]
    a = root.get_child("a")
    assert [child.name for child in a.children] == ["b", "c"]
    assert [child.name for child in a.get_child("b").children] == ["e"]


def test_decode_creates_missing_intermediate_nodes():
    root = decode("root>a>b>c\n")
    assert shape(root) == [
        (("root",), NodeKind.DIRECTORY),
        (("root", "a"), NodeKind.UNSPECIFIED),
        (("root", "a", "b"), NodeKind.UNSPECIFIED),
        (("root", "a", "b", "c"), NodeKind.UNSPECIFIED),
    ]


def test_decode_type_markers():
    root = decode("root>d::src\nroot>src>f::main.py\nroot>f::README.md\nroot>x::odd\n")
    src = root.get_child("src")
    assert src.kind is NodeKind.DIRECTORY
    assert src.get_child("main.py").kind is NodeKind.FILE
    assert root.get_child("README.md").kind is NodeKind.FILE
    # Unknown markers stay part of the name
    assert root.get_child("x::odd").kind is NodeKind.UNSPECIFIED


def test_decode_first_kind_wins():
    root = decode("root>d::a\nroot>f::a\n")
    assert len(root.children) == 1
    assert root.children[0].kind is NodeKind.DIRECTORY


def test_decode_skips_blank_lines_and_segments():
    root = decode("\n  root>a  \n\nroot>a>>b\nroot>a> >c\n")
    a = root.get_child("a")
    assert [child.name for child in a.children] == ["b", "c"]


def test_decode_skips_markers_without_name():
    root = decode("root>f::\nroot>a\n")
    assert [child.name for child in root.children] == ["a"]


def test_decode_applies_ignore_rules_to_supplied_text():
    structure = "root>src\nroot>src>app.py\nroot>src>app.log\nroot>build\nroot>build>out.js\n"
    root = decode(structure, ignore_rules=["*.log", "build/"])
    assert [child.name for child in root.children] == ["src"]
    assert [child.name for child in root.get_child("src").children] == ["app.py"]


def test_decode_ignored_segment_drops_rest_of_line():
    root = decode("root>logs>2024>debug.txt\nroot>src>logs\n", ignore_rules=["/logs"])
    assert root.get_child("logs") is None
    # The anchored rule does not match the nested path src/logs
    assert root.get_child("src").get_child("logs") is not None


def test_decode_ignore_uses_relative_path():
    root = decode("root>d::a\nroot>a>f::b.txt\nroot>f::b.txt\n", ignore_rules=["a/b.txt"])
    assert root.get_child("b.txt") is not None
    assert root.get_child("a").children == ()


def test_decode_with_last_match_resolution():
    ignore_set = IgnoreSet(["*.log", "!keep.log"], resolution="last")
    root = decode("root>a.log\nroot>keep.log\nroot>b.txt\n", ignore_rules=ignore_set)
    assert [child.name for child in root.children] == ["keep.log", "b.txt"]


def test_decode_scans_when_no_structure_given(memory_lister):
    root = decode(dir_path="project", lister=memory_lister, type_marker=True, ignore_rules=["*.log"])
    assert [child.name for child in root.children] == ["README.md", "docs", "src"]
    src = root.get_child("src")
    assert src.kind is NodeKind.DIRECTORY
    assert [child.name for child in src.children] == ["app.py", "lib"]


def test_round_trip_preserves_shape_and_order(memory_lister):
    root = decode(encode(memory_lister, type_marker=True, dir_path="project"))
    assert [node.name for node in PreOrderIter(root)] == [
        "root",
        "README.md",
        "docs",
        "guide.md",
        "src",
        "app.py",
        "app.log",
        "lib",
    ]
    assert root.get_child("docs").kind is NodeKind.DIRECTORY
    assert root.get_child("README.md").kind is NodeKind.FILE


@pytest.mark.parametrize("name", ["a\x0cb", "a\x0bb", "a\x1cb", "a\x85b", "a\u2028b", "a\u2029b"])
def test_round_trip_names_with_unicode_line_breaks(lister_factory, name):
    lister = lister_factory({"project": [("dir", True), ("z.txt", False)], "project/dir": [(name, False)]})
    structure = encode(lister, dir_path="project")

    assert is_valid_structure(structure)
    root = decode(structure)
    assert [node.name for node in PreOrderIter(root)] == ["root", "dir", name, "z.txt"]

    scanned = decode(dir_path="project", lister=lister)
    assert [node.name for node in PreOrderIter(scanned)] == ["root", "dir", name, "z.txt"]


def test_decode_accepts_crlf_line_endings():
    root = decode("root>d::src\r\nroot>src>f::main.py\r\n")
    assert [node.name for node in PreOrderIter(root)] == ["root", "src", "main.py"]
    assert root.get_child("src").get_child("main.py").kind is NodeKind.FILE


def test_validate_structure_counts_only_newlines():
    with pytest.raises(MalformedStructureError) as exc_info:
        validate_structure("root>a\x0cb\nother>c\n")

    assert exc_info.value.line_number == 2


@pytest.mark.parametrize(
    "name,type_marker",
    [("a>b", True), ("a>b", False), ("f::notes", False), ("d::cache", False)],
)
def test_encode_warns_about_names_that_change_on_decode(lister_factory, caplog, name, type_marker):
    lister = lister_factory({"project": [(name, False)]})

    with caplog.at_level(logging.WARNING, logger="treegen.structure_codec"):
        structure = encode(lister, type_marker=type_marker, dir_path="project")

    assert name in structure
    assert any(record.levelno == logging.WARNING for record in caplog.records)


def test_encode_markers_keep_marker_like_names(lister_factory, caplog):
    lister = lister_factory({"project": [("f::notes", False)]})

    with caplog.at_level(logging.WARNING, logger="treegen.structure_codec"):
        root = decode(encode(lister, type_marker=True, dir_path="project"))

    assert [child.name for child in root.children] == ["f::notes"]
    assert not caplog.records


def test_round_trip_real_directory_lists_every_entry_once(project_dir):
    lister = FileSystemLister()
    root = decode(encode(lister, dir_path=project_dir))
    rendered = root.render().splitlines()

    entries = [path.name for path in project_dir.rglob("*")]
    assert len(rendered) == len(entries) + 1
    for name in entries:
        assert sum(1 for line in rendered if line.endswith(f"-{name}")) >= 1


def test_decode_without_markers_gives_unspecified_kinds(memory_lister):
    root = decode(encode(memory_lister, dir_path="project"))
    kinds = {node.kind for node in PreOrderIter(root) if node is not root}
    assert kinds == {NodeKind.UNSPECIFIED}
    assert root.kind is NodeKind.DIRECTORY


def test_decode_is_deterministic():
    structure = "root>d::b\nroot>b>f::x\nroot>f::a\nroot>b>d::y\nroot>b>y>f::z\n"
    assert shape(decode(structure)) == shape(decode(structure))


def test_decode_builds_independent_trees():
    structure = "root>a\nroot>a>b\n"
    first = decode(structure)
    second = decode(structure)
    first.get_child("a").add_child("c")
    assert second.get_child("a").get_child("c") is None


@pytest.mark.parametrize(
    "segment,expected",
    [
        ("f::main.py", ("main.py", NodeKind.FILE)),
        ("d::src", ("src", NodeKind.DIRECTORY)),
        ("main.py", ("main.py", NodeKind.UNSPECIFIED)),
        ("F::main.py", ("F::main.py", NodeKind.UNSPECIFIED)),
        ("f:main.py", ("f:main.py", NodeKind.UNSPECIFIED)),
        ("f::", ("", NodeKind.FILE)),
    ],
)
def test_parse_segment(segment, expected):
    assert parse_segment(segment) == expected
