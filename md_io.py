import re
from pathlib import Path
from typing import List, Optional, Tuple

from node_models import NodeTree

FOLDER_GLYPH = "📁"
NOTE_GLYPH = "📄"
DEFAULT_TITLE = "Notes"

_HEADING_PATTERN = re.compile(r"^#(?:\s+(.*))?$")
_BULLET_PATTERN = re.compile(r"^( *)-(?:\s.*)?$")
_CONTENT_PATTERN = re.compile(r"^( *)\|(?: (.*))?$")


def glyph_for(tree: NodeTree, node_id: int) -> str:
    return NOTE_GLYPH if tree.is_note(node_id) else FOLDER_GLYPH


def to_markdown(tree: NodeTree, title: str = DEFAULT_TITLE) -> str:
    """Serialize the tree as a Markdown outline.

    - The root is the ``#`` heading; its content follows unindented.
    - Every other node is a ``-`` bullet indented two spaces per level below
      the root, tagged with its folder/note glyph.
    - Content lines are written as ``| text`` one level deeper than the
      bullet, so blank and trailing lines survive a round trip.
    """
    if tree is None:
        raise ValueError("tree must not be None")

    lines: List[str] = [f"# {title}".rstrip()]

    def emit_content(node_id: int, indent: str) -> None:
        content = tree.content_of(node_id)
        if content is None:
            return
        for raw in content.split("\n"):
            lines.append(f"{indent}| {raw}" if raw else f"{indent}|")

    emit_content(tree.root_id, "")
    for node_id, depth in tree.walk():
        if node_id == tree.root_id:
            continue
        indent = "  " * (depth - 1)
        lines.append(f"{indent}- {glyph_for(tree, node_id)}")
        emit_content(node_id, indent + "  ")

    return "\n".join(lines) + "\n"


def from_markdown(md: str) -> Tuple[NodeTree, str]:
    """Parse an outline written by ``to_markdown``; returns ``(tree, title)``."""
    lines = md.split("\n")
    index = 0
    while index < len(lines) and not lines[index].strip():
        index += 1
    if index == len(lines):
        raise ValueError("No root heading found in Markdown")
    heading = _HEADING_PATTERN.match(lines[index])
    if not heading:
        raise ValueError(f"Line {index + 1}: expected '# title' heading")
    title = (heading.group(1) or "").strip()

    tree = NodeTree()
    # stack[d] is the most recent node at depth d; depth 0 is the root.
    stack: List[int] = [tree.root_id]
    content: dict[int, List[str]] = {}

    for number, line in enumerate(lines[index + 1 :], start=index + 2):
        if not line.strip():
            continue
        bullet = _BULLET_PATTERN.match(line)
        if bullet:
            indent = len(bullet.group(1))
            if indent % 2:
                raise ValueError(f"Line {number}: odd indentation")
            depth = indent // 2 + 1
            if depth > len(stack):
                raise ValueError(f"Line {number}: bullet nested too deep")
            del stack[depth:]
            stack.append(tree.add_child(stack[depth - 1]))
            continue
        body = _CONTENT_PATTERN.match(line)
        if body:
            owner = stack[-1]
            expected = 0 if owner == tree.root_id else 2 * (len(stack) - 1)
            if len(body.group(1)) != expected:
                raise ValueError(f"Line {number}: content line is misaligned")
            content.setdefault(owner, []).append(body.group(2) or "")
            continue
        raise ValueError(f"Line {number}: unrecognised outline line {line.strip()!r}")

    for node_id, body_lines in content.items():
        tree.set_content(node_id, "\n".join(body_lines))
    return tree, title


def serialize(tree: NodeTree, title: str = DEFAULT_TITLE) -> bytes:
    return to_markdown(tree, title).encode("utf-8")


def deserialize(data: bytes) -> NodeTree:
    tree, _ = from_markdown(data.decode("utf-8"))
    return tree


def load_tree(path: Path) -> Tuple[NodeTree, str]:
    data = Path(path).expanduser().read_bytes()
    tree, title = from_markdown(data.decode("utf-8"))
    return tree, title


def save_tree(path: Path, tree: NodeTree, title: Optional[str] = None) -> Path:
    target = Path(path).expanduser()
    target.write_bytes(serialize(tree, title or DEFAULT_TITLE))
    return target
