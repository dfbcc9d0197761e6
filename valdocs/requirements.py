# Requirement text normalizer for the recipe table.
# The Jötunn "Requirements" cell mixes <ul>/<li> lists, bare text lines and
# "Level N" headers (sometimes emitted twice when a <b> and its plain-text
# sibling both carry the label). This turns that markup into a leveled
# bullet list:
#
#   **Level 1:**
#   • Wood x5
#   • Stone x2
#
#   **Level 2:**
#   • Bronze x1

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

NO_DATA = "(no data)"
DEFAULT_LEVEL = "Level 1"
BULLET = "• "


def _clean(text: str) -> str:
    return text.replace("\u00a0", " ").strip()


class _LevelCollector:
    """Accumulates (label, items) groups while the fragment is walked."""

    def __init__(self):
        self.groups = []
        self.label = DEFAULT_LEVEL
        self.items = []
        self.last_header = None
        self.seen_content = False

    def start_level(self, header: str) -> None:
        header = _clean(header).rstrip(":").strip()
        # "Level 1" from a <b> followed by the same "Level 1" as plain text
        if self.last_header is not None and header.lower() == self.last_header.lower():
            return
        self.seen_content = True
        self._commit_if_any()
        self.label = header
        self.items = []
        self.last_header = header

    def add(self, text: str) -> None:
        self.seen_content = True
        self.items.append(text)

    def _commit_if_any(self) -> None:
        if self.items:
            self.groups.append((self.label, self.items))

    def finish(self) -> list:
        if self.items or not self.groups:
            self.groups.append((self.label, self.items))
        return self.groups


def _walk(node, collector: _LevelCollector) -> None:
    if isinstance(node, Tag):
        if node.name == "li":
            text = _clean(node.get_text())
            if text:
                collector.add(text)
            return
        for child in node.children:
            _walk(child, collector)
        return

    if not isinstance(node, NavigableString) or isinstance(node, PreformattedString):
        return

    text = _clean(str(node))
    if not text:
        return
    if text.lower().startswith("level "):
        collector.start_level(text.split("\n", 1)[0])
    else:
        # bare requirement lines outside any list
        collector.add(text)


def render_groups(groups) -> str:
    blocks = []
    for label, items in groups:
        lines = [f"**{label}:**"]
        lines.extend(f"{BULLET}{item}" for item in items)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks).rstrip()


def normalize_requirements(fragment: str) -> str:
    """
    Render a recipe's requirements cell HTML as leveled bullet text.

    Items outside any "Level N" header land in an implicit "Level 1" group.
    A fragment with neither headers nor items renders as "(no data)".
    """
    soup = BeautifulSoup(fragment or "", "html.parser")
    collector = _LevelCollector()
    for child in soup.children:
        _walk(child, collector)

    if not collector.seen_content:
        return NO_DATA

    result = render_groups(collector.finish())
    return result or NO_DATA
