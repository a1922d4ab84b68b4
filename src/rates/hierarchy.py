"""Classification hierarchy as a flat arena of nodes with a parent index."""

from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from src.rates.models import Classification


class HierarchyError(ValueError):
    """The nodes supplied do not form a tree."""


@dataclass
class ClassificationNode:
    code: str
    name: str
    parent_code: str | None = None
    children: list[str] = field(default_factory=list)
    classification: Classification | None = None


class ClassificationTree:
    """Tree of classifications keyed by code.

    Nodes live in one dict; ``parent_code`` and ``children`` hold codes, not
    objects, so lookups are O(1) and cycles are detectable without recursion.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, ClassificationNode] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, code: object) -> bool:
        return code in self._nodes

    def get(self, code: str) -> ClassificationNode | None:
        return self._nodes.get(code)

    def add(
        self,
        code: str,
        name: str,
        parent_code: str | None = None,
        classification: Classification | None = None,
    ) -> ClassificationNode:
        """Add a node. The parent may be added later; call ``check()`` when done."""
        if code in self._nodes:
            raise HierarchyError(f"Duplicate classification code {code}")
        node = ClassificationNode(code, name, parent_code, classification=classification)
        self._nodes[code] = node
        return node

    def check(self) -> "ClassificationTree":
        """Link children to parents and verify the nodes form a forest.

        Raises:
            HierarchyError: on an unknown parent or a cycle.
        """
        for node in self._nodes.values():
            node.children.clear()
        for node in self._nodes.values():
            if node.parent_code is None:
                continue
            parent = self._nodes.get(node.parent_code)
            if parent is None:
                raise HierarchyError(f"{node.code} references unknown parent {node.parent_code}")
            parent.children.append(node.code)

        for code in self._nodes:
            seen = {code}
            current = self._nodes[code].parent_code
            while current is not None:
                if current in seen:
                    raise HierarchyError(f"Cycle through classification {current}")
                seen.add(current)
                current = self._nodes[current].parent_code
        return self

    def roots(self) -> list[ClassificationNode]:
        return [n for n in self._nodes.values() if n.parent_code is None]

    def ancestors(self, code: str) -> list[ClassificationNode]:
        """Parent, grandparent, ... up to the root."""
        result = []
        current = self._nodes[code].parent_code
        while current is not None:
            node = self._nodes[current]
            result.append(node)
            current = node.parent_code
        return result

    def descendants(self, code: str | None = None) -> Iterator[ClassificationNode]:
        """Breadth-first walk below ``code``, or over the whole forest if None."""
        if code is None:
            queue = deque(n.code for n in self.roots())
        else:
            queue = deque(self._nodes[code].children)
        while queue:
            node = self._nodes[queue.popleft()]
            yield node
            queue.extend(node.children)

    @classmethod
    def from_classifications(cls, classifications: Iterable[Classification]) -> "ClassificationTree":
        """Build from flat classification records linked by ``parent_code``.

        Several versions of one code collapse into a single node holding the
        latest version.
        """
        latest: dict[str, Classification] = {}
        for c in classifications:
            held = latest.get(c.code)
            if held is None or c.valid_from >= held.valid_from:
                latest[c.code] = c

        tree = cls()
        for c in latest.values():
            tree.add(c.code, c.name, c.parent_code, classification=c)
        return tree.check()

    @classmethod
    def from_nested(cls, roots: Iterable[dict]) -> "ClassificationTree":
        """Build from nested ``{code, name, children}`` mappings."""
        tree = cls()
        stack: list[tuple[dict, str | None]] = [(r, None) for r in roots]
        while stack:
            item, parent = stack.pop()
            tree.add(item["code"], item["name"], parent)
            stack.extend((child, item["code"]) for child in item.get("children") or [])
        return tree.check()
