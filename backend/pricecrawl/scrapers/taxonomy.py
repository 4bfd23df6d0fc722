"""Static per-source category taxonomies and parent-group expansion."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

CategoryId = Union[int, str]


@dataclass(frozen=True)
class CategoryNode:
    """One crawlable listing page in a source's catalog."""

    id: CategoryId
    name: str
    parent: Optional[str] = None  # Parent group label, e.g. "욕실"
    path: Optional[str] = None  # URL path override, relative to base_url

    @property
    def category(self) -> str:
        """Top-level category stored on extracted products."""
        return self.parent or self.name

    @property
    def sub_category(self) -> Optional[str]:
        """Sub-category stored on extracted products (only under a parent)."""
        return self.name if self.parent else None


class CategoryTaxonomy:
    """Category table plus group expansion rules for one source.

    Groups map a label (numeric parent id or text label) to an ordered list
    of concrete category ids. A concrete id may additionally be designated as
    the "all items" pseudo-category of a group; requesting it expands to the
    whole group, itself included.
    """

    def __init__(
        self,
        categories: Sequence[CategoryNode],
        groups: Optional[Mapping[CategoryId, Sequence[CategoryId]]] = None,
        all_categories: Optional[Mapping[CategoryId, CategoryId]] = None,
        unknown_name: str = "카테고리 {id}",
        unknown_parent: Optional[str] = None,
    ):
        """Build a taxonomy.

        Args:
            categories: Every concrete category node, in display order
            groups: Group label -> ordered concrete ids
            all_categories: Pseudo-category id -> group label it stands for
            unknown_name: Name template for ids missing from the table
            unknown_parent: Parent label for ids missing from the table
        """
        self._categories: Dict[CategoryId, CategoryNode] = {node.id: node for node in categories}
        self._groups: Dict[CategoryId, List[CategoryId]] = {
            label: list(ids) for label, ids in (groups or {}).items()
        }
        self._all_categories: Dict[CategoryId, CategoryId] = dict(all_categories or {})
        self._unknown_name = unknown_name
        self._unknown_parent = unknown_parent

        for pseudo_id, label in self._all_categories.items():
            if label not in self._groups:
                raise ValueError(f"all-category {pseudo_id!r} points at unknown group {label!r}")

    def get_categories(self) -> Dict[CategoryId, CategoryNode]:
        """Return a copy of the id -> CategoryNode table."""
        return dict(self._categories)

    def get_parent_categories(self) -> Dict[CategoryId, List[CategoryId]]:
        """Return a copy of the group -> concrete ids table."""
        return {label: list(ids) for label, ids in self._groups.items()}

    def normalize_id(self, category_id: CategoryId) -> CategoryId:
        """Coerce ids arriving as text (CLI, JSON) onto the table's key type.

        "93" becomes 93 when 93 is a known category or group; anything
        unknown is returned unchanged.
        """
        if isinstance(category_id, str):
            stripped = category_id.strip()
            if stripped.isdigit() and self._is_known(int(stripped)):
                return int(stripped)
            return stripped
        if isinstance(category_id, int) and not self._is_known(category_id):
            if self._is_known(str(category_id)):
                return str(category_id)
        return category_id

    def _is_known(self, category_id: CategoryId) -> bool:
        return (
            category_id in self._categories
            or category_id in self._groups
            or category_id in self._all_categories
        )

    def get_node(self, category_id: CategoryId) -> CategoryNode:
        """Look up a category, synthesizing a placeholder for unknown ids."""
        key = self.normalize_id(category_id)
        node = self._categories.get(key)
        if node is not None:
            return node
        return CategoryNode(
            id=key,
            name=self._unknown_name.format(id=key),
            parent=self._unknown_parent,
        )

    def expand_categories(self, category_ids: Iterable[CategoryId]) -> List[CategoryId]:
        """Expand group labels and "all" pseudo-categories into concrete ids.

        The result is duplicate-free and keeps first-seen order. Concrete or
        unknown ids pass through unchanged, so expanding an already expanded
        list yields the same set.

        Args:
            category_ids: Requested ids, possibly group-level

        Returns:
            Ordered list of concrete category ids
        """
        expanded: Dict[CategoryId, None] = {}
        for raw_id in category_ids:
            for concrete_id in self._expand_one(self.normalize_id(raw_id)):
                expanded.setdefault(concrete_id, None)
        return list(expanded)

    def _expand_one(self, category_id: CategoryId) -> List[CategoryId]:
        if category_id in self._groups:
            return self._groups[category_id]
        if category_id in self._all_categories:
            return self._groups[self._all_categories[category_id]]
        return [category_id]
