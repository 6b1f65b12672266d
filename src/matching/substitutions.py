"""Ingredient substitution graph (synonym resolution).

The static SUBSTITUTIONS table maps an ingredient key to the names it can be
swapped with. The table is curated by hand and not always symmetric, so
expansion also walks it in reverse: every entry that lists a key contributes
its own key and all of its synonyms.

Expansion modes:
- "one-hop" (default): direct entry plus reverse entries, exactly one level deep.
- "transitive": every connected synonym group is merged once at load time
  (union-find), so chains through several groups resolve to the same set.
"""

from collections import defaultdict
from typing import Iterable, Mapping, Optional

from src.matching.normalize import normalize_ingredient


SUBSTITUTIONS: dict[str, list[str]] = {
    # Alliums
    "scallion": ["spring onion", "spring-onion", "green onion"],
    "spring onion": ["scallion", "green onion"],
    "green onion": ["scallion", "spring onion"],
    "spring-onion": ["scallion", "spring onion"],
    # Herbs
    "cilantro": ["coriander", "coriander leaves"],
    "coriander": ["cilantro", "coriander leaves"],
    "coriander leaves": ["cilantro", "coriander"],
    # Legumes
    "chickpea": ["garbanzo bean", "garbanzo", "chick peas"],
    "garbanzo bean": ["chickpea", "garbanzo", "chick peas"],
    "garbanzo": ["chickpea", "garbanzo bean", "chick peas"],
    "chick peas": ["chickpea", "garbanzo bean", "garbanzo"],
    # Vegetables
    "capsicum": ["bell pepper", "sweet pepper"],
    "bell pepper": ["capsicum", "sweet pepper"],
    "sweet pepper": ["capsicum", "bell pepper"],
    "aubergine": ["eggplant", "brinjal"],
    "eggplant": ["aubergine", "brinjal"],
    "brinjal": ["eggplant", "aubergine"],
    "courgette": ["zucchini"],
    "zucchini": ["courgette"],
    # Spices & seasonings
    "rock salt": ["sea salt", "kosher salt"],
    "sea salt": ["rock salt", "kosher salt"],
    "kosher salt": ["rock salt", "sea salt"],
    "black pepper": ["pepper", "ground pepper"],
    "pepper": ["black pepper", "ground pepper"],
    # Dairy
    "heavy cream": ["double cream", "whipping cream"],
    "double cream": ["heavy cream", "whipping cream"],
    "whipping cream": ["heavy cream", "double cream"],
    "single cream": ["light cream"],
    "light cream": ["single cream"],
    # Grains
    "all-purpose flour": ["plain flour", "maida"],
    "plain flour": ["all-purpose flour", "maida"],
    "maida": ["all-purpose flour", "plain flour"],
    # Oils & fats
    "vegetable oil": ["cooking oil", "neutral oil"],
    "cooking oil": ["vegetable oil", "neutral oil"],
    "neutral oil": ["vegetable oil", "cooking oil"],
    # Proteins
    "minced meat": ["ground meat", "mince"],
    "ground meat": ["minced meat", "mince"],
    "mince": ["minced meat", "ground meat"],
    "ground beef": ["minced beef", "beef mince"],
    "minced beef": ["ground beef", "beef mince"],
    "beef mince": ["ground beef", "minced beef"],
    # Sauces & pastes
    "tomato puree": ["tomato paste", "tomato sauce"],
    "tomato paste": ["tomato puree", "tomato sauce"],
    "tomato sauce": ["tomato puree", "tomato paste"],
    # Leaveners
    "baking soda": ["bicarbonate of soda", "sodium bicarbonate"],
    "bicarbonate of soda": ["baking soda", "sodium bicarbonate"],
    "sodium bicarbonate": ["baking soda", "bicarbonate of soda"],
}

EXPANSION_MODES = ("one-hop", "transitive")


class SubstitutionGraph:
    """Read-only synonym graph over normalized ingredient keys.

    Args:
        table: Mapping of ingredient name to interchangeable names. Keys and
            synonyms are normalized on load; empty names are ignored.
        expansion: "one-hop" or "transitive".

    Raises:
        ValueError: If expansion is not a known mode.
    """

    def __init__(self, table: Mapping[str, Iterable[str]], expansion: str = "one-hop") -> None:
        if expansion not in EXPANSION_MODES:
            raise ValueError(f"expansion must be one of {EXPANSION_MODES}, got: {expansion}")

        self.expansion = expansion
        self._direct: dict[str, frozenset[str]] = {}
        self._listed_by: dict[str, set[str]] = defaultdict(set)
        self._memo: dict[str, frozenset[str]] = {}

        for raw_key, raw_synonyms in table.items():
            key = normalize_ingredient(raw_key)
            if not key:
                continue
            synonyms = {normalize_ingredient(s) for s in raw_synonyms} - {""}
            self._direct[key] = self._direct.get(key, frozenset()) | frozenset(synonyms)

        # Reverse lookup: synonym -> entries listing it
        for key, synonyms in self._direct.items():
            for synonym in synonyms:
                self._listed_by[synonym].add(key)

        self._components: Optional[dict[str, frozenset[str]]] = None
        if expansion == "transitive":
            self._components = self._build_components()

    def __contains__(self, key: str) -> bool:
        return key in self._direct or key in self._listed_by

    def __len__(self) -> int:
        return len(self._direct)

    def pairs(self) -> list[tuple[str, str]]:
        """Every (key, synonym) pair authored in the table."""
        return [(key, synonym) for key, synonyms in self._direct.items() for synonym in sorted(synonyms)]

    def _build_components(self) -> dict[str, frozenset[str]]:
        parent: dict[str, str] = {}

        def find(node: str) -> str:
            parent.setdefault(node, node)
            while parent[node] != node:
                parent[node] = parent[parent[node]]
                node = parent[node]
            return node

        def union(a: str, b: str) -> None:
            root_a, root_b = find(a), find(b)
            if root_a != root_b:
                parent[root_b] = root_a

        for key, synonyms in self._direct.items():
            find(key)
            for synonym in synonyms:
                union(key, synonym)

        groups: dict[str, set[str]] = defaultdict(set)
        for node in list(parent):
            groups[find(node)].add(node)

        return {node: frozenset(members) for members in groups.values() for node in members}

    def expand(self, key: str) -> frozenset[str]:
        """Return the equivalence class of a normalized key (always includes the key).

        Args:
            key: Normalized ingredient key. Pass raw names through
                normalize_ingredient first.

        Returns:
            Frozen set of synonym keys including `key` itself. An empty key
            expands to an empty set.
        """
        if not key:
            return frozenset()
        if key not in self:
            return frozenset({key})

        cached = self._memo.get(key)
        if cached is not None:
            return cached

        if self._components is not None:
            expanded = self._components.get(key, frozenset({key}))
        else:
            names = {key} | self._direct.get(key, frozenset())
            for entry in self._listed_by.get(key, ()):
                names.add(entry)
                names |= self._direct[entry]
            expanded = frozenset(names)

        self._memo[key] = expanded
        return expanded

    def expand_all(self, keys: Iterable[str]) -> set[str]:
        """Union of the expansions of several normalized keys."""
        expanded: set[str] = set()
        for key in keys:
            expanded |= self.expand(key)
        return expanded

    def ingredients_match(self, a: str, b: str) -> bool:
        """True if two raw ingredient names are equal after normalization or synonyms.

        Empty names never match anything.
        """
        key_a = normalize_ingredient(a)
        key_b = normalize_ingredient(b)
        if not key_a or not key_b:
            return False
        if key_a == key_b:
            return True
        return not self.expand(key_a).isdisjoint(self.expand(key_b))


DEFAULT_GRAPH = SubstitutionGraph(SUBSTITUTIONS)

_graphs: dict[str, SubstitutionGraph] = {"one-hop": DEFAULT_GRAPH}


def get_substitution_graph(expansion: str = "one-hop") -> SubstitutionGraph:
    """Shared graph over the built-in table for the given expansion mode."""
    if expansion not in _graphs:
        _graphs[expansion] = SubstitutionGraph(SUBSTITUTIONS, expansion=expansion)
    return _graphs[expansion]


def expand_ingredient(key: str, graph: Optional[SubstitutionGraph] = None) -> frozenset[str]:
    """Module-level shortcut for SubstitutionGraph.expand on the default graph."""
    return (graph or DEFAULT_GRAPH).expand(key)


def ingredients_match(a: str, b: str, graph: Optional[SubstitutionGraph] = None) -> bool:
    """Module-level shortcut for SubstitutionGraph.ingredients_match on the default graph."""
    return (graph or DEFAULT_GRAPH).ingredients_match(a, b)
