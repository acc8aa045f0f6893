from typing import Dict, List, Set


class Components:
    """
    Groups of cells joined by proven connections.

    Union-find over nodes with path compression and union by size. Each
    root keeps the set of member indices so a group can be enumerated. An
    index gets a fresh node whenever it is added, so discarding a solved
    index never disturbs the other members of its group.
    """

    def __init__(self):
        self._node: Dict[int, int] = {}      # index -> node
        self._parent: Dict[int, int] = {}    # node -> parent node
        self._members: Dict[int, Set[int]] = {}  # root node -> indices
        self._next_node = 0

    def __contains__(self, index: int) -> bool:
        return index in self._node

    def __len__(self) -> int:
        return len(self._node)

    def _find(self, node: int) -> int:
        root = node
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[node] != root:
            self._parent[node], node = root, self._parent[node]
        return root

    def add(self, index: int):
        node = self._next_node
        self._next_node += 1
        self._node[index] = node
        self._parent[node] = node
        self._members[node] = {index}

    def members(self, index: int) -> Set[int]:
        return self._members[self._find(self._node[index])]

    def same(self, a: int, b: int) -> bool:
        if a not in self._node or b not in self._node:
            return False
        return self._find(self._node[a]) == self._find(self._node[b])

    def union(self, a: int, b: int) -> List[int]:
        """Joins the groups of a and b. Returns the indices that came from b's group."""
        root_a = self._find(self._node[a])
        root_b = self._find(self._node[b])
        joined = list(self._members[root_b])
        if root_a == root_b:
            return []
        if len(self._members[root_a]) < len(self._members[root_b]):
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        self._members[root_a] |= self._members.pop(root_b)
        return joined

    def discard(self, index: int) -> int:
        """Removes index from its group. Returns how many members are left."""
        node = self._node.pop(index)
        members = self._members[self._find(node)]
        members.discard(index)
        return len(members)

    def copy(self) -> 'Components':
        clone = Components()
        clone._node = dict(self._node)
        clone._parent = dict(self._parent)
        clone._members = {root: set(members) for root, members in self._members.items()}
        clone._next_node = self._next_node
        return clone
