from __future__ import annotations

"""
graph – Deterministic topological sort of a dependency graph.

``topo_sort({'a': ['b'], 'b': []})`` returns ``['b', 'a']``: every node comes
after the nodes it points to. Nodes only mentioned as dependencies are
included. Ties are broken by sorting, so equal inputs give equal outputs.
"""

from typing import Dict, Hashable, Iterable, List, Mapping, Set, TypeVar

from stencil.errors import CycleError

T = TypeVar('T', bound=Hashable)

_DONE = 2
_ON_STACK = 1


def topo_sort(adjacency: Mapping[T, Iterable[T]]) -> List[T]:
    """Return every node, dependencies first.

    Raises:
        CycleError: the graph has a cycle; ``members`` lists it in edge order,
            starting and ending with the same node.
    """
    edges: Dict[T, List[T]] = {}
    nodes: Set[T] = set()
    for node, deps in adjacency.items():
        dep_list = sorted(set(deps))
        edges[node] = dep_list
        nodes.add(node)
        nodes.update(dep_list)

    state: Dict[T, int] = {}
    out: List[T] = []

    for root in sorted(nodes):
        if state.get(root) == _DONE:
            continue
        # stack of (node, index of next dependency to visit)
        stack: List[List] = [[root, 0]]
        state[root] = _ON_STACK
        while stack:
            frame = stack[-1]
            node, i = frame
            deps = edges.get(node, [])
            if i < len(deps):
                frame[1] += 1
                dep = deps[i]
                st = state.get(dep)
                if st == _DONE:
                    continue
                if st == _ON_STACK:
                    path = [f[0] for f in stack]
                    raise CycleError(path[path.index(dep):] + [dep])
                state[dep] = _ON_STACK
                stack.append([dep, 0])
                continue
            stack.pop()
            state[node] = _DONE
            out.append(node)
    return out
