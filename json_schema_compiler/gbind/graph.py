"""
Transition graph of a content-model expression.
"""

from __future__ import annotations

from .expression import Element, Expression


class Graph:
    """Automaton accepting the element sequences matched by an expression.

    Nodes are the elements of the expression plus a source and a sink. There
    is an edge from the source to every element that can start a match, from
    every element to every element that may follow it, and from every element
    that can end a match to the sink. The source connects straight to the sink
    when the expression accepts the empty sequence.

    Args:
        expression: The content-model expression
    """

    def __init__(self, expression: Expression):
        self.expression = expression
        self.source = Element("#source")
        self.sink = Element("#sink")

        follow: dict[Element, dict[Element, None]] = {}
        expression.build_follow(follow)

        self.nodes: list[Element] = [self.source, *expression.elements(), self.sink]
        self.edges: dict[Element, list[Element]] = {node: [] for node in self.nodes}

        self.edges[self.source] = list(expression.first())
        if expression.nullable:
            self.edges[self.source].append(self.sink)
        for element in expression.elements():
            self.edges[element] = list(follow.get(element, {}))
        for element in expression.last():
            self.edges[element].append(self.sink)

        self.components = self._strongly_connected_components()

    def _strongly_connected_components(self) -> list[list[Element]]:
        """Tarjan's algorithm; components are returned in topological order."""
        index: dict[Element, int] = {}
        low: dict[Element, int] = {}
        stack: list[Element] = []
        on_stack: set[Element] = set()
        components: list[list[Element]] = []

        def visit(node: Element) -> None:
            index[node] = low[node] = len(index)
            stack.append(node)
            on_stack.add(node)
            for successor in self.edges[node]:
                if successor not in index:
                    visit(successor)
                    low[node] = min(low[node], low[successor])
                elif successor in on_stack:
                    low[node] = min(low[node], index[successor])
            if low[node] == index[node]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member is node:
                        break
                components.append(list(reversed(component)))

        for node in self.nodes:
            if node not in index:
                visit(node)

        components.reverse()
        return components

    def is_cyclic(self, component: list[Element]) -> bool:
        """Whether ``component`` contains a loop, i.e. its elements may repeat."""
        if len(component) > 1:
            return True
        node = component[0]
        return any(successor is node for successor in self.edges[node])

    def __str__(self) -> str:
        lines = []
        for node in self.nodes:
            successors = ", ".join(str(successor) for successor in self.edges[node])
            lines.append(f"{node} -> {successors}" if successors else f"{node} ->")
        loops = [component for component in self.components if self.is_cyclic(component)]
        for component in loops:
            lines.append("loop: " + " ".join(str(node) for node in component))
        return "\n".join(lines)
