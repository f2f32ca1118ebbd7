from typing import Iterable, Optional

import networkx as nx

from .assigner import BCAssigner
from .errors import ChainingError
from .segment import Segment


class SegmentGraph:
    """
    The dependencies between the segments of a protocol instance.

    There is a node for each segment (identified by its index), and an edge from the segment
    producing a value to each segment using it as a parameter. Values that are not produced by
    any segment are the external inputs of the computation (for example, the proof).
    """

    def __init__(self, segments: Iterable[Segment], inputs: Iterable[str] = ()):
        self.segments = list(segments)
        self.inputs = set(inputs)
        self.producers: dict[str, int] = {}
        self.graph = nx.DiGraph()

        for i, segment in enumerate(self.segments):
            self.graph.add_node(i, name=segment.name)
            for result in segment.results:
                # keep the first producer; duplicates are reported by validate()
                self.producers.setdefault(result.id(), i)

        for i, segment in enumerate(self.segments):
            for parameter in segment.parameters:
                producer = self.producers.get(parameter.id())
                if producer is None:
                    continue
                if self.graph.has_edge(producer, i):
                    self.graph.edges[producer, i]["names"].append(parameter.id())
                else:
                    self.graph.add_edge(producer, i, names=[parameter.id()])

    def external_inputs(self) -> set[str]:
        """The names of the parameters that no segment produces."""
        return {
            parameter.id()
            for segment in self.segments
            for parameter in segment.parameters
            if parameter.id() not in self.producers
        }

    def consumers(self, name: str) -> list[int]:
        return [
            i for i, segment in enumerate(self.segments)
            if any(parameter.id() == name for parameter in segment.parameters)
        ]

    def topological_order(self) -> list[int]:
        if not nx.is_directed_acyclic_graph(self.graph):
            raise ChainingError("The segments have a circular dependency")
        return list(nx.lexicographical_topological_sort(self.graph))

    def validate(self, assigner: BCAssigner) -> None:
        """
        Checks the chaining of the values across the segments, raising ChainingError if:
          - a value is the result of more than one segment;
          - a direct-reveal value is the result of a segment;
          - a parameter is neither an input, nor the result of a previous segment;
          - two copies of a value with the same name carry different data;
          - the segments have a circular dependency.
        """
        self.topological_order()

        seen: dict[str, Optional[list[bytes]]] = {}
        produced: set[str] = set()

        for i, segment in enumerate(self.segments):
            for result in segment.results:
                if result.id() in produced or result.id() in self.inputs:
                    raise ChainingError(f"{result.id()} is produced more than once (segment {segment.name})")
                if assigner.is_direct_reveal(result.id()):
                    raise ChainingError(f"{result.id()} is revealed directly and cannot be a result")
                produced.add(result.id())

            for parameter in segment.parameters:
                name = parameter.id()
                if name in self.inputs:
                    continue
                producer = self.producers.get(name)
                if producer is None:
                    raise ChainingError(f"{name} is used by {segment.name} but never produced")
                if producer >= i:
                    raise ChainingError(f"{name} is used by {segment.name} before it is produced")

            for element in segment.parameters + segment.results:
                witness = element.to_witness()
                if element.id() in seen and seen[element.id()] != witness:
                    raise ChainingError(f"Inconsistent values for {element.id()}")
                seen[element.id()] = witness
