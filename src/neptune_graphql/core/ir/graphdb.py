"""
Raw graph schema document consumed by inference.

The document is collected by an external introspection step. Two shapes
are accepted:

    {"nodes": {"Person": {"properties": [{"name": "name", "type": "String"}],
                          "count": 120}},
     "edges": {"WORKS_AT": {"fromLabel": "Person", "toLabel": "Company",
                            "direction": "OUT", "maxOutDegree": 1}}}

and the Neptune summary shape:

    {"nodeStructures": [{"label": "Person", "properties": [...]}],
     "edgeStructures": [{"label": "WORKS_AT",
                         "directions": [{"from": "Person", "to": "Company",
                                         "relationship": "MANY-ONE"}]}]}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import EdgeDirection


class PropertySpec(BaseModel):
    """A node or edge property with its observed type."""

    name: str
    type: str = "String"
    multivalued: bool = False

    model_config = ConfigDict(populate_by_name=True)


class NodeLabelSpec(BaseModel):
    """A node label with its properties and observed node count."""

    properties: list[PropertySpec] = Field(default_factory=list)
    count: int | None = None


class EdgeLabelSpec(BaseModel):
    """
    An edge label between two node labels.

    Attributes:
        label: Edge label
        from_label: Node label at the source end as listed
        to_label: Node label at the target end as listed
        direction: OUT when edges run from_label -> to_label, IN when the
            stored edges run to_label -> from_label
        count: Observed number of edges
        max_out_degree: Most targets observed for one source node
        max_in_degree: Most sources observed for one target node
        inverse_name: Optional field name for the incoming side
    """

    label: str
    from_label: str = Field(alias="fromLabel")
    to_label: str = Field(alias="toLabel")
    direction: EdgeDirection = EdgeDirection.OUT
    count: int | None = None
    max_out_degree: int | None = Field(default=None, alias="maxOutDegree")
    max_in_degree: int | None = Field(default=None, alias="maxInDegree")
    inverse_name: str | None = Field(default=None, alias="inverseName")
    properties: list[PropertySpec] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def source(self) -> str:
        """Label of the node the stored edge leaves."""
        return self.to_label if self.direction == EdgeDirection.IN else self.from_label

    @property
    def target(self) -> str:
        """Label of the node the stored edge enters."""
        return self.from_label if self.direction == EdgeDirection.IN else self.to_label

    @property
    def targets_per_source(self) -> int | None:
        return self.max_in_degree if self.direction == EdgeDirection.IN else self.max_out_degree

    @property
    def sources_per_target(self) -> int | None:
        return self.max_out_degree if self.direction == EdgeDirection.IN else self.max_in_degree


class GraphSchema(BaseModel):
    """Node labels and edge labels of a property graph."""

    nodes: dict[str, NodeLabelSpec] = Field(default_factory=dict)
    edges: list[EdgeLabelSpec] = Field(default_factory=list)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> GraphSchema:
        """Build a GraphSchema from either accepted document shape."""
        if "nodeStructures" in document or "edgeStructures" in document:
            return cls._from_neptune_summary(document)

        edges_doc = document.get("edges", {})
        if isinstance(edges_doc, dict):
            edges = [
                EdgeLabelSpec.model_validate({"label": label, **spec})
                for label, spec in edges_doc.items()
            ]
        else:
            edges = [EdgeLabelSpec.model_validate(spec) for spec in edges_doc]

        nodes = {
            label: NodeLabelSpec.model_validate(spec or {})
            for label, spec in document.get("nodes", {}).items()
        }
        return cls(nodes=nodes, edges=edges)

    @classmethod
    def _from_neptune_summary(cls, document: dict[str, Any]) -> GraphSchema:
        nodes: dict[str, NodeLabelSpec] = {}
        for structure in document.get("nodeStructures", []):
            nodes[structure["label"]] = NodeLabelSpec(
                properties=[
                    PropertySpec.model_validate(p) for p in structure.get("properties", [])
                ],
                count=structure.get("count"),
            )

        edges: list[EdgeLabelSpec] = []
        for structure in document.get("edgeStructures", []):
            properties = [PropertySpec.model_validate(p) for p in structure.get("properties", [])]
            for direction in structure.get("directions", []):
                # "MANY-ONE" reads as: many sources share one target
                relationship = str(direction.get("relationship", "MANY-MANY")).upper()
                source_side, _, target_side = relationship.partition("-")
                edges.append(
                    EdgeLabelSpec(
                        label=structure["label"],
                        from_label=direction["from"],
                        to_label=direction["to"],
                        max_out_degree=1 if target_side == "ONE" else None,
                        max_in_degree=1 if source_side == "ONE" else None,
                        properties=properties,
                    )
                )
        return cls(nodes=nodes, edges=edges)
