"""
sifter/batch/entities.py: Cross-project entity flagging.

Builds a bipartite project–entity graph from the high-risk projects of a
batch and flags every entity connected to enough of them.

Graph:
    Project nodes: node_type='Project', risk_score, confidence.
    Entity nodes:  node_type='Entity'.
    Edges:         Project → Entity for each associated entity name.

Only projects whose composite score is strictly above
config.entity_risk_threshold (60) enter the graph. An entity is flagged when
its degree reaches config.entity_min_cooccurrence (2). Its aggregate
confidence is the maximum composite confidence across those projects.
"""

import logging
from dataclasses import dataclass, field

import networkx as nx

from sifter.config import DEFAULT_CONFIG, SifterConfig

logger = logging.getLogger(__name__)


@dataclass
class FlaggedEntity:
    """
    An entity shared by multiple high-risk projects.

    Fields:
        name:          Entity name as reported by the data-collection layer.
        co_occurrence: Number of high-risk projects associated with it.
        projects:      Names of those projects, in batch order.
        confidence:    Maximum composite confidence across those projects.
    """

    name: str
    co_occurrence: int
    projects: list = field(default_factory=list)
    confidence: int = 0


def build_entity_graph(projects: list, config: SifterConfig = DEFAULT_CONFIG) -> nx.Graph:
    """
    Build the bipartite project–entity graph for high-risk projects.

    Args:
        projects: BatchProject-like objects with name, status, risk_score,
                  confidence and associated_entities.
        config:   SifterConfig with entity_risk_threshold.

    Returns:
        nx.Graph. Node IDs are ('project', index) and ('entity', name) tuples
        so a project and an entity sharing a name never collide.
    """
    G = nx.Graph()
    for index, project in enumerate(projects):
        if project is None or getattr(project, "risk_score", None) is None:
            continue
        if project.risk_score <= config.entity_risk_threshold:
            continue
        project_node = ("project", index)
        G.add_node(
            project_node,
            node_type="Project",
            name=project.name,
            order=index,
            risk_score=project.risk_score,
            confidence=project.confidence or 0,
        )
        for entity in project.associated_entities:
            name = str(entity).strip()
            if not name:
                continue
            entity_node = ("entity", name)
            if entity_node not in G:
                G.add_node(entity_node, node_type="Entity", name=name)
            G.add_edge(project_node, entity_node)
    return G


def flag_entities(projects: list, config: SifterConfig = DEFAULT_CONFIG) -> list:
    """
    Flag entities shared by at least entity_min_cooccurrence high-risk projects.

    Returns:
        List of FlaggedEntity, sorted by co_occurrence descending then name.
    """
    G = build_entity_graph(projects, config)

    flagged: list[FlaggedEntity] = []
    for node, data in G.nodes(data=True):
        if data.get("node_type") != "Entity":
            continue
        neighbours = sorted(G.neighbors(node), key=lambda n: G.nodes[n]["order"])
        if len(neighbours) < config.entity_min_cooccurrence:
            continue
        flagged.append(
            FlaggedEntity(
                name=data["name"],
                co_occurrence=len(neighbours),
                projects=[G.nodes[n]["name"] for n in neighbours],
                confidence=max(int(G.nodes[n]["confidence"]) for n in neighbours),
            )
        )

    flagged.sort(key=lambda e: (-e.co_occurrence, e.name))
    if flagged:
        logger.info(
            "Flagged %d entities across high-risk projects: %s",
            len(flagged),
            ", ".join(e.name for e in flagged),
        )
    return flagged
