"""Curriculum catalog: the read-only concept graph shared by all learners."""
import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from loguru import logger

from mastery_tracker.errors import CatalogError, UnknownConceptError, UnknownTrackError
from mastery_tracker.models import DIFFICULTIES, NATURAL_SCIENCE, SOCIAL_SCIENCE, ConceptNode

CONTENT_DIR = Path(__file__).parent / "content"
DEFAULT_CATALOG_PATH = CONTENT_DIR / "curriculum.json"

TRACK_SUBJECTS = MappingProxyType({
    NATURAL_SCIENCE: ("Mathematics", "Physics", "English", "Chemistry", "Biology", "SAT"),
    SOCIAL_SCIENCE: ("English", "Mathematics", "Geography", "History", "Economics", "SAT"),
})


def get_subjects_for_track(track: str) -> list[str]:
    """Ordered subject list for an academic track."""
    try:
        return list(TRACK_SUBJECTS[track])
    except KeyError:
        raise UnknownTrackError(track) from None


@dataclass(frozen=True)
class Catalog:
    """Immutable set of concept nodes indexed by id, in catalog order."""

    nodes: tuple
    _by_id: MappingProxyType = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        by_id = {}
        for node in self.nodes:
            if node.id in by_id:
                raise CatalogError(f"duplicate concept id: {node.id}")
            by_id[node.id] = node
        object.__setattr__(self, "_by_id", MappingProxyType(by_id))
        _check_prerequisites(self.nodes, by_id)

    def __contains__(self, concept_id) -> bool:
        return concept_id in self._by_id

    def __iter__(self):
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def get_node(self, concept_id: str) -> ConceptNode:
        try:
            return self._by_id[concept_id]
        except KeyError:
            raise UnknownConceptError(concept_id) from None

    def find_nodes_for_subjects(self, subjects) -> list[ConceptNode]:
        wanted = set(subjects)
        return [n for n in self.nodes if n.subject in wanted]

    def find_nodes_for_track(self, track: str) -> list[ConceptNode]:
        return self.find_nodes_for_subjects(get_subjects_for_track(track))

    def prerequisites_of(self, concept_id: str) -> list[ConceptNode]:
        node = self.get_node(concept_id)
        return [n for n in self.nodes if n.id in node.prerequisites]

    def dependents_of(self, concept_id: str) -> list[ConceptNode]:
        self.get_node(concept_id)
        return [n for n in self.nodes if concept_id in n.prerequisites]

    def topological_order(self) -> list[ConceptNode]:
        """Nodes ordered so every prerequisite comes before its dependents.

        Ties keep catalog order.
        """
        placed = set()
        ordered = []
        remaining = list(self.nodes)
        while remaining:
            for node in remaining:
                if node.prerequisites <= placed:
                    ordered.append(node)
                    placed.add(node.id)
                    remaining.remove(node)
                    break
        return ordered


def _check_prerequisites(nodes, by_id: dict) -> None:
    for node in nodes:
        missing = sorted(node.prerequisites - set(by_id))
        if missing:
            raise CatalogError(f"{node.id} requires unknown concepts: {', '.join(missing)}")

    # Depth-first search; a node met again while still on the stack closes a cycle
    visiting, done = set(), set()

    def visit(node_id, path):
        if node_id in done:
            return
        if node_id in visiting:
            cycle = path[path.index(node_id):] + [node_id]
            raise CatalogError(f"prerequisite cycle: {' -> '.join(cycle)}")
        visiting.add(node_id)
        for pre_id in sorted(by_id[node_id].prerequisites):
            visit(pre_id, path + [node_id])
        visiting.discard(node_id)
        done.add(node_id)

    for node in nodes:
        visit(node.id, [])


def node_from_dict(data: dict) -> ConceptNode:
    try:
        node = ConceptNode(
            id=data["id"],
            subject=data["subject"],
            topic=data["topic"],
            difficulty=data.get("difficulty", "medium"),
            prerequisites=frozenset(data.get("prerequisites", [])),
            importance_score=float(data.get("importance_score", 0.5)),
            description=data.get("description", ""),
        )
    except KeyError as e:
        raise CatalogError(f"concept entry missing field {e.args[0]!r}: {data}") from e
    if node.difficulty not in DIFFICULTIES:
        raise CatalogError(f"{node.id}: unknown difficulty {node.difficulty!r}")
    if not 0.0 <= node.importance_score <= 1.0:
        raise CatalogError(f"{node.id}: importance_score must be within [0, 1]")
    return node


def load_catalog(path: str | Path = DEFAULT_CATALOG_PATH) -> Catalog:
    """Read and validate a JSON catalog file."""
    data = json.loads(Path(path).read_text())
    catalog = Catalog(tuple(node_from_dict(entry) for entry in data["concepts"]))
    logger.debug(f"Loaded {len(catalog)} concepts from {path}")
    return catalog


@lru_cache(maxsize=1)
def get_default_catalog() -> Catalog:
    """The bundled catalog, loaded once per process."""
    return load_catalog(DEFAULT_CATALOG_PATH)
