"""Load a context hierarchy from YAML.

The document has a top-level ``contexts`` list; every entry may carry a
``children`` list that is created beneath it::

    contexts:
      - name: AI Research
        level: Domain
        properties:
          system_instruction: Be concise and helpful.
        children:
          - name: Researcher-1
            level: Agent
            agent_type: Researcher
"""

import importlib.resources as pkg_resources
import logging
from pathlib import Path
from typing import Any

import yaml

from research_council.contexts.models import ContextNode
from research_council.contexts.store import ContextStore

logger = logging.getLogger(__name__)

DEFAULT_HIERARCHY = "default_hierarchy.yaml"


def load_hierarchy_config(path: Path | None = None) -> dict:
    """Read a hierarchy YAML file, or the bundled default when path is None.

    Raises:
        ValueError: If the document has no ``contexts`` list.
    """
    if path is None:
        ref = pkg_resources.files("research_council.contexts") / DEFAULT_HIERARCHY
        config = yaml.safe_load(ref.read_text(encoding="utf-8"))
    else:
        with open(path) as f:
            config = yaml.safe_load(f)

    if not isinstance(config, dict) or not isinstance(config.get("contexts"), list):
        raise ValueError("Hierarchy file must contain a top-level 'contexts' list")
    return config


def seed_hierarchy(store: ContextStore, path: Path | None = None) -> list[ContextNode]:
    """Create every context described in a hierarchy file.

    Args:
        store: Store to create the nodes in.
        path: YAML file; defaults to the bundled example hierarchy.

    Returns:
        Created nodes, parents before children.
    """
    config = load_hierarchy_config(path)
    created: list[ContextNode] = []
    for entry in config["contexts"]:
        _create_tree(store, entry, None, created)
    logger.info("Seeded %d contexts.", len(created))
    return created


def _create_tree(
    store: ContextStore,
    entry: dict[str, Any],
    parent_id: str | None,
    created: list[ContextNode],
) -> None:
    fields = {k: v for k, v in entry.items() if k != "children"}
    if parent_id is not None:
        fields["parent_id"] = parent_id
    node = store.create(ContextNode.model_validate(fields))
    created.append(node)
    for child in entry.get("children") or []:
        _create_tree(store, child, node.id, created)
