"""Workflow registry configuration.

The registry maps engine workflow IDs to the metadata the console shows.
It is plain data loaded from YAML and handed to the services that need it,
so tests and deployments can swap it without touching code.
"""

from pathlib import Path

import yaml

from automation_console.app.config import REGISTRY_FILE
from automation_console.app.models.workflow import WorkflowMeta

DEFAULT_REGISTRY_FILE = Path(__file__).parent / "data" / "workflows.yaml"

WorkflowRegistry = dict[str, WorkflowMeta]


def parse_registry(yaml_content: str) -> WorkflowRegistry:
    """Parse registry YAML (``workflows: {id: {name, description, icon}}``).

    Raises:
        ValueError: if the document is not shaped like a registry.
    """
    data = yaml.safe_load(yaml_content) or {}
    if not isinstance(data, dict) or not isinstance(data.get("workflows"), dict):
        raise ValueError("Registry YAML must contain a 'workflows' mapping")

    registry: WorkflowRegistry = {}
    for workflow_id, entry in data["workflows"].items():
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ValueError(f"Registry entry '{workflow_id}' needs at least a name")
        registry[str(workflow_id)] = WorkflowMeta(id=str(workflow_id), **entry)
    return registry


def load_registry(path: str | Path | None = None) -> WorkflowRegistry:
    """Load the registry from ``path``, the env override, or the bundled default."""
    registry_path = Path(path or REGISTRY_FILE or DEFAULT_REGISTRY_FILE)
    return parse_registry(registry_path.read_text(encoding="utf-8"))
