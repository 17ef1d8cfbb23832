"""World-script loader.

World scripts are YAML files holding one or more script containers.  A
container of ``type: world`` lists its triggers under ``events:``; each key
is an event line and each value the script lines to run::

    loot_tweaks:
      type: world
      debug: false
      events:
        on loot generates for:chest:
        - determine LOOT:diamond|diamond

Files are read with :func:`yaml.compose` rather than ``safe_load`` so every
event key keeps its source line; error messages and runtime failures point
at ``<container>:<line>``.

Design notes:
- Containers of any other ``type`` are skipped (logged at DEBUG).
- Every structural problem raises :exc:`ScriptLoadError`; nothing is
  half-loaded from a broken file.
- A missing file raises :exc:`FileNotFoundError`, as for any other loader.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from script_bridge.errors import ScriptLoadError
from script_bridge.events.declaration import TriggerDeclaration, parse_declaration

logger = logging.getLogger(__name__)

#: Container type that contributes event triggers.
WORLD_TYPE = "world"

_DETERMINE = "determine"


@dataclass(frozen=True)
class WorldScript:
    """One loaded ``type: world`` container.

    Attributes:
        name: Container name (top-level YAML key)
        path: File the container was read from
        debug: Whether the container's debug output is on
        declarations: Parsed triggers, in file order
    """

    name: str
    path: Path
    debug: bool
    declarations: tuple[TriggerDeclaration, ...]


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------


def _line(node: yaml.Node) -> int:
    return node.start_mark.line + 1


def _mapping_items(node: yaml.Node, what: str, path: Path) -> list[tuple[yaml.Node, yaml.Node]]:
    if not isinstance(node, yaml.MappingNode):
        raise ScriptLoadError(f"{path}:{_line(node)}: {what} must be a YAML mapping")
    return node.value


def _scalar(node: yaml.Node, what: str, path: Path) -> str:
    if not isinstance(node, yaml.ScalarNode):
        raise ScriptLoadError(f"{path}:{_line(node)}: {what} must be a plain value")
    return str(node.value)


def _entries(node: yaml.Node, event_line: str, path: Path) -> tuple[str, ...]:
    if isinstance(node, yaml.ScalarNode) and node.value in ("", "~", "null"):
        return ()
    if not isinstance(node, yaml.SequenceNode):
        raise ScriptLoadError(
            f"{path}:{_line(node)}: script for '{event_line}' must be a list of lines"
        )
    return tuple(_scalar(item, f"script line under '{event_line}'", path) for item in node.value)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _load_container(name: str, node: yaml.Node, path: Path) -> WorldScript | None:
    fields: dict[str, yaml.Node] = {}
    for key_node, value_node in _mapping_items(node, f"container '{name}'", path):
        fields[_scalar(key_node, "container key", path).lower()] = value_node

    type_node = fields.get("type")
    if type_node is None:
        raise ScriptLoadError(f"{path}:{_line(node)}: container '{name}' has no 'type'")
    container_type = _scalar(type_node, "type", path).lower()
    if container_type != WORLD_TYPE:
        logger.debug("Skipping %s container '%s' in %s", container_type, name, path)
        return None

    debug = True
    if "debug" in fields:
        debug = _scalar(fields["debug"], "debug", path).lower() in ("true", "yes", "on", "1")

    events_node = fields.get("events")
    if events_node is None:
        raise ScriptLoadError(f"{path}:{_line(node)}: world container '{name}' has no 'events'")

    declarations: list[TriggerDeclaration] = []
    seen: set[str] = set()
    for key_node, value_node in _mapping_items(events_node, f"'{name}' events", path):
        event_line = _scalar(key_node, "event line", path).strip()
        normalized = " ".join(event_line.lower().split())
        if normalized in seen:
            raise ScriptLoadError(
                f"{path}:{_line(key_node)}: event '{event_line}' declared twice in '{name}'"
            )
        seen.add(normalized)
        declarations.append(
            parse_declaration(
                event_line,
                script_name=name,
                line=_line(key_node),
                entries=_entries(value_node, event_line, path),
            )
        )

    return WorldScript(name=name, path=path, debug=debug, declarations=tuple(declarations))


def load_world_scripts(path: Path) -> list[WorldScript]:
    """Load every ``type: world`` container in the YAML file at *path*.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ScriptLoadError: On malformed YAML or a malformed container.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Script file not found: {path}")

    try:
        with path.open(encoding="utf-8") as fh:
            root = yaml.compose(fh, Loader=yaml.SafeLoader)
    except yaml.YAMLError as exc:
        raise ScriptLoadError(f"{path}: invalid YAML: {exc}") from exc

    if root is None:
        logger.debug("Empty script file %s", path)
        return []

    scripts: list[WorldScript] = []
    for key_node, value_node in _mapping_items(root, "script file", path):
        script = _load_container(_scalar(key_node, "container name", path), value_node, path)
        if script is not None:
            scripts.append(script)
    logger.debug("Loaded %d world script(s) from %s", len(scripts), path)
    return scripts


def load_scripts_dir(root: Path) -> list[WorldScript]:
    """Load every ``*.yaml`` / ``*.yml`` file under *root*, sorted by path.

    Container names must be unique across the directory.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Scripts directory not found: {root}")

    scripts: list[WorldScript] = []
    owners: dict[str, Path] = {}
    files = sorted(p for p in root.rglob("*") if p.suffix in (".yaml", ".yml") and p.is_file())
    for path in files:
        for script in load_world_scripts(path):
            if script.name in owners:
                raise ScriptLoadError(
                    f"{path}: container '{script.name}' already defined in {owners[script.name]}"
                )
            owners[script.name] = path
            scripts.append(script)
    logger.info("Loaded %d world script(s) from %s", len(scripts), root)
    return scripts


def iter_declarations(scripts: Iterable[WorldScript]) -> Iterator[TriggerDeclaration]:
    for script in scripts:
        yield from script.declarations


# ---------------------------------------------------------------------------
# Determine-only executor
# ---------------------------------------------------------------------------


def _unquote(text: str) -> str:
    """Strip one matching pair of surrounding quotes."""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text


def determine_executor(declaration: TriggerDeclaration, script: Any) -> str | None:
    """Run a declaration's script lines, honouring only ``determine``.

    Stands in for a full script engine when checking scripts or driving
    the bridge from tests: the first ``determine <value>`` line supplies the
    determination, with one pair of surrounding quotes removed, and any
    other line is logged and skipped.
    """
    for entry in declaration.entries:
        command, _, rest = entry.strip().partition(" ")
        if command.lower() == _DETERMINE:
            return _unquote(rest.strip()) or None
        logger.debug("[%s] no engine for script line '%s'", declaration.location, entry)
    return None
