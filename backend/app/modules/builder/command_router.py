"""
Element command routing.

The builder UI emits named actions ("insertImage", "generateChartData", ...).
Each name belongs to exactly one destination:

- layout-service: the Layout Service applies it to the presentation directly
- elementor: Elementor generates the content and injects it into the
  presentation itself, so the caller only needs to refresh its view

Usage:
    destination = get_command_type("insertImage")   # CommandDestination.LAYOUT_SERVICE
    if is_elementor_command(action):
        ...
"""

from enum import Enum
from typing import FrozenSet

from app.services.elementor_client import ELEMENTOR_ENDPOINTS


class CommandDestination(str, Enum):
    LAYOUT_SERVICE = "layout-service"
    ELEMENTOR = "elementor"
    UNKNOWN = "unknown"


LAYOUT_SERVICE_COMMANDS: FrozenSet[str] = frozenset([
    # Element insertion
    "insertImage",
    "insertChart",
    "insertInfographic",
    "insertDiagram",
    "insertTextBox",
    "insertTable",
    "insertShape",
    # Content updates
    "updateImageSource",
    "updateChartConfig",
    "setChartHtml",
    "updateInfographicContent",
    "updateDiagramSvg",
    "updateDiagramMermaid",
    # Deletion
    "deleteElement",
    "deleteTextBox",
    # Chart / table / diagram
    "setChartType",
    "setChartColors",
    "resizeTable",
    "setTableHeaderStyle",
    "setDiagramTheme",
    # Arrange
    "bringToFront",
    "sendToBack",
    "bringForward",
    "sendBackward",
    "resizeElement",
    "positionElement",
    "rotateElement",
    "flipElement",
    "lockElement",
    "groupElements",
    "ungroupElements",
    "alignElement",
])

ELEMENTOR_COMMANDS: FrozenSet[str] = frozenset(ELEMENTOR_ENDPOINTS)


def _check_disjoint(layout: FrozenSet[str], elementor: FrozenSet[str]) -> None:
    overlap = layout & elementor
    if overlap:
        raise ValueError(
            f"Commands routed to both layout-service and elementor: {', '.join(sorted(overlap))}"
        )


_check_disjoint(LAYOUT_SERVICE_COMMANDS, ELEMENTOR_COMMANDS)


def get_command_type(action: str) -> CommandDestination:
    """Classify an action name. Unrecognized names map to UNKNOWN, never an error."""
    if action in LAYOUT_SERVICE_COMMANDS:
        return CommandDestination.LAYOUT_SERVICE
    if action in ELEMENTOR_COMMANDS:
        return CommandDestination.ELEMENTOR
    return CommandDestination.UNKNOWN


def is_elementor_command(action: str) -> bool:
    """True when the result is injected server-side and only a view refresh follows."""
    return get_command_type(action) is CommandDestination.ELEMENTOR
