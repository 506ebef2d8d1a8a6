"""Builder actions: command classification, Text Labs session guards and element dispatch."""

from app.modules.builder.command_router import (
    CommandDestination,
    LAYOUT_SERVICE_COMMANDS,
    ELEMENTOR_COMMANDS,
    get_command_type,
    is_elementor_command,
)
from app.modules.builder.session_guard import SessionGuard, SessionGuardRegistry, SessionState

__all__ = [
    "CommandDestination",
    "LAYOUT_SERVICE_COMMANDS",
    "ELEMENTOR_COMMANDS",
    "get_command_type",
    "is_elementor_command",
    "SessionGuard",
    "SessionGuardRegistry",
    "SessionState",
]
