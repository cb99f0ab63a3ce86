"""
PowerShell Renderer
Renders converter commands as Windows DHCP Server cmdlet invocations
"""

import logging
from typing import List

from scope_converter import Command, CreateScope, DefineOption, SetOptionValue, CreateReservation

logger = logging.getLogger(__name__)


def quote(value) -> str:
    """Single-quoted PowerShell literal; embedded quotes are doubled"""
    return "'" + str(value).replace("'", "''") + "'"


def render_values(values) -> str:
    return "(@(" + ','.join(quote(v) for v in values) + "))"


def render_command(command: Command) -> str:
    """Render one command as a PowerShell line"""
    if isinstance(command, CreateScope):
        return (f"Add-DhcpServerv4Scope -Name {quote(command.name)} "
                f"-StartRange {quote(command.start)} -EndRange {quote(command.end)} "
                f"-SubnetMask {quote(command.mask)}")

    if isinstance(command, DefineOption):
        return (f"Add-DhcpServerv4OptionDefinition -OptionId {command.option_id} "
                f"-Name {quote(command.name)} -Type {command.type}")

    if isinstance(command, SetOptionValue):
        return (f"Set-DhcpServerv4OptionValue -ScopeId {quote(command.scope_id)} "
                f"-OptionId {command.option_id} -Value {render_values(command.values)}")

    if isinstance(command, CreateReservation):
        return (f"Add-DhcpServerv4Reservation -ScopeId {quote(command.scope_id)} "
                f"-IPAddress {quote(command.address)} -ClientId {quote(command.client_id)} "
                f"-Name {quote(command.name)} -Description {quote(command.description)}")

    raise TypeError(f"Unsupported command type: {type(command).__name__}")


def render_script(commands: List[Command]) -> str:
    """Render all commands, one per line"""
    lines = [render_command(c) for c in commands]
    logger.debug(f"Rendered {len(lines)} PowerShell commands")
    return ''.join(line + '\n' for line in lines)
