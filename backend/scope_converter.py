"""
DHCP Scope Converter
Turns a parsed ISC DHCP configuration into an ordered list of scope,
option and reservation commands for the destination DHCP server
"""

import logging
from dataclasses import dataclass, field
from typing import List, Dict, Tuple, Union

from address_utils import scope_range, ip_in_subnet
from dhcp_errors import InvalidAddressError
from dhcp_parser import DHCPConfig, DHCPSubnet, DHCPHost, parse_config

logger = logging.getLogger(__name__)

# Subnet option name -> DHCP option code. Anything else is not converted.
OPTION_CODE_MAP = {
    'domain-name-servers': 6,
    'routers': 3,
    'domain-name': 15,
    'domain-search': 119,
}

DOMAIN_SEARCH_OPTION_ID = 119


@dataclass(frozen=True)
class CreateScope:
    name: str
    start: str
    end: str
    mask: str

    def to_dict(self) -> Dict:
        return {
            'command': 'create_scope',
            'name': self.name,
            'start': self.start,
            'end': self.end,
            'mask': self.mask
        }


@dataclass(frozen=True)
class DefineOption:
    option_id: int
    name: str
    type: str

    def to_dict(self) -> Dict:
        return {
            'command': 'define_option',
            'option_id': self.option_id,
            'name': self.name,
            'type': self.type
        }


@dataclass(frozen=True)
class SetOptionValue:
    scope_id: str
    option_id: int
    values: Tuple[str, ...]

    def to_dict(self) -> Dict:
        return {
            'command': 'set_option_value',
            'scope_id': self.scope_id,
            'option_id': self.option_id,
            'values': list(self.values)
        }


@dataclass(frozen=True)
class CreateReservation:
    scope_id: str
    address: str
    client_id: str
    name: str
    description: str

    def to_dict(self) -> Dict:
        return {
            'command': 'create_reservation',
            'scope_id': self.scope_id,
            'address': self.address,
            'client_id': self.client_id,
            'name': self.name,
            'description': self.description
        }


Command = Union[CreateScope, DefineOption, SetOptionValue, CreateReservation]

DOMAIN_SEARCH_DEFINITION = DefineOption(DOMAIN_SEARCH_OPTION_ID, 'Domain Search List', 'String')


@dataclass
class ConversionResult:
    """Commands produced by one conversion run and the state it accumulated"""
    commands: List[Command] = field(default_factory=list)
    option_119_defined: bool = False
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def to_dict(self) -> Dict:
        return {
            'commands': [c.to_dict() for c in self.commands],
            'option_119_defined': self.option_119_defined,
            'warnings': list(self.warnings)
        }


def split_option_value(raw_value: str) -> List[str]:
    """Strip quotes and semicolons from a raw option value and split on commas"""
    cleaned = raw_value.replace('"', '').replace(';', '')
    return [part.strip() for part in cleaned.split(',')]


def format_client_id(mac: str) -> str:
    """MAC address without delimiters, uppercased"""
    return mac.replace(':', '').replace('-', '').upper()


def _scope_commands(subnet: DHCPSubnet, result: ConversionResult) -> None:
    ranges = [(r.start, r.end) for r in subnet.ranges]
    try:
        start, end = scope_range(subnet.network, subnet.netmask, ranges, subnet.line_number)
    except InvalidAddressError as e:
        if e.line_number is not None:
            raise
        raise InvalidAddressError(e.message, subnet.line_number) from e

    if len(ranges) > 1:
        declared = ', '.join(f"{first}-{last}" for first, last in ranges)
        result.warn(f"Subnet {subnet.network} declares {len(ranges)} ranges ({declared}); "
                    f"scope is created as the single range {start}-{end}, gaps included")

    for range_start, range_end in ranges:
        for address in (range_start, range_end):
            if not ip_in_subnet(address, subnet.network, subnet.netmask):
                result.warn(f"Range address {address} is outside subnet "
                            f"{subnet.network}/{subnet.netmask}")

    result.commands.append(CreateScope(
        name=subnet.shared_network,
        start=start,
        end=end,
        mask=subnet.netmask
    ))


def _option_commands(subnet: DHCPSubnet, result: ConversionResult) -> None:
    for option_name, raw_value in subnet.options.items():
        option_id = OPTION_CODE_MAP.get(option_name)
        if option_id is None:
            logger.info(f"Dropping unmapped option {option_name} on subnet {subnet.network}")
            result.warnings.append(f"Option {option_name} on subnet {subnet.network} has no mapping and was dropped")
            continue

        if option_id == DOMAIN_SEARCH_OPTION_ID and not result.option_119_defined:
            result.commands.append(DOMAIN_SEARCH_DEFINITION)
            result.option_119_defined = True

        result.commands.append(SetOptionValue(
            scope_id=subnet.network,
            option_id=option_id,
            values=tuple(split_option_value(raw_value))
        ))


def _reservation_command(subnet: DHCPSubnet, host: DHCPHost) -> CreateReservation:
    return CreateReservation(
        scope_id=subnet.network,
        address=host.fixed_address,
        client_id=format_client_id(host.hardware_ethernet),
        name=host.name,
        description=host.name
    )


def synthesize_commands(config: DHCPConfig) -> ConversionResult:
    """
    Walk the parsed configuration and build the ordered command list

    Subnets are visited in discovery order. Each yields its scope, then its
    mapped options, then its host reservations. Global settings, option
    spaces, option definitions and classes produce no commands.

    Raises:
        InvalidNetmaskError: If a subnet netmask is not contiguous
        InvalidAddressError: If a subnet or range address is malformed
    """
    result = ConversionResult()

    for subnet in config.subnets:
        _scope_commands(subnet, result)
        _option_commands(subnet, result)
        for host in subnet.hosts:
            if not host.fixed_address or not host.hardware_ethernet:
                result.warn(f"Host {host.name} in subnet {subnet.network} is missing "
                            f"fixed-address or hardware ethernet")
            result.commands.append(_reservation_command(subnet, host))

    logger.info(f"Synthesized {len(result.commands)} commands from {len(config.subnets)} subnets")
    return result


def convert_config(content: str) -> ConversionResult:
    """Parse configuration text and convert it in one run"""
    return synthesize_commands(parse_config(content))
