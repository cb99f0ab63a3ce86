"""
DHCP Configuration Parser
Builds a structured model from ISC DHCP Server configuration text
"""

import re
import logging
from dataclasses import dataclass, field
from typing import List, Dict, Tuple

from dhcp_errors import UnterminatedBlockError

logger = logging.getLogger(__name__)

LINE_BREAK_RE = re.compile(r'\r\n|\r|\n')


@dataclass
class DHCPHost:
    """Represents a DHCP host reservation"""
    name: str
    fixed_address: str = ""
    hardware_ethernet: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            'name': self.name,
            'fixed_address': self.fixed_address,
            'hardware_ethernet': self.hardware_ethernet
        }


@dataclass
class DHCPRange:
    """Represents a dynamic address range inside a subnet"""
    start: str
    end: str

    def to_dict(self) -> Dict[str, str]:
        return {'start': self.start, 'end': self.end}


@dataclass
class DHCPSubnet:
    """Represents a DHCP subnet declaration"""
    network: str
    netmask: str
    shared_network: str
    ranges: List[DHCPRange] = field(default_factory=list)
    options: Dict[str, str] = field(default_factory=dict)
    hosts: List[DHCPHost] = field(default_factory=list)
    line_number: int = None

    def to_dict(self) -> Dict:
        return {
            'network': self.network,
            'netmask': self.netmask,
            'shared_network': self.shared_network,
            'ranges': [r.to_dict() for r in self.ranges],
            'options': dict(self.options),
            'hosts': [h.to_dict() for h in self.hosts],
            'line_number': self.line_number
        }


@dataclass
class DHCPSharedNetwork:
    """Represents a shared-network declaration and the subnets it owns"""
    name: str
    subnets: List[DHCPSubnet] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'subnets': [s.to_dict() for s in self.subnets]
        }


@dataclass
class DHCPOptionDefinition:
    """Represents an `option <space>.<name> code <n> = <type>;` declaration"""
    space: str
    name: str
    code: int
    type: str

    def to_dict(self) -> Dict:
        return {
            'space': self.space,
            'name': self.name,
            'code': self.code,
            'type': self.type
        }


@dataclass
class DHCPConfig:
    """Everything recovered from a single configuration file"""
    global_settings: Dict[str, str] = field(default_factory=dict)
    option_spaces: List[str] = field(default_factory=list)
    option_definitions: List[DHCPOptionDefinition] = field(default_factory=list)
    classes: Dict[str, str] = field(default_factory=dict)
    shared_networks: List[DHCPSharedNetwork] = field(default_factory=list)

    @property
    def subnets(self) -> List[DHCPSubnet]:
        """All subnets in file order, each tagged with its shared-network name"""
        return [subnet for network in self.shared_networks for subnet in network.subnets]

    def to_dict(self) -> Dict:
        return {
            'global_settings': dict(self.global_settings),
            'option_spaces': list(self.option_spaces),
            'option_definitions': [d.to_dict() for d in self.option_definitions],
            'classes': dict(self.classes),
            'shared_networks': [n.to_dict() for n in self.shared_networks]
        }


def scan_lines(content: str) -> List[str]:
    """Split configuration text on CR, LF or CRLF"""
    return LINE_BREAK_RE.split(content)


def is_skippable(line: str) -> bool:
    """Blank lines and comment lines carry no directives"""
    stripped = line.strip()
    return not stripped or stripped.startswith('#')


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def extract_block(lines: List[str], start_index: int, initial_depth: int = 1,
                  line_offset: int = 0) -> Tuple[str, int]:
    """
    Consume lines until the brace block opened before start_index closes

    Each line raises the depth once if it contains '{' and lowers it once if
    it contains '}'. Lines are collected verbatim, the closing line included.

    Args:
        lines: Lines being scanned
        start_index: First line after the block header
        initial_depth: Depth already open when scanning starts
        line_offset: Position of lines[0] in the original input, for errors

    Returns:
        Tuple of (block text, index of the line after the closing line)

    Raises:
        UnterminatedBlockError: If the input ends before depth returns to 0
    """
    if initial_depth < 1:
        raise ValueError(f"initial_depth must be at least 1, got {initial_depth}")

    depth = initial_depth
    collected = []
    i = start_index

    while i < len(lines):
        line = lines[i]
        if '{' in line:
            depth += 1
        if '}' in line:
            depth -= 1
        collected.append(line + '\n')
        i += 1

        if depth == 0:
            return ''.join(collected), i

    # start_index is the 0-based index after the header, i.e. its 1-based line
    header_line = line_offset + start_index
    raise UnterminatedBlockError("Block is never closed", header_line)


# Subnet and host level grammar
SUBNET_RE = re.compile(r'^subnet\s+(\d+\.\d+\.\d+\.\d+)\s+netmask\s+(\d+\.\d+\.\d+\.\d+)\s*\{')
SUBNET_OPTION_RE = re.compile(r'^option\s+(\S+)\s+(.*);')
RANGE_RE = re.compile(r'^range\s+(\d+\.\d+\.\d+\.\d+)\s+(\d+\.\d+\.\d+\.\d+)\s*;')
HOST_RE = re.compile(r'^host\s+(\S+)\s*\{')
FIXED_ADDRESS_RE = re.compile(r'^fixed-address\s+(\S+)\s*;')
HARDWARE_ETHERNET_RE = re.compile(r'^hardware\s+ethernet\s+(\S+)\s*;')

OUTSIDE_SUBNET = 'outside_subnet'
INSIDE_SUBNET = 'inside_subnet'


def parse_host_block(name: str, lines: List[str], start_index: int,
                     line_offset: int = 0) -> Tuple[DHCPHost, int]:
    """Parse a host body starting after its header line"""
    body, next_index = extract_block(lines, start_index, line_offset=line_offset)
    host = DHCPHost(name=_unquote(name))

    for line in scan_lines(body):
        stripped = line.strip()

        # Closing lines end (nested) blocks and never hold fields
        if '}' in stripped:
            continue

        match = FIXED_ADDRESS_RE.match(stripped)
        if match:
            host.fixed_address = match.group(1)
            continue

        match = HARDWARE_ETHERNET_RE.match(stripped)
        if match:
            host.hardware_ethernet = match.group(1)

    if not host.fixed_address and not host.hardware_ethernet:
        logger.debug(f"Host {host.name} declares neither fixed-address nor hardware ethernet")

    return host, next_index


def parse_shared_network(name: str, content: str, line_offset: int = 0) -> List[DHCPSubnet]:
    """
    Parse the subnets declared inside one shared-network body

    Args:
        name: Shared-network name every subnet is tagged with
        content: Body text of the shared-network block
        line_offset: Number of input lines before the body, for line numbers

    Returns:
        Subnets in declaration order
    """
    lines = scan_lines(content)
    subnets = []
    current = None
    state = OUTSIDE_SUBNET
    i = 0

    while i < len(lines):
        line = lines[i].strip()

        # Skip empty lines and comments
        if is_skippable(line):
            i += 1
            continue

        if state == OUTSIDE_SUBNET:
            match = SUBNET_RE.match(line)
            if match:
                current = DHCPSubnet(
                    network=match.group(1),
                    netmask=match.group(2),
                    shared_network=name,
                    line_number=line_offset + i + 1
                )
                state = INSIDE_SUBNET
            i += 1
            continue

        match = SUBNET_OPTION_RE.match(line)
        if match:
            current.options[match.group(1)] = match.group(2).strip()
            i += 1
            continue

        match = RANGE_RE.match(line)
        if match:
            current.ranges.append(DHCPRange(match.group(1), match.group(2)))
            i += 1
            continue

        match = HOST_RE.match(line)
        if match:
            host, i = parse_host_block(match.group(1), lines, i + 1, line_offset)
            current.hosts.append(host)
            continue

        if '}' in line:
            subnets.append(current)
            current = None
            state = OUTSIDE_SUBNET

        i += 1

    # An unclosed subnet is still emitted rather than dropped
    if current is not None:
        logger.warning(f"Subnet {current.network} in shared-network {name} "
                       f"(line {current.line_number}) is not closed; keeping it")
        subnets.append(current)

    logger.debug(f"Parsed {len(subnets)} subnets in shared-network {name}")
    return subnets


class DHCPConfigParser:
    """Parser for ISC DHCP Server configuration text"""

    OPTION_SPACE_RE = re.compile(r'^option\s+space\s+(\w+);')
    OPTION_DEFINITION_RE = re.compile(r'^option\s+(\S+)\.(\S+)\s+code\s+(\d+)\s*=\s*(.*);')
    CLASS_RE = re.compile(r'^class\s+"([^"]+)"\s*\{')
    GLOBAL_SETTING_RE = re.compile(
        r'^(ddns-update-style|authoritative|default-lease-time|max-lease-time|option\s+\S+)(?:\s+(.*))?;')
    SHARED_NETWORK_RE = re.compile(r'^shared-network\s+(?:"([^"]+)"|(\S+?))\s*\{')

    # Tried in order, first match wins; option definitions must precede
    # global settings since both start with `option`
    GRAMMAR_RULES = [
        (OPTION_SPACE_RE, '_handle_option_space'),
        (OPTION_DEFINITION_RE, '_handle_option_definition'),
        (CLASS_RE, '_handle_class'),
        (GLOBAL_SETTING_RE, '_handle_global_setting'),
        (SHARED_NETWORK_RE, '_handle_shared_network'),
    ]

    def parse(self, content: str) -> DHCPConfig:
        """Parse configuration text into a DHCPConfig"""
        lines = scan_lines(content)
        config = DHCPConfig()
        logger.debug(f"Parsing DHCP configuration: {len(lines)} lines")

        i = 0
        while i < len(lines):
            line = lines[i].strip()

            # Skip empty lines and comments
            if is_skippable(line):
                i += 1
                continue

            i = self._match_line(config, line, lines, i)

        logger.info(f"Parsed DHCP configuration: {len(config.shared_networks)} shared-networks, "
                    f"{len(config.subnets)} subnets, {len(config.option_definitions)} option definitions, "
                    f"{len(config.classes)} classes")
        return config

    def _match_line(self, config: DHCPConfig, line: str, lines: List[str], index: int) -> int:
        """Apply the first matching grammar rule, returning the next line index"""
        for pattern, handler_name in self.GRAMMAR_RULES:
            match = pattern.match(line)
            if match:
                return getattr(self, handler_name)(config, match, lines, index)

        if SUBNET_RE.match(line):
            logger.warning(f"Subnet on line {index + 1} is outside any shared-network and will not be converted")

        return index + 1

    def _handle_option_space(self, config, match, lines, index):
        space = match.group(1)
        if space not in config.option_spaces:
            config.option_spaces.append(space)
        return index + 1

    def _handle_option_definition(self, config, match, lines, index):
        config.option_definitions.append(DHCPOptionDefinition(
            space=match.group(1),
            name=match.group(2),
            code=int(match.group(3)),
            type=match.group(4).strip()
        ))
        return index + 1

    def _handle_class(self, config, match, lines, index):
        body, next_index = extract_block(lines, index + 1)
        config.classes[match.group(1)] = body
        return next_index

    def _handle_global_setting(self, config, match, lines, index):
        key = ' '.join(match.group(1).split())
        config.global_settings[key] = (match.group(2) or '').strip()
        return index + 1

    def _handle_shared_network(self, config, match, lines, index):
        name = match.group(1) or match.group(2)
        body, next_index = extract_block(lines, index + 1)
        subnets = parse_shared_network(name, body, line_offset=index + 1)
        config.shared_networks.append(DHCPSharedNetwork(name, subnets))
        return next_index


def parse_config(content: str) -> DHCPConfig:
    """Parse configuration text with a fresh parser"""
    return DHCPConfigParser().parse(content)
