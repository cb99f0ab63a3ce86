"""
IPv4 Address Arithmetic
Dotted-quad conversion, netmask/CIDR handling and scope range computation
"""

import logging
from typing import List, Tuple

from dhcp_errors import InvalidAddressError, InvalidNetmaskError

logger = logging.getLogger(__name__)

ALL_ONES = 0xFFFFFFFF


def is_valid_ip_address(ip: str) -> bool:
    """Validate IP address format"""
    parts = ip.split('.')
    if len(parts) != 4:
        return False
    try:
        return all(part.isdigit() and 0 <= int(part) <= 255 for part in parts)
    except ValueError:
        return False


def ip_to_int(ip: str) -> int:
    """Convert a dotted-quad address to its 32-bit unsigned integer form"""
    if not is_valid_ip_address(ip):
        raise InvalidAddressError(f"Invalid IPv4 address: {ip}")
    value = 0
    for part in ip.split('.'):
        value = (value << 8) | int(part)
    return value


def int_to_ip(value: int) -> str:
    """Convert a 32-bit unsigned integer to dotted-quad form"""
    if not 0 <= value <= ALL_ONES:
        raise InvalidAddressError(f"Address out of IPv4 range: {value}")
    return '.'.join(str((value >> shift) & 0xFF) for shift in (24, 16, 8, 0))


def is_valid_netmask(netmask: str) -> bool:
    """Check for contiguous 1s followed by 0s"""
    if not is_valid_ip_address(netmask):
        return False
    # (mask XOR all-ones) + 1 is the subnet size, which must be a power of two
    host_bits = (ip_to_int(netmask) ^ ALL_ONES) + 1
    return host_bits & (host_bits - 1) == 0


def netmask_to_cidr(netmask: str, line_number: int = None) -> int:
    """
    Convert a dotted-quad netmask to a CIDR prefix length

    Args:
        netmask: Netmask such as 255.255.255.0
        line_number: Line of the declaring subnet, reported on failure

    Returns:
        Prefix length 0-32

    Raises:
        InvalidNetmaskError: If the mask is not a contiguous-ones bitmask
    """
    if not is_valid_ip_address(netmask):
        raise InvalidNetmaskError(f"Invalid netmask: {netmask}", line_number)
    if not is_valid_netmask(netmask):
        raise InvalidNetmaskError(
            f"Netmask {netmask} is not a contiguous bitmask", line_number)

    host_bits = (ip_to_int(netmask) ^ ALL_ONES) + 1
    return 32 - (host_bits.bit_length() - 1)


def ip_in_subnet(ip: str, network: str, netmask: str) -> bool:
    """Check if an IP address is within a subnet"""
    try:
        mask = ip_to_int(netmask)
        return (ip_to_int(ip) & mask) == (ip_to_int(network) & mask)
    except InvalidAddressError:
        return False


def usable_range(network: str, netmask: str, line_number: int = None) -> Tuple[str, str]:
    """First and last usable host address of a subnet"""
    cidr = netmask_to_cidr(netmask, line_number)
    network_long = ip_to_int(network)
    subnet_size = 2 ** (32 - cidr)
    first_usable = network_long + 1
    last_usable = network_long + subnet_size - 2
    return int_to_ip(first_usable & ALL_ONES), int_to_ip(last_usable & ALL_ONES)


def scope_range(network: str, netmask: str, ranges: List[Tuple[str, str]],
                line_number: int = None) -> Tuple[str, str]:
    """
    Compute the single contiguous range a destination scope is created with

    When ranges are declared the result spans the lowest start to the highest
    end across all of them, gaps included. Without ranges the whole usable
    host range of the subnet is returned.
    """
    # Always validate the mask, even when declared ranges decide the result
    first_usable, last_usable = usable_range(network, netmask, line_number)

    if not ranges:
        return first_usable, last_usable

    starts = [ip_to_int(start) for start, _ in ranges]
    ends = [ip_to_int(end) for _, end in ranges]
    return int_to_ip(min(starts)), int_to_ip(max(ends))
