"""
Errors raised while parsing and converting ISC DHCP configuration
"""


class DHCPConfigError(ValueError):
    """Base class for structural faults in a DHCP configuration"""

    def __init__(self, message: str, line_number: int = None):
        self.message = message
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)


class UnterminatedBlockError(DHCPConfigError):
    """A brace-opened block never closes before the input ends"""


class InvalidNetmaskError(DHCPConfigError):
    """A netmask is not a contiguous-ones bitmask"""


class InvalidAddressError(DHCPConfigError):
    """An address is not a valid IPv4 dotted quad"""
