import textwrap

import pytest

OFFICE_CONFIG = textwrap.dedent("""\
    shared-network "Office" {
        subnet 10.0.0.0 netmask 255.255.255.0 {
            range 10.0.0.10 10.0.0.200;
            option domain-name-servers "8.8.8.8","1.1.1.1";
            host "pc1" {
                hardware ethernet 00:11:22:33:44:55;
                fixed-address 10.0.0.50;
            }
        }
    }
    """)

FULL_CONFIG = textwrap.dedent("""\
    # dhcpd.conf
    ddns-update-style none;
    authoritative;
    default-lease-time 600;
    max-lease-time 7200;
    option domain-name "corp.local";

    option space pxelinux;
    option pxelinux.magic code 208 = string;
    option pxelinux.pathprefix code 210 = text;

    class "voip" {
        match if substring (option vendor-class-identifier, 0, 4) = "Pol";
    }

    shared-network CAMPUS {
        subnet 192.168.10.0 netmask 255.255.255.0 {
            range 192.168.10.100 192.168.10.199;
            option routers 192.168.10.1;
            option domain-search "corp.local", "lab.corp.local";
            option ntp-servers 192.168.10.5;
        }

        subnet 192.168.20.0 netmask 255.255.254.0 {
            option routers 192.168.20.1;
            option domain-search "corp.local";
            host printer {
                hardware ethernet aa-bb-cc-dd-ee-ff;
                fixed-address 192.168.20.10;
            }
        }
    }

    shared-network "Empty" {
    }
    """)


@pytest.fixture
def office_config():
    return OFFICE_CONFIG


@pytest.fixture
def full_config():
    return FULL_CONFIG
