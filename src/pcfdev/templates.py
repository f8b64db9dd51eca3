"""
Rendering of the files written into the guest during boot.

Each function is pure: it takes the values it needs and returns the file body.
"""

from dataclasses import dataclass

from pcfdev.address import subnet_for_ip

GUEST_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin:/usr/games:/usr/local/games"
LOOPBACK = "127.0.0.1"


@dataclass(frozen=True)
class ProxySettings:
    http_proxy: str
    https_proxy: str
    no_proxy: str


def network_interfaces(ip: str) -> str:
    """Body of /etc/network/interfaces with a static address on eth1."""
    return (
        "\n"
        "auto lo\n"
        "iface lo inet loopback\n"
        "\n"
        "auto eth0\n"
        "iface eth0 inet dhcp\n"
        "\n"
        "auto eth1\n"
        "iface eth1 inet static\n"
        f"address {ip}\n"
        "netmask 255.255.255.0"
    )


def proxy_settings(
    ip: str, domain: str, http_proxy: str = "", https_proxy: str = "", no_proxy: str = ""
) -> ProxySettings:
    """Derive the guest's proxy variables from the host's.

    A proxy on the host's loopback is unreachable from the guest, so the
    loopback address is rewritten to the subnet gateway.
    """
    gateway = subnet_for_ip(ip)
    entries = ["localhost", LOOPBACK, gateway, ip, domain, f".{domain}"]
    if no_proxy:
        entries.append(no_proxy)
    return ProxySettings(
        http_proxy=http_proxy.replace(LOOPBACK, gateway),
        https_proxy=https_proxy.replace(LOOPBACK, gateway),
        no_proxy=",".join(entries),
    )


def environment(settings: ProxySettings) -> str:
    """Body of /etc/environment. Unset proxies leave an empty line."""
    http = settings.http_proxy
    https = settings.https_proxy
    lines = [
        "",
        f"PATH={GUEST_PATH}",
        f"HTTP_PROXY={http}" if http else "",
        f"HTTPS_PROXY={https}" if https else "",
        f"NO_PROXY={settings.no_proxy}",
        f"http_proxy={http}" if http else "",
        f"https_proxy={https}" if https else "",
        f"no_proxy={settings.no_proxy}",
    ]
    return "\n".join(lines)


def tee_command(body: str, path: str) -> str:
    """Shell command writing ``body`` to ``path`` as root."""
    return f"echo -e '{body}' | sudo tee {path}"
