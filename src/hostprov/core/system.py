"""Live system queries and the OS commands that change them."""

import ipaddress
import socket

from hostprov.utils.process import run


class System:
    """Adapter over the running host.

    Every method that changes state raises CommandError when the
    underlying tool fails.
    """

    def get_hostname(self) -> str:
        """Get the current (transient) hostname."""
        return socket.gethostname()

    def set_hostname(self, name: str) -> None:
        """Set the transient and static hostname via hostnamectl."""
        run(["hostnamectl", "set-hostname", name], check=True)

    def get_primary_ip(self) -> str | None:
        """Get the first non-loopback IPv4 address, or None."""
        result = run(["hostname", "-I"], check=True)
        for token in result.stdout.split():
            try:
                address = ipaddress.ip_address(token)
            except ValueError:
                continue
            if address.version == 4 and not address.is_loopback:
                return str(address)
        return None

    def apply_network(self) -> None:
        """Apply the netplan configuration."""
        run(["netplan", "apply"], check=True, timeout=120)
