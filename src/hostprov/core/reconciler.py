"""Host state reconciliation: hostname, primary IP and hosts entries.

Each operation compares the observed state with the requested one and
changes only what differs, so every call is safe to repeat. Operations
return True when they changed something and False when the target was
already satisfied; failures raise ReconcileError subclasses.

The hosts file is read, modified and written within each call and never
held across calls.
"""

from pathlib import Path

from hostprov.core import netplan
from hostprov.core.config import Settings, require_hostname, require_ipv4
from hostprov.core.errors import NetworkConfigError, NetworkConfigNotFoundError, ReconcileError
from hostprov.core.hosts_file import AtomicTextFile, HostsFile
from hostprov.core.system import System
from hostprov.utils.output import Status, report


class Reconciler:
    """Converges one host towards a declared network identity.

    Args:
        system: Live system adapter (hostname, primary IP, network apply)
        hosts_file: Text file holding the hosts mapping
        hostname_file: Text file holding the persisted hostname
        netplan_dir: Directory searched for the static network config
    """

    def __init__(
        self,
        system: System,
        hosts_file: AtomicTextFile,
        hostname_file: AtomicTextFile,
        netplan_dir: Path,
    ):
        self.system = system
        self.hosts_file = hosts_file
        self.hostname_file = hostname_file
        self.netplan_dir = netplan_dir

    @classmethod
    def from_settings(cls, settings: Settings) -> "Reconciler":
        return cls(
            system=System(),
            hosts_file=AtomicTextFile(settings.hosts_file),
            hostname_file=AtomicTextFile(settings.hostname_file),
            netplan_dir=settings.netplan_dir,
        )

    def _edit_hosts(self, edit) -> bool:
        """Apply edit to the parsed hosts file, writing only if it changed."""
        hosts = HostsFile.parse(self.hosts_file.read())
        changed = edit(hosts)
        if changed:
            self.hosts_file.write(hosts.render())
        return changed

    def set_hostname(self, target_name: str) -> bool:
        """Set the hostname and carry it over in the hosts file."""
        require_hostname(target_name)
        current_name = self.system.get_hostname()
        report(Status.CHECK, f"Current hostname is {current_name}")

        if current_name == target_name:
            report(Status.PASS, f"Hostname is already {target_name}")
            return False

        report(Status.APPLY, f"Changing hostname from {current_name} to {target_name}")
        # Nothing is written if the running hostname could not be changed
        self.system.set_hostname(target_name)
        self.hostname_file.write(f"{target_name}\n")
        if self._edit_hosts(lambda hosts: hosts.rename_host(current_name, target_name)):
            report(
                Status.APPLY, f"Renamed {current_name} to {target_name} in {self.hosts_file.path}"
            )

        report(Status.PASS, f"Hostname changed from {current_name} to {target_name}")
        return True

    def set_primary_ip(self, target_ip: str) -> bool:
        """Move the host's primary address to target_ip.

        Raises:
            NetworkConfigNotFoundError: If no netplan file declares addresses.
            NetworkConfigError: If the netplan file does not mention the
                current address.
            CommandError: If the address query or netplan apply fails.
        """
        target_ip = require_ipv4(target_ip)
        current_ip = self.system.get_primary_ip()
        report(Status.CHECK, f"Current primary IP is {current_ip or 'unassigned'}")

        if current_ip == target_ip:
            report(Status.PASS, f"IP Address is already {target_ip}")
            return False
        if current_ip is None:
            raise ReconcileError("Could not determine the current primary IP address")

        config_path = netplan.find_static_config(self.netplan_dir, current_ip)
        if config_path is None:
            raise NetworkConfigNotFoundError(
                f"Could not find a netplan file declaring addresses in {self.netplan_dir}"
            )

        config_file = AtomicTextFile(config_path)
        config_text = config_file.read()
        if not netplan.contains_address(config_text, current_ip):
            raise NetworkConfigError(
                f"{config_path} does not declare the current address {current_ip}"
            )

        report(Status.APPLY, f"Changing IP address from {current_ip} to {target_ip}")
        if self._edit_hosts(lambda hosts: hosts.readdress(current_ip, target_ip)):
            report(Status.APPLY, f"Updated {current_ip} to {target_ip} in {self.hosts_file.path}")

        config_file.write(netplan.replace_address(config_text, current_ip, target_ip))
        report(Status.APPLY, f"Updated {config_path}, applying network configuration")
        self.system.apply_network()

        report(Status.PASS, f"IP Address changed from {current_ip} to {target_ip}")
        return True

    def upsert_host_entry(self, name: str, ip: str) -> bool:
        """Make name resolve to ip in the hosts file."""
        require_hostname(name)
        ip = require_ipv4(ip)

        hosts = HostsFile.parse(self.hosts_file.read())
        entries = hosts.entries_for(name, version=4)
        if len(entries) == 1 and entries[0].ip == ip:
            report(Status.PASS, f"Host entry for {name} is already correct ({ip})")
            return False

        hosts.set(name, ip)
        self.hosts_file.write(hosts.render())
        if not entries:
            report(Status.APPLY, f"Added host entry: {name} at {ip}")
        else:
            report(Status.APPLY, f"Updated host entry for {name} to {ip}")
        return True

