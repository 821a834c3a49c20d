"""Local user accounts and their SSH key material."""

import pwd
import shutil
from pathlib import Path

from hostprov.core.config import Account
from hostprov.core.errors import AccountError
from hostprov.utils.output import Status, report
from hostprov.utils.process import run, run_as

# Key pairs generated for every account: (type, extra ssh-keygen args)
KEY_TYPES = [
    ("rsa", ["-b", "4096"]),
    ("ed25519", []),
]


def user_exists(name: str) -> bool:
    """Check if a local user exists."""
    return run(["id", "-u", name]).success


def user_groups(name: str) -> list[str]:
    """Get the groups a user belongs to."""
    result = run(["id", "-nG", name], check=True)
    return result.stdout.split()


class AccountManager:
    """Idempotent bootstrap of accounts under home_root."""

    def __init__(self, home_root: Path = Path("/home")):
        self.home_root = home_root

    def ssh_dir(self, account: Account) -> Path:
        return self.home_root / account.name / ".ssh"

    def _secure(self, path: Path, account: Account, mode: int) -> None:
        # Owned by the user and their primary group
        try:
            entry = pwd.getpwnam(account.name)
        except KeyError:
            raise AccountError(f"User {account.name} does not exist") from None
        shutil.chown(path, user=entry.pw_uid, group=entry.pw_gid)
        path.chmod(mode)

    def ensure_user(self, account: Account) -> bool:
        if user_exists(account.name):
            report(Status.PASS, f"User {account.name} already exists")
            return False
        report(Status.APPLY, f"Creating user {account.name} with a home directory and bash")
        run(["useradd", "-m", "-s", "/bin/bash", account.name], check=True)
        return True

    def ensure_groups(self, account: Account) -> bool:
        if not account.groups:
            return False
        current = user_groups(account.name)
        missing = [group for group in account.groups if group not in current]
        if not missing:
            groups = ", ".join(account.groups)
            report(Status.PASS, f"{account.name} is already a member of {groups}")
            return False
        report(Status.APPLY, f"Adding {account.name} to {', '.join(missing)}")
        run(["usermod", "-aG", ",".join(missing), account.name], check=True)
        return True

    def ensure_ssh_dir(self, account: Account) -> bool:
        """Create ~/.ssh and authorized_keys with owner-only permissions."""
        ssh_dir = self.ssh_dir(account)
        changed = False
        if not ssh_dir.is_dir():
            report(Status.APPLY, f"Creating and securing {ssh_dir}")
            ssh_dir.mkdir(parents=True, mode=0o700)
            changed = True
        self._secure(ssh_dir, account, 0o700)

        auth_keys = ssh_dir / "authorized_keys"
        if not auth_keys.exists():
            auth_keys.touch()
            changed = True
        self._secure(auth_keys, account, 0o600)
        return changed

    def ensure_keypairs(self, account: Account) -> list[str]:
        """Generate missing key pairs as the user; return their public keys."""
        ssh_dir = self.ssh_dir(account)
        public_keys = []
        for key_type, extra_args in KEY_TYPES:
            private = ssh_dir / f"id_{key_type}"
            public = ssh_dir / f"id_{key_type}.pub"
            if not public.exists():
                report(Status.APPLY, f"Generating {key_type} key for {account.name}")
                cmd = ["ssh-keygen", "-t", key_type] + extra_args
                run_as(account.name, cmd + ["-f", str(private), "-N", "", "-q"], check=True)
            public_keys.append(public.read_text().strip())
        return public_keys

    def ensure_authorized_keys(self, account: Account, keys: list[str]) -> bool:
        """Make sure every key is authorized; the file ends up sorted and unique."""
        auth_keys = self.ssh_dir(account) / "authorized_keys"
        existing = [line.strip() for line in auth_keys.read_text().splitlines() if line.strip()]
        wanted = sorted(set(existing) | {key.strip() for key in keys if key.strip()})
        if wanted == existing:
            report(Status.PASS, f"Keys for {account.name} already installed")
            return False

        added = len(set(wanted) - set(existing))
        if added:
            report(Status.APPLY, f"Adding {added} key(s) to {auth_keys}")
        auth_keys.write_text("\n".join(wanted) + "\n")
        self._secure(auth_keys, account, 0o600)
        return True

    def provision(self, account: Account) -> bool:
        """Bring one account to its declared state. Returns True if anything changed."""
        report(Status.CHECK, f"Processing user: {account.name}")
        changed = self.ensure_user(account)
        changed = self.ensure_groups(account) or changed
        changed = self.ensure_ssh_dir(account) or changed
        generated = self.ensure_keypairs(account)
        changed = self.ensure_authorized_keys(account, generated + account.keys) or changed
        report(Status.PASS, f"Keys for {account.name} verified and installed")
        return changed
