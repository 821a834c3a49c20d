"""Hosts mapping file model and atomic text file storage."""

import ipaddress
import os
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class HostsLine:
    """A single line of a hosts file.

    Entry lines have an IP and at least one hostname. Blank lines, comments
    and anything unparseable are kept verbatim with ``ip`` set to None.
    """

    raw: str
    ip: str | None = None
    names: list[str] = field(default_factory=list)
    comment: str = ""

    @classmethod
    def parse(cls, raw: str) -> "HostsLine":
        body, sep, comment = raw.partition("#")
        tokens = body.split()
        if len(tokens) < 2:
            return cls(raw=raw)
        return cls(raw=raw, ip=tokens[0], names=tokens[1:], comment=sep + comment if sep else "")

    @classmethod
    def entry(cls, ip: str, names: list[str], comment: str = "") -> "HostsLine":
        """Build an entry line in ``ip name...`` form."""
        raw = f"{ip} {' '.join(names)}"
        if comment:
            raw += f" {comment.strip()}"
        return cls(raw=raw, ip=ip, names=list(names), comment=comment)

    @property
    def is_entry(self) -> bool:
        return self.ip is not None


def ip_version(ip: str | None) -> int | None:
    """Address family (4 or 6) of ip, or None if it is not an address."""
    try:
        return ipaddress.ip_address(ip).version
    except ValueError:
        return None


def _rename(name: str, old: str, new: str) -> str:
    # A fully qualified name keeps its domain
    if name == old:
        return new
    if name.startswith(f"{old}."):
        return new + name[len(old) :]
    return name


class HostsFile:
    """In-memory view of a hosts file.

    Mutating methods return True when they changed anything so callers can
    skip the write entirely on a no-op.
    """

    def __init__(self, lines: list[HostsLine] | None = None):
        self.lines = lines or []

    @classmethod
    def parse(cls, text: str) -> "HostsFile":
        return cls([HostsLine.parse(raw) for raw in text.splitlines()])

    def render(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(line.raw for line in self.lines) + "\n"

    def entries_for(self, name: str, version: int | None = None) -> list[HostsLine]:
        """All entry lines that list name, optionally of one address family."""
        return [
            line
            for line in self.lines
            if name in line.names and (version is None or ip_version(line.ip) == version)
        ]

    def get(self, name: str) -> str | None:
        """IP of the first entry for name, or None."""
        entries = self.entries_for(name)
        return entries[0].ip if entries else None

    def set(self, name: str, ip: str) -> bool:
        """Map name to ip, keeping one logical entry per name.

        The first line naming the host is the rewrite target. If that line
        also carries other names they stay on it and the host moves to a
        new line right below. The name is dropped from any later lines.
        Only lines of the same address family as ip are considered, so an
        IPv4 update leaves the name on IPv6 lines alone.
        """
        version = ip_version(ip)
        new_lines: list[HostsLine] = []
        seen = False
        changed = False

        for line in self.lines:
            if name not in line.names or ip_version(line.ip) != version:
                new_lines.append(line)
                continue

            others = [n for n in line.names if n != name]
            if seen:
                # Duplicate
                changed = True
                if others:
                    new_lines.append(HostsLine.entry(line.ip, others, line.comment))
                continue

            seen = True
            if line.ip == ip:
                new_lines.append(line)
                continue

            changed = True
            if others:
                new_lines.append(HostsLine.entry(line.ip, others, line.comment))
                new_lines.append(HostsLine.entry(ip, [name]))
            else:
                new_lines.append(HostsLine.entry(ip, [name], line.comment))

        if not seen:
            new_lines.append(HostsLine.entry(ip, [name]))
            changed = True

        if changed:
            self.lines = new_lines
        return changed

    def remove(self, name: str) -> bool:
        """Drop name from every line; lines left without names are removed."""
        new_lines: list[HostsLine] = []
        changed = False
        for line in self.lines:
            if name not in line.names:
                new_lines.append(line)
                continue
            changed = True
            others = [n for n in line.names if n != name]
            if others:
                new_lines.append(HostsLine.entry(line.ip, others, line.comment))
        if changed:
            self.lines = new_lines
        return changed

    def rename_host(self, old: str, new: str) -> bool:
        """Replace the hostname old with new on every line.

        Matches whole names, plus fully qualified names whose first label is
        old (``old.localdomain`` becomes ``new.localdomain``).
        """
        changed = False
        for i, line in enumerate(self.lines):
            renamed = [_rename(n, old, new) for n in line.names]
            if renamed == line.names:
                continue
            names: list[str] = []
            for n in renamed:
                if n not in names:
                    names.append(n)
            self.lines[i] = HostsLine.entry(line.ip, names, line.comment)
            changed = True
        return changed

    def readdress(self, old_ip: str, new_ip: str) -> bool:
        """Move every entry for old_ip to new_ip."""
        changed = False
        for i, line in enumerate(self.lines):
            if line.ip == old_ip:
                self.lines[i] = HostsLine.entry(new_ip, line.names, line.comment)
                changed = True
        return changed


class AtomicTextFile:
    """A text file replaced atomically on every write.

    The new content goes to a temporary file in the same directory which is
    then renamed over the original, so readers never see a partial file.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def read(self) -> str:
        """Return the file content; a missing file reads as empty."""
        try:
            return self.path.read_text()
        except FileNotFoundError:
            return ""

    def write(self, text: str) -> None:
        try:
            mode = stat.S_IMODE(self.path.stat().st_mode)
        except FileNotFoundError:
            mode = 0o644

        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.tmp.",
            text=True,
        )
        try:
            with os.fdopen(temp_fd, "w") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(temp_path, mode)
            os.replace(temp_path, self.path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    def __repr__(self) -> str:
        return f"AtomicTextFile({str(self.path)!r})"
