"""Tests for netplan file lookup and address rewriting."""

from pathlib import Path

from hostprov.core.netplan import (
    contains_address,
    declares_addresses,
    find_static_config,
    replace_address,
)

DHCP = """network:
  version: 2
  ethernets:
    eth0:
      dhcp4: true
"""

STATIC = """network:
  version: 2
  ethernets:
    eth1:
      addresses:
        - 192.168.16.21/24
"""


class TestDeclaresAddresses:
    def test_nested_addresses(self):
        document = {"network": {"ethernets": {"eth0": {"addresses": ["10.0.0.1/24"]}}}}
        assert declares_addresses(document)

    def test_empty_addresses_do_not_count(self):
        assert not declares_addresses({"network": {"ethernets": {"eth0": {"addresses": []}}}})

    def test_scalar_document(self):
        assert not declares_addresses("just text")


class TestReplaceAddress:
    def test_keeps_prefix_length(self):
        assert replace_address("addresses: [192.168.16.21/24]", "192.168.16.21", "10.0.0.3") == (
            "addresses: [10.0.0.3/24]"
        )

    def test_does_not_touch_longer_addresses(self):
        text = "- 192.168.16.3/24\n- 192.168.16.30/24\n- 10.192.168.16.3\n"
        assert replace_address(text, "192.168.16.3", "10.0.0.3") == (
            "- 10.0.0.3/24\n- 192.168.16.30/24\n- 10.192.168.16.3\n"
        )

    def test_contains_address(self):
        assert contains_address("via: 192.168.16.2", "192.168.16.2")
        assert not contains_address("via: 192.168.16.254", "192.168.16.2")


class TestFindStaticConfig:
    def test_missing_directory(self, tmp_path: Path):
        assert find_static_config(tmp_path / "nope") is None

    def test_no_static_file(self, tmp_path: Path):
        (tmp_path / "01-dhcp.yaml").write_text(DHCP)
        assert find_static_config(tmp_path) is None

    def test_finds_static_file(self, tmp_path: Path):
        (tmp_path / "01-dhcp.yaml").write_text(DHCP)
        (tmp_path / "50-static.yaml").write_text(STATIC)
        assert find_static_config(tmp_path) == tmp_path / "50-static.yaml"

    def test_prefers_file_with_current_ip(self, tmp_path: Path):
        (tmp_path / "10-other.yaml").write_text(STATIC.replace("192.168.16.21", "10.9.9.9"))
        (tmp_path / "50-static.yaml").write_text(STATIC)
        assert find_static_config(tmp_path, "192.168.16.21") == tmp_path / "50-static.yaml"
        assert find_static_config(tmp_path, "172.16.0.1") == tmp_path / "10-other.yaml"

    def test_skips_unparseable_yaml(self, tmp_path: Path):
        (tmp_path / "00-broken.yaml").write_text("network: [unclosed\n  addresses:")
        (tmp_path / "50-static.yaml").write_text(STATIC)
        assert find_static_config(tmp_path) == tmp_path / "50-static.yaml"

    def test_ignores_non_yaml_files(self, tmp_path: Path):
        (tmp_path / "50-static.yaml.bak").write_text(STATIC)
        assert find_static_config(tmp_path) is None

    def test_skips_undecodable_file(self, tmp_path: Path):
        (tmp_path / "00-binary.yaml").write_bytes(b"network:\n  \xff\xfe addresses\n")
        (tmp_path / "50-static.yaml").write_text(STATIC)
        assert find_static_config(tmp_path) == tmp_path / "50-static.yaml"
