import pytest

from portsweep.errors import InvalidCIDR
from portsweep.utils.targets import DEFAULT_HOST, build_host_set, expand_cidr, read_lines


@pytest.mark.parametrize(
    "cidr,count,first,last",
    [
        ("192.168.1.0/30", 2, "192.168.1.1", "192.168.1.2"),
        ("192.168.1.0/29", 6, "192.168.1.1", "192.168.1.6"),
        ("10.0.0.0/28", 14, "10.0.0.1", "10.0.0.14"),
        ("192.168.1.0/24", 254, "192.168.1.1", "192.168.1.254"),
        ("10.0.0.0/23", 510, "10.0.0.1", "10.0.1.254"),
    ],
)
def test_expand_cidr(cidr, count, first, last):
    ips = expand_cidr(cidr)
    assert len(ips) == count
    assert ips[0] == first
    assert ips[-1] == last


@pytest.mark.parametrize("prefix", range(20, 31))
def test_expand_cidr_drops_network_and_broadcast(prefix):
    assert len(expand_cidr(f"172.16.0.0/{prefix}")) == 2 ** (32 - prefix) - 2


def test_expand_cidr_is_ascending_and_carries_across_octets():
    ips = expand_cidr("10.0.0.0/23")
    assert "10.0.0.255" in ips
    assert "10.0.1.0" in ips
    assert ips.index("10.0.0.255") + 1 == ips.index("10.0.1.0")


def test_expand_cidr_small_blocks_are_kept_whole():
    assert expand_cidr("10.0.0.0/31") == ["10.0.0.0", "10.0.0.1"]
    assert expand_cidr("10.0.0.7/32") == ["10.0.0.7"]


def test_expand_cidr_masks_host_bits():
    assert expand_cidr("10.0.0.5/30") == expand_cidr("10.0.0.4/30") == ["10.0.0.5", "10.0.0.6"]


def test_expand_cidr_ipv6():
    assert expand_cidr("2001:db8::/126") == ["2001:db8::1", "2001:db8::2"]


@pytest.mark.parametrize(
    "cidr",
    ["192.168.1.0", "256.1.1.0/24", "192.168.1.0/33", "192.168.1/24x", "not-a-cidr/8", "", "/24"],
)
def test_expand_cidr_rejects(cidr):
    with pytest.raises(InvalidCIDR):
        expand_cidr(cidr)


def test_read_lines_skips_blanks_and_comments(tmp_path):
    path = tmp_path / "hosts.txt"
    path.write_text("# lab hosts\n10.0.0.1\n\n   \n  example.com  \n#10.0.0.2\n10.0.0.3\n", encoding="utf-8")
    assert read_lines(str(path)) == ["10.0.0.1", "example.com", "10.0.0.3"]


def test_read_lines_missing_file(tmp_path):
    with pytest.raises(OSError):
        read_lines(str(tmp_path / "missing.txt"))


def test_build_host_set_concatenates_sources_in_order(tmp_path):
    hosts_file = tmp_path / "hosts.txt"
    hosts_file.write_text("10.0.0.9\nscanme.local\n10.0.0.9\n", encoding="utf-8")
    cidr_file = tmp_path / "cidrs.txt"
    cidr_file.write_text("192.168.5.0/30\n", encoding="utf-8")

    hosts = build_host_set("10.0.0.9", str(hosts_file), str(cidr_file))

    assert hosts == ["10.0.0.9", "10.0.0.9", "scanme.local", "10.0.0.9", "192.168.5.1", "192.168.5.2"]


def test_build_host_set_reports_bad_cidr_and_continues(tmp_path):
    cidr_file = tmp_path / "cidrs.txt"
    cidr_file.write_text("bogus\n10.1.0.0/30\n300.0.0.0/24\n10.2.0.0/31\n", encoding="utf-8")
    rejected = []

    hosts = build_host_set(cidr_file=str(cidr_file), on_invalid_cidr=lambda cidr, err: rejected.append(cidr))

    assert hosts == ["10.1.0.1", "10.1.0.2", "10.2.0.0", "10.2.0.1"]
    assert rejected == ["bogus", "300.0.0.0/24"]


def test_build_host_set_defaults_to_loopback(tmp_path):
    empty = tmp_path / "empty.txt"
    empty.write_text("# nothing here\n", encoding="utf-8")
    assert build_host_set() == [DEFAULT_HOST]
    assert build_host_set(host="  ", hosts_file=str(empty)) == [DEFAULT_HOST]


def test_build_host_set_missing_file_is_fatal(tmp_path):
    with pytest.raises(OSError):
        build_host_set(hosts_file=str(tmp_path / "nope.txt"))
