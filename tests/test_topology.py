"""Tests for the static topology tables."""
from tillprint.config.topology import (
    ALL_PORTS,
    GENERIC_ENDPOINTS,
    PORT_LABELS,
    PRIORITY_PORTS,
    SUBNET_PREFIXES,
    get_candidate_ports,
    get_host_suffixes,
    get_subnet_prefixes,
    label_for_port,
    status_paths_for_port,
    vendor_for_port,
)


class TestSubnetPrefixes:
    def test_home_ranges_come_first(self):
        prefixes = get_subnet_prefixes()
        assert prefixes[:3] == ["192.168.1", "192.168.0", "192.168.2"]

    def test_prefixes_are_unique(self):
        prefixes = get_subnet_prefixes()
        assert len(prefixes) == len(set(prefixes))
        assert len(prefixes) == len(set(SUBNET_PREFIXES))

    def test_factory_default_ranges_are_included(self):
        prefixes = get_subnet_prefixes()
        for prefix in ("192.168.192", "192.168.223", "10.254.254", "172.31.1", "169.254.1"):
            assert prefix in prefixes

    def test_overrides_replace_table_and_dedupe(self):
        assert get_subnet_prefixes(["10.9.9", "10.9.9", "10.8.8"]) == ["10.9.9", "10.8.8"]


class TestCandidatePorts:
    def test_priority_ports_are_front_loaded(self):
        ports = [candidate.port for candidate in get_candidate_ports()]
        assert ports[:len(PRIORITY_PORTS)] == list(PRIORITY_PORTS)

    def test_every_port_appears_once(self):
        ports = [candidate.port for candidate in get_candidate_ports()]
        assert len(ports) == len(set(ports))
        assert set(ports) == set(ALL_PORTS)

    def test_vendor_hints(self):
        hints = {candidate.port: candidate.vendor_hint for candidate in get_candidate_ports()}
        assert hints[3001] == "Star Micronics"
        assert hints[10001] == "Epson"
        assert hints[4001] == "Citizen"
        assert hints[5001] == "Bixolon"
        assert hints[9100] is None

    def test_overrides(self):
        ports = [candidate.port for candidate in get_candidate_ports([9100, 80, 9100])]
        assert ports == [9100, 80]


class TestHostSuffixes:
    def test_covers_every_suffix_exactly_once(self):
        suffixes = get_host_suffixes()
        assert len(suffixes) == 254
        assert sorted(suffixes) == list(range(1, 255))

    def test_static_printer_ranges_first(self):
        suffixes = get_host_suffixes()
        assert suffixes[:10] == list(range(200, 210))
        assert suffixes[10:20] == list(range(100, 110))
        assert suffixes.index(105) < suffixes.index(150)


class TestLabels:
    def test_port_labels(self):
        assert PORT_LABELS[9100] == "ESC/POS Thermal Printer"
        assert PORT_LABELS[3005] == "Star Micronics Receipt Printer"
        assert PORT_LABELS[11001] == "Epson Receipt Printer"
        assert PORT_LABELS[6002] == "Brother Receipt Printer"
        assert PORT_LABELS[6101] == "Zebra Receipt Printer"
        assert label_for_port(631) == "IPP Receipt Printer"
        assert label_for_port(13001) == "Specialty Receipt Printer"
        assert label_for_port(7777) is None

    def test_vendor_for_port(self):
        assert vendor_for_port(12001) == "Star Micronics"
        assert vendor_for_port(8003) == "Epson"
        assert vendor_for_port(515) is None

    def test_status_paths_end_with_generic_paths(self):
        paths = status_paths_for_port(9100)
        assert paths[-len(GENERIC_ENDPOINTS):] == list(GENERIC_ENDPOINTS)
        assert "/StarWebPRNT/status" in paths
        assert len(paths) == len(set(paths))

    def test_hinted_vendor_paths_first(self):
        paths = status_paths_for_port(10001)
        assert paths[0] == "/PRESENTATION/ADVANCED"
        assert paths[-4:] == ["/", "/status", "/info", "/printer"]
