"""Tests for the printer and report models."""
from tillprint.models.printer import (
    PrinterDevice,
    ScanResult,
    SweepStats,
    TransportType,
    dedupe_by_host,
)
from tillprint.models.report import NightlyReport


class TestPrinterDevice:
    def test_network_device(self):
        device = PrinterDevice.network("192.168.1.105", 9100, "ESC/POS Thermal Printer (192.168.1.105)")
        assert device.id == "network-192.168.1.105-9100"
        assert device.address == "192.168.1.105:9100"
        assert device.host == "192.168.1.105"
        assert device.port == 9100
        assert device.transport_type == TransportType.NETWORK
        assert device.connected is False

    def test_bluetooth_device(self):
        device = PrinterDevice.bluetooth("00:11:22:33:44:55", "TM-P20")
        assert device.id == "bluetooth-00:11:22:33:44:55"
        assert device.host == "00:11:22:33:44:55"
        assert device.port is None


class TestDedupe:
    def test_first_device_per_host_wins(self):
        first = PrinterDevice.network("10.0.0.5", 9100, "first")
        second = PrinterDevice.network("10.0.0.5", 3001, "second")
        other = PrinterDevice.network("10.0.0.6", 9100, "other")
        assert dedupe_by_host([first, second, other]) == [first, other]

    def test_scan_result_hosts_are_unique(self):
        devices = [
            PrinterDevice.network("10.0.0.5", 9100, "a"),
            PrinterDevice.network("10.0.0.5", 9101, "b"),
        ]
        result = ScanResult.from_devices(devices, SweepStats(batches=13))
        assert [d.name for d in result.devices] == ["a"]
        assert result.stats.batches == 13


class TestNightlyReport:
    def test_parses_camel_case_payload(self, report_payload):
        report = NightlyReport.model_validate(report_payload)
        assert report.total_sales == 1234.5
        assert report.department_breakdown.candy_counter.orders == 10
        assert report.user_breakdown[0].user_name == "Dana"
        assert report.payment_breakdown.box_office_card == 600.0

    def test_average_order(self, sample_report):
        assert round(sample_report.average_order, 2) == 29.39

    def test_average_order_without_orders(self):
        assert NightlyReport(date="2026-10-17").average_order == 0.0
