"""Tests for result rendering."""

import csv
import io
import json

import pytest

from localscan.components.results import format_ports, render
from localscan.models.scan_result import DetectionMethod, DiffStatus


@pytest.fixture
def hosts(make_host):
    return [
        make_host(
            "192.168.1.1",
            DetectionMethod.ICMP,
            open_ports=[443, 80],
            hostname="router",
            mac="a4:91:b1:0c:3e:11",
            vendor="TP-Link",
        ),
        make_host("192.168.1.34", DetectionMethod.ARP, hostname="-", mac="-", vendor="-"),
    ]


class TestFormatPorts:
    """Tests for format_ports."""

    def test_sorted(self):
        assert format_ports([443, 22, 80]) == "22,80,443"

    def test_empty(self):
        assert format_ports([]) == "-"


class TestRenderTable:
    """Tests for the table format."""

    def test_rows_and_footer(self, hosts):
        out = io.StringIO()
        render(hosts, "table", "3.2s", out)
        text = out.getvalue()
        assert "IP Address" in text
        assert "192.168.1.1" in text
        assert "router" in text
        assert "80,443" in text
        assert "ARP" in text
        assert "Status" not in text
        assert "Found 2 devices in 3.2s" in text

    def test_status_column_in_diff_mode(self, hosts):
        hosts[1].status = DiffStatus.GONE
        out = io.StringIO()
        render(hosts, "table", "1.0s", out)
        text = out.getvalue()
        assert "Status" in text
        assert "GONE" in text

    def test_empty(self):
        out = io.StringIO()
        render([], "table", "0.5s", out)
        assert out.getvalue().strip() == "No devices found."


class TestRenderJson:
    """Tests for the JSON format."""

    def test_fields(self, hosts):
        out = io.StringIO()
        render(hosts, "json", "1.0s", out)
        data = json.loads(out.getvalue())
        assert data[0] == {
            "ip": "192.168.1.1",
            "hostname": "router",
            "mac": "a4:91:b1:0c:3e:11",
            "vendor": "TP-Link",
            "method": "ICMP",
            "open_ports": [80, 443],
        }
        assert data[1]["open_ports"] == []

    def test_status_only_when_set(self, hosts):
        hosts[0].status = DiffStatus.NEW
        out = io.StringIO()
        render(hosts, "json", "1.0s", out)
        data = json.loads(out.getvalue())
        assert data[0]["status"] == "NEW"
        assert "status" not in data[1]

    def test_empty_array(self):
        out = io.StringIO()
        render([], "json", "1.0s", out)
        assert json.loads(out.getvalue()) == []


class TestRenderCsv:
    """Tests for the CSV format."""

    def test_rows(self, hosts):
        out = io.StringIO()
        render(hosts, "csv", "1.0s", out)
        rows = list(csv.reader(io.StringIO(out.getvalue())))
        assert rows[0] == ["IP", "Hostname", "MAC", "Vendor", "Method", "OpenPorts"]
        assert rows[1] == ["192.168.1.1", "router", "a4:91:b1:0c:3e:11", "TP-Link", "ICMP", "80,443"]
        assert rows[2][5] == "-"

    def test_status_column(self, hosts):
        hosts[0].status = DiffStatus.NEW
        out = io.StringIO()
        render(hosts, "csv", "1.0s", out)
        rows = list(csv.reader(io.StringIO(out.getvalue())))
        assert rows[0][-1] == "Status"
        assert rows[1][-1] == "NEW"
        assert rows[2][-1] == ""


class TestRender:
    def test_unknown_format(self, hosts):
        with pytest.raises(ValueError):
            render(hosts, "xml", "1.0s", io.StringIO())
