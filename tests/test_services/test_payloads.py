"""Tests for UDP discovery payloads."""

import pytest

from localscan.services.payloads import (
    encode_netbios_name,
    mdns_query,
    netbios_query,
    payload_for_port,
    snmp_get_request,
    ssdp_search,
)


class TestMdnsQuery:
    """Tests for the mDNS service enumeration query."""

    def test_exact_bytes(self):
        expected = (
            b"\x00\x00\x00\x00\x00\x01\x00\x00\x00\x00\x00\x00"
            b"\x09_services\x07_dns-sd\x04_udp\x05local\x00"
            b"\x00\x0c\x00\x01"
        )
        assert mdns_query() == expected

    def test_single_question(self):
        assert mdns_query()[4:6] == b"\x00\x01"


class TestSsdpSearch:
    """Tests for the SSDP M-SEARCH request."""

    def test_request_line_and_headers(self):
        text = ssdp_search().decode("ascii")
        assert text.startswith("M-SEARCH * HTTP/1.1\r\n")
        assert "HOST: 239.255.255.250:1900\r\n" in text
        assert 'MAN: "ssdp:discover"\r\n' in text
        assert "MX: 1\r\n" in text
        assert "ST: ssdp:all\r\n" in text

    def test_ends_with_blank_line(self):
        assert ssdp_search().endswith(b"\r\n\r\n")


class TestNetbiosQuery:
    """Tests for the NetBIOS NBSTAT query."""

    def test_wildcard_name_encoding(self):
        """Test '*' encodes as CK followed by 30 A's."""
        assert encode_netbios_name("*") == b"\x20CK" + b"A" * 30 + b"\x00"

    def test_exact_bytes(self):
        expected = (
            b"\x80\x01\x00\x10\x00\x01\x00\x00\x00\x00\x00\x00"
            b"\x20CK" + b"A" * 30 + b"\x00"
            b"\x00\x21\x00\x01"
        )
        assert netbios_query() == expected

    def test_length(self):
        assert len(netbios_query()) == 12 + 34 + 4


class TestSnmpGetRequest:
    """Tests for the BER-encoded SNMPv1 GetRequest."""

    def test_exact_bytes(self):
        expected = bytes(
            [
                0x30, 0x26,
                0x02, 0x01, 0x00,
                0x04, 0x06, *b"public",
                0xA0, 0x19,
                0x02, 0x04, 0x00, 0x00, 0x00, 0x01,
                0x02, 0x01, 0x00,
                0x02, 0x01, 0x00,
                0x30, 0x0B,
                0x30, 0x09,
                0x06, 0x05, 0x2B, 0x06, 0x01, 0x02, 0x01,
                0x05, 0x00,
            ]
        )  # fmt: skip
        assert snmp_get_request() == expected

    def test_outer_length_matches(self):
        payload = snmp_get_request()
        assert payload[1] == len(payload) - 2

    def test_other_community(self):
        payload = snmp_get_request(community=b"private")
        assert b"\x04\x07private" in payload
        assert payload[1] == len(payload) - 2

    def test_multibyte_oid_arc(self):
        """Test arcs >= 128 use base-128 continuation bytes."""
        payload = snmp_get_request(oid=(1, 3, 6, 1, 4, 1, 311))
        assert b"\x06\x07\x2b\x06\x01\x04\x01\x82\x37" in payload


class TestPayloadForPort:
    """Tests for payload selection by port."""

    @pytest.mark.parametrize(
        "port,builder",
        [(5353, mdns_query), (1900, ssdp_search), (137, netbios_query), (161, snmp_get_request)],
    )
    def test_known_ports(self, port, builder):
        assert payload_for_port(port) == builder()

    @pytest.mark.parametrize("port", [53, 123, 9999])
    def test_other_ports_send_zero_byte(self, port):
        assert payload_for_port(port) == b"\x00"
