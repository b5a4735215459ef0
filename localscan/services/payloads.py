"""Datagram payloads for UDP discovery probes.

Each builder returns the exact bytes sent to a discovery port. Services
that are not listed receive a single zero byte.
"""

import struct

MDNS_PORT = 5353
SSDP_PORT = 1900
NETBIOS_PORT = 137
SNMP_PORT = 161

DNS_TYPE_PTR = 0x000C
NETBIOS_TYPE_NBSTAT = 0x0021
DNS_CLASS_IN = 0x0001

SNMP_VERSION_1 = 0
SNMP_COMMUNITY = b"public"
SNMP_SYSTEM_OID = (1, 3, 6, 1, 2, 1)

# BER tags
_INTEGER = 0x02
_OCTET_STRING = 0x04
_NULL = 0x05
_OID = 0x06
_SEQUENCE = 0x30
_GET_REQUEST = 0xA0


def _dns_header(transaction_id: int, flags: int, questions: int = 1) -> bytes:
    return struct.pack("!HHHHHH", transaction_id, flags, questions, 0, 0, 0)


def _dns_name(name: str) -> bytes:
    encoded = b""
    for label in name.split("."):
        raw = label.encode("ascii")
        encoded += bytes([len(raw)]) + raw
    return encoded + b"\x00"


def mdns_query() -> bytes:
    """PTR query for _services._dns-sd._udp.local (DNS-SD meta-service)."""
    return (
        _dns_header(0, 0)
        + _dns_name("_services._dns-sd._udp.local")
        + struct.pack("!HH", DNS_TYPE_PTR, DNS_CLASS_IN)
    )


def ssdp_search() -> bytes:
    """SSDP M-SEARCH for all devices."""
    return (
        "M-SEARCH * HTTP/1.1\r\n"
        "HOST: 239.255.255.250:1900\r\n"
        'MAN: "ssdp:discover"\r\n'
        "MX: 1\r\n"
        "ST: ssdp:all\r\n"
        "\r\n"
    ).encode("ascii")


def encode_netbios_name(name: str) -> bytes:
    """First-level NetBIOS encoding of a name, as a length-prefixed label.

    The name is padded with NUL bytes to 16 characters and each nibble is
    mapped onto 'A'..'P'.
    """
    raw = name.encode("ascii").ljust(16, b"\x00")[:16]
    encoded = bytearray()
    for byte in raw:
        encoded.append(ord("A") + (byte >> 4))
        encoded.append(ord("A") + (byte & 0x0F))
    return bytes([len(encoded)]) + bytes(encoded) + b"\x00"


def netbios_query() -> bytes:
    """NBSTAT query for the wildcard name '*'."""
    return (
        _dns_header(0x8001, 0x0010)
        + encode_netbios_name("*")
        + struct.pack("!HH", NETBIOS_TYPE_NBSTAT, DNS_CLASS_IN)
    )


def _ber_length(length: int) -> bytes:
    if length < 0x80:
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([0x80 | len(body)]) + body


def _tlv(tag: int, content: bytes) -> bytes:
    return bytes([tag]) + _ber_length(len(content)) + content


def _ber_integer(value: int, width: int | None = None) -> bytes:
    if width is None:
        width = max(1, (value.bit_length() + 8) // 8)
    return _tlv(_INTEGER, value.to_bytes(width, "big", signed=True))


def _ber_oid(oid: tuple[int, ...]) -> bytes:
    body = bytearray([40 * oid[0] + oid[1]])
    for arc in oid[2:]:
        chunk = [arc & 0x7F]
        arc >>= 7
        while arc:
            chunk.append(0x80 | (arc & 0x7F))
            arc >>= 7
        body.extend(reversed(chunk))
    return _tlv(_OID, bytes(body))


def snmp_get_request(
    community: bytes = SNMP_COMMUNITY,
    oid: tuple[int, ...] = SNMP_SYSTEM_OID,
    request_id: int = 1,
) -> bytes:
    """SNMPv1 GetRequest for the system subtree."""
    varbind = _tlv(_SEQUENCE, _ber_oid(oid) + _tlv(_NULL, b""))
    pdu = _tlv(
        _GET_REQUEST,
        _ber_integer(request_id, width=4)
        + _ber_integer(0)  # error-status
        + _ber_integer(0)  # error-index
        + _tlv(_SEQUENCE, varbind),
    )
    return _tlv(
        _SEQUENCE,
        _ber_integer(SNMP_VERSION_1) + _tlv(_OCTET_STRING, community) + pdu,
    )


_BUILDERS = {
    MDNS_PORT: mdns_query,
    SSDP_PORT: ssdp_search,
    NETBIOS_PORT: netbios_query,
    SNMP_PORT: snmp_get_request,
}


def payload_for_port(port: int) -> bytes:
    """Return the probe datagram for a UDP port."""
    builder = _BUILDERS.get(port)
    if builder is None:
        return b"\x00"
    return builder()
