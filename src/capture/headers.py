"""
Reusable protocol header views over scapy packets.

A view is created once and re-bound to every packet it inspects:
bind() looks up the first layer of the view's protocol in the packet and
returns False when the protocol is absent. The typed accessors then read
from the bound layer.

Views are mutable and NOT thread-safe. Each HeaderExtractor owns its own
set; never share one between threads.
"""
from __future__ import annotations

import socket
from collections import namedtuple
from typing import Iterator, Optional, Tuple

from scapy.layers.http import HTTP, HTTPRequest, HTTPResponse
from scapy.layers.inet import ICMP, IP, TCP, UDP
from scapy.layers.inet6 import IPv6
from scapy.layers.l2 import ARP, LLC, SNAP, CookedLinux, Dot1Q, Dot3, Ether
from scapy.layers.ppp import PPP
from scapy.packet import NoPayload, Packet, Padding
from scapy.pton_ntop import inet_pton
from scapy.utils import mac2str

# Numeric protocol ids reported as "next" header id.
PAYLOAD_ID = 0
_PROTOCOL_IDS = (
    (Ether, 1),
    (TCP, 2),
    (UDP, 3),
    (Dot3, 4),
    (LLC, 5),
    (SNAP, 6),
    (IP, 7),
    (IPv6, 8),
    (Dot1Q, 9),
    (PPP, 11),
    (ICMP, 12),
    (HTTP, 13),
    (ARP, 15),
    (CookedLinux, 19),
)

# TCP flag bits, in header order
TCP_FLAGS = (
    (0x01, "FIN"),
    (0x02, "SYN"),
    (0x04, "RST"),
    (0x08, "PSH"),
    (0x10, "ACK"),
    (0x20, "URG"),
    (0x40, "ECE"),
    (0x80, "CWR"),
)
TCP_FLAG_ACK = 0x10

HttpField = namedtuple("HttpField", ["name", "message", "attr"])

HTTP_FIELDS = (
    HttpField("Content_Length", HTTPResponse, "Content_Length"),
    HttpField("Content_Type", HTTPResponse, "Content_Type"),
    HttpField("ResponseCode", HTTPResponse, "Status_Code"),
    HttpField("RequestUrl", HTTPResponse, "Content_Location"),
    HttpField("Authorization", HTTPRequest, "Authorization"),
    HttpField("Content_Length", HTTPRequest, "Content_Length"),
    HttpField("Content_Type", HTTPRequest, "Content_Type"),
    HttpField("Referer", HTTPRequest, "Referer"),
    HttpField("RequestMethod", HTTPRequest, "Method"),
    HttpField("RequestUrl", HTTPRequest, "Path"),
    HttpField("RequestVersion", HTTPRequest, "Http_Version"),
)


def iter_layers(packet: Packet) -> Iterator[Tuple[int, Packet]]:
    """Yield (index, layer) for every layer of a packet, outermost first."""
    layer = packet
    index = 0
    while layer is not None and not isinstance(layer, NoPayload):
        yield index, layer
        layer = layer.payload
        index += 1


def protocol_id(layer: Packet) -> int:
    for cls, pid in _PROTOCOL_IDS:
        if isinstance(layer, cls):
            return pid
    return PAYLOAD_ID


def tcp_flag_names(flags: int) -> set:
    """Return the names of all flag bits set in a TCP flags bitmask."""
    return {name for bit, name in TCP_FLAGS if flags & bit}


def _ip4_bytes(addr: str) -> bytes:
    return inet_pton(socket.AF_INET, addr)


def _ip6_bytes(addr: str) -> bytes:
    return inet_pton(socket.AF_INET6, addr)


def _enum_repr(layer: Packet, field_name: str) -> str:
    return layer.get_field(field_name).i2repr(layer, layer.getfieldval(field_name))


class HeaderView:
    """Base view: presence test, layer index and next header."""

    name = "Payload"
    layer_cls = Packet

    def __init__(self):
        self._layer: Optional[Packet] = None
        self._index = -1

    def bind(self, packet: Packet) -> bool:
        self._layer = None
        self._index = -1
        for index, layer in iter_layers(packet):
            if isinstance(layer, self.layer_cls):
                self._layer = layer
                self._index = index
                return True
        return False

    @property
    def layer(self) -> Packet:
        if self._layer is None:
            raise RuntimeError(f"{self.name} view is not bound to a packet")
        return self._layer

    @property
    def index(self) -> int:
        if self._layer is None:
            raise RuntimeError(f"{self.name} view is not bound to a packet")
        return self._index

    def _next_layer(self) -> Optional[Packet]:
        payload = self.layer.payload
        if isinstance(payload, (NoPayload, Padding)):
            return None
        return payload

    @property
    def has_next_header(self) -> bool:
        return self._next_layer() is not None

    @property
    def next_header_id(self) -> int:
        next_layer = self._next_layer()
        if next_layer is None:
            return PAYLOAD_ID
        return protocol_id(next_layer)


class EthernetView(HeaderView):
    name = "Ethernet"
    layer_cls = Ether

    def source(self) -> bytes:
        return mac2str(self.layer.src)

    def destination(self) -> bytes:
        return mac2str(self.layer.dst)


class ArpView(HeaderView):
    name = "Arp"
    layer_cls = ARP

    def operation_description(self) -> str:
        return _enum_repr(self.layer, "op")

    def sha(self) -> bytes:
        return mac2str(self.layer.hwsrc)

    def spa(self) -> bytes:
        return _ip4_bytes(self.layer.psrc)

    def tha(self) -> bytes:
        return mac2str(self.layer.hwdst)

    def tpa(self) -> bytes:
        return _ip4_bytes(self.layer.pdst)


class IcmpView(HeaderView):
    name = "Icmp"
    layer_cls = ICMP

    def type_description(self) -> str:
        return _enum_repr(self.layer, "type")


class Ip4View(HeaderView):
    name = "Ip4"
    layer_cls = IP

    def source(self) -> bytes:
        return _ip4_bytes(self.layer.src)

    def destination(self) -> bytes:
        return _ip4_bytes(self.layer.dst)

    def id(self) -> int:
        return self.layer.id

    def tos(self) -> int:
        return self.layer.tos

    def type(self) -> int:
        """Protocol number of the encapsulated protocol."""
        return self.layer.proto

    def ttl(self) -> int:
        return self.layer.ttl


class Ip6View(HeaderView):
    name = "Ip6"
    layer_cls = IPv6

    def source(self) -> bytes:
        return _ip6_bytes(self.layer.src)

    def destination(self) -> bytes:
        return _ip6_bytes(self.layer.dst)

    def flow_label(self) -> int:
        return self.layer.fl

    def hop_limit(self) -> int:
        return self.layer.hlim

    def traffic_class(self) -> int:
        return self.layer.tc


class TcpView(HeaderView):
    name = "Tcp"
    layer_cls = TCP

    def source(self) -> int:
        return self.layer.sport

    def destination(self) -> int:
        return self.layer.dport

    def ack(self) -> int:
        return self.layer.ack

    def seq(self) -> int:
        return self.layer.seq

    def flags(self) -> int:
        return int(self.layer.flags)

    def flags_ack(self) -> bool:
        return bool(self.flags() & TCP_FLAG_ACK)

    def options(self) -> list:
        return list(self.layer.options or [])


class TcpTimestampView:
    """TCP timestamp option (RFC 7323), a sub-header of a bound TcpView."""

    name = "Timestamp"

    def __init__(self):
        self._value: Optional[Tuple[int, int]] = None

    def bind_sub_header(self, tcp: TcpView) -> bool:
        self._value = None
        for option in tcp.options():
            if option[0] == "Timestamp":
                self._value = tuple(option[1])
                return True
        return False

    def tsval(self) -> int:
        return self._bound()[0]

    def tsecr(self) -> int:
        return self._bound()[1]

    def _bound(self) -> Tuple[int, int]:
        if self._value is None:
            raise RuntimeError("Timestamp view is not bound to a TCP header")
        return self._value


class UdpView(HeaderView):
    name = "Udp"
    layer_cls = UDP

    def source(self) -> int:
        return self.layer.sport

    def destination(self) -> int:
        return self.layer.dport


class HttpView(HeaderView):
    """HTTP header; fields are read from the request/response message."""

    name = "Http"
    layer_cls = HTTP

    @property
    def message(self) -> Packet:
        return self.layer.payload

    def _next_layer(self) -> Optional[Packet]:
        message = self.message
        if isinstance(message, (HTTPRequest, HTTPResponse)):
            payload = message.payload
        else:
            payload = message
        if isinstance(payload, (NoPayload, Padding)):
            return None
        return payload

    def has_field(self, field: HttpField) -> bool:
        message = self.message
        if not isinstance(message, field.message):
            return False
        if not any(f.name == field.attr for f in message.fields_desc):
            return False
        return message.getfieldval(field.attr) is not None

    def field_value(self, field: HttpField) -> str:
        value = self.message.getfieldval(field.attr)
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return str(value)
