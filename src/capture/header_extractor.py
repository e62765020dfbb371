"""
Protocol header extraction into nested packet records.

Walks a fixed, ordered table of extraction rules. For every protocol
present in the packet one entry is produced:

    {category: {"index": ..., ["ProtocolType": ...], <fields>, ["next": ...]}}

Entries are merged into a single record with last-write-wins on the
category key. Ethernet is stored under "DataLinkLayer"; Ip4 and Ip6 share
"NetworkLayer", so a packet carrying both (e.g. 6in4 tunnels) keeps only
the Ip6 entry, which comes later in the table.

A HeaderExtractor owns one mutable view per protocol, created once and
re-bound for every packet. Use one extractor per thread.
"""
from __future__ import annotations

from collections import namedtuple
from typing import Any, Dict, Optional

from scapy.packet import Packet

from capture.address_format import prettify_addr
from capture.config import ExtractorConfig
from capture.headers import (
    ArpView,
    EthernetView,
    HeaderView,
    HttpView,
    IcmpView,
    Ip4View,
    Ip6View,
    TcpTimestampView,
    TcpView,
    UdpView,
    tcp_flag_names,
)
from capture.subnet import guess_subnet, guess_subnet_mask_bits
from models.packet import PacketRecord

DATA_LINK_LAYER_PROTOCOLS = frozenset({"Ethernet"})
NETWORK_LAYER_PROTOCOLS = frozenset({"Ip4", "Ip6"})

Fields = Dict[str, Any]

ExtractionRule = namedtuple("ExtractionRule", ["protocol", "view_factory", "fields"])


def category_key(protocol: str) -> str:
    """Record key a protocol's entry is stored under."""
    if protocol in DATA_LINK_LAYER_PROTOCOLS:
        return "DataLinkLayer"
    if protocol in NETWORK_LAYER_PROTOCOLS:
        return "NetworkLayer"
    return protocol


def _src_dst(view) -> Fields:
    return {
        "source": prettify_addr(view.source()),
        "destination": prettify_addr(view.destination()),
    }


def _ethernet_fields(extractor: "HeaderExtractor", eth: EthernetView) -> Fields:
    return _src_dst(eth)


def _arp_fields(extractor: "HeaderExtractor", arp: ArpView) -> Fields:
    return {
        "operationDescription": arp.operation_description(),
        "targetMac": prettify_addr(arp.tha()),
        "targetIp": prettify_addr(arp.tpa()),
        "sourceMac": prettify_addr(arp.sha()),
        "sourceIp": prettify_addr(arp.spa()),
    }


def _ip4_fields(extractor: "HeaderExtractor", ip4: Ip4View) -> Fields:
    fields = _src_dst(ip4)
    src = fields["source"]
    if extractor.config.destination_subnet_from_source:
        dst = src
    else:
        dst = fields["destination"]
    fields.update({
        "sourceNetwork": guess_subnet(src),
        "sourceNetmaskBits": guess_subnet_mask_bits(src),
        "destinationNetwork": guess_subnet(dst),
        "destinationNetmaskBits": guess_subnet_mask_bits(dst),
        "id": ip4.id(),
        "tos": ip4.tos(),
        "type": ip4.type(),
        "ttl": ip4.ttl(),
    })
    return fields


def _ip6_fields(extractor: "HeaderExtractor", ip6: Ip6View) -> Fields:
    fields = _src_dst(ip6)
    fields.update({
        "flowLabel": ip6.flow_label(),
        "hopLimit": ip6.hop_limit(),
        "trafficClass": ip6.traffic_class(),
    })
    return fields


def _icmp_fields(extractor: "HeaderExtractor", icmp: IcmpView) -> Fields:
    return {"typeDescription": icmp.type_description()}


def _tcp_fields(extractor: "HeaderExtractor", tcp: TcpView) -> Fields:
    fields = _src_dst(tcp)
    fields.update({
        "ack": tcp.ack(),
        "seq": tcp.seq(),
        "flags": tcp_flag_names(tcp.flags()),
    })
    timestamp = extractor.tcp_timestamp
    if timestamp.bind_sub_header(tcp):
        fields["tsval"] = timestamp.tsval()
        if tcp.flags_ack():
            fields["tsecr"] = timestamp.tsecr()
    return fields


def _udp_fields(extractor: "HeaderExtractor", udp: UdpView) -> Fields:
    return _src_dst(udp)


def _http_fields(extractor: "HeaderExtractor", http: HttpView) -> Fields:
    # Absent fields are left out entirely, never stored as None.
    return {
        field.name: http.field_value(field)
        for field in extractor.config.http_fields
        if http.has_field(field)
    }


EXTRACTION_RULES = (
    ExtractionRule("Ethernet", EthernetView, _ethernet_fields),
    ExtractionRule("Arp", ArpView, _arp_fields),
    ExtractionRule("Ip4", Ip4View, _ip4_fields),
    ExtractionRule("Ip6", Ip6View, _ip6_fields),
    ExtractionRule("Icmp", IcmpView, _icmp_fields),
    ExtractionRule("Tcp", TcpView, _tcp_fields),
    ExtractionRule("Udp", UdpView, _udp_fields),
    ExtractionRule("Http", HttpView, _http_fields),
)


class HeaderExtractor:
    """Parse the protocol headers of scapy packets into PacketRecords."""

    def __init__(self, config: Optional[ExtractorConfig] = None, rules=EXTRACTION_RULES):
        self.config = config or ExtractorConfig()
        self.rules = tuple(rules)
        self._views: Dict[str, HeaderView] = {
            rule.protocol: rule.view_factory() for rule in self.rules
        }
        self.tcp_timestamp = TcpTimestampView()

    def view(self, protocol: str) -> HeaderView:
        return self._views[protocol]

    def extract(self, packet: Optional[Packet]) -> Optional[PacketRecord]:
        """
        Return the record of all known headers in `packet`.

        Accessor errors are not caught here; PacketParser turns them into
        a failed ParseResult for this packet only.
        """
        if packet is None:
            return None

        record: PacketRecord = {}
        for rule in self.rules:
            view = self._views[rule.protocol]
            if not view.bind(packet):
                continue
            category, fields = self._entry(rule, view)
            record[category] = fields
        return record

    def _entry(self, rule: ExtractionRule, view: HeaderView):
        category = category_key(rule.protocol)
        fields: Fields = {"index": view.index}
        if category != rule.protocol:
            fields["ProtocolType"] = rule.protocol
        fields.update(rule.fields(self, view))
        if view.has_next_header:
            fields["next"] = view.next_header_id
        return category, fields

