import io
import unittest
from contextlib import redirect_stdout
from unittest import mock

from scapy.layers.inet import IP, TCP
from scapy.layers.l2 import Ether

from capture.forwarders import (
    format_record,
    stdout_byte_array_forwarder,
    stdout_combined_forwarder_fn,
    stdout_forwarder_fn,
)
from capture.headers import TcpView
from capture.packet_codec import STATE_HEADER
from capture.packet_parser import PacketParser


def _broken_ack(self):
    raise ValueError("truncated TCP header")


class ForwarderTests(unittest.TestCase):
    def setUp(self):
        self.packet = Ether(bytes(
            Ether(src="00:11:22:33:44:55", dst="66:77:88:99:aa:bb")
            / IP(src="10.0.0.1", dst="10.0.0.2")
            / TCP(sport=12345, dport=443, flags="SA")
        ))
        self.packet.time = 1.5

    def _capture(self, fn):
        out = io.StringIO()
        with redirect_stdout(out):
            fn(self.packet)
        return out.getvalue()

    def test_record_forwarder_prints_sorted_flags(self):
        output = self._capture(stdout_forwarder_fn())
        self.assertIn("'Tcp'", output)
        self.assertIn("['ACK', 'SYN']", output)
        self.assertIn("'timestampInNanos': 1500000000", output)

    def test_byte_array_forwarder(self):
        output = self._capture(stdout_byte_array_forwarder)
        size = STATE_HEADER.size + len(bytes(self.packet))
        self.assertTrue(output.startswith(f"Packet Start (size: {size}): ["))
        self.assertIn("] Packet End", output)

    def test_combined_forwarder_prints_both(self):
        output = self._capture(stdout_combined_forwarder_fn(PacketParser()))
        self.assertIn("'DataLinkLayer'", output)
        self.assertIn("Packet Start", output)

    def test_format_record_is_deterministic(self):
        record = {"Tcp": {"flags": {"SYN", "ACK", "FIN"}}}
        self.assertEqual(format_record(record), "{'Tcp': {'flags': ['ACK', 'FIN', 'SYN']}}")


class ErrorSinkLoggingTests(unittest.TestCase):
    def setUp(self):
        self.packet = Ether(bytes(
            Ether(src="00:11:22:33:44:55", dst="66:77:88:99:aa:bb")
            / IP(src="192.168.0.1", dst="192.168.0.2")
            / TCP()
        ))
        self.packet.time = 2

    def test_failure_logs_message_and_raw_dump(self):
        parser = PacketParser()
        with mock.patch.object(TcpView, "ack", _broken_ack):
            with self.assertLogs("capture.packet_parser", level="ERROR") as logs:
                result = parser.parse(self.packet)

        self.assertFalse(result.ok)
        output = "\n".join(logs.output)
        self.assertIn("Error parsing the pcap packet!", output)
        self.assertIn("truncated TCP header", output)
        self.assertIn("Packet raw data was:", output)
        self.assertIn("Packet Start", output)

    def test_record_forwarder_skips_failed_packets(self):
        out = io.StringIO()
        forward = stdout_forwarder_fn()
        with mock.patch.object(TcpView, "ack", _broken_ack):
            with self.assertLogs("capture.packet_parser", level="ERROR"):
                with redirect_stdout(out):
                    forward(self.packet)
        self.assertEqual(out.getvalue(), "")


if __name__ == "__main__":
    unittest.main()
