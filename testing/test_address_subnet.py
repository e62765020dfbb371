"""
Tests for address formatting and RFC 1918 subnet guessing.
Run with: python testing\test_address_subnet.py
"""
import os
import sys

# Add src to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from capture.address_format import prettify_addr
from capture.subnet import (
    guess,
    guess_subnet,
    guess_subnet_mask,
    guess_subnet_mask_bits,
    network_class,
)
from models.packet import NetworkClass


def test_mac_formatting_has_no_sign_padding():
    assert prettify_addr(bytes([0x00, 0x11, 0x22, 0x33, 0x44, 0xFF])) == "00:11:22:33:44:FF"
    assert prettify_addr(bytearray([0x80, 0x90, 0xA0, 0xB0, 0xC0, 0xFE])) == "80:90:A0:B0:C0:FE"


def test_signed_octets_are_treated_as_unsigned():
    assert prettify_addr([-1, -1, -1, -1, -1, -1]) == "FF:FF:FF:FF:FF:FF"
    assert prettify_addr([-64, -88, 1, 1]) == "192.168.1.1"


def test_ipv4_formatting():
    assert prettify_addr(bytes([192, 168, 1, 1])) == "192.168.1.1"
    assert prettify_addr(bytes([255, 255, 255, 0])) == "255.255.255.0"


def test_ipv6_formatting_is_compressed():
    raw = bytes([0xFE, 0x80] + [0] * 13 + [1])
    assert prettify_addr(raw) == "fe80::1"
    assert prettify_addr(bytes(16)) == "::"


def test_unrecognized_length_falls_back_to_list():
    assert prettify_addr(bytes([1, 2, 3])) == "[1, 2, 3]"
    assert prettify_addr(b"") == "[]"


def test_non_byte_values_pass_through():
    assert prettify_addr(80) == 80
    assert prettify_addr("192.168.1.1") == "192.168.1.1"
    assert prettify_addr(None) is None


def test_class_c_addresses():
    for addr in ("192.168.1.1", "192.168.77.254", "192.168.0.0"):
        assert network_class(addr) is NetworkClass.CLASS_C
        assert guess_subnet_mask_bits(addr) == 24
        assert guess_subnet_mask(addr) == "255.255.255.0"
        assert guess_subnet(addr) == ".".join(addr.split(".")[:3]) + ".0"


def test_class_a_addresses():
    for addr in ("10.0.0.1", "10.200.3.4"):
        assert network_class(addr) is NetworkClass.CLASS_A
        assert guess_subnet_mask_bits(addr) == 8
        assert guess_subnet_mask(addr) == "255.0.0.0"
        assert guess_subnet(addr) == "10.0.0.0"


def test_class_b_addresses():
    # Only the "172." prefix is checked, even outside 172.16/12.
    for addr in ("172.16.5.4", "172.200.1.1"):
        assert network_class(addr) is NetworkClass.CLASS_B
        assert guess_subnet_mask_bits(addr) == 16
        assert guess_subnet_mask(addr) == "255.255.0.0"
    assert guess_subnet("172.16.5.4") == "172.16.0.0"


def test_public_and_malformed_addresses_are_unknown():
    for addr in ("8.8.8.8", "192.169.1.1", "not an address", "", None):
        result = guess(addr)
        assert result.network_class is NetworkClass.UNKNOWN
        assert result.network is None
        assert result.mask is None
        assert result.mask_bits is None


def test_guess_combines_all_fields():
    result = guess("192.168.10.20")
    assert result.network_class is NetworkClass.CLASS_C
    assert result.network == "192.168.10.0"
    assert result.mask == "255.255.255.0"
    assert result.mask_bits == 24


def main():
    tests = [
        test_mac_formatting_has_no_sign_padding,
        test_signed_octets_are_treated_as_unsigned,
        test_ipv4_formatting,
        test_ipv6_formatting_is_compressed,
        test_unrecognized_length_falls_back_to_list,
        test_non_byte_values_pass_through,
        test_class_c_addresses,
        test_class_a_addresses,
        test_class_b_addresses,
        test_public_and_malformed_addresses_are_unknown,
        test_guess_combines_all_fields,
    ]

    print("=" * 60)
    print("Testing address formatting and subnet guessing")
    print("=" * 60)

    all_passed = True
    for test in tests:
        try:
            test()
            print(f"✅ {test.__name__} passed")
        except AssertionError as e:
            print(f"❌ {test.__name__} failed: {e}")
            all_passed = False
        except Exception as e:
            print(f"❌ {test.__name__} crashed: {e}")
            all_passed = False

    print("=" * 60)
    if all_passed:
        print("✅ ALL TESTS PASSED")
    else:
        print("❌ SOME TESTS FAILED")
    print("=" * 60)

    return all_passed


if __name__ == "__main__":
    raise SystemExit(0 if main() else 1)
