import unittest

from eth_abi import encode

from services.candles.decoder import SwapFlavor, decode_swap_log
from services.candles.models import INT256_LIMIT, UINT256_MAX, RawSwapEvent, checked_delta
from services.candles.tests.fakes import swap_log


class SwapDecoderTests(unittest.TestCase):
    def test_decodes_v2_amounts_and_timestamp(self) -> None:
        log = swap_log(120, amount0_in=5, amount1_out=7, timestamp=1_700_000_000, log_index=3)

        event = decode_swap_log(log)

        self.assertEqual(
            event,
            RawSwapEvent(
                block_timestamp=1_700_000_000,
                amount0_in=5,
                amount1_in=0,
                amount0_out=0,
                amount1_out=7,
                block_number=120,
                log_index=3
            )
        )
        self.assertEqual(event.deltas(), (-5, 7))

    def test_decoding_is_idempotent(self) -> None:
        log = swap_log(1, amount0_in=10**18, amount1_out=3 * 10**6, timestamp=42)
        self.assertEqual(decode_swap_log(log), decode_swap_log(log))

    def test_skips_short_payload(self) -> None:
        log = swap_log(1, amount0_in=1, amount1_out=1, timestamp=42)
        log['data'] = log['data'][:127]
        self.assertIsNone(decode_swap_log(log))

    def test_skips_non_hex_payload(self) -> None:
        log = swap_log(1, amount0_in=1, amount1_out=1, timestamp=42)
        log['data'] = '0x' + 'zz' * 128
        self.assertIsNone(decode_swap_log(log))

    def test_skips_log_without_topics(self) -> None:
        log = swap_log(1, amount0_in=1, amount1_out=1, timestamp=42)
        log['topics'] = []
        self.assertIsNone(decode_swap_log(log))

    def test_accepts_hex_string_fields(self) -> None:
        log = swap_log(1, amount0_in=1, amount1_out=2)
        log['data'] = '0x' + log['data'].hex()
        log['blockTimestamp'] = '0x10'
        event = decode_swap_log(log)
        self.assertEqual(event.block_timestamp, 16)
        self.assertEqual(event.amount1_out, 2)

    def test_falls_back_to_supplied_block_timestamp(self) -> None:
        log = swap_log(9, amount0_in=1, amount1_out=1)
        self.assertIsNone(decode_swap_log(log))
        self.assertEqual(decode_swap_log(log, block_timestamp=77).block_timestamp, 77)

    def test_log_timestamp_wins_over_fallback(self) -> None:
        log = swap_log(9, amount0_in=1, amount1_out=1, timestamp=10)
        self.assertEqual(decode_swap_log(log, block_timestamp=77).block_timestamp, 10)

    def test_decodes_v3_signed_amounts(self) -> None:
        log = swap_log(5, timestamp=100)
        log['data'] = encode(
            ['int256', 'int256', 'uint160', 'uint128', 'int24'],
            [-2_000_000, 10**18, 2**96, 10**12, -200]
        )

        event = decode_swap_log(log, SwapFlavor.v3)

        self.assertEqual(event.amount0_out, 2_000_000)
        self.assertEqual(event.amount0_in, 0)
        self.assertEqual(event.amount1_in, 10**18)
        self.assertEqual(event.amount1_out, 0)
        self.assertEqual(event.deltas(), (2_000_000, -(10**18)))

    def test_topics_differ_per_flavor(self) -> None:
        self.assertNotEqual(SwapFlavor.v2.topic, SwapFlavor.v3.topic)
        self.assertEqual(
            SwapFlavor.v2.topic,
            '0xd78ad95fa46c994b6551d0da85fc275fe613ce37657fb8d5e3d130840159d822'
        )
        self.assertTrue(SwapFlavor.v3.topic.startswith('0xc42079f9'))


class CheckedDeltaTests(unittest.TestCase):
    def test_signed_difference(self) -> None:
        self.assertEqual(checked_delta(10, 3), 7)
        self.assertEqual(checked_delta(3, 10), -7)
        self.assertEqual(checked_delta(4, 4), 0)

    def test_largest_representable_magnitude(self) -> None:
        self.assertEqual(checked_delta(INT256_LIMIT - 1, 0), INT256_LIMIT - 1)
        self.assertEqual(checked_delta(0, INT256_LIMIT - 1), -(INT256_LIMIT - 1))

    def test_unrepresentable_delta_clamps_to_zero(self) -> None:
        self.assertEqual(checked_delta(UINT256_MAX, 0), 0)
        self.assertEqual(checked_delta(0, UINT256_MAX), 0)
        self.assertEqual(checked_delta(INT256_LIMIT, 0), 0)


if __name__ == '__main__':
    unittest.main()
