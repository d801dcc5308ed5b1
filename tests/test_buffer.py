from array import array
import unittest

from netstring_parser import NetstringParser
from netstring_parser.buffer import MIN_GROWTH, FrameBuffer
from netstring_parser.exceptions import AllocationError, ContractViolation


class FrameBufferTests(unittest.TestCase):

    def test_initial_state(self):
        buf = FrameBuffer(16)
        self.assertEqual(buf.capacity(), 16)
        self.assertEqual(buf.pending_len(), 0)
        self.assertEqual(buf.read_cursor, 0)
        self.assertEqual(buf.write_cursor, 0)

    def test_write_copies_into_free_space(self):
        buf = FrameBuffer(16)
        buf.write(b"hello")
        buf.write(bytearray(b" world"))
        self.assertEqual(buf.capacity(), 16)
        self.assertEqual(bytes(buf.pending()), b"hello world")
        self.assertEqual(buf.write_cursor, 11)

    def test_write_grows_to_fit(self):
        buf = FrameBuffer(4)
        buf.write(b"0123456789")
        self.assertGreaterEqual(buf.capacity(), 10)
        self.assertEqual(bytes(buf.pending()), b"0123456789")

    def test_write_counts_bytes_of_wide_views(self):
        words = array("I", [0x2c6f3a33, 0x3a312c6b])
        raw = words.tobytes()
        buf = FrameBuffer(64)
        held = buf.pending()
        buf.write(memoryview(words))
        self.assertEqual(buf.write_cursor, len(raw))
        self.assertEqual(bytes(buf.pending()), raw)
        self.assertEqual(buf.capacity(), 64)
        self.assertEqual(bytes(held), b"")

    def test_parser_accepts_wide_views(self):
        words = array("I")
        words.frombytes(b"2:ab,0:,")
        parser = NetstringParser(64)
        parser.write(memoryview(words))
        self.assertEqual(parser.drain(), [b"ab", b""])
        self.assertTrue(parser.is_buffer_empty())

    def test_empty_write_is_a_no_op(self):
        buf = FrameBuffer(4)
        generation = buf.generation
        buf.write(b"")
        buf.advance(0)
        self.assertEqual(buf.generation, generation)
        self.assertEqual(buf.pending_len(), 0)

    def test_available_buffer_then_advance(self):
        buf = FrameBuffer(8)
        view = buf.available_buffer()
        self.assertEqual(len(view), 8)
        view[:3] = b"abc"
        buf.advance(3)
        self.assertEqual(bytes(buf.pending()), b"abc")
        self.assertEqual(buf.free_len(), 5)

    def test_available_buffer_compacts_dead_bytes(self):
        buf = FrameBuffer(8)
        buf.write(b"abcdefgh")
        buf.consume(6)
        self.assertEqual(buf.read_cursor, 6)
        view = buf.available_buffer()
        self.assertEqual(buf.capacity(), 8)
        self.assertEqual(buf.read_cursor, 0)
        self.assertEqual(buf.write_cursor, 2)
        self.assertEqual(len(view), 6)
        self.assertEqual(bytes(buf.pending()), b"gh")

    def test_dead_bytes_are_kept_while_space_remains(self):
        buf = FrameBuffer(16)
        buf.write(b"abcd")
        buf.consume(2)
        buf.write(b"ef")
        self.assertEqual(buf.read_cursor, 2)
        self.assertEqual(bytes(buf.pending()), b"cdef")

    def test_available_buffer_grows_when_full(self):
        buf = FrameBuffer(8)
        buf.write(b"abcdefgh")
        view = buf.available_buffer()
        self.assertEqual(buf.capacity(), MIN_GROWTH)
        self.assertEqual(len(view), MIN_GROWTH - 8)
        self.assertEqual(bytes(buf.pending()), b"abcdefgh")

    def test_available_buffer_honours_min_size(self):
        buf = FrameBuffer(8)
        view = buf.available_buffer(1000)
        self.assertGreaterEqual(len(view), 1000)

    def test_zero_capacity_buffer_still_offers_space(self):
        buf = FrameBuffer(0)
        self.assertEqual(buf.capacity(), 0)
        self.assertGreater(len(buf.available_buffer()), 0)

    def test_growth_with_outstanding_views(self):
        buf = FrameBuffer(4)
        buf.write(b"abcd")
        held = buf.pending()
        buf.write(b"efgh" * 100)
        self.assertEqual(bytes(held), b"abcd")
        self.assertEqual(buf.pending_len(), 404)

    def test_advance_past_free_space(self):
        buf = FrameBuffer(4)
        buf.available_buffer()
        with self.assertRaises(ContractViolation):
            buf.advance(5)
        with self.assertRaises(ContractViolation):
            buf.advance(-1)
        self.assertEqual(buf.write_cursor, 0)

    def test_consume_past_pending(self):
        buf = FrameBuffer(4)
        buf.write(b"ab")
        with self.assertRaises(ContractViolation):
            buf.consume(3)

    def test_max_capacity(self):
        buf = FrameBuffer(4, max_capacity=16)
        buf.write(b"x" * 10)
        self.assertEqual(buf.capacity(), 16)
        with self.assertRaises(AllocationError) as cm:
            buf.write(b"y" * 7)
        self.assertEqual(cm.exception.max_capacity, 16)
        self.assertEqual(bytes(buf.pending()), b"x" * 10)

    def test_max_capacity_after_compaction(self):
        buf = FrameBuffer(8, max_capacity=8)
        buf.write(b"abcdefgh")
        buf.consume(4)
        buf.write(b"ijkl")
        self.assertEqual(bytes(buf.pending()), b"efghijkl")

    def test_initial_capacity_above_max(self):
        with self.assertRaises(AllocationError):
            FrameBuffer(32, max_capacity=16)

    def test_clear(self):
        buf = FrameBuffer(8)
        buf.write(b"abc")
        buf.clear()
        self.assertEqual(buf.pending_len(), 0)
        self.assertEqual(buf.read_cursor, 0)
        self.assertEqual(buf.write_cursor, 0)


if __name__ == "__main__":
    unittest.main()
