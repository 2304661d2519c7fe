"""
Bit-level cursors over texture data.

Fields narrower than a byte are packed high bits first, so the first nibble of
a byte is its upper four bits. Multi-byte fields are little-endian, matching
the PICA200 GPU.
"""

from __future__ import annotations


class BitReader:
    def __init__(self, data: bytes, offset: int = 0):
        self.data = bytes(data)
        self.pos = offset * 8  # in bits

    @property
    def remaining_bits(self) -> int:
        return len(self.data) * 8 - self.pos

    def read_bits(self, count: int) -> int:
        """Read `count` bits, most significant first."""
        if count > self.remaining_bits:
            raise EOFError(f"Need {count} bits at bit {self.pos}, {self.remaining_bits} left")

        value = 0
        while count:
            byte = self.data[self.pos >> 3]
            used = self.pos & 7
            take = min(8 - used, count)
            chunk = (byte >> (8 - used - take)) & ((1 << take) - 1)
            value = (value << take) | chunk
            self.pos += take
            count -= take
        return value

    def read_nibble(self) -> int:
        return self.read_bits(4)

    def read_u8(self) -> int:
        return self.read_bits(8)

    def read_bytes(self, size: int) -> bytes:
        return bytes(self.read_u8() for _ in range(size))

    def read_u16(self) -> int:
        return int.from_bytes(self.read_bytes(2), 'little')

    def read_u64(self) -> int:
        return int.from_bytes(self.read_bytes(8), 'little')


class BitWriter:
    def __init__(self):
        self.buffer = bytearray()
        self.pos = 0  # in bits

    def write_bits(self, value: int, count: int):
        """Append the low `count` bits of value, most significant first."""
        while count:
            used = self.pos & 7
            if not used:
                self.buffer.append(0)
            take = min(8 - used, count)
            chunk = (value >> (count - take)) & ((1 << take) - 1)
            self.buffer[-1] |= chunk << (8 - used - take)
            self.pos += take
            count -= take

    def write_nibble(self, value: int):
        self.write_bits(value, 4)

    def write_u8(self, value: int):
        self.write_bits(value, 8)

    def write_bytes(self, data: bytes):
        for byte in data:
            self.write_u8(byte)

    def write_u16(self, value: int):
        self.write_bytes((value & 0xFFFF).to_bytes(2, 'little'))

    def write_u64(self, value: int):
        self.write_bytes((value & 0xFFFFFFFFFFFFFFFF).to_bytes(8, 'little'))

    def getvalue(self) -> bytes:
        # A trailing half byte is padded with zero bits
        return bytes(self.buffer)
