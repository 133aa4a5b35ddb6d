# pyntfsboot/scan/hexdump.py
from __future__ import annotations


def hexdump(data: bytes, base: int = 0, ascii: bool = True) -> str:
    lines = []
    for i in range(0, len(data), 16):
        chunk = bytes(data[i:i+16])
        hex_bytes = ' '.join(f'{b:02X}' for b in chunk)
        if ascii:
            text = ''.join(chr(b) if 32 <= b < 127 else '.' for b in chunk)
            lines.append(f'{base+i:08X}: {hex_bytes:<47}  |{text}|')
        else:
            lines.append(f'{base+i:08X}: {hex_bytes}')
    return '\n'.join(lines)
