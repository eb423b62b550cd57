"""Byte-level builders for test files.

These are written directly with struct so the tests do not depend on the
encoders they are checking.
"""

import struct
from io import BytesIO
from typing import List, Optional, Sequence, Tuple, Union

from PIL import Image

MP3_AUDIO = b"\xff\xfb\x90\x00" + b"\x00" * 60
FLAC_AUDIO = b"\xff\xf8\x69\x08" + b"\x00" * 28
APE_AUDIO = b"MAC \x96\x0f\x00\x00" + b"\x00" * 56


# ── ID3v2 ─────────────────────────────────────────────────────────────


def synchsafe(value: int) -> bytes:
    return bytes(
        [(value >> 21) & 0x7F, (value >> 14) & 0x7F, (value >> 7) & 0x7F, value & 0x7F]
    )


def id3_text(text: str, encoding: int = 0) -> bytes:
    """T*** frame payload."""
    if encoding == 0:
        return b"\x00" + text.encode("latin-1")
    if encoding == 1:
        return b"\x01" + b"\xff\xfe" + text.encode("utf-16-le")
    if encoding == 2:
        return b"\x02" + text.encode("utf-16-be")
    return b"\x03" + text.encode("utf-8")


def id3_comm(text: str, lang: bytes = b"eng", description: str = "", encoding: int = 0) -> bytes:
    """COMM/USLT payload."""
    if encoding == 1:
        desc = b"\xff\xfe" + description.encode("utf-16-le") + b"\x00\x00"
        body = b"\xff\xfe" + text.encode("utf-16-le")
    elif encoding == 3:
        desc = description.encode("utf-8") + b"\x00"
        body = text.encode("utf-8")
    else:
        desc = description.encode("latin-1") + b"\x00"
        body = text.encode("latin-1")
    return bytes([encoding]) + lang + desc + body


def id3_apic(data: bytes, mime: str = "image/jpeg", picture_type: int = 3, description: str = "") -> bytes:
    return (
        b"\x00"
        + mime.encode("latin-1")
        + b"\x00"
        + bytes([picture_type])
        + description.encode("latin-1")
        + b"\x00"
        + data
    )


def id3_frame(frame_id: bytes, payload: bytes, major: int = 3, flags: int = 0) -> bytes:
    if major == 2:
        return frame_id + len(payload).to_bytes(3, "big") + payload
    size = synchsafe(len(payload)) if major == 4 else struct.pack(">I", len(payload))
    return frame_id + size + struct.pack(">H", flags) + payload


def id3v2_tag(frames: Sequence[bytes], major: int = 3, padding: int = 0, flags: int = 0) -> bytes:
    body = b"".join(frames) + b"\x00" * padding
    return b"ID3" + bytes([major, 0, flags]) + synchsafe(len(body)) + body


def id3v2_file(frames: Sequence[bytes], major: int = 3, padding: int = 0, audio: bytes = MP3_AUDIO) -> bytes:
    return id3v2_tag(frames, major, padding) + audio


# ── ID3v1 ─────────────────────────────────────────────────────────────


def id3v1_block(
    title: bytes = b"",
    artist: bytes = b"",
    album: bytes = b"",
    year: bytes = b"",
    comment: bytes = b"",
    track: Optional[int] = None,
    genre: int = 255,
) -> bytes:
    if track is not None:
        comment_field = comment[:28].ljust(28, b"\x00") + b"\x00" + bytes([track])
    else:
        comment_field = comment[:30].ljust(30, b"\x00")
    return (
        b"TAG"
        + title.ljust(30, b"\x00")
        + artist.ljust(30, b"\x00")
        + album.ljust(30, b"\x00")
        + year.ljust(4, b"\x00")
        + comment_field
        + bytes([genre])
    )


# ── FLAC / Vorbis comment ─────────────────────────────────────────────


def vorbis_comment(entries: Sequence[Union[str, bytes]], vendor: str = "reference libFLAC 1.4.3 20230623") -> bytes:
    vendor_bytes = vendor.encode("utf-8")
    out = struct.pack("<I", len(vendor_bytes)) + vendor_bytes + struct.pack("<I", len(entries))
    for entry in entries:
        raw = entry if isinstance(entry, bytes) else entry.encode("utf-8")
        out += struct.pack("<I", len(raw)) + raw
    return out


def streaminfo(sample_rate: int = 44100, channels: int = 2, bits: int = 16, total_samples: int = 441000) -> bytes:
    packed = (sample_rate << 44) | ((channels - 1) << 41) | ((bits - 1) << 36) | total_samples
    return struct.pack(">HH", 4096, 4096) + b"\x00" * 6 + packed.to_bytes(8, "big") + b"\x00" * 16


def flac_picture(
    data: bytes,
    mime: str = "image/png",
    description: str = "",
    picture_type: int = 3,
    width: int = 0,
    height: int = 0,
    depth: int = 0,
) -> bytes:
    mime_bytes = mime.encode("ascii")
    desc_bytes = description.encode("utf-8")
    return (
        struct.pack(">II", picture_type, len(mime_bytes))
        + mime_bytes
        + struct.pack(">I", len(desc_bytes))
        + desc_bytes
        + struct.pack(">5I", width, height, depth, 0, len(data))
        + data
    )


def flac_block(block_type: int, payload: bytes, last: bool = False) -> bytes:
    return bytes([block_type | (0x80 if last else 0)]) + len(payload).to_bytes(3, "big") + payload


def flac_file(blocks: Sequence[Tuple[int, bytes]], audio: bytes = FLAC_AUDIO) -> bytes:
    """fLaC marker, the given (type, payload) blocks, audio."""
    out = b"fLaC"
    for index, (block_type, payload) in enumerate(blocks):
        out += flac_block(block_type, payload, last=index == len(blocks) - 1)
    return out + audio


def simple_flac(entries: Sequence[Union[str, bytes]], extra_blocks: Sequence[Tuple[int, bytes]] = ()) -> bytes:
    """STREAMINFO, VORBIS_COMMENT with ``entries``, extra blocks, PADDING."""
    blocks = [(0, streaminfo()), (4, vorbis_comment(entries))]
    blocks.extend(extra_blocks)
    blocks.append((1, b"\x00" * 64))
    return flac_file(blocks)


def flac_block_types(data: bytes) -> List[Tuple[int, bool]]:
    """(type, is_last) of every metadata block, walking the chain by hand."""
    pos = 4
    result = []
    while True:
        header = data[pos]
        length = int.from_bytes(data[pos + 1:pos + 4], "big")
        result.append((header & 0x7F, bool(header & 0x80)))
        pos += 4 + length
        if header & 0x80:
            return result


# ── Ogg ───────────────────────────────────────────────────────────────


def ogg_crc(data: bytes) -> int:
    crc = 0
    for byte in data:
        crc ^= byte << 24
        for _ in range(8):
            if crc & 0x80000000:
                crc = ((crc << 1) ^ 0x04C11DB7) & 0xFFFFFFFF
            else:
                crc = (crc << 1) & 0xFFFFFFFF
    return crc


def ogg_page(
    packets: Sequence[bytes],
    sequence: int,
    serial: int = 0x1234,
    granule: int = 0,
    header_type: int = 0,
) -> bytes:
    """A page holding complete packets."""
    segments: List[int] = []
    for packet in packets:
        segments += [255] * (len(packet) // 255) + [len(packet) % 255]
    header = struct.pack(
        "<4sBBqIIIB", b"OggS", 0, header_type, granule, serial, sequence, 0, len(segments)
    )
    page = header + bytes(segments) + b"".join(packets)
    return page[:22] + struct.pack("<I", ogg_crc(page)) + page[26:]


def split_pages(data: bytes) -> List[dict]:
    """Header fields, payload and raw bytes of every page."""
    pages = []
    pos = 0
    while pos < len(data):
        assert data[pos:pos + 4] == b"OggS"
        _, _, header_type, granule, serial, sequence, crc, count = struct.unpack_from(
            "<4sBBqIIIB", data, pos
        )
        segments = list(data[pos + 27:pos + 27 + count])
        end = pos + 27 + count + sum(segments)
        pages.append(
            {
                "header_type": header_type,
                "granule": granule,
                "serial": serial,
                "sequence": sequence,
                "crc": crc,
                "segments": segments,
                "raw": data[pos:end],
            }
        )
        pos = end
    return pages


def page_crc_ok(raw: bytes) -> bool:
    stored = struct.unpack_from("<I", raw, 22)[0]
    return ogg_crc(raw[:22] + b"\x00\x00\x00\x00" + raw[26:]) == stored


def vorbis_ident(channels: int = 2, sample_rate: int = 44100) -> bytes:
    return b"\x01vorbis" + struct.pack("<IBIiiiBB", 0, channels, sample_rate, 0, 128000, 0, 0xB8, 1)


VORBIS_SETUP = b"\x05vorbis" + bytes(range(40))


def ogg_vorbis_file(entries: Sequence[Union[str, bytes]], vendor: str = "Xiph.Org libVorbis I 20200704") -> bytes:
    comment = b"\x03vorbis" + vorbis_comment(entries, vendor) + b"\x01"
    return (
        ogg_page([vorbis_ident()], 0, header_type=0x02)
        + ogg_page([comment, VORBIS_SETUP], 1)
        + ogg_page([b"\x00" * 100], 2, granule=88200, header_type=0x04)
    )


def opus_head(channels: int = 2, pre_skip: int = 312, input_rate: int = 48000) -> bytes:
    return b"OpusHead" + struct.pack("<BBHIhB", 1, channels, pre_skip, input_rate, 0, 0)


def opus_file(entries: Sequence[str], vendor: str = "libopus 1.4") -> bytes:
    tags = b"OpusTags" + vorbis_comment(entries, vendor)
    return (
        ogg_page([opus_head()], 0, header_type=0x02)
        + ogg_page([tags], 1)
        + ogg_page([b"\x00" * 80], 2, granule=96312, header_type=0x04)
    )


# ── MP4 ───────────────────────────────────────────────────────────────


def mp4_atom(atom_type: bytes, payload: bytes = b"") -> bytes:
    return struct.pack(">I", 8 + len(payload)) + atom_type + payload


def mp4_item(key: bytes, value: bytes, data_type: int = 1) -> bytes:
    return mp4_atom(key, mp4_atom(b"data", struct.pack(">II", data_type, 0) + value))


def mp4_track(number: int, total: int = 0) -> bytes:
    return struct.pack(">HHHH", 0, number, total, 0)


def mp4_file(items: Sequence[bytes], quicktime_meta: bool = False, ilst_in_udta: bool = True) -> bytes:
    """ftyp, moov (mvhd, udta/meta/ilst) and mdat."""
    hdlr = mp4_atom(b"hdlr", b"\x00" * 8 + b"mdirappl" + b"\x00" * 9)
    ilst = mp4_atom(b"ilst", b"".join(items))
    meta_payload = (b"" if quicktime_meta else b"\x00\x00\x00\x00") + hdlr + ilst
    meta = mp4_atom(b"meta", meta_payload)
    mvhd = mp4_atom(b"mvhd", b"\x00" * 4 + struct.pack(">IIII", 0, 0, 1000, 5000) + b"\x00" * 80)
    if ilst_in_udta:
        moov = mp4_atom(b"moov", mvhd + mp4_atom(b"udta", meta))
    else:
        moov = mp4_atom(b"moov", mvhd + meta)
    ftyp = mp4_atom(b"ftyp", b"M4A " + struct.pack(">I", 0) + b"M4A isom")
    return ftyp + moov + mp4_atom(b"mdat", b"\x00" * 32)


# ── APE ───────────────────────────────────────────────────────────────


def ape_item(key: str, value: bytes, flags: int = 0) -> bytes:
    return struct.pack("<II", len(value), flags) + key.encode("ascii") + b"\x00" + value


def ape_footer(tag_size: int, item_count: int, flags: int = 0x40000000, version: int = 2000) -> bytes:
    return struct.pack("<8sIIII8s", b"APETAGEX", version, tag_size, item_count, flags, b"\x00" * 8)


def ape_file(items: Sequence[bytes], footer_in_size: bool = True, audio: bytes = APE_AUDIO) -> bytes:
    body = b"".join(items)
    size = len(body) + 32 if footer_in_size else len(body)
    return audio + body + ape_footer(size, len(items))


# ── Images ────────────────────────────────────────────────────────────


def png_bytes(width: int = 2, height: int = 3, mode: str = "RGB") -> bytes:
    buffer = BytesIO()
    Image.new(mode, (width, height)).save(buffer, "PNG")
    return buffer.getvalue()


def jpeg_bytes(width: int = 4, height: int = 4) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), (200, 10, 10)).save(buffer, "JPEG")
    return buffer.getvalue()
