"""Ogg Opus: same page handling as Ogg Vorbis, ``OpusTags`` comment packet."""

import struct
from typing import Any, Dict

from ..constants import OPUS_HEAD_MAGIC, OPUS_TAGS_MAGIC
from .ogg import OggCodec, OggStream, last_granule

# Opus granule positions always count 48 kHz samples
OPUS_GRANULE_RATE = 48000


class OpusCodec(OggCodec):
    name = "opus"
    magic = OPUS_TAGS_MAGIC
    header_packets = 1
    framing = False

    def _stream_info(self, stream: OggStream) -> Dict[str, Any]:
        """OpusHead: channel count, pre-skip and the original input rate."""
        head = stream.pages[0].data
        if len(head) < 19 or not head.startswith(OPUS_HEAD_MAGIC):
            return {}
        version, channels, pre_skip, input_rate = struct.unpack_from("<BBHI", head, 8)
        result: Dict[str, Any] = {
            "opus_version": version,
            "channels": channels,
            "pre_skip": pre_skip,
            "input_sample_rate": input_rate,
        }
        granule = last_granule(stream)
        if granule is not None:
            result["duration"] = round(max(granule - pre_skip, 0) / OPUS_GRANULE_RATE, 3)
        return result
