"""
KeyValue records and the JSON stream format shared by every stage.
Each record is one JSON object {"Key": ..., "Value": ...}, written one per line.
"""

import re
import json
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TextIO

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()
_whitespace = re.compile(r'\s*')


@dataclass(frozen=True)
class KeyValue:
    key: str
    value: str


@dataclass
class DecodeStats:
    """Per-stream counters filled in while decoding"""
    decoded: int = 0
    skipped: int = 0


def encode_record(kv: KeyValue) -> str:
    """Encode one record as a single line, including the trailing newline."""
    return json.dumps({'Key': kv.key, 'Value': kv.value}) + '\n'


def write_records(fp: TextIO, records: Iterable[KeyValue]) -> int:
    """Write records to an open text file. Returns the number written."""
    count = 0
    for kv in records:
        fp.write(encode_record(kv))
        count += 1
    return count


def _to_record(obj) -> Optional[KeyValue]:
    if not isinstance(obj, dict):
        return None
    key = obj.get('Key')
    value = obj.get('Value')
    if not isinstance(key, str) or not isinstance(value, str):
        return None
    return KeyValue(key, value)


def decode_stream(fp: TextIO, source: str = '<stream>',
                  stats: Optional[DecodeStats] = None) -> Iterator[KeyValue]:
    """
    Lazily decode KeyValue records from a text stream.

    Records are self-delimiting JSON objects; one may span several lines and
    several may share a line. A malformed record is logged and skipped, and
    decoding resumes on the line after the one the record started on.

    Args:
        fp: Open text stream
        source: Name used in log messages
        stats: Optional counters updated as records are decoded or skipped

    Yields:
        KeyValue records in stream order
    """
    if stats is None:
        stats = DecodeStats()

    buf = ''
    line_base = 1
    for line in fp:
        buf += line
        buf, line_base = yield from _drain(buf, line_base, source, stats, final=False)
    yield from _drain(buf, line_base, source, stats, final=True)


def _drain(buf: str, line_base: int, source: str, stats: DecodeStats, final: bool):
    """
    Decode every complete record in buf.

    Returns the unconsumed tail of buf and the line number it starts on.
    """
    pos = 0
    while True:
        pos = _whitespace.match(buf, pos).end()
        if pos == len(buf):
            return '', line_base + buf.count('\n')

        try:
            obj, end = _decoder.raw_decode(buf, pos)
        except json.JSONDecodeError as e:
            if not final and e.pos >= len(buf.rstrip()):
                # Record continues on a later line
                return buf[pos:], line_base + buf.count('\n', 0, pos)

            stats.skipped += 1
            line_num = line_base + buf.count('\n', 0, pos)
            logger.warning(f"Skipping malformed record in {source} line {line_num}: {e.msg}")
            newline = buf.find('\n', pos)
            if newline == -1:
                return '', line_base + buf.count('\n')
            pos = newline + 1
            continue

        kv = _to_record(obj)
        if kv is None:
            stats.skipped += 1
            line_num = line_base + buf.count('\n', 0, pos)
            logger.warning(f"Skipping record without string Key/Value in {source} line {line_num}")
        else:
            stats.decoded += 1
            yield kv
        pos = end
