import pytest

from garuda.services.ndjson import ndjson_text_stream, parse_event
from tests.helpers import aiter_chunks, collect


@pytest.mark.anyio
async def test_om_shanti_stops_at_done():
    body = (
        b'{"message":{"content":"Om"},"done":false}\n'
        b'{"message":{"content":" Shanti"},"done":true}\n'
        b'{"message":{"content":" ignored"},"done":false}\n'
    )
    assert await collect(ndjson_text_stream(aiter_chunks(body))) == b"Om Shanti"


@pytest.mark.anyio
async def test_done_does_not_read_further_chunks():
    consumed = []

    async def upstream():
        consumed.append(1)
        yield b'{"message":{"content":"Om"},"done":true}\n'
        consumed.append(2)
        yield b'{"message":{"content":" more"}}\n'

    assert await collect(ndjson_text_stream(upstream())) == b"Om"
    assert consumed == [1]


@pytest.mark.anyio
async def test_malformed_lines_are_skipped():
    body = (
        b'{"message":{"content":"Hare"}}\n'
        b"not json\n"
        b"[1, 2, 3]\n"
        b"\n"
        b'{"message":{"content":" Krishna"},"done":true}\n'
    )
    assert await collect(ndjson_text_stream(aiter_chunks(body))) == b"Hare Krishna"


@pytest.mark.anyio
async def test_lines_and_characters_split_across_chunks():
    line = '{"message":{"content":"ॐ शान्ति"}}\n'.encode("utf-8")
    # Split inside the JSON and inside a multi-byte character
    cut = line.index("ॐ".encode("utf-8")) + 1
    chunks = [line[:10], line[10:cut], line[cut:], b'{"done":true}\n']
    assert (await collect(ndjson_text_stream(aiter_chunks(*chunks)))).decode("utf-8") == "ॐ शान्ति"


@pytest.mark.anyio
async def test_trailing_line_without_newline_is_flushed():
    body = b'{"message":{"content":"a"}}\n{"message":{"content":"b"}}'
    assert await collect(ndjson_text_stream(aiter_chunks(body))) == b"ab"


@pytest.mark.anyio
async def test_stream_without_done_ends_with_input():
    body = b'{"message":{"content":"a"},"done":false}\n'
    assert await collect(ndjson_text_stream(aiter_chunks(body))) == b"a"


def test_parse_event_shapes():
    assert parse_event('{"message":{"content":"x"},"done":false}') == ("x", False)
    assert parse_event('{"done":true}') == (None, True)
    assert parse_event('{"message":{"content":""}}') == (None, False)
    assert parse_event('{"message":"oops"}') == (None, False)
    assert parse_event("{broken") == (None, False)
