"""Tests for sharing one decoder between threads"""

# pylint: disable=redefined-outer-name,unused-variable,expression-not-assigned,singleton-comparison

import threading
from concurrent.futures import ThreadPoolExecutor

from jsonproto.proto.config import DecodeConfig
from jsonproto.proto.naming import NamingPolicy

WORKERS = 8

DOCUMENT = """
{
  "count": 3,
  "origin": {"x": 1, "y": 2},
  "points": [{"x": 3}, {"y": 4}],
  "marker": {"x": 5},
  "child": {"origin": {"x": 6}, "child": {"label": "leaf"}}
}
"""


def run_concurrently(func):
    barrier = threading.Barrier(WORKERS)

    def task(_):
        barrier.wait()
        return func()

    with ThreadPoolExecutor(max_workers=WORKERS) as executor:
        return list(executor.map(task, range(WORKERS)))


def describe_shared_decoder():
    def concurrent_decodes_agree(expect, decoder):
        results = run_concurrently(lambda: decoder.decode_json(DOCUMENT))
        expected = decoder.decode_json(DOCUMENT)
        expect(all(result == expected for result in results)) == True
        expect(results[0]["child"]["child"]["label"]) == "leaf"

    def nested_decoder_is_resolved_once(expect, pool, decoder):
        origin = pool.message("Sample").find_field("origin")

        def decode_and_fetch():
            decoder.decode_json(DOCUMENT)
            return decoder.cached_decoder(origin)

        cached = run_concurrently(decode_and_fetch)
        expect(cached[0] is not None) == True
        expect(all(c is cached[0] for c in cached)) == True

        decoder.decode_json(DOCUMENT)
        expect(decoder.cached_decoder(origin) is cached[0]) == True

    def cache_is_keyed_by_field(expect, pool, decoder):
        sample = pool.message("Sample")
        decoder.decode_json(DOCUMENT)
        origin = decoder.cached_decoder(sample.find_field("origin"))
        points = decoder.cached_decoder(sample.find_field("points"))
        expect(origin is points) == False
        expect(origin.descriptor is points.descriptor) == True

    def configs_do_not_leak_between_calls(expect, decoder):
        snake = DecodeConfig(name_translation=NamingPolicy.SNAKE_CASE)

        def decode(index):
            if index % 2:
                return decoder.decode_json('{"display_name": "s"}', snake)["display_name"]
            return decoder.decode_json('{"displayName": "c"}')["display_name"]

        barrier = threading.Barrier(WORKERS)

        def task(index):
            barrier.wait()
            return decode(index)

        with ThreadPoolExecutor(max_workers=WORKERS) as executor:
            results = list(executor.map(task, range(WORKERS)))

        expect(results) == ["c", "s"] * (WORKERS // 2)
