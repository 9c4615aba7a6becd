#!/usr/bin/env python3
"""
Example: Demonstrate cache versus database read latency.

Reads the same cities from Redis and from the database and shows the speedup.
"""

import logging

from world_cache.config import PROBE_IDS
from world_cache.pipeline import WorldCachePipeline

logging.basicConfig(level=logging.INFO)


def main():
    with WorldCachePipeline.from_urls() as pipeline:
        print("Loading the cache...")
        pipeline.load()

        print(f"Probing {len(PROBE_IDS)} cities...\n")
        timings = pipeline.compare(PROBE_IDS)
        for line in timings.report_lines():
            print(f"  {line}")

        if timings.cache_ms > 0:
            speedup = timings.relational_ms / timings.cache_ms
            print(f"\nSpeedup from caching: {speedup:.1f}x faster")

        # Verify the cache holds every probed city
        result = pipeline.verify(PROBE_IDS)
        assert result.all_found, f"Cache is missing {result.missing + result.invalid}"
        print("✓ Cache integrity verified - every probed city decoded")


if __name__ == "__main__":
    main()
