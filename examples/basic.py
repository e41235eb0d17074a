"""
basic.py -- Probe a set of regional mirrors once and print the fastest.

With no ping interval the selector probes at startup only and then keeps
that choice.
"""

import asyncio
import logging

from apirouter import EndpointSet, LatencySelector, RouterError, config_builder


async def main() -> None:
    logging.basicConfig(level=logging.DEBUG)

    endpoints = EndpointSet(
        universal="https://api.example.com",
        us_east="https://us-east.api.example.com",
        us_west="https://us-west.api.example.com",
        europe="https://eu.api.example.com",
        asia_pacific="https://ap.api.example.com",
        fallback="https://api.example.com",
    )

    config = (
        config_builder()
        .probe_timeout(1_000)
        .debug_mode(True)  # log every probe outcome
        .build()
    )

    try:
        selector = await LatencySelector.create(endpoints, config)
    except RouterError as e:
        print(f"Invalid endpoints [{e.code}]: {e}")
        return

    print(f"Region: {selector.region or 'unknown'}")
    print(f"Fastest endpoint: {selector.current_endpoint()}")
    for result in selector.last_results():
        latency = f"{result.elapsed_ms:.1f}ms" if result.reachable else "unreachable"
        print(f"  {result.url:40} {latency}")

    await selector.close()


if __name__ == "__main__":
    asyncio.run(main())
