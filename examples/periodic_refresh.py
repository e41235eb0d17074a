"""
periodic_refresh.py -- Keep the fastest endpoint current in the background.

The selector re-probes every ping interval; readers just call
current_endpoint(), which never waits on the network.
"""

import asyncio
import os

from apirouter import EndpointSet, LatencySelector, config_builder


async def main() -> None:
    endpoints = EndpointSet.from_dict(
        {
            "universal": os.environ.get("API_UNIVERSAL", "https://api.example.com"),
            "us_east": "https://us-east.api.example.com",
            "europe": "https://eu.api.example.com",
            "fallback": "https://api.example.com",
        }
    )

    config = (
        config_builder()
        .ping_interval(5_000)    # re-probe every 5s
        .probe_timeout(1_000)    # each round gives up after 1s
        .region("us-east-1")     # seed before the first probe
        .build()
    )

    async with await LatencySelector.create(endpoints, config) as selector:
        for _ in range(6):
            print(f"[{selector.state.value}] {selector.current_endpoint()}")
            await asyncio.sleep(2)


if __name__ == "__main__":
    asyncio.run(main())
