"""
router_modifier.py -- Start from the deployment region, let latency override it.

Router picks an endpoint from AWS_REGION without any network access.
Attaching a LatencySelector as its modifier lets measured latency win.
"""

import asyncio

from apirouter import EndpointSet, LatencySelector, Router, config_builder


async def main() -> None:
    endpoints = EndpointSet(
        us_east="https://us-east.api.example.com",
        us_west="https://us-west.api.example.com",
        europe="https://eu.api.example.com",
        fallback="https://api.example.com",
    )

    router = Router.from_environment(endpoints)
    print(f"Region {router.region!r} -> {router.url()}")

    selector = await LatencySelector.create(
        endpoints, config_builder().ping_interval(60_000).build()
    )
    router.add_modifier(selector)
    print(f"With latency modifier -> {router.modifier_url()}")

    await selector.close()


if __name__ == "__main__":
    asyncio.run(main())
