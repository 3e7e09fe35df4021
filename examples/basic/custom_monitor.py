#!/usr/bin/env python3
"""
monitorcore Basic Example: a custom monitor

This example demonstrates:
- Registering steps with the @registry.step() decorator
- Timing a step with reporter.timed()
- Installing a cleanup handler from inside a step
- Running a session against the in-process ScriptedChannel

Run: python examples/basic/custom_monitor.py
"""

import asyncio

from monitorcore import CLEANUP, Reporter, ScriptedChannel, StepRegistry, StepRunner


def echo(call):
    print(f"  {call.kind:<10} {'' if call.payload is None else call.payload}")


async def main():
    print("=" * 60)
    print("monitorcore Basic Example: custom monitor")
    print("=" * 60)

    channel = ScriptedChannel(
        ["CreateItem", "GetItem", CLEANUP, "DeleteMissing"],
        config={"endpoint": "https://api.example.test"},
        echo=echo,
    )
    reporter = Reporter(channel)
    registry = StepRegistry()
    runner = StepRunner(channel, registry, reporter=reporter)
    items = {}

    @registry.step("CreateItem")
    async def create_item():
        async with reporter.timed():
            await asyncio.sleep(0.01)
            items["item-1"] = {"name": "probe"}

        async def cleanup():
            items.clear()
            print("  (cleanup removed test items)")

        runner.on_cleanup(cleanup)

    @registry.step("GetItem")
    async def get_item():
        if "item-1" not in items:
            raise LookupError("item-1 missing")
        await reporter.log_info("found item-1")

    @registry.step("DeleteMissing")
    async def delete_missing():
        del items["item-1"]

    summary = await runner.run()

    print("-" * 60)
    print(f"Executed: {summary.executed}  Failed: {summary.failed}  Exit: {summary.exit_code}")


if __name__ == "__main__":
    asyncio.run(main())
