"""Browsing tools demo script.

Drives a remote Browserless session the way an agent would: navigate, search
with type + keyPress, inspect the page and always end the session.

Requirements:
    - BROWSERLESS_TOKEN environment variable
"""

import asyncio
import json
from pathlib import Path

from browserless_tools.core.logging import get_logger, setup_logging
from browserless_tools.tools import BrowserlessToolkit

logger = get_logger(__name__)


async def search_wikipedia(query: str) -> dict:
    """Search Wikipedia and collect what the agent would see.

    Args:
        query: Search terms typed into the search box

    Returns:
        dict: Envelopes keyed by tool name
    """
    toolkit = BrowserlessToolkit.from_settings()
    results: dict[str, dict] = {}

    try:
        results["navigate"] = await toolkit.invoke(
            "navigate", {"url": "https://en.wikipedia.org/wiki/Main_Page"}
        )
        logger.info("observe_session", url=results["navigate"].get("url"))

        results["querySelectors"] = await toolkit.invoke("querySelectors", {"query": "search"})
        results["type"] = await toolkit.invoke(
            "type", {"selector": "input[name='search']", "text": query}
        )
        results["keyPress"] = await toolkit.invoke("keyPress", {"key": "Enter"})
        results["listAnchors"] = await toolkit.invoke("listAnchors", {"max": 20})
        results["getText"] = await toolkit.invoke("getText", {})

    finally:
        # Always release the remote browser
        results["sessionEnd"] = await toolkit.invoke("sessionEnd", {})

    return results


async def main():
    """Main demo function."""
    setup_logging()

    results = await search_wikipedia("Playwright (software)")

    output_dir = Path("output")
    output_dir.mkdir(exist_ok=True)
    with open(output_dir / "browse_results.json", "w") as f:
        json.dump(results, f, indent=2, default=str)

    print("\n=== Session Summary ===")
    for name, envelope in results.items():
        status = "error" if "error" in envelope else "ok"
        print(f"{name:15} {status:6} {envelope['summary'][:80]}")


if __name__ == "__main__":
    asyncio.run(main())
