"""
tanglebundles/examples/bundles_from_addresses.py

Prints the bundles touching the given addresses, oldest first.

Usage:
    TANGLEBUNDLES_NODE_URL=http://localhost:14265 \
        python examples/bundles_from_addresses.py ADDRESS [ADDRESS ...]
"""

import asyncio
import logging
import sys

from tanglebundles import create_client, create_get_bundles_from_addresses

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [BUNDLES] %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)


async def main(addresses):
    async with create_client() as client:
        bundles_from_addresses = create_get_bundles_from_addresses(client)
        bundles = await bundles_from_addresses(addresses, inclusion_states=True)

    logger.info(f"Found {len(bundles)} bundles")
    for bundle in bundles:
        tail = bundle[0]
        state = "confirmed" if tail.persistence else "pending"
        complete = "" if bundle[-1].current_index == tail.last_index else " (incomplete)"
        print(f"{tail.attachment_timestamp} {tail.bundle} {len(bundle)} txs {state}{complete}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(sys.argv[1:]))
