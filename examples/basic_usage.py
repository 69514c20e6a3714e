#!/usr/bin/env python3
"""
Basic usage example for lazytreelib.

This example demonstrates:
- Lazy loading children on expand
- Adding, renaming and relocating nodes
- Cycle prevention when a move would nest a node inside itself
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from lazytreelib import TreeSession, TreeStore, demo_repository, demo_root


def print_outline(session: TreeSession):
    for node, depth in session.visible_rows():
        marker = "-" if session.is_expanded(node.id) else "+"
        if node.is_loaded and node.is_leaf():
            marker = " "
        print(f"  {'  ' * depth}{marker} [{node.level}] {node.name} ({node.id})")
    print()


async def main():
    store = TreeStore(demo_root(), repository=demo_repository(latency=0.2))
    session = TreeSession(store)
    store.subscribe(lambda root: print(f"  ... snapshot updated (root loading={root.is_loading})"))

    print("Expanding the root:")
    await session.toggle_expand("node-1")
    await session.toggle_expand("node-2")
    print_outline(session)

    print("Adding 'Billing' under Services and renaming it:")
    billing = store.create_child("node-2", "Billing")
    session.rename(billing.id, "Billing Service")
    print_outline(session)

    print("Moving Components before Services:")
    session.move("node-6", "node-2", "before")
    print_outline(session)

    print("Trying to move Services inside its own child (refused):")
    before = store.root
    session.move("node-2", "node-3", "inside")
    print(f"  tree unchanged: {store.root is before}\n")


if __name__ == "__main__":
    asyncio.run(main())
