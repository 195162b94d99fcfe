"""Replace file names inside media and slider blocks with resolved files."""
from collections.abc import Sequence
from typing import Any

from services.file_resolver import FileResolver


async def rewrite_blocks(
    blocks: Sequence[dict[str, Any]],
    resolver: FileResolver,
) -> list[dict[str, Any]]:
    """
    Return a new block list with media references resolved.

    `shared.media` blocks get their `file` name resolved and `shared.slider`
    blocks their `files` names; both are shallow-copied first. Every other
    block is passed through as the same object. Order is preserved.
    """
    updated: list[dict[str, Any]] = []
    for block in blocks:
        component = block.get("__component")
        if component == "shared.media":
            block_copy = dict(block)
            block_copy["file"] = await resolver.resolve([block["file"]])
            updated.append(block_copy)
        elif component == "shared.slider":
            block_copy = dict(block)
            block_copy["files"] = await resolver.resolve(block["files"])
            updated.append(block_copy)
        else:
            updated.append(block)
    return updated
