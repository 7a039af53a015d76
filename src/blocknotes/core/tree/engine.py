"""Pure operations over a tree of blocks, addressed by block id.

A tree is one level of blocks (a note's document or a block's children).
Block ids are unique across the whole tree, so every lookup walks all
levels depth-first in document order. Mutators never modify their input;
they return a new tree and reuse untouched subtrees.

Operations aimed at an id that is no longer in the tree are no-ops: an
editor holding a stale reference after a delete must not crash.
"""

from collections.abc import Callable, Iterator
from dataclasses import replace

from loguru import logger

from blocknotes.errors import ValidationError
from blocknotes.models.block import Block, BlockMetadata, BlockType

Tree = tuple[Block, ...]
Path = tuple[int, ...]


def iter_blocks(tree: Tree) -> Iterator[Block]:
    """Yield every block in document order (depth-first, pre-order)."""
    for block in tree:
        yield block
        yield from iter_blocks(block.children)


def find_by_id(tree: Tree, block_id: str) -> Block | None:
    """Return the block with ``block_id`` at any depth, or None."""
    for block in iter_blocks(tree):
        if block.id == block_id:
            return block
    return None


def depth_of(tree: Tree, block_id: str) -> int | None:
    """Return how many levels below the top ``block_id`` sits, or None."""
    path = _locate(tree, block_id)
    return None if path is None else len(path) - 1


def update_by_id(
    tree: Tree,
    block_id: str,
    *,
    content: str | None = None,
    block_type: BlockType | None = None,
    metadata: BlockMetadata | None = None,
) -> Tree:
    """Merge the given fields into the block with ``block_id``.

    ``metadata`` is merged field by field into the existing metadata.
    The block's id and children are never touched.
    """

    def patch(block: Block) -> Block:
        merged = metadata if block.metadata is None else block.metadata.merged(metadata)
        return replace(
            block,
            content=block.content if content is None else content,
            type=block.type if block_type is None else block_type,
            metadata=merged,
        )

    result, found = _map_target(tree, block_id, patch)
    if not found:
        logger.debug("update_by_id: block {} not found, tree unchanged", block_id)
    return result


def insert_after(tree: Tree, after_id: str | None, new_block: Block) -> Tree:
    """Insert ``new_block`` as the next sibling of ``after_id``.

    With no ``after_id``, or one that does not resolve, the block is
    appended to the top level.

    Raises:
        ValidationError: If ``new_block`` (or a descendant) reuses an id.
    """
    _check_ids_free(tree, new_block)
    if after_id is not None:
        result, found = _insert_after(tree, after_id, new_block)
        if found:
            return result
        logger.debug("insert_after: block {} not found, appending {}", after_id, new_block.id)
    return (*tree, new_block)


def delete_by_id(tree: Tree, block_id: str) -> Tree:
    """Remove the block with ``block_id`` and its whole subtree.

    The result may be empty; keeping a document non-empty is up to the caller.
    """
    result, found = _delete(tree, block_id)
    if not found:
        logger.debug("delete_by_id: block {} not found, tree unchanged", block_id)
    return result


def set_indent(tree: Tree, block_id: str, delta: int) -> Tree:
    """Move a block one level deeper, or up to ``-delta`` levels shallower.

    Indenting nests the block (with its subtree) at the end of its preceding
    sibling's children, so it is never more than one level below that
    sibling; a first child cannot be indented. Outdenting places the block
    right after its parent and stops at the top level. List blocks in the
    moved subtree get their ``indent`` metadata set to the new depth.
    """
    if delta > 0:
        return _indent(tree, block_id)
    for _ in range(-delta):
        moved = _outdent(tree, block_id)
        if moved is tree:
            break
        tree = moved
    return tree


def _map_target(tree: Tree, block_id: str, fn: Callable[[Block], Block]) -> tuple[Tree, bool]:
    for i, block in enumerate(tree):
        if block.id == block_id:
            return (*tree[:i], fn(block), *tree[i + 1 :]), True
        if block.children:
            children, found = _map_target(block.children, block_id, fn)
            if found:
                return (*tree[:i], replace(block, children=children), *tree[i + 1 :]), True
    return tree, False


def _insert_after(tree: Tree, after_id: str, new_block: Block) -> tuple[Tree, bool]:
    for i, block in enumerate(tree):
        if block.id == after_id:
            return (*tree[: i + 1], new_block, *tree[i + 1 :]), True
        if block.children:
            children, found = _insert_after(block.children, after_id, new_block)
            if found:
                return (*tree[:i], replace(block, children=children), *tree[i + 1 :]), True
    return tree, False


def _delete(tree: Tree, block_id: str) -> tuple[Tree, bool]:
    for i, block in enumerate(tree):
        if block.id == block_id:
            return (*tree[:i], *tree[i + 1 :]), True
        if block.children:
            children, found = _delete(block.children, block_id)
            if found:
                return (*tree[:i], replace(block, children=children), *tree[i + 1 :]), True
    return tree, False


def _check_ids_free(tree: Tree, new_block: Block) -> None:
    seen = {b.id for b in iter_blocks(tree)}
    for block in iter_blocks((new_block,)):
        if block.id in seen:
            msg = f"Duplicate block id: {block.id!r}"
            raise ValidationError(msg)
        seen.add(block.id)


def _locate(tree: Tree, block_id: str, prefix: Path = ()) -> Path | None:
    """Return the index path of ``block_id``; ``len(path) - 1`` is its depth."""
    for i, block in enumerate(tree):
        if block.id == block_id:
            return (*prefix, i)
        if block.children:
            found = _locate(block.children, block_id, (*prefix, i))
            if found is not None:
                return found
    return None


def _level_at(tree: Tree, parent_path: Path) -> Tree:
    level = tree
    for index in parent_path:
        level = level[index].children
    return level


def _with_level_at(tree: Tree, parent_path: Path, level: Tree) -> Tree:
    if not parent_path:
        return level
    index, rest = parent_path[0], parent_path[1:]
    block = tree[index]
    updated = replace(block, children=_with_level_at(block.children, rest, level))
    return (*tree[:index], updated, *tree[index + 1 :])


def _reindent(block: Block, depth: int) -> Block:
    children = tuple(_reindent(child, depth + 1) for child in block.children)
    metadata = block.metadata
    if block.is_list:
        metadata = (metadata or BlockMetadata()).merged(BlockMetadata(indent=depth))
    return replace(block, metadata=metadata, children=children)


def _indent(tree: Tree, block_id: str) -> Tree:
    path = _locate(tree, block_id)
    if path is None:
        logger.debug("set_indent: block {} not found, tree unchanged", block_id)
        return tree
    parent_path, index = path[:-1], path[-1]
    if index == 0:
        return tree
    siblings = _level_at(tree, parent_path)
    previous = siblings[index - 1]
    moved = _reindent(siblings[index], len(path))
    previous = replace(previous, children=(*previous.children, moved))
    level = (*siblings[: index - 1], previous, *siblings[index + 1 :])
    return _with_level_at(tree, parent_path, level)


def _outdent(tree: Tree, block_id: str) -> Tree:
    path = _locate(tree, block_id)
    if path is None:
        logger.debug("set_indent: block {} not found, tree unchanged", block_id)
        return tree
    if len(path) == 1:
        return tree
    grandparent_path, parent_index, index = path[:-2], path[-2], path[-1]
    parent_level = _level_at(tree, grandparent_path)
    parent = parent_level[parent_index]
    moved = _reindent(parent.children[index], len(path) - 2)
    parent = replace(parent, children=(*parent.children[:index], *parent.children[index + 1 :]))
    level = (*parent_level[:parent_index], parent, moved, *parent_level[parent_index + 1 :])
    return _with_level_at(tree, grandparent_path, level)
