from typing import Dict
import os
import pytest


def snapshot_tree(root: str) -> Dict[str, bytes]:
    """Map every file under root (relative path) to its contents."""
    tree: Dict[str, bytes] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for dirname in dirnames:
            tree[os.path.relpath(os.path.join(dirpath, dirname), root) + "/"] = b""
        for filename in filenames:
            path = os.path.join(dirpath, filename)
            with open(path, "rb") as f:
                tree[os.path.relpath(path, root)] = f.read()
    return tree


@pytest.fixture
def base_dir(tmp_path) -> str:
    return str(tmp_path)


@pytest.fixture
def snapshot():
    return snapshot_tree
