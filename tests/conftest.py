"""Shared fixtures for the i18nify test suite."""

from typing import Callable, List

import pytest

from i18nify.syntax import SyntaxTree, parse, walk


@pytest.fixture
def parsed() -> Callable[[str], SyntaxTree]:
    def _parse(code: str) -> SyntaxTree:
        tree = parse(code)
        assert tree is not None, f"fixture source failed to parse: {code!r}"
        return tree

    return _parse


def nodes_of_type(tree: SyntaxTree, node_type: str) -> List:
    return [node for node in walk(tree) if node.type == node_type]
