"""Shared snapshot builders for tests."""

from __future__ import annotations

from typing import Callable

import pytest


def product_rows(count: int, start: int = 1, indent: str = "  ") -> list[str]:
    """Listitem rows that differ only in their link text."""

    lines: list[str] = []
    for i in range(start, start + count):
        lines.append(f"{indent}- listitem [ref=li{i}]:")
        lines.append(f'{indent}  - link "Product {i}" [ref=a{i}] [cursor=pointer]:')
        lines.append(f"{indent}    - /url: /products/{i}")
    return lines


@pytest.fixture
def make_rows() -> Callable[..., list[str]]:
    return product_rows


@pytest.fixture
def product_list() -> str:
    """A list of 50 structurally identical product rows."""

    return "\n".join(["- list [ref=l]:", *product_rows(50)])


@pytest.fixture
def split_list() -> str:
    """Three rows, a heading, then three more rows."""

    return "\n".join(
        [
            "- list [ref=l]:",
            *product_rows(3),
            '  - heading "Break" [level=2] [ref=h]',
            *product_rows(3, start=4),
        ]
    )
