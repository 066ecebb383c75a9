from __future__ import annotations

import struct
from typing import Callable, List, Tuple

import pytest

from icoforge.models.image_model import SourceImage

RED = (255, 0, 0, 255)


@pytest.fixture
def make_source() -> Callable[..., SourceImage]:
    """Однотонный SourceImage заданного размера."""
    def _make(width: int, height: int, rgba=RED, premultiplied: bool = False) -> SourceImage:
        return SourceImage(
            width=width,
            height=height,
            pixels=bytes(rgba) * (width * height),
            premultiplied=premultiplied,
        )
    return _make


@pytest.fixture
def red_source(make_source) -> SourceImage:
    return make_source(100, 50)


@pytest.fixture
def read_directory() -> Callable[[bytes], Tuple[Tuple[int, int, int], List[tuple]]]:
    """Разбирает заголовок и каталог ICO: ((reserved, type, count), [entry, ...])."""
    def _read(data: bytes):
        header = struct.unpack_from("<HHH", data, 0)
        entries = [
            struct.unpack_from("<BBBBHHII", data, 6 + 16 * i)
            for i in range(header[2])
        ]
        return header, entries
    return _read
