from __future__ import annotations

from typing import Sequence


def composite(
    background: Sequence[str],
    popup: Sequence[str],
    viewport_width: int,
    viewport_height: int,
    popup_width: int,
) -> list[str]:
    """Merge ``popup`` centred on top of ``background``.

    Columns left of the popup keep the background (space-padded when the
    background line is short), columns right of it keep whatever background
    reaches past the popup. Rows outside the popup band are copied as-is;
    missing background rows become blank lines of ``viewport_width``.
    """
    popup_height = len(popup)
    row_offset = max(0, (viewport_height - popup_height) // 2)
    col_offset = max(0, (viewport_width - popup_width) // 2)
    col_end = col_offset + popup_width

    merged: list[str] = []
    for row in range(max(0, viewport_height)):
        has_background = row < len(background)
        line = background[row] if has_background else " " * viewport_width
        popup_row = row - row_offset
        if 0 <= popup_row < popup_height:
            left = line[:col_offset].ljust(col_offset)
            right = line[col_end:] if len(line) > col_end else ""
            merged.append(left + popup[popup_row] + right)
        else:
            merged.append(line)
    return merged
