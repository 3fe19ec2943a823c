"""Fixed seat layouts of the study hall rooms.

A layout is a list of rows. Each row is a list of cells where a cell is a
seat id (``"4A001"``), ``SPACER`` for an aisle or ``EMPTY`` for a slot with no
desk. A row consisting of ``BREAK`` alone marks a gap between seat blocks.
"""
import re

SPACER = "sp"
EMPTY = "empty"
BREAK = "br"

ZONES = [
    {"id": "4A", "name": "4F Zone A", "grade": 1, "floor": 4},
    {"id": "4B", "name": "4F Zone B", "grade": 1, "floor": 4},
    {"id": "4C", "name": "4F Zone C", "grade": 1, "floor": 4},
    {"id": "4D", "name": "4F Zone D", "grade": 1, "floor": 4},
    {"id": "3A", "name": "3F Zone A", "grade": 2, "floor": 3},
    {"id": "3B", "name": "3F Zone B", "grade": 2, "floor": 3},
    {"id": "3C", "name": "3F Zone C", "grade": 2, "floor": 3},
    {"id": "3D", "name": "3F Zone D", "grade": 2, "floor": 3},
]

ZONES_BY_ID = {z["id"]: z for z in ZONES}

# rows, desk blocks per row, break after these row indexes, (row, col) slots without a desk
_ZONE_SHAPES = {
    "4A": (6, (4, 4), (2,), ()),
    "4B": (6, (4, 4), (2,), ((0, 0),)),
    "4C": (5, (3, 3, 3), (), ((4, 0), (4, 8))),
    "4D": (5, (3, 3, 3), (), ()),
    "3A": (6, (4, 4), (2,), ()),
    "3B": (6, (4, 4), (2,), ((5, 7),)),
    "3C": (5, (3, 3, 3), (), ((0, 4),)),
    "3D": (4, (5, 5), (1,), ()),
}

_SEAT_ID = re.compile(r"^[34][A-D]")


def _build_layout(zone_id, rows, blocks, breaks_after, empty_slots):
    layout = []
    number = 1
    for r in range(rows):
        row = []
        col = 0
        for b, width in enumerate(blocks):
            if b > 0:
                row.append(SPACER)
            for _ in range(width):
                if (r, col) in empty_slots:
                    row.append(EMPTY)
                else:
                    row.append(f"{zone_id}{number:03d}")
                    number += 1
                col += 1
        layout.append(row)
        if r in breaks_after:
            layout.append([BREAK])
    return layout


SEAT_LAYOUTS = {
    zone_id: _build_layout(zone_id, *shape)
    for zone_id, shape in _ZONE_SHAPES.items()
}


def is_seat_cell(cell):
    return cell not in (SPACER, EMPTY, BREAK)


def iter_seat_positions(zone_id):
    """Yields (seat_id, row, col) for every desk of a zone in layout order."""
    layout = SEAT_LAYOUTS.get(zone_id, [])
    seat_row = 0
    for row in layout:
        if row and row[0] == BREAK:
            continue
        for col, cell in enumerate(row):
            if is_seat_cell(cell):
                yield cell, seat_row, col
        seat_row += 1


def iter_seat_ids(zone_id):
    return [seat_id for seat_id, _, _ in iter_seat_positions(zone_id)]


def zone_of_seat(seat_id):
    match = _SEAT_ID.match(seat_id or "")
    return match.group(0) if match else ""


def zones_for_grade(grade):
    return [z for z in ZONES if z["grade"] == grade]
