"""PNG table of absentees attached to the Discord report."""
from io import BytesIO
from PIL import Image as PILImage, ImageDraw, ImageFont

PADDING = 20
ROW_HEIGHT = 30
TITLE_HEIGHT = 44
COLUMNS = [("No.", 50), ("Seat", 90), ("Name", 120), ("Note", 420)]
TABLE_WIDTH = sum(width for _, width in COLUMNS)

BACKGROUND = (255, 255, 255)
TEXT = (31, 41, 55)
MUTED = (107, 114, 128)
GRID = (209, 213, 219)
HEADER_FILL = (79, 70, 229)
HEADER_TEXT = (255, 255, 255)
GRADE_FILL = (243, 244, 246)
STRIPE_FILL = (249, 250, 251)
PRE_ABSENCE_FILL = (243, 232, 255)
NOTICE_FILL = (254, 243, 199)


def load_font(path=None, size=16):
    if path:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            pass
    return ImageFont.load_default()


def _text_height(draw, font):
    left, top, right, bottom = draw.textbbox((0, 0), "Ag", font=font)
    return bottom - top


def _fit(draw, text, font, max_width):
    """Truncates with an ellipsis so the text fits max_width pixels."""
    text = text or ""
    if draw.textlength(text, font=font) <= max_width:
        return text
    while text and draw.textlength(text + "...", font=font) > max_width:
        text = text[:-1]
    return text + "..."


def _wrap(draw, text, font, max_width):
    lines = []
    for paragraph in (text or "").splitlines():
        current = ""
        for ch in paragraph:
            if draw.textlength(current + ch, font=font) > max_width and current:
                lines.append(current)
                current = ch
            else:
                current += ch
        lines.append(current)
    return lines


def _rows(absentees):
    """Table rows with a grade heading before each grade's block."""
    rows = []
    number = 0
    for grade in (1, 2):
        block = [s for s in absentees if s.get("grade") == grade]
        if not block:
            continue
        rows.append(("grade", f"Grade {grade} ({len(block)})"))
        for s in block:
            number += 1
            rows.append(("student", (number, s)))
    return rows


def render_absentee_table(display_date, absentees, notice=None, font_path=None):
    """Returns PNG bytes of the absentee table for display_date."""
    scratch = ImageDraw.Draw(PILImage.new("RGB", (1, 1)))
    font = load_font(font_path, 16)
    title_font = load_font(font_path, 22)

    notice_lines = _wrap(scratch, notice.strip(), font, TABLE_WIDTH - 20) if notice and notice.strip() else []
    rows = _rows(absentees)
    body_rows = len(rows) if rows else 1

    width = TABLE_WIDTH + PADDING * 2
    notice_height = (len(notice_lines) * (_text_height(scratch, font) + 6) + 16) if notice_lines else 0
    height = PADDING * 2 + TITLE_HEIGHT + notice_height + ROW_HEIGHT * (body_rows + 1)

    image = PILImage.new("RGB", (width, height), BACKGROUND)
    draw = ImageDraw.Draw(image)
    text_offset = (ROW_HEIGHT - _text_height(draw, font)) // 2

    y = PADDING
    draw.text((PADDING, y), f"{display_date} Absentees: {len(absentees)}", fill=TEXT, font=title_font)
    y += TITLE_HEIGHT

    if notice_lines:
        draw.rectangle([PADDING, y, PADDING + TABLE_WIDTH, y + notice_height - 8], fill=NOTICE_FILL)
        line_y = y + 6
        for line in notice_lines:
            draw.text((PADDING + 10, line_y), line, fill=TEXT, font=font)
            line_y += _text_height(draw, font) + 6
        y += notice_height

    x = PADDING
    draw.rectangle([PADDING, y, PADDING + TABLE_WIDTH, y + ROW_HEIGHT], fill=HEADER_FILL)
    for label, col_width in COLUMNS:
        draw.text((x + 8, y + text_offset), label, fill=HEADER_TEXT, font=font)
        x += col_width
    y += ROW_HEIGHT

    if not rows:
        draw.text((PADDING + 8, y + text_offset), "No absentees", fill=MUTED, font=font)
        draw.line([PADDING, y + ROW_HEIGHT, PADDING + TABLE_WIDTH, y + ROW_HEIGHT], fill=GRID)

    for index, (kind, payload) in enumerate(rows):
        if kind == "grade":
            draw.rectangle([PADDING, y, PADDING + TABLE_WIDTH, y + ROW_HEIGHT], fill=GRADE_FILL)
            draw.text((PADDING + 8, y + text_offset), payload, fill=TEXT, font=font)
        else:
            number, student = payload
            note = student.get("note") or ""
            fill = PRE_ABSENCE_FILL if note.startswith("[") else (STRIPE_FILL if index % 2 else BACKGROUND)
            draw.rectangle([PADDING, y, PADDING + TABLE_WIDTH, y + ROW_HEIGHT], fill=fill)
            cells = [str(number), student.get("seatId", ""), student.get("name", ""), note]
            x = PADDING
            for (_, col_width), value in zip(COLUMNS, cells):
                draw.text((x + 8, y + text_offset), _fit(draw, value, font, col_width - 16), fill=TEXT, font=font)
                x += col_width
        draw.line([PADDING, y + ROW_HEIGHT, PADDING + TABLE_WIDTH, y + ROW_HEIGHT], fill=GRID)
        y += ROW_HEIGHT

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
