# smartscore/csv_text.py
# Tolerant CSV tokenizer for the exported score files.
#
# The exports come from an uncontrolled pipeline, so this never raises:
# bad quoting degrades into a best-effort result instead of an error.

import pandas as pd

from smartscore.log import get_logger

log = get_logger(__name__)

QUOTE = '"'
SEP = ","
EOL = "\n"


def parse_csv(text: str) -> list[list[str]]:
    """
    Split raw CSV text into rows of string fields (first row = header).

    - a quote opens a quoted field anywhere; inside it `""` is a literal quote
      and any other quote closes it
    - `\\r` is dropped everywhere, so CRLF files parse like LF files
    - an unterminated quote keeps the rest of the input in the current field
    - a row made of one blank field (final newline, blank line) is skipped
    """
    rows: list[list[str]] = []
    cur: list[str] = []
    field: list[str] = []
    in_q = False

    def push_field():
        cur.append("".join(field))
        field.clear()

    def push_row():
        nonlocal cur
        if len(cur) == 1 and not cur[0].strip():
            cur = []
            return
        rows.append(cur)
        cur = []

    i = 0
    n = len(text or "")
    while i < n:
        ch = text[i]
        if ch == "\r":
            i += 1
            continue
        if in_q:
            if ch == QUOTE:
                if i + 1 < n and text[i + 1] == QUOTE:
                    field.append(QUOTE)
                    i += 1
                else:
                    in_q = False
            else:
                field.append(ch)
        elif ch == QUOTE:
            in_q = True
        elif ch == SEP:
            push_field()
        elif ch == EOL:
            push_field()
            push_row()
        else:
            field.append(ch)
        i += 1

    push_field()
    push_row()

    if in_q:
        log.debug("unterminated quote; kept remaining input in the last field")
    return rows


def rows_to_frame(rows: list[list[str]]) -> pd.DataFrame:
    """
    Header + data rows -> one string-valued record per row.

    Header names are trimmed. Short rows are padded with "", cells beyond the
    header are ignored, and a repeated header name keeps the last column.
    Fewer than two rows (header only / empty) yields an empty frame.
    """
    if len(rows) < 2:
        return pd.DataFrame()

    header = [h.strip() for h in rows[0]]
    columns = list(dict.fromkeys(header))

    records = []
    for r in rows[1:]:
        rec = {}
        for i, h in enumerate(header):
            rec[h] = r[i] if i < len(r) else ""
        records.append(rec)

    return pd.DataFrame.from_records(records, columns=columns).astype(object)


def read_records(text: str) -> pd.DataFrame:
    rows = parse_csv(text)
    frame = rows_to_frame(rows)
    log.info("parsed %d data rows, %d columns", len(frame), len(frame.columns))
    return frame


def _quote(value) -> str:
    s = "" if value is None else str(value)
    if any(c in s for c in (SEP, QUOTE, EOL, "\r")):
        return QUOTE + s.replace(QUOTE, QUOTE * 2) + QUOTE
    return s


def to_csv_text(rows) -> str:
    """Join rows back into CSV text, quoting only fields that need it."""
    return EOL.join(SEP.join(_quote(v) for v in row) for row in rows)


def _cell(v) -> str:
    if v is None or v is pd.NA:
        return ""
    if isinstance(v, float) and pd.isna(v):
        return ""
    return str(v)


def frame_to_csv_text(frame: pd.DataFrame) -> str:
    """CSV text of a display frame (download of the current view)."""
    if frame is None or len(frame.columns) == 0:
        return ""
    rows = [[str(c) for c in frame.columns]]
    for rec in frame.itertuples(index=False, name=None):
        rows.append([_cell(v) for v in rec])
    return to_csv_text(rows) + EOL
