from __future__ import annotations

import pytest

from conftest import DAY_LABELS, employee_block, header_row, standard_sheet
from hr_attendance.excel.blocks import BlockAssembler, BlockState, parse_attendance_grid
from hr_attendance.excel.header import SheetHeaderError


def _assembler() -> BlockAssembler:
    return BlockAssembler(DAY_LABELS, "2024-01")


def test_state_progression():
    asm = _assembler()
    code, status, in_row, out_row, total = employee_block(
        "E001", "Asha", ["P"] * 5, ["09:00"] * 5, ["18:00"] * 5
    )
    assert asm.state is BlockState.IDLE
    assert asm.feed(code) is None
    assert asm.state is BlockState.HAVE_CODE
    asm.feed(status)
    assert asm.state is BlockState.HAVE_STATUS
    asm.feed(in_row)
    assert asm.state is BlockState.HAVE_STATUS
    asm.feed(out_row)
    assert asm.state is BlockState.HAVE_STATUS_AND_TIMES
    summary = asm.feed(total)
    assert summary is not None
    assert asm.state is BlockState.IDLE
    assert summary.employee_code == "E001"
    assert summary.employee_name == "Asha"
    assert summary.days_present == 5
    assert len(summary.daily_records) == 5


def test_total_before_times_drops_block():
    asm = _assembler()
    code, status, _in, _out, total = employee_block("E001", "Asha", ["P"] * 5, [], [])
    asm.feed(code)
    asm.feed(status)
    assert asm.feed(total) is None
    assert asm.dropped == ["E001"]
    assert asm.state is BlockState.IDLE


def test_new_code_row_drops_open_block():
    asm = _assembler()
    first = employee_block("E001", "Asha", ["P"] * 5, ["09:00"] * 5, ["18:00"] * 5)
    second = employee_block("E002", "Vik", ["A"] * 5, [""] * 5, [""] * 5)
    asm.feed(first[0])
    asm.feed(first[1])
    results = [asm.feed(r) for r in second]
    assert asm.dropped == ["E001"]
    assert [r.employee_code for r in results if r is not None] == ["E002"]


def test_times_before_status_are_ignored():
    asm = _assembler()
    code, status, in_row, out_row, total = employee_block(
        "E001", "Asha", ["P"] * 5, ["10:00"] * 5, ["18:00"] * 5
    )
    asm.feed(code)
    asm.feed(in_row)
    asm.feed(out_row)
    assert asm.state is BlockState.HAVE_CODE
    assert asm.feed(total) is None
    assert asm.dropped == ["E001"]


def test_blank_code_is_not_a_block():
    asm = _assembler()
    code, *_ = employee_block("", "", [], [], [])
    assert asm.feed(code) is None
    assert asm.state is BlockState.IDLE


def test_name_falls_back_to_code():
    asm = _assembler()
    rows = employee_block("E010", "", ["P"] * 5, ["09:00"] * 5, ["18:00"] * 5)
    results = [asm.feed(r) for r in rows]
    assert results[-1] is not None
    assert results[-1].employee_name == "E010"


def test_total_without_block_is_ignored():
    asm = _assembler()
    assert asm.feed(["Total", "", "08:00"]) is None
    assert asm.dropped == []


def test_close_drops_unfinished_block():
    asm = _assembler()
    asm.feed(employee_block("E003", "X", ["P"], [], [])[0])
    asm.close()
    assert asm.dropped == ["E003"]


def test_assemblers_do_not_share_state():
    first = _assembler()
    second = _assembler()
    first.feed(employee_block("E001", "Asha", ["P"], [], [])[0])
    assert second.state is BlockState.IDLE
    assert second.feed(["Total", "", "08:00"]) is None


def test_parse_standard_sheet():
    parsed = parse_attendance_grid(standard_sheet(), "2024-01")
    assert parsed.day_labels == DAY_LABELS
    assert parsed.dropped_blocks == []
    by_code = {s.employee_code: s for s in parsed.summaries}
    assert list(by_code) == ["E001", "E002", "E999"]

    e001 = by_code["E001"]
    assert (e001.days_present, e001.half_days, e001.days_leave, e001.total_working_days) == (2, 1, 1, 4)
    assert [r.status for r in e001.daily_records] == ["P", "HD", "WO", "A", "P"]
    assert e001.period_key == "2024-01"

    e002 = by_code["E002"]
    assert (e002.days_present, e002.half_days, e002.days_leave, e002.total_working_days) == (0, 1, 3, 4)


def test_counters_partition_working_days():
    parsed = parse_attendance_grid(standard_sheet(), "2024-01")
    for s in parsed.summaries:
        others = sum(1 for r in s.daily_records if r.status not in {"P", "WOP", "HD", "A", "WO"})
        assert s.days_present + s.half_days + s.days_leave + others == s.total_working_days
        assert s.total_working_days <= len(s.daily_records)


def test_incomplete_block_is_dropped_and_logged(caplog):
    rows = [header_row()]
    rows += employee_block("E001", "Asha", ["P"] * 5, ["09:00"] * 5, ["18:00"] * 5)[:2]
    rows.append(["Total", "", "08:00"])
    rows += employee_block("E002", "Vik", ["A"] * 5, [""] * 5, [""] * 5)
    with caplog.at_level("WARNING", logger="hr_attendance.excel.blocks"):
        parsed = parse_attendance_grid(rows, "2024-01")
    assert [s.employee_code for s in parsed.summaries] == ["E002"]
    assert parsed.dropped_blocks == ["E001"]
    assert "code=E001" in caplog.text


def test_missing_header_is_fatal():
    rows = employee_block("E001", "Asha", ["P"], ["09:00"], ["18:00"])
    with pytest.raises(SheetHeaderError):
        parse_attendance_grid(rows, "2024-01")


def test_header_only_sheet_yields_no_summaries():
    parsed = parse_attendance_grid([header_row()], "2024-01")
    assert parsed.summaries == []


def test_padded_header_keeps_day_column_count():
    # Code rows carry the name at offset 12, so the header is padded past the last day
    rows = [header_row() + [""] * 6]
    rows += employee_block("E001", "Asha", ["P"] * 5, ["09:00"] * 5, ["18:00"] * 5)
    parsed = parse_attendance_grid(rows, "2024-01")
    assert parsed.day_labels == DAY_LABELS
    assert len(parsed.summaries[0].daily_records) == 5


def test_cells_past_last_label_are_ignored():
    rows = [header_row()]
    rows += employee_block("E001", "Asha", ["P"] * 5 + ["A"], ["09:00"] * 6, ["18:00"] * 6)
    summary = parse_attendance_grid(rows, "2024-01").summaries[0]
    assert summary.days_leave == 0
    assert summary.total_working_days == 5
