# api_harness/reporters/excel.py
"""
Multi-sheet Excel report built from the execution log:
- Summary: overall statistics + per-feature blocks
- Profile Tests / Restaurant Tests: one row per executed case
  (ID, name, description, method, endpoint, request headers/body,
  expected vs actual, result, duration, error)
"""
import json
import logging
import re
from datetime import datetime
from pathlib import Path

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ..evaluators.metrics import FEATURE_SHEETS, PROFILE, RESTAURANT, as_records, calculate_statistics, split_by_feature
from ..schemas.execution import PASS
from ..schemas.testcase import json_truthy
from ..utils.io import ensure_parent, now_stamp

log = logging.getLogger(__name__)

SUMMARY_SHEET = 'Summary'
TRUNCATE_AT = 500
_TEST_ID = re.compile(r'(TC-\w+-\d+|TC\d+)')

# column -> width (characters)
DETAIL_COLUMNS = {
    'No.': 5,
    'Test Case ID': 18,
    'Test Case Name': 45,
    'Description': 50,
    'HTTP Method': 10,
    'Endpoint': 35,
    'Request Headers': 40,
    'Request Body': 50,
    'Expected': 60,
    'Actual Output': 60,
    'Result': 12,
    'Duration (ms)': 15,
    'Error': 50,
}
SUMMARY_COLUMNS = {'Metric': 40, 'Value': 25}

_HEADER_FILL = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")
_HEADER_FONT = Font(color="FFFFFF", bold=True)
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)
_CELL_ALIGN = Alignment(vertical="top", wrap_text=True)


def _pretty(v):
    return json.dumps(v, ensure_ascii=False, indent=2)


def split_test_id(name, index):
    """-> (test_id, display_name); index is 0-based position inside the sheet."""
    m = _TEST_ID.search(name or '')
    test_id = m.group(0) if m else f"TC{index + 1:02d}"
    if not name:
        return test_id, 'N/A'
    display = name.replace(test_id + ':', '', 1).strip() if m else name
    return test_id, display


def format_expected(rec):
    s = 'Status Code: ' + (str(rec.expected_status) if rec.expected_status is not None else 'N/A')
    exp = rec.expected_response
    if json_truthy(exp):
        if isinstance(exp, list):
            s += '\nValidate Fields: ' + ', '.join(str(x) for x in exp)
        elif isinstance(exp, dict):
            s += '\n' + _pretty(exp)
        else:
            s += '\n' + str(exp)
    return s


def format_actual(rec):
    s = 'Status Code: ' + (str(rec.actual_status) if rec.actual_status is not None else 'N/A')
    body = rec.actual_response
    if json_truthy(body):
        text = _pretty(body) if isinstance(body, (dict, list)) else str(body)
        s += '\n' + (text[:TRUNCATE_AT] + '...[truncated]' if len(text) > TRUNCATE_AT else text)
    return s


def detail_rows(records):
    rows = []
    for i, rec in enumerate(as_records(records)):
        tc = rec.test_case or {}
        test_id, display = split_test_id(rec.name, i)
        headers = rec.request.headers if rec.request else None
        rows.append({
            'No.': i + 1,
            'Test Case ID': test_id,
            'Test Case Name': display,
            'Description': tc.get('description') or 'N/A',
            'HTTP Method': tc.get('method') or 'GET',
            'Endpoint': tc.get('path') or 'N/A',
            'Request Headers': _pretty(headers) if headers is not None else 'N/A',
            'Request Body': _pretty(tc['body']) if json_truthy(tc.get('body')) else 'N/A',
            'Expected': format_expected(rec),
            'Actual Output': format_actual(rec),
            'Result': '✅ PASS' if rec.result == PASS else '❌ FAIL',
            'Duration (ms)': rec.duration,
            'Error': rec.error or 'N/A',
        })
    return rows


def summary_rows(groups, all_records, generated_at=None):
    stats = calculate_statistics(all_records)
    prof = calculate_statistics(groups[PROFILE])
    rest = calculate_statistics(groups[RESTAURANT])
    generated_at = generated_at or datetime.now()

    def block(title, s):
        return [(title, ''), ('Total tests', s['total']), ('Passed', s['passed']),
                ('Failed', s['failed']), ('Pass rate (%)', s['passRate']), ('', '')]

    rows = [('TEST SUITE OVERVIEW', ''), ('', ''),
            ('Total test cases', stats['total']),
            ('Test cases PASSED', stats['passed']),
            ('Test cases FAILED', stats['failed']),
            ('Pass rate (%)', stats['passRate']),
            ('Total execution time (ms)', stats['totalDuration']),
            ('Average time per test (ms)', stats['avgDuration']),
            ('', '')]
    rows += block('PROFILE TESTS', prof)
    rows += block('RESTAURANT TESTS', rest)
    rows.append(('Report generated at', generated_at.strftime('%Y-%m-%d %H:%M:%S')))
    return [{'Metric': m, 'Value': v} for m, v in rows]


def _style_sheet(ws, widths):
    for col in ws.iter_cols(min_row=1, max_row=1):
        for cell in col:
            cell.fill = _HEADER_FILL
            cell.font = _HEADER_FONT
            cell.alignment = _HEADER_ALIGN
    for i, w in enumerate(widths.values(), start=1):
        ws.column_dimensions[get_column_letter(i)].width = w
    ws.freeze_panes = 'A2'


def _write_sheet(writer, rows, sheet_name, widths):
    df = pd.DataFrame(rows, columns=list(widths))
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    ws = writer.sheets[sheet_name]
    _style_sheet(ws, widths)
    if sheet_name != SUMMARY_SHEET:
        for row in ws.iter_rows(min_row=2):
            for cell in row:
                cell.alignment = _CELL_ALIGN


def generate_excel_report(records, output_path):
    """Write the workbook; the per-feature sheets only exist when they have rows."""
    records = as_records(records)
    groups = split_by_feature(records)
    log.info("Generating Excel report: %s records (profile=%s, restaurant=%s)",
             len(records), len(groups[PROFILE]), len(groups[RESTAURANT]))

    ensure_parent(output_path)
    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        _write_sheet(writer, summary_rows(groups, records), SUMMARY_SHEET, SUMMARY_COLUMNS)
        for key, sheet in FEATURE_SHEETS.items():
            if groups[key]:
                _write_sheet(writer, detail_rows(groups[key]), sheet, DETAIL_COLUMNS)

    stats = calculate_statistics(records)
    log.info("Excel report generated at %s (passed %s/%s, %s%%, avg %sms)",
             output_path, stats['passed'], stats['total'], stats['passRate'], stats['avgDuration'])
    return {'outputPath': str(output_path), 'statistics': stats}


def write_reports(records, reports_dir):
    """Timestamped copy + test-report-latest.xlsx; returns both paths."""
    d = Path(reports_dir)
    stamped = d / f"test-report-{now_stamp()}.xlsx"
    latest = d / 'test-report-latest.xlsx'
    generate_excel_report(records, stamped)
    generate_excel_report(records, latest)
    return [str(stamped), str(latest)]
