from io import BytesIO
import openpyxl
from openpyxl.styles import Font

# header -> candidate field; first header is the one written on export
CANDIDATE_COLUMNS = {
    "name": ("기관명(성명)", "name", "이름", "성명", "기관명"),
    "department": ("소속(부서)", "department", "부서", "소속"),
    "position": ("직책(직급)", "position", "직급", "직책"),
    "category": ("구분", "category", "분류", "카테고리"),
    "sub_category": ("세부구분", "sub_category", "subCategory", "세부분류"),
    "description": ("설명", "description", "비고"),
}

RESULT_HEADERS = ("순위", "기관명(성명)", "소속(부서)", "직책(직급)", "구분", "세부구분",
                  "총점", "평균", "만점", "득점률(%)", "평가완료", "평가위원수", "상태", "결과")

STATUS_LABELS = {"completed": "완료", "inProgress": "진행중", "notStarted": "미시작"}


class ExcelImportError(ValueError):
    pass


def _cell_text(value):
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def read_rows(data: bytes):
    """First sheet as a list of {header: text} dicts; blank rows dropped."""
    try:
        wb = openpyxl.load_workbook(filename=BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        raise ExcelImportError(f"엑셀 파일을 읽을 수 없습니다: {e}") from e
    try:
        rows = wb[wb.sheetnames[0]].iter_rows(values_only=True)
        try:
            headers = [_cell_text(h) for h in next(rows)]
        except StopIteration:
            return []
        out = []
        for r in rows:
            record = {h: _cell_text(v) for h, v in zip(headers, r) if h}
            if any(record.values()):
                out.append(record)
        return out
    finally:
        wb.close()


def candidates_from_rows(rows):
    """Map spreadsheet rows onto candidate fields using the known header aliases."""
    out = []
    for idx, row in enumerate(rows, start=1):
        data = {}
        for field, aliases in CANDIDATE_COLUMNS.items():
            for alias in aliases:
                if row.get(alias):
                    data[field] = row[alias]
                    break
        if not data.get("name"):
            raise ExcelImportError(f"{idx}행: 기관명(성명)이 비어 있습니다")
        data.setdefault("department", "")
        data.setdefault("position", "")
        data["is_active"] = True
        out.append(data)
    return out


def _workbook(title, headers, rows):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title
    ws.append(list(headers))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for r in rows:
        ws.append(list(r))
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def export_candidates(candidates) -> bytes:
    headers = [aliases[0] for aliases in CANDIDATE_COLUMNS.values()]
    rows = [[getattr(c, field) or "" for field in CANDIDATE_COLUMNS] for c in candidates]
    return _workbook("평가대상", headers, rows)


def export_results(report) -> bytes:
    """Workbook for a scoring.ResultsReport, one row per candidate in rank order."""
    rows = []
    for r in report.results:
        c = r.candidate
        rows.append([
            r.rank, c.name, c.department, c.position, c.category or "", c.sub_category or "",
            round(r.total_score, 2), round(r.average_score, 2), r.max_possible,
            round(r.percentage, 1), r.completed_count, r.evaluator_count,
            STATUS_LABELS.get(r.status, r.status), "합격" if r.passed else "불합격",
        ])
    return _workbook("평가결과", RESULT_HEADERS, rows)
