"""Load a score-sheet template into the database.

Usage:
  source .venv/bin/activate
  python scripts/seed_template.py                 # built-in default sheet
  python scripts/seed_template.py path/to/template.json

Replaces every evaluation category and item (and their preset scores),
the same as POST /api/admin/template/import.
"""

import sys
import os

# Ensure project root is on sys.path when running from scripts/ or other cwd
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from evalsys import create_app
from evalsys.services.records import apply_template
from evalsys.services.template import sheet_from_json


DEFAULT_TEMPLATE = {
    "title": "종합평가표",
    "sections": [
        {
            "title": "기관수행능력",
            "items": [
                {"text": "통계SOS 사업 운영 체계화 정도", "type": "정성", "points": 20},
                {"text": "심의위원회 운영 내실화", "type": "정량", "points": 5},
                {"text": "사업 홍보 및 대외협력", "type": "정성", "points": 5},
                {"text": "사업 예산 집행의 적정성", "type": "정량", "points": 5},
            ],
        },
        {
            "title": "인력운영",
            "items": [
                {"text": "사업 운영 총괄자 및 담당자의 전문성", "type": "정성", "points": 5},
                {"text": "통계 전문인력 확보 및 관리", "type": "정성", "points": 5},
                {"text": "교육 및 역량강화 노력", "type": "정량", "points": 10},
            ],
        },
    ],
}


def main(argv):
    if len(argv) > 1:
        with open(argv[1], encoding="utf-8") as f:
            sheet = sheet_from_json(f.read())
    else:
        sheet = sheet_from_json(DEFAULT_TEMPLATE)
    app = create_app()
    with app.app_context():
        apply_template(sheet)
        print(f"loaded {len(sheet['sections'])} sections, {sheet['totalPoints']} points total")


if __name__ == '__main__':
    main(sys.argv)
