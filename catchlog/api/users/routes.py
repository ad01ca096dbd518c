# catchlog/api/users/routes.py
from dataclasses import asdict
from flask import Blueprint, jsonify, current_app

from catchlog.api.reports.schemas import ReportResponseSchema


users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/<string:user_id>/reports', methods=['GET'])
def get_user_reports(user_id: str):
    """특정 사용자가 작성한 게시물 목록 (최신순, 페이지네이션 없음)."""
    report_service = current_app.services['reports']
    reports = report_service.list_by_author(user_id)
    return jsonify({
        "reports": ReportResponseSchema(many=True).dump([asdict(r) for r in reports]),
        "count": len(reports)
    }), 200
