# catchlog/api/reports/routes.py
import logging
from dataclasses import asdict
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt

from catchlog.api.reports.schemas import ReportResponseSchema, LikeStatusSchema
from catchlog.core.exceptions import WriteError
from catchlog.models.report import UK_FISH_SPECIES


reports_bp = Blueprint('reports_bp', __name__)


def _author_from_token():
    """인증 제공자가 넣어 준 클레임에서 작성자 표시 정보를 꺼냅니다."""
    claims = get_jwt()
    return get_jwt_identity(), claims.get('name'), claims.get('avatar')


def _with_like_flags(reports, user_id):
    liked_ids = current_app.services['engagement'].liked_report_ids(user_id, [r.report_id for r in reports])
    return [dict(asdict(r), is_liked=r.report_id in liked_ids) for r in reports]


@reports_bp.route('/', methods=['POST'])
@jwt_required()
def create_report():
    """
    새로운 조과 게시물을 생성합니다.
    - 성공 시, 생성된 게시물 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    report_service = current_app.services['reports']
    user_id, user_name, user_avatar = _author_from_token()
    try:
        report_id = report_service.create(user_id, user_name, user_avatar, request.get_json(silent=True))
    except WriteError as e:
        logging.error(f"게시물 생성 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        raise
    report = report_service.get_by_id(report_id)
    return jsonify(ReportResponseSchema().dump(asdict(report))), 201


@reports_bp.route('/', methods=['GET'])
@jwt_required(optional=True) # 비로그인 사용자도 피드는 볼 수 있도록 허용
def get_feed():
    """
    게시물 피드를 최신순으로 페이지네이션하여 조회합니다.
    """
    report_service = current_app.services['reports']
    user_id = get_jwt_identity() # 로그인 시 좋아요 여부 확인, 비로그인 시 None
    limit = request.args.get('limit', None, type=int)
    cursor = request.args.get('cursor', None, type=str)

    reports, next_cursor = report_service.list_page(cursor, limit)
    return jsonify({
        "reports": ReportResponseSchema(many=True).dump(_with_like_flags(reports, user_id)),
        "next_cursor": next_cursor
    }), 200


@reports_bp.route('/map', methods=['GET'])
def get_map_reports():
    """지도에 표시할 최근 게시물 목록 (페이지네이션 없음)."""
    report_service = current_app.services['reports']
    limit = request.args.get('limit', None, type=int)
    reports = report_service.list_recent(limit)
    return jsonify({"reports": ReportResponseSchema(many=True).dump([asdict(r) for r in reports])}), 200


@reports_bp.route('/species', methods=['GET'])
def get_species_suggestions():
    return jsonify({"species": list(UK_FISH_SPECIES)}), 200


@reports_bp.route('/<string:report_id>', methods=['GET'])
@jwt_required(optional=True)
def get_report(report_id: str):
    """
    특정 게시물의 상세 정보를 조회합니다.
    """
    report_service = current_app.services['reports']
    report = report_service.get_by_id(report_id)
    if not report:
        return jsonify({"error_code": "REPORT_NOT_FOUND", "message": "게시물을 찾을 수 없습니다."}), 404
    data = _with_like_flags([report], get_jwt_identity())[0]
    return jsonify(ReportResponseSchema().dump(data)), 200


@reports_bp.route('/<string:report_id>/like', methods=['GET'])
@jwt_required()
def get_like_status(report_id: str):
    ledger = current_app.services['engagement']
    is_liked = ledger.has_liked(report_id, get_jwt_identity())
    return jsonify(LikeStatusSchema().dump({"report_id": report_id, "is_liked": is_liked})), 200


@reports_bp.route('/<string:report_id>/like', methods=['POST'])
@jwt_required()
def toggle_report_like(report_id: str):
    """
    게시물의 좋아요를 누르거나 취소합니다.
    - 토글 후의 상태와 최신 likes_count 를 함께 반환해 화면이 낙관적 상태를 보정할 수 있게 합니다.
    """
    ledger = current_app.services['engagement']
    report_service = current_app.services['reports']
    result = ledger.toggle_like(report_id, get_jwt_identity())
    if result is None:
        return jsonify({"error_code": "REPORT_NOT_FOUND", "message": "게시물을 찾을 수 없습니다."}), 404

    report = report_service.get_by_id(report_id)
    return jsonify(LikeStatusSchema().dump({
        "report_id": report_id,
        "is_liked": result.is_liked,
        "likes_count": report.likes_count if report else None,
        "counter_synced": result.counter_synced,
    })), 200
