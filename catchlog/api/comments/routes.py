# catchlog/api/comments/routes.py
import logging
from dataclasses import asdict
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from marshmallow import ValidationError

from catchlog.api.comments.schemas import CommentCreateSchema, CommentResponseSchema
from catchlog.core.exceptions import WriteError


comments_bp = Blueprint('comments_bp', __name__)

@comments_bp.route('/<string:report_id>/comments', methods=['POST'])
@jwt_required()
def create_comment(report_id: str):
    """
    특정 게시물에 새로운 댓글을 작성합니다.
    - 성공 시, 생성된 댓글 정보를 201 Created 상태 코드와 함께 반환합니다.
    - 게시물의 comments_count 가 1 증가합니다.
    """
    ledger = current_app.services['engagement']
    user_id = get_jwt_identity()
    claims = get_jwt()
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
        new_comment = ledger.add_comment(report_id, user_id, claims.get('name'), claims.get('avatar'), data['text'])
        if new_comment is None:
            return jsonify({"error_code": "REPORT_NOT_FOUND", "message": "게시물을 찾을 수 없습니다."}), 404
        return jsonify(CommentResponseSchema().dump(asdict(new_comment))), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except WriteError as e:
        logging.error(f"댓글 생성 중 오류 발생 (report_id: {report_id}): {e}", exc_info=True)
        return jsonify({"error_code": "COMMENT_CREATION_FAILED", "message": "댓글 생성 중 오류가 발생했습니다."}), 503

@comments_bp.route('/<string:report_id>/comments', methods=['GET'])
def get_comments(report_id: str):
    """
    특정 게시물의 댓글 목록을 작성 순서대로 조회합니다.
    """
    ledger = current_app.services['engagement']
    comments = ledger.list_comments(report_id)
    return jsonify({"comments": CommentResponseSchema(many=True).dump([asdict(c) for c in comments])}), 200
