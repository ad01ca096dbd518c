# catchlog/api/comments/schemas.py
from marshmallow import Schema, fields, validate

from catchlog.models.comment import COMMENT_MAX_LENGTH

class CommentCreateSchema(Schema):
    """
    POST /api/reports/{report_id}/comments
    댓글 생성을 요청할 때의 데이터 형식을 정의하고 유효성을 검사합니다.
    """
    text = fields.Str(required=True, validate=validate.Length(min=1, max=COMMENT_MAX_LENGTH, error=f"댓글은 1~{COMMENT_MAX_LENGTH}자 사이여야 합니다."))

class CommentResponseSchema(Schema):
    """
    댓글 정보 응답을 위한 최종 JSON 형식을 정의합니다.
    """
    comment_id = fields.Str(required=True)
    report_id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    user_name = fields.Str(required=True)
    user_avatar = fields.Str(allow_none=True)
    text = fields.Str(required=True)
    created_at = fields.DateTime(required=True)
