# catchlog/api/reports/schemas.py
from marshmallow import Schema, fields, validate

from catchlog.models.report import DEFAULT_LATITUDE, DEFAULT_LONGITUDE
from catchlog.utils.datetime_utils import DateTimeUtils

# --- API 요청/응답 스키마 ---

class ReportCreateSchema(Schema):
    """POST /api/reports 요청 본문의 유효성을 검사합니다."""
    photo_url = fields.URL(required=True)
    species = fields.Str(required=True, validate=validate.Length(min=1, max=128, error="어종을 선택해 주세요."))
    weight_lb = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=0, max=200))
    weight_oz = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=0, max=15))
    length_inches = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=0, max=120))
    location_name = fields.Str(required=True, validate=validate.Length(min=1, max=256, error="장소를 입력해 주세요."))
    # 위치 서비스에서 좌표를 받지 못하면 기본 좌표를 사용합니다.
    latitude = fields.Float(load_default=DEFAULT_LATITUDE, validate=validate.Range(min=-90, max=90))
    longitude = fields.Float(load_default=DEFAULT_LONGITUDE, validate=validate.Range(min=-180, max=180))
    notes = fields.Str(load_default="", validate=validate.Length(max=500, error="메모는 500자 이하여야 합니다."))
    caught_at = fields.DateTime(load_default=DateTimeUtils.now)

class ReportResponseSchema(Schema):
    """게시물 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    report_id = fields.Str(dump_only=True)
    user_id = fields.Str(required=True)
    user_name = fields.Str(required=True)
    user_avatar = fields.Str(allow_none=True)
    photo_url = fields.Str(required=True)
    species = fields.Str(required=True)
    weight_lb = fields.Float(allow_none=True)
    weight_oz = fields.Float(allow_none=True)
    length_inches = fields.Float(allow_none=True)
    location_name = fields.Str(required=True)
    latitude = fields.Float(required=True)
    longitude = fields.Float(required=True)
    notes = fields.Str()
    caught_at = fields.DateTime(required=True)
    created_at = fields.DateTime(required=True)
    likes_count = fields.Int(required=True)
    comments_count = fields.Int(required=True)
    is_liked = fields.Bool(dump_only=True, dump_default=False)

class LikeStatusSchema(Schema):
    """좋아요 상태 응답. 화면은 이 값으로 낙관적 업데이트를 보정합니다."""
    report_id = fields.Str(required=True)
    is_liked = fields.Bool(required=True)
    likes_count = fields.Int(allow_none=True)
    counter_synced = fields.Bool(dump_default=True)
