# catchlog/core/exceptions.py
"""
피드/참여(좋아요, 댓글) 데이터 계층에서 사용하는 예외 정의.

- ValidationError: 잘못된 입력 (너무 긴 텍스트, 필수 필드 누락, 잘못된 커서)
- WriteError: 저장소에 연결할 수 없거나 쓰기가 거부된 경우
- ConsistencyWarning: 원장 기록은 성공했지만 카운터 조정이 실패한 경우 (치명적이지 않음)

존재하지 않는 게시물은 예외가 아니라 None 으로 표현합니다 (조회, 좋아요, 댓글 모두).
"""
from typing import Any, Dict, Optional


class CatchLogError(Exception):
    """모든 도메인 예외의 기반 클래스."""
    error_code = "CATCHLOG_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CatchLogError):
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, messages: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        # marshmallow ValidationError.messages 와 같은 형태 ({필드: [오류, ...]})
        self.messages = messages or {"_schema": [message]}


class WriteError(CatchLogError):
    error_code = "WRITE_FAILED"


class ConsistencyWarning(UserWarning):
    """
    원장(좋아요/댓글 문서)은 기록되었으나 게시물의 비정규화 카운터를 맞추지 못한 상태.
    호출자에게 실패로 전파하지 않고 로그로만 남깁니다. 게시물을 다시 읽거나
    `flask reconcile-counters` 를 실행하면 복구됩니다.
    """

    def __init__(self, report_id: str, field: str, delta: int, reason: str):
        super().__init__(f"카운터 조정 실패 (report_id: {report_id}, {field} {delta:+d}): {reason}")
        self.report_id = report_id
        self.field = field
        self.delta = delta
        self.reason = reason
