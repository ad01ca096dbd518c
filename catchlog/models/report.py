# catchlog/models/report.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from catchlog.utils.datetime_utils import DateTimeUtils

# 위치 정보를 받지 못했을 때 사용하는 기본 좌표 (잉글랜드 중부)
DEFAULT_LATITUDE = 52.5
DEFAULT_LONGITUDE = -1.5

# 어종 입력 시 제안 목록. 서버에서 강제하지는 않습니다.
UK_FISH_SPECIES = (
    "Carp (Common)",
    "Carp (Mirror)",
    "Carp (Ghost)",
    "Pike",
    "Perch",
    "Roach",
    "Rudd",
    "Tench",
    "Bream",
    "Barbel",
    "Chub",
    "Dace",
    "Gudgeon",
    "Zander",
    "Brown Trout",
    "Rainbow Trout",
    "Salmon (Atlantic)",
    "Grayling",
    "Eel",
    "Catfish (Wels)",
    "Ruffe",
    "Bleak",
    "Crucian Carp",
    "Ide",
    "Other",
)

# 카운터 필드 이름 (두 백엔드 공통)
LIKES_COUNT = "likes_count"
COMMENTS_COUNT = "comments_count"
COUNTER_FIELDS = (LIKES_COUNT, COMMENTS_COUNT)


@dataclass
class NewReport:
    """
    작성자가 제출한 조과 기록. id/created_at/카운터는 저장소가 채웁니다.
    작성자 이름과 아바타는 작성 시점의 값을 그대로 복사해 둡니다 (실시간 조인 없음).
    """
    user_id: str
    user_name: str
    photo_url: str
    species: str
    location_name: str
    caught_at: datetime
    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE
    user_avatar: Optional[str] = None
    weight_lb: Optional[float] = None
    weight_oz: Optional[float] = None
    length_inches: Optional[float] = None
    notes: str = ""


@dataclass
class Report:
    """
    'reports' 컬렉션/테이블의 레코드 구조를 정의하는 데이터클래스.
    likes_count / comments_count 는 CounterSynchronizer 만 변경합니다.
    """
    report_id: str
    user_id: str
    user_name: str
    photo_url: str
    species: str
    location_name: str
    latitude: float
    longitude: float
    caught_at: datetime
    user_avatar: Optional[str] = None
    weight_lb: Optional[float] = None
    weight_oz: Optional[float] = None
    length_inches: Optional[float] = None
    notes: str = ""
    likes_count: int = 0
    comments_count: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)
