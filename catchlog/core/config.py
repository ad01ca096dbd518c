# catchlog/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # 인증 제공자가 발급한 액세스 토큰을 검증하는 데 사용하는 키입니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # 저장소 백엔드 선택: 'sql' (SQLAlchemy) 또는 'firestore' (firebase-admin)
    STORE_BACKEND = os.getenv('STORE_BACKEND', 'sql')
    DATABASE_URL = os.getenv('DATABASE_URL')
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    # 피드 한 페이지 크기와 지도에 표시할 최근 게시물 수
    FEED_PAGE_SIZE = int(os.getenv('FEED_PAGE_SIZE', 10))
    FEED_MAX_PAGE_SIZE = 50
    MAP_REPORT_LIMIT = int(os.getenv('MAP_REPORT_LIMIT', 200))

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    DATABASE_URL = os.getenv('DEV_DATABASE_URL', 'sqlite+pysqlite:///catchlog-dev.db')
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다. 메모리 SQLite를 사용합니다."""
    TESTING = True
    DEBUG = False
    STORE_BACKEND = 'sql'
    DATABASE_URL = 'sqlite+pysqlite:///:memory:'
    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length-for-hs256'

class ProductionConfig(Config):
    """운영 환경 설정. DATABASE_URL 또는 FIREBASE_CREDENTIALS_PATH 가 반드시 설정되어야 합니다."""
    DEBUG = False

# FLASK_ENV 값에 따라 create_app 에서 적절한 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
