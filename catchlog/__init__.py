# catchlog/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Optional
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError as MarshmallowValidationError
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 설정 및 예외
from catchlog.core.config import config_by_name
from catchlog.core.exceptions import ValidationError, WriteError

# - API 블루프린트
from catchlog.api.reports.routes import reports_bp
from catchlog.api.comments.routes import comments_bp
from catchlog.api.users.routes import users_bp

# - 서비스 모듈
from catchlog.stores import create_store, FIRESTORE_BACKEND
from catchlog.api.reports.services import ReportService
from catchlog.services.counter_sync import CounterSynchronizer
from catchlog.services.engagement_ledger import EngagementLedger
from catchlog.cli import register_commands


def _init_firebase(app: Flask) -> None:
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    firebase_admin.initialize_app(credentials.Certificate(cred_path))


def create_app(config_name: Optional[str] = None, store=None):
    """
    Flask 애플리케이션 팩토리 함수.
    테스트에서는 store 를 직접 주입할 수 있습니다.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    if store is None:
        if app.config['STORE_BACKEND'] == FIRESTORE_BACKEND:
            _init_firebase(app)
        try:
            store = create_store(app.config)
        except Exception as e:
            logging.error(f"Failed to initialize report store: {e}")
            raise

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}
    app.services['store'] = store
    app.services['counters'] = CounterSynchronizer(store)
    app.services['engagement'] = EngagementLedger(store, synchronizer=app.services['counters'])
    app.services['reports'] = ReportService(
        store,
        page_size=app.config['FEED_PAGE_SIZE'],
        max_page_size=app.config['FEED_MAX_PAGE_SIZE'],
        map_limit=app.config['MAP_REPORT_LIMIT']
    )

    # =====================================================================================
    # 6. 블루프린트 및 CLI 명령 등록
    # =====================================================================================
    app.register_blueprint(reports_bp, url_prefix='/api/reports')
    app.register_blueprint(comments_bp, url_prefix='/api/reports')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    register_commands(app)

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(MarshmallowValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(ValidationError)
    def handle_validation_error(err):
        response = {"error_code": err.error_code, "message": err.message, "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(WriteError)
    def handle_write_error(err):
        logging.error(f"Store write failed: {err}", exc_info=True)
        return jsonify({"error_code": err.error_code, "message": "저장소에 기록하지 못했습니다. 잠시 후 다시 시도해 주세요."}), 503

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        return jsonify({"error_code": err.name.upper().replace(' ', '_'), "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
