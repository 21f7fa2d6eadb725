# pims/core/__init__.py

"""
애플리케이션 전반에서 사용하는 핵심 구성 요소 패키지입니다.

- `config.py`: 환경 변수 및 .env 기반 설정 관리 (Pydantic Settings).
- `database.py`: 비동기 엔진, 세션 팩토리, 세션 제너레이터 (SQLModel + AsyncSQLAlchemy).
- `crud_base.py`: 모든 도메인이 공유하는 읽기 전용 조회 기본 클래스.
"""

__title__ = "PIMS Core"
__all__ = []
