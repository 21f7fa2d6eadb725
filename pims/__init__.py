# pims/__init__.py

"""
PIMS (Polymer Inventory Management System) 백엔드의 메인 패키지입니다.

창고에 보관 중인 폴리머 자재 로트(lot)의 재고와 할당(allocation) 정보를 결합하여
"실제로 판매 가능한 수량"을 계산하고, 이를 검색/필터링하는 핵심 로직을 담고 있습니다.

- `core`: 설정, 데이터베이스 연결, 공통 조회(CRUD) 기반 클래스.
- `domains`: 비즈니스 도메인별 서브패키지 (현재는 재고 도메인 `inv`).
"""

APP_NAME = "PIMS Inventory Core"
APP_VERSION = "0.1.0"

__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Polymer inventory availability and search core."
__all__ = []
