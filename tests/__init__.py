# tests/__init__.py

"""
PIMS 재고 코어의 테스트 스위트 패키지입니다.

테스트 코드는 `pytest` + `pytest-asyncio` 를 기반으로 하며,
각 비즈니스 도메인에 따라 하위 디렉토리로 구조화됩니다.

- `domains/`: 도메인별 단위/통합 테스트.
- `conftest.py`: 인메모리 SQLite 엔진, 세션, 데이터 팩토리 픽스처.
- `test_inventory_cli.py`: 운영자용 CLI 테스트.
"""

__title__ = "PIMS Tests"
__description__ = "Test suite for the PIMS inventory core."
__version__ = "0.1.0"
__all__ = []
