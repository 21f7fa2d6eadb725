# tests/domains/__init__.py

"""
도메인별 테스트 스위트 패키지입니다.

- `test_inv_*_n.py`: 'inv' 도메인 (가용 수량 계산, 스펙 해석, 필터, 검색, 패싯, 서비스) 테스트.
"""

__title__ = "PIMS Domain Tests"
__description__ = "Categorized tests for each business domain of the PIMS inventory core."
__version__ = "0.1.0"
__all__ = []
