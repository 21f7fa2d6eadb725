# pims/domains/inv/__init__.py

"""
'inv' 도메인 패키지입니다.

창고 기간계 시스템이 소유한 재고(inventory)와 할당(allocations) 테이블을 읽어
품목별 가용 수량과 구획별 기술 스펙을 계산하고, 이를 검색/필터링합니다.

주요 서브모듈:
- `models.py`: inventory / allocations 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 검색 조건, 파생 뷰, 검색 결과 페이지, 필터 패싯 모델.
- `allocation.py`: 가용 수량과 할당 상태 계산.
- `specs.py`: 보관 구획에 따른 기술 스펙 선택.
- `filters.py`: 검색 조건 -> 필터 절 트리.
- `query.py`: 필터 절 트리 -> SQL 조건 (후보 축소용 푸시다운).
- `views.py`: 경량 투영(InventoryRow)과 전체 파생 뷰(InventoryView) 조립.
- `crud.py`: 조회 전용 저장소 접근.
- `search.py`: 2단계 검색 실행기.
- `facets.py`: 필터 패싯 수집과 캐시.
- `services.py`: 외부 협력자(요청 계층)가 사용하는 서비스 진입점.
"""

__title__ = "PIMS Inventory Domain"
__description__ = "Computes sellable availability of polymer lots and searches the inventory view."
__version__ = "0.1.0"
__all__ = []
