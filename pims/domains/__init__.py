# pims/domains/__init__.py

"""
비즈니스 도메인별 서브패키지를 담는 패키지입니다.

- `inv`: 폴리머 재고, 할당, 가용 수량 계산 및 검색.
"""
