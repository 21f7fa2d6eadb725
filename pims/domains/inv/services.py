# pims/domains/inv/services.py

"""
외부 협력자(요청 계층, CLI)가 사용하는 재고 서비스 모듈입니다.

검색, 단건 조회, 필터 패싯 조회를 하나의 진입점으로 묶습니다.
직접 쿼리하지 않고 `crud`, `search`, `facets` 모듈을 조합합니다.
"""

import logging
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from pims.domains.inv import crud as inv_crud
from pims.domains.inv import search as inv_search
from pims.domains.inv.exceptions import InventoryNotFoundError
from pims.domains.inv.facets import FacetCache, facet_cache
from pims.domains.inv.schemas import FilterFacets, InventoryPage, InventorySearchCriteria, InventoryView

logger = logging.getLogger(__name__)


class InventoryService:
    """
    재고 검색/조회 비즈니스 로직을 처리하는 서비스 클래스입니다.
    """

    def __init__(self, db: AsyncSession):
        """
        Args:
            db (AsyncSession): 요청마다 새로 만든 데이터베이스 세션.
        """
        self.db = db

    async def search(
        self,
        criteria: Optional[InventorySearchCriteria] = None,
        *,
        page: int = 0,
        size: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> InventoryPage:
        return await inv_search.search(self.db, criteria, page=page, size=size, sort=sort)

    async def get_inventory(
        self,
        pan_id: int,
        *,
        polymer: Optional[str] = None,
        form: Optional[str] = None,
        folder: Optional[str] = None,
        lot: Optional[str] = None,
    ) -> InventoryView:
        """
        팬 ID 로 재고 품목 하나의 전체 파생 뷰를 조회합니다.

        polymer 와 form 이 모두 주어지면 팬 ID + 폴리머 + 형태 + 폴더 + 로트명이 일치하는 품목을
        먼저 찾고, 없으면 팬의 첫 번째 품목으로 대체합니다.

        Raises:
            InventoryNotFoundError: 팬 ID 에 해당하는 품목이 없는 경우.
        """
        item = None
        if polymer and form:
            item = await inv_crud.inventory.get_first_match(
                self.db,
                pan_id=pan_id,
                polymer_code=polymer,
                form_code=form,
                folder_code=folder,
                lot_name=lot,
            )
            if item is None:
                logger.debug("No exact match for pan %s (%s/%s/%s/%s); using first item.", pan_id, polymer, form, folder, lot)
        if item is None:
            item = await inv_crud.inventory.get_first_by_pan(self.db, pan_id=pan_id)
        if item is None:
            raise InventoryNotFoundError(pan_id)

        views = await inv_search.hydrate(self.db, [item.inventory_id])
        if not views:
            raise InventoryNotFoundError(pan_id)
        return views[0]

    async def get_filter_facets(self, cache: Optional[FacetCache] = None) -> FilterFacets:
        return await (cache or facet_cache).get(self.db)
