# pims/core/crud_base.py

"""
공통 조회 작업을 위한 기본 클래스 모듈입니다.

재고/할당 데이터는 외부 기간계 시스템이 소유하므로 쓰기 작업은 제공하지 않습니다.
모든 메서드는 비동기(async) 세션을 사용합니다.
"""

from typing import Any, Dict, Generic, Iterable, Iterator, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

ModelType = TypeVar("ModelType", bound=SQLModel)

# SQLite 의 바인드 파라미터 개수 제한을 넘지 않도록 IN 목록을 나눕니다.
IN_CLAUSE_CHUNK_SIZE = 500


def chunked(values: Iterable[Any], size: Optional[int] = None) -> Iterator[List[Any]]:
    size = size or IN_CLAUSE_CHUNK_SIZE
    chunk: List[Any] = []
    for value in values:
        chunk.append(value)
        if len(chunk) >= size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


class CRUDBase(Generic[ModelType]):
    """
    모든 조회 작업에 대한 기본 클래스를 정의합니다.
    """
    def __init__(self, model: Type[ModelType], key: str = "id"):
        self.model = model
        self.key = key

    @property
    def key_column(self):
        return getattr(self.model, self.key)

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """기본 키로 단일 레코드를 조회합니다."""
        return await db.get(self.model, id)

    async def get_many(self, db: AsyncSession, ids: Sequence[Any]) -> List[ModelType]:
        """
        기본 키 목록으로 레코드를 조회합니다. 반환 순서는 보장하지 않습니다.
        """
        records: List[ModelType] = []
        for chunk in chunked(dict.fromkeys(ids)):
            result = await db.execute(select(self.model).where(self.key_column.in_(chunk)))
            records.extend(result.scalars().all())
        return records

    """
    조건을 만족하는 레코드가 여러 개 있더라도 정렬 기준상 첫 번째 것을 반환하며,
    조건을 만족하는 레코드가 전혀 없으면 None 을 반환
    """
    async def get_first_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,  # 다중 속성 필터: {"attribute_name": "value"}
    ) -> Optional[ModelType]:
        query = select(self.model)
        conditions = []
        if filters:
            for attribute, value in filters.items():
                column = getattr(self.model, attribute)
                conditions.append(column.is_(None) if value is None else column == value)
        if conditions:
            query = query.where(*conditions)

        query = query.order_by(self.key_column).limit(1)
        result = await db.execute(query)
        return result.scalars().first()
