# flake8: noqa
# scripts/inventory_cli.py

"""
운영자용 재고 조회 CLI 입니다. 결과는 JSON 으로 출력합니다.

    python scripts/inventory_cli.py search --text pepel --only-available
    python scripts/inventory_cli.py show 1234 --polymer PE --form PEL
    python scripts/inventory_cli.py facets
    python scripts/inventory_cli.py init-db
"""

import asyncio
import json
import logging
from typing import List, Optional

import typer

from pims.core.config import settings
from pims.core.database import create_db_and_tables, get_async_session_context
from pims.domains.inv.exceptions import InventoryNotFoundError
from pims.domains.inv.facets import FacetCache
from pims.domains.inv.schemas import InventorySearchCriteria
from pims.domains.inv.services import InventoryService

cli = typer.Typer(help="PIMS 재고 조회 도구")


@cli.callback()
def configure_logging(
    log_level: str = typer.Option(settings.LOG_LEVEL, "--log-level", help="로그 레벨 (DEBUG, INFO, WARNING ...)"),
):
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _echo_json(payload: str) -> None:
    typer.echo(json.dumps(json.loads(payload), indent=2, ensure_ascii=False))


@cli.command()
def search(
    text: Optional[str] = typer.Option(None, "--text", "-t", help="자유 텍스트 검색어"),
    polymer: Optional[List[str]] = typer.Option(None, "--polymer", "-p", help="폴리머 코드 (여러 번 지정 가능)"),
    form: Optional[List[str]] = typer.Option(None, "--form", "-f", help="형태 코드 (여러 번 지정 가능)"),
    supplier: Optional[List[str]] = typer.Option(None, "--supplier", "-s", help="공급사 코드 (여러 번 지정 가능)"),
    warehouse: Optional[List[str]] = typer.Option(None, "--warehouse", "-w", help="창고 이름 (여러 번 지정 가능)"),
    min_qty: Optional[str] = typer.Option(None, "--min-qty", help="최소 가용 수량"),
    max_qty: Optional[str] = typer.Option(None, "--max-qty", help="최대 가용 수량"),
    only_available: bool = typer.Option(False, "--only-available", help="가용 수량이 0보다 큰 품목만"),
    page: int = typer.Option(0, "--page", help="0부터 시작하는 페이지 번호"),
    size: int = typer.Option(settings.SEARCH_DEFAULT_PAGE_SIZE, "--size", help="페이지 크기"),
    sort: Optional[str] = typer.Option(None, "--sort", help="정렬 키 (예: recent, quantity-high, available_qty,desc)"),
):
    """
    검색 조건에 맞는 재고 품목 한 페이지를 출력합니다.
    """
    criteria = InventorySearchCriteria(
        search_text=text,
        polymer_codes=polymer or None,
        form_codes=form or None,
        suppliers=supplier or None,
        warehouse_names=warehouse or None,
        min_qty=min_qty,
        max_qty=max_qty,
        only_available=only_available,
    )

    async def run_search():
        async with get_async_session_context() as db:
            return await InventoryService(db).search(criteria, page=page, size=size, sort=sort)

    try:
        result = asyncio.run(run_search())
    except ValueError as e:
        typer.echo(f"오류: {e}", err=True)
        raise typer.Exit(code=2)
    _echo_json(result.model_dump_json())


@cli.command()
def show(
    pan_id: int = typer.Argument(..., help="조회할 팬 ID"),
    polymer: Optional[str] = typer.Option(None, "--polymer", help="폴리머 코드"),
    form: Optional[str] = typer.Option(None, "--form", help="형태 코드"),
    folder: Optional[str] = typer.Option(None, "--folder", help="폴더 코드"),
    lot: Optional[str] = typer.Option(None, "--lot", help="로트명 (예: PSD-2250281)"),
):
    """
    팬 ID 로 재고 품목 하나의 전체 파생 뷰를 출력합니다.
    """
    async def run_show():
        async with get_async_session_context() as db:
            return await InventoryService(db).get_inventory(pan_id, polymer=polymer, form=form, folder=folder, lot=lot)

    try:
        view = asyncio.run(run_show())
    except InventoryNotFoundError as e:
        typer.echo(f"오류: {e}", err=True)
        raise typer.Exit(code=1)
    _echo_json(view.model_dump_json())


@cli.command()
def facets():
    """
    필터 선택지(공급사, 등급, 로트, 스펙 범위 등)를 출력합니다.
    """
    async def run_facets():
        async with get_async_session_context() as db:
            return await InventoryService(db).get_filter_facets(FacetCache())

    _echo_json(asyncio.run(run_facets()).model_dump_json())


@cli.command("init-db")
def init_db():
    """
    개발용 데이터베이스에 재고/할당 테이블을 생성합니다. (기존 테이블은 건드리지 않음)
    """
    asyncio.run(create_db_and_tables())
    typer.echo("테이블 생성이 완료되었습니다.")


if __name__ == "__main__":
    cli()
