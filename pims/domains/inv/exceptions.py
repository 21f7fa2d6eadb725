# pims/domains/inv/exceptions.py

"""'inv' 도메인에서 발생시키는 예외 정의."""


class InventoryNotFoundError(LookupError):
    """단건 조회에서 일치하는 재고 품목이 없을 때 발생합니다."""

    def __init__(self, pan_id: int):
        super().__init__(f"Inventory item not found with PanID: {pan_id}")
        self.pan_id = pan_id


class SpecValueError(ValueError):
    """구획별 스펙 텍스트를 숫자로 해석할 수 없을 때 발생합니다."""

    def __init__(self, field: str, raw_value: str):
        super().__init__(f"Unparsable spec value {raw_value!r} in field '{field}'")
        self.field = field
        self.raw_value = raw_value
