"""
Payload shapes exchanged with ePOS Now.

Field names follow the POS wire format (PascalCase). StockReport is the
normalised form both stock paths (webhook and full sync) are reduced to
before reconciliation.
"""
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

Number = Union[int, float]


class EposPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("ProductID", mode="before", check_fields=False)
    @classmethod
    def _product_id_as_str(cls, value):
        return str(value) if value is not None else value


class CatalogChangePayload(EposPayload):
    """Product webhook: name and price changes"""
    ProductID: str
    Description: str
    SalePrice: Number


class ProductStockFigure(BaseModel):
    model_config = ConfigDict(extra="ignore")

    CurrentStock: Number = 0


class StockChangePayload(EposPayload):
    """ProductStock webhook: one product at one location, split per sub-location"""
    ProductID: str
    LocationID: int
    MinStock: Optional[int] = None
    ProductStocks: List[ProductStockFigure] = Field(default_factory=list)

    @property
    def total_stock(self) -> Number:
        return sum(stock.CurrentStock for stock in self.ProductStocks)


class StockListingItem(EposPayload):
    """One entry of the paginated ProductStock listing"""
    ProductID: str
    LocationID: int
    CurrentStock: Optional[Number] = None
    ProductStocks: Optional[List[ProductStockFigure]] = None

    @property
    def total_stock(self) -> Number:
        if self.ProductStocks:
            return sum(stock.CurrentStock for stock in self.ProductStocks)
        return self.CurrentStock or 0


class StockReport(BaseModel):
    """Stock figure for one POS product at one location"""
    product_id: str
    location_id: int
    min_stock: Optional[int] = None
    total: Number = 0

    @classmethod
    def from_stock_change(cls, payload: StockChangePayload) -> "StockReport":
        return cls(
            product_id=payload.ProductID,
            location_id=payload.LocationID,
            min_stock=payload.MinStock,
            total=payload.total_stock
        )

    @classmethod
    def from_listing_item(cls, item: StockListingItem) -> "StockReport":
        # The listing's MinStock is not applied; only stock webhooks own the threshold
        return cls(
            product_id=item.ProductID,
            location_id=item.LocationID,
            total=item.total_stock
        )
