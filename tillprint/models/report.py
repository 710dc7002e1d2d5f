"""
Nightly report models consumed by the receipt encoder.

The report is computed upstream by the reporting module; tillprint only
reads it.
"""
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class SalesBucket(BaseModel):
    """Sales total and order count for one slice of the night."""
    sales: float = 0.0
    orders: int = 0


class DepartmentBreakdown(BaseModel):
    """Per-department totals."""
    model_config = ConfigDict(populate_by_name=True)

    box_office: SalesBucket = Field(default_factory=SalesBucket, alias="box-office")
    candy_counter: SalesBucket = Field(default_factory=SalesBucket, alias="candy-counter")
    after_closing: SalesBucket = Field(default_factory=SalesBucket, alias="after-closing")


class ShowBreakdown(BaseModel):
    """Per-show totals."""
    model_config = ConfigDict(populate_by_name=True)

    first_show: SalesBucket = Field(default_factory=SalesBucket, alias="1st-show")
    second_show: SalesBucket = Field(default_factory=SalesBucket, alias="2nd-show")
    nightly_show: SalesBucket = Field(default_factory=SalesBucket, alias="nightly-show")
    matinee: SalesBucket = Field(default_factory=SalesBucket)


class PaymentBreakdown(BaseModel):
    """Cash/card split per department."""
    model_config = ConfigDict(populate_by_name=True)

    box_office_cash: float = Field(0.0, alias="boxOfficeCash")
    box_office_card: float = Field(0.0, alias="boxOfficeCard")
    candy_counter_cash: float = Field(0.0, alias="candyCounterCash")
    candy_counter_card: float = Field(0.0, alias="candyCounterCard")
    after_closing_cash: float = Field(0.0, alias="afterClosingCash")
    after_closing_card: float = Field(0.0, alias="afterClosingCard")


class UserSales(BaseModel):
    """Sales attributed to one staff member."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    user_name: str = Field(..., alias="userName")
    sales: float = 0.0
    orders: int = 0
    user_role: Optional[str] = Field(None, alias="userRole")


class TopProduct(BaseModel):
    """Best seller line."""
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    product_name: str = Field(..., alias="productName")
    quantity_sold: int = Field(0, alias="quantitySold")
    revenue: float = 0.0


class NightlyReport(BaseModel):
    """Aggregate of one business day."""
    model_config = ConfigDict(populate_by_name=True)

    date: str = Field(..., description="Business date, ISO format (YYYY-MM-DD)")
    total_sales: float = Field(0.0, alias="totalSales")
    total_orders: int = Field(0, alias="totalOrders")
    cash_sales: float = Field(0.0, alias="cashSales")
    card_sales: float = Field(0.0, alias="cardSales")
    credit_card_fees: float = Field(0.0, alias="creditCardFees")
    department_breakdown: DepartmentBreakdown = Field(default_factory=DepartmentBreakdown, alias="departmentBreakdown")
    show_breakdown: Optional[ShowBreakdown] = Field(None, alias="showBreakdown")
    payment_breakdown: Optional[PaymentBreakdown] = Field(None, alias="paymentBreakdown")
    user_breakdown: List[UserSales] = Field(default_factory=list, alias="userBreakdown")
    top_products: List[TopProduct] = Field(default_factory=list, alias="topProducts")

    @property
    def average_order(self) -> float:
        if self.total_orders <= 0:
            return 0.0
        return self.total_sales / self.total_orders
