from pydantic import BaseModel, ConfigDict, Field

from storefront_service.domain.models import CheckoutItem, CheckoutRequest, Payer


class CheckoutItemBody(BaseModel):
    title: str
    unit_price: float = Field(gt=0)
    quantity: int = Field(gt=0)


class PayerBody(BaseModel):
    email: str
    name: str | None = None
    phone: str | None = None


class CheckoutBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(default="", alias="orderId")
    items: list[CheckoutItemBody] = Field(default_factory=list)
    payer: PayerBody

    def to_request(self) -> CheckoutRequest:
        return CheckoutRequest(
            order_id=self.order_id,
            items=[
                CheckoutItem(title=item.title, unit_price=item.unit_price, quantity=item.quantity)
                for item in self.items
            ],
            payer=Payer(email=self.payer.email, name=self.payer.name, phone=self.payer.phone),
        )


class CheckoutResponse(BaseModel):
    id: str
    init_point: str


class ExchangeRateResponse(BaseModel):
    rate: float
    currency: str
    lastUpdated: str
    source: str
