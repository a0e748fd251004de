from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, Field

from src.domain.enums import EventType, GameCategory, GameCondition, MenuCategory, PaymentMethod


class EventCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    event_type: EventType = EventType.GAME_NIGHT
    event_date: datetime
    duration_minutes: int = Field(default=120, gt=0)
    max_participants: int = Field(gt=0)
    ticket_price: Decimal = Field(default=Decimal("0"), ge=0)


class EventResponse(BaseModel):
    id: str
    title: str
    description: str
    event_type: str
    event_date: str
    duration_minutes: int
    max_participants: int
    current_participants: int
    ticket_price: Decimal


class EventRegistrationRequest(BaseModel):
    customer_id: str


class EventRegistrationResponse(BaseModel):
    id: str
    event_id: str
    customer_id: str
    customer_name: str | None = None
    customer_email: str | None = None
    registered_at: str
    status: str
    payment_status: str


class OrderCreate(BaseModel):
    customer_id: str
    reservation_id: str | None = None


class AddOrderItemRequest(BaseModel):
    menu_item_id: str
    quantity: int = Field(gt=0)
    special_instructions: str | None = None


class SubmitOrderRequest(BaseModel):
    loyalty_points_to_redeem: int = Field(default=0, ge=0)


class PayOrderRequest(BaseModel):
    payment_method: PaymentMethod


class OrderItemResponse(BaseModel):
    id: str
    menu_item_id: str
    menu_item_name: str
    category: str
    quantity: int
    unit_price: Decimal
    special_instructions: str | None = None


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    reservation_id: str | None = None
    status: str
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    loyalty_points_redeemed: int
    payment_method: str | None = None
    items: list[OrderItemResponse]


class ReservationCreate(BaseModel):
    customer_id: str
    table_id: str
    reservation_date: date
    start_time: time
    end_time: time
    party_size: int
    special_requests: str | None = None


class ReservationResponse(BaseModel):
    id: str
    customer_id: str
    table_id: str | None = None
    reservation_date: date
    start_time: time
    end_time: time
    party_size: int
    status: str
    special_requests: str | None = None


class ReservationCheckRequest(BaseModel):
    reservation_date: date
    start_time: time
    end_time: time
    party_size: int
    table_id: str | None = None


class ReservationCheckResponse(BaseModel):
    is_valid: bool
    reason: str | None = None


class AvailableTableResponse(BaseModel):
    id: str
    table_number: str
    seating_capacity: int
    is_window_seat: bool
    hourly_rate: Decimal
    total_price: Decimal


class LoyaltyPointsResponse(BaseModel):
    customer_id: str
    current_balance: int
    current_tier: str
    discount_percentage: Decimal
    current_tier_threshold: int
    next_tier: str | None = None
    next_tier_threshold: int | None = None
    points_to_next_tier: int | None = None


class LoyaltyTransactionResponse(BaseModel):
    id: str
    points_change: int
    transaction_type: str
    description: str
    transaction_date: str
    order_id: str | None = None


class ReservationUpdate(BaseModel):
    table_id: str | None = None
    reservation_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    party_size: int | None = None
    special_requests: str | None = None


class GameCreate(BaseModel):
    title: str = Field(min_length=1, max_length=128)
    publisher: str | None = None
    min_players: int = Field(gt=0)
    max_players: int = Field(gt=0)
    play_time_minutes: int = Field(gt=0)
    age_rating: int = Field(default=0, ge=0)
    complexity: Decimal = Field(default=Decimal("1.0"), ge=1, le=5)
    category: GameCategory
    copies_owned: int = Field(default=1, ge=0)
    daily_rental_fee: Decimal = Field(default=Decimal("0"), ge=0)
    description: str | None = None
    image_url: str | None = None


class GameUpdate(GameCreate):
    copies_in_use: int = Field(default=0, ge=0)


class GameResponse(BaseModel):
    id: str
    title: str
    publisher: str | None = None
    min_players: int
    max_players: int
    play_time_minutes: int
    age_rating: int
    complexity: Decimal
    category: str
    copies_owned: int
    copies_in_use: int
    daily_rental_fee: Decimal
    description: str | None = None
    image_url: str | None = None
    is_available: bool


class GameCheckoutRequest(BaseModel):
    game_id: str
    due_back_at: datetime | None = None


class GameReturnRequest(BaseModel):
    condition: GameCondition
    returned_at: datetime | None = None


class GameSessionResponse(BaseModel):
    id: str
    game_id: str
    game_title: str
    reservation_id: str
    checked_out_at: str
    due_back_at: str | None = None
    returned_at: str | None = None
    condition: str | None = None
    late_fee_applied: Decimal | None = None


class MenuItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    description: str = ""
    category: MenuCategory
    price: Decimal = Field(ge=0)
    is_available: bool = True
    preparation_time_minutes: int = Field(default=0, ge=0)
    allergen_info: str | None = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False


class MenuItemResponse(BaseModel):
    id: str
    name: str
    description: str
    category: str
    price: Decimal
    is_available: bool
    preparation_time_minutes: int
    allergen_info: str | None = None
    is_vegetarian: bool
    is_vegan: bool
    is_gluten_free: bool


class MenuCategoryResponse(BaseModel):
    value: str
    name: str


class CustomerProfileResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    membership_tier: str
    loyalty_points: int
    joined_at: str
    total_visits: int


class CustomerProfileUpdate(BaseModel):
    first_name: str = Field(min_length=1, max_length=64)
    last_name: str = Field(min_length=1, max_length=64)
    phone: str | None = None


class VisitStatsResponse(BaseModel):
    customer_id: str
    total_visits: int
    games_played: int
    total_spent: Decimal
    total_orders: int
    average_order_value: Decimal
