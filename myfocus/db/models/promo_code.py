"""
Promo code model.

Codes are created and edited administratively; the application only reads
them and consumes usage when a payment is initiated.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid

from myfocus.core.config import utcnow


class PromoCode(SQLModel, table=True):
    """Discount token with an activation window and an optional usage cap."""
    __tablename__ = "promo_codes"
    
    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True
    )
    
    code: str = Field(
        unique=True,
        index=True,
        description="Stored uppercased; lookups are case-insensitive"
    )
    
    is_active: bool = Field(default=True)
    
    discount_percent: int = Field(ge=0, le=100)
    
    valid_from: datetime = Field(default_factory=utcnow)
    
    valid_until: Optional[datetime] = Field(default=None)
    
    max_uses: Optional[int] = Field(default=None, description="Null means unlimited")
    
    current_uses: int = Field(default=0)
    
    created_at: datetime = Field(default_factory=utcnow)
    
    def has_uses_left(self) -> bool:
        return self.max_uses is None or self.current_uses < self.max_uses


class PromoValidationRequest(SQLModel):
    """Body of the standalone promo check."""
    code: Optional[str] = None


class PromoValidationResponse(SQLModel):
    """Result of the standalone promo check."""
    valid: bool
    discountPercent: Optional[int] = None
    error: Optional[str] = None
