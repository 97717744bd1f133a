from sqlalchemy import Column, String, Float, Enum, DateTime, JSON
from datetime import datetime
from devgad.db.session import Base
import enum
import secrets
import string

_PUSH_ALPHABET = string.ascii_letters + string.digits + "-_"

def generate_order_id() -> str:
    """Time-prefixed key, so ids sort roughly by creation."""
    millis = int(datetime.utcnow().timestamp() * 1000)
    prefix = format(millis, "012x")
    suffix = "".join(secrets.choice(_PUSH_ALPHABET) for _ in range(8))
    return f"{prefix}{suffix}"

class OrderStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    rejected = "rejected"

class SenderType(str, enum.Enum):
    admin = "admin"
    user = "user"

class Order(Base):
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=generate_order_id)
    user_id = Column(String(28), index=True, nullable=False)
    customer = Column(JSON, nullable=False)   # name, email, phone, address, pincode, notes
    items = Column(JSON, nullable=False)      # snapshot of cart lines at checkout
    total_price = Column(Float, nullable=False)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.pending)
    messages = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    @property
    def document_path(self) -> str:
        return f"orders/{self.id}"

    @property
    def short_code(self) -> str:
        return f"#{self.id[-6:].upper()}"
