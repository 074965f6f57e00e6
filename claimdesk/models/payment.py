from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from ..database import Base


class PaymentHistory(Base):
    """Snapshot of an invoice's financial fields after each payment update."""

    __tablename__ = "payment_history"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)

    amount = Column(Numeric(12, 2), nullable=False)
    paying = Column(Numeric(12, 2), nullable=False, default=0)
    paid = Column(Numeric(12, 2), nullable=False)
    advance = Column(Numeric(12, 2), nullable=False)
    pending = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(50), nullable=True)
    recorded_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    invoice = relationship("Invoice", back_populates="payments")
