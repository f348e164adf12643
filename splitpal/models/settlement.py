import datetime as dt
from sqlalchemy import Column, Integer, Numeric, String, Date, DateTime, Enum, ForeignKey
from sqlalchemy.sql import func
from splitpal.db.session import Base
from splitpal.schemas.settlements import PaymentStatus

class Settlement(Base):
    __tablename__ = "settlements"

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False)
    payer_id = Column(Integer, ForeignKey("members.id"), nullable=False)
    receiver_id = Column(Integer, ForeignKey("members.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False, default=dt.date.today)
    status = Column(
        Enum(PaymentStatus, values_callable=lambda e: [s.value for s in e], name="payment_status"),
        nullable=False,
        default=PaymentStatus.COMPLETED,
    )
    # payment provider transaction id, set on confirmation
    reference = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
