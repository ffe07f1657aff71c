"""SQLAlchemy ORM models for the persisted ledger"""

from sqlalchemy import Column, String, BigInteger, DateTime, Integer, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class LedgerTransactionRecord(Base):
    """Transaction summary, one row per posting call"""

    __tablename__ = "ledger_transaction"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, index=True)
    kind = Column(Text, nullable=False)  # GROUP | SETTLEMENT
    payer = Column(String(1), nullable=True)
    from_party = Column(String(1), nullable=True)
    to_party = Column(String(1), nullable=True)
    category = Column(Text, nullable=True)
    amount_cents = Column(BigInteger, nullable=False)
    per_party_share_cents = Column(BigInteger, nullable=True)
    remainder_cents = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class LedgerEntryRecord(Base):
    """Immutable signed movement; seq preserves insertion order"""

    __tablename__ = "ledger_entry"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True)
    transaction_id = Column(String(36), nullable=False, index=True)
    transaction_kind = Column(Text, nullable=False)
    account = Column(Text, nullable=False, index=True)
    party = Column(String(1), nullable=False)
    category = Column(Text, nullable=True)
    delta_cents = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
