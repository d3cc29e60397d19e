"""Persistence layer for loan and savings scheme records.

This module stands in for the records API the back-office screens talk to:
it keeps loans, their payments and savings schemes in a database and hands
them back as plain records (camelCase dictionaries) that
:mod:`pawn_calc.loader` turns into engine inputs. It defaults to SQLite for
local development, but accepts any SQLAlchemy-compatible URL. Amounts and
rates are stored as decimal strings and come back exactly as written.

Writes are single-writer, last-write-wins. Derived figures are never stored;
callers refetch the record and recompute after every write.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from pawn_calc.exceptions import RecordNotFoundError
from pawn_calc.utils import to_decimal

logger = logging.getLogger(__name__)

Base = declarative_base()


def _decimal_text(value, field: str) -> str:
    # exact decimal text, no column scale
    return str(to_decimal(value, field))


class LoanModel(Base):
    __tablename__ = "loans"

    id = Column(String(64), primary_key=True)
    customer_name = Column(String(255), nullable=False, default="")
    total_loan_amount = Column(String(40), nullable=False)
    interest_rate = Column(String(40), nullable=False)  # percent per month
    start_date = Column(Date, nullable=False)
    status = Column(String(32), nullable=False, default="Active")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    payments = relationship(
        "LoanPaymentModel",
        order_by="LoanPaymentModel.seq",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class LoanPaymentModel(Base):
    __tablename__ = "loan_payments"

    seq = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    loan_id = Column(String(64), ForeignKey("loans.id"), index=True, nullable=False)
    amount = Column(String(40), nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_type = Column(String(32), nullable=False, default="Cash")
    notes = Column(Text, nullable=False, default="")
    payment_percentage = Column(String(8), nullable=True)


class SavingsSchemeModel(Base):
    __tablename__ = "savings_schemes"

    id = Column(String(64), primary_key=True)
    customer_name = Column(String(255), nullable=False, default="")
    installment_amount = Column(String(40), nullable=False)
    duration = Column(Integer, nullable=False)
    bonus_amount = Column(String(40), nullable=False, default="0")
    bonus_percentage = Column(String(40), nullable=False, default="0")
    start_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class LoanStore:
    """Database-backed loan and savings scheme store."""

    def __init__(self, url: str) -> None:
        engine_kwargs: Dict[str, Any] = {"future": True}
        if url == "sqlite://" or (url.startswith("sqlite") and ":memory:" in url):
            # one shared connection, otherwise every session sees an empty database
            engine_kwargs.update(connect_args={"check_same_thread": False}, poolclass=StaticPool)
        self._engine = create_engine(url, **engine_kwargs)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)

    def add_loan(
        self,
        total_loan_amount: Decimal,
        interest_rate: Decimal,
        start_date: date,
        customer_name: str = "",
        loan_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        row = LoanModel(
            id=loan_id or uuid4().hex,
            customer_name=customer_name,
            total_loan_amount=_decimal_text(total_loan_amount, "total_loan_amount"),
            interest_rate=_decimal_text(interest_rate, "interest_rate"),
            start_date=start_date,
            status="Active",
        )
        with self._session_factory() as session:
            session.add(row)
            session.commit()
        logger.info("Loan %s created for %s", row.id, total_loan_amount)
        return self.get_loan(row.id)

    def get_loan(self, loan_id: str) -> Dict[str, Any]:
        with self._session_factory() as session:
            row = session.get(LoanModel, loan_id)
            if row is None:
                raise RecordNotFoundError("Loan", loan_id)
            return self._loan_to_dict(row)

    def list_loans(self) -> List[Dict[str, Any]]:
        with self._session_factory() as session:
            rows: Iterable[LoanModel] = session.execute(
                select(LoanModel).order_by(LoanModel.created_at.asc())
            ).scalars()
            return [self._loan_to_dict(row) for row in rows]

    def add_payment(
        self,
        loan_id: str,
        amount: Decimal,
        payment_date: date,
        payment_type: str = "Cash",
        notes: str = "",
        payment_percentage: Optional[str] = None,
    ) -> Dict[str, Any]:
        with self._session_factory() as session:
            if session.get(LoanModel, loan_id) is None:
                raise RecordNotFoundError("Loan", loan_id)
            session.add(
                LoanPaymentModel(
                    loan_id=loan_id,
                    amount=_decimal_text(amount, "amount"),
                    payment_date=payment_date,
                    payment_type=payment_type,
                    notes=notes,
                    payment_percentage=payment_percentage,
                )
            )
            session.commit()
        logger.info("Payment of %s on %s recorded for loan %s", amount, payment_date, loan_id)
        return self.get_loan(loan_id)

    def set_loan_status(self, loan_id: str, status: str) -> None:
        with self._session_factory() as session:
            row = session.get(LoanModel, loan_id)
            if row is None:
                raise RecordNotFoundError("Loan", loan_id)
            row.status = status
            session.commit()

    def add_scheme(
        self,
        installment_amount: Decimal,
        duration: int,
        bonus_amount: Decimal = Decimal("0"),
        bonus_percentage: Decimal = Decimal("0"),
        start_date: Optional[date] = None,
        customer_name: str = "",
        scheme_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        row = SavingsSchemeModel(
            id=scheme_id or uuid4().hex,
            customer_name=customer_name,
            installment_amount=_decimal_text(installment_amount, "installment_amount"),
            duration=duration,
            bonus_amount=_decimal_text(bonus_amount, "bonus_amount"),
            bonus_percentage=_decimal_text(bonus_percentage, "bonus_percentage"),
            start_date=start_date,
        )
        with self._session_factory() as session:
            session.add(row)
            session.commit()
        logger.info("Savings scheme %s created", row.id)
        return self.get_scheme(row.id)

    def get_scheme(self, scheme_id: str) -> Dict[str, Any]:
        with self._session_factory() as session:
            row = session.get(SavingsSchemeModel, scheme_id)
            if row is None:
                raise RecordNotFoundError("Savings scheme", scheme_id)
            return self._scheme_to_dict(row)

    @staticmethod
    def _loan_to_dict(row: LoanModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "customerName": row.customer_name,
            "totalLoanAmount": row.total_loan_amount,
            "interestRate": row.interest_rate,
            "startDate": row.start_date.isoformat(),
            "status": row.status,
            "payments": [
                {
                    "amount": p.amount,
                    "date": p.payment_date.isoformat(),
                    "paymentType": p.payment_type,
                    "notes": p.notes,
                    "paymentPercentage": p.payment_percentage,
                }
                for p in row.payments
            ],
        }

    @staticmethod
    def _scheme_to_dict(row: SavingsSchemeModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "customerName": row.customer_name,
            "installmentAmount": row.installment_amount,
            "duration": row.duration,
            "bonusAmount": row.bonus_amount,
            "bonusPercentage": row.bonus_percentage,
            "startDate": row.start_date.isoformat() if row.start_date else None,
        }


def create_store_from_env(url: str | None) -> LoanStore:
    return LoanStore(url or "sqlite:///pawn_calc.sqlite3")
