"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from lending_engine.api.main import create_app
from lending_engine.infrastructure.database.models import Base, BusinessProfileRow, LenderTierPolicy
from lending_engine.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def business(db: Session) -> BusinessProfileRow:
    """Business lender with a $50 first-time amount and two tier policies"""
    row = BusinessProfileRow(
        id="biz_corner",
        business_name="Corner Lending",
        first_time_borrower_amount=Decimal("50"),
        max_loan_amount=Decimal("5000"),
    )
    db.add(row)
    db.add_all(
        [
            LenderTierPolicy(lender_id="biz_corner", tier_id=1, max_loan_amount=Decimal("200")),
            LenderTierPolicy(lender_id="biz_corner", tier_id=2, max_loan_amount=Decimal("500")),
        ]
    )
    db.commit()
    return row


@pytest.fixture
def unconfigured_business(db: Session) -> BusinessProfileRow:
    """Business lender that never set its lending amounts"""
    row = BusinessProfileRow(id="biz_plain", business_name="Plain Credit")
    db.add(row)
    db.commit()
    return row
