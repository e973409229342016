"""
Teller HTTP API

FastAPI front end over a BankingSystem. Endpoints are plain ``def`` so
FastAPI runs them on its thread pool; overlapping requests against the same
account rely on the account lock for balance safety.
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Depends, Request, status
from pydantic import BaseModel, Field

from .currency import format_amount, parse_amount
from .system import AccountNotFoundError, BankingSystem


# Request/response schemas
class OpenAccountRequest(BaseModel):
    account_id: str = Field(..., min_length=1)
    holder_name: str
    initial_balance: str = Field("0", description="Decimal amount as string")


class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string")


class AccountModel(BaseModel):
    account_id: str
    holder_name: str
    balance: str
    created_at: str


class HistoryModel(BaseModel):
    account_id: str
    status: str
    message: Optional[str] = None
    lines: List[str] = []


def _account_model(account) -> AccountModel:
    return AccountModel(
        account_id=account.account_id,
        holder_name=account.holder_name,
        balance=format_amount(account.get_balance()),
        created_at=account.created_at.isoformat()
    )


def get_banking_system(request: Request) -> BankingSystem:
    return request.app.state.banking_system


def _lookup(system: BankingSystem, account_id: str):
    try:
        return system.get_account(account_id)
    except AccountNotFoundError:
        raise HTTPException(status_code=404, detail="Account not found")


def _transact(system: BankingSystem, account_id: str, body: AmountRequest, withdraw: bool):
    _lookup(system, account_id)
    try:
        amount = parse_amount(body.amount)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if withdraw:
        outcome = system.withdraw(account_id, amount)
    else:
        outcome = system.deposit(account_id, amount)
    if outcome is None:
        raise HTTPException(status_code=503, detail="Transaction wait interrupted")
    return outcome.to_dict()


def create_app(system: Optional[BankingSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    banking_system = system or BankingSystem()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        banking_system.shutdown()

    app = FastAPI(
        title="Teller API",
        description="Account ledger with per-account transaction logs",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.banking_system = banking_system

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "teller", "accounts": len(banking_system.ledger)}

    @app.get("/accounts", response_model=List[AccountModel])
    def list_accounts(system: BankingSystem = Depends(get_banking_system)):
        """All accounts in creation order"""
        return [_account_model(account) for account in system.ledger.accounts()]

    @app.post("/accounts", status_code=status.HTTP_201_CREATED, response_model=AccountModel)
    def open_account(body: OpenAccountRequest, system: BankingSystem = Depends(get_banking_system)):
        """Open a new account"""
        if body.account_id in system.ledger:
            raise HTTPException(status_code=409, detail=f"Account {body.account_id} already exists")
        try:
            account = system.open_account(body.account_id, body.holder_name, body.initial_balance)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return _account_model(account)

    @app.get("/accounts/{account_id}", response_model=AccountModel)
    def get_account(account_id: str, system: BankingSystem = Depends(get_banking_system)):
        """Get account details"""
        return _account_model(_lookup(system, account_id))

    @app.post("/accounts/{account_id}/deposit")
    def deposit(account_id: str, body: AmountRequest,
                system: BankingSystem = Depends(get_banking_system)):
        """Make a deposit"""
        return _transact(system, account_id, body, withdraw=False)

    @app.post("/accounts/{account_id}/withdraw")
    def withdraw(account_id: str, body: AmountRequest,
                 system: BankingSystem = Depends(get_banking_system)):
        """Make a withdrawal; insufficient funds returns succeeded=false"""
        return _transact(system, account_id, body, withdraw=True)

    @app.get("/accounts/{account_id}/history", response_model=HistoryModel)
    def get_history(account_id: str, system: BankingSystem = Depends(get_banking_system)):
        """Transaction history for an account"""
        _lookup(system, account_id)
        try:
            history = system.reporting_engine.view_history(account_id)
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"Error reading transaction history: {e}")
        return HistoryModel(
            account_id=account_id,
            status=history.status.value,
            message=history.message,
            lines=history.lines
        )

    @app.post("/accounts/{account_id}/history/export")
    def export_history(account_id: str, system: BankingSystem = Depends(get_banking_system)):
        """Save an account's transaction history to its export file"""
        _lookup(system, account_id)
        if not system.transaction_logger.exists(account_id):
            raise HTTPException(
                status_code=404,
                detail=f"No transaction history found for account: {account_id}"
            )
        try:
            location = system.reporting_engine.export_history(account_id)
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"Error saving transaction history: {e}")
        if location is None:
            raise HTTPException(
                status_code=404,
                detail=f"No transaction history found for account: {account_id}"
            )
        return {"account_id": account_id, "location": location}

    @app.post("/summary")
    def write_summary(system: BankingSystem = Depends(get_banking_system)):
        """Write the account summary now"""
        try:
            system.reporting_engine.write_summary(system.ledger)
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"Error writing account summary: {e}")
        return {"location": system.storage.describe(system.reporting_engine.summary_file),
                "accounts": len(system.ledger)}

    return app
