"""
Account Router - AI provider credit balance.
"""
from fastapi import APIRouter

from .dependencies import get_ai_service
from ..api.dto import AccountBalanceDTO

router = APIRouter()


@router.get("/openai/balance", response_model=AccountBalanceDTO)
async def get_balance():
    return await get_ai_service().get_account_balance()
