"""
Main API router.
"""

from fastapi import APIRouter
from cashcast.api import accounts, transactions, recurring, projections

api_router = APIRouter()

api_router.include_router(accounts.router)
api_router.include_router(transactions.router)
api_router.include_router(recurring.router)
api_router.include_router(projections.router)
