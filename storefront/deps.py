# storefront/deps.py
from fastapi import Request

from .services import OrderService, QueryService


def get_query_service(request: Request) -> QueryService:
    return request.app.state.query_service


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service
