"""
API Gateway Module

Single entry point assembling middleware, routers and health checks.
"""
from .gateway import APIGateway

__all__ = ["APIGateway"]
