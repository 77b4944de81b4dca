"""
Job Board Infrastructure Module

Exports:
    - HttpJobBoardGateway: SubmissionGatewayProtocol over HTTP (httpx)
"""

from .http_gateway import HttpJobBoardGateway

__all__ = [
    "HttpJobBoardGateway",
]
