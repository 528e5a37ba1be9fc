from fastapi import Request

from src.resources.resource_provider import ResourceProvider


def get_resources(request: Request) -> ResourceProvider:
    """lifespan 에서 구성한 ResourceProvider"""
    return request.app.state.resources
