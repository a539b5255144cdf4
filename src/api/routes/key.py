# src/api/routes/key.py
"""API Key 校验路由"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.api.deps import get_vision_client
from src.api.responses import error_response, parse_json_body
from src.errors import ProviderError, map_error
from src.generators.vision_client import VisionClient
from src.models.schemas import ApiKeyRequest, ApiKeyResponse


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/key", response_model=ApiKeyResponse)
async def validate_key(
    request: Request,
    vision_client: VisionClient = Depends(get_vision_client)
):
    """用一次最小的模型调用验证调用方的 API Key"""
    parsed = await parse_json_body(request, ApiKeyRequest, "Invalid request")
    if isinstance(parsed, JSONResponse):
        return parsed

    try:
        valid = await vision_client.validate_api_key(parsed.api_key)
    except ProviderError as e:
        api_error = map_error(e)
        logger.warning("API key validation failed: %s", type(e).__name__)
        return error_response(api_error.status, api_error.message)

    return ApiKeyResponse(valid=valid)
