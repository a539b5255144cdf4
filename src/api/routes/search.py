# src/api/routes/search.py
"""搜索路由"""

import base64
import io
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, UploadFile
from fastapi.responses import StreamingResponse
from PIL import Image

from src.api.deps import get_search_pipeline
from src.api.responses import error_response
from src.api.streaming import NDJSON_MEDIA_TYPE, ndjson_stream
from src.models.schemas import ALLOWED_IMAGE_TYPES, MAX_IMAGE_SIZE_BYTES, MAX_PROMPT_LENGTH
from src.search.pipeline import SearchInput, SearchPipeline


router = APIRouter()


def resolve_api_key(x_api_key: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """从 X-API-Key 或 Authorization: Bearer 中取出调用方的 API Key"""
    if x_api_key and x_api_key.strip():
        return x_api_key.strip()
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return None


def _is_decodable_image(image_bytes: bytes) -> bool:
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            img.verify()
    except (OSError, ValueError, SyntaxError):
        return False
    return True


@router.post("/search")
async def search_by_image(
    image: Optional[UploadFile] = File(default=None, description="输入图片"),
    prompt: Optional[str] = Form(default=None, description="可选的补充描述"),
    x_api_key: Optional[str] = Header(default=None),
    authorization: Optional[str] = Header(default=None),
    pipeline: SearchPipeline = Depends(get_search_pipeline)
):
    """
    基于图片的家具相似搜索

    以 NDJSON 流返回结果：先推送 candidates（初步结果），重排序完成后推送
    results；非家具图片或出错时分别推送 not-furniture / error。
    输入校验失败时直接返回 JSON 错误，不进入流水线。
    """
    api_key = resolve_api_key(x_api_key, authorization)
    if not api_key:
        return error_response(401, "Missing X-API-Key header")

    if image is None:
        return error_response(400, "Missing image file. Send a 'image' field in FormData.")

    if image.content_type not in ALLOWED_IMAGE_TYPES:
        return error_response(
            400,
            f"Invalid image type: {image.content_type}. Allowed: {', '.join(ALLOWED_IMAGE_TYPES)}"
        )

    # 读取图片数据
    image_bytes = await image.read()

    if not image_bytes:
        return error_response(400, "Empty image file")

    if len(image_bytes) > MAX_IMAGE_SIZE_BYTES:
        return error_response(
            400,
            f"Image too large: {len(image_bytes) / 1024 / 1024:.1f} MB. Maximum: 10 MB."
        )

    if not _is_decodable_image(image_bytes):
        return error_response(400, "Image file could not be decoded")

    user_prompt = prompt.strip() if prompt and prompt.strip() else None
    if user_prompt and len(user_prompt) > MAX_PROMPT_LENGTH:
        return error_response(
            400,
            f"Prompt too long: {len(user_prompt)} chars. Maximum: {MAX_PROMPT_LENGTH}."
        )

    search_input = SearchInput(
        api_key=api_key,
        image_base64=base64.b64encode(image_bytes).decode(),
        mime_type=image.content_type,
        user_prompt=user_prompt
    )

    return StreamingResponse(
        ndjson_stream(pipeline, search_input),
        media_type=NDJSON_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
    )
