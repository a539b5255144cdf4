# src/api/responses.py
"""路由共用的请求解析与错误响应"""

from typing import Type, TypeVar, Union

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError


ModelT = TypeVar("ModelT", bound=BaseModel)


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    """{"error": message} 形式的错误响应"""
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def parse_json_body(
    request: Request,
    model: Type[ModelT],
    invalid_message: str
) -> Union[ModelT, JSONResponse]:
    """
    解析并校验 JSON 请求体

    Returns:
        校验通过返回模型实例，否则返回 400 错误响应
    """
    try:
        body = await request.json()
    except ValueError:
        return error_response(400, "Invalid JSON body")

    try:
        return model.model_validate(body)
    except ValidationError as e:
        return error_response(
            400,
            invalid_message,
            details=e.errors(include_url=False, include_context=False)
        )
