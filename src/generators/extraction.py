# src/generators/extraction.py
"""图片属性抽取"""

import logging

from pydantic import ValidationError

from src.errors import ParseError
from src.generators.parsing import extract_json
from src.generators.prompt import render_prompt
from src.generators.vision_client import VisionModel
from src.models.schemas import ImageAnalysisResult, PipelineConfig


logger = logging.getLogger(__name__)

ANALYSIS_INSTRUCTION = "Analyze this image and classify the furniture item."


async def extract_attributes(
    vision: VisionModel,
    config: PipelineConfig,
    grounding_text: str,
    api_key: str,
    image_base64: str,
    mime_type: str,
    max_tokens: int = 1024
) -> ImageAnalysisResult:
    """
    调用视觉模型抽取家具属性

    Args:
        vision: 视觉模型客户端
        config: 当前流水线配置（提供抽取模板）
        grounding_text: 品类索引文本，注入 {{taxonomy}}
        api_key: 调用方的 API Key
        image_base64: base64 图片
        mime_type: 图片 MIME 类型
        max_tokens: 最大输出 token

    Returns:
        ImageAnalysisResult

    Raises:
        ProviderError: 模型调用失败
        ParseError: 输出不是合法 JSON 或结构不符
    """
    system_prompt = render_prompt(config.image_analysis_prompt, taxonomy=grounding_text)

    response = await vision.complete(
        api_key=api_key,
        system_prompt=system_prompt,
        image_base64=image_base64,
        mime_type=mime_type,
        text=ANALYSIS_INSTRUCTION,
        max_tokens=max_tokens
    )

    parsed = extract_json(response.text)
    try:
        return ImageAnalysisResult.model_validate(parsed)
    except ValidationError as e:
        logger.warning("Analysis response failed validation: %s", e)
        raise ParseError("Analysis response does not match expected shape", response.text) from e
