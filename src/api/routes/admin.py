# src/api/routes/admin.py
"""管理端路由：可调参数与品类索引"""

from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.api.deps import get_config_store, get_taxonomy
from src.api.responses import error_response, parse_json_body
from src.errors import SearchError, map_error
from src.models.schemas import PipelineConfig, PipelineConfigUpdate, TaxonomyCategory
from src.search.taxonomy import TaxonomyIndex
from src.storage.config_store import ConfigStore


router = APIRouter()


def _config_payload(config: PipelineConfig) -> dict:
    return config.model_dump(mode="json", by_alias=True)


@router.get("/config")
async def get_config(store: ConfigStore = Depends(get_config_store)):
    """返回当前配置"""
    return _config_payload(store.get())


@router.put("/config")
async def update_config(
    request: Request,
    store: ConfigStore = Depends(get_config_store)
):
    """部分更新配置（合并后整体校验）"""
    parsed = await parse_json_body(request, PipelineConfigUpdate, "Invalid configuration")
    if isinstance(parsed, JSONResponse):
        return parsed

    if not parsed.model_dump(exclude_unset=True, exclude_none=True):
        return error_response(400, "No configuration fields provided")

    return _config_payload(store.update(parsed))


@router.get("/taxonomy", response_model=List[TaxonomyCategory])
async def get_taxonomy_listing(taxonomy: TaxonomyIndex = Depends(get_taxonomy)):
    """返回品类及其下属类型"""
    try:
        return await taxonomy.get()
    except SearchError as e:
        api_error = map_error(e)
        return error_response(api_error.status, api_error.message)
