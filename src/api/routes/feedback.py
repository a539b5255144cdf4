# src/api/routes/feedback.py
"""商品反馈路由"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.api.deps import get_feedback_store
from src.api.responses import parse_json_body
from src.models.schemas import FeedbackRequest, FeedbackResponse
from src.storage.feedback_store import FeedbackStore


router = APIRouter()


@router.post("/feedback", response_model=FeedbackResponse)
async def submit_feedback(
    request: Request,
    store: FeedbackStore = Depends(get_feedback_store)
):
    """记录点赞 / 点踩，返回当前汇总"""
    parsed = await parse_json_body(request, FeedbackRequest, "Invalid feedback")
    if isinstance(parsed, JSONResponse):
        return parsed

    store.add(parsed.product_id, parsed.rating)
    return FeedbackResponse(counts=store.counts())
