import os
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from text_matching.editing import (
    add_match,
    discard_match,
    extend_match,
    match_context,
    truncate_match,
)
from text_matching.errors import MatchBoundsError, MatchOverlapError
from text_matching.loader import load_text_directory
from text_matching.models import Match, MatchingConfig, MatchResult, Text
from text_matching.service import TextMatchingService

DEFAULT_DATASET_DIR = os.environ.get("TEXT_MATCHING_DATASET_DIR")
DEFAULT_STRATEGY = os.environ.get("TEXT_MATCHING_STRATEGY", "WORD")
DEFAULT_MIN_MATCH_LENGTH = int(os.environ.get("TEXT_MATCHING_MIN_MATCH_LENGTH", "3"))
DEFAULT_TOP_K = int(os.environ.get("TEXT_MATCHING_TOP_K", "10"))

app = FastAPI(title="Text Matching Service")
service: Optional[TextMatchingService] = None


class TextRequest(BaseModel):
    identifier: str
    content: str


class TextResponse(BaseModel):
    identifier: str
    replaced: bool


class AnalyzeRequest(BaseModel):
    strategy: Optional[str] = None
    min_match_length: Optional[int] = None


class AnalyzeResponse(BaseModel):
    strategy: str
    min_match_length: int
    pairs: int
    elapsed_ms: float


class MatchPayload(BaseModel):
    start_a: int = Field(ge=0)
    start_b: int = Field(ge=0)
    length: int = Field(gt=0)


class MatchEditRequest(MatchPayload):
    amount: int


class ContextResponse(BaseModel):
    text_a: str
    text_b: str
    context_a: str
    context_b: str
    span_a: int
    span_b: int
    rendered: str


class ResultResponse(BaseModel):
    text_a: str
    text_b: str
    strategy: str
    min_match_length: int
    matches: List[MatchPayload]
    metric: str
    score: float
    formatted_score: str


class RankedPair(BaseModel):
    text_a: str
    text_b: str
    score: float
    formatted_score: str


def _config() -> MatchingConfig:
    return MatchingConfig(
        strategy=DEFAULT_STRATEGY,
        min_match_length=DEFAULT_MIN_MATCH_LENGTH,
        top_k=DEFAULT_TOP_K,
    )


@app.on_event("startup")
async def startup_event() -> None:
    global service
    if service is not None:
        return

    dataset_dir = DEFAULT_DATASET_DIR
    if not dataset_dir:
        service = TextMatchingService([], config=_config())
        return

    texts = load_text_directory(Path(dataset_dir), limit=None)
    service = TextMatchingService(texts, config=_config())


def _service() -> TextMatchingService:
    if service is None:
        raise HTTPException(status_code=503, detail="Service not initialised")
    return service


def _result(svc: TextMatchingService, id_a: str, id_b: str) -> MatchResult:
    try:
        return svc.get_result(id_a, id_b)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc


def _result_response(
    svc: TextMatchingService, result: MatchResult, id_a: str, metric: Optional[str]
) -> ResultResponse:
    metric_name = (metric or svc.config.default_metric).upper()
    try:
        value, formatted = svc.score(
            result.text_a.identifier, result.text_b.identifier, metric_name
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    swap = not result.is_first(id_a)
    first, second = result.text_a, result.text_b
    if swap:
        first, second = second, first
    matches = [
        MatchPayload(
            start_a=m.start_b if swap else m.start_a,
            start_b=m.start_a if swap else m.start_b,
            length=m.length,
        )
        for m in result.sorted_matches(id_a)
    ]
    return ResultResponse(
        text_a=first.identifier,
        text_b=second.identifier,
        strategy=result.strategy_name,
        min_match_length=result.min_match_length,
        matches=matches,
        metric=metric_name,
        score=value,
        formatted_score=formatted,
    )


def _as_match(result: MatchResult, id_a: str, payload: MatchPayload) -> Match:
    match = Match(payload.start_a, payload.start_b, payload.length)
    return match if result.is_first(id_a) else match.swapped()


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post("/texts", response_model=TextResponse)
async def add_text(req: TextRequest) -> TextResponse:
    svc = _service()
    try:
        text = Text(identifier=req.identifier, content=req.content)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    replaced = svc.add_text(text)
    return TextResponse(identifier=text.identifier, replaced=replaced)


@app.get("/texts")
async def list_texts() -> dict:
    svc = _service()
    return {"identifiers": [text.identifier for text in svc.texts]}


@app.delete("/texts/{identifier}")
async def delete_text(identifier: str) -> dict:
    svc = _service()
    if not svc.remove_text(identifier):
        raise HTTPException(status_code=404, detail=f"Text {identifier} not found")
    return {"status": "removed"}


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze(req: AnalyzeRequest) -> AnalyzeResponse:
    svc = _service()
    try:
        analysis = svc.analyze(req.strategy, req.min_match_length)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return AnalyzeResponse(
        strategy=analysis.strategy_name,
        min_match_length=analysis.min_match_length,
        pairs=len(analysis),
        elapsed_ms=analysis.elapsed_ms,
    )


@app.get("/results", response_model=List[RankedPair])
async def ranked_results(
    metric: Optional[str] = None, limit: Optional[int] = None
) -> List[RankedPair]:
    svc = _service()
    try:
        ranked = svc.top_results(metric, limit)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [
        RankedPair(
            text_a=item.result.text_a.identifier,
            text_b=item.result.text_b.identifier,
            score=item.value,
            formatted_score=item.formatted,
        )
        for item in ranked
    ]


@app.get("/results/{id_a}/{id_b}", response_model=ResultResponse)
async def get_result(
    id_a: str, id_b: str, metric: Optional[str] = None
) -> ResultResponse:
    svc = _service()
    result = _result(svc, id_a, id_b)
    return _result_response(svc, result, id_a, metric)


@app.post("/results/{id_a}/{id_b}/matches", response_model=ResultResponse)
async def create_match(id_a: str, id_b: str, payload: MatchPayload) -> ResultResponse:
    svc = _service()
    result = _result(svc, id_a, id_b)
    try:
        revised = add_match(result, _as_match(result, id_a, payload))
    except MatchOverlapError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except MatchBoundsError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    svc.revise_result(revised)
    return _result_response(svc, revised, id_a, None)


@app.delete("/results/{id_a}/{id_b}/matches", response_model=ResultResponse)
async def delete_match(
    id_a: str, id_b: str, start_a: int, start_b: int, length: int
) -> ResultResponse:
    svc = _service()
    result = _result(svc, id_a, id_b)
    try:
        payload = MatchPayload(start_a=start_a, start_b=start_b, length=length)
        revised = discard_match(result, _as_match(result, id_a, payload))
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    svc.revise_result(revised)
    return _result_response(svc, revised, id_a, None)


def _edit_match(id_a: str, id_b: str, req: MatchEditRequest, edit) -> ResultResponse:
    svc = _service()
    result = _result(svc, id_a, id_b)
    try:
        revised = edit(result, _as_match(result, id_a, req), req.amount)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
    except MatchOverlapError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    svc.revise_result(revised)
    return _result_response(svc, revised, id_a, None)


@app.patch("/results/{id_a}/{id_b}/matches/extend", response_model=ResultResponse)
async def extend(id_a: str, id_b: str, req: MatchEditRequest) -> ResultResponse:
    return _edit_match(id_a, id_b, req, extend_match)


@app.patch("/results/{id_a}/{id_b}/matches/truncate", response_model=ResultResponse)
async def truncate(id_a: str, id_b: str, req: MatchEditRequest) -> ResultResponse:
    return _edit_match(id_a, id_b, req, truncate_match)


@app.get("/results/{id_a}/{id_b}/matches/context", response_model=ContextResponse)
async def context(
    id_a: str,
    id_b: str,
    start_a: int,
    start_b: int,
    length: int,
    context_size: int = 0,
) -> ContextResponse:
    svc = _service()
    result = _result(svc, id_a, id_b)
    try:
        payload = MatchPayload(start_a=start_a, start_b=start_b, length=length)
        shown = match_context(
            result,
            _as_match(result, id_a, payload),
            context_size=context_size,
            from_identifier=id_a,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ContextResponse(
        text_a=shown.first_identifier,
        text_b=shown.second_identifier,
        context_a=shown.first_context,
        context_b=shown.second_context,
        span_a=shown.first_span,
        span_b=shown.second_span,
        rendered=shown.render(),
    )


@app.post("/exclusions/{identifier}")
async def exclude_text(identifier: str) -> dict:
    svc = _service()
    svc.exclusions.exclude(identifier)
    return {"status": "excluded"}


@app.delete("/exclusions/{identifier}")
async def include_text(identifier: str) -> dict:
    svc = _service()
    if not svc.exclusions.include(identifier):
        raise HTTPException(status_code=404, detail=f"{identifier} is not excluded")
    return {"status": "included"}
