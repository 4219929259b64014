"""
Calendar optimization endpoints.

Analyse gaps, persist suggestions and drive their lifecycle.
"""

import datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_optimization_service
from app.schemas.optimization import (ApplyOptimizationResult, ClientPreferenceResponse, ClientPreferenceUpdate,
                                      CreateSuggestionsRequest, Opportunity, SuggestionDecision,
                                      SuggestionResponse, )
from app.services.optimization_service import OptimizationService

router = APIRouter()


@router.post("/suggestions/expire", summary="Expire pending suggestions past their deadline.")
def expire_suggestions(service: OptimizationService = Depends(get_optimization_service)):
    return {"expired": service.expire_stale_suggestions()}


@router.post("/suggestions/{suggestion_id}/respond", summary="Accept or reject a pending suggestion.",
             response_model=SuggestionResponse, )
def respond_to_suggestion(suggestion_id: int, data: SuggestionDecision,
                          service: OptimizationService = Depends(get_optimization_service), ):
    return service.respond_to_suggestion(suggestion_id, data.action)


@router.post("/suggestions/{suggestion_id}/apply", summary="Apply an accepted suggestion.",
             response_model=ApplyOptimizationResult, responses={409: {"model": ApplyOptimizationResult}}, )
def apply_suggestion(suggestion_id: int, service: OptimizationService = Depends(get_optimization_service)):
    result = service.apply_optimization(suggestion_id)
    if not result.success:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=result.model_dump())
    return result


@router.get("/{coach_id}/opportunities", summary="Score candidate moves into gaps.",
            response_model=list[Opportunity], )
def analyze(coach_id: int, start_date: datetime.date, end_date: datetime.date,
            service: OptimizationService = Depends(get_optimization_service), ):
    return service.analyze_optimization_opportunities(coach_id, start_date, end_date)


@router.post("/{coach_id}/suggestions", summary="Analyse a range and persist the best suggestions.",
             response_model=list[SuggestionResponse], status_code=status.HTTP_201_CREATED, )
def create_suggestions(coach_id: int, data: CreateSuggestionsRequest,
                       service: OptimizationService = Depends(get_optimization_service), ):
    opportunities = service.analyze_optimization_opportunities(coach_id, data.start_date, data.end_date)
    return service.create_suggestions(coach_id, opportunities, data.limit)


@router.get("/{coach_id}/suggestions", summary="Pending suggestions, best first.",
            response_model=list[SuggestionResponse], )
def get_pending(coach_id: int, service: OptimizationService = Depends(get_optimization_service)):
    return service.get_pending_suggestions(coach_id)


@router.put("/{coach_id}/preferences/{client_id}", summary="Set a client's scheduling preferences.",
            response_model=ClientPreferenceResponse, )
def set_preferences(coach_id: int, client_id: int, data: ClientPreferenceUpdate,
                    service: OptimizationService = Depends(get_optimization_service), ):
    return service.set_client_preference(coach_id, client_id, data)
