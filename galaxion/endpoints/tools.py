# galaxion/endpoints/tools.py
from typing import Dict, List
from fastapi import APIRouter
from pydantic import BaseModel, Field

from galaxion.services import business_tools
from galaxion.services.catalog_service import catalog_service

router = APIRouter()

class RiskRequest(BaseModel):
    project_domain: str | None = None
    data_types: List[str] = []
    ai_type: str | None = None
    stakeholders: List[str] = []
    risk_factors: List[str] = []

class EthicsRequest(BaseModel):
    project_type: str | None = None
    data_source: str | None = None
    target_users: str | None = None
    business_impact: str | None = None
    answers: Dict[str, bool] = Field(default_factory=dict)  # "<category>-<question>" -> yes/no

class ComplianceRequest(BaseModel):
    region: str = Field(..., pattern=r"^(EU|RF|Global|Other)$")
    processing_purpose: List[str] = []
    data_subjects: List[str] = []
    data_schema: List[str] = []

@router.get("/list", response_model=dict)
async def list_tools():
    return {"tools": business_tools.list_tools()}

@router.post("/risk-calculator", response_model=dict)
async def risk_calculator(body: RiskRequest):
    results = business_tools.calculate_risk(body.data_types, body.ai_type, body.risk_factors)
    return {"success": True, "tool_id": "risk-calculator", "results": results}

@router.post("/lightning-ethics", response_model=dict)
async def lightning_ethics(body: EthicsRequest):
    project = body.model_dump(exclude={"answers"})
    results = business_tools.assess_ethics(body.answers, project)
    return {"success": True, "tool_id": "lightning-ethics", "results": results}

@router.post("/compliance-checker", response_model=dict)
async def compliance_checker(body: ComplianceRequest):
    results = business_tools.check_compliance(body.region, body.processing_purpose, body.data_subjects, body.data_schema)
    return {"success": True, "tool_id": "compliance-checker", "results": results}

@router.get("/cases", response_model=dict)
async def list_cases(industry: str | None = None):
    return {"cases": catalog_service.get_cases(industry)}
