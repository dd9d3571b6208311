"""
MediScout Web Server

FastAPI-based web server for the MediScout synthetic health data prototype:
patient accounts and self-reports, the simulated AI symptom checker, and the
health-worker cohort dashboard.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Depends, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Setup paths
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from mediscout import __version__
from mediscout.analytics import (
    summarize,
    condition_distribution,
    risk_distribution,
    age_distribution,
    gender_distribution,
    location_distribution,
    impact_metrics,
    search_records,
)
from mediscout.auth import AccountService, Session, SessionRegistry, EMPTY_SYMPTOMS
from mediscout.auth.middleware import get_current_session, get_current_session_optional
from mediscout.config import Settings, get_settings, build_store
from mediscout.db import KeyValueStore, UserRepository, CohortRepository
from mediscout.engines import CohortAssembler, RandomSource
from mediscout.exporters import export_csv, DEFAULT_FILENAME
from mediscout.log import setup_logging
from mediscout.models import ImageDescriptor, RegistrationRequest, UserAccount
from mediscout.predictor import SymptomMatcher


# Create FastAPI app
app = FastAPI(
    title="MediScout",
    description="MediScout - Synthetic Community Health Data API",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def init_state(
    store: Optional[KeyValueStore] = None,
    rng: Optional[RandomSource] = None,
    matcher: Optional[SymptomMatcher] = None,
    settings: Optional[Settings] = None,
) -> None:
    """
    Wire the store, repositories and services onto app.state.

    Called once at import with the configured backend; tests call it again
    with an in-memory store, a seeded random source and a zero-delay matcher.
    """
    settings = settings or get_settings()
    store = store if store is not None else build_store(settings)
    matcher = matcher or SymptomMatcher(delay_seconds=settings.predict_delay)

    users = UserRepository(store)
    sessions = SessionRegistry()

    app.state.settings = settings
    app.state.sessions = sessions
    app.state.matcher = matcher
    app.state.users = users
    app.state.cohorts = CohortRepository(
        store,
        assembler=CohortAssembler(rng=rng),
        per_condition_count=settings.records_per_condition,
    )
    app.state.accounts = AccountService(users, sessions=sessions, matcher=matcher)


logger = setup_logging("mediscout", get_settings().log_level)
init_state()


def get_accounts() -> AccountService:
    return app.state.accounts


def get_cohorts() -> CohortRepository:
    return app.state.cohorts


def get_matcher() -> SymptomMatcher:
    return app.state.matcher


# Request/Response models
class RegisterRequest(BaseModel):
    """Request model for patient registration."""
    username: str = Field(..., min_length=1, description="Login name, unique per store")
    password: str = Field(..., min_length=1, description="Plaintext password (prototype only)")
    name: str = Field("", description="Display name")
    age: Optional[int] = Field(None, ge=0, le=120, description="Age in years")
    gender: Optional[str] = Field(None, description="Male, Female or Other")
    location: Optional[str] = Field(None, description="City")


class LoginRequest(BaseModel):
    """Request model for patient login."""
    username: str
    password: str


class AuthResponse(BaseModel):
    """Response model for auth endpoints."""
    access_token: str
    message: str
    user: dict


class SubmitRecordRequest(BaseModel):
    """Request model for a patient self-report."""
    symptoms: str = Field(..., description="Free-text symptom description")
    temperature: Optional[str] = Field("", description="Self-reported temperature, as typed")
    weight: Optional[str] = Field("", description="Self-reported weight, as typed")
    image_name: Optional[str] = Field(None, description="File name of an attached image")
    image_type: Optional[str] = Field(None, description="MIME type of the attached image")
    image_size: Optional[int] = Field(None, ge=0, description="Size in bytes of the attached image")


class PredictRequest(BaseModel):
    """Request model for an anonymous symptom check."""
    symptoms: str = Field(..., description="Free-text symptom description")
    image_name: Optional[str] = Field(None, description="File name of an attached image")


class CohortStats(BaseModel):
    """Dashboard statistics for the cached cohort."""
    total_patients: int
    high_risk_patients: int
    most_common_condition: str
    most_common_condition_count: int
    conditions: list[dict]
    risk_levels: list[dict]
    age_groups: list[dict]
    genders: list[dict]
    locations: list[dict]


def _public_user(user: UserAccount) -> dict:
    """Account as returned to clients; the password never leaves the server."""
    data = user.to_dict()
    data.pop("password", None)
    return data


def _image_descriptor(name: Optional[str], type_: Optional[str], size: Optional[int]) -> Optional[ImageDescriptor]:
    if not name:
        return None
    return ImageDescriptor(name=name, type=type_, size=size)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


# =============================================================================
# AUTH ENDPOINTS
# =============================================================================

@app.post("/api/auth/register", response_model=AuthResponse)
async def register(request: RegisterRequest, accounts: AccountService = Depends(get_accounts)):
    """
    Create a new patient account and log it in.

    Returns an access token and the account on success.
    """
    result = accounts.register(RegistrationRequest(**request.model_dump()))
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)

    return AuthResponse(
        access_token=result.session.token,
        message=result.message,
        user=_public_user(result.user),
    )


@app.post("/api/auth/login", response_model=AuthResponse)
async def login(request: LoginRequest, accounts: AccountService = Depends(get_accounts)):
    """
    Log in an existing patient.

    Returns an access token and the account on success.
    """
    result = accounts.login(request.username, request.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.message)

    return AuthResponse(
        access_token=result.session.token,
        message=result.message,
        user=_public_user(result.user),
    )


@app.post("/api/auth/logout")
async def logout(
    session: Session = Depends(get_current_session),
    accounts: AccountService = Depends(get_accounts),
):
    """Log out the current session."""
    accounts.logout(session)
    return {"status": "logged_out"}


@app.get("/api/auth/me")
async def get_me(session: Session = Depends(get_current_session)):
    """Get the logged-in patient's account."""
    return _public_user(session.user)


# =============================================================================
# PATIENT SELF-REPORT ENDPOINTS
# =============================================================================

@app.post("/api/records")
async def submit_record(
    request: SubmitRecordRequest,
    session: Session = Depends(get_current_session),
    accounts: AccountService = Depends(get_accounts),
):
    """
    Submit a self-report.

    Runs the simulated AI on the symptoms, appends the report to the account
    and returns the prediction.
    """
    result = await accounts.submit_health_record(
        session,
        symptoms=request.symptoms,
        temperature=request.temperature,
        weight=request.weight,
        image=_image_descriptor(request.image_name, request.image_type, request.image_size),
    )
    if not result.success:
        status_code = 400 if result.message == EMPTY_SYMPTOMS else 404
        raise HTTPException(status_code=status_code, detail=result.message)

    return {
        "message": result.message,
        "record": result.record.to_dict(),
        "prediction": result.prediction.to_dict(),
    }


@app.get("/api/records")
async def list_records(session: Session = Depends(get_current_session)):
    """List the logged-in patient's self-reports, oldest first."""
    records = session.user.health_records
    return {
        "records": [r.to_dict() for r in records],
        "total": len(records),
    }


@app.post("/api/predict")
async def predict(
    request: PredictRequest,
    session: Optional[Session] = Depends(get_current_session_optional),
    matcher: SymptomMatcher = Depends(get_matcher),
):
    """
    Run the simulated AI symptom checker without saving anything.

    Works with or without a login.
    """
    if not request.symptoms.strip():
        raise HTTPException(status_code=400, detail=EMPTY_SYMPTOMS)

    prediction = await matcher.predict(
        request.symptoms,
        has_image=bool(request.image_name),
        image_name=request.image_name,
    )
    if session:
        logger.info("Symptom check by user %s: %s", session.user_id, prediction.prediction)
    return prediction.to_dict()


# =============================================================================
# HEALTH-WORKER DASHBOARD ENDPOINTS
# =============================================================================

@app.get("/api/cohort")
async def get_cohort(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    cohorts: CohortRepository = Depends(get_cohorts),
):
    """List records from the cached synthetic cohort."""
    cohort = cohorts.get_cohort()
    page = cohort[offset:offset + limit]
    return {
        "records": [r.to_dict() for r in page],
        "total": len(cohort),
        "limit": limit,
        "offset": offset,
    }


@app.post("/api/cohort/regenerate")
async def regenerate_cohort(cohorts: CohortRepository = Depends(get_cohorts)):
    """Discard the cached cohort and generate a new one."""
    cohort = cohorts.regenerate_cohort()
    return {"status": "regenerated", "total": len(cohort)}


@app.get("/api/cohort/export")
async def export_cohort(cohorts: CohortRepository = Depends(get_cohorts)):
    """Download the cohort as CSV. Returns 204 when there is nothing to export."""
    csv_text = export_csv(cohorts.get_cohort())
    if csv_text is None:
        return Response(status_code=204)

    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{DEFAULT_FILENAME}"'},
    )


@app.get("/api/cohort/stats", response_model=CohortStats)
async def get_cohort_stats(cohorts: CohortRepository = Depends(get_cohorts)):
    """Summary counts and distributions for the dashboard charts."""
    cohort = cohorts.get_cohort()
    summary = summarize(cohort)
    return CohortStats(
        **summary.model_dump(),
        conditions=condition_distribution(cohort),
        risk_levels=risk_distribution(cohort),
        age_groups=age_distribution(cohort),
        genders=gender_distribution(cohort),
        locations=location_distribution(cohort),
    )


@app.get("/api/cohort/impact")
async def get_cohort_impact(cohorts: CohortRepository = Depends(get_cohorts)):
    """Simulated time-to-identification impact of the AI triage."""
    return impact_metrics(cohorts.get_cohort()).model_dump()


@app.get("/api/cohort/search")
async def search_cohort(
    q: Optional[str] = Query(None, description="Case-insensitive search term"),
    condition: Optional[str] = Query(None, description="Exact condition label, or 'all'"),
    sort: Optional[str] = Query(None, description="camelCase field to sort by"),
    descending: bool = Query(False),
    cohorts: CohortRepository = Depends(get_cohorts),
):
    """Search, filter and sort the cohort the way the data explorer does."""
    try:
        results = search_records(
            cohorts.get_cohort(),
            term=q,
            condition=condition,
            sort_key=sort,
            descending=descending,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "records": [r.to_dict() for r in results],
        "total": len(results),
    }


def run_server(host: str = "0.0.0.0", port: int = 8000):
    """Run the server."""
    import uvicorn
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
