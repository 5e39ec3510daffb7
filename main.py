from typing import List, Optional
import logging

from fastapi import FastAPI, Depends, Header, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware

import config
from errors import AuthError, register_error_handlers
from models.models import Opportunity, OpportunityCreate
from models.schemas_user import UserRegister, UserLogin, UserOut
from store import DEMO_OPPORTUNITIES, MemoryStore, get_store
from utils.auth_utils import (
    auth_user,
    clear_session_cookie,
    session_id_from,
    set_session_cookie,
)
from utils.crud_user import authenticate, create_user, to_public
from matching.ai.oracle import ReasoningOracle
from matching.logic.constants import ALL_TYPES, DEFAULT_SORT, SortKey
from matching.logic.filters import filter_opportunities
from matching.routes import router as matching_router
from profile_routes import router as profile_router

logging.basicConfig(level=config.LOG_LEVEL)
logging.info("App starting with in-memory store")

app = FastAPI(title="Opportunity Matcher")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.state.store = MemoryStore(seed=DEMO_OPPORTUNITIES if config.SEED_DEMO_OPPORTUNITIES else None)
app.state.oracle = ReasoningOracle()

app.include_router(matching_router)
app.include_router(profile_router)


def _start_session(response: Response, store: MemoryStore, user_id: int) -> None:
    set_session_cookie(response, store.create_session(user_id))


@app.post("/api/auth/register", response_model=UserOut, tags=["auth"], summary="Register & start a session")
def register(payload: UserRegister, response: Response, store: MemoryStore = Depends(get_store)):
    user = create_user(store, payload)
    _start_session(response, store, user.id)
    logging.info(f"User {user.id} registered")
    return to_public(user)


@app.post("/api/auth/login", response_model=UserOut, tags=["auth"], summary="Login & start a session")
def login(payload: UserLogin, response: Response, store: MemoryStore = Depends(get_store)):
    user = authenticate(store, payload)
    _start_session(response, store, user.id)
    return to_public(user)


@app.post("/api/auth/logout", tags=["auth"], summary="End the current session")
def logout(request: Request, response: Response, store: MemoryStore = Depends(get_store)):
    store.delete_session(session_id_from(request))
    clear_session_cookie(response)
    return {"message": "Logged out"}


@app.get("/api/auth/user", response_model=UserOut, tags=["auth"], summary="Current user")
def me(current=Depends(auth_user)):
    return to_public(current)


@app.get("/health", tags=["meta"], summary="Health check")
def health():
    return {"status": "ok"}


@app.get("/api/opportunities", response_model=List[Opportunity], tags=["opportunities"], summary="List opportunities")
def list_opportunities(
    q: str = "",
    type: str = ALL_TYPES,
    sort: Optional[SortKey] = Query(default=None),
    store: MemoryStore = Depends(get_store),
):
    data = store.get_all_opportunities()
    if q or type != ALL_TYPES or sort is not None:
        data = filter_opportunities(data, query=q, type_filter=type, sort_by=sort or DEFAULT_SORT)
    return data


@app.get("/api/opportunities/{opportunity_id}", response_model=Opportunity, tags=["opportunities"], summary="Fetch one opportunity")
def get_opportunity(opportunity_id: int, store: MemoryStore = Depends(get_store)):
    return store.get_opportunity(opportunity_id)


@app.post("/api/opportunities", response_model=Opportunity, status_code=201, tags=["opportunities"], summary="Seed an opportunity (admin)")
def create_opportunity(
    payload: OpportunityCreate,
    x_admin_token: Optional[str] = Header(default=None),
    store: MemoryStore = Depends(get_store),
):
    if not config.ADMIN_TOKEN or x_admin_token != config.ADMIN_TOKEN:
        raise AuthError("Admin token required")
    opportunity = store.create_opportunity(payload)
    logging.info(f"Opportunity {opportunity.id} seeded: {opportunity.title}")
    return opportunity
